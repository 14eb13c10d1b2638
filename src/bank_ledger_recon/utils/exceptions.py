"""Custom exceptions for the reconciliation application."""

from typing import Optional


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class ValidationError(ReconciliationError):
    """Malformed or incomplete source record."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class BankParseError(ReconciliationError):
    """Error parsing bank transaction CSV file."""

    pass


class LedgerParseError(ReconciliationError):
    """Error parsing ledger transaction CSV file."""

    pass


class MappingLoadError(ReconciliationError):
    """Error loading category mapping catalog."""

    pass


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error generating Excel report."""

    pass


class LedgerApiError(ReconciliationError):
    """
    Failure reported by the ledger's remote API.

    Carries the HTTP status code and the provider's error identifiers when
    they are known. Connectivity failures have no response, so the status
    code is 0 and the identifying fields are None.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        error_id: Optional[str] = None,
        error_name: Optional[str] = None,
        error_detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_id = error_id
        self.error_name = error_name
        self.error_detail = error_detail

    @classmethod
    def from_cause(cls, message: str, cause: BaseException) -> "LedgerApiError":
        """Build an error for a failure that produced no API response."""
        error = cls(message)
        error.__cause__ = cause
        return error

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status_code < 600

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    @property
    def is_retryable(self) -> bool:
        """Server errors and rate limiting may succeed on a later attempt."""
        return self.is_server_error or self.is_rate_limited

    def __repr__(self) -> str:
        return (
            f"LedgerApiError({self.message!r}, status_code={self.status_code}, "
            f"error_id={self.error_id!r}, error_name={self.error_name!r}, "
            f"error_detail={self.error_detail!r})"
        )
