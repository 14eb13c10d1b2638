"""Configuration loader and validation for reconciliation settings."""

from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .models.transaction import ReconciliationStrategy
from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Widest accepted matching window, in days either side of the bank date
MAX_TOLERANCE_DAYS = 3650


class BankInputConfig(BaseModel):
    """Column layout of the bank transaction CSV export."""

    encoding: str = "utf-8"
    delimiter: str = ","
    date_format: str = "%Y-%m-%d"
    column_mappings: dict[str, str] = Field(
        default_factory=lambda: {
            "id": "Transaction ID",
            "account_id": "Account",
            "date": "Date",
            "amount": "Amount",
            "description": "Description",
            "merchant_name": "Merchant",
            "memo": "Memo",
            "transaction_type": "Type",
            "reference": "Reference",
        }
    )


class LedgerInputConfig(BaseModel):
    """Column layout of the budgeting ledger CSV export."""

    encoding: str = "utf-8"
    delimiter: str = ","
    date_format: str = "%Y-%m-%d"
    column_mappings: dict[str, str] = Field(
        default_factory=lambda: {
            "id": "Transaction ID",
            "account_id": "Account",
            "date": "Date",
            "amount": "Amount",
            "payee_name": "Payee",
            "category": "Category",
            "cleared_status": "Cleared",
            "approved": "Approved",
        }
    )


class InputConfig(BaseModel):
    """Configuration for input file parsing."""

    bank: BankInputConfig = Field(default_factory=BankInputConfig)
    ledger: LedgerInputConfig = Field(default_factory=LedgerInputConfig)


class MatchingConfig(BaseModel):
    """Configuration for the reconciliation engine."""

    strategy: ReconciliationStrategy = ReconciliationStrategy.RANGE
    tolerance_days: int = Field(default=3, ge=0, le=MAX_TOLERANCE_DAYS)


class InferenceConfig(BaseModel):
    """Configuration for category inference."""

    min_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    high_confidence_threshold: float = Field(default=0.8, ge=0.0, le=1.0)


class ServiceConfig(BaseModel):
    """Retry policy applied when the ledger API fails."""

    max_attempts: int = Field(default=1, ge=1)
    retry_backoff_seconds: float = Field(default=1.0, ge=0.0)


class ExcelOutputConfig(BaseModel):
    """Configuration for Excel output."""

    filename_template: str = "reconciliation_report_{date}_{time}.xlsx"


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    matched: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Matched Transactions"))
    missing: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Missing From Ledger"))
    audit_trail: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Audit Trail"))


class OutputConfig(BaseModel):
    """Configuration for output."""

    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    inference: InferenceConfig = Field(default_factory=InferenceConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return ReconConfig().model_dump(mode="json", exclude={"config_file_path"})


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Bank to ledger reconciliation configuration
# matching.strategy: "strict" (same day) or "range" (within tolerance_days)

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
