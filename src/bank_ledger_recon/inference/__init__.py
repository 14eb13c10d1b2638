"""Category inference for bank transactions missing from the ledger."""

from .engine import CategoryInferenceEngine

__all__ = ["CategoryInferenceEngine"]
