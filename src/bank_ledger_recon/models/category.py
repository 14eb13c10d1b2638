"""Category, learned category mappings and inference results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Union
import re
import uuid

from ..utils.exceptions import ValidationError

HIGH_CONFIDENCE_THRESHOLD = 0.8
CONTEXT_SEPARATOR = " | "


class CategoryType(Enum):
    """Where a category assignment came from."""

    LEDGER_ASSIGNED = "ledger_assigned"
    BANK_INFERRED = "bank_inferred"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Category:
    """
    A spending category, either named or the explicit "unknown" sentinel.

    Absence of a category is always represented by ``Category.unknown()``,
    never by None.
    """

    id: str
    name: str
    type: CategoryType

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValidationError("Category id cannot be blank", field="id")
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("Category name cannot be blank", field="name")

    @classmethod
    def ledger(cls, category_id: str, name: str) -> "Category":
        """Category explicitly assigned in the budgeting ledger."""
        return cls(category_id, name, CategoryType.LEDGER_ASSIGNED)

    @classmethod
    def inferred(cls, name: str) -> "Category":
        """Category inferred from bank data, with a stable id derived from its name."""
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Category name cannot be blank", field="name")
        category_id = "inferred_" + re.sub(r"\s+", "_", name.strip().lower())
        return cls(category_id, name.strip(), CategoryType.BANK_INFERRED)

    @classmethod
    def unknown(cls) -> "Category":
        return cls("unknown", "Uncategorized", CategoryType.UNKNOWN)

    @property
    def is_unknown(self) -> bool:
        return self.type == CategoryType.UNKNOWN

    @property
    def is_explicitly_assigned(self) -> bool:
        return self.type == CategoryType.LEDGER_ASSIGNED

    def is_similar_to(self, other: "Category") -> bool:
        """Same category, or same name regardless of where it came from."""
        return self == other or self.name.lower() == other.name.lower()


@dataclass(frozen=True)
class CategoryMapping:
    """
    Learned association between text patterns and a category.

    Patterns are matched case-insensitively as whole-pattern substrings of one
    segment of a transaction's reconciliation context. Mappings are read-only snapshots;
    nothing in a reconciliation run updates them.
    """

    category: Category
    patterns: tuple[str, ...]
    confidence: float
    occurrence_count: int = 0
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        patterns = (self.patterns,) if isinstance(self.patterns, str) else self.patterns
        normalized = tuple(_normalize_pattern(p) for p in patterns)
        if not normalized:
            raise ValidationError(
                "Category mapping must have at least one text pattern", field="patterns"
            )
        if any(not p.replace("|", "").strip() for p in normalized):
            raise ValidationError(
                "Text patterns cannot be blank or consist only of separators", field="patterns"
            )
        if not 0.0 <= self.confidence <= 1.0:
            raise ValidationError(
                f"Confidence must be between 0.0 and 1.0, got {self.confidence}",
                field="confidence",
            )
        if self.occurrence_count < 0:
            raise ValidationError(
                f"Occurrence count cannot be negative, got {self.occurrence_count}",
                field="occurrence_count",
            )
        # frozen dataclass: normalized patterns are written back once here
        object.__setattr__(self, "patterns", normalized)

    @classmethod
    def of(
        cls,
        category_name: str,
        patterns: Iterable[str],
        confidence: float,
        occurrence_count: int = 0,
        mapping_id: Optional[str] = None,
    ) -> "CategoryMapping":
        """Build a mapping targeting an inferred category by name."""
        if isinstance(patterns, str):
            patterns = [patterns]
        kwargs = {}
        if mapping_id:
            kwargs["id"] = mapping_id
        return cls(
            category=Category.inferred(category_name),
            patterns=tuple(patterns),
            confidence=confidence,
            occurrence_count=occurrence_count,
            **kwargs,
        )

    def matches(self, context: Union[str, tuple[str, ...]]) -> bool:
        """
        True if any pattern occurs within one segment of the context, ignoring case.

        ``context`` is either raw text or the output of ``context_segments``.
        """
        segments = context_segments(context)
        return any(pattern in segment for pattern in self.patterns for segment in segments)

    def matched_patterns(self, context: Union[str, tuple[str, ...]]) -> list[str]:
        segments = context_segments(context)
        return [p for p in self.patterns if any(p in segment for segment in segments)]

    @property
    def pattern_count(self) -> int:
        return len(self.patterns)

    @property
    def is_high_confidence(self) -> bool:
        return self.confidence >= HIGH_CONFIDENCE_THRESHOLD and self.occurrence_count >= 2


@dataclass(frozen=True)
class CategoryInferenceResult:
    """Inferred category with its confidence score and a human-readable reason."""

    category: Category
    confidence: float
    reasoning: str
    mapping_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValidationError(
                f"Confidence must be between 0.0 and 1.0, got {self.confidence}",
                field="confidence",
            )

    @classmethod
    def no_match(cls) -> "CategoryInferenceResult":
        return cls(Category.unknown(), 0.0, "No suitable match found")

    @property
    def has_match(self) -> bool:
        return not self.category.is_unknown

    def is_high_confidence(self, threshold: float = HIGH_CONFIDENCE_THRESHOLD) -> bool:
        return self.confidence >= threshold


def _normalize_pattern(pattern: str) -> str:
    if pattern is None:
        return ""
    return " ".join(str(pattern).lower().split())


def context_segments(context: Union[str, tuple[str, ...], None]) -> tuple[str, ...]:
    """
    Split a reconciliation context into normalized segments.

    Patterns are matched per segment, so a match never spans the separator.
    Already-split input is returned unchanged.
    """
    if isinstance(context, tuple):
        return context
    if not context:
        return ()
    segments = (_normalize_pattern(part) for part in context.split(CONTEXT_SEPARATOR))
    return tuple(s for s in segments if s)
