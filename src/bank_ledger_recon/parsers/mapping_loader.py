"""Loads a category mapping catalog from YAML."""

from pathlib import Path
import logging

import yaml

from ..models.category import CategoryMapping
from ..utils.exceptions import MappingLoadError, ValidationError

logger = logging.getLogger(__name__)


def load_category_mappings(path: Path) -> tuple[CategoryMapping, ...]:
    """
    Read mappings in file order; that order is the final ranking tie-break.

    Expected layout::

        mappings:
          - category: Dining
            patterns: [starbucks, "blue bottle"]
            confidence: 0.9
            occurrences: 12

    Raises:
        MappingLoadError: If the file is unreadable or an entry is invalid
    """
    logger.info(f"Loading category mappings from: {path}")
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise MappingLoadError(f"Failed to read mappings file {path}: {e}") from e

    entries = data.get("mappings", []) if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise MappingLoadError(f"'mappings' must be a list in {path}")

    mappings = []
    for position, entry in enumerate(entries, start=1):
        if not isinstance(entry, dict):
            raise MappingLoadError(f"Mapping #{position} must be a mapping, got {entry!r}")
        category_name = entry.get("category")
        if not isinstance(category_name, str):
            raise MappingLoadError(
                f"Mapping #{position} category must be text, got {category_name!r}"
            )
        try:
            mappings.append(
                CategoryMapping.of(
                    category_name=category_name,
                    patterns=entry.get("patterns") or [],
                    confidence=float(entry.get("confidence", 1.0)),
                    occurrence_count=_occurrence_count(entry.get("occurrences", 0)),
                    mapping_id=entry.get("id"),
                )
            )
        except (ValidationError, TypeError, ValueError) as e:
            raise MappingLoadError(f"Mapping #{position} is invalid: {e}") from e

    logger.info(f"Loaded {len(mappings)} category mappings")
    return tuple(mappings)


def _occurrence_count(value) -> int:
    """Whole-number occurrence count; 1.7 or true are rejected, not truncated."""
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"occurrences must be a whole number, got {value!r}")
    return int(value)
