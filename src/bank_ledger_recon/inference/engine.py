"""
Pattern-based category inference.

The catalog of learned mappings is a read-only snapshot passed into every
call; the engine keeps no catalog of its own and never updates mappings.
"""

from typing import Iterable, Sequence, Union
import logging

from ..config import ReconConfig
from ..models.adapters import bank_reconciliation_context
from ..models.category import CategoryInferenceResult, CategoryMapping, context_segments
from ..models.transaction import BankTransaction, CategorizedTransaction
from ..utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class CategoryInferenceEngine:
    """Assigns the best-matching learned category to a bank transaction."""

    def __init__(self, min_confidence: float = 0.0):
        """
        Args:
            min_confidence: Mappings below this confidence are ignored
        """
        if not 0.0 <= min_confidence <= 1.0:
            raise ConfigurationError(
                f"min_confidence must be between 0.0 and 1.0, got {min_confidence}"
            )
        self.min_confidence = min_confidence

    @classmethod
    def from_config(cls, config: ReconConfig) -> "CategoryInferenceEngine":
        return cls(min_confidence=config.inference.min_confidence)

    def rank_mappings(
        self, context: Union[str, tuple[str, ...]], mappings: Iterable[CategoryMapping]
    ) -> list[CategoryMapping]:
        """
        Mappings with at least one pattern in ``context``, best first.

        Ordered by confidence, then occurrence count, both descending. The
        sort is stable, so remaining ties keep catalog order.
        """
        segments = context_segments(context)
        matching = [
            m for m in mappings if m.confidence >= self.min_confidence and m.matches(segments)
        ]
        return sorted(matching, key=lambda m: (-m.confidence, -m.occurrence_count))

    def infer(
        self, transaction: BankTransaction, mappings: Sequence[CategoryMapping]
    ) -> CategoryInferenceResult:
        """
        Infer a category from description, memo and merchant name.

        Never raises for a transaction nothing matches: the result then
        carries the unknown category with zero confidence.
        """
        context = bank_reconciliation_context(transaction, include_category=False)
        if not context:
            return CategoryInferenceResult.no_match()

        segments = context_segments(context)
        ranked = self.rank_mappings(segments, mappings)
        if not ranked:
            logger.debug(f"No category mapping matched transaction {transaction.id}")
            return CategoryInferenceResult.no_match()

        best = ranked[0]
        matched = ", ".join(repr(p) for p in best.matched_patterns(segments))
        reasoning = (
            f"Pattern match {matched} (seen {best.occurrence_count} times, "
            f"{best.pattern_count} patterns, confidence: {best.confidence:.2f})"
        )
        logger.debug(
            f"Transaction {transaction.id} -> {best.category.name} "
            f"({len(ranked)} candidate mappings)"
        )
        return CategoryInferenceResult(
            category=best.category,
            confidence=best.confidence,
            reasoning=reasoning,
            mapping_id=best.id,
        )

    def infer_all(
        self,
        transactions: Iterable[BankTransaction],
        mappings: Sequence[CategoryMapping],
    ) -> tuple[CategorizedTransaction, ...]:
        """
        Annotate each transaction with a category, preserving input order.

        A category already inferred upstream is kept as-is.
        """
        results = []
        for txn in transactions:
            if txn.has_category_inferred:
                inference = CategoryInferenceResult(
                    txn.inferred_category, 1.0, "Previously inferred"
                )
            else:
                inference = self.infer(txn, mappings)
            results.append(CategorizedTransaction(txn, inference))

        named = sum(1 for r in results if r.inference.has_match)
        logger.info(f"Category inference: {named}/{len(results)} transactions categorized")
        return tuple(results)
