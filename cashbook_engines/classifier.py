"""
Module: cashbook_engines.classifier
Responsibility:
    Resolve each transaction's cash-flow activity, transaction nature and
    profit-and-loss flag.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Resolution order (first match wins for the activity):
    1. ``transaction.cash_flow_activity`` -- assigned at capture time.
    2. Company category by stable id (``transaction.category_id``).
    3. Company category by ``(type, name)`` -- flagged ``category_name``.
    4. Static fallback table by ``(type, name)``.
    5. Default: ``operating``, labelled with the raw category name.

    Nature and ``include_in_profit_loss`` come from the transaction when
    set, else from the matched company category, else ``operating`` and
    ``True``.

Invariants enforced:
    - Never raises for unknown categories; unclassified data lands in
      ``operating`` so statements stay computable.
    - The category index is built per call from the snapshot the caller
      hands in; nothing is cached across calls.

Failure modes:
    None for well-typed input.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from cashbook_config.schema import FallbackCategoryTable
from cashbook_engines.models import (
    Classification,
    ClassificationSource,
    ClassifiedTransaction,
)
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.domain.records import (
    CashFlowActivity,
    Category,
    Transaction,
    TransactionNature,
    TransactionType,
)
from cashbook_kernel.logging_config import get_logger

logger = get_logger("engines.classifier")


@dataclass(frozen=True)
class CategoryIndex:
    """
    Two-tier lookup over a company's categories.

    Primary key is the stable category id; the ``(type, name)`` key is the
    secondary, name-based path.
    """

    by_id: dict[str, Category] = field(default_factory=dict)
    by_name: dict[tuple[TransactionType, str], Category] = field(
        default_factory=dict,
    )

    @classmethod
    def from_categories(cls, categories: Iterable[Category]) -> CategoryIndex:
        by_id: dict[str, Category] = {}
        by_name: dict[tuple[TransactionType, str], Category] = {}
        for cat in categories:
            by_id[cat.id] = cat
            # First category wins when a company has duplicate names
            by_name.setdefault((cat.type, cat.name), cat)
        return cls(by_id=by_id, by_name=by_name)

    def lookup_id(self, category_id: str | None) -> Category | None:
        if category_id is None:
            return None
        return self.by_id.get(category_id)

    def lookup_name(
        self, transaction_type: TransactionType, name: str,
    ) -> Category | None:
        return self.by_name.get((transaction_type, name))

    def __len__(self) -> int:
        return len(self.by_id)


EMPTY_INDEX = CategoryIndex()


def classify(
    transaction: Transaction,
    category_index: CategoryIndex = EMPTY_INDEX,
    fallback_table: FallbackCategoryTable | None = None,
) -> Classification:
    """Classify a single transaction."""
    by_id = category_index.lookup_id(transaction.category_id)
    by_name = None
    if by_id is None:
        by_name = category_index.lookup_name(transaction.type, transaction.category)
    category = by_id or by_name

    nature = transaction.transaction_nature
    if nature is None and category is not None:
        nature = category.transaction_nature
    include = transaction.include_in_profit_loss
    if include is None and category is not None:
        include = category.include_in_profit_loss

    label = transaction.category
    if transaction.cash_flow_activity is not None:
        activity = transaction.cash_flow_activity
        source = ClassificationSource.ASSIGNED
    elif by_id is not None:
        activity = by_id.cash_flow_activity
        source = ClassificationSource.CATEGORY_ID
    elif by_name is not None:
        activity = by_name.cash_flow_activity
        source = ClassificationSource.CATEGORY_NAME
        logger.debug(
            "category_matched_by_name",
            extra={
                "transaction_id": transaction.id,
                "category": transaction.category,
                "category_id": by_name.id,
            },
        )
    else:
        mapping = (
            fallback_table.lookup(transaction.type, transaction.category)
            if fallback_table is not None else None
        )
        if mapping is not None:
            activity = mapping.activity
            label = mapping.label
            source = ClassificationSource.FALLBACK_TABLE
        else:
            activity = CashFlowActivity.OPERATING
            source = ClassificationSource.DEFAULT
            logger.debug(
                "category_defaulted_to_operating",
                extra={
                    "transaction_id": transaction.id,
                    "category": transaction.category,
                },
            )

    return Classification(
        activity=activity,
        nature=nature or TransactionNature.OPERATING,
        include_in_profit_loss=True if include is None else include,
        label=label,
        source=source,
    )


@traced_engine("classifier", "1.0")
def classify_all(
    transactions: Sequence[Transaction],
    category_index: CategoryIndex = EMPTY_INDEX,
    fallback_table: FallbackCategoryTable | None = None,
) -> tuple[ClassifiedTransaction, ...]:
    """Classify every transaction, preserving input order."""
    classified = tuple(
        ClassifiedTransaction(
            transaction=t,
            classification=classify(t, category_index, fallback_table),
        )
        for t in transactions
    )

    sources = Counter(c.classification.source.value for c in classified)
    logger.debug(
        "transactions_classified",
        extra={"count": len(classified), "by_source": dict(sorted(sources.items()))},
    )
    return classified
