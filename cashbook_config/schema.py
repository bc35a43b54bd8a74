"""
Fallback category table schema.

Frozen dataclasses produced by ``cashbook_config.loader``.  The table maps
``(transaction type, category name)`` to a cash-flow activity and display
label for legacy transactions that carry no activity of their own.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cashbook_kernel.domain.records import CashFlowActivity, TransactionType


@dataclass(frozen=True)
class FallbackMapping:
    """One built-in category and where it lands on the cash-flow statement."""

    transaction_type: TransactionType
    category: str
    activity: CashFlowActivity
    label: str


@dataclass(frozen=True)
class FallbackCategoryTable:
    """
    The complete static mapping, keyed by ``(type, category)``.

    ``checksum`` identifies the exact YAML content the table was built from.
    """

    version: int
    entries: tuple[FallbackMapping, ...]
    checksum: str = ""
    _index: dict[tuple[TransactionType, str], FallbackMapping] = field(
        default_factory=dict, init=False, repr=False, compare=False,
    )

    def __post_init__(self) -> None:
        self._index.update(
            {(e.transaction_type, e.category): e for e in self.entries}
        )

    def lookup(
        self, transaction_type: TransactionType, category: str,
    ) -> FallbackMapping | None:
        return self._index.get((transaction_type, category))

    def __len__(self) -> int:
        return len(self.entries)
