"""
Statement Models (``cashbook_engines.models``).

Responsibility
--------------
Frozen dataclass value objects produced by the engine: classification
results, cash-flow statements (single-entity and consolidated), monthly
series points, profit-and-loss statements and per-store summaries.

Architecture position
---------------------
**Engines layer** -- pure data definitions with ZERO I/O.  Returned to the
reporting layer, rendered or exported there, never persisted.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* Collections are tuples, so equal inputs yield equal (``==``) outputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from cashbook_kernel.domain.records import (
    CashFlowActivity,
    FlowDirection,
    Transaction,
    TransactionNature,
    TransactionType,
)

ZERO = Decimal("0")


# =========================================================================
# Classification
# =========================================================================


class ClassificationSource(str, Enum):
    """Where a transaction's activity came from, most to least explicit."""

    ASSIGNED = "assigned"  # carried by the transaction itself
    CATEGORY_ID = "category_id"
    CATEGORY_NAME = "category_name"
    FALLBACK_TABLE = "fallback_table"
    DEFAULT = "default"


@dataclass(frozen=True)
class Classification:
    """Resolved activity, nature and P&L flag for one transaction."""

    activity: CashFlowActivity
    nature: TransactionNature
    include_in_profit_loss: bool
    label: str
    source: ClassificationSource

    @property
    def is_explicit(self) -> bool:
        """True when the activity was assigned, not guessed."""
        return self.source in (
            ClassificationSource.ASSIGNED,
            ClassificationSource.CATEGORY_ID,
        )


@dataclass(frozen=True)
class ClassifiedTransaction:
    """A transaction paired with its classification."""

    transaction: Transaction
    classification: Classification

    @property
    def id(self) -> str:
        return self.transaction.id

    @property
    def type(self) -> TransactionType:
        return self.transaction.type

    @property
    def category(self) -> str:
        return self.transaction.category

    @property
    def amount(self) -> Decimal:
        return self.transaction.amount

    @property
    def date(self) -> date:
        return self.transaction.date

    @property
    def store_id(self) -> str | None:
        return self.transaction.store_id

    @property
    def signed_amount(self) -> Decimal:
        return self.transaction.signed_amount

    @property
    def activity(self) -> CashFlowActivity:
        return self.classification.activity

    @property
    def direction(self) -> FlowDirection:
        return FlowDirection.of(self.transaction.type)


# =========================================================================
# Cash Flow Statement
# =========================================================================


@dataclass(frozen=True)
class CategoryFlow:
    """One category's total within an activity/direction group."""

    category: str
    label: str
    amount: Decimal
    count: int


@dataclass(frozen=True)
class ActivitySection:
    """
    One of the three activity sections.

    net_cash_flow = subtotal_inflow - subtotal_outflow
    """

    activity: CashFlowActivity
    inflows: tuple[CategoryFlow, ...]
    outflows: tuple[CategoryFlow, ...]
    subtotal_inflow: Decimal
    subtotal_outflow: Decimal
    net_cash_flow: Decimal


@dataclass(frozen=True)
class CashFlowSummary:
    """
    Statement totals.

    net_increase = total_inflow - total_outflow
    ending_balance = beginning_balance + net_increase
    """

    total_inflow: Decimal
    total_outflow: Decimal
    net_increase: Decimal
    beginning_balance: Decimal
    ending_balance: Decimal


@dataclass(frozen=True)
class CashFlowStatement:
    """Direct-method cash-flow statement for one accounting entity."""

    operating: ActivitySection
    investing: ActivitySection
    financing: ActivitySection
    summary: CashFlowSummary

    @property
    def sections(self) -> tuple[ActivitySection, ...]:
        return (self.operating, self.investing, self.financing)

    def section(self, activity: CashFlowActivity) -> ActivitySection:
        return {
            CashFlowActivity.OPERATING: self.operating,
            CashFlowActivity.INVESTING: self.investing,
            CashFlowActivity.FINANCING: self.financing,
        }[CashFlowActivity(activity)]


@dataclass(frozen=True)
class StoreBreakdown:
    """Per-store row of a consolidated statement."""

    store_id: str
    store_name: str
    is_new_store: bool
    balance_tracked: bool  # False: no opening date, or opens after the window
    beginning_balance: Decimal
    net_cash_flow: Decimal
    ending_balance: Decimal


@dataclass(frozen=True)
class NewStoreCapitalInvestment:
    """Opening capital of a store that opened inside the query window."""

    store_id: str
    store_name: str
    amount: Decimal
    date: date


@dataclass(frozen=True)
class ConsolidatedCashFlowStatement(CashFlowStatement):
    """
    Multi-store statement.

    ``summary.beginning_balance`` counts only capital that existed before
    the window; capital that arrived during the window is a financing
    inflow listed in ``new_store_capital_investments``.
    """

    store_breakdown: tuple[StoreBreakdown, ...] = ()
    new_store_capital_investments: tuple[NewStoreCapitalInvestment, ...] = ()

    @property
    def total_new_store_capital(self) -> Decimal:
        return sum(
            (inv.amount for inv in self.new_store_capital_investments), ZERO,
        )


@dataclass(frozen=True)
class MonthPoint:
    """One month of a cash-flow time series."""

    month: str  # "YYYY-MM"
    operating: Decimal
    investing: Decimal
    financing: Decimal
    net_increase: Decimal
    beginning_balance: Decimal
    ending_balance: Decimal


# =========================================================================
# Profit and Loss
# =========================================================================


@dataclass(frozen=True)
class CategoryDetail:
    """One category's share of a P&L section (percentage of section total)."""

    category: str
    amount: Decimal
    count: int
    percentage: Decimal


@dataclass(frozen=True)
class ProfitLossSection:
    items: tuple[CategoryDetail, ...]
    total: Decimal


@dataclass(frozen=True)
class ProfitLossStatement:
    """
    Profit-and-loss statement.

    operating_profit = revenue - cost
    total_profit = operating_profit + non_operating_income - non_operating_expense
    net_profit = total_profit (income tax sits inside non-operating expense)
    """

    revenue: ProfitLossSection
    cost: ProfitLossSection
    operating_profit: Decimal
    non_operating_income: ProfitLossSection
    non_operating_expense: ProfitLossSection
    total_profit: Decimal
    net_profit: Decimal


@dataclass(frozen=True)
class MonthlyProfitLoss:
    """One month of a P&L time series."""

    month: str
    revenue: Decimal
    cost: Decimal
    profit: Decimal
    non_operating_income: Decimal
    non_operating_expense: Decimal


# =========================================================================
# Store comparison
# =========================================================================


@dataclass(frozen=True)
class StoreSummary:
    """Headline figures for one store, for side-by-side comparison."""

    store_id: str
    store_name: str
    total_income: Decimal
    total_expense: Decimal
    income_count: int
    expense_count: int
    net_profit: Decimal


@dataclass(frozen=True)
class CompanySummary:
    """Company-wide overview across a set of stores."""

    store_count: int
    active_store_count: int
    total_income: Decimal
    total_expense: Decimal
    income_count: int
    expense_count: int
    avg_income_per_store: Decimal
    avg_expense_per_store: Decimal
    operating_cash_flow: Decimal
    investing_cash_flow: Decimal
    financing_cash_flow: Decimal
    net_cash_flow: Decimal
    beginning_balance: Decimal
    ending_balance: Decimal
    revenue: Decimal
    cost: Decimal
    operating_profit: Decimal
    non_operating_income: Decimal
    non_operating_expense: Decimal
    total_profit: Decimal
    net_profit: Decimal
    stores: tuple[StoreSummary, ...] = ()

    @property
    def total_count(self) -> int:
        return self.income_count + self.expense_count
