"""
Module: cashbook_engines.consolidation
Responsibility:
    Combine several stores into one cash-flow statement while keeping
    capital that existed before the reporting window apart from capital
    injected during it.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Store roles relative to ``[query_start, query_end]``:
    * pre-existing  -- opening date before ``query_start``.  Its balance at
      the start of the window, resolved from its full history, is added to
      the consolidated beginning balance.
    * new           -- opening date within ``[query_start, query_end]``.
      A store opening exactly on ``query_start`` is new: there is no
      "day before" balance to carry.  A positive opening balance becomes a
      new-store capital investment, shown as a financing inflow.
    * untracked     -- no opening date, or opening after ``query_end``.
      Contributes nothing to balances; its in-window transactions still
      count in the activity totals.

Invariants enforced:
    - Consolidated beginning balance == sum of pre-existing stores'
      resolved balances.  New-store capital never enters it.
    - ending_balance = beginning_balance + net_increase, where
      net_increase includes the new-store capital line.
    - Output order follows input store order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Sequence

from cashbook_engines.balances import resolve_beginning_balance
from cashbook_engines.cash_flow import (
    build_sections,
    calculate_cash_flow,
    make_section,
    make_statement,
)
from cashbook_engines.models import (
    ZERO,
    CategoryFlow,
    ClassifiedTransaction,
    ConsolidatedCashFlowStatement,
    NewStoreCapitalInvestment,
    StoreBreakdown,
)
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.domain.records import CashFlowActivity, Store
from cashbook_kernel.logging_config import get_logger

logger = get_logger("engines.consolidation")

NEW_STORE_CAPITAL_CATEGORY = "__new_store_capital__"
NEW_STORE_CAPITAL_LABEL = "新店资本投入"


class StoreRole(str, Enum):
    """How a store relates to a reporting window."""

    PRE_EXISTING = "pre_existing"
    NEW = "new"
    UNTRACKED = "untracked"


def classify_store(store: Store, query_start: date, query_end: date) -> StoreRole:
    """Decide a store's role for the window ``[query_start, query_end]``."""
    opened = store.initial_balance_date
    if opened is None or opened > query_end:
        return StoreRole.UNTRACKED
    if opened < query_start:
        return StoreRole.PRE_EXISTING
    return StoreRole.NEW


@dataclass(frozen=True)
class _StoreResult:
    breakdown: StoreBreakdown
    role: StoreRole
    investment: NewStoreCapitalInvestment | None


def _group_by_store(
    transactions: Sequence[ClassifiedTransaction],
) -> dict[str | None, list[ClassifiedTransaction]]:
    grouped: dict[str | None, list[ClassifiedTransaction]] = {}
    for t in transactions:
        grouped.setdefault(t.store_id, []).append(t)
    return grouped


def _consolidate_store(
    store: Store,
    history: Sequence[ClassifiedTransaction],
    query_start: date,
    query_end: date,
) -> _StoreResult:
    role = classify_store(store, query_start, query_end)
    in_window = [t for t in history if query_start <= t.date <= query_end]
    net = calculate_cash_flow(in_window).summary.net_increase

    investment = None
    if role == StoreRole.PRE_EXISTING:
        beginning = resolve_beginning_balance(
            store.initial_balance,
            store.initial_balance_date,
            query_start,
            history,
        )
    elif role == StoreRole.NEW:
        beginning = store.initial_balance
        if store.initial_balance > 0:
            investment = NewStoreCapitalInvestment(
                store_id=store.id,
                store_name=store.name,
                amount=store.initial_balance,
                date=store.initial_balance_date,
            )
    else:
        beginning = ZERO

    return _StoreResult(
        breakdown=StoreBreakdown(
            store_id=store.id,
            store_name=store.name,
            is_new_store=role == StoreRole.NEW,
            balance_tracked=role != StoreRole.UNTRACKED,
            beginning_balance=beginning,
            net_cash_flow=net,
            ending_balance=beginning + net,
        ),
        role=role,
        investment=investment,
    )


@traced_engine(
    "consolidation", "1.0",
    fingerprint_fields=("query_start", "query_end", "include_unassigned"),
)
def consolidate(
    transactions: Sequence[ClassifiedTransaction],
    stores: Sequence[Store],
    query_start: date,
    query_end: date,
    *,
    include_unassigned: bool = False,
    capital_category: str = NEW_STORE_CAPITAL_CATEGORY,
    capital_label: str = NEW_STORE_CAPITAL_LABEL,
) -> ConsolidatedCashFlowStatement:
    """
    Build the consolidated statement for ``stores`` over the window.

    Args:
        transactions: Full history for the stores (not limited to the
            window); beginning balances are resolved from it.
        stores: The entities to combine, in display order.
        include_unassigned: Also count in-window transactions that belong
            to no store (company-level entries).
    """
    by_store = _group_by_store(transactions)
    results = [
        _consolidate_store(s, by_store.get(s.id, ()), query_start, query_end)
        for s in stores
    ]

    store_ids = {s.id for s in stores}
    in_scope = [
        t for t in transactions
        if query_start <= t.date <= query_end
        and (t.store_id in store_ids or (include_unassigned and t.store_id is None))
    ]

    beginning = sum(
        (r.breakdown.beginning_balance for r in results
         if r.role == StoreRole.PRE_EXISTING),
        ZERO,
    )
    investments = tuple(r.investment for r in results if r.investment is not None)

    sections = build_sections(in_scope)
    financing = sections[CashFlowActivity.FINANCING]
    if investments:
        capital = CategoryFlow(
            category=capital_category,
            label=capital_label,
            amount=sum((inv.amount for inv in investments), ZERO),
            count=len(investments),
        )
        financing = make_section(
            CashFlowActivity.FINANCING,
            (capital, *financing.inflows),
            financing.outflows,
        )

    statement = make_statement(
        sections[CashFlowActivity.OPERATING],
        sections[CashFlowActivity.INVESTING],
        financing,
        beginning,
    )

    logger.info(
        "consolidation_completed",
        extra={
            "store_count": len(stores),
            "pre_existing_count": sum(
                1 for r in results if r.role == StoreRole.PRE_EXISTING
            ),
            "new_store_count": sum(1 for r in results if r.role == StoreRole.NEW),
            "transaction_count": len(in_scope),
            "beginning_balance": beginning,
            "ending_balance": statement.summary.ending_balance,
        },
    )

    return ConsolidatedCashFlowStatement(
        operating=statement.operating,
        investing=statement.investing,
        financing=statement.financing,
        summary=statement.summary,
        store_breakdown=tuple(r.breakdown for r in results),
        new_store_capital_investments=investments,
    )


def pre_existing_balance(
    transactions: Sequence[ClassifiedTransaction],
    stores: Sequence[Store],
    query_start: date,
) -> Decimal:
    """Sum of balances held at ``query_start`` by stores opened before it."""
    by_store = _group_by_store(transactions)
    total = ZERO
    for store in stores:
        opened = store.initial_balance_date
        if opened is not None and opened < query_start:
            total += resolve_beginning_balance(
                store.initial_balance, opened, query_start, by_store.get(store.id, ()),
            )
    return total
