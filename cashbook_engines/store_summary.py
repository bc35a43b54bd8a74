"""
Module: cashbook_engines.store_summary
Responsibility:
    Headline figures per store and a company-wide overview, for the
    store comparison view.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Each store summary reads
    only its own transactions, so callers may compute them concurrently.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Sequence

from cashbook_engines.consolidation import consolidate
from cashbook_engines.models import (
    ZERO,
    ClassifiedTransaction,
    CompanySummary,
    StoreSummary,
)
from cashbook_engines.profit_loss import calculate_profit_loss
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.domain.records import Store, TransactionType


def _totals(
    transactions: Sequence[ClassifiedTransaction],
) -> tuple[Decimal, Decimal, int, int]:
    income = expense = ZERO
    income_count = expense_count = 0
    for t in transactions:
        if t.type == TransactionType.INCOME:
            income += t.amount
            income_count += 1
        else:
            expense += t.amount
            expense_count += 1
    return income, expense, income_count, expense_count


def _average(total: Decimal, count: int) -> Decimal:
    return total / count if count else ZERO


@traced_engine("store_summary", "1.0")
def summarize_store(
    store: Store,
    transactions: Sequence[ClassifiedTransaction],
) -> StoreSummary:
    """Summarize one store's already date-filtered transactions."""
    own = [t for t in transactions if t.store_id == store.id]
    income, expense, income_count, expense_count = _totals(own)
    return StoreSummary(
        store_id=store.id,
        store_name=store.name,
        total_income=income,
        total_expense=expense,
        income_count=income_count,
        expense_count=expense_count,
        net_profit=calculate_profit_loss(own).net_profit,
    )


@traced_engine(
    "company_summary", "1.0",
    fingerprint_fields=("query_start", "query_end", "include_unassigned"),
)
def summarize_company(
    transactions: Sequence[ClassifiedTransaction],
    stores: Sequence[Store],
    query_start: date,
    query_end: date,
    *,
    store_summaries: Sequence[StoreSummary] = (),
    include_unassigned: bool = False,
) -> CompanySummary:
    """
    Company overview over ``[query_start, query_end]``.

    Cash-flow and balance figures come from the consolidated statement, so
    they agree with it exactly.  ``store_summaries`` is attached as-is.
    """
    statement = consolidate(
        transactions, stores, query_start, query_end,
        include_unassigned=include_unassigned,
    )
    store_ids = {s.id for s in stores}
    in_scope = [
        t for t in transactions
        if query_start <= t.date <= query_end
        and (t.store_id in store_ids or (include_unassigned and t.store_id is None))
    ]
    income, expense, income_count, expense_count = _totals(in_scope)
    pl = calculate_profit_loss(in_scope)
    summary = statement.summary

    return CompanySummary(
        store_count=len(stores),
        active_store_count=sum(1 for s in stores if s.is_active),
        total_income=income,
        total_expense=expense,
        income_count=income_count,
        expense_count=expense_count,
        avg_income_per_store=_average(income, len(stores)),
        avg_expense_per_store=_average(expense, len(stores)),
        operating_cash_flow=statement.operating.net_cash_flow,
        investing_cash_flow=statement.investing.net_cash_flow,
        financing_cash_flow=statement.financing.net_cash_flow,
        net_cash_flow=summary.net_increase,
        beginning_balance=summary.beginning_balance,
        ending_balance=summary.ending_balance,
        revenue=pl.revenue.total,
        cost=pl.cost.total,
        operating_profit=pl.operating_profit,
        non_operating_income=pl.non_operating_income.total,
        non_operating_expense=pl.non_operating_expense.total,
        total_profit=pl.total_profit,
        net_profit=pl.net_profit,
        stores=tuple(store_summaries),
    )
