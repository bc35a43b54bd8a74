"""
Module: cashbook_engines.monthly
Responsibility:
    Bucket a window into calendar months and produce a cash-flow point per
    month, carrying each month's ending balance into the next.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - One point per calendar month touched by [start, end], in order.
      Months without transactions still appear with net_increase = 0.
    - The first month's beginning balance is resolved once, at that
      month's first day.  Later months carry forward the previous month's
      ending balance; history is not re-scanned.
    - The first month covers its whole calendar month even when start
      falls mid-month, so the final ending balance equals the cash-flow
      statement's ending balance for [start, end].
    - ending_balance = beginning_balance + net_increase for every point.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Sequence

from cashbook_engines.balances import resolve_beginning_balance
from cashbook_engines.cash_flow import build_sections
from cashbook_engines.consolidation import StoreRole, classify_store, pre_existing_balance
from cashbook_engines.models import ZERO, ClassifiedTransaction, MonthPoint
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.domain.calendar import MonthSpan, in_range, month_key, months_between
from cashbook_kernel.domain.records import CashFlowActivity, Store


def _bucket(
    transactions: Sequence[ClassifiedTransaction],
    spans: Sequence[MonthSpan],
    end: date,
) -> dict[str, list[ClassifiedTransaction]]:
    # Same lower bound as the beginning-balance resolution.
    buckets: dict[str, list[ClassifiedTransaction]] = {s.key: [] for s in spans}
    first_day = spans[0].first_day
    for t in transactions:
        if in_range(t.date, first_day, end):
            buckets[month_key(t.date)].append(t)
    return buckets


def _series(
    spans: Sequence[MonthSpan],
    buckets: dict[str, list[ClassifiedTransaction]],
    beginning: Decimal,
    capital_by_month: dict[str, Decimal] | None = None,
) -> tuple[MonthPoint, ...]:
    points: list[MonthPoint] = []
    balance = beginning
    for span in spans:
        sections = build_sections(buckets[span.key])
        operating = sections[CashFlowActivity.OPERATING].net_cash_flow
        investing = sections[CashFlowActivity.INVESTING].net_cash_flow
        financing = sections[CashFlowActivity.FINANCING].net_cash_flow
        if capital_by_month:
            financing += capital_by_month.get(span.key, ZERO)
        net = operating + investing + financing
        points.append(MonthPoint(
            month=span.key,
            operating=operating,
            investing=investing,
            financing=financing,
            net_increase=net,
            beginning_balance=balance,
            ending_balance=balance + net,
        ))
        balance += net
    return tuple(points)


@traced_engine(
    "monthly_series", "1.0",
    fingerprint_fields=("start", "end", "opening_balance", "opening_date"),
)
def monthly_series(
    transactions: Sequence[ClassifiedTransaction],
    start: date,
    end: date,
    opening_balance: Decimal,
    opening_date: date | None = None,
) -> tuple[MonthPoint, ...]:
    """
    Monthly cash-flow series for one entity.

    ``transactions`` may include history before ``start``; it is used to
    resolve the first month's beginning balance.  Without an opening date
    the series starts from ``opening_balance`` as given.
    """
    spans = months_between(start, end)
    if not spans:
        return ()

    if opening_date is None:
        beginning = opening_balance
    else:
        beginning = resolve_beginning_balance(
            opening_balance, opening_date, spans[0].first_day, transactions,
        )
    return _series(spans, _bucket(transactions, spans, end), beginning)


@traced_engine(
    "consolidated_monthly_series", "1.0",
    fingerprint_fields=("start", "end", "include_unassigned"),
)
def consolidated_monthly_series(
    transactions: Sequence[ClassifiedTransaction],
    stores: Sequence[Store],
    start: date,
    end: date,
    *,
    include_unassigned: bool = False,
) -> tuple[MonthPoint, ...]:
    """
    Monthly cash-flow series across several stores.

    The first month begins with the balances of stores opened before it.
    A store opening inside the window adds its opening balance to the
    financing flow of its opening month.
    """
    spans = months_between(start, end)
    if not spans:
        return ()

    first_day = spans[0].first_day
    store_ids = {s.id for s in stores}
    scoped = [
        t for t in transactions
        if t.store_id in store_ids or (include_unassigned and t.store_id is None)
    ]

    capital_by_month: dict[str, Decimal] = {}
    for store in stores:
        role = classify_store(store, first_day, end)
        if role == StoreRole.NEW and store.initial_balance > 0:
            key = month_key(store.initial_balance_date)
            capital_by_month[key] = (
                capital_by_month.get(key, ZERO) + store.initial_balance
            )

    beginning = pre_existing_balance(scoped, stores, first_day)
    return _series(
        spans, _bucket(scoped, spans, end), beginning, capital_by_month,
    )
