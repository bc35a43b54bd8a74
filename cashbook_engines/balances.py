"""
Module: cashbook_engines.balances
Responsibility:
    Resolve the cash an entity held at the instant before a reporting
    period begins, from its opening balance, its book-opening date and its
    full transaction history.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - query_start <= opening_date  ->  the opening balance, unchanged.
    - otherwise  ->  opening balance + net change of transactions dated in
      [opening_date, query_start - 1 day].
    - Entities without an opening date are never resolved; callers treat
      them as having no trackable opening balance.

Performance:
    One pass over the history per call.  Callers needing many start dates
    for the same entity (the monthly series) resolve once and then roll the
    balance forward with ``roll_forward``.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable

from cashbook_engines.cash_flow import net_change
from cashbook_engines.models import ClassifiedTransaction
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.domain.calendar import day_before
from cashbook_kernel.domain.records import Store


@traced_engine(
    "beginning_balance", "1.0",
    fingerprint_fields=("opening_balance", "opening_date", "query_start_date"),
)
def resolve_beginning_balance(
    opening_balance: Decimal,
    opening_date: date,
    query_start_date: date,
    history: Iterable[ClassifiedTransaction],
) -> Decimal:
    """Balance held at the end of the day before ``query_start_date``."""
    if query_start_date <= opening_date:
        return opening_balance

    last_day = day_before(query_start_date)
    carried = net_change(
        t for t in history if opening_date <= t.date <= last_day
    )
    return opening_balance + carried


def resolve_store_balance(
    store: Store,
    query_start_date: date,
    history: Iterable[ClassifiedTransaction],
) -> Decimal | None:
    """
    Resolve a store's beginning balance.

    Returns ``None`` for stores with no opening date: they have no
    trackable opening balance.
    """
    if store.initial_balance_date is None:
        return None
    return resolve_beginning_balance(
        store.initial_balance,
        store.initial_balance_date,
        query_start_date,
        history,
    )


def roll_forward(
    balance: Decimal,
    transactions: Iterable[ClassifiedTransaction],
) -> Decimal:
    """Carry a balance across a batch of transactions."""
    return balance + net_change(transactions)


def store_history(
    transactions: Iterable[ClassifiedTransaction],
    store_id: str,
) -> tuple[ClassifiedTransaction, ...]:
    """Every transaction that belongs to ``store_id``, in input order."""
    return tuple(t for t in transactions if t.store_id == store_id)


__all__ = [
    "resolve_beginning_balance",
    "resolve_store_balance",
    "roll_forward",
    "store_history",
]
