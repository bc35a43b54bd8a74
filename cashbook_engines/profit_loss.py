"""
Module: cashbook_engines.profit_loss
Responsibility:
    Compute the profit-and-loss statement from classified transactions,
    and a month-by-month P&L series.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Bucket rules:
    Transactions with ``include_in_profit_loss`` False are excluded from
    every bucket; they still count in the cash-flow statement.
    Otherwise, by type and nature:

        income  + operating          -> revenue
        expense + operating          -> cost
        income  + non_operating/tax  -> non_operating_income
        expense + non_operating/tax  -> non_operating_expense

Invariants enforced:
    - operating_profit = revenue.total - cost.total
    - total_profit = operating_profit + non_operating_income.total
      - non_operating_expense.total
    - net_profit = total_profit; income tax is not a separate line.
    - percentage = amount / section total * 100, or 0 when the total is 0.
    - Items sorted by descending amount; ties keep first-seen order.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, Sequence

from cashbook_engines.models import (
    ZERO,
    CategoryDetail,
    ClassifiedTransaction,
    MonthlyProfitLoss,
    ProfitLossSection,
    ProfitLossStatement,
)
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.domain.calendar import in_range, month_key, months_between
from cashbook_kernel.domain.records import TransactionNature, TransactionType

HUNDRED = Decimal("100")


class ProfitLossBucket(str, Enum):
    REVENUE = "revenue"
    COST = "cost"
    NON_OPERATING_INCOME = "non_operating_income"
    NON_OPERATING_EXPENSE = "non_operating_expense"


def bucket_of(t: ClassifiedTransaction) -> ProfitLossBucket | None:
    """P&L bucket for a transaction, or None when it is excluded."""
    if not t.classification.include_in_profit_loss:
        return None
    operating = t.classification.nature == TransactionNature.OPERATING
    if t.type == TransactionType.INCOME:
        return ProfitLossBucket.REVENUE if operating else ProfitLossBucket.NON_OPERATING_INCOME
    return ProfitLossBucket.COST if operating else ProfitLossBucket.NON_OPERATING_EXPENSE


def make_pl_section(transactions: Iterable[ClassifiedTransaction]) -> ProfitLossSection:
    """Aggregate by category with share-of-total percentages."""
    amounts: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for t in transactions:
        amounts[t.category] = amounts.get(t.category, ZERO) + t.amount
        counts[t.category] = counts.get(t.category, 0) + 1

    total = sum(amounts.values(), ZERO)
    items = [
        CategoryDetail(
            category=category,
            amount=amount,
            count=counts[category],
            percentage=(amount / total * HUNDRED) if total else ZERO,
        )
        for category, amount in amounts.items()
    ]
    items.sort(key=lambda d: d.amount, reverse=True)
    return ProfitLossSection(items=tuple(items), total=total)


def _split(
    transactions: Iterable[ClassifiedTransaction],
) -> dict[ProfitLossBucket, list[ClassifiedTransaction]]:
    buckets: dict[ProfitLossBucket, list[ClassifiedTransaction]] = {
        b: [] for b in ProfitLossBucket
    }
    for t in transactions:
        bucket = bucket_of(t)
        if bucket is not None:
            buckets[bucket].append(t)
    return buckets


@traced_engine("profit_loss", "1.0")
def calculate_profit_loss(
    transactions: Sequence[ClassifiedTransaction],
) -> ProfitLossStatement:
    """Profit-and-loss statement for already date-filtered transactions."""
    buckets = _split(transactions)
    revenue = make_pl_section(buckets[ProfitLossBucket.REVENUE])
    cost = make_pl_section(buckets[ProfitLossBucket.COST])
    non_op_income = make_pl_section(buckets[ProfitLossBucket.NON_OPERATING_INCOME])
    non_op_expense = make_pl_section(buckets[ProfitLossBucket.NON_OPERATING_EXPENSE])

    operating_profit = revenue.total - cost.total
    total_profit = operating_profit + non_op_income.total - non_op_expense.total
    return ProfitLossStatement(
        revenue=revenue,
        cost=cost,
        operating_profit=operating_profit,
        non_operating_income=non_op_income,
        non_operating_expense=non_op_expense,
        total_profit=total_profit,
        net_profit=total_profit,
    )


@traced_engine("monthly_profit_loss", "1.0", fingerprint_fields=("start", "end"))
def monthly_profit_loss(
    transactions: Sequence[ClassifiedTransaction],
    start: date,
    end: date,
) -> tuple[MonthlyProfitLoss, ...]:
    """One P&L point per calendar month touched by ``[start, end]``."""
    spans = months_between(start, end)
    totals: dict[str, dict[ProfitLossBucket, Decimal]] = {
        s.key: {b: ZERO for b in ProfitLossBucket} for s in spans
    }
    for t in transactions:
        if not in_range(t.date, start, end):
            continue
        bucket = bucket_of(t)
        if bucket is not None:
            totals[month_key(t.date)][bucket] += t.amount

    points = []
    for span in spans:
        m = totals[span.key]
        revenue = m[ProfitLossBucket.REVENUE]
        cost = m[ProfitLossBucket.COST]
        non_op_income = m[ProfitLossBucket.NON_OPERATING_INCOME]
        non_op_expense = m[ProfitLossBucket.NON_OPERATING_EXPENSE]
        points.append(MonthlyProfitLoss(
            month=span.key,
            revenue=revenue,
            cost=cost,
            profit=revenue - cost + non_op_income - non_op_expense,
            non_operating_income=non_op_income,
            non_operating_expense=non_op_expense,
        ))
    return tuple(points)
