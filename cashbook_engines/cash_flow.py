"""
Module: cashbook_engines.cash_flow
Responsibility:
    Aggregate classified transactions into a direct-method cash-flow
    statement for one accounting entity (one store, or the whole company
    treated as one entity).

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - net_cash_flow = subtotal_inflow - subtotal_outflow, per activity.
    - total_inflow / total_outflow are the sums of the three subtotals.
    - ending_balance = beginning_balance + net_increase, with no floor at
      zero: a negative ending balance is valid output.
    - Category rows are sorted by descending amount; ties keep first-seen
      order.
    - Decimal-only arithmetic; identical inputs give identical outputs.

Failure modes:
    None for well-typed input.  An empty transaction list produces a
    well-formed, zero-valued statement.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from cashbook_engines.models import (
    ZERO,
    ActivitySection,
    CashFlowStatement,
    CashFlowSummary,
    CategoryFlow,
    ClassifiedTransaction,
)
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.domain.calendar import in_range
from cashbook_kernel.domain.records import CashFlowActivity, FlowDirection

# Group key -> category -> CategoryFlow, in first-seen order
_Groups = dict[tuple[CashFlowActivity, FlowDirection], dict[str, CategoryFlow]]


def _fold(transactions: Iterable[ClassifiedTransaction]) -> _Groups:
    groups: _Groups = {
        (activity, direction): {}
        for activity in CashFlowActivity
        for direction in FlowDirection
    }
    for t in transactions:
        rows = groups[(t.activity, t.direction)]
        prev = rows.get(t.category)
        if prev is None:
            rows[t.category] = CategoryFlow(
                category=t.category,
                label=t.classification.label,
                amount=t.amount,
                count=1,
            )
        else:
            rows[t.category] = CategoryFlow(
                category=prev.category,
                label=prev.label,
                amount=prev.amount + t.amount,
                count=prev.count + 1,
            )
    return groups


def _sorted_flows(rows: Iterable[CategoryFlow]) -> tuple[CategoryFlow, ...]:
    # sorted() is stable, so equal amounts keep insertion order
    return tuple(sorted(rows, key=lambda r: r.amount, reverse=True))


def make_section(
    activity: CashFlowActivity,
    inflows: Sequence[CategoryFlow],
    outflows: Sequence[CategoryFlow],
) -> ActivitySection:
    """Build an activity section; rows are used in the order given."""
    subtotal_in = sum((r.amount for r in inflows), ZERO)
    subtotal_out = sum((r.amount for r in outflows), ZERO)
    return ActivitySection(
        activity=activity,
        inflows=tuple(inflows),
        outflows=tuple(outflows),
        subtotal_inflow=subtotal_in,
        subtotal_outflow=subtotal_out,
        net_cash_flow=subtotal_in - subtotal_out,
    )


def make_statement(
    operating: ActivitySection,
    investing: ActivitySection,
    financing: ActivitySection,
    beginning_balance: Decimal,
) -> CashFlowStatement:
    """Assemble a statement and derive its summary from the sections."""
    total_in = operating.subtotal_inflow + investing.subtotal_inflow + financing.subtotal_inflow
    total_out = (
        operating.subtotal_outflow + investing.subtotal_outflow + financing.subtotal_outflow
    )
    net_increase = total_in - total_out
    return CashFlowStatement(
        operating=operating,
        investing=investing,
        financing=financing,
        summary=CashFlowSummary(
            total_inflow=total_in,
            total_outflow=total_out,
            net_increase=net_increase,
            beginning_balance=beginning_balance,
            ending_balance=beginning_balance + net_increase,
        ),
    )


def build_sections(
    transactions: Iterable[ClassifiedTransaction],
) -> dict[CashFlowActivity, ActivitySection]:
    """Aggregate transactions into the three activity sections."""
    groups = _fold(transactions)
    return {
        activity: make_section(
            activity,
            _sorted_flows(groups[(activity, FlowDirection.INFLOW)].values()),
            _sorted_flows(groups[(activity, FlowDirection.OUTFLOW)].values()),
        )
        for activity in CashFlowActivity
    }


@traced_engine("cash_flow", "1.0", fingerprint_fields=("beginning_balance",))
def calculate_cash_flow(
    transactions: Sequence[ClassifiedTransaction],
    beginning_balance: Decimal = ZERO,
) -> CashFlowStatement:
    """
    Compute the cash-flow statement for one entity.

    ``transactions`` should already be restricted to the reporting window;
    this function does not filter by date.
    """
    sections = build_sections(transactions)
    return make_statement(
        sections[CashFlowActivity.OPERATING],
        sections[CashFlowActivity.INVESTING],
        sections[CashFlowActivity.FINANCING],
        beginning_balance,
    )


def filter_by_date_range(
    transactions: Iterable[ClassifiedTransaction],
    start_date: date,
    end_date: date,
) -> tuple[ClassifiedTransaction, ...]:
    """Transactions dated within ``[start_date, end_date]`` inclusive."""
    return tuple(t for t in transactions if in_range(t.date, start_date, end_date))


def net_change(transactions: Iterable[ClassifiedTransaction]) -> Decimal:
    """Sum of +amount for income and -amount for expense."""
    return sum((t.signed_amount for t in transactions), ZERO)
