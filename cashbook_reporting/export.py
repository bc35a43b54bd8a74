"""
Delimited-text export of statements.

Uses csv.writer.  Each function writes to an open text stream (a file
opened with ``newline=""`` or a ``StringIO``) and returns the number of
data rows written, headers and blank separators excluded.  Amounts are
written as their exact Decimal string.
"""

from __future__ import annotations

import csv
from typing import Sequence, TextIO

from cashbook_engines.models import (
    CashFlowStatement,
    ConsolidatedCashFlowStatement,
    MonthPoint,
    ProfitLossSection,
    ProfitLossStatement,
)
from cashbook_reporting.config import StatementConfig

CASH_FLOW_HEADER = ("section", "direction", "category", "label", "amount", "count")
PROFIT_LOSS_HEADER = ("section", "category", "amount", "count", "percentage")
MONTHLY_HEADER = (
    "month",
    "operating",
    "investing",
    "financing",
    "net_increase",
    "beginning_balance",
    "ending_balance",
)
STORE_BREAKDOWN_HEADER = (
    "store_id",
    "store_name",
    "is_new_store",
    "balance_tracked",
    "beginning_balance",
    "net_cash_flow",
    "ending_balance",
)
NEW_STORE_CAPITAL_HEADER = ("store_id", "store_name", "amount", "date")


def _writer(stream: TextIO, config: StatementConfig | None):
    delimiter = config.csv_delimiter if config is not None else ","
    return csv.writer(stream, delimiter=delimiter, lineterminator="\n")


def export_cash_flow_csv(
    statement: CashFlowStatement,
    stream: TextIO,
    config: StatementConfig | None = None,
) -> int:
    """
    Write category rows per activity, then subtotal and summary rows.

    A consolidated statement also gets a store-breakdown block and a
    new-store capital block, each after a blank line.
    """
    config = config or StatementConfig()
    writer = _writer(stream, config)
    writer.writerow(CASH_FLOW_HEADER)
    rows = 0

    for section in statement.sections:
        name = config.label_for(section.activity)
        for direction, flows in (("inflow", section.inflows), ("outflow", section.outflows)):
            for flow in flows:
                writer.writerow(
                    (name, direction, flow.category, flow.label, str(flow.amount), flow.count)
                )
                rows += 1
        writer.writerow((name, "subtotal_inflow", "", "", str(section.subtotal_inflow), ""))
        writer.writerow((name, "subtotal_outflow", "", "", str(section.subtotal_outflow), ""))
        writer.writerow((name, "net_cash_flow", "", "", str(section.net_cash_flow), ""))
        rows += 3

    summary = statement.summary
    for key in (
        "total_inflow",
        "total_outflow",
        "net_increase",
        "beginning_balance",
        "ending_balance",
    ):
        writer.writerow(("summary", key, "", "", str(getattr(summary, key)), ""))
        rows += 1

    if isinstance(statement, ConsolidatedCashFlowStatement) and statement.store_breakdown:
        writer.writerow(())
        writer.writerow(STORE_BREAKDOWN_HEADER)
        for b in statement.store_breakdown:
            writer.writerow((
                b.store_id,
                b.store_name,
                b.is_new_store,
                b.balance_tracked,
                str(b.beginning_balance),
                str(b.net_cash_flow),
                str(b.ending_balance),
            ))
            rows += 1

    if (
        isinstance(statement, ConsolidatedCashFlowStatement)
        and statement.new_store_capital_investments
    ):
        writer.writerow(())
        writer.writerow(NEW_STORE_CAPITAL_HEADER)
        for inv in statement.new_store_capital_investments:
            writer.writerow(
                (inv.store_id, inv.store_name, str(inv.amount), inv.date.isoformat())
            )
            rows += 1
    return rows


def export_profit_loss_csv(
    statement: ProfitLossStatement,
    stream: TextIO,
    config: StatementConfig | None = None,
) -> int:
    """Write each P&L section's items and total, then the profit lines."""
    writer = _writer(stream, config)
    writer.writerow(PROFIT_LOSS_HEADER)
    rows = 0

    sections: tuple[tuple[str, ProfitLossSection], ...] = (
        ("revenue", statement.revenue),
        ("cost", statement.cost),
        ("non_operating_income", statement.non_operating_income),
        ("non_operating_expense", statement.non_operating_expense),
    )
    for name, section in sections:
        for item in section.items:
            writer.writerow(
                (name, item.category, str(item.amount), item.count, str(item.percentage))
            )
            rows += 1
        writer.writerow((name, "total", str(section.total), "", ""))
        rows += 1

    for key in ("operating_profit", "total_profit", "net_profit"):
        writer.writerow((key, "", str(getattr(statement, key)), "", ""))
        rows += 1
    return rows


def export_monthly_series_csv(
    points: Sequence[MonthPoint],
    stream: TextIO,
    config: StatementConfig | None = None,
) -> int:
    """One row per month."""
    writer = _writer(stream, config)
    writer.writerow(MONTHLY_HEADER)
    for p in points:
        writer.writerow((
            p.month,
            str(p.operating),
            str(p.investing),
            str(p.financing),
            str(p.net_increase),
            str(p.beginning_balance),
            str(p.ending_balance),
        ))
    return len(points)
