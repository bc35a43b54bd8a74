"""
Tests for StatementService.

Covers:
- Single-store vs consolidated statements
- Category snapshot taken per call
- P&L, monthly series and store comparison through the service
- Window checks and configuration flags
"""

from datetime import date
from decimal import Decimal

import pytest

from cashbook_engines.models import ConsolidatedCashFlowStatement
from cashbook_kernel.domain.records import Category, Store, Transaction
from cashbook_kernel.exceptions import InvalidDateRangeError
from cashbook_kernel.logging_config import LogContext
from cashbook_reporting.config import StatementConfig
from cashbook_reporting.date_range import DateRange
from cashbook_reporting.service import StatementService

JAN_START = date(2025, 1, 1)
JAN_END = date(2025, 1, 31)


def _txn(id_, store_id, type_, category, amount, day, **kwargs):
    return Transaction(
        id=id_,
        type=type_,
        category=category,
        amount=Decimal(amount),
        date=day,
        store_id=store_id,
        **kwargs,
    )


STORES = [
    Store(id="A", name="Store A", initial_balance=Decimal("5000"),
          initial_balance_date=date(2024, 1, 1)),
    Store(id="B", name="Store B", initial_balance=Decimal("2000"),
          initial_balance_date=date(2025, 1, 15)),
]

TRANSACTIONS = [
    _txn("t1", "A", "income", "房费收入", "3000", date(2025, 1, 10)),
    _txn("t2", "A", "expense", "水电费", "500", date(2025, 1, 5)),
    _txn("t3", "A", "income", "房费收入", "1000", date(2024, 6, 1)),
    _txn("t4", "B", "expense", "装修改造", "800", date(2025, 1, 20)),
    _txn("t5", "B", "income", "股东投资", "600", date(2025, 1, 21),
         include_in_profit_loss=False),
    _txn("t6", None, "expense", "其他支出", "50", date(2025, 1, 22)),
    _txn("t7", "A", "income", "房费收入", "999", date(2025, 2, 1)),
]


@pytest.fixture
def service(record_source, clock):
    source = record_source(transactions=TRANSACTIONS, stores=STORES)
    return StatementService(source, clock)


class TestCashFlowStatement:

    def test_single_store_uses_resolved_beginning(self, service):
        statement = service.cash_flow_statement("A", JAN_START, JAN_END)

        assert not isinstance(statement, ConsolidatedCashFlowStatement)
        assert statement.summary.beginning_balance == Decimal("6000")
        assert statement.operating.net_cash_flow == Decimal("2500")
        assert statement.summary.ending_balance == Decimal("8500")

    def test_store_without_opening_date_starts_at_zero(self, record_source, clock):
        source = record_source(
            transactions=[_txn("t1", "C", "income", "房费收入", "10", date(2025, 1, 3))],
            stores=[Store(id="C", name="C", initial_balance=Decimal("700"))],
        )

        statement = StatementService(source, clock).cash_flow_statement("C", JAN_START, JAN_END)

        assert statement.summary.beginning_balance == Decimal("0")
        assert statement.summary.ending_balance == Decimal("10")

    def test_unknown_store(self, service):
        with pytest.raises(KeyError):
            service.cash_flow_statement("Z", JAN_START, JAN_END)

    def test_end_before_start(self, service):
        with pytest.raises(InvalidDateRangeError):
            service.cash_flow_statement("A", JAN_END, JAN_START)


class TestConsolidatedCashFlow:

    def test_all_stores(self, service):
        statement = service.consolidated_cash_flow(JAN_START, JAN_END)

        assert statement.summary.beginning_balance == Decimal("6000")
        assert statement.total_new_store_capital == Decimal("2000")
        assert statement.investing.net_cash_flow == Decimal("-800")
        # 2000 capital + 600 shareholder investment
        assert statement.financing.net_cash_flow == Decimal("2600")
        assert statement.summary.ending_balance == Decimal("10300")

    def test_include_unassigned(self, record_source, clock):
        source = record_source(transactions=TRANSACTIONS, stores=STORES)
        config = StatementConfig(include_unassigned_transactions=True)

        statement = StatementService(source, clock, config).consolidated_cash_flow(
            JAN_START, JAN_END,
        )

        assert statement.summary.ending_balance == Decimal("10250")

    def test_statement_for_dispatches(self, service):
        single = service.statement_for(JAN_START, JAN_END, ["A"])
        combined = service.statement_for(JAN_START, JAN_END, ["A", "B"])

        assert not isinstance(single, ConsolidatedCashFlowStatement)
        assert isinstance(combined, ConsolidatedCashFlowStatement)
        assert len(combined.store_breakdown) == 2

    def test_categories_read_on_every_call(self, record_source, clock):
        source = record_source(
            transactions=[_txn("t1", "A", "expense", "自定义", "100", date(2025, 1, 3))],
            stores=STORES[:1],
        )
        service = StatementService(source, clock)

        before = service.consolidated_cash_flow(JAN_START, JAN_END)
        source.categories.append(
            Category(id="c1", type="expense", name="自定义", cash_flow_activity="investing"),
        )
        after = service.consolidated_cash_flow(JAN_START, JAN_END)

        assert before.operating.subtotal_outflow == Decimal("100")
        assert after.investing.subtotal_outflow == Decimal("100")


class TestProfitLoss:

    def test_excludes_non_pl_and_out_of_window(self, service):
        pl = service.profit_loss_statement(JAN_START, JAN_END)

        assert pl.revenue.total == Decimal("3000")
        assert pl.cost.total == Decimal("1300")
        assert pl.net_profit == Decimal("1700")

    def test_store_filter(self, service):
        pl = service.profit_loss_statement(JAN_START, JAN_END, ["B"])

        assert pl.revenue.total == Decimal("0")
        assert pl.cost.total == Decimal("800")

    def test_monthly(self, service):
        jan, feb = service.monthly_profit_loss(JAN_START, date(2025, 2, 28))

        assert jan.profit == Decimal("1700")
        assert feb.revenue == Decimal("999")


class TestMonthlyCashFlow:

    def test_single_store(self, service):
        (jan,) = service.monthly_cash_flow(JAN_START, JAN_END, ["A"])

        assert jan.beginning_balance == Decimal("6000")
        assert jan.ending_balance == Decimal("8500")

    def test_consolidated(self, service):
        jan, feb = service.monthly_cash_flow(JAN_START, date(2025, 2, 28))

        assert jan.beginning_balance == Decimal("6000")
        assert jan.ending_balance == Decimal("10300")
        assert feb.beginning_balance == jan.ending_balance
        assert feb.ending_balance == Decimal("11299")

    def test_mid_month_start_ends_with_statement(self, service):
        start = date(2025, 1, 8)
        statement = service.cash_flow_statement("A", start, JAN_END)

        (jan,) = service.monthly_cash_flow(start, JAN_END, ["A"])

        assert statement.summary.beginning_balance == Decimal("5500")
        assert jan.ending_balance == statement.summary.ending_balance == Decimal("8500")


class TestStoreComparison:

    def test_summaries_in_store_order(self, service):
        summary = service.store_comparison(JAN_START, JAN_END)

        assert [s.store_id for s in summary.stores] == ["A", "B"]
        a, b = summary.stores
        assert a.total_income == Decimal("3000")
        assert a.net_profit == Decimal("2500")
        assert b.total_income == Decimal("600")
        assert b.net_profit == Decimal("-800")
        assert summary.store_count == 2
        assert summary.ending_balance == Decimal("10300")

    def test_single_worker(self, record_source, clock):
        source = record_source(transactions=TRANSACTIONS, stores=STORES)
        service = StatementService(source, clock, StatementConfig(max_workers=1))

        summary = service.store_comparison(JAN_START, JAN_END, ["B", "A"])

        assert [s.store_id for s in summary.stores] == ["B", "A"]

    def test_log_context_reaches_workers(self, service, captured_logs):
        with LogContext.bind(company_id="co-1"):
            service.store_comparison(JAN_START, JAN_END)

        traces = [
            r for r in captured_logs()
            if r["message"] == "CASHBOOK_ENGINE_TRACE" and r["engine_name"] == "store_summary"
        ]
        assert len(traces) == 2
        assert all(r["company_id"] == "co-1" for r in traces)


class TestWindows:

    def test_window_uses_service_clock(self, service):
        assert service.window("month") == DateRange(JAN_START, JAN_END)

    def test_validated_window(self, service):
        result = service.validated_window("B", date(2025, 1, 1), JAN_END)

        assert result.start == date(2025, 1, 15)
        assert result.date_adjusted
