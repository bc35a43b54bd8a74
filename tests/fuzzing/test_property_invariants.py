"""
Hypothesis-based property tests for the statement engines.

Properties:
- Balance identity on single-entity and consolidated statements
- Unknown categories classify as operating and count toward P&L
- Monthly carry-forward with and without transactions
- Consolidation conservation: beginning balance is the sum of the
  pre-existing stores' individually resolved balances
- Determinism: equal inputs give equal statements
"""

from datetime import date, timedelta
from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from cashbook_engines.balances import resolve_beginning_balance
from cashbook_engines.cash_flow import calculate_cash_flow
from cashbook_engines.classifier import classify, classify_all
from cashbook_engines.consolidation import consolidate
from cashbook_engines.models import ZERO, ClassificationSource
from cashbook_engines.monthly import monthly_series
from cashbook_engines.profit_loss import calculate_profit_loss
from cashbook_kernel.domain.records import (
    CashFlowActivity,
    Store,
    Transaction,
    TransactionType,
)

WINDOW_START = date(2025, 1, 1)
WINDOW_END = date(2025, 3, 31)
STORE_IDS = ("A", "B", "C")

PROPERTY_SETTINGS = settings(
    max_examples=150,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)

amounts = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("1000000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
days = st.dates(min_value=date(2024, 1, 1), max_value=date(2025, 6, 30))


@st.composite
def transactions(draw, store_ids=STORE_IDS):
    rows = draw(st.lists(
        st.tuples(
            st.sampled_from(list(TransactionType)),
            st.sampled_from(["sales", "rent", "loan", "equipment", "misc"]),
            amounts,
            days,
            st.sampled_from(store_ids),
            st.one_of(st.none(), st.sampled_from(list(CashFlowActivity))),
            st.one_of(st.none(), st.booleans()),
        ),
        max_size=40,
    ))
    return classify_all([
        Transaction(
            id=f"t{i}",
            type=type_,
            category=category,
            amount=amount,
            date=day,
            store_id=store_id,
            cash_flow_activity=activity,
            include_in_profit_loss=include,
        )
        for i, (type_, category, amount, day, store_id, activity, include) in enumerate(rows)
    ])


@st.composite
def stores(draw):
    result = []
    for store_id in STORE_IDS:
        opened = draw(st.one_of(st.none(), days))
        balance = draw(amounts)
        result.append(Store(
            id=store_id,
            name=f"Store {store_id}",
            initial_balance=balance,
            initial_balance_date=opened,
        ))
    return result


def _assert_identity(summary, sections):
    assert summary.total_inflow == sum((s.subtotal_inflow for s in sections), ZERO)
    assert summary.total_outflow == sum((s.subtotal_outflow for s in sections), ZERO)
    assert summary.ending_balance == summary.beginning_balance + (
        summary.total_inflow - summary.total_outflow
    )
    for s in sections:
        assert s.net_cash_flow == s.subtotal_inflow - s.subtotal_outflow


class TestBalanceIdentity:

    @given(txns=transactions(), beginning=amounts)
    @PROPERTY_SETTINGS
    def test_single_entity(self, txns, beginning):
        statement = calculate_cash_flow(txns, beginning)

        _assert_identity(statement.summary, statement.sections)

    @given(txns=transactions(), company=stores())
    @PROPERTY_SETTINGS
    def test_consolidated(self, txns, company):
        statement = consolidate(txns, company, WINDOW_START, WINDOW_END)

        _assert_identity(statement.summary, statement.sections)
        for row in statement.store_breakdown:
            assert row.ending_balance == row.beginning_balance + row.net_cash_flow

    @given(txns=transactions(), company=stores())
    @PROPERTY_SETTINGS
    def test_deterministic(self, txns, company):
        first = consolidate(txns, company, WINDOW_START, WINDOW_END)
        second = consolidate(txns, company, WINDOW_START, WINDOW_END)

        assert first == second


class TestClassificationFallback:

    @given(
        type_=st.sampled_from(list(TransactionType)),
        category=st.text(min_size=1, max_size=20),
        amount=amounts,
    )
    @PROPERTY_SETTINGS
    def test_unknown_category_is_operating(self, type_, category, amount):
        txn = Transaction(id="t", type=type_, category=category, amount=amount,
                          date=WINDOW_START)

        result = classify(txn)

        assert result.activity == CashFlowActivity.OPERATING
        assert result.include_in_profit_loss is True
        assert result.source == ClassificationSource.DEFAULT


class TestProfitLossExclusion:

    @given(txns=transactions())
    @PROPERTY_SETTINGS
    def test_excluded_never_reach_pl(self, txns):
        pl = calculate_profit_loss(txns)

        included = [t for t in txns if t.classification.include_in_profit_loss]
        pl_total = (
            pl.revenue.total + pl.cost.total
            + pl.non_operating_income.total + pl.non_operating_expense.total
        )
        assert pl_total == sum((t.amount for t in included), ZERO)


class TestMonthlyCarryForward:

    @given(opening=amounts, months=st.integers(min_value=1, max_value=14))
    @PROPERTY_SETTINGS
    def test_quiet_months_hold_opening_balance(self, opening, months):
        end = WINDOW_START
        for _ in range(months - 1):
            end = (end.replace(day=28) + timedelta(days=4)).replace(day=1)

        points = monthly_series((), WINDOW_START, end, opening, WINDOW_START)

        assert len(points) == months
        for p in points:
            assert p.beginning_balance == p.ending_balance == opening

    @given(txns=transactions(store_ids=("A",)), opening=amounts)
    @PROPERTY_SETTINGS
    def test_each_month_starts_where_previous_ended(self, txns, opening):
        points = monthly_series(txns, WINDOW_START, WINDOW_END, opening, date(2024, 1, 1))

        for prev, cur in zip(points, points[1:]):
            assert cur.beginning_balance == prev.ending_balance
        for p in points:
            assert p.ending_balance == p.beginning_balance + p.net_increase


class TestConsolidationConservation:

    @given(txns=transactions(), company=stores())
    @PROPERTY_SETTINGS
    def test_beginning_is_sum_of_pre_existing(self, txns, company):
        statement = consolidate(txns, company, WINDOW_START, WINDOW_END)

        expected = ZERO
        for store in company:
            opened = store.initial_balance_date
            if opened is not None and opened < WINDOW_START:
                expected += resolve_beginning_balance(
                    store.initial_balance,
                    opened,
                    WINDOW_START,
                    [t for t in txns if t.store_id == store.id],
                )
        assert statement.summary.beginning_balance == expected

    @given(txns=transactions(), company=stores())
    @PROPERTY_SETTINGS
    def test_new_store_capital_only_in_financing(self, txns, company):
        statement = consolidate(txns, company, WINDOW_START, WINDOW_END)

        new_ids = {
            s.id for s in company
            if s.initial_balance_date is not None
            and WINDOW_START <= s.initial_balance_date <= WINDOW_END
            and s.initial_balance > 0
        }
        assert {i.store_id for i in statement.new_store_capital_investments} == new_ids
        window_financing_in = sum(
            (t.amount for t in txns
             if WINDOW_START <= t.date <= WINDOW_END
             and t.activity == CashFlowActivity.FINANCING
             and t.type == TransactionType.INCOME),
            ZERO,
        )
        assert statement.financing.subtotal_inflow == (
            window_financing_in + statement.total_new_store_capital
        )
