"""
Statement Service (``cashbook_reporting.service``).

Responsibility
--------------
Orchestrates statement generation -- single-store and consolidated cash
flow, profit and loss, monthly series and the store comparison -- by
bridging a ``RecordSource`` (whatever holds transactions, stores and
categories) to the pure engines in ``cashbook_engines``.  This is a
**read-only** service.

Architecture position
---------------------
**Reporting layer** -- thin glue.  ``StatementService`` is the sole public
entry point for statement generation.  Constructor: ``source`` + ``clock``
+ ``config``.

Invariants enforced
-------------------
* Read-only -- the record source is only queried.
* The category index is rebuilt from the source on every call; nothing is
  cached across calls.
* One store -> single-entity statement with a resolved beginning balance;
  several or all stores -> consolidated statement.
* Per-store summaries run concurrently but are returned in input order.

Failure modes
-------------
* Record source failure  -> exception propagates.
* end_date < start_date  -> ``InvalidDateRangeError`` before any query.
* Unknown store id  -> ``KeyError``.
"""

from __future__ import annotations

import contextvars
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Protocol, Sequence

from cashbook_config import get_fallback_table
from cashbook_config.schema import FallbackCategoryTable
from cashbook_engines import (
    CashFlowStatement,
    CategoryIndex,
    ClassifiedTransaction,
    CompanySummary,
    ConsolidatedCashFlowStatement,
    MonthlyProfitLoss,
    MonthPoint,
    ProfitLossStatement,
    StoreSummary,
    calculate_cash_flow,
    calculate_profit_loss,
    classify_all,
    consolidate,
    consolidated_monthly_series,
    filter_by_date_range,
    monthly_profit_loss,
    monthly_series,
    resolve_store_balance,
    summarize_company,
    summarize_store,
)
from cashbook_engines.models import ZERO
from cashbook_kernel.domain.clock import Clock, SystemClock
from cashbook_kernel.domain.records import Category, Store, Transaction
from cashbook_kernel.exceptions import InvalidDateRangeError
from cashbook_kernel.logging_config import get_logger
from cashbook_reporting.config import StatementConfig
from cashbook_reporting.date_range import (
    DateRange,
    DateRangeValidation,
    PeriodType,
    resolve_period,
    validate_date_range,
)

logger = get_logger("reporting.service")


class RecordSource(Protocol):
    """Read access to one company's records."""

    def fetch_transactions(
        self,
        store_ids: Sequence[str] | None = None,
        end_date: date | None = None,
    ) -> Sequence[Transaction]:
        """Transactions dated on or before ``end_date``, optionally by store."""
        ...

    def fetch_stores(self) -> Sequence[Store]:
        ...

    def fetch_categories(self) -> Sequence[Category]:
        ...


class StatementService:
    """
    Statement generation service.

    Contract
    --------
    * Every public method returns a frozen engine model.
    * ``store_ids=None`` means every store of the company.
    * Transactions are fetched up to the window end, not from its start:
      beginning balances need the history before the window.
    """

    def __init__(
        self,
        source: RecordSource,
        clock: Clock | None = None,
        config: StatementConfig | None = None,
        fallback_table: FallbackCategoryTable | None = None,
    ):
        self._source = source
        self._clock = clock or SystemClock()
        self._config = config or StatementConfig.with_defaults()
        self._fallback_table = fallback_table or get_fallback_table(
            self._config.fallback_table_path,
        )

        logger.info(
            "statement_service_initialized",
            extra={
                "fallback_table_checksum": self._fallback_table.checksum,
                "include_unassigned": self._config.include_unassigned_transactions,
                "max_workers": self._config.max_workers,
            },
        )

    # =========================================================================
    # Internal helpers
    # =========================================================================

    @staticmethod
    def _check_window(start_date: date, end_date: date) -> None:
        if end_date < start_date:
            raise InvalidDateRangeError(
                "end date precedes start date", start_date, end_date,
            )

    def _select_stores(self, store_ids: Sequence[str] | None) -> list[Store]:
        stores = list(self._source.fetch_stores())
        if store_ids is None:
            return stores
        by_id = {s.id: s for s in stores}
        return [by_id[sid] for sid in store_ids]

    def _load_classified(
        self,
        store_ids: Sequence[str] | None,
        end_date: date,
    ) -> tuple[ClassifiedTransaction, ...]:
        """Fetch and classify transactions against the current categories."""
        transactions = self._source.fetch_transactions(store_ids, end_date)
        index = CategoryIndex.from_categories(self._source.fetch_categories())
        logger.debug(
            "records_loaded_for_statement",
            extra={
                "transaction_count": len(transactions),
                "category_count": len(index),
            },
        )
        return classify_all(transactions, index, self._fallback_table)

    def _in_scope(
        self,
        transactions: Sequence[ClassifiedTransaction],
        stores: Sequence[Store],
        start_date: date,
        end_date: date,
    ) -> tuple[ClassifiedTransaction, ...]:
        ids = {s.id for s in stores}
        include_unassigned = self._config.include_unassigned_transactions
        return tuple(
            t for t in filter_by_date_range(transactions, start_date, end_date)
            if t.store_id in ids or (include_unassigned and t.store_id is None)
        )

    def _consolidate(
        self,
        transactions: Sequence[ClassifiedTransaction],
        stores: Sequence[Store],
        start_date: date,
        end_date: date,
    ) -> ConsolidatedCashFlowStatement:
        return consolidate(
            transactions,
            stores,
            start_date,
            end_date,
            include_unassigned=self._config.include_unassigned_transactions,
            capital_category=self._config.new_store_capital_category,
            capital_label=self._config.new_store_capital_label,
        )

    # =========================================================================
    # Public API
    # =========================================================================

    def cash_flow_statement(
        self,
        store_id: str,
        start_date: date,
        end_date: date,
    ) -> CashFlowStatement:
        """
        Cash-flow statement for a single store.

        The beginning balance is resolved from the store's opening balance
        and history; a store with no opening date starts from zero.
        """
        self._check_window(start_date, end_date)
        (store,) = self._select_stores([store_id])
        with_history = self._load_classified([store_id], end_date)
        history = [t for t in with_history if t.store_id == store_id]

        beginning = resolve_store_balance(store, start_date, history)
        statement = calculate_cash_flow(
            filter_by_date_range(history, start_date, end_date),
            beginning if beginning is not None else ZERO,
        )

        logger.info(
            "cash_flow_statement_generated",
            extra={
                "store_id": store_id,
                "start_date": start_date,
                "end_date": end_date,
                "balance_tracked": beginning is not None,
                "ending_balance": statement.summary.ending_balance,
            },
        )
        return statement

    def consolidated_cash_flow(
        self,
        start_date: date,
        end_date: date,
        store_ids: Sequence[str] | None = None,
    ) -> ConsolidatedCashFlowStatement:
        """Consolidated cash-flow statement across several stores."""
        self._check_window(start_date, end_date)
        stores = self._select_stores(store_ids)
        transactions = self._load_classified(None, end_date)
        statement = self._consolidate(transactions, stores, start_date, end_date)

        logger.info(
            "consolidated_cash_flow_generated",
            extra={
                "store_count": len(stores),
                "start_date": start_date,
                "end_date": end_date,
                "new_store_capital": statement.total_new_store_capital,
                "ending_balance": statement.summary.ending_balance,
            },
        )
        return statement

    def statement_for(
        self,
        start_date: date,
        end_date: date,
        store_ids: Sequence[str] | None = None,
    ) -> CashFlowStatement:
        """Single-store statement for one id; consolidated otherwise."""
        if store_ids is not None and len(store_ids) == 1:
            return self.cash_flow_statement(store_ids[0], start_date, end_date)
        return self.consolidated_cash_flow(start_date, end_date, store_ids)

    def profit_loss_statement(
        self,
        start_date: date,
        end_date: date,
        store_ids: Sequence[str] | None = None,
    ) -> ProfitLossStatement:
        """Profit-and-loss statement for the selected stores."""
        self._check_window(start_date, end_date)
        stores = self._select_stores(store_ids)
        transactions = self._load_classified(None, end_date)
        statement = calculate_profit_loss(
            self._in_scope(transactions, stores, start_date, end_date),
        )

        logger.info(
            "profit_loss_statement_generated",
            extra={
                "store_count": len(stores),
                "start_date": start_date,
                "end_date": end_date,
                "net_profit": statement.net_profit,
            },
        )
        return statement

    def monthly_cash_flow(
        self,
        start_date: date,
        end_date: date,
        store_ids: Sequence[str] | None = None,
    ) -> tuple[MonthPoint, ...]:
        """Monthly cash-flow series, single-store or consolidated."""
        self._check_window(start_date, end_date)
        stores = self._select_stores(store_ids)
        transactions = self._load_classified(None, end_date)

        if store_ids is not None and len(stores) == 1:
            store = stores[0]
            history = [t for t in transactions if t.store_id == store.id]
            opening = store.initial_balance if store.tracks_opening_balance else ZERO
            series = monthly_series(
                history, start_date, end_date, opening, store.initial_balance_date,
            )
        else:
            series = consolidated_monthly_series(
                transactions, stores, start_date, end_date,
                include_unassigned=self._config.include_unassigned_transactions,
            )

        logger.info(
            "monthly_cash_flow_generated",
            extra={"store_count": len(stores), "month_count": len(series)},
        )
        return series

    def monthly_profit_loss(
        self,
        start_date: date,
        end_date: date,
        store_ids: Sequence[str] | None = None,
    ) -> tuple[MonthlyProfitLoss, ...]:
        """Monthly profit-and-loss series for the selected stores."""
        self._check_window(start_date, end_date)
        stores = self._select_stores(store_ids)
        transactions = self._load_classified(None, end_date)
        return monthly_profit_loss(
            self._in_scope(transactions, stores, start_date, end_date),
            start_date,
            end_date,
        )

    def store_comparison(
        self,
        start_date: date,
        end_date: date,
        store_ids: Sequence[str] | None = None,
    ) -> CompanySummary:
        """
        Company overview with one summary per store.

        Store summaries are independent, so they are computed on a thread
        pool and collected in store order.
        """
        self._check_window(start_date, end_date)
        stores = self._select_stores(store_ids)
        transactions = self._load_classified(None, end_date)
        in_window = filter_by_date_range(transactions, start_date, end_date)

        def _summarize(store: Store) -> StoreSummary:
            own = [t for t in in_window if t.store_id == store.id]
            return summarize_store(store, own)

        with ThreadPoolExecutor(max_workers=self._config.max_workers) as executor:
            # Each task runs in a copy of the caller's context so log fields follow
            futures = [
                executor.submit(contextvars.copy_context().run, _summarize, store)
                for store in stores
            ]
            summaries = [f.result() for f in futures]

        summary = summarize_company(
            transactions,
            stores,
            start_date,
            end_date,
            store_summaries=summaries,
            include_unassigned=self._config.include_unassigned_transactions,
        )

        logger.info(
            "store_comparison_generated",
            extra={
                "store_count": summary.store_count,
                "active_store_count": summary.active_store_count,
                "net_profit": summary.net_profit,
            },
        )
        return summary

    def window(
        self,
        period: PeriodType | str,
        custom_start: date | None = None,
        custom_end: date | None = None,
    ) -> DateRange:
        """Calendar bounds of a named period, relative to the service clock."""
        return resolve_period(period, self._clock, custom_start, custom_end)

    def validated_window(
        self,
        store_id: str,
        requested_start: date | None = None,
        requested_end: date | None = None,
    ) -> DateRangeValidation:
        """Check a requested window against a store's opening date."""
        (store,) = self._select_stores([store_id])
        return validate_date_range(
            requested_start, requested_end, store.initial_balance_date, self._clock,
        )
