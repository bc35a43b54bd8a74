"""
Pytest fixtures for the cashbook statement test suite.

Provides:
- Structured logging configured once per session, with per-test capture
- A deterministic clock and default statement configuration
- An in-memory record source for the statement service
"""

import json
import logging
from datetime import date
from io import StringIO
from typing import Sequence

import pytest

from cashbook_config import get_fallback_table
from cashbook_kernel.domain.clock import DeterministicClock
from cashbook_kernel.domain.records import Category, Store, Transaction
from cashbook_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from cashbook_reporting.config import StatementConfig


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture cashbook logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            calculate_cash_flow([])
            logs = captured_logs()
            assert any(r["message"] == "CASHBOOK_ENGINE_TRACE" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("cashbook")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock and configuration
# =============================================================================


@pytest.fixture
def clock():
    """Clock fixed at 2025-01-15 12:00 UTC."""
    return DeterministicClock()


@pytest.fixture
def statement_config():
    return StatementConfig.with_defaults()


@pytest.fixture(scope="session")
def fallback_table():
    return get_fallback_table()


# =============================================================================
# Record source
# =============================================================================


class InMemoryRecordSource:
    """Record source backed by plain lists; counts every fetch."""

    def __init__(
        self,
        transactions: Sequence[Transaction] = (),
        stores: Sequence[Store] = (),
        categories: Sequence[Category] = (),
    ):
        self.transactions = list(transactions)
        self.stores = list(stores)
        self.categories = list(categories)
        self.fetch_count = 0

    def fetch_transactions(
        self,
        store_ids: Sequence[str] | None = None,
        end_date: date | None = None,
    ) -> list[Transaction]:
        self.fetch_count += 1
        return [
            t for t in self.transactions
            if (store_ids is None or t.store_id in store_ids)
            and (end_date is None or t.date <= end_date)
        ]

    def fetch_stores(self) -> list[Store]:
        return list(self.stores)

    def fetch_categories(self) -> list[Category]:
        return list(self.categories)


@pytest.fixture
def record_source():
    """Factory: ``record_source(transactions=..., stores=..., categories=...)``."""
    return InMemoryRecordSource
