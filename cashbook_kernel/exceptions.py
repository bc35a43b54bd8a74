"""
Typed Exception Hierarchy for the Cashbook Statement Engine.

The engine itself never raises for well-typed input: every lookup has an
explicit fallback and every arithmetic path is defined over the full domain
(negative balances included).  Exceptions therefore only surface at the
edges -- when a record is ill-typed, when a caller hands in an impossible
date range, or when the fallback category table is inconsistent.

    CashbookError (base)
    |
    +-- InvalidRecordError        INVALID_RECORD
    +-- InvalidDateRangeError     INVALID_DATE_RANGE
    +-- CategoryTableError        CATEGORY_TABLE_ERROR

Every class carries a static ``code`` and stores its context as attributes,
so callers catch by type and report by code, never by message text.
"""

from __future__ import annotations

from datetime import date
from typing import Any


class CashbookError(Exception):
    """Base exception for all cashbook errors."""

    code: str = "CASHBOOK_ERROR"


class InvalidRecordError(CashbookError):
    """A transaction, store or category record is ill-typed."""

    code: str = "INVALID_RECORD"

    def __init__(self, record_type: str, field: str, value: Any, reason: str):
        self.record_type = record_type
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(
            f"Invalid {record_type}.{field}={value!r}: {reason}"
        )


class InvalidDateRangeError(CashbookError):
    """A requested reporting window cannot be satisfied."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(
        self,
        reason: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ):
        self.reason = reason
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Invalid date range {start_date} .. {end_date}: {reason}"
        )


class CategoryTableError(CashbookError):
    """The fallback category table is internally inconsistent."""

    code: str = "CATEGORY_TABLE_ERROR"

    def __init__(self, transaction_type: str, category: str, reason: str):
        self.transaction_type = transaction_type
        self.category = category
        self.reason = reason
        super().__init__(
            f"Fallback table entry ({transaction_type}, {category}): {reason}"
        )
