"""
Reporting windows (``cashbook_reporting.date_range``).

Responsibility
--------------
Turn a named period into calendar bounds, and check a requested window
against a store's book-opening date before statements are built.

Invariants enforced
-------------------
* "Today" always comes from the injected ``Clock``.
* A start earlier than the opening date is clamped to the opening date,
  and the adjustment is reported rather than applied silently.
* An end before the start raises ``InvalidDateRangeError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from cashbook_kernel.domain.calendar import first_day_of_month, last_day_of_month
from cashbook_kernel.domain.clock import Clock
from cashbook_kernel.exceptions import InvalidDateRangeError
from cashbook_kernel.logging_config import get_logger

logger = get_logger("reporting.date_range")


class PeriodType(str, Enum):
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
    CUSTOM = "custom"


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date


@dataclass(frozen=True)
class DateRangeValidation:
    """Outcome of validating a requested window."""

    start: date
    end: date
    initial_balance_date: date | None
    date_adjusted: bool = False
    original_start: date | None = None
    adjustment_reason: str | None = None


def resolve_period(
    period: PeriodType | str,
    clock: Clock,
    custom_start: date | None = None,
    custom_end: date | None = None,
) -> DateRange:
    """
    Calendar bounds of the current month, quarter or year.

    ``custom`` requires both bounds and returns them unchanged (after the
    end-before-start check).
    """
    period = PeriodType(period)
    today = clock.today()

    if period == PeriodType.MONTH:
        return DateRange(first_day_of_month(today), last_day_of_month(today))
    if period == PeriodType.QUARTER:
        first_month = (today.month - 1) // 3 * 3 + 1
        start = date(today.year, first_month, 1)
        end = last_day_of_month(date(today.year, first_month + 2, 1))
        return DateRange(start, end)
    if period == PeriodType.YEAR:
        return DateRange(date(today.year, 1, 1), date(today.year, 12, 31))

    if custom_start is None or custom_end is None:
        raise InvalidDateRangeError(
            "custom period requires both start and end dates",
            custom_start,
            custom_end,
        )
    if custom_end < custom_start:
        raise InvalidDateRangeError(
            "end date precedes start date", custom_start, custom_end,
        )
    return DateRange(custom_start, custom_end)


def validate_date_range(
    requested_start: date | None,
    requested_end: date | None,
    opening_date: date | None,
    clock: Clock,
) -> DateRangeValidation:
    """
    Validate a window against a store's opening date.

    Missing bounds default to the first day of the current month and today.
    """
    today = clock.today()
    start = requested_start or first_day_of_month(today)
    end = requested_end or today

    if end < start:
        raise InvalidDateRangeError("end date precedes start date", start, end)

    if opening_date is not None and start < opening_date:
        reason = (
            f"start date {start.isoformat()} is before the opening date "
            f"{opening_date.isoformat()}; adjusted to the opening date"
        )
        logger.warning(
            "date_range_adjusted",
            extra={
                "original_start": start,
                "adjusted_start": opening_date,
                "opening_date": opening_date,
            },
        )
        if end < opening_date:
            raise InvalidDateRangeError(
                "window ends before the opening date", opening_date, end,
            )
        return DateRangeValidation(
            start=opening_date,
            end=end,
            initial_balance_date=opening_date,
            date_adjusted=True,
            original_start=start,
            adjustment_reason=reason,
        )

    return DateRangeValidation(
        start=start,
        end=end,
        initial_balance_date=opening_date,
    )
