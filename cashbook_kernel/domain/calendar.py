"""Calendar-month helpers shared by the monthly series and date-range code."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta


@dataclass(frozen=True)
class MonthSpan:
    """One calendar month: its ``YYYY-MM`` key and first/last day."""

    key: str
    first_day: date
    last_day: date


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def first_day_of_month(day: date) -> date:
    return day.replace(day=1)


def last_day_of_month(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def day_before(day: date) -> date:
    return day - timedelta(days=1)


def month_span(day: date) -> MonthSpan:
    return MonthSpan(
        key=month_key(day),
        first_day=first_day_of_month(day),
        last_day=last_day_of_month(day),
    )


def months_between(start: date, end: date) -> tuple[MonthSpan, ...]:
    """
    Every calendar month touched by ``[start, end]``, in order.

    Returns an empty tuple when ``end`` precedes ``start``.
    """
    if end < start:
        return ()
    spans: list[MonthSpan] = []
    current = first_day_of_month(start)
    while current <= end:
        spans.append(month_span(current))
        current = last_day_of_month(current) + timedelta(days=1)
    return tuple(spans)


def in_range(day: date, start: date, end: date) -> bool:
    """Inclusive on both ends."""
    return start <= day <= end
