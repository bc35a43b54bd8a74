"""
Statement Reporting (``cashbook_reporting``).

Responsibility
--------------
Read-only layer that turns a company's records into statements: the
single-store and consolidated cash-flow statements, the profit-and-loss
statement, monthly series and the store comparison, plus their export to
delimited text and plain dicts.

Architecture position
---------------------
**Reporting layer** -- orchestration only.  All statement arithmetic
lives in ``cashbook_engines``; this package fetches records, resolves
reporting windows and hands the engines their inputs.

Invariants enforced
-------------------
* No records are created or changed by this package.
* Statements are computed fresh on every call and never persisted.

Failure modes
-------------
* Invalid window -> ``InvalidDateRangeError``.
* Invalid configuration -> ``ValueError`` from ``StatementConfig``.
"""

from cashbook_reporting.config import StatementConfig
from cashbook_reporting.date_range import (
    DateRange,
    DateRangeValidation,
    PeriodType,
    resolve_period,
    validate_date_range,
)
from cashbook_reporting.export import (
    export_cash_flow_csv,
    export_monthly_series_csv,
    export_profit_loss_csv,
)
from cashbook_reporting.render import render_to_dict
from cashbook_reporting.service import RecordSource, StatementService

__all__ = [
    "StatementConfig",
    "DateRange",
    "DateRangeValidation",
    "PeriodType",
    "resolve_period",
    "validate_date_range",
    "export_cash_flow_csv",
    "export_monthly_series_csv",
    "export_profit_loss_csv",
    "render_to_dict",
    "RecordSource",
    "StatementService",
]
