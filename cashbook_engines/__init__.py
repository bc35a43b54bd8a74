"""
Module: cashbook_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    statement engines.  This is the canonical import surface for
    ``cashbook_reporting``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import cashbook_kernel and cashbook_config.schema.
    MUST NOT import cashbook_reporting.

Invariants enforced:
    - Purity: engines never read the clock.  Dates are passed in.
    - Decimal-only arithmetic.
    - Determinism: identical inputs produce equal outputs.

Failure modes:
    - None for well-typed input.  Ill-typed records are rejected when the
      records are constructed (``InvalidRecordError``), not here.

Audit relevance:
    Every engine entry point is traced via ``@traced_engine``, emitting
    CASHBOOK_ENGINE_TRACE log records with engine name, version, input
    fingerprint and duration.
"""

from cashbook_engines.balances import (
    resolve_beginning_balance,
    resolve_store_balance,
    roll_forward,
    store_history,
)
from cashbook_engines.cash_flow import (
    calculate_cash_flow,
    filter_by_date_range,
    net_change,
)
from cashbook_engines.classifier import CategoryIndex, classify, classify_all
from cashbook_engines.consolidation import (
    NEW_STORE_CAPITAL_CATEGORY,
    NEW_STORE_CAPITAL_LABEL,
    StoreRole,
    classify_store,
    consolidate,
)
from cashbook_engines.models import (
    ActivitySection,
    CashFlowStatement,
    CashFlowSummary,
    CategoryDetail,
    CategoryFlow,
    Classification,
    ClassificationSource,
    ClassifiedTransaction,
    CompanySummary,
    ConsolidatedCashFlowStatement,
    MonthlyProfitLoss,
    MonthPoint,
    NewStoreCapitalInvestment,
    ProfitLossSection,
    ProfitLossStatement,
    StoreBreakdown,
    StoreSummary,
)
from cashbook_engines.monthly import consolidated_monthly_series, monthly_series
from cashbook_engines.profit_loss import (
    ProfitLossBucket,
    bucket_of,
    calculate_profit_loss,
    monthly_profit_loss,
)
from cashbook_engines.store_summary import summarize_company, summarize_store
from cashbook_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Balances
    "resolve_beginning_balance",
    "resolve_store_balance",
    "roll_forward",
    "store_history",
    # Cash flow
    "calculate_cash_flow",
    "filter_by_date_range",
    "net_change",
    # Classifier
    "CategoryIndex",
    "classify",
    "classify_all",
    # Consolidation
    "NEW_STORE_CAPITAL_CATEGORY",
    "NEW_STORE_CAPITAL_LABEL",
    "StoreRole",
    "classify_store",
    "consolidate",
    # Models
    "ActivitySection",
    "CashFlowStatement",
    "CashFlowSummary",
    "CategoryDetail",
    "CategoryFlow",
    "Classification",
    "ClassificationSource",
    "ClassifiedTransaction",
    "CompanySummary",
    "ConsolidatedCashFlowStatement",
    "MonthlyProfitLoss",
    "MonthPoint",
    "NewStoreCapitalInvestment",
    "ProfitLossSection",
    "ProfitLossStatement",
    "StoreBreakdown",
    "StoreSummary",
    # Monthly
    "consolidated_monthly_series",
    "monthly_series",
    # Profit and loss
    "ProfitLossBucket",
    "bucket_of",
    "calculate_profit_loss",
    "monthly_profit_loss",
    # Store summary
    "summarize_company",
    "summarize_store",
    # Tracer
    "compute_input_fingerprint",
    "traced_engine",
]
