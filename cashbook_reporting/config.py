"""
Statement Configuration Schema.

Display labels, new-store capital naming, scope of consolidated
statements and export formatting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Self

from cashbook_engines.consolidation import (
    NEW_STORE_CAPITAL_CATEGORY,
    NEW_STORE_CAPITAL_LABEL,
)
from cashbook_kernel.domain.records import CashFlowActivity
from cashbook_kernel.logging_config import get_logger

logger = get_logger("reporting.config")


def _default_activity_labels() -> dict[str, str]:
    return {
        CashFlowActivity.OPERATING.value: "经营活动",
        CashFlowActivity.INVESTING.value: "投资活动",
        CashFlowActivity.FINANCING.value: "筹资活动",
    }


@dataclass
class StatementConfig:
    """
    Configuration schema for statement generation.

    ``include_unassigned_transactions`` controls whether company-level
    transactions (no store) join consolidated statements.
    """

    # Section headings, keyed by activity value
    activity_labels: dict[str, str] = field(default_factory=_default_activity_labels)

    # Financing row that carries new-store opening capital
    new_store_capital_category: str = NEW_STORE_CAPITAL_CATEGORY
    new_store_capital_label: str = NEW_STORE_CAPITAL_LABEL

    include_unassigned_transactions: bool = False

    # Thread pool size for per-store summaries
    max_workers: int = 4

    csv_delimiter: str = ","

    # None -> built-in table
    fallback_table_path: Path | None = None

    def __post_init__(self):
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if len(self.csv_delimiter) != 1:
            raise ValueError("csv_delimiter must be a single character")
        if not self.new_store_capital_category:
            raise ValueError("new_store_capital_category cannot be empty")
        unknown = set(self.activity_labels) - {a.value for a in CashFlowActivity}
        if unknown:
            raise ValueError(f"Unknown activities in activity_labels: {sorted(unknown)}")
        if self.fallback_table_path is not None:
            self.fallback_table_path = Path(self.fallback_table_path)

    def label_for(self, activity: CashFlowActivity) -> str:
        activity = CashFlowActivity(activity)
        return self.activity_labels.get(activity.value, activity.value)

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("statement_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from dictionary."""
        data = dict(data)
        if "activity_labels" in data:
            data["activity_labels"] = {
                **_default_activity_labels(), **data["activity_labels"],
            }
        logger.info(
            "statement_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
