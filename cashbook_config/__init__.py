"""
cashbook_config -- single public entrypoint for the fallback category table.

Responsibility:
    Provides the ONLY way to obtain the built-in category -> activity
    mapping at runtime through ``get_fallback_table()``.  YAML parsing lives
    in ``cashbook_config.loader``.

Architecture position:
    Configuration -- sits above ``cashbook_kernel`` and below
    ``cashbook_engines`` / ``cashbook_reporting``.  The engine receives the
    parsed table as an argument; it never reads configuration itself.

Failure modes:
    - ``FileNotFoundError`` -- the requested YAML file does not exist.
    - ``yaml.YAMLError`` / ``KeyError`` / ``ValueError`` -- malformed table.
    - ``CategoryTableError`` -- duplicate ``(type, category)`` entries.

Audit relevance:
    Every call emits a ``CASHBOOK_CONFIG_TRACE`` log entry with the table
    checksum, so any statement can be traced back to the exact mapping that
    classified its legacy transactions.
"""

from __future__ import annotations

import logging
from pathlib import Path

from cashbook_config.loader import load_fallback_table
from cashbook_config.schema import FallbackCategoryTable, FallbackMapping

_logger = logging.getLogger("cashbook.config")

DEFAULT_TABLE_PATH = Path(__file__).parent / "defaults" / "fallback_categories.yaml"


def get_fallback_table(path: Path | None = None) -> FallbackCategoryTable:
    """
    Load the fallback category table.

    Args:
        path: Override path to a YAML table.  Defaults to the built-in
            ``defaults/fallback_categories.yaml``.

    Returns:
        A frozen ``FallbackCategoryTable``.  Not cached: callers hold the
        returned table for as long as they need it.
    """
    table_path = path or DEFAULT_TABLE_PATH
    table = load_fallback_table(table_path)

    _logger.info(
        "CASHBOOK_CONFIG_TRACE",
        extra={
            "trace_type": "CASHBOOK_CONFIG_TRACE",
            "table_path": str(table_path),
            "table_version": table.version,
            "checksum": table.checksum,
            "entry_count": len(table),
        },
    )
    return table


__all__ = [
    "DEFAULT_TABLE_PATH",
    "FallbackCategoryTable",
    "FallbackMapping",
    "get_fallback_table",
]
