"""
Configuration Loader (``cashbook_config.loader``).

Responsibility
--------------
Loads the fallback category table from YAML and parses it into the frozen
``cashbook_config.schema`` dataclasses.  Runtime callers go through
``cashbook_config.get_fallback_table()``; this module is the parsing layer.

Invariants enforced
-------------------
* Every ``(type, category)`` pair appears at most once.
* Activities must be one of ``operating``, ``investing``, ``financing``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  parsed YAML content.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Unknown activity  -> ``ValueError``.
* Duplicate entry  -> ``CategoryTableError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from cashbook_config.schema import FallbackCategoryTable, FallbackMapping
from cashbook_kernel.domain.records import CashFlowActivity, TransactionType
from cashbook_kernel.exceptions import CategoryTableError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_activity(value: Any) -> CashFlowActivity:
    """Parse a cash-flow activity, raising ``ValueError`` on unknown names."""
    try:
        return CashFlowActivity(value)
    except ValueError:
        raise ValueError(
            f"Unknown cash-flow activity {value!r}; expected one of "
            f"{[a.value for a in CashFlowActivity]}"
        ) from None


def parse_mapping(
    transaction_type: TransactionType, data: dict[str, Any],
) -> FallbackMapping:
    """Parse one ``{category, activity, label}`` entry."""
    category = data["category"]
    return FallbackMapping(
        transaction_type=transaction_type,
        category=category,
        activity=parse_activity(data["activity"]),
        label=data.get("label") or category,
    )


def parse_fallback_table(data: dict[str, Any]) -> FallbackCategoryTable:
    """
    Parse the whole table from a dict shaped like the YAML file.

    Entries keep file order: income first, then expense.
    """
    entries: list[FallbackMapping] = []
    seen: set[tuple[TransactionType, str]] = set()
    for tx_type in TransactionType:
        for raw in data.get(tx_type.value) or []:
            mapping = parse_mapping(tx_type, raw)
            key = (tx_type, mapping.category)
            if key in seen:
                raise CategoryTableError(
                    tx_type.value, mapping.category, "duplicate entry",
                )
            seen.add(key)
            entries.append(mapping)

    return FallbackCategoryTable(
        version=int(data.get("version", 1)),
        entries=tuple(entries),
        checksum=compute_checksum(data),
    )


def load_fallback_table(path: Path) -> FallbackCategoryTable:
    """Load and parse a fallback table YAML file."""
    return parse_fallback_table(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str, ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
