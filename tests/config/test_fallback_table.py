"""
Tests for the fallback category table loader.

Covers:
- The built-in table's contents
- Parsing and validation failures
- Checksum determinism and the config trace log
"""

import pytest
import yaml

from cashbook_config import DEFAULT_TABLE_PATH, get_fallback_table
from cashbook_config.loader import (
    compute_checksum,
    load_fallback_table,
    parse_activity,
    parse_fallback_table,
)
from cashbook_kernel.domain.records import CashFlowActivity, TransactionType
from cashbook_kernel.exceptions import CategoryTableError


class TestBuiltInTable:

    def test_loads(self):
        table = get_fallback_table()

        assert table.version == 1
        assert len(table) == 22
        assert table.checksum

    @pytest.mark.parametrize(
        ("tx_type", "category", "activity"),
        [
            (TransactionType.INCOME, "房费收入", CashFlowActivity.OPERATING),
            (TransactionType.INCOME, "资产处置收入", CashFlowActivity.INVESTING),
            (TransactionType.INCOME, "股东投资", CashFlowActivity.FINANCING),
            (TransactionType.EXPENSE, "装修改造", CashFlowActivity.INVESTING),
            (TransactionType.EXPENSE, "偿还贷款", CashFlowActivity.FINANCING),
            (TransactionType.EXPENSE, "租金", CashFlowActivity.OPERATING),
        ],
    )
    def test_mappings(self, tx_type, category, activity):
        assert get_fallback_table().lookup(tx_type, category).activity == activity

    def test_lookup_is_type_scoped(self):
        assert get_fallback_table().lookup(TransactionType.EXPENSE, "房费收入") is None

    def test_config_trace_logged(self, captured_logs):
        table = get_fallback_table()

        (record,) = [r for r in captured_logs() if r["message"] == "CASHBOOK_CONFIG_TRACE"]
        assert record["checksum"] == table.checksum
        assert record["entry_count"] == len(table)
        assert record["table_path"] == str(DEFAULT_TABLE_PATH)


class TestParsing:

    def test_label_defaults_to_category(self):
        table = parse_fallback_table({
            "income": [{"category": "租金收入", "activity": "operating"}],
        })

        assert table.lookup(TransactionType.INCOME, "租金收入").label == "租金收入"

    def test_duplicate_entry_rejected(self):
        data = {
            "expense": [
                {"category": "租金", "activity": "operating"},
                {"category": "租金", "activity": "investing"},
            ],
        }

        with pytest.raises(CategoryTableError) as exc_info:
            parse_fallback_table(data)

        assert exc_info.value.code == "CATEGORY_TABLE_ERROR"

    def test_same_name_in_both_types_allowed(self):
        table = parse_fallback_table({
            "income": [{"category": "其他", "activity": "operating"}],
            "expense": [{"category": "其他", "activity": "operating"}],
        })

        assert len(table) == 2

    def test_unknown_activity(self):
        with pytest.raises(ValueError, match="Unknown cash-flow activity"):
            parse_activity("speculative")

    def test_missing_key(self):
        with pytest.raises(KeyError):
            parse_fallback_table({"income": [{"activity": "operating"}]})


class TestFiles:

    def test_custom_path(self, tmp_path):
        path = tmp_path / "table.yaml"
        path.write_text(
            "version: 3\nincome:\n  - category: 会员费\n    activity: operating\n",
            encoding="utf-8",
        )

        table = get_fallback_table(path)

        assert table.version == 3
        assert len(table) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_fallback_table(tmp_path / "absent.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("income: [unclosed", encoding="utf-8")

        with pytest.raises(yaml.YAMLError):
            load_fallback_table(path)

    def test_empty_file_gives_empty_table(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert len(load_fallback_table(path)) == 0


class TestChecksum:

    def test_deterministic_and_order_independent(self):
        a = {"version": 1, "income": []}
        b = {"income": [], "version": 1}

        assert compute_checksum(a) == compute_checksum(b)

    def test_changes_with_content(self):
        assert compute_checksum({"version": 1}) != compute_checksum({"version": 2})
