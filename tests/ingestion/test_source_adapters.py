"""
Tests for the file adapters and source entry points.

Covers:
- XLSX export read with header auto-detection and blank-row skipping
- JSON arrays, nested json_path and JSON Lines
- Adapter selection by suffix; UnsupportedSourceError
- Whole-document JSON payload reads
"""

import json
from datetime import datetime

import openpyxl
import pytest

from troop_ingestion import adapter_for, read_json_payload, read_source_rows
from troop_ingestion.adapters import JsonSourceAdapter, XlsxSourceAdapter
from troop_kernel.domain.raw import DCColumns, DigitalCookieRow
from troop_kernel.exceptions import UnsupportedSourceError

_HEADERS = [
    DCColumns.ORDER_NUMBER,
    DCColumns.GIRL_FIRST_NAME,
    DCColumns.GIRL_LAST_NAME,
    DCColumns.ORDER_DATE,
    DCColumns.ORDER_TYPE,
    DCColumns.TOTAL_PACKAGES,
    "Thin Mints",
    DCColumns.CURRENT_SALE_AMOUNT,
    DCColumns.PAYMENT_STATUS,
]


def _write_export(path, rows, preamble=()):
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    for line in preamble:
        sheet.append(line)
    sheet.append(_HEADERS)
    for row in rows:
        sheet.append(row)
    workbook.save(path)
    return path


class TestXlsxAdapter:
    """Retail spreadsheet exports."""

    def test_reads_rows_after_detected_header(self, tmp_path, registry):
        path = _write_export(
            tmp_path / "orders.xlsx",
            [
                [1001, "Alice", "Smith", datetime(2025, 2, 1), "In-Person Delivery", 3.0, 3, "$18.00", "CASH"],
                [None] * len(_HEADERS),
                [1002, "Bea", "Jones", datetime(2025, 2, 2), "Shipped", 2, 2, "$12.00", "CAPTURED"],
            ],
            preamble=[["Troop 123 Order Export"], []],
        )
        rows = read_source_rows(path)
        assert len(rows) == 2
        assert rows[0][DCColumns.ORDER_NUMBER] == 1001
        assert rows[0][DCColumns.TOTAL_PACKAGES] == 3
        assert isinstance(rows[0][DCColumns.TOTAL_PACKAGES], int)

        parsed = DigitalCookieRow.from_export(rows[0], registry.dc_columns)
        assert parsed.order_number == "1001"
        assert parsed.scout_name == "Alice Smith"
        assert parsed.order_date == "2025-02-01T00:00:00"
        assert parsed.varieties == {"THIN_MINTS": 3}

    def test_probe(self, tmp_path):
        path = _write_export(
            tmp_path / "orders.xlsx",
            [[1001, "Alice", "Smith", "", "Donation", 1, 0, "$6.00", "CASH"]],
        )
        probe = XlsxSourceAdapter().probe(path, {})
        assert probe.row_count == 1
        assert probe.columns[0] == DCColumns.ORDER_NUMBER
        assert probe.sample_rows[0][DCColumns.GIRL_FIRST_NAME] == "Alice"

    def test_explicit_header_row(self, tmp_path):
        path = _write_export(
            tmp_path / "orders.xlsx",
            [[1001, "Alice", "Smith", "", "Donation", 1, 0, "$6.00", "CASH"]],
            preamble=[["ignored"]],
        )
        rows = read_source_rows(path, {"header_row": 1, "auto_detect_header": False})
        assert rows[0][DCColumns.GIRL_LAST_NAME] == "Smith"


class TestJsonAdapter:
    """Ledger payload dumps."""

    def test_array(self, tmp_path):
        path = tmp_path / "orders.json"
        path.write_text(json.dumps([{"order_number": "T-1"}, "skip", {"order_number": "T-2"}]))
        rows = read_source_rows(path)
        assert [r["order_number"] for r in rows] == ["T-1", "T-2"]

    def test_nested_path(self, tmp_path):
        path = tmp_path / "orders.json"
        path.write_text(json.dumps({"data": {"orders": [{"order_number": "T-1"}]}}))
        rows = read_source_rows(path, {"json_path": "data.orders"})
        assert rows == [{"order_number": "T-1"}]

    def test_object_without_path_yields_nothing(self, tmp_path):
        path = tmp_path / "orders.json"
        path.write_text(json.dumps({"orders": []}))
        assert read_source_rows(path) == []

    def test_json_lines(self, tmp_path):
        path = tmp_path / "orders.jsonl"
        path.write_text('{"order_number": "T-1"}\n\n{"order_number": "T-2"}\n')
        rows = read_source_rows(path)
        assert len(rows) == 2

    def test_probe(self, tmp_path):
        path = tmp_path / "orders.json"
        path.write_text(json.dumps([{"b": 1, "a": 2}]))
        probe = JsonSourceAdapter().probe(path, {})
        assert probe.row_count == 1
        assert probe.columns == ("a", "b")


class TestSources:
    """Suffix dispatch and whole-document reads."""

    def test_adapter_for(self, tmp_path):
        assert isinstance(adapter_for(tmp_path / "x.XLSX"), XlsxSourceAdapter)
        assert isinstance(adapter_for(tmp_path / "x.json"), JsonSourceAdapter)

    def test_unsupported_suffix(self, tmp_path):
        with pytest.raises(UnsupportedSourceError) as exc_info:
            read_source_rows(tmp_path / "orders.csv")
        assert exc_info.value.suffix == ".csv"

    def test_read_json_payload(self, tmp_path):
        path = tmp_path / "allocations.json"
        path.write_text(json.dumps({"cookieIdMap": {"4": "THIN_MINTS"}}))
        assert read_json_payload(path) == {"cookieIdMap": {"4": "THIN_MINTS"}}

    def test_read_json_payload_rejects_lines(self, tmp_path):
        with pytest.raises(UnsupportedSourceError):
            read_json_payload(tmp_path / "allocations.jsonl")

    def test_read_logged(self, tmp_path, captured_logs):
        path = tmp_path / "orders.json"
        path.write_text("[]")
        read_source_rows(path)
        entries = [r for r in captured_logs() if r["message"] == "source_rows_read"]
        assert entries[0]["rows"] == 0
