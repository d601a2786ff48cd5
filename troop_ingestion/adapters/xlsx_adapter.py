"""
XLSX source adapter for retail-platform order exports (Digital Cookie).

Supports flexible layout:
  - sheet by index (0-based) or name
  - header row by index or auto-detect (scans first N rows for order-export column names)
  - skip_rows before header
  - normalizes cell values (strip, blank->empty string, integral floats->int)

Date cells are returned as ``datetime`` objects and numeric date cells as
numbers; ``troop_kernel.domain.raw.parse_excel_date`` accepts both.

Auto-detect looks for a row containing at least 2 of the export's column
names (order number, girl first name, order type, payment status, ...).
"""

from __future__ import annotations

import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterator

import openpyxl

from troop_ingestion.adapters.base import SourceProbe

# Order-export column keywords (normalized: strip, lower); row with >=2 matches is header candidate
_HEADER_KEYWORDS = frozenset({
    "order number", "girl first name", "girl last name",
    "order date (central time)", "order date", "order type",
    "total packages (includes donate & gift)", "refunded packages",
    "current sale amount", "order status", "payment status",
    "ship status", "donation",
})

_MAX_ROWS = 100_000


def _normalize_header_cell(value: Any) -> str:
    """Normalize a cell value for header matching or key use."""
    if value is None:
        return ""
    s = str(value).strip()
    s = re.sub(r"\s+", " ", s).strip()
    return s


def _cell_value(row: Any, col_idx: int) -> Any:
    """Get cell value from openpyxl row (0-based column index)."""
    try:
        cell = row[col_idx]
    except (IndexError, TypeError):
        return ""
    if cell is None:
        return ""
    v = cell.value
    if v is None:
        return ""
    if isinstance(v, bool):
        return v
    if isinstance(v, float):
        if v == int(v):
            return int(v)
        return v
    if isinstance(v, (int, datetime, date)):
        return v
    return str(v).strip()


def _row_to_keywords(row: Any, max_cols: int = 60) -> set[str]:
    """Extract normalized keywords from a row for header scoring."""
    keywords = set()
    for c in range(max_cols):
        v = _cell_value(row, c)
        if not isinstance(v, str) or not v:
            continue
        v_lower = _normalize_header_cell(v).lower()
        if v_lower in _HEADER_KEYWORDS:
            keywords.add(v_lower)
    return keywords


def _detect_header_row(rows: list, max_search: int = 15, min_keywords: int = 2) -> int:
    """Return 0-based row index of the first row that looks like an export header."""
    for i, row in enumerate(rows[:max_search]):
        if len(_row_to_keywords(row)) >= min_keywords:
            return i
    return 0


def _column_count(row: Any) -> int:
    """Number of cells up to the last non-empty one."""
    n = 0
    for c in range(len(row)):
        v = _cell_value(row, c)
        if v != "" and v is not None:
            n = c + 1
    return max(n, 1)


def _headers(header_row: Any) -> list[str]:
    ncols = _column_count(header_row)
    headers: list[str] = []
    for c in range(ncols):
        key = _normalize_header_cell(_cell_value(header_row, c)) or f"Column_{c+1}"
        base = key
        cnt = 0
        while key in headers:
            cnt += 1
            key = f"{base}_{cnt}"
        headers.append(key)
    return headers


class XlsxSourceAdapter:
    """
    Read .xlsx files as one dict per row, keyed by the header row.

    source_options:
      sheet: 0-based sheet index (int) or sheet name (str). Default: active sheet.
      skip_rows: number of rows to skip at top of sheet before header/data. Default: 0.
      header_row: 0-based row index (within the sheet after skip_rows) to use as header.
      auto_detect_header: if true (default), scan first 15 rows to find a header row;
        if false, use header_row or row 0.
    """

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        wb = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
        try:
            rows = self._rows(wb, options, _MAX_ROWS)
            if not rows:
                return
            hi = self._header_index(rows, options)
            headers = _headers(rows[hi])
            for row in rows[hi + 1 :]:
                vals = [_cell_value(row, c) for c in range(len(headers))]
                if not any(v != "" and v is not None for v in vals):
                    continue
                yield dict(zip(headers, vals))
        finally:
            wb.close()

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        wb = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
        try:
            rows = self._rows(wb, options, 500)
            if not rows:
                return SourceProbe(row_count=0, columns=(), sample_rows=())
            hi = self._header_index(rows, options)
            headers = _headers(rows[hi])
            sample = []
            for row in rows[hi + 1 : hi + 6]:
                vals = [_cell_value(row, c) for c in range(len(headers))]
                if not any(v != "" and v is not None for v in vals):
                    continue
                sample.append(dict(zip(headers, vals)))
            return SourceProbe(
                row_count=len(rows) - hi - 1,
                columns=tuple(headers),
                sample_rows=tuple(sample),
            )
        finally:
            wb.close()

    def _rows(self, wb: Any, options: dict[str, Any], max_row: int) -> list:
        sheet = self._get_sheet(wb, options)
        skip_rows = int(options.get("skip_rows", 0))
        return list(sheet.iter_rows(min_row=1 + skip_rows, max_row=max_row))

    def _header_index(self, rows: list, options: dict[str, Any]) -> int:
        header_row_idx = options.get("header_row")
        auto_detect = options.get("auto_detect_header", True)
        if header_row_idx is not None and not auto_detect:
            return int(header_row_idx)
        if auto_detect:
            return _detect_header_row(rows)
        return 0

    def _get_sheet(self, wb: Any, options: dict[str, Any]) -> Any:
        sheet_ref = options.get("sheet")
        if sheet_ref is None:
            return wb.active
        if isinstance(sheet_ref, int):
            return wb.worksheets[sheet_ref]
        return wb[sheet_ref]
