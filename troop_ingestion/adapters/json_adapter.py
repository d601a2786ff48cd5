"""
JSON source adapter for ledger-platform API dumps (Smart Cookie).

Handles a JSON array (file is [{...}, {...}, ...]), an array nested under
a dot-separated ``json_path`` (e.g. ``"orders"``), and JSON Lines (one
object per line).  Keys are kept exactly as the platform sends them:
``cookieId`` and ``cookie_id`` are different fields upstream.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

from troop_ingestion.adapters.base import SourceProbe


def _get_nested(data: Any, path: str) -> Any:
    """Follow dot-separated path into dict/list. Returns None if key missing."""
    if not path.strip():
        return data
    for key in path.split("."):
        key = key.strip()
        if not key:
            continue
        if isinstance(data, list):
            try:
                data = data[int(key)]
            except (ValueError, IndexError):
                return None
        elif isinstance(data, dict) and key in data:
            data = data[key]
        else:
            return None
    return data


def _all_keys(rows: list[dict[str, Any]]) -> tuple[str, ...]:
    """Union of keys from first 5 rows for column list."""
    seen: set[str] = set()
    for row in rows[:5]:
        seen.update(row.keys())
    return tuple(sorted(seen))


def load_json_document(source_path: Path, encoding: str = "utf-8") -> Any:
    """Parse a whole JSON file (e.g. the allocations bundle object)."""
    with source_path.open("r", encoding=encoding) as f:
        return json.load(f)


class JsonSourceAdapter:
    """Read JSON array or JSON Lines files as one dict per record."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        fmt = options.get("format", "array")
        json_path = options.get("json_path")
        encoding = options.get("encoding", "utf-8")

        if fmt == "jsonl":
            with source_path.open("r", encoding=encoding) as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    item = json.loads(line)
                    if isinstance(item, dict):
                        yield item
            return

        data = load_json_document(source_path, encoding)
        root = _get_nested(data, json_path) if json_path else data
        if not isinstance(root, list):
            return
        for item in root:
            if isinstance(item, dict):
                yield item

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        rows = list(self.read(source_path, options))
        sample = rows[:5]
        return SourceProbe(
            row_count=len(rows),
            columns=_all_keys(sample) if sample else (),
            sample_rows=tuple(sample),
            encoding=options.get("encoding", "utf-8"),
        )
