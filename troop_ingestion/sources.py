"""
File-level entry points: pick an adapter by suffix and read records.

The retail platform exports spreadsheets; the ledger platform payloads are
saved as JSON.  Everything downstream of this module works on mappings.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from troop_ingestion.adapters import (
    JsonSourceAdapter,
    SourceAdapter,
    XlsxSourceAdapter,
    load_json_document,
)
from troop_kernel.exceptions import UnsupportedSourceError
from troop_kernel.logging_config import get_logger

logger = get_logger("ingestion.sources")

DEFAULT_ADAPTERS: Mapping[str, SourceAdapter] = {
    ".xlsx": XlsxSourceAdapter(),
    ".xlsm": XlsxSourceAdapter(),
    ".json": JsonSourceAdapter(),
    ".jsonl": JsonSourceAdapter(),
}


def adapter_for(
    path: Path,
    adapters: Mapping[str, SourceAdapter] | None = None,
) -> SourceAdapter:
    adapters = DEFAULT_ADAPTERS if adapters is None else adapters
    suffix = path.suffix.lower()
    adapter = adapters.get(suffix)
    if adapter is None:
        raise UnsupportedSourceError(str(path), suffix)
    return adapter


def read_source_rows(
    path: str | Path,
    options: dict[str, Any] | None = None,
    adapters: Mapping[str, SourceAdapter] | None = None,
) -> list[dict[str, Any]]:
    """Read every record of a source file into memory."""
    path = Path(path)
    options = dict(options or {})
    if path.suffix.lower() == ".jsonl":
        options.setdefault("format", "jsonl")
    rows = list(adapter_for(path, adapters).read(path, options))
    logger.info(
        "source_rows_read",
        extra={"path": str(path), "rows": len(rows)},
    )
    return rows


def read_json_payload(path: str | Path) -> Any:
    """Whole-document read for payloads that are objects, not record lists."""
    path = Path(path)
    if path.suffix.lower() != ".json":
        raise UnsupportedSourceError(str(path), path.suffix.lower())
    return load_json_document(path)
