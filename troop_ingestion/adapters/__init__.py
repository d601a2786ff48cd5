"""Source adapters for platform exports (file I/O only)."""

from troop_ingestion.adapters.base import SourceAdapter, SourceProbe
from troop_ingestion.adapters.json_adapter import JsonSourceAdapter, load_json_document
from troop_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter

__all__ = [
    "SourceAdapter",
    "SourceProbe",
    "JsonSourceAdapter",
    "XlsxSourceAdapter",
    "load_json_document",
]
