"""
Module: troop_ingestion
Responsibility:
    Read platform exports and API payloads, and fold them into an
    immutable ``ImportState`` for the reconciler.

Architecture position:
    Ingestion -- may import troop_kernel, troop_config and troop_engines.
    MUST NOT import troop_services.

Invariants enforced:
    - Importers are functional: they take an ``ImportState`` and return a
      new one.
    - File I/O happens only in ``troop_ingestion.adapters`` and
      ``troop_ingestion.sources``.

Usage:
    from troop_ingestion import ImportState, import_digital_cookie
    state = import_digital_cookie(ImportState(), rows, config=cfg, imported_at=now)
"""

from troop_ingestion.importers import (
    import_allocations,
    import_digital_cookie,
    import_smart_cookie_orders,
    parse_cookie_id_map,
)
from troop_ingestion.parsers import parse_varieties_from_api
from troop_ingestion.sources import adapter_for, read_json_payload, read_source_rows
from troop_ingestion.state import ImportState, register_scouts

__all__ = [
    "ImportState",
    "adapter_for",
    "import_allocations",
    "import_digital_cookie",
    "import_smart_cookie_orders",
    "parse_cookie_id_map",
    "parse_varieties_from_api",
    "read_json_payload",
    "read_source_rows",
    "register_scouts",
]
