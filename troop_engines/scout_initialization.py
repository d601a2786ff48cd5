"""
troop_engines.scout_initialization -- the per-pass scout entity set.

Responsibility:
    Build a fresh ``Scout`` for every identity seen in either source: the
    retail export's first/last names and the ledger platform's scout
    records.  The site pseudo-scout is created from rows whose last name
    is the site sentinel.

Architecture position:
    Engines -- pure, zero I/O.  First step of every reconciliation pass.

Invariants enforced:
    - Scouts are keyed by exact full name; insertion order is retail rows
      first, then ledger-only scouts, so the result is deterministic.
    - A ledger girl id is backfilled onto a scout first seen in the
      retail export when that scout has no id yet.
    - Rows with an empty name create no scout.
"""

from __future__ import annotations

from collections.abc import Iterable

from troop_engines.tracer import traced_engine
from troop_kernel.domain.entities import Scout
from troop_kernel.domain.raw import DigitalCookieRow, ScoutRecord
from troop_kernel.logging_config import get_logger

logger = get_logger("engines.scout_initialization")


def _split_name(name: str) -> tuple[str, str]:
    """Split on the last space: ``"Mary Jane Doe"`` -> ``("Mary Jane", "Doe")``."""
    first, _, last = name.rpartition(" ")
    return first, last


@traced_engine("scout_initialization", "1.0")
def initialize_scouts(
    dc_rows: Iterable[DigitalCookieRow],
    scout_records: Iterable[ScoutRecord],
) -> dict[str, Scout]:
    """Union of retail and ledger scout identities, keyed by name."""
    scouts: dict[str, Scout] = {}

    for row in dc_rows:
        name = row.scout_name
        if not name or name in scouts:
            continue
        scouts[name] = Scout(
            name=name,
            first_name=row.first_name,
            last_name=row.last_name,
            is_site_order=row.is_site_row,
        )

    for record in scout_records:
        if not record.name:
            continue
        existing = scouts.get(record.name)
        if existing is None:
            first, last = _split_name(record.name)
            scouts[record.name] = Scout(
                name=record.name,
                first_name=first,
                last_name=last,
                girl_id=record.girl_id,
            )
        elif existing.girl_id is None and record.girl_id is not None:
            existing.girl_id = record.girl_id

    logger.info(
        "scouts_initialized",
        extra={
            "scout_count": len(scouts),
            "site_scouts": sum(1 for s in scouts.values() if s.is_site_order),
        },
    )
    return scouts


def build_girl_id_index(scouts: dict[str, Scout]) -> dict[int, str]:
    """Girl id -> scout name, built once per pass for allocation lookup."""
    return {
        scout.girl_id: name
        for name, scout in scouts.items()
        if scout.girl_id is not None
    }
