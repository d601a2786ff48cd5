"""
ImportState -- everything the importers have materialized so far.

Responsibility:
    One frozen value holding the raw inputs of a reconciliation pass:
    retail rows, classified ledger transfers, divider allocations, scout
    identity records, virtual Cookie Share credit, booth data, the
    run-time cookie id map, import provenance and import-time warnings.

Architecture position:
    Ingestion -- pure data.  Importers return a new ``ImportState``
    (``dataclasses.replace``); the reconciler reads it and never writes
    to it.

Invariants enforced:
    - Immutable.  Collections are tuples or read-only mapping proxies.
    - ``scout_records`` has at most one record per name, in first-seen
      order.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType

from troop_kernel.domain.dataset import ImportSource
from troop_kernel.domain.entities import Allocation, Transfer
from troop_kernel.domain.raw import (
    BoothLocation,
    BoothReservation,
    DigitalCookieRow,
    ScoutRecord,
)
from troop_kernel.domain.warnings import DataWarning


def _frozen_mapping(value: Mapping | None) -> Mapping:
    return MappingProxyType(dict(value or {}))


@dataclass(frozen=True)
class ImportState:
    dc_rows: tuple[DigitalCookieRow, ...] = ()
    transfers: tuple[Transfer, ...] = ()
    allocations: tuple[Allocation, ...] = ()
    scout_records: tuple[ScoutRecord, ...] = ()
    virtual_cookie_shares: Mapping[int, int] = field(default_factory=dict)
    booth_reservations: tuple[BoothReservation, ...] = ()
    booth_locations: tuple[BoothLocation, ...] = ()
    cookie_id_map: Mapping[int, str] = field(default_factory=dict)
    sources: tuple[ImportSource, ...] = ()
    last_import_dc: datetime | None = None
    last_import_sc: datetime | None = None
    warnings: tuple[DataWarning, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "virtual_cookie_shares", _frozen_mapping(self.virtual_cookie_shares)
        )
        object.__setattr__(self, "cookie_id_map", _frozen_mapping(self.cookie_id_map))


def register_scouts(
    records: Iterable[ScoutRecord],
    name: str,
    girl_id: int | None = None,
) -> tuple[ScoutRecord, ...]:
    """Add ``name`` if unseen, or backfill a missing girl id.

    Empty names are ignored.
    """
    name = name.strip()
    by_name = {r.name: r for r in records}
    if not name:
        return tuple(by_name.values())
    existing = by_name.get(name)
    if existing is None:
        by_name[name] = ScoutRecord(name=name, girl_id=girl_id)
    elif existing.girl_id is None and girl_id is not None:
        by_name[name] = ScoutRecord(name=name, girl_id=girl_id)
    return tuple(by_name.values())
