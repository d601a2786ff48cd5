"""
troop_ingestion.importers -- raw platform payloads into an ``ImportState``.

Responsibility:
    Turn each upstream payload into kernel records and fold them into a
    new ``ImportState``:

    import_digital_cookie        retail order export rows
    import_smart_cookie_orders   ledger order-search records -> Transfers
    import_allocations           divider payloads, virtual Cookie Share,
                                 booth reservations and locations, and the
                                 platform's own cookie id map

    Each importer also registers the scout identities its payload
    reveals and records an ``ImportSource`` entry.

Architecture position:
    Ingestion -- reads raw mappings through the ``troop_kernel.domain.raw``
    contracts, classifies transfers with ``troop_engines``.  No file I/O
    (see ``troop_ingestion.sources``).

Invariants enforced:
    - Each payload is a full snapshot of its source: an import replaces
      the previous rows, transfers or allocations of that source instead
      of appending to them.
    - Import timestamps are passed in; nothing here reads the clock.
    - The input ``ImportState`` is never modified.

Failure modes:
    - ``InputShapeError`` when a payload is not the list or object its
      importer requires.
    - Unknown cookie ids and transfer types are warnings on the returned
      state, never exceptions.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import datetime
from typing import Any

from troop_config.schema import SeasonConfig
from troop_engines.transfer_classifier import TransferHints, create_transfer, matches_troop
from troop_engines.varieties import sum_physical_packages
from troop_ingestion.parsers import parse_varieties_from_api
from troop_ingestion.state import ImportState, register_scouts
from troop_kernel.domain.cookies import COOKIE_SHARE
from troop_kernel.domain.dataset import ImportSource
from troop_kernel.domain.entities import Allocation
from troop_kernel.domain.enums import AllocationChannel, AllocationSource, DataSource
from troop_kernel.domain.raw import (
    BoothDividerPayload,
    BoothLocation,
    BoothReservation,
    CookieLine,
    DigitalCookieRow,
    DirectShipDividerPayload,
    DividerGirl,
    ScoutRecord,
    SmartCookieOrderRecord,
    VirtualCookieSharePayload,
    parse_int,
)
from troop_kernel.domain.warnings import WarningLog
from troop_kernel.exceptions import InputShapeError
from troop_kernel.logging_config import LogContext, get_logger

logger = get_logger("ingestion.importers")


def _as_list(value: Any, source: str) -> list:
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise InputShapeError(source, "a list", type(value).__name__)
    return list(value)


def _record_source(
    state: ImportState,
    source: DataSource,
    imported_at: datetime,
    records: int,
) -> tuple[ImportSource, ...]:
    return state.sources + (ImportSource(type=source, date=imported_at, records=records),)


# ---------------------------------------------------------------------------
# Retail platform
# ---------------------------------------------------------------------------


def import_digital_cookie(
    state: ImportState,
    rows: Iterable[Mapping[str, Any]],
    *,
    config: SeasonConfig,
    imported_at: datetime,
) -> ImportState:
    """Replace the retail rows and register every named scout."""
    cookie_columns = config.registry.dc_columns
    with LogContext.bind(source=DataSource.DIGITAL_COOKIE.value):
        dc_rows = tuple(DigitalCookieRow.from_export(r, cookie_columns) for r in rows)

        records: tuple[ScoutRecord, ...] = state.scout_records
        for row in dc_rows:
            records = register_scouts(records, row.scout_name)

        logger.info(
            "digital_cookie_imported",
            extra={
                "rows": len(dc_rows),
                "site_rows": sum(1 for r in dc_rows if r.is_site_row),
            },
        )
    return replace(
        state,
        dc_rows=dc_rows,
        scout_records=records,
        last_import_dc=imported_at,
        sources=_record_source(state, DataSource.DIGITAL_COOKIE, imported_at, len(dc_rows)),
    )


# ---------------------------------------------------------------------------
# Ledger platform: transfers
# ---------------------------------------------------------------------------


def _register_transfer_scouts(
    records: tuple[ScoutRecord, ...],
    record: SmartCookieOrderRecord,
    config: SeasonConfig,
) -> tuple[ScoutRecord, ...]:
    vocabulary = config.transfer_vocabulary
    troop_number = config.troop.number
    if record.type == vocabulary.t2g and record.to != record.from_:
        records = register_scouts(records, record.to)
    if record.type == vocabulary.g2t and record.to != record.from_:
        records = register_scouts(records, record.from_)
    if any(code in record.type for code in vocabulary.cookie_share) and (
        troop_number is None or matches_troop(record.from_, troop_number)
    ):
        records = register_scouts(records, record.to)
    return records


def import_smart_cookie_orders(
    state: ImportState,
    payload: Mapping[str, Any] | Sequence[Mapping[str, Any]],
    *,
    config: SeasonConfig,
    imported_at: datetime,
) -> ImportState:
    """Classify every ledger order-search record into a ``Transfer``.

    ``payload`` is the endpoint's response object (``{"orders": [...]}``)
    or the bare list of records.
    """
    if isinstance(payload, Mapping):
        raw_orders = _as_list(payload.get("orders"), "smart_cookie_orders.orders")
    else:
        raw_orders = _as_list(payload, "smart_cookie_orders")

    id_map = config.registry.with_id_map(state.cookie_id_map)
    warnings = WarningLog(state.warnings)
    records = state.scout_records
    transfers = []

    with LogContext.bind(source=DataSource.SMART_COOKIE_API.value):
        for raw in raw_orders:
            record = SmartCookieOrderRecord.from_api(raw)
            varieties, total_packages = parse_varieties_from_api(
                record.cookies,
                id_map,
                warnings=warnings,
                order_number=record.order_number,
            )
            hints = TransferHints(
                virtual_booth=record.virtual_booth,
                booth_divider=record.booth_divider,
                direct_ship_divider=record.direct_ship_divider,
                troop_number=config.troop.number,
                troop_name=config.troop.name,
                from_=record.from_,
            )
            transfers.append(
                create_transfer(
                    raw_type=record.type,
                    order_number=record.order_number,
                    from_=record.from_,
                    to=record.to,
                    date=record.date,
                    varieties=varieties,
                    packages=total_packages,
                    hints=hints,
                    amount=record.total,
                    status=record.status,
                    warnings=warnings,
                    vocabulary=config.transfer_vocabulary,
                )
            )
            records = _register_transfer_scouts(records, record, config)

        logger.info(
            "smart_cookie_orders_imported",
            extra={
                "records": len(transfers),
                "warnings": len(warnings) - len(state.warnings),
            },
        )

    return replace(
        state,
        transfers=tuple(transfers),
        scout_records=records,
        warnings=warnings.to_tuple(),
        last_import_sc=imported_at,
        sources=_record_source(state, DataSource.SMART_COOKIE_API, imported_at, len(transfers)),
    )


# ---------------------------------------------------------------------------
# Ledger platform: allocations and booths
# ---------------------------------------------------------------------------


def parse_cookie_id_map(value: Any) -> dict[int, str]:
    """The platform's ``{id: type}`` map; JSON object keys arrive as strings."""
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InputShapeError("allocations.cookieIdMap", "an object", type(value).__name__)
    parsed: dict[int, str] = {}
    for key, cookie_type in value.items():
        cookie_id = parse_int(key)
        if cookie_id and cookie_type:
            parsed[cookie_id] = str(cookie_type)
    return parsed


class _AllocationBuilder:
    """Accumulates allocations and scout records while one payload is read."""

    def __init__(
        self,
        records: tuple[ScoutRecord, ...],
        id_map: Mapping[int, str],
        warnings: WarningLog,
    ):
        self.records = records
        self.id_map = id_map
        self.warnings = warnings
        self.allocations: list[Allocation] = []

    def varieties(self, lines: Iterable[CookieLine], reference: str | None):
        return parse_varieties_from_api(
            lines, self.id_map, warnings=self.warnings, order_number=reference
        )

    def register(self, girl: DividerGirl) -> None:
        if girl.girl_id is not None:
            self.records = register_scouts(self.records, girl.name, girl.girl_id)

    def add_girl(
        self,
        girl: DividerGirl,
        *,
        channel: AllocationChannel,
        source: AllocationSource,
        reference: str | None,
        **provenance: Any,
    ) -> None:
        varieties, total = self.varieties(girl.cookies, reference)
        if total == 0:
            return
        self.register(girl)
        self.allocations.append(
            Allocation(
                channel=channel,
                source=source,
                packages=sum_physical_packages(varieties),
                donations=varieties.get(COOKIE_SHARE, 0),
                varieties=varieties,
                girl_id=girl.girl_id,
                **provenance,
            )
        )


def _direct_ship_entries(value: Any) -> tuple[list, AllocationSource]:
    """A single divider object or a list of per-order divider entries."""
    if isinstance(value, Mapping):
        return [value], AllocationSource.DIRECT_SHIP_DIVIDER
    return _as_list(value, "allocations.directShipDivider"), AllocationSource.SMART_DIRECT_SHIP_DIVIDER


def import_allocations(
    state: ImportState,
    payload: Mapping[str, Any],
    *,
    config: SeasonConfig,
    imported_at: datetime,
) -> ImportState:
    """Fold the ledger platform's supplemental allocation bundle into state.

    Recognized keys: ``cookieIdMap``, ``directShipDivider`` (one divider
    object or a list of per-order entries), ``virtualCookieShares``,
    ``reservations`` (a list, or ``{"reservations": [...]}``),
    ``boothDividers`` and ``boothLocations``.  Missing keys leave the
    matching part of the state as it was.
    """
    if not isinstance(payload, Mapping):
        raise InputShapeError("allocations", "an object", type(payload).__name__)

    cookie_id_map = dict(state.cookie_id_map)
    if "cookieIdMap" in payload:
        cookie_id_map = parse_cookie_id_map(payload.get("cookieIdMap"))
    builder = _AllocationBuilder(
        state.scout_records,
        config.registry.with_id_map(cookie_id_map),
        WarningLog(state.warnings),
    )
    changes: dict[str, Any] = {}

    with LogContext.bind(source=DataSource.SMART_COOKIE_ALLOCATIONS.value):
        if "directShipDivider" in payload:
            entries, source = _direct_ship_entries(payload.get("directShipDivider"))
            for entry in entries:
                divider = DirectShipDividerPayload.from_api(entry)
                for girl in divider.girls:
                    builder.add_girl(
                        girl,
                        channel=AllocationChannel.DIRECT_SHIP,
                        source=source,
                        reference=divider.order_id,
                        order_id=divider.order_id,
                    )

        if "boothDividers" in payload:
            for entry in _as_list(payload.get("boothDividers"), "allocations.boothDividers"):
                divider = BoothDividerPayload.from_api(entry)
                for girl in divider.girls:
                    builder.add_girl(
                        girl,
                        channel=AllocationChannel.BOOTH,
                        source=AllocationSource.SMART_BOOTH_DIVIDER,
                        reference=divider.reservation_id,
                        reservation_id=divider.reservation_id,
                        store_name=divider.store_name,
                        date=divider.date,
                        start_time=divider.start_time,
                        end_time=divider.end_time,
                        reservation_type=divider.reservation_type,
                    )

        if "virtualCookieShares" in payload:
            shares: dict[int, int] = {}
            for entry in _as_list(payload.get("virtualCookieShares"), "allocations.virtualCookieShares"):
                cookie_share = VirtualCookieSharePayload.from_api(entry)
                if cookie_share.smart_divider_id:
                    continue
                for girl in cookie_share.girls:
                    if girl.girl_id is None:
                        continue
                    builder.register(girl)
                    shares[girl.girl_id] = shares.get(girl.girl_id, 0) + girl.quantity
            changes["virtual_cookie_shares"] = shares

        if "reservations" in payload:
            raw = payload.get("reservations")
            if isinstance(raw, Mapping):
                raw = raw.get("reservations")
            changes["booth_reservations"] = tuple(
                BoothReservation.from_api(r, builder.varieties)
                for r in _as_list(raw, "allocations.reservations")
            )

        if "boothLocations" in payload:
            changes["booth_locations"] = tuple(
                BoothLocation.from_api(loc)
                for loc in _as_list(payload.get("boothLocations"), "allocations.boothLocations")
            )

        if "directShipDivider" in payload or "boothDividers" in payload:
            kept = tuple(
                a for a in state.allocations
                if (a.channel == AllocationChannel.DIRECT_SHIP and "directShipDivider" not in payload)
                or (a.channel == AllocationChannel.BOOTH and "boothDividers" not in payload)
            )
            changes["allocations"] = kept + tuple(builder.allocations)

        logger.info(
            "allocations_imported",
            extra={
                "allocations": len(builder.allocations),
                "reservations": len(changes.get("booth_reservations", ())),
                "booth_locations": len(changes.get("booth_locations", ())),
                "cookie_ids": len(cookie_id_map),
            },
        )

    return replace(
        state,
        cookie_id_map=cookie_id_map,
        scout_records=builder.records,
        warnings=builder.warnings.to_tuple(),
        sources=_record_source(
            state,
            DataSource.SMART_COOKIE_ALLOCATIONS,
            imported_at,
            len(builder.allocations),
        ),
        **changes,
    )
