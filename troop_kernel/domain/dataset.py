"""
Dataset -- the immutable snapshot one reconciliation pass produces.

Responsibility:
    Output value objects: troop totals, package totals, transfer
    breakdowns, variety roll-up, Cookie Share reconciliation, site-order
    allocation tracking, metadata with health checks, and the
    ``UnifiedDataset`` that bundles them with the scout map.

Architecture position:
    Kernel > Domain -- pure data.  Built by ``troop_services.reconciler``;
    serialized by ``troop_services.export``.

Invariants enforced:
    - All dollar amounts are ``Decimal``.
    - A ``UnifiedDataset`` wholly replaces any previous snapshot; nothing
      in it is updated in place after construction.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from troop_kernel.domain.entities import Scout, Transfer
from troop_kernel.domain.enums import DataSource, OrderType, Owner, WarningType
from troop_kernel.domain.raw import BoothLocation, BoothReservation
from troop_kernel.domain.values import ZERO, Varieties
from troop_kernel.domain.warnings import DataWarning


@dataclass(frozen=True, slots=True)
class PackageTotals:
    """Physical package flows summed from ledger transfers by category."""

    c2t_received: int = 0
    t2t_out: int = 0
    allocated: int = 0
    virtual_booth_t2g: int = 0
    booth_divider_t2g: int = 0
    direct_ship_divider_t2g: int = 0
    direct_ship: int = 0
    g2t: int = 0


@dataclass(frozen=True, slots=True)
class ScoutCounts:
    total: int = 0
    active: int = 0
    inactive: int = 0
    with_negative_inventory: int = 0


@dataclass(frozen=True)
class TroopTotals:
    troop_proceeds: Decimal = ZERO
    proceeds_rate: Decimal = ZERO
    proceeds_deduction: Decimal = ZERO
    proceeds_exempt_packages: int = 0
    gross_proceeds: Decimal = ZERO
    per_girl_average: int = 0
    inventory: int = 0
    donations: int = 0
    ordered: int = 0
    packages_credited: int = 0
    direct_ship: int = 0
    booth_divider_t2g: int = 0
    virtual_booth_t2g: int = 0
    girl_delivery: int = 0
    girl_inventory: int = 0
    pending_pickup: int = 0
    booth_sales_packages: int = 0
    booth_sales_donations: int = 0
    scouts: ScoutCounts = field(default_factory=ScoutCounts)


@dataclass(frozen=True)
class TransferBreakdowns:
    """C2T, T2G pickup and G2T transfers, newest first, with totals."""

    c2t: tuple[Transfer, ...] = ()
    t2g: tuple[Transfer, ...] = ()
    g2t: tuple[Transfer, ...] = ()
    c2t_total: int = 0
    t2g_physical_total: int = 0
    g2t_total: int = 0


@dataclass(frozen=True)
class VarietyRollup:
    by_cookie: Varieties = field(default_factory=dict)
    inventory: Varieties = field(default_factory=dict)
    total: int = 0


@dataclass(frozen=True, slots=True)
class ScoutCookieShareRow:
    """Per-scout manual Cookie Share: DC manual vs entered in the ledger."""

    scout: str
    girl_id: int | None
    dc_manual_entry: int
    sc_entered: int

    @property
    def adjustment(self) -> int:
        return self.dc_manual_entry - self.sc_entered


@dataclass(frozen=True)
class CookieShareTracking:
    dc_total: int = 0
    dc_manual_entry: int = 0
    sc_manual_entries: int = 0
    reconciled: bool = True
    scouts: tuple[ScoutCookieShareRow, ...] = ()


@dataclass(frozen=True, slots=True)
class SiteOrderEntry:
    order_number: str
    packages: int
    allocated: int
    order_type: OrderType | None
    owner: Owner = Owner.TROOP


@dataclass(frozen=True)
class SiteOrderCategory:
    orders: tuple[SiteOrderEntry, ...] = ()
    total: int = 0
    allocated: int = 0

    @property
    def unallocated(self) -> int:
        return max(0, self.total - self.allocated)

    @property
    def has_warning(self) -> bool:
        return self.total > self.allocated


@dataclass(frozen=True)
class SiteOrdersDataset:
    direct_ship: SiteOrderCategory = field(default_factory=SiteOrderCategory)
    girl_delivery: SiteOrderCategory = field(default_factory=SiteOrderCategory)
    booth_sale: SiteOrderCategory = field(default_factory=SiteOrderCategory)


@dataclass(frozen=True, slots=True)
class ImportSource:
    """One import run recorded in metadata."""

    type: DataSource
    date: datetime
    records: int


@dataclass(frozen=True)
class HealthChecks:
    warnings_count: int = 0
    counts_by_type: Mapping[WarningType, int] = field(default_factory=dict)

    def _count(self, warning_type: WarningType) -> int:
        return self.counts_by_type.get(warning_type, 0)

    @property
    def unknown_order_types(self) -> int:
        return self._count(WarningType.UNKNOWN_ORDER_TYPE)

    @property
    def unknown_payment_methods(self) -> int:
        return self._count(WarningType.UNKNOWN_PAYMENT_METHOD)

    @property
    def unknown_transfer_types(self) -> int:
        return self._count(WarningType.UNKNOWN_TRANSFER_TYPE)

    @property
    def unknown_cookie_ids(self) -> int:
        return self._count(WarningType.UNKNOWN_COOKIE_ID)


@dataclass(frozen=True)
class UnifiedMetadata:
    last_import_dc: datetime | None = None
    last_import_sc: datetime | None = None
    cookie_id_map: Mapping[int, str] = field(default_factory=dict)
    sources: tuple[ImportSource, ...] = ()
    unified_build_time: datetime | None = None
    scout_count: int = 0
    order_count: int = 0
    config_checksum: str = ""
    health_checks: HealthChecks = field(default_factory=HealthChecks)


@dataclass(frozen=True)
class UnifiedDataset:
    """Everything one reconciliation pass knows, in one frozen snapshot."""

    scouts: Mapping[str, Scout]
    site_orders: SiteOrdersDataset
    troop_totals: TroopTotals
    package_totals: PackageTotals
    transfer_breakdowns: TransferBreakdowns
    varieties: VarietyRollup
    cookie_share: CookieShareTracking
    booth_reservations: tuple[BoothReservation, ...]
    booth_locations: tuple[BoothLocation, ...]
    metadata: UnifiedMetadata
    warnings: tuple[DataWarning, ...]
