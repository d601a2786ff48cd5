"""
Entities -- orders, transfers, allocations and the Scout aggregate root.

Responsibility:
    Defines the in-memory ledger model every calculator reads and the
    per-scout derived blocks the scout aggregator writes.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.

Invariants enforced:
    - Order: ``packages = total - refunded`` (computed by the importer),
      ``donations <= packages`` and ``physical_packages = packages -
      donations >= 0`` (enforced here at construction).
    - Transfer: ``physical_packages`` and ``physical_varieties`` never
      include Cookie Share.  ``category`` is set once at creation.
    - Allocation: ``dedupe_key`` identifies exact duplicates from the same
      divider payload.
    - Scout: one Order per order number (enforced by ``Scout.add_order``).
      Orders, transfers and allocations are frozen; only the Scout
      aggregate and its inventory are mutable, and only during a single
      reconciliation pass.

Failure modes:
    - None.  Out-of-range counts are clamped, never rejected.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from troop_kernel.domain.enums import (
    INVENTORY_ORDER_TYPES,
    AllocationChannel,
    AllocationSource,
    OrderStatusClass,
    OrderType,
    Owner,
    PaymentMethod,
    TransferCategory,
)
from troop_kernel.domain.values import ZERO, Varieties, freeze_varieties


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Order:
    """
    One customer-facing sale from the retail platform.

    Contract:
        Built once by the order importer from a ``DigitalCookieRow``.
        ``order_type`` and ``payment_method`` are ``None`` when the raw
        string could not be classified.

    Guarantees:
        - ``0 <= donations <= packages``
        - ``physical_packages == packages - donations``
    """

    order_number: str
    scout: str
    date: str | None
    owner: Owner
    order_type: OrderType | None
    payment_method: PaymentMethod | None
    packages: int
    donations: int
    amount: Decimal
    varieties: Varieties = field(default_factory=dict)
    raw_order_type: str = ""
    payment_status: str = ""
    status: str = ""
    status_class: OrderStatusClass = OrderStatusClass.UNKNOWN
    source_row: Mapping[str, Any] = field(default_factory=dict)
    physical_packages: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        packages = max(0, self.packages)
        donations = min(max(0, self.donations), packages)
        object.__setattr__(self, "packages", packages)
        object.__setattr__(self, "donations", donations)
        object.__setattr__(self, "physical_packages", packages - donations)

    @property
    def needs_inventory(self) -> bool:
        """True iff this order draws down the scout's own physical stock."""
        return (
            self.owner == Owner.GIRL
            and self.order_type in INVENTORY_ORDER_TYPES
        )


# ---------------------------------------------------------------------------
# Transfers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Transfer:
    """One ledger-platform inventory movement or virtual record."""

    type: str
    category: TransferCategory
    date: str
    order_number: str
    from_: str
    to: str
    packages: int
    physical_packages: int
    varieties: Varieties = field(default_factory=dict)
    physical_varieties: Varieties = field(default_factory=dict)
    amount: Decimal = ZERO
    status: str = ""


# ---------------------------------------------------------------------------
# Allocations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Allocation:
    """
    One credited-sale attribution to a scout.

    ``girl_id`` identifies divider allocations; virtual booth allocations
    are synthesized from transfers and carry ``scout_name`` instead.
    ``packages`` counts physical packages only; Cookie Share credit is in
    ``donations``.
    """

    channel: AllocationChannel
    source: AllocationSource
    packages: int
    donations: int
    varieties: Varieties = field(default_factory=dict)
    girl_id: int | None = None
    scout_name: str | None = None
    reservation_id: str | None = None
    store_name: str = ""
    date: str = ""
    start_time: str = ""
    end_time: str = ""
    reservation_type: str = ""
    order_id: str | None = None
    order_number: str | None = None
    amount: Decimal = ZERO

    @property
    def credited(self) -> int:
        return self.packages + self.donations

    @property
    def dedupe_key(self) -> tuple:
        """Scout, channel, payload reference and variety breakdown."""
        scout_ref = self.girl_id if self.girl_id is not None else self.scout_name
        payload_ref = self.reservation_id or self.order_id or self.order_number
        return (
            self.channel,
            scout_ref,
            payload_ref,
            freeze_varieties(self.varieties),
        )


# ---------------------------------------------------------------------------
# Scout derived blocks
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class InventoryShortfall:
    """A variety a scout has sold more of than they picked up."""

    variety: str
    inventory: int
    sales: int
    shortfall: int


@dataclass(frozen=True, slots=True)
class ScoutFinancials:
    cash_collected: Decimal = ZERO
    electronic_payments: Decimal = ZERO
    unknown_payments: Decimal = ZERO
    inventory_value: Decimal = ZERO
    unsold_value: Decimal = ZERO
    cash_owed: Decimal = ZERO


@dataclass(frozen=True)
class ChannelSummary:
    """Credited packages a scout received through one allocation channel."""

    packages: int = 0
    donations: int = 0
    varieties: Varieties = field(default_factory=dict)

    @property
    def credited(self) -> int:
        return self.packages + self.donations


@dataclass(frozen=True, slots=True)
class OrderStatusCounts:
    needs_approval: int = 0
    pending: int = 0
    completed: int = 0
    unknown: int = 0


@dataclass(frozen=True)
class ScoutTotals:
    """
    Derived per-scout block, replaced wholesale on every build.

    ``inventory`` is the sum of per-variety net stock after each variety is
    clamped at zero; ``inventory_display`` carries the signed per-variety
    nets.
    """

    orders: int = 0
    delivered: int = 0
    shipped: int = 0
    donations: int = 0
    credited: int = 0
    total_sold: int = 0
    inventory: int = 0
    inventory_display: Varieties = field(default_factory=dict)
    sales_by_variety: Varieties = field(default_factory=dict)
    shipped_by_variety: Varieties = field(default_factory=dict)
    financials: ScoutFinancials = field(default_factory=ScoutFinancials)
    allocation_summary: Mapping[AllocationChannel, ChannelSummary] = field(
        default_factory=dict
    )
    order_status_counts: OrderStatusCounts = field(
        default_factory=OrderStatusCounts
    )


# ---------------------------------------------------------------------------
# Scout aggregate root
# ---------------------------------------------------------------------------


@dataclass
class ScoutInventory:
    """Running physical stock: total plus per-variety counts."""

    total: int = 0
    varieties: Varieties = field(default_factory=dict)

    def apply(self, varieties: Mapping[str, int], sign: int) -> None:
        for cookie_type, count in varieties.items():
            if not count:
                continue
            self.varieties[cookie_type] = (
                self.varieties.get(cookie_type, 0) + sign * count
            )
            self.total += sign * count


@dataclass
class Scout:
    """
    Aggregate root for one scout (or the site pseudo-scout).

    Contract:
        Created by the scout initializer, populated by the order importer,
        the inventory accumulator and the allocation processor, then
        finalized by the scout aggregator.  A fresh set is built on every
        reconciliation pass.
    """

    name: str
    first_name: str = ""
    last_name: str = ""
    girl_id: int | None = None
    is_site_order: bool = False
    orders: list[Order] = field(default_factory=list)
    allocations: list[Allocation] = field(default_factory=list)
    inventory: ScoutInventory = field(default_factory=ScoutInventory)
    totals: ScoutTotals = field(default_factory=ScoutTotals)
    issues: tuple[InventoryShortfall, ...] = ()

    def has_order(self, order_number: str) -> bool:
        return any(o.order_number == order_number for o in self.orders)

    def add_order(self, order: Order) -> bool:
        """Attach an order.  Returns False if the order number is taken."""
        if self.has_order(order.order_number):
            return False
        self.orders.append(order)
        return True

    def add_allocation(self, allocation: Allocation) -> None:
        self.allocations.append(allocation)
