"""
troop_engines.site_orders -- allocation tracking for troop-owned orders.

Responsibility:
    Split the site pseudo-scout's orders into direct-ship, girl-delivery
    and booth-sale categories and report how much of each has been
    credited out to individual scouts.

Architecture position:
    Engines -- pure calculation, zero I/O.

Rules:
    - Orders are processed oldest first (date, then order number).
      Donation-only orders carry no packages to allocate and are skipped.
    - Girl delivery: the physical packages of every virtual-booth
      transfer form one pool consumed first-in first-out.
    - Direct ship: divider allocations whose order id equals the order
      number (or the number with the retail sync prefix) are applied per
      order.  When no order matches by id, the whole direct-ship divider
      pool is consumed first-in first-out.
    - Category ``allocated`` totals come from the allocation sources, not
      the per-order figures, so over-allocation is still visible.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from troop_engines.tracer import traced_engine
from troop_kernel.domain.dataset import (
    SiteOrderCategory,
    SiteOrderEntry,
    SiteOrdersDataset,
)
from troop_kernel.domain.entities import Allocation, Order, Scout, Transfer
from troop_kernel.domain.enums import AllocationChannel, OrderType, TransferCategory
from troop_kernel.domain.raw import DC_ORDER_PREFIX


@dataclass
class _Pending:
    """Mutable working row; frozen into ``SiteOrderEntry`` at the end."""

    order: Order
    allocated: int = 0

    def freeze(self) -> SiteOrderEntry:
        return SiteOrderEntry(
            order_number=self.order.order_number,
            packages=self.order.physical_packages,
            allocated=self.allocated,
            order_type=self.order.order_type,
        )


def find_site_scout(scouts: Mapping[str, Scout]) -> Scout | None:
    for scout in scouts.values():
        if scout.is_site_order:
            return scout
    return None


def _consume_fifo(entries: Sequence[_Pending], pool: int) -> None:
    for entry in entries:
        consumed = min(entry.order.physical_packages, max(pool, 0))
        entry.allocated = consumed
        pool -= consumed


def _category(entries: Sequence[_Pending], allocated: int) -> SiteOrderCategory:
    return SiteOrderCategory(
        orders=tuple(e.freeze() for e in entries),
        total=sum(e.order.physical_packages for e in entries),
        allocated=allocated,
    )


@traced_engine("site_orders", "1.0")
def build_site_orders(
    scouts: Mapping[str, Scout],
    transfers: Iterable[Transfer],
    divider_allocations: Iterable[Allocation],
) -> SiteOrdersDataset:
    transfers = list(transfers)
    allocations = list(divider_allocations)

    direct_ship: list[_Pending] = []
    girl_delivery: list[_Pending] = []
    booth_sale: list[_Pending] = []

    site_scout = find_site_scout(scouts)
    if site_scout is not None:
        ordered = sorted(
            site_scout.orders,
            key=lambda o: (o.date or "", o.order_number),
        )
        for order in ordered:
            if order.order_type == OrderType.DONATION:
                continue
            entry = _Pending(order)
            if order.order_type == OrderType.DIRECT_SHIP:
                direct_ship.append(entry)
            elif order.order_type == OrderType.BOOTH:
                booth_sale.append(entry)
            else:
                girl_delivery.append(entry)

    ds_allocations = [a for a in allocations if a.channel == AllocationChannel.DIRECT_SHIP]
    for entry in direct_ship:
        number = entry.order.order_number
        references = {number, f"{DC_ORDER_PREFIX}{number}"}
        entry.allocated = sum(
            a.packages for a in ds_allocations if a.order_id in references
        )
    if not any(e.allocated > 0 for e in direct_ship):
        _consume_fifo(direct_ship, sum(a.packages for a in ds_allocations))

    virtual_booth = [
        t for t in transfers
        if t.category == TransferCategory.VIRTUAL_BOOTH_ALLOCATION
    ]
    _consume_fifo(girl_delivery, sum(t.physical_packages for t in virtual_booth))

    return SiteOrdersDataset(
        direct_ship=_category(direct_ship, sum(a.packages for a in ds_allocations)),
        girl_delivery=_category(girl_delivery, sum(t.packages for t in virtual_booth)),
        booth_sale=_category(
            booth_sale,
            sum(a.packages for a in allocations if a.channel == AllocationChannel.BOOTH),
        ),
    )
