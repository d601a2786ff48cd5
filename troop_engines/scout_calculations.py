"""
troop_engines.scout_calculations -- per-scout totals, inventory and money.

Responsibility:
    Compute the derived ``ScoutTotals`` block and shortfall issues for
    every scout once orders, inventory and allocations are attached.

Architecture position:
    Engines -- pure calculation, zero I/O.

Invariants enforced:
    - ``total_sold = delivered + shipped + donations + credited``.
    - ``shipped`` counts GIRL-owned DIRECT_SHIP orders only.
    - Net on-hand stock is clamped at zero per variety before summing, so
      one oversold variety never hides another variety's stock.  Every
      variety below zero becomes an ``InventoryShortfall``.
    - All cash from GIRL orders is owed.  Electronic payments offset
      only physical-inventory orders.  An order with an unknown payment
      method is reported in ``unknown_payments``, is never counted as
      cash or electronic, and its packages stay in ``unsold_value``.
    - ``unsold_value = max(0, inventory_value - sold_from_inventory)``
      and ``cash_owed = cash_collected + unsold_value``.
    - The site pseudo-scout gets order and allocation totals but zero
      financials.

Audit relevance:
    ``cash_owed`` is what a scout must turn in to the troop.  A GIRL order
    amount lands in at most one of ``cash_collected`` and
    ``unknown_payments``; electronic amounts are tracked only for the
    physical part of inventory orders.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from troop_engines.tracer import traced_engine
from troop_engines.varieties import (
    accumulate_varieties,
    build_physical_varieties,
)
from troop_kernel.domain.cookies import CookieRegistry
from troop_kernel.domain.dataset import ScoutCounts
from troop_kernel.domain.entities import (
    Allocation,
    ChannelSummary,
    InventoryShortfall,
    Order,
    OrderStatusCounts,
    Scout,
    ScoutFinancials,
    ScoutTotals,
)
from troop_kernel.domain.enums import (
    ELECTRONIC_PAYMENT_METHODS,
    AllocationChannel,
    OrderStatusClass,
    OrderType,
    Owner,
    PaymentMethod,
)
from troop_kernel.domain.values import ZERO, Varieties
from troop_kernel.logging_config import get_logger

logger = get_logger("engines.scout_calculations")


def is_girl_direct_ship(order: Order) -> bool:
    return order.owner == Owner.GIRL and order.order_type == OrderType.DIRECT_SHIP


def sales_by_variety(orders: Iterable[Order]) -> Varieties:
    """Physical varieties sold out of the scout's own stock."""
    sales: Varieties = {}
    for order in orders:
        if order.needs_inventory:
            accumulate_varieties(sales, order.varieties)
    return sales


def shipped_by_variety(orders: Iterable[Order]) -> Varieties:
    shipped: Varieties = {}
    for order in orders:
        if is_girl_direct_ship(order):
            accumulate_varieties(shipped, order.varieties)
    return shipped


def summarize_allocations(
    allocations: Iterable[Allocation],
) -> dict[AllocationChannel, ChannelSummary]:
    """Per-channel credited packages, donations and varieties."""
    packages: dict[AllocationChannel, int] = {c: 0 for c in AllocationChannel}
    donations: dict[AllocationChannel, int] = {c: 0 for c in AllocationChannel}
    varieties: dict[AllocationChannel, Varieties] = {c: {} for c in AllocationChannel}
    for allocation in allocations:
        packages[allocation.channel] += allocation.packages
        donations[allocation.channel] += allocation.donations
        accumulate_varieties(
            varieties[allocation.channel],
            allocation.varieties,
            include_cookie_share=True,
        )
    return {
        channel: ChannelSummary(
            packages=packages[channel],
            donations=donations[channel],
            varieties=varieties[channel],
        )
        for channel in AllocationChannel
    }


def count_order_statuses(orders: Iterable[Order]) -> OrderStatusCounts:
    counts = {s: 0 for s in OrderStatusClass}
    for order in orders:
        counts[order.status_class] += 1
    return OrderStatusCounts(
        needs_approval=counts[OrderStatusClass.NEEDS_APPROVAL],
        pending=counts[OrderStatusClass.PENDING],
        completed=counts[OrderStatusClass.COMPLETED],
        unknown=counts[OrderStatusClass.UNKNOWN],
    )


def calculate_financials(
    scout: Scout,
    registry: CookieRegistry,
) -> ScoutFinancials:
    """Cash, electronic and unknown payments plus what the scout owes.

    Only cash and electronic orders reduce unsold stock.  An order with an
    unknown payment method is reported in ``unknown_payments`` and its
    packages stay in ``unsold_value``, so they remain part of ``cash_owed``.
    """
    if scout.is_site_order:
        return ScoutFinancials()

    cash_collected = ZERO
    electronic = ZERO
    unknown = ZERO
    sold_from_inventory = ZERO

    for order in scout.orders:
        if order.owner != Owner.GIRL:
            continue
        physical_revenue = (
            registry.revenue(build_physical_varieties(order.varieties))
            if order.needs_inventory
            else ZERO
        )
        if order.payment_method is None:
            unknown += order.amount
            continue
        if order.payment_method == PaymentMethod.CASH:
            cash_collected += order.amount
        elif order.payment_method in ELECTRONIC_PAYMENT_METHODS:
            electronic += physical_revenue
        sold_from_inventory += physical_revenue

    inventory_value = registry.revenue(scout.inventory.varieties)
    unsold_value = max(ZERO, inventory_value - sold_from_inventory)
    return ScoutFinancials(
        cash_collected=cash_collected,
        electronic_payments=electronic,
        unknown_payments=unknown,
        inventory_value=inventory_value,
        unsold_value=unsold_value,
        cash_owed=cash_collected + unsold_value,
    )


def calculate_inventory_display(
    scout: Scout,
    sales: Mapping[str, int],
    physical_types: Iterable[str],
) -> tuple[Varieties, int, tuple[InventoryShortfall, ...]]:
    """Signed net per variety, clamped total, and shortfall issues."""
    display: Varieties = {}
    total = 0
    issues: list[InventoryShortfall] = []
    for variety in physical_types:
        on_hand = scout.inventory.varieties.get(variety, 0)
        sold = sales.get(variety, 0)
        net = on_hand - sold
        display[variety] = net
        total += max(0, net)
        if net < 0:
            issues.append(
                InventoryShortfall(
                    variety=variety,
                    inventory=on_hand,
                    sales=sold,
                    shortfall=abs(net),
                )
            )
    return display, total, tuple(issues)


def calculate_scout(scout: Scout, registry: CookieRegistry) -> ScoutTotals:
    """Compute one scout's totals and store them with its issues."""
    delivered = sum(o.physical_packages for o in scout.orders if o.needs_inventory)
    shipped = sum(o.physical_packages for o in scout.orders if is_girl_direct_ship(o))
    donations = sum(o.donations for o in scout.orders)
    credited = sum(a.credited for a in scout.allocations)

    sales = sales_by_variety(scout.orders)
    display, inventory_total, issues = calculate_inventory_display(
        scout, sales, registry.physical_types
    )

    totals = ScoutTotals(
        orders=len(scout.orders),
        delivered=delivered,
        shipped=shipped,
        donations=donations,
        credited=credited,
        total_sold=delivered + shipped + donations + credited,
        inventory=inventory_total,
        inventory_display=display,
        sales_by_variety=sales,
        shipped_by_variety=shipped_by_variety(scout.orders),
        financials=calculate_financials(scout, registry),
        allocation_summary=summarize_allocations(scout.allocations),
        order_status_counts=count_order_statuses(scout.orders),
    )
    scout.totals = totals
    scout.issues = issues
    if issues:
        logger.debug(
            "scout_inventory_shortfall",
            extra={
                "scout": scout.name,
                "varieties": [i.variety for i in issues],
            },
        )
    return totals


@traced_engine("scout_calculations", "1.0")
def calculate_scout_totals(
    scouts: Mapping[str, Scout],
    registry: CookieRegistry,
) -> None:
    for scout in scouts.values():
        calculate_scout(scout, registry)


def is_active(scout: Scout) -> bool:
    """A real scout with at least one package sold."""
    return not scout.is_site_order and scout.totals.total_sold > 0


def calculate_scout_counts(scouts: Mapping[str, Scout]) -> ScoutCounts:
    """Scout counts, site pseudo-scout excluded."""
    total = active = negative = 0
    for scout in scouts.values():
        if scout.is_site_order:
            continue
        total += 1
        if scout.totals.total_sold > 0:
            active += 1
        if scout.issues:
            negative += 1
    return ScoutCounts(
        total=total,
        active=active,
        inactive=total - active,
        with_negative_inventory=negative,
    )

