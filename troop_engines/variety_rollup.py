"""
troop_engines.variety_rollup -- troop sales and stock by cookie variety.

Responsibility:
    ``by_cookie``: physical packages sold, from physical-inventory and
    GIRL direct-ship orders plus the credited allocations of real scouts.
    ``inventory``: troop stock per variety, added by inbound categories
    and removed by outbound categories, from physical varieties only.

Invariants enforced:
    - Cookie Share never appears in either map.
    - Site pseudo-scout allocations are skipped; they credit the troop
      pool, not a variety sale by a scout.
    - Both maps are keyed in registry display order.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from troop_engines.scout_calculations import is_girl_direct_ship
from troop_engines.tracer import traced_engine
from troop_engines.varieties import accumulate_varieties, ordered_varieties
from troop_kernel.domain.dataset import VarietyRollup
from troop_kernel.domain.entities import Scout, Transfer
from troop_kernel.domain.enums import (
    TROOP_INVENTORY_IN_CATEGORIES,
    TROOP_INVENTORY_OUT_CATEGORIES,
)
from troop_kernel.domain.values import Varieties


def _positive(varieties: Mapping[str, int]) -> Varieties:
    return {k: v for k, v in varieties.items() if v > 0}


def sold_by_variety(scouts: Iterable[Scout]) -> Varieties:
    sold: Varieties = {}
    for scout in scouts:
        for order in scout.orders:
            if order.needs_inventory or is_girl_direct_ship(order):
                accumulate_varieties(sold, _positive(order.varieties))
        if scout.is_site_order:
            continue
        for allocation in scout.allocations:
            accumulate_varieties(sold, _positive(allocation.varieties))
    return sold


def troop_stock_by_variety(transfers: Iterable[Transfer]) -> Varieties:
    stock: Varieties = {}
    for transfer in transfers:
        if transfer.category in TROOP_INVENTORY_IN_CATEGORIES:
            accumulate_varieties(stock, transfer.physical_varieties)
        elif transfer.category in TROOP_INVENTORY_OUT_CATEGORIES:
            accumulate_varieties(stock, transfer.physical_varieties, sign=-1)
    return stock


@traced_engine("variety_rollup", "1.0")
def build_variety_rollup(
    scouts: Mapping[str, Scout],
    transfers: Iterable[Transfer],
    display_order: Iterable[str] = (),
) -> VarietyRollup:
    order = tuple(display_order)
    by_cookie = ordered_varieties(sold_by_variety(scouts.values()), order)
    inventory = ordered_varieties(troop_stock_by_variety(transfers), order)
    return VarietyRollup(
        by_cookie=by_cookie,
        inventory=inventory,
        total=sum(by_cookie.values()),
    )
