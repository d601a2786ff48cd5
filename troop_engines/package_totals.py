"""
troop_engines.package_totals -- troop-wide physical flows by category.

Sums physical packages over ledger transfers, one counter per inventory
category.  DIRECT_SHIP records carry no physical varieties from troop
stock, so that counter sums the raw ``packages`` field instead.
"""

from __future__ import annotations

from collections.abc import Iterable

from troop_engines.tracer import traced_engine
from troop_kernel.domain.dataset import PackageTotals
from troop_kernel.domain.entities import Transfer
from troop_kernel.domain.enums import TransferCategory

_PHYSICAL_COUNTERS: dict[TransferCategory, str] = {
    TransferCategory.COUNCIL_TO_TROOP: "c2t_received",
    TransferCategory.TROOP_OUTGOING: "t2t_out",
    TransferCategory.GIRL_PICKUP: "allocated",
    TransferCategory.VIRTUAL_BOOTH_ALLOCATION: "virtual_booth_t2g",
    TransferCategory.BOOTH_SALES_ALLOCATION: "booth_divider_t2g",
    TransferCategory.DIRECT_SHIP_ALLOCATION: "direct_ship_divider_t2g",
    TransferCategory.GIRL_RETURN: "g2t",
}


@traced_engine("package_totals", "1.0")
def calculate_package_totals(transfers: Iterable[Transfer]) -> PackageTotals:
    counters = {name: 0 for name in _PHYSICAL_COUNTERS.values()}
    direct_ship = 0
    for transfer in transfers:
        counter = _PHYSICAL_COUNTERS.get(transfer.category)
        if counter is not None:
            counters[counter] += transfer.physical_packages
        elif transfer.category == TransferCategory.DIRECT_SHIP:
            direct_ship += abs(transfer.packages)
    return PackageTotals(direct_ship=direct_ship, **counters)
