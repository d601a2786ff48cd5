"""
troop_engines.transfer_breakdowns -- C2T, pickup and return lists.

Lists are sorted newest first by date string; undated transfers sort
last and ties keep import order.  Totals are physical packages.
"""

from __future__ import annotations

from collections.abc import Iterable

from troop_engines.tracer import traced_engine
from troop_kernel.domain.dataset import TransferBreakdowns
from troop_kernel.domain.entities import Transfer
from troop_kernel.domain.enums import TransferCategory


def _newest_first(transfers: list[Transfer]) -> tuple[Transfer, ...]:
    return tuple(sorted(transfers, key=lambda t: t.date or "", reverse=True))


@traced_engine("transfer_breakdowns", "1.0")
def build_transfer_breakdowns(transfers: Iterable[Transfer]) -> TransferBreakdowns:
    c2t: list[Transfer] = []
    t2g: list[Transfer] = []
    g2t: list[Transfer] = []
    for transfer in transfers:
        if transfer.category == TransferCategory.COUNCIL_TO_TROOP:
            c2t.append(transfer)
        elif transfer.category == TransferCategory.GIRL_PICKUP:
            t2g.append(transfer)
        elif transfer.category == TransferCategory.GIRL_RETURN:
            g2t.append(transfer)

    return TransferBreakdowns(
        c2t=_newest_first(c2t),
        t2g=_newest_first(t2g),
        g2t=_newest_first(g2t),
        c2t_total=sum(t.physical_packages for t in c2t),
        t2g_physical_total=sum(t.physical_packages for t in t2g),
        g2t_total=sum(t.physical_packages for t in g2t),
    )
