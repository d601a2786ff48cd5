"""
troop_engines.inventory -- per-scout physical stock from ledger transfers.

Responsibility:
    Apply GIRL_PICKUP transfers (added to the ``to`` scout) and
    GIRL_RETURN transfers (subtracted from the ``from`` scout) to each
    scout's running ``ScoutInventory``.

Architecture position:
    Engines -- pure, zero I/O.

Invariants enforced:
    - Only the two scout-physical categories touch scout inventory.
    - Only physical varieties are applied; Cookie Share never enters
      stock.
    - The result is a pure sum, so the order transfers arrive in does
      not change it.

Failure modes:
    - A transfer naming no known scout is skipped (DEBUG log).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from troop_engines.tracer import traced_engine
from troop_kernel.domain.entities import Scout, Transfer
from troop_kernel.domain.enums import SCOUT_PHYSICAL_CATEGORIES, TransferCategory
from troop_kernel.logging_config import get_logger

logger = get_logger("engines.inventory")


def inventory_effect(transfer: Transfer) -> tuple[str, int] | None:
    """Return ``(scout_name, sign)`` for a scout-physical transfer, else None."""
    if transfer.category not in SCOUT_PHYSICAL_CATEGORIES:
        return None
    if transfer.category == TransferCategory.GIRL_PICKUP:
        return transfer.to, 1
    return transfer.from_, -1


@traced_engine("inventory", "1.0")
def apply_inventory(
    scouts: Mapping[str, Scout],
    transfers: Iterable[Transfer],
) -> int:
    """Apply pickups and returns to scout inventory.  Returns transfers applied."""
    applied = 0
    for transfer in transfers:
        effect = inventory_effect(transfer)
        if effect is None:
            continue
        name, sign = effect
        scout = scouts.get(name)
        if scout is None:
            logger.debug(
                "inventory_scout_not_found",
                extra={"order_number": transfer.order_number, "scout": name},
            )
            continue
        scout.inventory.apply(transfer.physical_varieties, sign)
        applied += 1
    return applied
