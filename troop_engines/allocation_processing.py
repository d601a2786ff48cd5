"""
troop_engines.allocation_processing -- credited allocations onto scouts.

Responsibility:
    Synthesize one VIRTUAL_BOOTH allocation per virtual-booth transfer,
    collapse exact duplicates among divider allocations, and attach every
    allocation to its scout.

Architecture position:
    Engines -- pure, zero I/O.  Runs after orders and inventory.

Invariants enforced:
    - Virtual booth allocations attach by the transfer's ``to`` name;
      divider allocations attach by girl id through a lookup built once
      per pass.
    - Two divider allocations with the same ``dedupe_key`` count once;
      the first occurrence is kept.
    - Allocation ``packages`` is physical only; Cookie Share credit is in
      ``donations``.

Failure modes:
    - An allocation whose scout cannot be found is skipped (DEBUG log).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from troop_engines.scout_initialization import build_girl_id_index
from troop_engines.tracer import traced_engine
from troop_engines.varieties import cookie_share_count
from troop_kernel.domain.entities import Allocation, Scout, Transfer
from troop_kernel.domain.enums import (
    AllocationChannel,
    AllocationSource,
    TransferCategory,
)
from troop_kernel.logging_config import get_logger

logger = get_logger("engines.allocation_processing")


def virtual_booth_allocation(transfer: Transfer) -> Allocation:
    return Allocation(
        channel=AllocationChannel.VIRTUAL_BOOTH,
        source=AllocationSource.VIRTUAL_BOOTH_TRANSFER,
        packages=transfer.physical_packages,
        donations=cookie_share_count(transfer.varieties),
        varieties=dict(transfer.varieties),
        scout_name=transfer.to,
        order_number=transfer.order_number,
        date=transfer.date,
        amount=transfer.amount,
    )


def synthesize_virtual_booth_allocations(
    transfers: Iterable[Transfer],
) -> list[Allocation]:
    """One VIRTUAL_BOOTH allocation per VIRTUAL_BOOTH_ALLOCATION transfer."""
    return [
        virtual_booth_allocation(t)
        for t in transfers
        if t.category == TransferCategory.VIRTUAL_BOOTH_ALLOCATION
    ]


def dedupe_allocations(allocations: Iterable[Allocation]) -> list[Allocation]:
    """Drop exact duplicates, keeping first-seen order."""
    seen: set[tuple] = set()
    unique: list[Allocation] = []
    for allocation in allocations:
        key = allocation.dedupe_key
        if key in seen:
            logger.debug(
                "duplicate_allocation_collapsed",
                extra={
                    "channel": allocation.channel.value,
                    "girl_id": allocation.girl_id,
                    "reservation_id": allocation.reservation_id,
                },
            )
            continue
        seen.add(key)
        unique.append(allocation)
    return unique


def _resolve_scout(
    allocation: Allocation,
    scouts: Mapping[str, Scout],
    girl_index: Mapping[int, str],
) -> Scout | None:
    if allocation.scout_name is not None:
        return scouts.get(allocation.scout_name)
    if allocation.girl_id is None:
        return None
    name = girl_index.get(allocation.girl_id)
    return scouts.get(name) if name is not None else None


@traced_engine("allocation_processing", "1.0")
def attach_allocations(
    scouts: Mapping[str, Scout],
    transfers: Iterable[Transfer],
    divider_allocations: Iterable[Allocation],
) -> int:
    """Attach virtual booth and deduplicated divider allocations.

    Returns the number of allocations attached.
    """
    girl_index = build_girl_id_index(dict(scouts))
    candidates = synthesize_virtual_booth_allocations(transfers)
    candidates.extend(dedupe_allocations(divider_allocations))

    attached = 0
    for allocation in candidates:
        scout = _resolve_scout(allocation, scouts, girl_index)
        if scout is None:
            logger.debug(
                "allocation_scout_not_found",
                extra={
                    "channel": allocation.channel.value,
                    "girl_id": allocation.girl_id,
                    "scout": allocation.scout_name,
                },
            )
            continue
        scout.add_allocation(allocation)
        attached += 1

    logger.info(
        "allocations_attached",
        extra={"attached": attached, "candidates": len(candidates)},
    )
    return attached
