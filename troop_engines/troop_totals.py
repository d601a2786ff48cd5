"""
troop_engines.troop_totals -- troop inventory, PGA and troop proceeds.

Responsibility:
    Roll per-scout totals and package totals up into ``TroopTotals``:
    net troop stock, packages credited to proceeds, Per-Girl-Average,
    the tiered proceeds rate and net troop proceeds.

Architecture position:
    Engines -- pure calculation, zero I/O.  Runs after scout
    calculations and package totals.

Invariants enforced:
    - ``inventory = c2t_received - t2t_out - allocated - virtual_booth_t2g
      - booth_divider_t2g + g2t``.
    - ``packages_credited = (c2t_received - t2t_out) + donations +
      direct_ship``.
    - PGA is ``packages_credited / active`` rounded half-up, 0 with no
      active scouts.
    - The rate is the first tier (descending ``min_pga``) whose floor the
      PGA reaches.  Gross, deduction and net proceeds are ``Decimal``.
    - The site pseudo-scout is never active and never counted.

Audit relevance:
    ``troop_proceeds`` is the amount the troop keeps from the season.
    Rate, exempt packages and deduction are reported next to it so the
    figure can be recomputed by hand.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from troop_engines.scout_calculations import calculate_scout_counts, is_active
from troop_engines.tracer import traced_engine
from troop_kernel.domain.dataset import PackageTotals, TroopTotals
from troop_kernel.domain.entities import Scout
from troop_kernel.domain.enums import AllocationChannel
from troop_kernel.domain.policies import ProceedsPolicy
from troop_kernel.logging_config import get_logger

logger = get_logger("engines.troop_totals")

DEFAULT_PROCEEDS_POLICY = ProceedsPolicy()


def per_girl_average(packages_credited: int, active_scouts: int) -> int:
    """Round-half-up average; 0 when there are no active scouts."""
    if active_scouts <= 0:
        return 0
    average = Decimal(packages_credited) / Decimal(active_scouts)
    return int(average.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def proceeds_rate(pga: int, policy: ProceedsPolicy = DEFAULT_PROCEEDS_POLICY) -> Decimal:
    for tier in policy.tiers:
        if pga >= tier.min_pga:
            return tier.rate
    return policy.tiers[-1].rate


@dataclass(frozen=True, slots=True)
class ProceedsBreakdown:
    per_girl_average: int
    rate: Decimal
    gross: Decimal
    exempt_packages: int
    deduction: Decimal

    @property
    def net(self) -> Decimal:
        return self.gross - self.deduction


def calculate_proceeds(
    packages_credited: int,
    active_scouts: int,
    policy: ProceedsPolicy = DEFAULT_PROCEEDS_POLICY,
) -> ProceedsBreakdown:
    """Gross proceeds at the PGA tier rate, less the per-scout exemption."""
    pga = per_girl_average(packages_credited, active_scouts)
    rate = proceeds_rate(pga, policy)
    exempt = max(0, active_scouts) * policy.exempt_packages_per_scout
    return ProceedsBreakdown(
        per_girl_average=pga,
        rate=rate,
        gross=Decimal(packages_credited) * rate,
        exempt_packages=exempt,
        deduction=Decimal(exempt) * rate,
    )


def troop_inventory(totals: PackageTotals) -> int:
    return (
        totals.c2t_received
        - totals.t2t_out
        - totals.allocated
        - totals.virtual_booth_t2g
        - totals.booth_divider_t2g
        + totals.g2t
    )


@traced_engine(
    "troop_totals",
    "1.0",
    fingerprint_fields=("package_totals", "policy"),
)
def calculate_troop_totals(
    scouts: Mapping[str, Scout],
    *,
    package_totals: PackageTotals,
    policy: ProceedsPolicy = DEFAULT_PROCEEDS_POLICY,
) -> TroopTotals:
    """Troop-wide totals from finalized scouts and package totals."""
    counts = calculate_scout_counts(scouts)
    active = sum(1 for s in scouts.values() if is_active(s))

    order_donations = 0
    allocation_donations = 0
    direct_ship = 0
    girl_delivery = 0
    girl_inventory = 0
    pending_pickup = 0
    booth_packages = 0
    booth_donations = 0

    for scout in scouts.values():
        totals = scout.totals
        booth = totals.allocation_summary.get(AllocationChannel.BOOTH)
        virtual_booth = totals.allocation_summary.get(AllocationChannel.VIRTUAL_BOOTH)
        allocation_donations += sum(a.donations for a in scout.allocations)
        direct_ship += totals.shipped
        if booth is not None:
            booth_packages += booth.packages
            booth_donations += booth.donations
        if scout.is_site_order:
            continue
        order_donations += totals.donations
        girl_delivery += totals.delivered
        if virtual_booth is not None:
            girl_delivery += virtual_booth.credited
        girl_inventory += totals.inventory
        pending_pickup += sum(i.shortfall for i in scout.issues)

    donations = order_donations + allocation_donations
    packages_credited = (
        package_totals.c2t_received - package_totals.t2t_out
    ) + donations + direct_ship

    proceeds = calculate_proceeds(packages_credited, active, policy)

    result = TroopTotals(
        troop_proceeds=proceeds.net,
        proceeds_rate=proceeds.rate,
        proceeds_deduction=proceeds.deduction,
        proceeds_exempt_packages=proceeds.exempt_packages,
        gross_proceeds=proceeds.gross,
        per_girl_average=proceeds.per_girl_average,
        inventory=troop_inventory(package_totals),
        donations=donations,
        ordered=package_totals.c2t_received,
        packages_credited=packages_credited,
        direct_ship=direct_ship,
        booth_divider_t2g=package_totals.booth_divider_t2g,
        virtual_booth_t2g=package_totals.virtual_booth_t2g,
        girl_delivery=girl_delivery,
        girl_inventory=girl_inventory,
        pending_pickup=pending_pickup,
        booth_sales_packages=booth_packages,
        booth_sales_donations=booth_donations,
        scouts=counts,
    )
    logger.info(
        "troop_totals_calculated",
        extra={
            "packages_credited": packages_credited,
            "active_scouts": active,
            "per_girl_average": proceeds.per_girl_average,
            "proceeds_rate": str(proceeds.rate),
            "troop_proceeds": str(result.troop_proceeds),
        },
    )
    return result
