"""
troop_services.reconciler -- one reconciliation pass over an ImportState.

Responsibility:
    Runs the engines in dependency order against the raw inputs held by
    an ``ImportState`` and assembles a frozen ``UnifiedDataset``:

    1. Scouts from retail rows and ledger identities
    2. Retail orders attached to scouts (classification warnings)
    3. Physical inventory from pickups and returns
    4. Virtual booth and deduplicated divider allocations
    5. Per-scout totals, financials and inventory display
    6. Troop package totals, troop totals and proceeds
    7. Transfer breakdowns and the variety roll-up
    8. Cookie Share reconciliation and site-order allocation
    9. Metadata and health checks

Architecture position:
    Services -- orchestration over engines and kernel.  The only layer
    that holds a ``Clock``.

Invariants enforced:
    - Fresh scouts every pass: nothing from a previous dataset leaks in.
    - Idempotence: the same ``ImportState`` and the same build time give
      an equal dataset.
    - The ``ImportState`` is never modified.

Failure modes:
    - ``UnknownCookieTypeError`` propagates if a configured variety has no
      price; data problems are warnings on the dataset.

Audit relevance:
    Every pass runs under a fresh ``run_id`` in ``LogContext`` and logs
    ``reconciliation_completed`` with counts and duration.  Each engine
    emits its own TROOP_ENGINE_TRACE.

Usage:
    from troop_services.reconciler import ReconciliationService

    service = ReconciliationService(clock=SystemClock(), config=get_active_config())
    dataset = service.reconcile(state)
"""

from __future__ import annotations

import time
from datetime import datetime
from types import MappingProxyType
from uuid import uuid4

from troop_config.schema import SeasonConfig
from troop_engines.allocation_processing import attach_allocations, dedupe_allocations
from troop_engines.cookie_share import build_cookie_share_tracking
from troop_engines.inventory import apply_inventory
from troop_engines.metadata import build_unified_metadata
from troop_engines.order_import import attach_orders
from troop_engines.package_totals import calculate_package_totals
from troop_engines.scout_calculations import calculate_scout_totals
from troop_engines.scout_initialization import initialize_scouts
from troop_engines.site_orders import build_site_orders
from troop_engines.transfer_breakdowns import build_transfer_breakdowns
from troop_engines.troop_totals import calculate_troop_totals
from troop_engines.variety_rollup import build_variety_rollup
from troop_ingestion.state import ImportState
from troop_kernel.domain.clock import Clock
from troop_kernel.domain.dataset import UnifiedDataset
from troop_kernel.domain.warnings import WarningLog
from troop_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.reconciler")


def build_unified_dataset(
    state: ImportState,
    config: SeasonConfig,
    *,
    build_time: datetime,
) -> UnifiedDataset:
    """Reconcile ``state`` into a dataset stamped with ``build_time``."""
    registry = config.registry
    warnings = WarningLog(state.warnings)

    scouts = initialize_scouts(state.dc_rows, state.scout_records)
    attach_orders(
        scouts,
        state.dc_rows,
        warnings=warnings,
        vocabulary=config.order_vocabulary,
    )
    apply_inventory(scouts, state.transfers)

    dividers = dedupe_allocations(state.allocations)
    attach_allocations(scouts, state.transfers, dividers)
    calculate_scout_totals(scouts, registry)

    package_totals = calculate_package_totals(state.transfers)
    troop_totals = calculate_troop_totals(
        scouts,
        package_totals=package_totals,
        policy=config.proceeds,
    )
    breakdowns = build_transfer_breakdowns(state.transfers)
    varieties = build_variety_rollup(
        scouts,
        state.transfers,
        display_order=registry.physical_types,
    )
    cookie_share = build_cookie_share_tracking(
        state.dc_rows,
        state.transfers,
        scouts,
        state.virtual_cookie_shares,
        vocabulary=config.order_vocabulary,
    )
    site_orders = build_site_orders(scouts, state.transfers, dividers)

    metadata = build_unified_metadata(
        scouts,
        warnings,
        build_time=build_time,
        last_import_dc=state.last_import_dc,
        last_import_sc=state.last_import_sc,
        cookie_id_map=registry.with_id_map(state.cookie_id_map),
        sources=state.sources,
        config_checksum=config.checksum,
    )

    return UnifiedDataset(
        scouts=MappingProxyType(scouts),
        site_orders=site_orders,
        troop_totals=troop_totals,
        package_totals=package_totals,
        transfer_breakdowns=breakdowns,
        varieties=varieties,
        cookie_share=cookie_share,
        booth_reservations=state.booth_reservations,
        booth_locations=state.booth_locations,
        metadata=metadata,
        warnings=warnings.to_tuple(),
    )


class ReconciliationService:
    """
    Builds datasets from imported state with an injected clock.

    Contract:
        ``reconcile`` is safe to call any number of times with the same
        state; each call builds its scouts from scratch.
    """

    def __init__(self, clock: Clock, config: SeasonConfig):
        self._clock = clock
        self._config = config

    @property
    def config(self) -> SeasonConfig:
        return self._config

    def reconcile(self, state: ImportState) -> UnifiedDataset:
        run_id = str(uuid4())
        t0 = time.monotonic()
        with LogContext.bind(run_id=run_id, troop_number=self._config.troop.number):
            logger.info(
                "reconciliation_started",
                extra={
                    "dc_rows": len(state.dc_rows),
                    "transfers": len(state.transfers),
                    "allocations": len(state.allocations),
                },
            )
            dataset = build_unified_dataset(
                state,
                self._config,
                build_time=self._clock.now(),
            )
            duration_ms = round((time.monotonic() - t0) * 1000, 2)
            logger.info(
                "reconciliation_completed",
                extra={
                    "scouts": len(dataset.scouts),
                    "warnings": len(dataset.warnings),
                    "packages_credited": dataset.troop_totals.packages_credited,
                    "duration_ms": duration_ms,
                },
            )
        return dataset
