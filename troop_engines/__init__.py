"""
Module: troop_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    classification and calculation engines.  This is the canonical import
    surface for ``troop_services``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import troop_kernel (and sibling engine modules).
    MUST NOT import troop_config, troop_ingestion or troop_services.

Invariants enforced:
    - Purity: engines NEVER read the wall clock.  The build time is
      passed in by the caller.
    - Decimal-only arithmetic for money.
    - Determinism: identical inputs always produce identical outputs.
    - Cookie Share is excluded from every physical package sum unless a
      caller asks for it explicitly.

Audit relevance:
    Every top-level engine invocation is traced via ``@traced_engine``
    (see ``troop_engines.tracer``), emitting TROOP_ENGINE_TRACE records.

Usage:
    from troop_engines.transfer_classifier import classify_transfer_category
    from troop_engines.order_classifier import classify_order
    from troop_engines.troop_totals import calculate_troop_totals
"""

from troop_kernel.logging_config import get_logger

logger = get_logger("engines")

from troop_engines.allocation_processing import (
    attach_allocations,
    dedupe_allocations,
    synthesize_virtual_booth_allocations,
)
from troop_engines.cookie_share import build_cookie_share_tracking
from troop_engines.inventory import apply_inventory
from troop_engines.metadata import build_health_checks, build_unified_metadata
from troop_engines.order_classifier import (
    DEFAULT_ORDER_VOCABULARY,
    classify_order,
    classify_order_status,
    classify_payment_method,
    is_dc_auto_sync,
)
from troop_engines.order_import import attach_orders, build_order
from troop_engines.package_totals import calculate_package_totals
from troop_engines.scout_calculations import (
    calculate_scout_counts,
    calculate_scout_totals,
)
from troop_engines.scout_initialization import build_girl_id_index, initialize_scouts
from troop_engines.site_orders import build_site_orders
from troop_engines.tracer import traced_engine
from troop_engines.transfer_breakdowns import build_transfer_breakdowns
from troop_engines.transfer_classifier import (
    DEFAULT_TRANSFER_VOCABULARY,
    TransferHints,
    classify_transfer_category,
    create_transfer,
)
from troop_engines.troop_totals import (
    DEFAULT_PROCEEDS_POLICY,
    ProceedsBreakdown,
    calculate_proceeds,
    calculate_troop_totals,
)
from troop_engines.variety_rollup import build_variety_rollup

__all__ = [
    "DEFAULT_ORDER_VOCABULARY",
    "DEFAULT_PROCEEDS_POLICY",
    "DEFAULT_TRANSFER_VOCABULARY",
    "ProceedsBreakdown",
    "TransferHints",
    "apply_inventory",
    "attach_allocations",
    "attach_orders",
    "build_cookie_share_tracking",
    "build_girl_id_index",
    "build_health_checks",
    "build_order",
    "build_site_orders",
    "build_transfer_breakdowns",
    "build_unified_metadata",
    "build_variety_rollup",
    "calculate_package_totals",
    "calculate_proceeds",
    "calculate_scout_counts",
    "calculate_scout_totals",
    "calculate_troop_totals",
    "classify_order",
    "classify_order_status",
    "classify_payment_method",
    "classify_transfer_category",
    "create_transfer",
    "dedupe_allocations",
    "initialize_scouts",
    "is_dc_auto_sync",
    "synthesize_virtual_booth_allocations",
    "traced_engine",
]
