"""
Pure domain layer.

Value objects, enums, entities and raw-row contracts for the troop
ledger, with NO dependencies on:
- Files or network
- The wall clock (see ``clock``)
- Configuration loading

Everything here except the ``Scout`` aggregate and its inventory is
immutable.
"""

from troop_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from troop_kernel.domain.cookies import (
    COOKIE_SHARE,
    CookieDefinition,
    CookieRegistry,
    build_registry,
)
from troop_kernel.domain.entities import (
    Allocation,
    ChannelSummary,
    InventoryShortfall,
    Order,
    OrderStatusCounts,
    Scout,
    ScoutFinancials,
    ScoutInventory,
    ScoutTotals,
    Transfer,
)
from troop_kernel.domain.enums import (
    AllocationChannel,
    AllocationSource,
    DataSource,
    OrderStatusClass,
    OrderType,
    Owner,
    PaymentMethod,
    TransferCategory,
    WarningType,
)
from troop_kernel.domain.values import Varieties, to_money
from troop_kernel.domain.warnings import DataWarning, WarningLog

__all__ = [
    "Allocation",
    "AllocationChannel",
    "AllocationSource",
    "COOKIE_SHARE",
    "ChannelSummary",
    "Clock",
    "CookieDefinition",
    "CookieRegistry",
    "DataSource",
    "DataWarning",
    "DeterministicClock",
    "InventoryShortfall",
    "Order",
    "OrderStatusClass",
    "OrderStatusCounts",
    "OrderType",
    "Owner",
    "PaymentMethod",
    "Scout",
    "ScoutFinancials",
    "ScoutInventory",
    "ScoutTotals",
    "SystemClock",
    "Transfer",
    "TransferCategory",
    "Varieties",
    "WarningLog",
    "WarningType",
    "build_registry",
    "to_money",
]
