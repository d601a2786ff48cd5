"""
Closed classification vocabularies.

Every classification the ledger makes (who owns an order, how it was
fulfilled, how it was paid, what a transfer means, which allocation
channel credited a scout) is one of the enums below.  Code that switches
on them handles every member; raw upstream strings never flow past the
classifiers.

Category groups used by several calculators are defined here once so that
the inventory accumulator, troop totals and variety roll-up can never
disagree about what counts as stock in or stock out.
"""

from enum import Enum


class Owner(str, Enum):
    """Who the sale belongs to."""

    GIRL = "GIRL"
    TROOP = "TROOP"


class OrderType(str, Enum):
    """How an order was fulfilled."""

    DELIVERY = "DELIVERY"
    DIRECT_SHIP = "DIRECT_SHIP"
    BOOTH = "BOOTH"
    IN_HAND = "IN_HAND"
    DONATION = "DONATION"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    VENMO = "VENMO"


class OrderStatusClass(str, Enum):
    """Coarse lifecycle state of a retail-platform order."""

    NEEDS_APPROVAL = "NEEDS_APPROVAL"
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    UNKNOWN = "UNKNOWN"


class TransferCategory(str, Enum):
    """Semantic meaning of one ledger-platform transfer record."""

    COUNCIL_TO_TROOP = "COUNCIL_TO_TROOP"
    TROOP_OUTGOING = "TROOP_OUTGOING"
    GIRL_PICKUP = "GIRL_PICKUP"
    GIRL_RETURN = "GIRL_RETURN"
    VIRTUAL_BOOTH_ALLOCATION = "VIRTUAL_BOOTH_ALLOCATION"
    BOOTH_SALES_ALLOCATION = "BOOTH_SALES_ALLOCATION"
    DIRECT_SHIP_ALLOCATION = "DIRECT_SHIP_ALLOCATION"
    DC_ORDER_RECORD = "DC_ORDER_RECORD"
    COOKIE_SHARE_RECORD = "COOKIE_SHARE_RECORD"
    BOOTH_COOKIE_SHARE = "BOOTH_COOKIE_SHARE"
    DIRECT_SHIP = "DIRECT_SHIP"
    PLANNED = "PLANNED"


class AllocationChannel(str, Enum):
    BOOTH = "BOOTH"
    DIRECT_SHIP = "DIRECT_SHIP"
    VIRTUAL_BOOTH = "VIRTUAL_BOOTH"


class AllocationSource(str, Enum):
    """Which ledger-platform payload produced an allocation."""

    DIRECT_SHIP_DIVIDER = "DIRECT_SHIP_DIVIDER"
    SMART_BOOTH_DIVIDER = "SMART_BOOTH_DIVIDER"
    SMART_DIRECT_SHIP_DIVIDER = "SMART_DIRECT_SHIP_DIVIDER"
    VIRTUAL_BOOTH_TRANSFER = "VIRTUAL_BOOTH_TRANSFER"


class WarningType(str, Enum):
    UNKNOWN_ORDER_TYPE = "UNKNOWN_ORDER_TYPE"
    UNKNOWN_PAYMENT_METHOD = "UNKNOWN_PAYMENT_METHOD"
    UNKNOWN_TRANSFER_TYPE = "UNKNOWN_TRANSFER_TYPE"
    UNKNOWN_COOKIE_ID = "UNKNOWN_COOKIE_ID"
    UNRESOLVED_TRANSFER_DIRECTION = "UNRESOLVED_TRANSFER_DIRECTION"


class DataSource(str, Enum):
    """Import provenance recorded in dataset metadata."""

    DIGITAL_COOKIE = "DC"
    SMART_COOKIE_API = "SC-API"
    SMART_COOKIE_ALLOCATIONS = "SC-Allocations"


# ---------------------------------------------------------------------------
# Category groups
# ---------------------------------------------------------------------------

# Troop stock movements.  DIRECT_SHIP_ALLOCATION is a T2G record but the
# packages ship from the council warehouse, so it never leaves troop stock.
TROOP_INVENTORY_IN_CATEGORIES: frozenset[TransferCategory] = frozenset({
    TransferCategory.COUNCIL_TO_TROOP,
    TransferCategory.GIRL_RETURN,
})

TROOP_INVENTORY_OUT_CATEGORIES: frozenset[TransferCategory] = frozenset({
    TransferCategory.TROOP_OUTGOING,
    TransferCategory.GIRL_PICKUP,
    TransferCategory.VIRTUAL_BOOTH_ALLOCATION,
    TransferCategory.BOOTH_SALES_ALLOCATION,
})

SCOUT_PHYSICAL_CATEGORIES: frozenset[TransferCategory] = frozenset({
    TransferCategory.GIRL_PICKUP,
    TransferCategory.GIRL_RETURN,
})

# Order types whose packages come out of a scout's own inventory.
INVENTORY_ORDER_TYPES: frozenset[OrderType] = frozenset({
    OrderType.DELIVERY,
    OrderType.IN_HAND,
})

ELECTRONIC_PAYMENT_METHODS: frozenset[PaymentMethod] = frozenset({
    PaymentMethod.CREDIT_CARD,
    PaymentMethod.VENMO,
})
