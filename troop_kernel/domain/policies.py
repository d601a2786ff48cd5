"""
Policies -- classification vocabularies and the proceeds policy.

Responsibility:
    Declarative data that engines receive as arguments: the platform
    strings the order and transfer classifiers match on, and the troop
    proceeds step function.  ``troop_config`` populates these from the
    season YAML; the defaults are the values both platforms use today.

Architecture position:
    Kernel > Domain -- pure data, no logic beyond defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ProceedsTier:
    """Per-package troop proceeds rate once PGA reaches ``min_pga``."""

    min_pga: int
    rate: Decimal


@dataclass(frozen=True)
class ProceedsPolicy:
    """Troop proceeds step function and per-scout exemption.

    ``tiers`` is ordered by descending ``min_pga`` and ends with a floor
    tier at ``min_pga == 0``.
    """

    tiers: tuple[ProceedsTier, ...] = (
        ProceedsTier(min_pga=350, rate=Decimal("0.95")),
        ProceedsTier(min_pga=200, rate=Decimal("0.90")),
        ProceedsTier(min_pga=0, rate=Decimal("0.85")),
    )
    exempt_packages_per_scout: int = 50
    packages_per_case: int = 12


@dataclass(frozen=True)
class OrderVocabulary:
    """Retail-platform strings the order classifier recognizes."""

    donation_exact: str = "Donation"
    shipped_keywords: tuple[str, ...] = ("shipped",)
    in_hand_keywords: tuple[str, ...] = ("cookies in hand",)
    delivery_keywords: tuple[str, ...] = (
        "in-person delivery",
        "in person delivery",
        "pick up",
    )
    cash_exact: tuple[str, ...] = ("CASH",)
    venmo_keywords: tuple[str, ...] = ("VENMO",)
    credit_card_exact: tuple[str, ...] = ("CAPTURED", "AUTHORIZED")
    auto_sync_payment: str = "CAPTURED"
    needs_approval_keywords: tuple[str, ...] = ("Needs Approval",)
    completed_exact: tuple[str, ...] = ("Status Delivered",)
    completed_keywords: tuple[str, ...] = ("Completed", "Delivered", "Shipped")
    pending_keywords: tuple[str, ...] = ("Pending", "Approved for Delivery")


@dataclass(frozen=True)
class TransferVocabulary:
    """Ledger-platform transfer type codes."""

    c2t_prefix: str = "C2T"
    t2t: str = "T2T"
    t2g: str = "T2G"
    g2t: str = "G2T"
    dc_order: str = "D"
    cookie_share: tuple[str, ...] = ("COOKIE_SHARE", "COOKIE_SHARE_D")
    direct_ship: str = "DIRECT_SHIP"
    planned: str = "PLANNED"
