"""
troop_engines.transfer_classifier -- one category for every ledger transfer.

Responsibility:
    Assign exactly one ``TransferCategory`` to a raw ledger-platform
    transfer from its type code and directional hints, and build the
    immutable ``Transfer`` record with its physical-only package fields.

Architecture position:
    Engines -- pure classification, zero I/O.  Called by the ledger
    importer when a transfer is created; the category is never
    re-derived afterwards.

Decision order:
    1. Type starting with the council-to-troop prefix (``C2T``, ``C2T(P)``,
       ``C2T-123``) -> COUNCIL_TO_TROOP.
    2. ``T2T`` -> TROOP_OUTGOING only when ``from`` identifies this troop
       by number or name; every other case -> COUNCIL_TO_TROOP.
    3. ``T2G`` -> VIRTUAL_BOOTH_ALLOCATION, BOOTH_SALES_ALLOCATION,
       DIRECT_SHIP_ALLOCATION by hint precedence, else GIRL_PICKUP.
    4. ``G2T`` -> GIRL_RETURN.
    5. ``D`` -> DC_ORDER_RECORD; Cookie Share codes -> COOKIE_SHARE_RECORD
       (BOOTH_COOKIE_SHARE with the booth-divider hint); ``DIRECT_SHIP`` ->
       DIRECT_SHIP; ``PLANNED`` -> PLANNED.
    6. Missing or unknown type -> DC_ORDER_RECORD, which no inventory or
       proceeds calculation counts.

Invariants enforced:
    - Totality: every input yields exactly one member of the closed enum.
    - ``physical_packages`` is a positive sum over non-Cookie-Share
      varieties, so a pure Cookie Share record has zero physical packages.

Failure modes:
    - None raised.  Unknown types record one ``UNKNOWN_TRANSFER_TYPE``
      warning per distinct raw type; a troop-to-troop transfer with no
      troop hints at all records ``UNRESOLVED_TRANSFER_DIRECTION``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from troop_engines.varieties import build_physical_varieties, sum_physical_packages
from troop_kernel.domain.entities import Transfer
from troop_kernel.domain.enums import TransferCategory, WarningType
from troop_kernel.domain.policies import TransferVocabulary
from troop_kernel.domain.values import ZERO
from troop_kernel.domain.warnings import DataWarning, WarningLog
from troop_kernel.logging_config import get_logger

logger = get_logger("engines.transfer_classifier")

DEFAULT_TRANSFER_VOCABULARY = TransferVocabulary()

_DIGITS = re.compile(r"\d+")


@dataclass(frozen=True, slots=True)
class TransferHints:
    """Directional context for one transfer."""

    virtual_booth: bool = False
    booth_divider: bool = False
    direct_ship_divider: bool = False
    troop_number: str | None = None
    troop_name: str | None = None
    from_: str = ""


def matches_troop(field: str, identifier: str) -> bool:
    """Exact match, or the first digit run in ``field`` equals ``identifier``."""
    if field == identifier:
        return True
    digits = _DIGITS.search(field)
    return digits is not None and digits.group(0) == identifier


def _classify_troop_to_troop(
    hints: TransferHints,
    warnings: WarningLog | None,
    order_number: str | None,
) -> TransferCategory:
    source = hints.from_
    if source and hints.troop_number and matches_troop(source, hints.troop_number):
        return TransferCategory.TROOP_OUTGOING
    if source and hints.troop_name and matches_troop(source, hints.troop_name):
        return TransferCategory.TROOP_OUTGOING
    if not hints.troop_number and not hints.troop_name:
        logger.warning(
            "troop_transfer_direction_unresolved",
            extra={"from": source, "order_number": order_number},
        )
        if warnings is not None:
            warnings.add(
                DataWarning(
                    type=WarningType.UNRESOLVED_TRANSFER_DIRECTION,
                    message=(
                        f'T2T transfer from "{source or "(empty)"}" has no troop '
                        "identity to compare against; counted as inbound"
                    ),
                    order_number=order_number,
                    raw_value=source,
                ),
            )
    return TransferCategory.COUNCIL_TO_TROOP


def _classify_troop_to_girl(hints: TransferHints) -> TransferCategory:
    if hints.virtual_booth:
        return TransferCategory.VIRTUAL_BOOTH_ALLOCATION
    if hints.booth_divider:
        return TransferCategory.BOOTH_SALES_ALLOCATION
    if hints.direct_ship_divider:
        return TransferCategory.DIRECT_SHIP_ALLOCATION
    return TransferCategory.GIRL_PICKUP


def classify_transfer_category(
    raw_type: str | None,
    hints: TransferHints = TransferHints(),
    *,
    warnings: WarningLog | None = None,
    order_number: str | None = None,
    vocabulary: TransferVocabulary = DEFAULT_TRANSFER_VOCABULARY,
) -> TransferCategory:
    """Return the single category for a raw transfer type and its hints."""
    code = (raw_type or "").strip()

    if code and code.startswith(vocabulary.c2t_prefix):
        return TransferCategory.COUNCIL_TO_TROOP
    if code == vocabulary.t2t:
        return _classify_troop_to_troop(hints, warnings, order_number)
    if code == vocabulary.t2g:
        return _classify_troop_to_girl(hints)
    if code == vocabulary.g2t:
        return TransferCategory.GIRL_RETURN
    if code == vocabulary.dc_order:
        return TransferCategory.DC_ORDER_RECORD
    if code in vocabulary.cookie_share:
        if hints.booth_divider:
            return TransferCategory.BOOTH_COOKIE_SHARE
        return TransferCategory.COOKIE_SHARE_RECORD
    if code == vocabulary.direct_ship:
        return TransferCategory.DIRECT_SHIP
    if code == vocabulary.planned:
        return TransferCategory.PLANNED

    logger.warning(
        "unknown_transfer_type",
        extra={"raw_type": code, "order_number": order_number},
    )
    if warnings is not None:
        warnings.add(
            DataWarning(
                type=WarningType.UNKNOWN_TRANSFER_TYPE,
                message=(
                    f'Unknown transfer type "{code or "(missing)"}"; '
                    "recorded as DC_ORDER_RECORD"
                ),
                order_number=order_number,
                raw_value=code,
            ),
            dedupe_key=code,
        )
    return TransferCategory.DC_ORDER_RECORD


def create_transfer(
    *,
    raw_type: str | None,
    order_number: str,
    from_: str,
    to: str,
    date: str,
    varieties: Mapping[str, int],
    packages: int,
    hints: TransferHints = TransferHints(),
    amount: Decimal = ZERO,
    status: str = "",
    warnings: WarningLog | None = None,
    vocabulary: TransferVocabulary = DEFAULT_TRANSFER_VOCABULARY,
) -> Transfer:
    """Classify and build one immutable ``Transfer``."""
    category = classify_transfer_category(
        raw_type,
        hints,
        warnings=warnings,
        order_number=order_number,
        vocabulary=vocabulary,
    )
    return Transfer(
        type=(raw_type or "").strip() or vocabulary.dc_order,
        category=category,
        date=date,
        order_number=order_number,
        from_=from_,
        to=to,
        packages=packages,
        physical_packages=sum_physical_packages(varieties),
        varieties=dict(varieties),
        physical_varieties=build_physical_varieties(varieties),
        amount=amount,
        status=status,
    )
