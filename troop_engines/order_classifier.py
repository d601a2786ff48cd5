"""
troop_engines.order_classifier -- owner, order type and payment method.

Responsibility:
    Turn the retail platform's free-text order-type, payment-status and
    order-status strings into closed enums.  Owner/order type and payment
    method are classified independently.

Architecture position:
    Engines -- pure classification, zero I/O.  Called by the order
    importer once per retail row.

Rules (default vocabulary):
    owner         TROOP for the site pseudo-scout's rows, else GIRL.
    order type    exact "Donation" -> DONATION; contains "shipped" ->
                  DIRECT_SHIP; contains "cookies in hand" -> BOOTH for
                  site rows, IN_HAND otherwise; contains "in-person
                  delivery" / "in person delivery" / "pick up" ->
                  DELIVERY.  Matching is case-insensitive.
    payment       exact "CASH" -> CASH; contains "VENMO" -> VENMO; exact
                  "CAPTURED" or "AUTHORIZED" -> CREDIT_CARD.  Compared
                  upper-cased.

Invariants enforced:
    - An unrecognized order type or payment status yields ``None``, never
      a guessed value.  A ``None`` payment method is never treated as a
      paying method downstream.

Failure modes:
    - None raised.  Each miss records one warning on the supplied
      ``WarningLog``.
"""

from __future__ import annotations

from troop_kernel.domain.enums import (
    OrderStatusClass,
    OrderType,
    Owner,
    PaymentMethod,
    WarningType,
)
from troop_kernel.domain.policies import OrderVocabulary
from troop_kernel.domain.warnings import DataWarning, WarningLog
from troop_kernel.logging_config import get_logger

logger = get_logger("engines.order_classifier")

DEFAULT_ORDER_VOCABULARY = OrderVocabulary()


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(k.lower() in text for k in keywords)


def classify_owner(is_site_order: bool) -> Owner:
    return Owner.TROOP if is_site_order else Owner.GIRL


def classify_order_type(
    is_site_order: bool,
    raw_order_type: str | None,
    vocabulary: OrderVocabulary = DEFAULT_ORDER_VOCABULARY,
) -> OrderType | None:
    """Map a free-text order type to ``OrderType`` or ``None``."""
    raw = (raw_order_type or "").strip()
    if raw == vocabulary.donation_exact:
        return OrderType.DONATION
    lowered = raw.lower()
    if _contains_any(lowered, vocabulary.shipped_keywords):
        return OrderType.DIRECT_SHIP
    if _contains_any(lowered, vocabulary.in_hand_keywords):
        return OrderType.BOOTH if is_site_order else OrderType.IN_HAND
    if _contains_any(lowered, vocabulary.delivery_keywords):
        return OrderType.DELIVERY
    return None


def classify_order(
    is_site_order: bool,
    raw_order_type: str | None,
    *,
    warnings: WarningLog | None = None,
    order_number: str | None = None,
    scout: str | None = None,
    vocabulary: OrderVocabulary = DEFAULT_ORDER_VOCABULARY,
) -> tuple[Owner, OrderType | None]:
    """Return ``(owner, order_type)``; unknown types warn and yield None."""
    owner = classify_owner(is_site_order)
    order_type = classify_order_type(is_site_order, raw_order_type, vocabulary)
    if order_type is None:
        logger.warning(
            "unknown_order_type",
            extra={"raw_order_type": raw_order_type, "order_number": order_number},
        )
        if warnings is not None:
            warnings.add(
                DataWarning(
                    type=WarningType.UNKNOWN_ORDER_TYPE,
                    message=f'Unknown order type "{raw_order_type or ""}"',
                    order_number=order_number,
                    raw_value=raw_order_type or "",
                    scout=scout,
                )
            )
    return owner, order_type


def classify_payment_method(
    payment_status: str | None,
    *,
    warnings: WarningLog | None = None,
    order_number: str | None = None,
    scout: str | None = None,
    vocabulary: OrderVocabulary = DEFAULT_ORDER_VOCABULARY,
) -> PaymentMethod | None:
    """Map a payment-status string to ``PaymentMethod`` or ``None``."""
    status = (payment_status or "").strip().upper()
    if status in {s.upper() for s in vocabulary.cash_exact}:
        return PaymentMethod.CASH
    if any(k.upper() in status for k in vocabulary.venmo_keywords):
        return PaymentMethod.VENMO
    if status in {s.upper() for s in vocabulary.credit_card_exact}:
        return PaymentMethod.CREDIT_CARD

    logger.warning(
        "unknown_payment_method",
        extra={"payment_status": payment_status, "order_number": order_number},
    )
    if warnings is not None:
        warnings.add(
            DataWarning(
                type=WarningType.UNKNOWN_PAYMENT_METHOD,
                message=f'Unknown payment status "{payment_status or ""}"',
                order_number=order_number,
                raw_value=payment_status or "",
                scout=scout,
            )
        )
    return None


def classify_order_status(
    status: str | None,
    vocabulary: OrderVocabulary = DEFAULT_ORDER_VOCABULARY,
) -> OrderStatusClass:
    raw = (status or "").strip()
    if any(k in raw for k in vocabulary.needs_approval_keywords):
        return OrderStatusClass.NEEDS_APPROVAL
    if raw in vocabulary.completed_exact or any(
        k in raw for k in vocabulary.completed_keywords
    ):
        return OrderStatusClass.COMPLETED
    if any(k in raw for k in vocabulary.pending_keywords):
        return OrderStatusClass.PENDING
    return OrderStatusClass.UNKNOWN


def is_dc_auto_sync(
    raw_order_type: str | None,
    payment_status: str | None,
    vocabulary: OrderVocabulary = DEFAULT_ORDER_VOCABULARY,
) -> bool:
    """True when the retail platform syncs the row's donations itself.

    Shipped orders and donation-only orders paid by card reach the ledger
    platform automatically; everything else is entered by hand.
    """
    raw = (raw_order_type or "").strip()
    shipped = _contains_any(raw.lower(), vocabulary.shipped_keywords)
    donation_only = raw == vocabulary.donation_exact
    captured = (payment_status or "").strip().upper() == vocabulary.auto_sync_payment.upper()
    return (shipped or donation_only) and captured
