"""
troop_engines.order_import -- classified retail orders attached to scouts.

Responsibility:
    Turn each ``DigitalCookieRow`` into an immutable ``Order`` (owner,
    order type, payment method and status classified) and attach it to
    the scout with the exact same name.

Architecture position:
    Engines -- pure, zero I/O.  Runs after scout initialization.

Invariants enforced:
    - ``packages = total - refunded``; Cookie Share donations are added to
      the variety map under ``COOKIE_SHARE`` when positive.
    - A row whose name matches no scout is skipped silently (DEBUG log),
      never attached to a guessed scout.
    - A scout never holds two orders with the same order number; the
      first row wins.
    - Unclassifiable order types and payment statuses still attach, with
      ``None`` in the unclassified field and a warning on the log.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace

from troop_engines.order_classifier import (
    DEFAULT_ORDER_VOCABULARY,
    classify_order,
    classify_order_status,
    classify_payment_method,
)
from troop_engines.tracer import traced_engine
from troop_kernel.domain.cookies import COOKIE_SHARE
from troop_kernel.domain.entities import Order, Scout
from troop_kernel.domain.policies import OrderVocabulary
from troop_kernel.domain.raw import DigitalCookieRow
from troop_kernel.domain.warnings import WarningLog
from troop_kernel.logging_config import get_logger

logger = get_logger("engines.order_import")


def build_order(
    row: DigitalCookieRow,
    *,
    is_site_order: bool,
    warnings: WarningLog | None = None,
    vocabulary: OrderVocabulary = DEFAULT_ORDER_VOCABULARY,
) -> Order:
    """Classify one retail row into an ``Order``."""
    scout = row.scout_name
    owner, order_type = classify_order(
        is_site_order,
        row.order_type,
        warnings=warnings,
        order_number=row.order_number,
        scout=scout,
        vocabulary=vocabulary,
    )
    payment_method = classify_payment_method(
        row.payment_status,
        warnings=warnings,
        order_number=row.order_number,
        scout=scout,
        vocabulary=vocabulary,
    )
    order = Order(
        order_number=row.order_number,
        scout=scout,
        date=row.order_date,
        owner=owner,
        order_type=order_type,
        payment_method=payment_method,
        packages=row.packages,
        donations=row.donations,
        amount=row.sale_amount,
        varieties=dict(row.varieties),
        raw_order_type=row.order_type,
        payment_status=row.payment_status,
        status=row.order_status,
        status_class=classify_order_status(row.order_status, vocabulary),
        source_row=row.raw,
    )
    if order.donations > 0:
        order = replace(
            order, varieties={**order.varieties, COOKIE_SHARE: order.donations}
        )
    return order


@traced_engine("order_import", "1.0")
def attach_orders(
    scouts: Mapping[str, Scout],
    dc_rows: Iterable[DigitalCookieRow],
    *,
    warnings: WarningLog | None = None,
    vocabulary: OrderVocabulary = DEFAULT_ORDER_VOCABULARY,
) -> int:
    """Attach every matchable row's order to its scout.  Returns the count."""
    attached = 0
    skipped = 0
    for row in dc_rows:
        scout = scouts.get(row.scout_name)
        if scout is None:
            skipped += 1
            logger.debug(
                "order_scout_not_found",
                extra={"order_number": row.order_number, "scout": row.scout_name},
            )
            continue
        if scout.has_order(row.order_number):
            logger.debug(
                "duplicate_order_skipped",
                extra={"order_number": row.order_number, "scout": scout.name},
            )
            continue
        order = build_order(
            row,
            is_site_order=scout.is_site_order,
            warnings=warnings,
            vocabulary=vocabulary,
        )
        scout.add_order(order)
        attached += 1

    logger.info(
        "orders_attached",
        extra={"attached": attached, "skipped_unmatched": skipped},
    )
    return attached
