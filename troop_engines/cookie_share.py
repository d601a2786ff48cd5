"""
troop_engines.cookie_share -- Cookie Share cross-system reconciliation.

Responsibility:
    Compare the Cookie Share donations the retail platform expects to be
    entered by hand with the Cookie Share records actually entered in the
    ledger platform.

Architecture position:
    Engines -- pure calculation, zero I/O.

Rules:
    Retail side    non-site rows with donations > 0.  ``dc_total`` sums
                   them all; ``dc_manual_entry`` sums the rows that are
                   not auto-synced (shipped or exact "Donation" orders
                   paid with the auto-sync payment status sync by
                   themselves).
    Ledger side    ``|packages|`` over COOKIE_SHARE_RECORD transfers whose
                   order number does not start with the retail sync
                   prefix.  Booth-divider Cookie Share is its own category
                   and never counted here.
    Per scout      retail manual donations on the scout's own orders
                   against the virtual Cookie Share quantity entered for
                   the scout's girl id.

Invariants enforced:
    - ``reconciled`` is True iff the two manual totals are equal.  A
      mismatch is reported, never raised.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from troop_engines.order_classifier import DEFAULT_ORDER_VOCABULARY, is_dc_auto_sync
from troop_engines.tracer import traced_engine
from troop_kernel.domain.dataset import CookieShareTracking, ScoutCookieShareRow
from troop_kernel.domain.entities import Scout, Transfer
from troop_kernel.domain.enums import TransferCategory
from troop_kernel.domain.policies import OrderVocabulary
from troop_kernel.domain.raw import DC_ORDER_PREFIX, DigitalCookieRow
from troop_kernel.logging_config import get_logger

logger = get_logger("engines.cookie_share")


def retail_donation_totals(
    dc_rows: Iterable[DigitalCookieRow],
    vocabulary: OrderVocabulary = DEFAULT_ORDER_VOCABULARY,
) -> tuple[int, int]:
    """Return ``(total, manual_entry)`` over non-site retail rows."""
    total = 0
    manual = 0
    for row in dc_rows:
        donations = row.counted_donations
        if row.is_site_row or donations <= 0:
            continue
        total += donations
        if not is_dc_auto_sync(row.order_type, row.payment_status, vocabulary):
            manual += donations
    return total, manual


def ledger_manual_entries(transfers: Iterable[Transfer]) -> int:
    return sum(
        abs(t.packages)
        for t in transfers
        if t.category == TransferCategory.COOKIE_SHARE_RECORD
        and not (t.order_number or "").startswith(DC_ORDER_PREFIX)
    )


def scout_cookie_share_rows(
    scouts: Mapping[str, Scout],
    virtual_cookie_shares: Mapping[int, int],
    vocabulary: OrderVocabulary = DEFAULT_ORDER_VOCABULARY,
) -> tuple[ScoutCookieShareRow, ...]:
    """Per-scout manual Cookie Share; scouts with nothing either side are omitted."""
    rows: list[ScoutCookieShareRow] = []
    for scout in scouts.values():
        if scout.is_site_order:
            continue
        dc_manual = sum(
            o.donations
            for o in scout.orders
            if o.donations > 0
            and not is_dc_auto_sync(o.raw_order_type, o.payment_status, vocabulary)
        )
        entered = 0
        if scout.girl_id is not None:
            entered = virtual_cookie_shares.get(scout.girl_id, 0)
        if dc_manual == 0 and entered == 0:
            continue
        rows.append(
            ScoutCookieShareRow(
                scout=scout.name,
                girl_id=scout.girl_id,
                dc_manual_entry=dc_manual,
                sc_entered=entered,
            )
        )
    return tuple(rows)


@traced_engine("cookie_share", "1.0")
def build_cookie_share_tracking(
    dc_rows: Iterable[DigitalCookieRow],
    transfers: Iterable[Transfer],
    scouts: Mapping[str, Scout] | None = None,
    virtual_cookie_shares: Mapping[int, int] | None = None,
    vocabulary: OrderVocabulary = DEFAULT_ORDER_VOCABULARY,
) -> CookieShareTracking:
    dc_total, dc_manual = retail_donation_totals(dc_rows, vocabulary)
    sc_manual = ledger_manual_entries(transfers)
    reconciled = dc_manual == sc_manual
    if not reconciled:
        logger.warning(
            "cookie_share_mismatch",
            extra={"dc_manual_entry": dc_manual, "sc_manual_entries": sc_manual},
        )
    return CookieShareTracking(
        dc_total=dc_total,
        dc_manual_entry=dc_manual,
        sc_manual_entries=sc_manual,
        reconciled=reconciled,
        scouts=scout_cookie_share_rows(
            scouts or {}, virtual_cookie_shares or {}, vocabulary
        ),
    )
