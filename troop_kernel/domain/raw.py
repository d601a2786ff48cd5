"""
Raw -- closed, named contracts for every upstream record shape.

Responsibility:
    Each ``from_*`` constructor below is the ONLY place a raw column name or
    JSON key from the retail platform (Digital Cookie export) or the ledger
    platform (Smart Cookie API) is read.  Downstream code works with the
    named attributes, so a misspelt column is an ``AttributeError`` in one
    place rather than a silent ``None`` scattered through the calculators.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Importers in ``troop_ingestion``
    call the constructors; engines consume the resulting objects.

Invariants enforced:
    - Numeric cells are coerced leniently: blanks, ``None`` and
      unparseable text become 0; ``"12.0"`` becomes 12.  Infinite, NaN
      and implausibly wide numbers are unparseable.
    - Currency strings are parsed by stripping ``$`` and ``,`` into
      ``Decimal``.
    - Excel serial dates are converted to ISO-8601 strings; a serial
      outside the calendar is kept as its text.
    - Ledger-platform cookie quantities are kept as signed integers here;
      the cookie parser takes absolute values.

Failure modes:
    - ``InputShapeError`` when a record that must be a mapping is not one.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from math import isfinite
from typing import Any

from troop_kernel.domain.cookies import COOKIE_SHARE
from troop_kernel.domain.values import ZERO, Varieties
from troop_kernel.exceptions import InputShapeError

# ---------------------------------------------------------------------------
# Wire-format identifiers
# ---------------------------------------------------------------------------

SITE_ORDER_LASTNAME = "Site"
DC_ORDER_PREFIX = "D"

EXCEL_EPOCH = datetime(1899, 12, 30)

# Integer cells wider than this many digits are treated as unparseable.
MAX_INT_DIGITS = 18


class DCColumns:
    """Digital Cookie export column headers."""

    ORDER_NUMBER = "Order Number"
    GIRL_FIRST_NAME = "Girl First Name"
    GIRL_LAST_NAME = "Girl Last Name"
    ORDER_DATE = "Order Date (Central Time)"
    ORDER_TYPE = "Order Type"
    TOTAL_PACKAGES = "Total Packages (Includes Donate & Gift)"
    REFUNDED_PACKAGES = "Refunded Packages"
    CURRENT_SALE_AMOUNT = "Current Sale Amount"
    ORDER_STATUS = "Order Status"
    PAYMENT_STATUS = "Payment Status"
    SHIP_STATUS = "Ship Status"
    DONATION = "Donation"


# ---------------------------------------------------------------------------
# Lenient coercion
# ---------------------------------------------------------------------------


def parse_int(value: Any) -> int:
    """Coerce a cell to ``int``; anything unparseable is 0."""
    if value is None or isinstance(value, bool):
        return int(value or 0)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if isfinite(value) and abs(value) < 10 ** MAX_INT_DIGITS else 0
    text = str(value).strip().replace(",", "")
    if not text:
        return 0
    try:
        number = Decimal(text)
    except InvalidOperation:
        return 0
    if not number.is_finite() or number.adjusted() >= MAX_INT_DIGITS:
        return 0
    return int(number)


def parse_currency(value: Any) -> Decimal:
    """Parse ``"$1,234.50"``-style amounts.  Unparseable input is zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    text = str(value).replace("$", "").replace(",", "").strip()
    if not text:
        return ZERO
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return ZERO
    return amount if amount.is_finite() else ZERO


def parse_excel_date(value: Any) -> str | None:
    """Render an export date cell as ISO-8601."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return (EXCEL_EPOCH + timedelta(days=value)).isoformat()
        except (OverflowError, ValueError):
            return str(value)
    text = str(value).strip()
    return text or None


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _require_mapping(record: Any, source: str) -> Mapping[str, Any]:
    if not isinstance(record, Mapping):
        raise InputShapeError(source, "mapping", type(record).__name__)
    return record


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    parsed = parse_int(value)
    return parsed or None


def _list_of_mappings(value: Any, source: str) -> list[Mapping[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        raise InputShapeError(source, "list", type(value).__name__)
    return [_require_mapping(item, source) for item in value]


# ---------------------------------------------------------------------------
# Retail platform (Digital Cookie)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DigitalCookieRow:
    """One row of the Digital Cookie order export."""

    order_number: str
    first_name: str
    last_name: str
    order_date: str | None
    order_type: str
    total_packages: int
    refunded_packages: int
    sale_amount: Decimal
    order_status: str
    payment_status: str
    ship_status: str
    donations: int
    varieties: Varieties = field(default_factory=dict)
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_export(
        cls,
        row: Mapping[str, Any],
        cookie_columns: Mapping[str, str],
    ) -> DigitalCookieRow:
        """Read one export row.

        ``cookie_columns`` maps the export's per-variety column headers to
        cookie type codes (``CookieRegistry.dc_columns``).
        """
        row = _require_mapping(row, "digital_cookie_row")
        varieties: Varieties = {}
        for column, cookie_type in cookie_columns.items():
            count = parse_int(row.get(column))
            if count > 0:
                varieties[cookie_type] = count
        return cls(
            order_number=_text(row.get(DCColumns.ORDER_NUMBER)),
            first_name=_text(row.get(DCColumns.GIRL_FIRST_NAME)),
            last_name=_text(row.get(DCColumns.GIRL_LAST_NAME)),
            order_date=parse_excel_date(row.get(DCColumns.ORDER_DATE)),
            order_type=_text(row.get(DCColumns.ORDER_TYPE)),
            total_packages=parse_int(row.get(DCColumns.TOTAL_PACKAGES)),
            refunded_packages=parse_int(row.get(DCColumns.REFUNDED_PACKAGES)),
            sale_amount=parse_currency(row.get(DCColumns.CURRENT_SALE_AMOUNT)),
            order_status=_text(row.get(DCColumns.ORDER_STATUS)),
            payment_status=_text(row.get(DCColumns.PAYMENT_STATUS)),
            ship_status=_text(row.get(DCColumns.SHIP_STATUS)),
            donations=parse_int(row.get(DCColumns.DONATION)),
            varieties=varieties,
            raw=dict(row),
        )

    @property
    def scout_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_site_row(self) -> bool:
        return self.last_name == SITE_ORDER_LASTNAME

    @property
    def packages(self) -> int:
        """Net packages after refunds."""
        return self.total_packages - self.refunded_packages

    @property
    def counted_donations(self) -> int:
        """Donations clamped to ``[0, packages]``, as an ``Order`` counts them."""
        return min(max(0, self.donations), max(0, self.packages))


# ---------------------------------------------------------------------------
# Ledger platform (Smart Cookie API)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CookieLine:
    """One ``cookies[]`` entry: platform cookie id and signed quantity."""

    cookie_id: int | None
    quantity: int

    @classmethod
    def from_api(cls, entry: Mapping[str, Any]) -> CookieLine:
        entry = _require_mapping(entry, "cookie_line")
        raw_id = entry.get("id")
        if raw_id is None:
            raw_id = entry.get("cookieId")
        return cls(cookie_id=_optional_int(raw_id), quantity=parse_int(entry.get("quantity")))


def _cookie_lines(value: Any, source: str) -> tuple[CookieLine, ...]:
    return tuple(CookieLine.from_api(c) for c in _list_of_mappings(value, source))


@dataclass(frozen=True)
class SmartCookieOrderRecord:
    """One record from the ledger platform's order search endpoint."""

    type: str
    order_number: str
    from_: str
    to: str
    date: str
    cookies: tuple[CookieLine, ...]
    total: Decimal
    virtual_booth: bool
    smart_divider_id: str | None
    direct_ship_divider: bool
    status: str

    @classmethod
    def from_api(cls, record: Mapping[str, Any]) -> SmartCookieOrderRecord:
        record = _require_mapping(record, "smart_cookie_order")
        raw_type = record.get("transfer_type") or record.get("type") or record.get("orderType") or ""
        order_number = record.get("order_number") or record.get("orderNumber") or ""
        total = record.get("total")
        if total is None:
            total = record.get("totalPrice")
        divider = record.get("smart_divider_id")
        return cls(
            type=_text(raw_type),
            order_number=_text(order_number),
            from_=_text(record.get("from")),
            to=_text(record.get("to")),
            date=_text(record.get("date") or record.get("createdDate")),
            cookies=_cookie_lines(record.get("cookies"), "smart_cookie_order.cookies"),
            total=abs(parse_currency(total)),
            virtual_booth=bool(record.get("virtual_booth")),
            smart_divider_id=_text(divider) or None,
            direct_ship_divider=bool(record.get("direct_ship_divider")),
            status=_text(record.get("status")),
        )

    @property
    def booth_divider(self) -> bool:
        """Booth-divider records carry a divider id and are not virtual booth."""
        return bool(self.smart_divider_id) and not self.virtual_booth


@dataclass(frozen=True, slots=True)
class DividerGirl:
    """One scout's line inside a divider payload."""

    girl_id: int | None
    first_name: str
    last_name: str
    cookies: tuple[CookieLine, ...]
    quantity: int = 0

    @classmethod
    def from_api(cls, girl: Mapping[str, Any]) -> DividerGirl:
        girl = _require_mapping(girl, "divider_girl")
        return cls(
            girl_id=_optional_int(girl.get("id")),
            first_name=_text(girl.get("first_name")),
            last_name=_text(girl.get("last_name")),
            cookies=_cookie_lines(girl.get("cookies"), "divider_girl.cookies"),
            quantity=parse_int(girl.get("quantity")),
        )

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


def _girls(container: Mapping[str, Any], source: str) -> tuple[DividerGirl, ...]:
    return tuple(DividerGirl.from_api(g) for g in _list_of_mappings(container.get("girls"), source))


@dataclass(frozen=True)
class BoothDividerPayload:
    """Smart Booth Divider result for one booth reservation."""

    reservation_id: str | None
    store_name: str
    date: str
    start_time: str
    end_time: str
    reservation_type: str
    girls: tuple[DividerGirl, ...]

    @classmethod
    def from_api(cls, entry: Mapping[str, Any]) -> BoothDividerPayload:
        entry = _require_mapping(entry, "booth_divider")
        divider = entry.get("divider") or {}
        raw_booth = entry.get("booth") or {}
        # ``booth`` is either the booth object or a full reservation wrapping it
        booth = raw_booth if raw_booth.get("booth_id") else (raw_booth.get("booth") or raw_booth)
        timeslot = raw_booth.get("timeslot") or entry.get("timeslot") or {}
        return cls(
            reservation_id=_text(entry.get("reservationId")) or None,
            store_name=_text(booth.get("store_name") or booth.get("booth_name") or booth.get("location")),
            date=_text(timeslot.get("date")),
            start_time=_text(timeslot.get("start_time") or timeslot.get("startTime")),
            end_time=_text(timeslot.get("end_time") or timeslot.get("endTime")),
            reservation_type=_text(booth.get("reservation_type") or booth.get("type")),
            girls=_girls(_require_mapping(divider, "booth_divider.divider"), "booth_divider.girls"),
        )


@dataclass(frozen=True)
class DirectShipDividerPayload:
    """Smart Direct Ship Divider result for one troop direct-ship order."""

    order_id: str | None
    girls: tuple[DividerGirl, ...]

    @classmethod
    def from_api(cls, entry: Mapping[str, Any]) -> DirectShipDividerPayload:
        entry = _require_mapping(entry, "direct_ship_divider")
        divider = entry.get("divider") or entry
        order_id = entry.get("orderId") or entry.get("id")
        return cls(
            order_id=_text(order_id) or None,
            girls=_girls(_require_mapping(divider, "direct_ship_divider.divider"), "direct_ship_divider.girls"),
        )


@dataclass(frozen=True)
class VirtualCookieSharePayload:
    """Manually entered virtual Cookie Share credit, per scout."""

    smart_divider_id: str | None
    girls: tuple[DividerGirl, ...]

    @classmethod
    def from_api(cls, entry: Mapping[str, Any]) -> VirtualCookieSharePayload:
        entry = _require_mapping(entry, "virtual_cookie_share")
        return cls(
            smart_divider_id=_text(entry.get("smart_divider_id")) or None,
            girls=_girls(entry, "virtual_cookie_share.girls"),
        )


@dataclass(frozen=True, slots=True)
class ScoutRecord:
    """A scout identity known to the ledger platform."""

    name: str
    girl_id: int | None = None


# ---------------------------------------------------------------------------
# Booth reservations and locations (pass-through)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BoothReservation:
    id: str
    troop_id: str
    booth_id: str
    store_name: str
    address: str
    reservation_type: str
    is_distributed: bool
    is_virtually_distributed: bool
    date: str
    start_time: str
    end_time: str
    cookies: Varieties
    total_packages: int
    physical_packages: int
    tracked_cookie_share: int

    @classmethod
    def from_api(
        cls,
        raw: Mapping[str, Any],
        parse_cookies: Callable[[tuple[CookieLine, ...], str | None], tuple[Varieties, int]],
    ) -> BoothReservation:
        """Normalize one reservation; ``parse_cookies`` maps cookie ids to types."""
        raw = _require_mapping(raw, "booth_reservation")
        booth = _require_mapping(raw.get("booth") or {}, "booth_reservation.booth")
        timeslot = _require_mapping(raw.get("timeslot") or {}, "booth_reservation.timeslot")
        reservation_id = _text(raw.get("id") or raw.get("reservation_id"))
        cookies, total = parse_cookies(
            _cookie_lines(raw.get("cookies"), "booth_reservation.cookies"),
            reservation_id or None,
        )
        return cls(
            id=reservation_id,
            troop_id=_text(raw.get("troop_id")),
            booth_id=_text(booth.get("booth_id")),
            store_name=_text(booth.get("store_name")),
            address=_text(booth.get("address")),
            reservation_type=_text(booth.get("reservation_type")),
            is_distributed=bool(booth.get("is_distributed")),
            is_virtually_distributed=bool(booth.get("is_virtually_distributed")),
            date=_text(timeslot.get("date")),
            start_time=_text(timeslot.get("start_time")),
            end_time=_text(timeslot.get("end_time")),
            cookies=cookies,
            total_packages=total,
            physical_packages=sum(
                abs(n) for t, n in cookies.items() if t != COOKIE_SHARE
            ),
            tracked_cookie_share=cookies.get(COOKIE_SHARE, 0),
        )


@dataclass(frozen=True, slots=True)
class BoothTimeSlot:
    start_time: str
    end_time: str


@dataclass(frozen=True)
class BoothAvailableDate:
    date: str
    time_slots: tuple[BoothTimeSlot, ...]


@dataclass(frozen=True)
class BoothAddress:
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""


@dataclass(frozen=True)
class BoothLocation:
    id: int
    store_name: str
    address: BoothAddress
    reservation_type: str
    notes: str
    available_dates: tuple[BoothAvailableDate, ...] | None = None

    @classmethod
    def from_api(cls, loc: Mapping[str, Any]) -> BoothLocation:
        loc = _require_mapping(loc, "booth_location")
        addr = loc.get("address") or {}
        if not isinstance(addr, Mapping):
            addr = {"street": addr}
        available = None
        raw_dates = _list_of_mappings(loc.get("availableDates"), "booth_location.availableDates")
        if raw_dates:
            available = tuple(
                BoothAvailableDate(
                    date=_text(d.get("date")),
                    time_slots=tuple(
                        BoothTimeSlot(
                            start_time=_text(s.get("start_time") or s.get("startTime")),
                            end_time=_text(s.get("end_time") or s.get("endTime")),
                        )
                        for s in _list_of_mappings(d.get("timeSlots"), "booth_location.timeSlots")
                    ),
                )
                for d in raw_dates
            )
        return cls(
            id=parse_int(loc.get("id") or loc.get("booth_id")),
            store_name=_text(loc.get("store_name") or loc.get("name")),
            address=BoothAddress(
                street=_text(addr.get("street") or addr.get("address_1")),
                city=_text(addr.get("city")),
                state=_text(addr.get("state")),
                zip=_text(addr.get("zip") or addr.get("postal_code")),
            ),
            reservation_type=_text(loc.get("reservation_type")),
            notes=_text(loc.get("notes")),
            available_dates=available,
        )
