"""
Tests for the raw-row contracts.

Covers:
- Lenient integer, currency and Excel-date coercion
- Infinite, NaN and overflowing cells degrade instead of raising
- Retail export rows: varieties, net packages, site rows
- Ledger order records: alternate key spellings, signed cookie lines
- Divider payloads and booth locations
- InputShapeError on non-mapping records
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from troop_kernel.domain.raw import (
    BoothDividerPayload,
    BoothLocation,
    BoothReservation,
    CookieLine,
    DCColumns,
    DigitalCookieRow,
    DirectShipDividerPayload,
    SmartCookieOrderRecord,
    VirtualCookieSharePayload,
    parse_currency,
    parse_excel_date,
    parse_int,
)
from troop_kernel.exceptions import InputShapeError


class TestCoercion:
    """Cell coercion never raises."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, 0),
            ("", 0),
            ("12", 12),
            ("12.0", 12),
            ("1,200", 1200),
            (7.0, 7),
            ("abc", 0),
            (float("nan"), 0),
            (float("inf"), 0),
            ("Infinity", 0),
            ("-inf", 0),
            ("NaN", 0),
            (Decimal("Infinity"), 0),
            ("1e30", 0),
            (1e30, 0),
        ],
    )
    def test_parse_int(self, value, expected):
        assert parse_int(value) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("$1,234.50", Decimal("1234.50")),
            ("$0.00", Decimal("0.00")),
            ("", Decimal("0")),
            (None, Decimal("0")),
            ("n/a", Decimal("0")),
            ("-6.00", Decimal("-6.00")),
            ("Infinity", Decimal("0")),
            (Decimal("NaN"), Decimal("0")),
        ],
    )
    def test_parse_currency(self, value, expected):
        assert parse_currency(value) == expected

    def test_excel_serial_date(self):
        assert parse_excel_date(45658) == "2025-01-01T00:00:00"

    @pytest.mark.parametrize("value", [float("inf"), float("nan"), 10**20, 1e12])
    def test_out_of_range_serial_kept_as_text(self, value):
        assert parse_excel_date(value) == str(value)

    def test_date_and_datetime_cells(self):
        assert parse_excel_date(date(2025, 2, 3)) == "2025-02-03"
        assert parse_excel_date(datetime(2025, 2, 3, 8, 15)) == "2025-02-03T08:15:00"

    def test_text_date_passes_through(self):
        assert parse_excel_date(" 02/03/2025 ") == "02/03/2025"
        assert parse_excel_date("") is None


class TestDigitalCookieRow:
    """Retail export row parsing."""

    def test_reads_named_columns(self, dc_export_row, registry):
        row = DigitalCookieRow.from_export(
            dc_export_row(order_number="2001", donations=2, THIN_MINTS=3, TREFOILS=1),
            registry.dc_columns,
        )
        assert row.order_number == "2001"
        assert row.scout_name == "Alice Smith"
        assert row.total_packages == 6
        assert row.donations == 2
        assert row.varieties == {"THIN_MINTS": 3, "TREFOILS": 1}
        assert row.sale_amount == Decimal("36.00")

    def test_refunds_reduce_packages(self, dc_row):
        row = dc_row(packages=5, refunded=2, THIN_MINTS=5)
        assert row.packages == 3

    def test_zero_and_blank_variety_cells_dropped(self, registry):
        row = DigitalCookieRow.from_export(
            {"Thin Mints": 0, "Trefoils": "", "Lemonades": "2"},
            registry.dc_columns,
        )
        assert row.varieties == {"LEMONADES": 2}

    def test_site_row(self, dc_row):
        assert dc_row(first="Troop123", last="Site").is_site_row is True
        assert dc_row().is_site_row is False

    def test_non_finite_cells_degrade(self, dc_export_row, registry):
        raw = dict(dc_export_row(THIN_MINTS=3))
        raw[DCColumns.TOTAL_PACKAGES] = "Infinity"
        raw[DCColumns.REFUNDED_PACKAGES] = float("nan")
        raw[DCColumns.ORDER_DATE] = float("inf")
        raw["Thin Mints"] = "inf"
        row = DigitalCookieRow.from_export(raw, registry.dc_columns)
        assert row.total_packages == 0
        assert row.packages == 0
        assert row.order_date == "inf"
        assert row.varieties == {}

    def test_missing_columns_default(self, registry):
        row = DigitalCookieRow.from_export({}, registry.dc_columns)
        assert row.order_number == ""
        assert row.scout_name == ""
        assert row.order_date is None
        assert row.packages == 0

    def test_raw_row_kept_for_audit(self, dc_export_row, registry):
        raw = dc_export_row()
        row = DigitalCookieRow.from_export(raw, registry.dc_columns)
        assert row.raw[DCColumns.ORDER_NUMBER] == "1001"

    def test_non_mapping_rejected(self, registry):
        with pytest.raises(InputShapeError):
            DigitalCookieRow.from_export(["not", "a", "row"], registry.dc_columns)


class TestSmartCookieOrderRecord:
    """Ledger order-search record parsing."""

    def test_primary_keys(self, sc_order):
        record = SmartCookieOrderRecord.from_api(
            sc_order(order_number="T-9", total="$48.00", THIN_MINTS=8)
        )
        assert record.type == "T2G"
        assert record.order_number == "T-9"
        assert record.from_ == "Troop 123"
        assert record.to == "Alice Smith"
        assert record.cookies == (CookieLine(cookie_id=4, quantity=8),)
        assert record.total == Decimal("48.00")

    def test_alternate_key_spellings(self):
        record = SmartCookieOrderRecord.from_api(
            {
                "orderType": "C2T(P)",
                "orderNumber": 55,
                "createdDate": "2025-01-10",
                "totalPrice": "-120.00",
                "cookies": [{"cookieId": 3, "quantity": -20}],
            }
        )
        assert record.type == "C2T(P)"
        assert record.order_number == "55"
        assert record.date == "2025-01-10"
        assert record.total == Decimal("120.00")
        assert record.cookies == (CookieLine(cookie_id=3, quantity=-20),)

    def test_booth_divider_flag(self, sc_order):
        record = SmartCookieOrderRecord.from_api(sc_order(smart_divider_id="SD-1"))
        assert record.booth_divider is True
        virtual = SmartCookieOrderRecord.from_api(
            sc_order(smart_divider_id="SD-1", virtual_booth=True)
        )
        assert virtual.booth_divider is False

    def test_cookies_must_be_a_list(self):
        with pytest.raises(InputShapeError):
            SmartCookieOrderRecord.from_api({"cookies": "4:8"})


class TestDividerPayloads:
    """Divider payload parsing."""

    def test_booth_divider_with_nested_reservation(self, divider_girl):
        payload = BoothDividerPayload.from_api(
            {
                "reservationId": "R-1",
                "booth": {
                    "booth": {"booth_id": 9, "store_name": "Grocer", "reservation_type": "LOTTERY"},
                    "timeslot": {"date": "2025-02-08", "start_time": "10:00", "end_time": "12:00"},
                },
                "divider": {"girls": [divider_girl(101, THIN_MINTS=4)]},
            }
        )
        assert payload.reservation_id == "R-1"
        assert payload.store_name == "Grocer"
        assert payload.date == "2025-02-08"
        assert payload.start_time == "10:00"
        assert payload.reservation_type == "LOTTERY"
        assert payload.girls[0].girl_id == 101
        assert payload.girls[0].name == "Alice Smith"

    def test_direct_ship_divider_without_wrapper(self, divider_girl):
        payload = DirectShipDividerPayload.from_api({"girls": [divider_girl(7)]})
        assert payload.order_id is None
        assert len(payload.girls) == 1

    def test_direct_ship_divider_with_order_id(self, divider_girl):
        payload = DirectShipDividerPayload.from_api(
            {"orderId": "D123", "divider": {"girls": [divider_girl(7)]}}
        )
        assert payload.order_id == "D123"

    def test_virtual_cookie_share(self):
        payload = VirtualCookieSharePayload.from_api(
            {"girls": [{"id": 5, "first_name": "Bea", "last_name": "Jones", "quantity": 3}]}
        )
        assert payload.smart_divider_id is None
        assert payload.girls[0].quantity == 3


class TestBoothRecords:
    """Booth reservations and locations."""

    def test_reservation_uses_cookie_parser(self):
        seen = []

        def parse(lines, reference):
            seen.append((lines, reference))
            return {"THIN_MINTS": 10, "COOKIE_SHARE": 2}, 12

        reservation = BoothReservation.from_api(
            {
                "id": "R-7",
                "troop_id": 123,
                "booth": {"booth_id": 4, "store_name": "Hardware", "is_distributed": True},
                "timeslot": {"date": "2025-02-15", "start_time": "9:00", "end_time": "11:00"},
                "cookies": [{"id": 4, "quantity": 10}, {"id": 37, "quantity": 2}],
            },
            parse,
        )
        assert seen[0][1] == "R-7"
        assert len(seen[0][0]) == 2
        assert reservation.troop_id == "123"
        assert reservation.is_distributed is True
        assert reservation.total_packages == 12
        assert reservation.physical_packages == 10
        assert reservation.tracked_cookie_share == 2

    def test_location_address_normalized(self):
        location = BoothLocation.from_api(
            {
                "id": 3,
                "store_name": "Library",
                "address": {"street": "1 Main", "city": "Springfield", "state": "IL", "zip": "62701"},
                "availableDates": [
                    {"date": "2025-02-20", "timeSlots": [{"startTime": "1:00", "endTime": "3:00"}]}
                ],
            }
        )
        assert location.address.city == "Springfield"
        assert location.available_dates[0].time_slots[0].start_time == "1:00"

    def test_location_string_address(self):
        location = BoothLocation.from_api({"id": 1, "address": "1 Main St"})
        assert location.address.street == "1 Main St"
        assert location.available_dates is None
