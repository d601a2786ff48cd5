"""
Tests for the transfer classifier.

Covers:
- Council-to-troop prefix variants
- Troop-to-troop direction by troop number or name, and the unresolved default
- Troop-to-girl hint precedence
- Record-only categories (D, Cookie Share, DIRECT_SHIP, PLANNED)
- Unknown and missing types: degraded category and one warning per code
- Physical package fields on created transfers
"""

from decimal import Decimal

import pytest

from troop_engines.transfer_classifier import (
    TransferHints,
    classify_transfer_category,
    create_transfer,
    matches_troop,
)
from troop_kernel.domain.enums import TransferCategory, WarningType
from troop_kernel.domain.policies import TransferVocabulary
from troop_kernel.domain.warnings import WarningLog


class TestCouncilToTroop:
    """C2T prefix matching."""

    @pytest.mark.parametrize("code", ["C2T", "C2T(P)", "C2T-123"])
    def test_prefix_variants(self, code):
        assert classify_transfer_category(code) == TransferCategory.COUNCIL_TO_TROOP


class TestTroopToTroop:
    """T2T direction resolution."""

    def test_outgoing_by_number(self):
        hints = TransferHints(troop_number="123", from_="Troop 123")
        assert classify_transfer_category("T2T", hints) == TransferCategory.TROOP_OUTGOING

    def test_outgoing_by_exact_name(self):
        hints = TransferHints(troop_name="Lakeside", from_="Lakeside")
        assert classify_transfer_category("T2T", hints) == TransferCategory.TROOP_OUTGOING

    def test_incoming_from_other_troop(self):
        hints = TransferHints(troop_number="123", from_="Troop 456")
        warnings = WarningLog()
        category = classify_transfer_category("T2T", hints, warnings=warnings)
        assert category == TransferCategory.COUNCIL_TO_TROOP
        assert len(warnings) == 0

    def test_no_identity_defaults_inbound_with_warning(self):
        warnings = WarningLog()
        category = classify_transfer_category(
            "T2T",
            TransferHints(from_="Troop 456"),
            warnings=warnings,
            order_number="T-7",
        )
        assert category == TransferCategory.COUNCIL_TO_TROOP
        assert warnings.count(WarningType.UNRESOLVED_TRANSFER_DIRECTION) == 1
        assert warnings.to_tuple()[0].order_number == "T-7"

    def test_matches_troop_uses_first_digit_run(self):
        assert matches_troop("Troop 123 (North)", "123") is True
        assert matches_troop("Troop 1234", "123") is False
        assert matches_troop("Service Unit 9, Troop 123", "123") is False


class TestTroopToGirl:
    """T2G hint precedence."""

    @pytest.mark.parametrize(
        "hints, expected",
        [
            (TransferHints(), TransferCategory.GIRL_PICKUP),
            (TransferHints(virtual_booth=True), TransferCategory.VIRTUAL_BOOTH_ALLOCATION),
            (TransferHints(booth_divider=True), TransferCategory.BOOTH_SALES_ALLOCATION),
            (TransferHints(direct_ship_divider=True), TransferCategory.DIRECT_SHIP_ALLOCATION),
            (
                TransferHints(virtual_booth=True, booth_divider=True, direct_ship_divider=True),
                TransferCategory.VIRTUAL_BOOTH_ALLOCATION,
            ),
            (
                TransferHints(booth_divider=True, direct_ship_divider=True),
                TransferCategory.BOOTH_SALES_ALLOCATION,
            ),
        ],
    )
    def test_precedence(self, hints, expected):
        assert classify_transfer_category("T2G", hints) == expected


class TestRecordCategories:
    """Codes that never move stock."""

    @pytest.mark.parametrize(
        "code, expected",
        [
            ("G2T", TransferCategory.GIRL_RETURN),
            ("D", TransferCategory.DC_ORDER_RECORD),
            ("COOKIE_SHARE", TransferCategory.COOKIE_SHARE_RECORD),
            ("COOKIE_SHARE_D", TransferCategory.COOKIE_SHARE_RECORD),
            ("DIRECT_SHIP", TransferCategory.DIRECT_SHIP),
            ("PLANNED", TransferCategory.PLANNED),
        ],
    )
    def test_codes(self, code, expected):
        assert classify_transfer_category(code) == expected

    def test_booth_cookie_share(self):
        category = classify_transfer_category(
            "COOKIE_SHARE", TransferHints(booth_divider=True)
        )
        assert category == TransferCategory.BOOTH_COOKIE_SHARE

    def test_custom_vocabulary(self):
        vocabulary = TransferVocabulary(t2g="TROOP_TO_GIRL")
        assert (
            classify_transfer_category("TROOP_TO_GIRL", vocabulary=vocabulary)
            == TransferCategory.GIRL_PICKUP
        )


class TestUnknownTypes:
    """Degraded classification."""

    def setup_method(self):
        self.warnings = WarningLog()

    def test_unknown_code(self):
        category = classify_transfer_category("X9", warnings=self.warnings)
        assert category == TransferCategory.DC_ORDER_RECORD
        assert self.warnings.count(WarningType.UNKNOWN_TRANSFER_TYPE) == 1

    def test_one_warning_per_distinct_code(self):
        for _ in range(3):
            classify_transfer_category("X9", warnings=self.warnings)
        classify_transfer_category("X8", warnings=self.warnings)
        assert self.warnings.count(WarningType.UNKNOWN_TRANSFER_TYPE) == 2

    @pytest.mark.parametrize("code", [None, "", "   "])
    def test_missing_code(self, code):
        category = classify_transfer_category(code, warnings=self.warnings)
        assert category == TransferCategory.DC_ORDER_RECORD
        assert self.warnings.count(WarningType.UNKNOWN_TRANSFER_TYPE) == 1

    def test_warning_logged(self, captured_logs):
        classify_transfer_category("X9", warnings=self.warnings)
        messages = [r["message"] for r in captured_logs()]
        assert "unknown_transfer_type" in messages


class TestCreateTransfer:
    """Transfer construction."""

    def test_physical_fields_exclude_cookie_share(self):
        transfer = create_transfer(
            raw_type="T2G",
            order_number="T-1",
            from_="Troop 123",
            to="Alice Smith",
            date="2025-02-01",
            varieties={"THIN_MINTS": 6, "COOKIE_SHARE": 2},
            packages=8,
            amount=Decimal("48.00"),
        )
        assert transfer.category == TransferCategory.GIRL_PICKUP
        assert transfer.packages == 8
        assert transfer.physical_packages == 6
        assert transfer.physical_varieties == {"THIN_MINTS": 6}
        assert transfer.varieties == {"THIN_MINTS": 6, "COOKIE_SHARE": 2}

    def test_pure_cookie_share_is_zero_physical(self):
        transfer = create_transfer(
            raw_type="COOKIE_SHARE",
            order_number="CS-1",
            from_="",
            to="Alice Smith",
            date="",
            varieties={"COOKIE_SHARE": 5},
            packages=5,
        )
        assert transfer.physical_packages == 0
        assert transfer.physical_varieties == {}

    def test_missing_type_recorded_as_dc_order(self):
        transfer = create_transfer(
            raw_type=None,
            order_number="?",
            from_="",
            to="",
            date="",
            varieties={},
            packages=0,
        )
        assert transfer.type == "D"
        assert transfer.category == TransferCategory.DC_ORDER_RECORD
