"""
Hypothesis-based property tests for the reconciliation engines.

Properties checked here:
- Transfer classification is total: any code yields a category, never raises
- Physical package sums never include Cookie Share
- Order arithmetic: 0 <= donations <= packages, physical = packages - donations
- Scout inventory does not depend on transfer order
- total_sold is the sum of its four parts for every scout
- A reconciliation pass is idempotent for a fixed build time
"""

from datetime import datetime, timezone
from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from troop_config import get_active_config
from troop_engines.inventory import apply_inventory
from troop_engines.order_import import attach_orders
from troop_engines.scout_calculations import calculate_scout_totals
from troop_engines.scout_initialization import initialize_scouts
from troop_engines.transfer_classifier import (
    TransferHints,
    classify_transfer_category,
    create_transfer,
)
from troop_engines.varieties import sum_physical_packages
from troop_ingestion import ImportState, import_digital_cookie
from troop_kernel.domain.cookies import COOKIE_SHARE
from troop_kernel.domain.entities import Order
from troop_kernel.domain.enums import Owner, TransferCategory
from troop_kernel.domain.raw import DCColumns, ScoutRecord
from troop_kernel.domain.warnings import WarningLog
from troop_services import build_unified_dataset, dataset_to_json

CONFIG = get_active_config()
BUILD_TIME = datetime(2025, 3, 1, tzinfo=timezone.utc)
PHYSICAL = list(CONFIG.registry.physical_types)
SCOUTS = ["Alice Smith", "Bea Jones", "Cara Lee"]

FUZZ = settings(
    max_examples=75,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)

varieties_st = st.dictionaries(
    st.sampled_from(PHYSICAL + [COOKIE_SHARE]),
    st.integers(min_value=-50, max_value=50),
    max_size=6,
)

transfer_codes = st.one_of(
    st.sampled_from(["C2T", "C2T(P)", "T2T", "T2G", "G2T", "D", "COOKIE_SHARE", "DIRECT_SHIP", "PLANNED"]),
    st.text(max_size=12),
    st.none(),
)


@st.composite
def scout_transfers(draw):
    """Pickups and returns between the troop and a few scouts."""
    moves = []
    for index in range(draw(st.integers(min_value=0, max_value=12))):
        scout = draw(st.sampled_from(SCOUTS))
        code = draw(st.sampled_from(["T2G", "G2T"]))
        varieties = draw(
            st.dictionaries(st.sampled_from(PHYSICAL), st.integers(1, 24), min_size=1, max_size=3)
        )
        to, from_ = (scout, "Troop 123") if code == "T2G" else ("Troop 123", scout)
        moves.append(
            create_transfer(
                raw_type=code,
                order_number=f"T-{index}",
                from_=from_,
                to=to,
                date="2025-02-01",
                varieties=varieties,
                packages=sum(varieties.values()),
            )
        )
    return moves


@st.composite
def export_rows(draw):
    """Retail export rows over a fixed set of scouts."""
    rows = []
    for index in range(draw(st.integers(min_value=0, max_value=10))):
        first, last = draw(st.sampled_from(SCOUTS)).split(" ")
        row = {
            DCColumns.ORDER_NUMBER: str(1000 + index),
            DCColumns.GIRL_FIRST_NAME: first,
            DCColumns.GIRL_LAST_NAME: last,
            DCColumns.ORDER_TYPE: draw(
                st.sampled_from(
                    ["In-Person Delivery", "Shipped", "Donation", "Cookies in Hand", "Mystery"]
                )
            ),
            DCColumns.PAYMENT_STATUS: draw(st.sampled_from(["CASH", "CAPTURED", "VENMO", "CHECK"])),
            DCColumns.ORDER_STATUS: "Completed",
            DCColumns.DONATION: draw(st.integers(0, 3)),
            DCColumns.REFUNDED_PACKAGES: 0,
        }
        physical = 0
        for cookie_type in draw(st.lists(st.sampled_from(PHYSICAL), max_size=3, unique=True)):
            count = draw(st.integers(1, 6))
            row[CONFIG.registry.get(cookie_type).dc_column_name] = count
            physical += count
        total = physical + row[DCColumns.DONATION]
        row[DCColumns.TOTAL_PACKAGES] = total
        row[DCColumns.CURRENT_SALE_AMOUNT] = f"${total * 6}.00"
        rows.append(row)
    return rows


class TestClassificationTotality:
    """Every transfer code lands in a category."""

    @FUZZ
    @given(code=transfer_codes, virtual_booth=st.booleans(), booth_divider=st.booleans())
    def test_always_categorized(self, code, virtual_booth, booth_divider):
        hints = TransferHints(virtual_booth=virtual_booth, booth_divider=booth_divider)
        category = classify_transfer_category(code, hints, warnings=WarningLog())
        assert isinstance(category, TransferCategory)


class TestPhysicalPackages:
    """Cookie Share never counts as a physical package."""

    @FUZZ
    @given(varieties=varieties_st)
    def test_cookie_share_excluded(self, varieties):
        expected = sum(abs(n) for t, n in varieties.items() if t != COOKIE_SHARE)
        assert sum_physical_packages(varieties) == expected
        with_more_share = dict(varieties)
        with_more_share[COOKIE_SHARE] = with_more_share.get(COOKIE_SHARE, 0) + 10
        assert sum_physical_packages(with_more_share) == expected


class TestOrderArithmetic:
    """Clamped package and donation counts."""

    @FUZZ
    @given(packages=st.integers(-20, 200), donations=st.integers(-20, 200))
    def test_invariants(self, packages, donations):
        order = Order(
            order_number="1",
            scout="Alice Smith",
            date=None,
            owner=Owner.GIRL,
            order_type=None,
            payment_method=None,
            packages=packages,
            donations=donations,
            amount=Decimal("0"),
        )
        assert 0 <= order.donations <= order.packages
        assert order.physical_packages == order.packages - order.donations


class TestInventoryOrderIndependence:
    """Inventory is a pure sum over transfers."""

    @FUZZ
    @given(transfers=scout_transfers(), seed=st.randoms(use_true_random=False))
    def test_permutation(self, transfers, seed):
        shuffled = list(transfers)
        seed.shuffle(shuffled)
        records = [ScoutRecord(name=name) for name in SCOUTS]

        first = initialize_scouts([], records)
        second = initialize_scouts([], records)
        apply_inventory(first, transfers)
        apply_inventory(second, shuffled)

        for name in SCOUTS:
            assert first[name].inventory.total == second[name].inventory.total
            assert {k: v for k, v in first[name].inventory.varieties.items() if v} == {
                k: v for k, v in second[name].inventory.varieties.items() if v
            }


class TestScoutTotals:
    """Per-scout totals over generated orders."""

    @FUZZ
    @given(rows=export_rows(), transfers=scout_transfers())
    def test_total_sold_is_sum_of_parts(self, rows, transfers):
        state = import_digital_cookie(
            ImportState(), rows, config=CONFIG, imported_at=BUILD_TIME
        )
        scouts = initialize_scouts(state.dc_rows, [])
        attach_orders(scouts, state.dc_rows)
        apply_inventory(scouts, transfers)
        calculate_scout_totals(scouts, CONFIG.registry)
        for scout in scouts.values():
            totals = scout.totals
            assert totals.total_sold == (
                totals.delivered + totals.shipped + totals.donations + totals.credited
            )
            assert totals.inventory >= 0
            assert totals.financials.unsold_value >= 0


class TestIdempotence:
    """Same state, same build time, same dataset."""

    @FUZZ
    @given(rows=export_rows())
    def test_two_passes_equal(self, rows):
        state = import_digital_cookie(
            ImportState(), rows, config=CONFIG, imported_at=BUILD_TIME
        )
        first = build_unified_dataset(state, CONFIG, build_time=BUILD_TIME)
        second = build_unified_dataset(state, CONFIG, build_time=BUILD_TIME)
        assert dataset_to_json(first) == dataset_to_json(second)
