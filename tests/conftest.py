"""
Pytest fixtures for the troop ledger test suite.

Provides:
- Structured logging configuration and log capture
- The default season configuration and its cookie registry
- Builders for retail export rows, ledger order records and divider payloads
- A deterministic clock
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO

import pytest

from troop_config import get_active_config
from troop_kernel.domain.clock import DeterministicClock
from troop_kernel.domain.raw import DCColumns, DigitalCookieRow
from troop_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

FIXED_TIME = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)

# Ledger-platform cookie ids from the default season file
COOKIE_IDS = {
    "THIN_MINTS": 4,
    "CARAMEL_DELITES": 1,
    "PEANUT_BUTTER_PATTIES": 2,
    "TREFOILS": 3,
    "COOKIE_SHARE": 37,
}

DC_COLUMNS = {
    "THIN_MINTS": "Thin Mints",
    "CARAMEL_DELITES": "Caramel deLites",
    "PEANUT_BUTTER_PATTIES": "Peanut Butter Patties",
    "TREFOILS": "Trefoils",
}


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture troop_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            run_something()
            logs = captured_logs()
            assert any(r["message"] == "orders_attached" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("troop_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture(scope="session")
def season_config():
    return get_active_config()


@pytest.fixture(scope="session")
def registry(season_config):
    return season_config.registry


@pytest.fixture
def clock():
    return DeterministicClock(FIXED_TIME)


# =============================================================================
# Raw record builders
# =============================================================================


@pytest.fixture
def dc_export_row():
    """Factory for one retail export row as the spreadsheet adapter yields it."""

    def _make(
        order_number="1001",
        first="Alice",
        last="Smith",
        order_type="In-Person Delivery",
        payment="CASH",
        packages=None,
        refunded=0,
        donations=0,
        amount=None,
        status="Completed",
        date="2025-02-01",
        **varieties,
    ):
        row = {
            DCColumns.ORDER_NUMBER: order_number,
            DCColumns.GIRL_FIRST_NAME: first,
            DCColumns.GIRL_LAST_NAME: last,
            DCColumns.ORDER_DATE: date,
            DCColumns.ORDER_TYPE: order_type,
            DCColumns.REFUNDED_PACKAGES: refunded,
            DCColumns.ORDER_STATUS: status,
            DCColumns.PAYMENT_STATUS: payment,
            DCColumns.SHIP_STATUS: "",
            DCColumns.DONATION: donations,
        }
        physical = 0
        for cookie_type, count in varieties.items():
            row[DC_COLUMNS[cookie_type]] = count
            physical += count
        total = physical + donations if packages is None else packages
        row[DCColumns.TOTAL_PACKAGES] = total
        row[DCColumns.CURRENT_SALE_AMOUNT] = (
            f"${total * 6}.00" if amount is None else amount
        )
        return row

    return _make


@pytest.fixture
def dc_row(dc_export_row, registry):
    """Factory for a parsed ``DigitalCookieRow``; same arguments as ``dc_export_row``."""

    def _make(**kwargs):
        return DigitalCookieRow.from_export(dc_export_row(**kwargs), registry.dc_columns)

    return _make


@pytest.fixture
def sc_order():
    """Factory for one ledger order-search record."""

    def _make(
        transfer_type="T2G",
        order_number="T-1",
        from_="Troop 123",
        to="Alice Smith",
        date="2025-02-01",
        total="$0.00",
        virtual_booth=False,
        smart_divider_id=None,
        direct_ship_divider=False,
        **varieties,
    ):
        return {
            "transfer_type": transfer_type,
            "order_number": order_number,
            "from": from_,
            "to": to,
            "date": date,
            "cookies": [
                {"id": COOKIE_IDS[cookie_type], "quantity": count}
                for cookie_type, count in varieties.items()
            ],
            "total": total,
            "virtual_booth": virtual_booth,
            "smart_divider_id": smart_divider_id,
            "direct_ship_divider": direct_ship_divider,
            "status": "SAVED",
        }

    return _make


@pytest.fixture
def divider_girl():
    """Factory for one girl entry inside a divider payload."""

    def _make(girl_id, first="Alice", last="Smith", **varieties):
        return {
            "id": girl_id,
            "first_name": first,
            "last_name": last,
            "cookies": [
                {"id": COOKIE_IDS[cookie_type], "quantity": count}
                for cookie_type, count in varieties.items()
            ],
        }

    return _make


# =============================================================================
# Classified record builders
# =============================================================================


@pytest.fixture
def transfer():
    """Factory for a classified ``Transfer``; hint flags pass through to TransferHints."""
    from troop_engines.transfer_classifier import TransferHints, create_transfer

    def _make(
        raw_type="T2G",
        *,
        to="Alice Smith",
        from_="Troop 123",
        order_number="T-1",
        date="2025-02-01",
        packages=None,
        warnings=None,
        troop_number=None,
        virtual_booth=False,
        booth_divider=False,
        direct_ship_divider=False,
        **varieties,
    ):
        return create_transfer(
            raw_type=raw_type,
            order_number=order_number,
            from_=from_,
            to=to,
            date=date,
            varieties=varieties,
            packages=sum(varieties.values()) if packages is None else packages,
            hints=TransferHints(
                virtual_booth=virtual_booth,
                booth_divider=booth_divider,
                direct_ship_divider=direct_ship_divider,
                troop_number=troop_number,
                from_=from_,
            ),
            warnings=warnings,
        )

    return _make


@pytest.fixture
def divider_allocation():
    """Factory for a divider ``Allocation`` as the allocation importer builds it."""
    from troop_kernel.domain.entities import Allocation
    from troop_kernel.domain.enums import AllocationChannel, AllocationSource

    def _make(
        girl_id,
        channel=AllocationChannel.BOOTH,
        *,
        reservation_id="R-1",
        order_id=None,
        **varieties,
    ):
        donations = varieties.get("COOKIE_SHARE", 0)
        source = (
            AllocationSource.SMART_BOOTH_DIVIDER
            if channel == AllocationChannel.BOOTH
            else AllocationSource.SMART_DIRECT_SHIP_DIVIDER
        )
        return Allocation(
            channel=channel,
            source=source,
            packages=sum(varieties.values()) - donations,
            donations=donations,
            varieties=dict(varieties),
            girl_id=girl_id,
            reservation_id=reservation_id if channel == AllocationChannel.BOOTH else None,
            order_id=order_id,
        )

    return _make
