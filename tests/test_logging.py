"""Tests for the structured logging system (troop_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO

import pytest

from troop_kernel.domain.enums import TransferCategory
from troop_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    """Parse all JSON log lines from a stream."""
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "troop_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("orders_attached", extra={"attached": 3, "skipped_unmatched": 1})

        record = _parse_log(stream)
        assert record["attached"] == 3
        assert record["skipped_unmatched"] == 1

    def test_decimal_and_enum_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info(
            "typed",
            extra={"amount": Decimal("12.50"), "category": TransferCategory.GIRL_PICKUP},
        )

        record = _parse_log(stream)
        assert record["amount"] == "12.50"
        assert record["category"] == "GIRL_PICKUP"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        LogContext.set(run_id="run-1", source="DC")
        logger.info("test_msg")

        record = _parse_log(stream)
        assert record["run_id"] == "run-1"
        assert record["source"] == "DC"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise ValueError("boom")
        except ValueError:
            logger.error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_kernel_exception_code_extracted(self):
        """Kernel exceptions carry a .code attribute and structured fields."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        from troop_kernel.exceptions import InputShapeError

        try:
            raise InputShapeError("smart_cookie_orders", "a list", "str")
        except InputShapeError:
            logger.error("import_failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "INPUT_SHAPE_ERROR"
        assert record["exc_type"] == "InputShapeError"
        assert record["exc_source"] == "smart_cookie_orders"
        assert record["exc_expected"] == "a list"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("bare_message")

        record = _parse_log(stream)
        assert "run_id" not in record
        assert "scout" not in record

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # default level is INFO, so the debug line is dropped
        assert len(logs) == 2
        for record in logs:
            assert "ts" in record
            assert "level" in record
            assert "logger" in record
            assert "message" in record


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(run_id="x", scout="Alice Smith")
        assert LogContext.get_all() == {"run_id": "x", "scout": "Alice Smith"}

    def test_clear(self):
        LogContext.set(run_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(source="DC")
        with LogContext.bind(source="SC-API"):
            assert LogContext.get_all()["source"] == "SC-API"
        assert LogContext.get_all()["source"] == "DC"

    def test_bind_restores_none(self):
        """bind() restores to None if there was no previous value."""
        assert "run_id" not in LogContext.get_all()
        with LogContext.bind(run_id="temp"):
            assert LogContext.get_all()["run_id"] == "temp"
        assert "run_id" not in LogContext.get_all()

    def test_bind_ignores_none_values(self):
        with LogContext.bind(run_id="r", troop_number=None):
            assert LogContext.get_all() == {"run_id": "r"}

    def test_all_fields(self):
        LogContext.set(
            run_id="r",
            troop_number="123",
            source="DC",
            scout="Alice Smith",
            order_number="1001",
        )
        assert set(LogContext.get_all()) == {
            "run_id",
            "troop_number",
            "source",
            "scout",
            "order_number",
        }


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for logger initialization."""

    def test_idempotent(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        configure_logging(handler=handler)
        get_logger("test").info("once")

        assert len(_parse_all_logs(stream)) == 1

    def test_does_not_propagate_to_root(self):
        handler, _ = _make_handler()
        configure_logging(handler=handler)
        assert logging.getLogger("troop_kernel").propagate is False

    def test_level_respected(self):
        handler, stream = _make_handler()
        configure_logging(level=logging.WARNING, handler=handler)
        logger = get_logger("test")
        logger.info("hidden")
        logger.warning("shown")

        logs = _parse_all_logs(stream)
        assert [r["message"] for r in logs] == ["shown"]
