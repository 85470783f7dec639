"""Tests for the structured logging system (provenance_kernel/logging_config.py)."""

import json
import logging
from io import StringIO

import pytest

from provenance_kernel.domain.values import BatchStatus, HistoryAction
from provenance_kernel.exceptions import NotOwnerError
from provenance_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests and restore the suite configuration."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


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
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "provenance_kernel.test"
        assert record["ts"].endswith("+00:00")

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("batch_split", extra={"new_batch_id": 2, "split_quantity": 40})

        record = _parse_log(stream)
        assert record["new_batch_id"] == 2
        assert record["split_quantity"] == 40

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        with LogContext.bind(correlation_id="abc-123", batch_id="7", caller="ST1"):
            get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["batch_id"] == "7"
        assert record["caller"] == "ST1"

    def test_context_wins_over_extra(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        with LogContext.bind(batch_id="7"):
            get_logger("test").info("test_msg", extra={"batch_id": 99})

        assert _parse_log(stream)["batch_id"] == "7"

    def test_kernel_exception_fields_extracted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise NotOwnerError(3, "ST-CALLER", "ST-OWNER")
        except NotOwnerError:
            get_logger("test").error("rejected", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "NotOwnerError"
        assert record["exc_code"] == "NOT_OWNER"
        assert record["exc_batch_id"] == 3
        assert record["exc_owner"] == "ST-OWNER"
        assert "traceback" in record

    def test_enums_logged_as_values(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info(
            "with_values",
            extra={"status": BatchStatus.VERIFIED, "action": HistoryAction.CREATED_FROM_SPLIT},
        )

        record = _parse_log(stream)
        assert record["status"] == "verified"
        assert record["action"] == "created_from_split"

    def test_unserializable_values_fall_back_to_str(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("odd_input", extra={"recipient": b"ST1", "quantity": 2**64})

        record = _parse_log(stream)
        assert record["recipient"] == "b'ST1'"
        assert record["quantity"] == 2**64

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "operation" not in record

    def test_level_filtering(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second")
        logger.debug("third")

        assert [r["message"] for r in _parse_all_logs(stream)] == ["first", "second"]


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    def test_bind_and_get(self):
        with LogContext.bind(correlation_id="x", operation="split_batch"):
            assert LogContext.get_all() == {"correlation_id": "x", "operation": "split_batch"}
        assert LogContext.get_all() == {}

    def test_clear(self):
        with LogContext.bind(correlation_id="x"):
            LogContext.clear()
            assert LogContext.get_all() == {}

    def test_nested_bind_restores_outer(self):
        with LogContext.bind(correlation_id="outer"):
            with LogContext.bind(correlation_id="inner", batch_id="1"):
                assert LogContext.get_all() == {"correlation_id": "inner", "batch_id": "1"}
            assert LogContext.get_all() == {"correlation_id": "outer"}

    def test_bind_restores_on_error(self):
        with pytest.raises(NotOwnerError):
            with LogContext.bind(caller="ST1"):
                raise NotOwnerError(1, "ST1", "ST2")
        assert LogContext.get_all() == {}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError):
            with LogContext.bind(batch="1"):
                pass

    def test_bind_ignores_none(self):
        with LogContext.bind(correlation_id="c", batch_id=None):
            assert "batch_id" not in LogContext.get_all()


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)
        assert logging.getLogger("provenance_kernel").handlers == [h1]

    def test_logger_hierarchy(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("services.lifecycle_engine").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["logger"] == "provenance_kernel.services.lifecycle_engine"
