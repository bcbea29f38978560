"""Tests for budget_kernel.logging_config: JSON formatting, context fields, setup."""

import json
import logging
from datetime import date, datetime, timezone
from io import StringIO
from uuid import uuid4

import pytest

from budget_kernel.domain.dtos import BudgetPeriod
from budget_kernel.exceptions import BudgetPeriodNotEndedError
from budget_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def read_logs():
    """Configure logging onto a buffer; returns a callable parsing every line."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    configure_logging(handler=handler)

    def _read() -> list[dict]:
        return [json.loads(line) for line in stream.getvalue().splitlines() if line]

    return _read


logger = get_logger("test")


class TestStructuredFormatter:
    def test_base_fields(self, read_logs):
        logger.info("hello")

        [record] = read_logs()
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "budget_kernel.test"
        assert datetime.fromisoformat(record["ts"]).tzinfo is not None

    def test_domain_values_encoded(self, read_logs):
        budget_id = uuid4()
        logger.info(
            "budget_created",
            extra={
                "budget_id": budget_id,
                "period": BudgetPeriod.MONTHLY,
                "start_date": date(2024, 1, 1),
                "created_at": datetime(2024, 1, 15, 12, tzinfo=timezone.utc),
                "amount": 10000,
            },
        )

        [record] = read_logs()
        assert record["budget_id"] == str(budget_id)
        assert record["period"] == "monthly"
        assert record["start_date"] == "2024-01-01"
        assert record["created_at"] == "2024-01-15T12:00:00+00:00"
        assert record["amount"] == 10000

    def test_context_fields_included(self, read_logs):
        with LogContext.bind(correlation_id="c-1", entity_type="expense"):
            logger.info("inside")
        logger.info("outside")

        inside, outside = read_logs()
        assert (inside["correlation_id"], inside["entity_type"]) == ("c-1", "expense")
        assert "correlation_id" not in outside

    def test_extra_overrides_context(self, read_logs):
        with LogContext.bind(entity_id="predecessor"):
            logger.info("audit_entry_written", extra={"entity_id": "successor"})

        [record] = read_logs()
        assert record["entity_id"] == "successor"

    def test_extra_cannot_replace_base_fields(self, read_logs):
        logger.info("real", extra={"level": "FAKE", "ts": "never"})

        [record] = read_logs()
        assert record["level"] == "INFO"
        assert record["ts"] != "never"

    def test_kernel_exception_fields(self, read_logs):
        try:
            raise BudgetPeriodNotEndedError("b-1", "2024-01-31")
        except BudgetPeriodNotEndedError:
            logger.error("rollover_failed", exc_info=True)

        [record] = read_logs()
        assert record["exc_type"] == "BudgetPeriodNotEndedError"
        assert record["exc_code"] == "BUDGET_PERIOD_NOT_ENDED"
        assert record["exc_budget_id"] == "b-1"
        assert record["exc_end_date"] == "2024-01-31"
        assert "Traceback" in record["traceback"]

    def test_plain_exception_has_no_code(self, read_logs):
        try:
            raise ValueError("boom")
        except ValueError:
            logger.exception("failed")

        [record] = read_logs()
        assert record["exc_message"] == "boom"
        assert "exc_code" not in record

    def test_debug_filtered_at_default_level(self, read_logs):
        logger.debug("hidden")
        logger.warning("shown")

        assert [r["message"] for r in read_logs()] == ["shown"]


class TestLogContext:
    def test_set_is_additive(self):
        LogContext.set(correlation_id="a")
        LogContext.set(actor_id="u-1", actor_role=None)
        assert LogContext.get_all() == {"correlation_id": "a", "actor_id": "u-1"}

    def test_clear(self):
        LogContext.set(entity_type="budget", entity_id="b-1")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_nested_bind_restores_outer_values(self):
        with LogContext.bind(correlation_id="outer", actor_id="u-1"):
            with LogContext.bind(correlation_id="inner", entity_id="e-1"):
                assert LogContext.get_all() == {
                    "correlation_id": "inner",
                    "actor_id": "u-1",
                    "entity_id": "e-1",
                }
            assert LogContext.get_all() == {"correlation_id": "outer", "actor_id": "u-1"}
        assert LogContext.get_all() == {}

    def test_bind_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(entity_type="user"):
                raise RuntimeError("fail")
        assert LogContext.get_all() == {}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError):
            LogContext.set(event_id="x")
        with pytest.raises(TypeError):
            with LogContext.bind(producer="x"):
                pass


class TestConfigureLogging:
    def test_idempotent(self):
        configure_logging(handler=logging.StreamHandler(StringIO()))
        configure_logging(handler=logging.StreamHandler(StringIO()))
        root = logging.getLogger("budget_kernel")
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        assert root.propagate is False

    def test_reset_allows_reconfiguration(self):
        configure_logging(handler=logging.StreamHandler(StringIO()))
        reset_logging()
        assert logging.getLogger("budget_kernel").handlers == []

    def test_child_loggers_share_root(self):
        stream = StringIO()
        configure_logging(handler=logging.StreamHandler(stream), level=logging.DEBUG)
        child = get_logger("services.budget")
        assert child.name == "budget_kernel.services.budget"

        child.debug("deep")
        assert json.loads(stream.getvalue())["message"] == "deep"
