r"""Unit tests for the structured logging utilities."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from unittest.mock import Mock

import pytest

from arebound.utils.structured_logging import (
    StructuredFormatter,
    clear_correlation_id,
    get_correlation_id,
    log_structured,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def _reset_correlation_id() -> None:
    clear_correlation_id()


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="arebound.retry.executor_core",
        level=logging.DEBUG,
        pathname=__file__,
        lineno=12,
        msg="waiting %s",
        args=("1.00s",),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


####################################
#     Tests for correlation IDs    #
####################################


def test_correlation_id_default() -> None:
    assert get_correlation_id() is None


def test_set_and_clear_correlation_id() -> None:
    set_correlation_id("checkout-42")
    assert get_correlation_id() == "checkout-42"
    clear_correlation_id()
    assert get_correlation_id() is None


@pytest.mark.asyncio
async def test_correlation_id_is_task_local() -> None:
    async def tagged(value: str) -> str | None:
        set_correlation_id(value)
        await asyncio.sleep(0)
        return get_correlation_id()

    assert await asyncio.gather(tagged("a"), tagged("b")) == ["a", "b"]
    assert get_correlation_id() is None


#########################################
#     Tests for StructuredFormatter     #
#########################################


def test_structured_formatter_basic_fields() -> None:
    data = json.loads(StructuredFormatter().format(make_record()))
    assert data["level"] == "DEBUG"
    assert data["logger"] == "arebound.retry.executor_core"
    assert data["message"] == "waiting 1.00s"
    assert data["line"] == 12
    assert data["timestamp"].endswith("Z")
    assert "correlation_id" not in data
    assert "args" not in data


def test_structured_formatter_extra_fields() -> None:
    record = make_record(attempt=2, wait_time=1.5, status_code=None)
    data = json.loads(StructuredFormatter().format(record))
    assert data["attempt"] == 2
    assert data["wait_time"] == 1.5
    assert data["status_code"] is None


def test_structured_formatter_correlation_id() -> None:
    set_correlation_id("req-7")
    data = json.loads(StructuredFormatter().format(make_record()))
    assert data["correlation_id"] == "req-7"


def test_structured_formatter_non_serializable_extra() -> None:
    data = json.loads(StructuredFormatter().format(make_record(error=ValueError("boom"))))
    assert data["error"] == "boom"


def test_structured_formatter_exception() -> None:
    try:
        msg = "boom"
        raise RuntimeError(msg)
    except RuntimeError:
        record = make_record()
        record.exc_info = sys.exc_info()
    data = json.loads(StructuredFormatter().format(record))
    assert "RuntimeError: boom" in data["exception"]


####################################
#     Tests for log_structured     #
####################################


def test_log_structured_attaches_fields(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("arebound.test_log_structured")
    with caplog.at_level(logging.DEBUG, logger="arebound.test_log_structured"):
        log_structured(logger, logging.INFO, "attempt failed", attempt=3, outcome="rate_limited")
    (record,) = caplog.records
    assert record.getMessage() == "attempt failed"
    assert record.attempt == 3
    assert record.outcome == "rate_limited"
    assert record.funcName == "test_log_structured_attaches_fields"


def test_log_structured_disabled_level() -> None:
    logger = Mock(spec=logging.Logger, isEnabledFor=Mock(return_value=False))
    log_structured(logger, logging.DEBUG, "ignored", attempt=1)
    logger.log.assert_not_called()
