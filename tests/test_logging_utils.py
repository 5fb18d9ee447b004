"""Tests for logging setup."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest

from tipcard_session.logging_utils import (
    ContextLoggerAdapter,
    StructuredJsonFormatter,
    configure_logging,
)


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        "tipcard_session.records", logging.WARNING, __file__, 1, "sync failed", (), None
    )
    record.__dict__.update(extra)
    return record


@pytest.fixture
def scratch_logger() -> Iterator[str]:
    name = "tipcard_session.tests.scratch"
    yield name
    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.propagate = True


class TestStructuredJsonFormatter:
    """Tests for StructuredJsonFormatter."""

    def test_basic_fields(self) -> None:
        entry = json.loads(StructuredJsonFormatter().format(_record()))

        assert entry["level"] == "WARNING"
        assert entry["logger"] == "tipcard_session.records"
        assert entry["message"] == "sync failed"
        assert "timestamp" in entry

    def test_context_fields_and_masking(self) -> None:
        entry = json.loads(
            StructuredJsonFormatter().format(
                _record(record_key="hotels/h1", password="secret1", id_token="")
            )
        )

        assert entry["record_key"] == "hotels/h1"
        assert entry["password"] == "***"
        assert entry["id_token"] == ""


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_text_format_adds_no_handler(self, scratch_logger: str) -> None:
        logger = configure_logging(logging.DEBUG, "text", scratch_logger)

        assert logger.level == logging.DEBUG
        assert logger.handlers == []

    def test_json_format_is_idempotent(self, scratch_logger: str) -> None:
        configure_logging(logging.INFO, "json", scratch_logger)
        logger = configure_logging(logging.INFO, "json", scratch_logger)

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, StructuredJsonFormatter)
        assert logger.propagate is False


class TestContextLoggerAdapter:
    """Tests for ContextLoggerAdapter."""

    def test_adds_context(self, caplog: pytest.LogCaptureFixture) -> None:
        adapter = ContextLoggerAdapter(
            logging.getLogger("tipcard_session.tests.adapter"), {"record_key": "hotels/h1"}
        )

        with caplog.at_level(logging.INFO, logger="tipcard_session.tests.adapter"):
            adapter.info("synced", extra={"attempt": 1})

        assert caplog.records[0].record_key == "hotels/h1"
        assert caplog.records[0].attempt == 1
