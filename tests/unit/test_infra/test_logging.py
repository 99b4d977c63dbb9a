"""Tests for logging setup, JSON formatting and lazy evaluation."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from keyset_relay.core.settings import LoggingSettings
from keyset_relay.infra.logging import JSONFormatter, configure_logging, get_lazy_logger, setup_logging
from keyset_relay.infra.logging import config as logging_config


@pytest.fixture
def restore_root_logger():
    """Restore root handlers and level after tests that reconfigure logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.captureWarnings(False)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="keyset_relay.core.pagination.engine",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Page fetched with %s rows",
        args=(3,),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


class TestJSONFormatter:
    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "keyset_relay.core.pagination.engine"
        assert data["message"] == "Page fetched with 3 rows"
        assert data["timestamp"].endswith("Z")
        assert "trace_id" not in data

    def test_extra_and_static_fields(self):
        formatter = JSONFormatter(static={"service": "keyset-relay"})

        data = json.loads(formatter.format(_record(operation="pagination.fetch", rows=3)))

        assert data["service"] == "keyset-relay"
        assert data["operation"] == "pagination.fetch"
        assert data["rows"] == 3
        assert "args" not in data

    def test_exception_on_one_line(self):
        try:
            raise ValueError("bad\ncursor")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()

        output = JSONFormatter().format(record)

        assert "\n" not in output
        assert "ValueError" in json.loads(output)["exception"]

    def test_non_serializable_extra(self):
        data = json.loads(JSONFormatter().format(_record(sort=object())))
        assert data["sort"].startswith("<object object")


class TestLazyLogger:
    def test_callable_not_evaluated_when_disabled(self, caplog):
        calls = []
        lazy = get_lazy_logger("keyset_relay.tests.lazy")

        with caplog.at_level(logging.INFO, logger="keyset_relay.tests.lazy"):
            lazy.debug(lambda: calls.append("msg") or "message")
            lazy.debug("value=%s", lambda: calls.append("arg") or 1)

        assert calls == []
        assert caplog.records == []

    def test_callable_evaluated_when_enabled(self, caplog):
        lazy = get_lazy_logger("keyset_relay.tests.lazy")

        with caplog.at_level(logging.DEBUG, logger="keyset_relay.tests.lazy"):
            lazy.debug(lambda: "computed message")
            lazy.info("rows=%s", lambda: 5)

        assert [r.getMessage() for r in caplog.records] == ["computed message", "rows=5"]

    def test_bound_context(self, caplog):
        lazy = get_lazy_logger("keyset_relay.tests.lazy", component="engine")

        with caplog.at_level(logging.WARNING, logger="keyset_relay.tests.lazy"):
            lazy.warning("careful")

        assert caplog.records[0].component == "engine"


class TestConfigureLogging:
    def test_json_console_handler(self, restore_root_logger):
        configure_logging(log_level="debug", json_logs=True, capture_warnings=False)

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert root.handlers[0].formatter.static == {"service": "keyset-relay"}

    def test_text_format(self, restore_root_logger):
        configure_logging(json_logs=False, capture_warnings=False)

        formatter = restore_root_logger.handlers[0].formatter
        assert not isinstance(formatter, JSONFormatter)
        assert formatter._fmt == logging_config.TEXT_FORMAT

    def test_console_disabled(self, restore_root_logger):
        configure_logging(console_enabled=False, capture_warnings=False)

        assert restore_root_logger.handlers == []

    def test_setup_logging_runs_once(self, restore_root_logger, monkeypatch):
        monkeypatch.setattr(logging_config, "_LOGGING_INITIALIZED", False)
        settings = LoggingSettings(level="WARNING", capture_warnings=False)

        setup_logging(settings)
        setup_logging(LoggingSettings(level="DEBUG", capture_warnings=False))

        assert restore_root_logger.level == logging.WARNING

        setup_logging(LoggingSettings(level="ERROR", capture_warnings=False), force=True)
        assert restore_root_logger.level == logging.ERROR
