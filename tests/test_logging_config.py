import json
import logging

import pytest
import structlog

from app.logging_config import QUIET_LOGGERS, add_service, select_renderer, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def test_auto_format_follows_level():
    assert isinstance(select_renderer("auto", logging.DEBUG), structlog.dev.ConsoleRenderer)
    assert isinstance(select_renderer("auto", logging.INFO), structlog.processors.JSONRenderer)


def test_explicit_format_wins_over_level():
    assert isinstance(select_renderer("json", logging.DEBUG), structlog.processors.JSONRenderer)
    assert isinstance(select_renderer("console", logging.WARNING), structlog.dev.ConsoleRenderer)


def test_service_name_is_added_without_overwriting():
    assert add_service(None, "info", {"event": "x"})["service"] == "copytrade-dashboard"
    assert add_service(None, "info", {"event": "x", "service": "cli"})["service"] == "cli"


def test_stdlib_records_render_as_json_lines(restore_logging):
    setup_logging("INFO", "json")

    handler = restore_logging.handlers[0]
    assert len(restore_logging.handlers) == 1
    assert restore_logging.level == logging.INFO
    assert all(logging.getLogger(name).level == logging.WARNING for name in QUIET_LOGGERS)

    record = logging.LogRecord("app.providers.polymarket.gamma", logging.ERROR, __file__, 1, "Gamma down", None, None)
    line = json.loads(handler.format(record))

    assert line["event"] == "Gamma down"
    assert line["level"] == "error"
    assert line["service"] == "copytrade-dashboard"
    assert line["logger"] == "app.providers.polymarket.gamma"
