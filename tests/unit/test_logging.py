"""Tests for structured logging helpers."""

import json
import logging
from contextlib import contextmanager

import structlog

from wardrobe.logging import bind_context, clear_context, configure_structlog, get_logger
from wardrobe.logging.structured import add_service_info


@contextmanager
def configured(**kwargs):
    """Configure logging for one block, then put the root logger back."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    try:
        configure_structlog(**kwargs)
        yield
    finally:
        clear_context()
        structlog.reset_defaults()
        root.handlers[:] = handlers
        root.setLevel(level)


class TestContext:
    def test_bind_and_clear(self):
        bind_context(request_id="req-1", user_id="user-a")
        assert structlog.contextvars.get_contextvars() == {
            "request_id": "req-1",
            "user_id": "user-a",
        }

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_empty_values_not_bound(self):
        bind_context(request_id="req-1", user_id=None)
        try:
            assert structlog.contextvars.get_contextvars() == {"request_id": "req-1"}
        finally:
            clear_context()


class TestConfigure:
    def test_json_output_includes_context(self, capsys):
        with configured(json_format=True, log_level="INFO"):
            bind_context(request_id="req-9")
            get_logger("tests").info("closet_item_created", item_id="rec1")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["event"] == "closet_item_created"
        assert entry["request_id"] == "req-9"
        assert entry["service"] == "outfitted-gateway"
        assert entry["level"] == "info"

    def test_level_filters(self, capsys):
        with configured(json_format=True, log_level="WARNING"):
            assert logging.getLogger().level == logging.WARNING
            get_logger("tests").info("hidden")

        assert "hidden" not in capsys.readouterr().out


def test_add_service_info():
    assert add_service_info(None, "info", {"event": "x"})["service"] == "outfitted-gateway"
