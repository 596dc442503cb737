"""Tests for justdo/logging_config.py."""

import json
import logging

import pytest

from justdo.logging_config import ContextTextFormatter, JsonFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers = saved_handlers
    root.setLevel(saved_level)


def test_setup_logging_writes_rotating_file(tmp_path, restore_root_logger):
    logs_dir = tmp_path / "logs"
    setup_logging("debug", str(logs_dir))
    logging.getLogger("justdo.test").info("hello file")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert logging.getLogger().level == logging.DEBUG
    assert "hello file" in (logs_dir / "justdo.log").read_text()
    assert logging.getLogger("anthropic").level == logging.WARNING


def test_unknown_level_defaults_to_info(tmp_path, restore_root_logger):
    setup_logging("chatty", str(tmp_path))
    assert logging.getLogger().level == logging.INFO


def test_json_formatter():
    record = logging.LogRecord("justdo.x", logging.WARNING, __file__, 1, "blocked %s", ("delete_entry",), None)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "justdo.x"
    assert payload["message"] == "blocked delete_entry"
    assert "timestamp" in payload


def test_json_formatter_includes_tool_context():
    record = logging.LogRecord("justdo.x", logging.INFO, __file__, 1, "Executing tool %s", ("get_entry",), None)
    record.tool = "get_entry"
    record.channel = "chat"
    payload = json.loads(JsonFormatter().format(record))
    assert payload["tool"] == "get_entry"
    assert payload["channel"] == "chat"
    assert "entry_path" not in payload


def test_text_formatter_appends_context_only_when_present():
    formatter = ContextTextFormatter(fmt="%(message)s%(context)s")
    plain = logging.LogRecord("justdo.x", logging.INFO, __file__, 1, "hello", (), None)
    assert formatter.format(plain) == "hello"

    tagged = logging.LogRecord("justdo.x", logging.INFO, __file__, 1, "hello", (), None)
    tagged.tool = "move_entry"
    assert formatter.format(tagged) == "hello [tool=move_entry]"


def test_empty_logs_dir_skips_file_handler(restore_root_logger):
    setup_logging("info", "")
    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.StreamHandler)
