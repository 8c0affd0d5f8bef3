"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys

import pytest

from habyss.logging_config import LOGGER_NAME, JSONFormatter, get_logger, setup_logging


@pytest.fixture(autouse=True)
def reset_habyss_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _record(level=logging.INFO, msg="Test message", exc_info=None) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    record.module = "test_module"
    record.funcName = "test_function"
    return record


def test_json_formatter():
    """JSONFormatter emits the core record fields."""
    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test.logger"
    assert log_data["message"] == "Test message"
    assert log_data["module"] == "test_module"
    assert log_data["function"] == "test_function"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "extra" not in log_data


def test_json_formatter_with_exception():
    try:
        raise ValueError("Test error")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(JSONFormatter().format(_record(logging.ERROR, "Error occurred", exc_info)))

    assert log_data["exception"]["type"] == "ValueError"
    assert "Test error" in log_data["exception"]["message"]
    assert log_data["exception"]["traceback"] is not None


def test_json_formatter_includes_extra_fields():
    record = _record()
    record.habit_id = "abc123"

    log_data = json.loads(JSONFormatter().format(record))

    assert log_data["extra"] == {"habit_id": "abc123"}


def test_setup_logging(test_config):
    """Logging setup writes JSON lines to a rotating file under DATA_DIR."""
    test_config.DEV_MODE = True

    logger = setup_logging(test_config)

    assert logger.name == "habyss"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    log_file = test_config.DATA_DIR / "logs" / "habyss.log"
    assert log_file.exists()

    get_logger("engine").warning("Toggle failed")
    for handler in logger.handlers:
        handler.flush()

    lines = [line for line in log_file.read_text(encoding="utf-8").splitlines() if line.strip()]
    entries = [json.loads(line) for line in lines]
    assert entries[0]["message"] == "Logging initialized"
    assert entries[-1]["logger"] == "habyss.engine"
    assert entries[-1]["level"] == "WARNING"


def test_setup_logging_is_repeatable(test_config):
    setup_logging(test_config)
    logger = setup_logging(test_config)

    assert len(logger.handlers) == 2


def test_get_logger():
    logger1 = get_logger("module1")
    logger2 = get_logger("module2")

    assert logger1.name == "habyss.module1"
    assert logger2.name == "habyss.module2"
    assert logger1 is not logger2


@pytest.mark.parametrize("dev_mode", [True, False])
def test_logging_levels_by_mode(test_config, dev_mode):
    """Console verbosity follows dev mode."""
    test_config.DEV_MODE = dev_mode

    logger = setup_logging(test_config)

    console_handler = next(
        handler
        for handler in logger.handlers
        if isinstance(handler, logging.StreamHandler)
        and not isinstance(handler, logging.handlers.RotatingFileHandler)
    )
    assert console_handler.level == (logging.INFO if dev_mode else logging.WARNING)
    assert logger.level == (logging.DEBUG if dev_mode else logging.INFO)
