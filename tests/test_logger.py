"""Tests for the logging setup."""

import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

import pytest

from warncord.util import logger as logger_module
from warncord.util.logger import (
    DATE_FORMAT,
    LOG_FORMAT,
    ColorFormatter,
    PromptToolkitHandler,
    get_log_filepath,
    get_logger,
    handle_exception,
    should_use_color,
)


def make_record(level: int, msg: str) -> logging.LogRecord:
    return logging.LogRecord(
        name="warncord.test",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
        func="test_func",
    )


@patch("sys.stderr.isatty")
def test_should_use_color(mock_isatty):
    mock_isatty.return_value = True
    assert should_use_color() is True

    mock_isatty.side_effect = OSError("closed")
    assert should_use_color() is False


@pytest.mark.parametrize(
    "level, color",
    [(logging.DEBUG, "\033[36m"), (logging.WARNING, "\033[33m"), (logging.ERROR, "\033[31m")],
)
def test_color_formatter_wraps_level_color(level, color):
    formatted = ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT).format(make_record(level, "hello"))

    assert formatted.startswith(color)
    assert formatted.endswith("\033[0m")
    assert "hello" in formatted


def test_get_logger_configures_once():
    first = get_logger("warncord_test_configure_once")
    second = get_logger("warncord_test_configure_once")

    assert first is second
    assert first.level == logging.DEBUG
    assert first.propagate is False
    assert len(first.handlers) == 2
    assert any(isinstance(h, PromptToolkitHandler) and h.level == logging.INFO for h in first.handlers)
    assert any(isinstance(h, RotatingFileHandler) and h.level == logging.DEBUG for h in first.handlers)


def test_all_loggers_share_one_session_file():
    path = get_log_filepath()

    assert get_log_filepath() == path
    assert path.parent == logger_module.LOGS_DIR
    assert path.suffix == ".log"


def test_prompt_toolkit_handler_reports_print_failures():
    handler = PromptToolkitHandler()

    with patch("warncord.util.logger.print_formatted_text", side_effect=RuntimeError("no tty")), \
            patch.object(handler, "handleError") as mock_handle_error:
        handler.emit(make_record(logging.INFO, "message"))

    mock_handle_error.assert_called_once()


def test_noisy_loggers_are_silenced():
    for name in logger_module.NOISY_LOGGERS:
        assert logging.getLogger(name).level == logging.ERROR


def test_handle_exception_logs_uncaught_errors():
    with patch("logging.error") as mock_error:
        handle_exception(ValueError, ValueError("boom"), None)

    mock_error.assert_called_once()


def test_handle_exception_passes_keyboard_interrupt_through():
    with patch("sys.__excepthook__") as mock_default_hook, patch("logging.error") as mock_error:
        handle_exception(KeyboardInterrupt, KeyboardInterrupt(), None)

    mock_default_hook.assert_called_once()
    mock_error.assert_not_called()
