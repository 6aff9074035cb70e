"""Unit tests for logging configuration module.

Tests verify that setup_logging installs the expected handlers, levels and
formats, and that file logging only happens when it is switched on.
"""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from transparent_trust.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def _console_handlers():
    return [
        h
        for h in logging.getLogger().handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]


class TestSetupLoggingLevels:
    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("error", logging.ERROR),
        ],
    )
    def test_console_handler_level(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)

        handlers = _console_handlers()
        assert len(handlers) == 1
        assert handlers[0].level == expected_level
        assert logging.getLogger().level == logging.DEBUG

    def test_module_levels_are_applied(self):
        setup_logging(log_level="INFO", enable_file=False)

        for module_name, module_level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(module_name).level == logging.getLevelName(module_level)

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging(log_level="INFO", enable_file=False)
        setup_logging(log_level="INFO", enable_file=False)

        assert len(_console_handlers()) == 1


class TestSetupLoggingFormats:
    @pytest.mark.parametrize(
        "log_format,expected",
        [("simple", SIMPLE_FORMAT), ("detailed", DETAILED_FORMAT), ("json", JSON_FORMAT), ("other", DETAILED_FORMAT)],
    )
    def test_formatter(self, log_format, expected):
        setup_logging(log_level="INFO", log_format=log_format, enable_file=False)

        assert _console_handlers()[0].formatter._fmt == expected


class TestFileLogging:
    def test_file_handler_when_enabled(self, tmp_path: Path):
        log_dir = tmp_path / "logs"
        with (
            patch("transparent_trust.core.logging_config.ENABLE_FILE_LOGGING", True),
            patch("transparent_trust.core.logging_config.LOG_FILE_DIR", str(log_dir)),
        ):
            setup_logging(log_level="INFO", enable_file=True)

        file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].level == logging.DEBUG
        assert (log_dir / "transparent_trust.log").exists()

    def test_no_file_handler_when_globally_disabled(self, tmp_path: Path):
        with (
            patch("transparent_trust.core.logging_config.ENABLE_FILE_LOGGING", False),
            patch("transparent_trust.core.logging_config.LOG_FILE_DIR", str(tmp_path / "logs")),
        ):
            setup_logging(log_level="INFO", enable_file=True)

        assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)
        assert not (tmp_path / "logs").exists()


def test_get_logger():
    logger = get_logger("transparent_trust.core.templating")
    assert logger is logging.getLogger("transparent_trust.core.templating")
