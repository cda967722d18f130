"""Tests for calendar_engine.engine_logging module."""

import logging
import os
from unittest.mock import patch

import pytest
from colorlog import ColoredFormatter

from calendar_engine.core.config_manager import EngineSettings
from calendar_engine.engine_logging import (
    ENGINE_MODULES,
    build_console_handler,
    configure_engine_logging,
    get_logging_status,
    resolve_levels,
)

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def restore_logging_levels():
    """Put root and engine logger levels back after each test."""
    root_logger = logging.getLogger()
    saved_root = root_logger.level
    saved_modules = {name: logging.getLogger(name).level for name in ENGINE_MODULES}
    yield
    root_logger.setLevel(saved_root)
    for handler in list(root_logger.handlers):
        if isinstance(handler.formatter, ColoredFormatter):
            root_logger.removeHandler(handler)
    for name, level in saved_modules.items():
        logging.getLogger(name).setLevel(level)


class TestConfigureEngineLogging:
    """Tests for configure_engine_logging function."""

    def test_configure_engine_logging_default_production_mode(self):
        """Test default production mode configuration."""
        configure_engine_logging()

        assert logging.getLogger().level == logging.INFO
        assert logging.getLogger("calendar_engine").level == logging.INFO

    def test_configure_engine_logging_debug_mode(self):
        """Test debug mode configuration."""
        configure_engine_logging(debug_mode=True)

        assert logging.getLogger().level == logging.DEBUG
        for name in ENGINE_MODULES:
            assert logging.getLogger(name).level == logging.DEBUG

    def test_configure_engine_logging_force_debug_override(self):
        """Test force_debug parameter overrides debug_mode."""
        configure_engine_logging(debug_mode=False, force_debug=True)

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("calendar_engine").level == logging.DEBUG

    @patch.dict(os.environ, {"CALENDAR_ENGINE_DEBUG": "true"})
    def test_force_debug_false_beats_env(self):
        """An explicit force_debug=False wins over CALENDAR_ENGINE_DEBUG."""
        configure_engine_logging(force_debug=False)

        assert logging.getLogger("calendar_engine").level == logging.INFO

    @patch.dict(os.environ, {"CALENDAR_ENGINE_DEBUG": "1"})
    def test_configure_engine_logging_env_debug_override(self):
        """Test CALENDAR_ENGINE_DEBUG environment variable enables debug."""
        configure_engine_logging(debug_mode=False)

        assert logging.getLogger().level == logging.DEBUG

    @patch.dict(os.environ, {"CALENDAR_ENGINE_LOG_LEVEL": "warning"})
    def test_configure_engine_logging_env_log_level_override(self):
        """Test CALENDAR_ENGINE_LOG_LEVEL sets the root level only."""
        configure_engine_logging()

        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("calendar_engine").level == logging.INFO

    @patch.dict(os.environ, {"CALENDAR_ENGINE_LOG_LEVEL": "LOUD"})
    def test_unknown_env_log_level_is_ignored(self):
        configure_engine_logging()

        assert logging.getLogger().level == logging.INFO

    def test_settings_object_drives_levels(self):
        """Debug flag and pinned log level come from EngineSettings."""
        configure_engine_logging(settings=EngineSettings(debug=True, log_level="ERROR"))

        assert logging.getLogger().level == logging.ERROR
        assert logging.getLogger("calendar_engine").level == logging.DEBUG

    @patch.dict(os.environ, {"CALENDAR_ENGINE_LOG_LEVEL": "ERROR"})
    def test_explicit_settings_ignore_environment(self):
        configure_engine_logging(settings={"log_level": "warning"})

        assert logging.getLogger().level == logging.WARNING

    def test_adds_console_handler_only_when_root_has_none(self):
        """A colorized handler is installed once, never on top of existing handlers."""
        root_logger = logging.getLogger()
        saved_handlers = list(root_logger.handlers)
        for handler in saved_handlers:
            root_logger.removeHandler(handler)

        try:
            configure_engine_logging()
            configure_engine_logging()

            assert len(root_logger.handlers) == 1
            assert isinstance(root_logger.handlers[0].formatter, ColoredFormatter)
        finally:
            for handler in list(root_logger.handlers):
                root_logger.removeHandler(handler)
            for handler in saved_handlers:
                root_logger.addHandler(handler)

    def test_existing_handlers_are_left_alone(self):
        root_logger = logging.getLogger()
        before = list(root_logger.handlers)
        marker = logging.NullHandler()
        root_logger.addHandler(marker)

        try:
            configure_engine_logging()

            assert root_logger.handlers == [*before, marker]
        finally:
            root_logger.removeHandler(marker)


class TestBuildConsoleHandler:
    """Tests for build_console_handler."""

    def test_handler_uses_colored_formatter_and_level(self):
        handler = build_console_handler(logging.WARNING)

        assert handler.level == logging.WARNING
        assert isinstance(handler.formatter, ColoredFormatter)


class TestGetLoggingStatus:
    """Tests for get_logging_status function."""

    def test_get_logging_status_reports_root_and_engine_modules(self):
        configure_engine_logging(debug_mode=True)

        status = get_logging_status()

        assert status["root"] == "DEBUG"
        assert set(ENGINE_MODULES) <= set(status)
        assert status["calendar_engine.domain.recurrence_expander"] == "DEBUG"

    def test_get_logging_status_after_production_config(self):
        configure_engine_logging()

        status = get_logging_status()

        assert status["root"] == "INFO"
        assert status["calendar_engine"] == "INFO"


class TestResolveLevels:
    """Level resolution without touching the logging tree."""

    @pytest.mark.parametrize(
        "settings,debug_mode,force_debug,expected",
        [
            (EngineSettings(), False, None, (logging.INFO, logging.INFO)),
            (EngineSettings(debug=True), False, None, (logging.DEBUG, logging.DEBUG)),
            (EngineSettings(), True, None, (logging.DEBUG, logging.DEBUG)),
            (EngineSettings(debug=True), True, False, (logging.INFO, logging.INFO)),
            (EngineSettings(log_level="WARNING"), True, None, (logging.WARNING, logging.DEBUG)),
        ],
    )
    def test_resolve_levels(self, settings, debug_mode, force_debug, expected):
        assert resolve_levels(settings, debug_mode, force_debug) == expected
