"""
Central logging configuration for calendar_engine.

Sets the engine's module loggers to a common level and installs a colorized
console handler when the application has not configured logging itself.
"""

import logging
import sys
from typing import Any, Optional

from colorlog import ColoredFormatter

from calendar_engine.core.config_manager import EngineSettings

ENGINE_MODULES = [
    "calendar_engine",
    "calendar_engine.calendar.models",
    "calendar_engine.domain.recurrence_expander",
    "calendar_engine.domain.overlap_detector",
    "calendar_engine.domain.series_mutator",
    "calendar_engine.domain.event_store",
    "calendar_engine.domain.notification_scheduler",
    "calendar_engine.core.notification_ticker",
    "calendar_engine.core.config_manager",
]

LOG_FORMAT = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def build_console_handler(level: int) -> logging.Handler:
    """Stream handler writing colorized records to stderr."""
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt="%H:%M:%S", log_colors=LOG_COLORS))
    return handler


def resolve_levels(
    settings: Any = None, debug_mode: bool = False, force_debug: Optional[bool] = None
) -> tuple[int, int]:
    """Return ``(root_level, engine_level)`` for the given settings.

    ``force_debug`` wins when given; otherwise debug is on if either
    ``debug_mode`` or the settings' debug flag is set. The root level follows
    debug unless the settings pin a log level.
    """
    resolved = EngineSettings.from_settings(settings)
    debug = force_debug if force_debug is not None else (debug_mode or resolved.debug)
    engine_level = logging.DEBUG if debug else logging.INFO
    root_level = engine_level
    if resolved.log_level:
        root_level = getattr(logging, resolved.log_level.upper())
    return root_level, engine_level


def configure_engine_logging(
    debug_mode: bool = False, force_debug: Optional[bool] = None, settings: Any = None
) -> None:
    """
    Configure logging levels for calendar_engine.

    Args:
        debug_mode: Whether to enable debug logging for calendar_engine modules
        force_debug: Override debug mode setting (None to use the settings' debug flag)
        settings: EngineSettings, dict or settings object; None reads
            CALENDAR_ENGINE_DEBUG and CALENDAR_ENGINE_LOG_LEVEL from the environment
    """
    root_level, engine_level = resolve_levels(settings, debug_mode, force_debug)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)
    if not root_logger.handlers:
        root_logger.addHandler(build_console_handler(root_level))

    for module in ENGINE_MODULES:
        logging.getLogger(module).setLevel(engine_level)

    logging.getLogger(__name__).debug(
        "Engine logging configured: root=%s, engine=%s",
        logging.getLevelName(root_level),
        logging.getLevelName(engine_level),
    )


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in ENGINE_MODULES:
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status
