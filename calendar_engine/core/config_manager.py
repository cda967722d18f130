"""Configuration management for calendar_engine.

Settings come from CALENDAR_ENGINE_* variables. A ``.env`` file may supply
defaults for them; the real environment always wins and is never modified.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

ENV_PREFIX = "CALENDAR_ENGINE_"

# Defaults
DEFAULT_HORIZON_YEARS = 5  # cutoff for series without an end date
DEFAULT_MAX_INSTANCES = 10_000  # expansion guard
DEFAULT_TICK_INTERVAL_SECONDS = 1.0

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# KEY=VALUE with an optional leading "export"
_ENV_LINE = re.compile(
    r"^(?:export\s+)?(?P<key>[A-Za-z_][A-Za-z0-9_]*)\s*=\s*(?P<value>.*)$"
)


def _unquote(value: str) -> str:
    """Strip one pair of matching quotes, or a trailing `` # comment`` when unquoted."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value.split(" #", 1)[0].rstrip()


def parse_env_file(path: Path) -> dict[str, str]:
    """Parse a .env file into key-value pairs.

    Blank lines, ``#`` comments and lines that are not ``KEY=VALUE`` are
    ignored. A missing or unreadable file yields an empty dict.
    """
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        return {}
    except OSError as e:
        logger.warning("Cannot read env file %s: %s", path, e)
        return {}

    values: dict[str, str] = {}
    for line in lines:
        match = _ENV_LINE.match(line.strip())
        if match:
            values[match["key"]] = _unquote(match["value"].strip())
    return values


def _is_truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


def _read_setting(
    environ: Mapping[str, str], name: str, default: Any, convert: Callable[[str], Any]
) -> Any:
    """Convert CALENDAR_ENGINE_<name> from ``environ``, keeping the default on bad input."""
    raw = (environ.get(ENV_PREFIX + name) or "").strip()
    if not raw:
        return default
    try:
        return convert(raw)
    except ValueError as e:
        logger.warning("Invalid %s%s=%r (%s); using default %r", ENV_PREFIX, name, raw, e, default)
        return default


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value < 1:
        raise ValueError(f"expected a positive integer, got {value}")
    return value


def _positive_float(raw: str) -> float:
    value = float(raw)
    if value <= 0:
        raise ValueError(f"expected a positive number, got {value}")
    return value


def _log_level(raw: str) -> str:
    level = raw.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"expected one of {', '.join(LOG_LEVELS)}")
    return level


@dataclass(frozen=True)
class EngineSettings:
    """Engine settings with explicit defaults.

    horizon_years bounds expansion of series that have no end date;
    max_instances is the hard cap on one expansion; tick_interval_seconds is
    the reminder timer period. log_level pins the root log level; when None
    it follows the debug flag.
    """

    horizon_years: int = DEFAULT_HORIZON_YEARS
    max_instances: int = DEFAULT_MAX_INSTANCES
    tick_interval_seconds: float = DEFAULT_TICK_INTERVAL_SECONDS
    log_level: Optional[str] = None
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> EngineSettings:
        """Build settings from CALENDAR_ENGINE_* variables.

        Args:
            environ: Variables to read (defaults to ``os.environ``)
        """
        env = os.environ if environ is None else environ
        return cls(
            horizon_years=_read_setting(env, "HORIZON_YEARS", DEFAULT_HORIZON_YEARS, _positive_int),
            max_instances=_read_setting(env, "MAX_INSTANCES", DEFAULT_MAX_INSTANCES, _positive_int),
            tick_interval_seconds=_read_setting(
                env, "TICK_INTERVAL", DEFAULT_TICK_INTERVAL_SECONDS, _positive_float
            ),
            log_level=_read_setting(env, "LOG_LEVEL", None, _log_level),
            debug=_is_truthy(env.get(ENV_PREFIX + "DEBUG")),
        )

    @classmethod
    def from_settings(cls, settings: Any) -> EngineSettings:
        """Resolve settings from an EngineSettings, a dict, an attribute-style object or None.

        None reads the environment. For dicts and objects, missing keys fall
        back to the defaults.
        """
        if settings is None:
            return cls.from_env()
        if isinstance(settings, cls):
            return settings
        return cls(
            horizon_years=get_config_value(settings, "horizon_years", DEFAULT_HORIZON_YEARS),
            max_instances=get_config_value(settings, "max_instances", DEFAULT_MAX_INSTANCES),
            tick_interval_seconds=get_config_value(
                settings, "tick_interval_seconds", DEFAULT_TICK_INTERVAL_SECONDS
            ),
            log_level=get_config_value(settings, "log_level", None),
            debug=bool(get_config_value(settings, "debug", False)),
        )


class ConfigManager:
    """Builds EngineSettings from the environment plus an optional .env file."""

    def __init__(self, env_file_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            env_file_path: Optional path to .env file (defaults to .env in current directory)
        """
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> dict[str, str]:
        """Return the .env entries that the real environment does not already set.

        The process environment is left untouched.
        """
        defaults = {
            key: value
            for key, value in parse_env_file(self.env_file_path).items()
            if key not in os.environ
        }
        if defaults:
            logger.debug(
                "Using .env defaults from %s for: %s", self.env_file_path, ", ".join(defaults)
            )
        return defaults

    def load_full_config(self) -> EngineSettings:
        """Settings from the environment, with .env values filling the gaps.

        This is the main entry point for loading configuration.
        """
        return EngineSettings.from_env({**self.load_env_file(), **os.environ})


def get_config_value(config: Any, key: str, default: Any = None) -> Any:
    """Read ``key`` from a dict or an attribute-style config object.

    None configs and missing keys give ``default``.
    """
    if config is None:
        return default
    if isinstance(config, Mapping):
        return config.get(key, default)
    return getattr(config, key, default)
