"""Wall-clock time source with test override support."""

from __future__ import annotations

import datetime
import logging
import os

from dateutil import parser as date_parser

from calendar_engine.calendar.datetime_utils import to_wall_clock

logger = logging.getLogger(__name__)

TEST_TIME_ENV = "CALENDAR_ENGINE_TEST_TIME"


def now_local() -> datetime.datetime:
    """Return the current naive local wall-clock time.

    Can be overridden for testing via the CALENDAR_ENGINE_TEST_TIME environment
    variable (ISO 8601, e.g. "2025-10-15T08:50:00"). Aware override values are
    converted to local time.
    """
    test_time = os.environ.get(TEST_TIME_ENV)
    if test_time:
        try:
            return to_wall_clock(date_parser.isoparse(test_time))
        except (ValueError, OverflowError) as e:
            logger.warning("Failed to parse %s=%r: %s", TEST_TIME_ENV, test_time, e)

    return datetime.datetime.now()
