"""calendar_engine - recurring event expansion and conflict detection.

Pure computation and scheduling decisions for a personal calendar: expanding
recurrence rules into dated instances, detecting overlapping events, tagging
and detaching series instances, and deciding when reminders are due.
"""

__version__ = "0.1.0"

from calendar_engine.calendar.models import Event, NoRepeat, RecurringRule, RepeatType
from calendar_engine.core.config_manager import ConfigManager, EngineSettings
from calendar_engine.core.notification_ticker import NotificationTicker
from calendar_engine.domain.event_store import InMemoryEventStore
from calendar_engine.domain.notification_scheduler import TickResult, format_reminder, tick
from calendar_engine.domain.overlap_detector import (
    find_conflicts,
    format_conflict_label,
    format_conflict_warning,
)
from calendar_engine.domain.recurrence_expander import RecurrenceExpander, expand_event
from calendar_engine.domain.series_mutator import SeriesMutator
from calendar_engine.exceptions import (
    CalendarEngineError,
    EventNotFoundError,
    ExpansionTooLargeError,
    InvalidDateError,
    InvalidEventError,
    InvalidRuleError,
)

__all__ = [
    "CalendarEngineError",
    "ConfigManager",
    "EngineSettings",
    "Event",
    "EventNotFoundError",
    "ExpansionTooLargeError",
    "InMemoryEventStore",
    "InvalidDateError",
    "InvalidEventError",
    "InvalidRuleError",
    "NoRepeat",
    "NotificationTicker",
    "RecurrenceExpander",
    "RecurringRule",
    "RepeatType",
    "SeriesMutator",
    "TickResult",
    "expand_event",
    "find_conflicts",
    "format_conflict_label",
    "format_conflict_warning",
    "format_reminder",
    "tick",
]
