"""Exception hierarchy for the calendar engine.

Every failure the engine can report derives from CalendarEngineError so callers
can catch engine problems in one place and still distinguish the specific
condition (bad rule, bad date, oversized expansion) when they need to tell the
user what to fix.
"""

from __future__ import annotations

from typing import Optional


class CalendarEngineError(Exception):
    """Base exception for all calendar engine errors."""


class InvalidRuleError(CalendarEngineError):
    """Recurrence rule cannot be expanded.

    Raised when:
    - A recurring rule has an interval below 1
    - The rule's end date falls before the series anchor date

    The expander raises this before generating any instance.
    """


class InvalidDateError(CalendarEngineError, ValueError):
    """Calendar date could not be parsed or does not exist (e.g. 2025-02-31)."""


class InvalidEventError(CalendarEngineError, ValueError):
    """Event payload failed validation for a reason other than its date."""


class ExpansionTooLargeError(CalendarEngineError):
    """Recurrence expansion would produce more instances than allowed.

    This is a deliberate cap rather than data loss; callers should ask the
    user to narrow the recurrence range.
    """

    def __init__(self, limit: int, event_id: Optional[str] = None) -> None:
        self.limit = limit
        self.event_id = event_id
        target = f" for event {event_id!r}" if event_id else ""
        super().__init__(
            f"Recurrence expansion{target} exceeds {limit} instances; "
            "narrow your recurrence range"
        )


class EventNotFoundError(CalendarEngineError, KeyError):
    """No stored event has the requested id."""

    def __init__(self, event_id: str) -> None:
        self.event_id = event_id
        super().__init__(event_id)

    def __str__(self) -> str:
        return f"Event not found: {self.event_id}"
