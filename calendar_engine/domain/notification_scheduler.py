"""Reminder due-checks for calendar events.

``tick`` is a pure function: the set of already-notified event ids is passed
in and a new set is handed back, so the caller owns that state between ticks.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from calendar_engine.calendar.datetime_utils import to_wall_clock
from calendar_engine.calendar.models import Event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickResult:
    """Events due in one tick and the fired-id set to carry into the next."""

    due: list[Event] = field(default_factory=list)
    fired: frozenset[str] = frozenset()


def reminder_window(event: Event) -> tuple[datetime.datetime, datetime.datetime]:
    """Half-open ``[start - notification_time, start)`` window for an event.

    With a notification time of 0 the window is empty.
    """
    start = event.start_datetime
    return start - datetime.timedelta(minutes=event.notification_time), start


def is_due(event: Event, now: datetime.datetime, fired: frozenset[str] | set[str]) -> bool:
    """True if ``now`` is inside the event's reminder window and it has not fired yet."""
    if event.id in fired:
        return False
    window_start, start = reminder_window(event)
    return window_start <= to_wall_clock(now) < start


def tick(
    now: datetime.datetime,
    events: Iterable[Event],
    fired: frozenset[str] | set[str] = frozenset(),
) -> TickResult:
    """Find the events whose reminders are due at ``now``.

    Args:
        now: Current time (naive local wall clock, or aware and converted)
        events: Current event set
        fired: Ids already notified

    Returns:
        TickResult with due events in input order and ``fired`` plus their ids.
        An event id is reported at most once, even if it appears twice.
    """
    current = to_wall_clock(now)
    fired_now = set(fired)
    due: list[Event] = []

    for event in events:
        if is_due(event, current, fired_now):
            due.append(event)
            fired_now.add(event.id)

    if due:
        logger.info(
            "Reminder due for %d event(s) at %s: %s",
            len(due),
            current.isoformat(timespec="seconds"),
            [ev.id for ev in due],
        )
        return TickResult(due=due, fired=frozenset(fired_now))

    return TickResult(due=[], fired=frozenset(fired))


def format_reminder(event: Event) -> str:
    """Reminder text shown to the user, e.g. ``"Team sync starts in 10 minutes."``."""
    minutes = event.notification_time
    unit = "minute" if minutes == 1 else "minutes"
    return f"{event.title} starts in {minutes} {unit}."
