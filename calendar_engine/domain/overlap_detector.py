"""Time-overlap conflict detection between calendar events."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from calendar_engine.calendar.datetime_utils import format_time_of_day
from calendar_engine.calendar.models import Event

logger = logging.getLogger(__name__)

CONFLICT_WARNING_HEADING = "This event overlaps with the following events:"


def events_overlap(a: Event, b: Event) -> bool:
    """Return True if two events share a date and their half-open time ranges intersect.

    Ranges are ``[start_time, end_time)``, so an event ending at 10:00 does not
    conflict with one starting at 10:00.
    """
    if a.date != b.date:
        return False
    return a.start_time < b.end_time and b.start_time < a.end_time


def find_conflicts(candidate: Event, existing: Iterable[Event]) -> list[Event]:
    """Return every existing event that overlaps the candidate.

    Events with the candidate's own id are ignored so that checking an edit
    never reports the event's previously stored state as a conflict. The
    result keeps the relative order of ``existing``; no conflicts is an empty
    list.
    """
    conflicts = [
        other
        for other in existing
        if not (candidate.id and other.id == candidate.id) and events_overlap(candidate, other)
    ]

    if conflicts:
        logger.debug(
            "Event %r (%s %s-%s) conflicts with %d event(s): %s",
            candidate.id,
            candidate.date,
            format_time_of_day(candidate.start_time),
            format_time_of_day(candidate.end_time),
            len(conflicts),
            [ev.id for ev in conflicts],
        )
    return conflicts


def format_conflict_label(event: Event) -> str:
    """Human-readable conflict line: ``"title (YYYY-MM-DD HH:MM-HH:MM)"``."""
    return (
        f"{event.title} ({event.date.isoformat()} "
        f"{format_time_of_day(event.start_time)}-{format_time_of_day(event.end_time)})"
    )


def format_conflict_warning(conflicts: Sequence[Event]) -> str:
    """Warning text listing every conflicting event, or "" if there are none."""
    if not conflicts:
        return ""
    lines = [CONFLICT_WARNING_HEADING]
    lines.extend(format_conflict_label(ev) for ev in conflicts)
    return "\n".join(lines)
