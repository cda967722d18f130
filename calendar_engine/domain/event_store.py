"""In-memory event store for calendar_engine.

Stands in for the persistence collaborator: it holds the current event set,
accepts single-event create/update/delete, and supports the batch form used
to submit every instance of one recurrence in a single call. Nothing is
written to disk.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from calendar_engine.calendar.models import Event, RecurringRule
from calendar_engine.exceptions import EventNotFoundError

logger = logging.getLogger(__name__)


class EventStore(Protocol):
    """Minimal store interface the series mutator relies on."""

    def get_all(self) -> list[Event]: ...

    def delete(self, event_id: str) -> Event: ...


class InMemoryEventStore:
    """Thread-safe, insertion-ordered event store keyed by event id."""

    def __init__(self, events: Iterable[Event] | None = None) -> None:
        self._lock = threading.Lock()
        self._events: dict[str, Event] = {}
        self._next_id = 1
        for event in events or ():
            self._events[event.id] = event

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def __contains__(self, event_id: object) -> bool:
        with self._lock:
            return event_id in self._events

    def _allocate_id(self) -> str:
        """Next unused numeric id. Caller must hold the lock."""
        while str(self._next_id) in self._events:
            self._next_id += 1
        event_id = str(self._next_id)
        self._next_id += 1
        return event_id

    def _require(self, event_id: str) -> Event:
        """Caller must hold the lock."""
        try:
            return self._events[event_id]
        except KeyError:
            raise EventNotFoundError(event_id) from None

    def get_all(self) -> list[Event]:
        """Return all stored events in insertion order."""
        with self._lock:
            return list(self._events.values())

    def get(self, event_id: str) -> Event:
        with self._lock:
            return self._require(event_id)

    def add(self, event: Event, assign_id: bool = True) -> Event:
        """Store one event.

        Args:
            event: Event to store
            assign_id: Replace the event's id with a fresh store id. When False
                the event keeps its own id, replacing any stored event with it.

        Returns:
            The stored event
        """
        with self._lock:
            if assign_id or not event.id:
                event = event.model_copy(update={"id": self._allocate_id()})
            self._events[event.id] = event
        logger.debug("Stored event %r (%s)", event.id, event.title)
        return event

    def add_many(
        self,
        events: Iterable[Event],
        assign_ids: bool = True,
        group_id: str | None = None,
    ) -> list[Event]:
        """Store a batch of events, e.g. every instance of one recurrence.

        Args:
            events: Events to store, in order
            assign_ids: Give each event a fresh store id
            group_id: If set, stamped on every recurring event in the batch;
                non-recurring events never receive a group id

        Returns:
            The stored events, in input order
        """
        stored: list[Event] = []
        with self._lock:
            for event in events:
                update: dict[str, Any] = {}
                if assign_ids or not event.id:
                    update["id"] = self._allocate_id()
                if group_id is not None and isinstance(event.repeat, RecurringRule):
                    update["repeat"] = event.repeat.model_copy(update={"group_id": group_id})
                if update:
                    event = event.model_copy(update=update)
                self._events[event.id] = event
                stored.append(event)
        logger.debug("Stored batch of %d event(s)", len(stored))
        return stored

    def update(self, event_id: str, changes: Mapping[str, Any] | Event) -> Event:
        """Merge changes into one stored event.

        Args:
            event_id: Id of the stored event
            changes: Partial field mapping, or a full replacement Event

        Raises:
            EventNotFoundError: If no event has this id
        """
        with self._lock:
            current = self._require(event_id)
            if isinstance(changes, Event):
                updated = changes.model_copy(update={"id": event_id})
            else:
                updated = current.with_changes({**changes, "id": event_id})
            self._events[event_id] = updated
        logger.debug("Updated event %r", event_id)
        return updated

    def update_many(self, events: Iterable[Event]) -> list[Event]:
        """Replace a batch of stored events, matched by id.

        Raises:
            EventNotFoundError: If any event id is unknown; nothing is changed
        """
        batch = list(events)
        with self._lock:
            for event in batch:
                self._require(event.id)
            for event in batch:
                self._events[event.id] = event
        logger.debug("Updated batch of %d event(s)", len(batch))
        return batch

    def delete(self, event_id: str) -> Event:
        """Remove one event and return it.

        Raises:
            EventNotFoundError: If no event has this id
        """
        with self._lock:
            self._require(event_id)
            removed = self._events.pop(event_id)
        logger.debug("Deleted event %r", event_id)
        return removed

    def delete_many(self, event_ids: Iterable[str]) -> list[str]:
        """Remove every listed event that exists.

        Repeated ids are removed once.

        Returns:
            Ids that were actually removed, in first-seen order

        Raises:
            EventNotFoundError: If none of the ids exist
        """
        ids = list(dict.fromkeys(event_ids))
        with self._lock:
            removed = [event_id for event_id in ids if event_id in self._events]
            if ids and not removed:
                raise EventNotFoundError(ids[0])
            for event_id in removed:
                del self._events[event_id]
        logger.debug("Deleted batch of %d event(s)", len(removed))
        return removed
