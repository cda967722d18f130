"""Series policy: group tagging on create, detach on edit, single removal on delete.

A series is a set of independent records linked only by ``group_id``. There
is no cascading edit or delete of a whole group here; callers that offer
batch operations resubmit one detach/remove per instance.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from typing import Any

from calendar_engine.calendar.models import Event, NoRepeat, RecurringRule
from calendar_engine.domain.event_store import EventStore
from calendar_engine.domain.recurrence_expander import RecurrenceExpander

logger = logging.getLogger(__name__)


def random_group_id() -> str:
    """Default group token generator."""
    return uuid.uuid4().hex


class SeriesMutator:
    """Assigns and clears series group ids around create/edit/delete."""

    def __init__(
        self,
        expander: RecurrenceExpander | None = None,
        group_id_factory: Callable[[], str] = random_group_id,
    ):
        """Initialize mutator.

        Args:
            expander: Expander used by create_series (a default one if None)
            group_id_factory: Produces one opaque group token per series
        """
        self.expander = expander or RecurrenceExpander()
        self.group_id_factory = group_id_factory

    def create_series(self, base: Event | Mapping[str, Any]) -> list[Event]:
        """Expand a base event and stamp every instance with one fresh group id.

        A non-repeating base is returned alone and untagged.

        Raises:
            InvalidDateError, InvalidRuleError, ExpansionTooLargeError: From expansion
        """
        instances = self.expander.expand(base)
        if not instances or not isinstance(instances[0].repeat, RecurringRule):
            return instances

        group_id = self.group_id_factory()
        tagged = [
            instance.model_copy(
                update={"repeat": instance.repeat.model_copy(update={"group_id": group_id})}
            )
            for instance in instances
        ]
        logger.info(
            "Created series %s: %d instance(s) of %r", group_id, len(tagged), tagged[0].title
        )
        return tagged

    def detach(self, instance: Event) -> Event:
        """Return a standalone copy of one occurrence (no rule, no group id)."""
        if instance.is_recurring:
            logger.debug("Detaching event %r from series %s", instance.id, instance.group_id)
        return instance.model_copy(update={"repeat": NoRepeat()})

    def edit_one(self, instance: Event, changes: Mapping[str, Any]) -> Event:
        """Apply a field update to one occurrence and detach it.

        Any edit detaches, even one that leaves the timing alone. A ``repeat``
        key in ``changes`` is ignored.
        """
        field_changes = {key: value for key, value in changes.items() if key != "repeat"}
        return self.detach(instance.with_changes(field_changes))

    def remove_one(self, instance_id: str, store: EventStore) -> Event:
        """Remove exactly one occurrence from the store; siblings are untouched.

        Raises:
            EventNotFoundError: If the store has no such id
        """
        removed = store.delete(instance_id)
        if removed.group_id:
            logger.debug("Removed event %r from series %s", instance_id, removed.group_id)
        return removed
