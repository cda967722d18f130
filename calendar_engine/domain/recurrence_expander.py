"""Recurrence expansion for calendar_engine.

Turns one base event carrying a recurrence rule into the concrete, dated
instances of the series.

Each candidate date is computed from the anchor as ``anchor + n * interval``
units rather than by stepping from the previous candidate. Month and year
arithmetic clamps to the end of the target month (Jan 31 + 1 month is Feb 28),
so stepping from a clamped candidate would drift the series to the 28th for
good. Anchor-relative arithmetic keeps every candidate tied to the original
day, and the skip rules drop the candidates that could not land on it:

- monthly series anchored on the 31st only occur in months with 31 days
- yearly series anchored on Feb 29 only occur in leap years
"""

import datetime
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from dateutil.relativedelta import relativedelta

from calendar_engine.calendar.datetime_utils import is_leap_year
from calendar_engine.calendar.models import Event, RecurringRule, RepeatType
from calendar_engine.core.config_manager import (
    DEFAULT_HORIZON_YEARS,
    DEFAULT_MAX_INSTANCES,
    EngineSettings,
)
from calendar_engine.exceptions import ExpansionTooLargeError, InvalidRuleError

logger = logging.getLogger(__name__)


@dataclass
class RecurrenceExpanderConfig:
    """Configuration for recurrence expansion."""

    horizon_years: int = DEFAULT_HORIZON_YEARS
    max_instances: int = DEFAULT_MAX_INSTANCES

    @classmethod
    def from_settings(cls, settings: Any) -> "RecurrenceExpanderConfig":
        """Extract expansion configuration from a settings object or dict.

        Args:
            settings: Configuration object with expansion settings, or None to
                read CALENDAR_ENGINE_HORIZON_YEARS and CALENDAR_ENGINE_MAX_INSTANCES

        Returns:
            RecurrenceExpanderConfig with values from settings or defaults
        """
        resolved = EngineSettings.from_settings(settings)
        return cls(horizon_years=resolved.horizon_years, max_instances=resolved.max_instances)


def offset_date(
    anchor: datetime.date, repeat_type: RepeatType, steps: int
) -> Optional[datetime.date]:
    """Return ``anchor`` moved by ``steps`` units of the rule type.

    Weekly steps are 7 days. Month and year steps clamp to the last day of
    the target month. Returns None if the result is outside the supported
    date range.
    """
    if repeat_type == RepeatType.DAILY:
        delta = relativedelta(days=steps)
    elif repeat_type == RepeatType.WEEKLY:
        delta = relativedelta(weeks=steps)
    elif repeat_type == RepeatType.MONTHLY:
        delta = relativedelta(months=steps)
    elif repeat_type == RepeatType.YEARLY:
        delta = relativedelta(years=steps)
    else:
        raise InvalidRuleError(f"Cannot step a {repeat_type.value!r} rule")

    try:
        return anchor + delta
    except (OverflowError, ValueError):
        return None


def should_skip(repeat_type: RepeatType, anchor: datetime.date, candidate: datetime.date) -> bool:
    """Decide whether a candidate date misses the anchor's calendar edge case."""
    if repeat_type == RepeatType.MONTHLY and anchor.day == 31:
        return candidate.day != 31

    if repeat_type == RepeatType.YEARLY and (anchor.month, anchor.day) == (2, 29):
        return not (
            is_leap_year(candidate.year) and candidate.month == 2 and candidate.day == 29
        )

    return False


def validate_rule(base: Event) -> None:
    """Reject recurrence rules that must never be expanded.

    Raises:
        InvalidRuleError: If the interval is below 1 or the end date precedes the anchor
    """
    rule = base.repeat
    if not isinstance(rule, RecurringRule):
        return

    if rule.interval < 1:
        raise InvalidRuleError(
            f"Recurrence interval must be at least 1, got {rule.interval} "
            f"(event {base.id!r})"
        )

    if rule.end_date is not None and rule.end_date < base.date:
        raise InvalidRuleError(
            f"Recurrence end date {rule.end_date.isoformat()} is before "
            f"start date {base.date.isoformat()} (event {base.id!r})"
        )


class RecurrenceExpander:
    """Expands a base event into the dated instances of its series."""

    def __init__(self, settings: Any = None):
        """Initialize expander.

        Args:
            settings: Optional settings object or dict with ``horizon_years``
                and ``max_instances``
        """
        config = RecurrenceExpanderConfig.from_settings(settings)
        self.horizon_years = config.horizon_years
        self.max_instances = config.max_instances

        logger.debug(
            "RecurrenceExpander initialized: horizon_years=%d, max_instances=%d",
            self.horizon_years,
            self.max_instances,
        )

    def horizon_for(self, anchor: datetime.date) -> datetime.date:
        """Cutoff date used when a series has no end date."""
        try:
            return anchor + relativedelta(years=self.horizon_years)
        except (OverflowError, ValueError):
            return datetime.date.max

    def expand(self, base: Union[Event, Mapping[str, Any]]) -> list[Event]:
        """Expand a base event into its instances.

        Args:
            base: Base event, or a wire payload for one

        Returns:
            ``[base]`` for a non-repeating event, otherwise one copy of the base
            per occurrence with ``date`` replaced and id ``"{base.id}-{n}"``

        Raises:
            InvalidDateError: If a payload carries an unparsable date
            InvalidRuleError: If the recurrence rule is invalid
            ExpansionTooLargeError: If the series exceeds ``max_instances``
        """
        if not isinstance(base, Event):
            base = Event.from_payload(base)

        rule = base.repeat
        if not isinstance(rule, RecurringRule):
            return [base]

        validate_rule(base)

        repeat_type = rule.repeat_type
        anchor = base.date
        end = rule.end_date if rule.end_date is not None else self.horizon_for(anchor)

        logger.debug(
            "Expanding %s rule for event %r: anchor=%s, end=%s, interval=%d",
            repeat_type.value,
            base.id,
            anchor,
            end,
            rule.interval,
        )

        instances: list[Event] = []
        step = 0
        skipped = 0
        while True:
            candidate = offset_date(anchor, repeat_type, step * rule.interval)
            if candidate is None or candidate > end:
                break
            step += 1

            if should_skip(repeat_type, anchor, candidate):
                skipped += 1
                continue

            if len(instances) >= self.max_instances:
                raise ExpansionTooLargeError(self.max_instances, base.id)

            instances.append(
                base.model_copy(
                    update={"id": f"{base.id}-{len(instances) + 1}", "date": candidate}
                )
            )

        logger.debug(
            "Expansion completed: event=%r, emitted=%d, skipped=%d",
            base.id,
            len(instances),
            skipped,
        )
        return instances


def expand_event(base: Union[Event, Mapping[str, Any]], settings: Any = None) -> list[Event]:
    """Expand one base event with a throwaway expander."""
    return RecurrenceExpander(settings).expand(base)
