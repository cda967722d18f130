"""Data models for calendar events and recurrence rules - calendar_engine."""

import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)

from calendar_engine.exceptions import InvalidDateError, InvalidEventError

from .datetime_utils import (
    combine_wall_clock,
    format_time_of_day,
    parse_calendar_date,
    parse_time_of_day,
)

# Payload keys whose validation failures are reported as InvalidDateError
_DATE_FIELDS = frozenset({"date", "endDate", "end_date"})


class RepeatType(str, Enum):
    """Recurrence rule types."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class NoRepeat(BaseModel):
    """Rule for a one-off event. Interval is meaningless and pinned to 0."""

    type: Literal["none"] = "none"
    interval: int = 0

    model_config = ConfigDict(frozen=True)

    @field_validator("interval", mode="before")
    @classmethod
    def _pin_interval(cls, value: Any) -> int:
        return 0

    @property
    def group_id(self) -> None:
        return None

    @property
    def end_date(self) -> None:
        return None


class RecurringRule(BaseModel):
    """Recurrence rule for a repeating event.

    Every instance expanded from one rule shares the same type, interval and
    end date. ``group_id`` links the instances of one submission and is
    cleared when an instance is detached.
    """

    type: Literal["daily", "weekly", "monthly", "yearly"]
    interval: int = Field(default=1, description="Step count in the rule's unit")
    end_date: Optional[datetime.date] = Field(
        default=None, alias="endDate", description="Last date expansion may reach"
    )
    group_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("groupId", "group_id", "id"),
        serialization_alias="groupId",
        description="Token shared by all instances of one series",
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("end_date", mode="before")
    @classmethod
    def _parse_end_date(cls, value: Any) -> Optional[datetime.date]:
        if value is None or value == "":
            return None
        return parse_calendar_date(value)

    @field_validator("group_id", mode="before")
    @classmethod
    def _coerce_group_id(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)

    @property
    def repeat_type(self) -> RepeatType:
        return RepeatType(self.type)


RepeatRule = Annotated[Union[NoRepeat, RecurringRule], Field(discriminator="type")]


class Event(BaseModel):
    """One calendar occurrence.

    Field names follow Python conventions; the persisted camelCase names
    (``startTime``, ``notificationTime``, ...) are accepted on input and used
    by ``to_payload()``.
    """

    # Core properties
    id: str = Field(default="", description="Occurrence id, assigned by the store")
    title: str = Field(default="", description="Event title")
    description: str = Field(default="", description="Free-form description")
    location: str = Field(default="", description="Free-form location")
    category: str = Field(default="", description="Category label")

    # Time information
    date: datetime.date = Field(..., description="Calendar date, no time zone")
    start_time: datetime.time = Field(..., alias="startTime")
    end_time: datetime.time = Field(..., alias="endTime")

    # Recurrence
    repeat: RepeatRule = Field(default_factory=NoRepeat)

    # Reminder lead time in minutes before start_time
    notification_time: int = Field(default=0, ge=0, alias="notificationTime")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> datetime.date:
        return parse_calendar_date(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_time(cls, value: Any) -> datetime.time:
        return parse_time_of_day(value)

    @field_validator("repeat", mode="before")
    @classmethod
    def _normalize_repeat(cls, value: Any) -> Any:
        if value is None:
            return {"type": "none"}
        if isinstance(value, Mapping):
            data = dict(value)
            data["type"] = str(data.get("type") or "none").lower()
            return data
        return value

    @field_serializer("start_time", "end_time")
    def serialize_time(self, value: datetime.time) -> str:
        """Serialize times of day as HH:MM."""
        return format_time_of_day(value)

    @property
    def is_recurring(self) -> bool:
        """True if the event still belongs to a recurrence rule."""
        return isinstance(self.repeat, RecurringRule)

    @property
    def group_id(self) -> Optional[str]:
        return self.repeat.group_id

    @property
    def start_datetime(self) -> datetime.datetime:
        """Naive wall-clock start."""
        return combine_wall_clock(self.date, self.start_time)

    @property
    def end_datetime(self) -> datetime.datetime:
        """Naive wall-clock end."""
        return combine_wall_clock(self.date, self.end_time)

    def with_changes(self, changes: Mapping[str, Any]) -> "Event":
        """Return a validated copy with ``changes`` merged over this event's fields.

        Keys may use either the Python field names or the persisted aliases.

        Raises:
            InvalidDateError: If a changed date is unparsable
            InvalidEventError: If a changed field is invalid or unknown
        """
        merged = self.model_dump()
        for key, value in changes.items():
            merged[_field_name(key)] = value
        return type(self).from_payload(merged)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the persisted wire schema."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Event":
        """Build an event from a wire payload.

        Raises:
            InvalidDateError: If ``date`` or ``repeat.endDate`` is missing or unparsable
            InvalidEventError: If any other field fails validation
        """
        try:
            return cls.model_validate(dict(payload))
        except ValidationError as e:
            for error in e.errors():
                if _DATE_FIELDS.intersection(str(part) for part in error["loc"]):
                    raise InvalidDateError(
                        f"Invalid date in event payload: {error['msg']}"
                    ) from e
            raise InvalidEventError(str(e)) from e


def _field_name(key: str) -> str:
    """Map a persisted alias (e.g. ``startTime``) to its Event field name."""
    if key in Event.model_fields:
        return key
    for name, info in Event.model_fields.items():
        if info.alias == key:
            return name
    raise InvalidEventError(f"Unknown event field: {key!r}")
