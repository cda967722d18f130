"""Unit tests for calendar_engine.calendar.models."""

import datetime

import pytest

from calendar_engine.calendar.models import Event, NoRepeat, RecurringRule, RepeatType
from calendar_engine.exceptions import InvalidDateError, InvalidEventError

pytestmark = pytest.mark.unit


def _payload(**overrides):
    data = {
        "id": "1",
        "title": "Existing meeting",
        "date": "2025-10-15",
        "startTime": "09:00",
        "endTime": "10:00",
        "description": "Team meeting",
        "location": "Room B",
        "category": "Work",
        "repeat": {"type": "none", "interval": 0},
        "notificationTime": 10,
    }
    data.update(overrides)
    return data


class TestEventParsing:
    """Wire payload to Event."""

    def test_from_payload_parses_all_fields(self):
        event = Event.from_payload(_payload())

        assert event.id == "1"
        assert event.date == datetime.date(2025, 10, 15)
        assert event.start_time == datetime.time(9, 0)
        assert event.end_time == datetime.time(10, 0)
        assert event.notification_time == 10
        assert isinstance(event.repeat, NoRepeat)
        assert event.is_recurring is False

    def test_numeric_id_coerced_to_string(self):
        assert Event.from_payload(_payload(id=1)).id == "1"

    @pytest.mark.parametrize("repeat", [None, {"type": "none", "interval": 1}])
    def test_missing_or_none_repeat_is_no_repeat(self, repeat):
        event = Event.from_payload(_payload(repeat=repeat))

        assert event.repeat == NoRepeat()
        assert event.repeat.interval == 0

    def test_recurring_rule_with_group_id(self):
        event = Event.from_payload(
            _payload(repeat={"type": "Weekly", "interval": 2, "endDate": "2025-12-31", "groupId": "g"})
        )

        assert isinstance(event.repeat, RecurringRule)
        assert event.repeat.repeat_type == RepeatType.WEEKLY
        assert event.repeat.interval == 2
        assert event.repeat.end_date == datetime.date(2025, 12, 31)
        assert event.group_id == "g"
        assert event.is_recurring is True

    def test_legacy_repeat_id_key_is_group_id(self):
        event = Event.from_payload(_payload(repeat={"type": "daily", "interval": 1, "id": "abc"}))

        assert event.group_id == "abc"

    def test_empty_end_date_means_open_ended(self):
        event = Event.from_payload(_payload(repeat={"type": "daily", "interval": 1, "endDate": ""}))

        assert event.repeat.end_date is None

    @pytest.mark.parametrize(
        "bad_date", ["2025-13-01", "2025-02-30", "tomorrow", "2025-10-15T09:00", "20251015"]
    )
    def test_bad_date_raises_invalid_date(self, bad_date):
        with pytest.raises(InvalidDateError):
            Event.from_payload(_payload(date=bad_date))

    def test_missing_date_raises_invalid_date(self):
        data = _payload()
        del data["date"]

        with pytest.raises(InvalidDateError):
            Event.from_payload(data)

    def test_bad_end_date_raises_invalid_date(self):
        with pytest.raises(InvalidDateError):
            Event.from_payload(_payload(repeat={"type": "daily", "interval": 1, "endDate": "2025-02-31"}))

    @pytest.mark.parametrize(
        "overrides",
        [
            {"startTime": "25:00"},
            {"notificationTime": -5},
            {"repeat": {"type": "hourly", "interval": 1}},
        ],
    )
    def test_other_invalid_fields_raise_invalid_event(self, overrides):
        with pytest.raises(InvalidEventError):
            Event.from_payload(_payload(**overrides))


class TestEventBehaviour:
    """Immutability, derived values and serialization."""

    def test_events_are_frozen(self, make_event):
        event = make_event()

        with pytest.raises(Exception):
            event.title = "changed"

    def test_start_and_end_datetimes(self, make_event):
        event = make_event(date="2025-10-15", start_time="09:00", end_time="10:30")

        assert event.start_datetime == datetime.datetime(2025, 10, 15, 9, 0)
        assert event.end_datetime == datetime.datetime(2025, 10, 15, 10, 30)

    def test_to_payload_uses_persisted_names(self, make_event):
        event = make_event(repeat={"type": "monthly", "interval": 1, "endDate": "2025-12-31", "groupId": "g"})

        payload = event.to_payload()

        assert payload["startTime"] == "09:00"
        assert payload["endTime"] == "10:00"
        assert payload["date"] == "2025-10-15"
        assert payload["notificationTime"] == 10
        assert payload["repeat"] == {
            "type": "monthly",
            "interval": 1,
            "endDate": "2025-12-31",
            "groupId": "g",
        }

    def test_to_payload_round_trips(self, make_event):
        event = make_event(repeat={"type": "daily", "interval": 3, "endDate": "2025-11-01"})

        assert Event.from_payload(event.to_payload()) == event

    def test_with_changes_validates(self, make_event):
        event = make_event()

        assert event.with_changes({"endTime": "11:15"}).end_time == datetime.time(11, 15)
        with pytest.raises(InvalidDateError):
            event.with_changes({"date": "2025-02-30"})
