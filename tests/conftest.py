"""Shared fixtures for calendar_engine tests."""

import datetime
import itertools
from collections.abc import Callable, Generator
from typing import Any

import pytest

from calendar_engine.calendar.models import Event


def pytest_configure(config: Any) -> None:
    """Register test markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "smoke: Basic smoke tests")
    config.addinivalue_line("markers", "integration: End-to-end engine workflows")


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, Any, None]:
    """Clear CALENDAR_ENGINE_* variables so host settings never leak into tests."""
    for name in (
        "CALENDAR_ENGINE_TEST_TIME",
        "CALENDAR_ENGINE_HORIZON_YEARS",
        "CALENDAR_ENGINE_MAX_INSTANCES",
        "CALENDAR_ENGINE_TICK_INTERVAL",
        "CALENDAR_ENGINE_LOG_LEVEL",
        "CALENDAR_ENGINE_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def make_event() -> Callable[..., Event]:
    """Factory for events with sensible defaults.

    Keyword arguments override any field by its Python name; ``date``,
    ``start_time`` and ``end_time`` accept the persisted string forms.
    """

    def _make(**overrides: Any) -> Event:
        data: dict[str, Any] = {
            "id": "1",
            "title": "Team sync",
            "date": "2025-10-15",
            "start_time": "09:00",
            "end_time": "10:00",
            "description": "Weekly team meeting",
            "location": "Room A",
            "category": "Work",
            "repeat": None,
            "notification_time": 10,
        }
        data.update(overrides)
        return Event.model_validate(data)

    return _make


@pytest.fixture
def sequential_group_ids() -> Callable[[], str]:
    """Deterministic group id factory: group-1, group-2, ..."""
    counter = itertools.count(1)
    return lambda: f"group-{next(counter)}"


@pytest.fixture
def fixed_now() -> datetime.datetime:
    """Naive wall-clock "now" used by scheduler tests."""
    return datetime.datetime(2025, 10, 15, 8, 50)
