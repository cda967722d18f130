"""Periodic reminder loop for calendar_engine.

Runs ``notification_scheduler.tick`` on a fixed interval against the current
event set and hands due events to a delivery callback. The ticker is the only
owner of the fired-id set.
"""

from __future__ import annotations

import asyncio
import contextlib
import datetime
import inspect
import logging
from collections.abc import Callable, Iterable
from typing import Any

from calendar_engine.calendar.models import Event
from calendar_engine.core.clock import now_local
from calendar_engine.core.config_manager import EngineSettings
from calendar_engine.domain.notification_scheduler import tick

logger = logging.getLogger(__name__)

EventSource = Callable[[], Iterable[Event]]
DueCallback = Callable[[list[Event]], Any]


class NotificationTicker:
    """Timer-driven reminder scheduler with clean start/stop."""

    def __init__(
        self,
        event_source: EventSource,
        on_due: DueCallback,
        interval: float | None = None,
        clock: Callable[[], datetime.datetime] = now_local,
        settings: Any = None,
    ):
        """Initialize ticker.

        Args:
            event_source: Returns the current event set on every tick
            on_due: Receives the due events of a tick; may be sync or async
            interval: Seconds between ticks (defaults to the resolved
                tick_interval_seconds, CALENDAR_ENGINE_TICK_INTERVAL when settings is None)
            clock: Returns "now" for each tick
            settings: Optional EngineSettings, settings object or dict
        """
        if interval is None:
            interval = EngineSettings.from_settings(settings).tick_interval_seconds
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}")

        self.interval = interval
        self._event_source = event_source
        self._on_due = on_due
        self._clock = clock
        self._fired: frozenset[str] = frozenset()
        self._tick_lock = asyncio.Lock()
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def fired(self) -> frozenset[str]:
        """Ids already notified."""
        return self._fired

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> list[Event]:
        """Run a single tick and deliver any due events.

        Only one tick runs at a time. Ids of events that are no longer in the
        event source are dropped from the fired set.
        """
        async with self._tick_lock:
            events = list(self._event_source())
            result = tick(self._clock(), events, self._fired)

            present = {ev.id for ev in events}
            self._fired = frozenset(event_id for event_id in result.fired if event_id in present)

            if result.due:
                delivered = self._on_due(result.due)
                if inspect.isawaitable(delivered):
                    await delivered
            return result.due

    def start(self) -> asyncio.Task[None]:
        """Start the periodic loop on the running event loop.

        Raises:
            RuntimeError: If the ticker is already running
        """
        if self.is_running:
            raise RuntimeError("NotificationTicker is already running")

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run_loop(self._stop_event))
        logger.debug("NotificationTicker started with interval %.3fs", self.interval)
        return self._task

    async def _run_loop(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await self.run_once()
            except Exception:
                logger.exception("Notification tick failed")

            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval)

    async def stop(self) -> None:
        """Stop the loop and wait for it to finish; no periodic work remains afterwards."""
        if self._stop_event is not None:
            self._stop_event.set()

        task, self._task = self._task, None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("NotificationTicker stopped")
