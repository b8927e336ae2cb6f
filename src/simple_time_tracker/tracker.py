"""Tracking session: ticks the state machine and records intervals."""

from __future__ import annotations

import logging
import threading
import time
from datetime import timedelta
from typing import Callable, Optional

from .config import TrackerSettings
from .logstore import LogStore, LogStoreError
from .models import LogRecord, TrackerStatus
from .reporting import split_hours_minutes
from .sensors import IdleSensor, default_idle_sensor
from .state_machine import IdleStateMachine, TrackerStateError

logger = logging.getLogger(__name__)


class IntervalTicker:
    """Calls a function at a fixed cadence until an event is set.

    Calls never overlap: the next one is scheduled only after the
    previous one returned.
    """

    def __init__(self, interval: timedelta) -> None:
        self.interval = interval

    def run(self, callback: Callable[[], object], stop_event: threading.Event) -> None:
        seconds = self.interval.total_seconds()
        while not stop_event.is_set():
            callback()
            # Sleep in an interruptible manner.
            stop_event.wait(seconds)


class ActivityTracker:
    """Tracks active time for one session and answers "how long today"."""

    def __init__(
        self,
        settings: TrackerSettings,
        *,
        sensor: Optional[IdleSensor] = None,
        clock: Callable[[], float] = time.time,
        ticker: Optional[IntervalTicker] = None,
    ) -> None:
        self.settings = settings
        self._sensor = sensor
        self._clock = clock
        self._ticker = ticker or IntervalTicker(settings.tick_interval)
        self.store = LogStore(settings.log_file_path, debug=settings.debug)
        self.machine = self._new_machine()
        self._running = False
        self._lock = threading.Lock()

    @property
    def sensor(self) -> IdleSensor:
        if self._sensor is None:
            self._sensor = default_idle_sensor()
        return self._sensor

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        with self._lock:
            if self._running:
                raise TrackerStateError("tracker already started")
            self.store.ensure_exists()
            self.machine = self._new_machine()
            self.machine.begin(self._now())
            self._running = True
            logger.info(
                "Tracker started; writing to %s (idle after %ds)",
                self.settings.log_file_path,
                self.settings.idle_wait_seconds,
            )

    def tick(self) -> Optional[LogRecord]:
        with self._lock:
            if not self._running:
                raise TrackerStateError("tick() called on a stopped tracker")
            now = self._now()
            record = self.machine.tick(now, self.sensor.idle_seconds())
            if record is not None and record.is_closed:
                self._record(record)
            return record

    def stop(self) -> None:
        """Close any running interval and release the log handle.

        Does nothing on a tracker that is not running.
        """
        with self._lock:
            if not self._running:
                return
            try:
                record = self.machine.force_close(self._now(), self.sensor.idle_seconds())
                if record is not None:
                    self.store.append(record)
            finally:
                self.store.close()
                self._running = False
                logger.info("Tracker stopped.")

    def total_seconds_today(self) -> int:
        with self._lock:
            return self.store.total_active_seconds_today(self._now(), self.machine.state)

    def total_time_today(self) -> tuple[int, int]:
        return split_hours_minutes(self.total_seconds_today())

    def status(self) -> TrackerStatus:
        with self._lock:
            state = self.machine.state
            return TrackerStatus(
                running=self._running,
                active=state.is_active,
                since=state.active_at if state.is_active else state.idled_at,
            )

    def run_until_stopped(self, stop_event: threading.Event) -> None:
        """Run ticks until the provided event is set, then stop."""
        if not self._running:
            self.start()
        try:
            self._ticker.run(self.tick, stop_event)
        finally:
            self.stop()

    def run_forever(self) -> None:
        stop_event = threading.Event()
        try:
            self.run_until_stopped(stop_event)
        except KeyboardInterrupt:
            logger.info("Tracker interrupted; last interval recorded.")

    def _record(self, record: LogRecord) -> None:
        try:
            self.store.append(record)
        except LogStoreError:
            # the interval stays open until its line is on disk
            self.machine.state.mark_active(record.start)
            raise

    def _new_machine(self) -> IdleStateMachine:
        return IdleStateMachine(self.settings.idle_wait_seconds, debug=self.settings.debug)

    def _now(self) -> int:
        return int(self._clock())
