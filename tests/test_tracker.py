"""Tests for the tracking session lifecycle."""

from __future__ import annotations

import threading
from datetime import timedelta
from pathlib import Path

import pytest

from simple_time_tracker.logstore import LogStoreError
from simple_time_tracker.models import LogRecord
from simple_time_tracker.state_machine import TrackerStateError
from simple_time_tracker.tracker import ActivityTracker, IntervalTicker

from .conftest import FakeClock, FakeSensor


def test_start_creates_log_and_counts_from_start(
    tracker: ActivityTracker, clock: FakeClock, log_path: Path
) -> None:
    tracker.start()
    assert log_path.exists()

    clock.advance(90)
    assert tracker.total_seconds_today() == 90
    assert tracker.total_time_today() == (0, 1)


def test_start_twice_raises(tracker: ActivityTracker) -> None:
    tracker.start()
    with pytest.raises(TrackerStateError):
        tracker.start()


def test_tick_before_start_raises(tracker: ActivityTracker) -> None:
    with pytest.raises(TrackerStateError):
        tracker.tick()


def test_full_session(
    tracker: ActivityTracker, clock: FakeClock, sensor: FakeSensor, log_path: Path, noon: int
) -> None:
    tracker.start()

    clock.advance(10)
    assert tracker.tick() is None

    clock.advance(390)
    sensor.idle = 350
    assert tracker.tick() == LogRecord(noon, noon + 50)
    assert log_path.read_text(encoding="utf-8") == f"{noon} - {noon + 50}\n"

    clock.advance(2)
    sensor.idle = 352
    assert tracker.tick() is None

    clock.advance(8)
    sensor.idle = 2
    assert tracker.tick() == LogRecord(noon + 410)
    # resuming does not write a line
    assert log_path.read_text(encoding="utf-8").count("\n") == 1

    clock.advance(60)
    sensor.idle = 0
    assert tracker.total_seconds_today() == 110

    tracker.stop()
    assert not tracker.running
    assert not tracker.store.is_open
    assert log_path.read_text(encoding="utf-8").splitlines() == [
        f"{noon} - {noon + 50}",
        f"{noon + 410} - {noon + 470}",
    ]

    clock.advance(600)
    assert tracker.total_seconds_today() == 110


def test_stop_backdates_final_interval(
    tracker: ActivityTracker, clock: FakeClock, sensor: FakeSensor, log_path: Path, noon: int
) -> None:
    tracker.start()
    clock.advance(200)
    sensor.idle = 50

    tracker.stop()

    assert log_path.read_text(encoding="utf-8") == f"{noon} - {noon + 150}\n"


def test_stop_while_idle_writes_nothing_new(
    tracker: ActivityTracker, clock: FakeClock, sensor: FakeSensor, log_path: Path
) -> None:
    tracker.start()
    clock.advance(400)
    sensor.idle = 400
    tracker.tick()

    tracker.stop()
    tracker.stop()

    assert len(log_path.read_text(encoding="utf-8").splitlines()) == 1


def test_status_reflects_state(tracker: ActivityTracker, clock: FakeClock, sensor: FakeSensor, noon: int) -> None:
    assert not tracker.status().running

    tracker.start()
    status = tracker.status()
    assert status.running and status.active and status.since == noon

    clock.advance(400)
    sensor.idle = 380
    tracker.tick()
    status = tracker.status()
    assert not status.active
    assert status.since == noon + 20


class CountingTicker(IntervalTicker):
    def __init__(self, ticks: int) -> None:
        super().__init__(timedelta(seconds=1))
        self.ticks = ticks

    def run(self, callback, stop_event: threading.Event) -> None:
        for _ in range(self.ticks):
            callback()
        stop_event.set()


def test_run_until_stopped_ticks_and_stops(settings, sensor: FakeSensor, clock: FakeClock, log_path: Path) -> None:
    tracker = ActivityTracker(settings, sensor=sensor, clock=clock, ticker=CountingTicker(3))

    tracker.run_until_stopped(threading.Event())

    assert not tracker.running
    assert log_path.read_text(encoding="utf-8") == f"{clock.now} - {clock.now}\n"


def test_interval_ticker_stops_on_event() -> None:
    calls = []
    stop_event = threading.Event()

    def callback() -> None:
        calls.append(1)
        if len(calls) == 3:
            stop_event.set()

    IntervalTicker(timedelta(milliseconds=1)).run(callback, stop_event)

    assert len(calls) == 3


class BrokenHandle:
    def __init__(self) -> None:
        self.closed = False

    def write(self, text: str) -> int:
        raise OSError(28, "No space left on device")

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True


def test_stop_before_start_is_a_noop(tracker: ActivityTracker, log_path: Path) -> None:
    tracker.stop()

    assert not tracker.running
    assert not log_path.exists()


def test_stop_releases_handle_when_final_write_fails(
    tracker: ActivityTracker, clock: FakeClock
) -> None:
    tracker.start()
    handle = BrokenHandle()
    tracker.store._handle = handle  # type: ignore[assignment]
    clock.advance(60)

    with pytest.raises(LogStoreError):
        tracker.stop()

    assert handle.closed
    assert not tracker.store.is_open
    assert not tracker.running


def test_failed_idle_write_keeps_interval_open(
    tracker: ActivityTracker, clock: FakeClock, sensor: FakeSensor, log_path: Path, noon: int
) -> None:
    tracker.start()
    tracker.store._handle = BrokenHandle()  # type: ignore[assignment]
    clock.advance(400)
    sensor.idle = 350

    with pytest.raises(LogStoreError):
        tracker.tick()

    assert tracker.machine.state.active_at == noon
    assert tracker.machine.state.idled_at is None

    tracker.store._handle = None
    clock.advance(10)
    sensor.idle = 360
    assert tracker.tick() == LogRecord(noon, noon + 50)
    assert log_path.read_text(encoding="utf-8") == f"{noon} - {noon + 50}\n"
    tracker.stop()
