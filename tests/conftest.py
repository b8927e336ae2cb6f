from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from simple_time_tracker.config import TrackerSettings
from simple_time_tracker.tracker import ActivityTracker


class FakeClock:
    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> float:
        return float(self.now)

    def advance(self, seconds: int) -> None:
        self.now += seconds


class FakeSensor:
    def __init__(self, idle: float = 0.0) -> None:
        self.idle = idle

    def idle_seconds(self) -> float:
        return self.idle


@pytest.fixture
def midnight() -> int:
    return int(datetime(2024, 5, 10).timestamp())


@pytest.fixture
def noon(midnight: int) -> int:
    return int(datetime(2024, 5, 10, 12).timestamp())


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    return tmp_path / "activity.log"


@pytest.fixture
def clock(noon: int) -> FakeClock:
    return FakeClock(noon)


@pytest.fixture
def sensor() -> FakeSensor:
    return FakeSensor()


@pytest.fixture
def settings(log_path: Path) -> TrackerSettings:
    return TrackerSettings(log_file_path=log_path, idle_wait=timedelta(seconds=300))


@pytest.fixture
def tracker(settings: TrackerSettings, sensor: FakeSensor, clock: FakeClock) -> ActivityTracker:
    return ActivityTracker(settings, sensor=sensor, clock=clock)
