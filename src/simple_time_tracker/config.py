"""Configuration models and helpers for the time tracker."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Optional


@dataclass(slots=True)
class TrackerSettings:
    """Runtime configuration for a tracking session."""

    log_file_path: Path
    idle_wait: timedelta = timedelta(minutes=5)
    debug: bool = False
    tick_interval: timedelta = timedelta(seconds=2)

    def __post_init__(self) -> None:
        if self.log_file_path is None:
            raise ValueError("log_file_path is required")
        self.log_file_path = Path(self.log_file_path)
        if self.idle_wait <= timedelta(0):
            raise ValueError("idle_wait must be positive")
        if self.tick_interval <= timedelta(0):
            raise ValueError("tick_interval must be positive")

    @property
    def idle_wait_seconds(self) -> int:
        return int(self.idle_wait.total_seconds())

    @classmethod
    def from_options(
        cls,
        log_file_path: Optional[Path],
        idle_wait_seconds: float = 300,
        debug: bool = False,
        tick_seconds: float = 2.0,
    ) -> "TrackerSettings":
        if log_file_path is None:
            raise ValueError("log_file_path is required")
        return cls(
            log_file_path=Path(log_file_path),
            idle_wait=timedelta(seconds=idle_wait_seconds),
            debug=debug,
            tick_interval=timedelta(seconds=tick_seconds),
        )
