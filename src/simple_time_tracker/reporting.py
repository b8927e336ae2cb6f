"""Simple reporting utilities for CLI output."""

from __future__ import annotations

from pathlib import Path

from .logstore import LogStore


def split_hours_minutes(seconds: float) -> tuple[int, int]:
    """Truncate a number of seconds to whole hours and minutes."""
    total_seconds = max(0, int(seconds))
    hours, remainder = divmod(total_seconds, 3600)
    return hours, remainder // 60


def format_total(hours: int, minutes: int) -> str:
    return f"{hours} Hours {minutes} Minutes"


def format_duration(seconds: float) -> str:
    total_seconds = int(round(seconds))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class SummaryPrinter:
    """Render today's total from the log in the console."""

    def __init__(self, log_path: Path) -> None:
        self.log_path = Path(log_path)

    def print_today(self, now: int) -> None:
        seconds = LogStore(self.log_path).total_active_seconds_today(now)
        print(f"Active time today: {format_total(*split_hours_minutes(seconds))}")
        print(f"                   {format_duration(seconds)}")
