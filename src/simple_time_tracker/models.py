"""Domain models for tracked activity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


LINE_SEPARATOR = " - "


@dataclass(slots=True)
class TrackerState:
    """Current active/idle status of a session.

    Exactly one of ``active_at`` and ``idled_at`` is set once the session
    has started; both are empty before that.
    """

    active_at: Optional[int] = None
    idled_at: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.active_at is not None

    @property
    def is_idle(self) -> bool:
        return self.idled_at is not None

    def mark_active(self, when: int) -> None:
        self.active_at = when
        self.idled_at = None

    def mark_idle(self, when: int) -> None:
        self.idled_at = when
        self.active_at = None


@dataclass(slots=True, frozen=True)
class LogRecord:
    """One active interval as written to the activity log."""

    start: int
    end: Optional[int] = None

    @property
    def is_closed(self) -> bool:
        return self.end is not None

    @property
    def duration_seconds(self) -> int:
        if self.end is None:
            return 0
        return self.end - self.start

    def to_line(self) -> str:
        end = "" if self.end is None else str(self.end)
        return f"{self.start}{LINE_SEPARATOR}{end}\n"


@dataclass(slots=True, frozen=True)
class TrackerStatus:
    """Snapshot of a session for display."""

    running: bool
    active: bool
    since: Optional[int]
