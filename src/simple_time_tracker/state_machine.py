"""Idle/active state machine driven by idle-duration samples."""

from __future__ import annotations

import logging
import math
from typing import Optional

from .models import LogRecord, TrackerState

logger = logging.getLogger(__name__)


class TrackerStateError(RuntimeError):
    """Raised when the tracker is driven out of order."""


class IdleStateMachine:
    """Decides on each sample whether the user went idle or came back.

    Going idle is backdated to the moment input stopped (``now - idle``),
    never earlier than the start of the current active interval. Coming
    back is stamped with the tick that noticed it, since a single idle
    sample cannot tell when input resumed.
    """

    def __init__(self, idle_wait_seconds: int, *, debug: bool = False) -> None:
        self.idle_wait_seconds = idle_wait_seconds
        self.debug = debug
        self.state = TrackerState()

    @property
    def started(self) -> bool:
        return self.state.is_active or self.state.is_idle

    def begin(self, now: int) -> None:
        self.state.mark_active(now)
        logger.info("Tracking active from %d", now)

    def tick(self, now: int, idle_seconds: float) -> Optional[LogRecord]:
        """Evaluate one sample and return the interval event it produced, if any.

        A closed record is returned when the user went idle; a record with
        only a start is returned when activity resumed.
        """
        if not self.started:
            raise TrackerStateError("tick() called before begin()")
        idle_seconds = max(0.0, idle_seconds)
        state = self.state

        if state.active_at is not None and idle_seconds > self.idle_wait_seconds:
            self._debug("idled %.1fs", idle_seconds)
            return self._close(now, idle_seconds)

        if state.idled_at is not None and (now - state.idled_at) > idle_seconds:
            self._debug("unidled after %.1fs", idle_seconds)
            state.mark_active(now)
            logger.info("Activity resumed at %d", now)
            return LogRecord(start=now)

        self._debug(
            "still %s since %s (idle %.1fs)",
            "active" if state.is_active else "idle",
            state.active_at if state.is_active else state.idled_at,
            idle_seconds,
        )
        return None

    def force_close(self, now: int, idle_seconds: float) -> Optional[LogRecord]:
        """Close the running active interval, e.g. on shutdown."""
        if self.state.active_at is None:
            return None
        return self._close(now, max(0.0, idle_seconds))

    def _close(self, now: int, idle_seconds: float) -> LogRecord:
        active_at = self.state.active_at
        assert active_at is not None
        # ceil keeps idled_at from drifting before the real last input
        idled_at = max(active_at, min(now, math.ceil(now - idle_seconds)))
        self.state.mark_idle(idled_at)
        logger.info("Idle since %d (active from %d)", idled_at, active_at)
        return LogRecord(start=active_at, end=idled_at)

    def _debug(self, msg: str, *args: object) -> None:
        if self.debug:
            logger.debug(msg, *args)
