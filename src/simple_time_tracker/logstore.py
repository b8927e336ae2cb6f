"""Append-only text log of active intervals."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import IO, Iterator, Optional

from .models import LogRecord, TrackerState

logger = logging.getLogger(__name__)

_NUMBER_PATTERN = re.compile(r"\d+")


class LogStoreError(RuntimeError):
    """Raised when the activity log cannot be read or written."""


def local_midnight(now: int) -> int:
    """Return epoch seconds of local midnight on the day containing ``now``."""
    day = datetime.fromtimestamp(now).replace(hour=0, minute=0, second=0, microsecond=0)
    return int(day.timestamp())


def parse_line(line: str) -> Optional[LogRecord]:
    """Parse one log line into a closed record.

    Numbers are picked out of the line regardless of the separator. Lines
    that do not carry exactly a start and an end are not usable and give
    ``None``; that includes bare ``<start> -`` markers.
    """
    tokens = _NUMBER_PATTERN.findall(line)
    if len(tokens) != 2:
        return None
    start, end = int(tokens[0]), int(tokens[1])
    if end < start:
        return None
    return LogRecord(start=start, end=end)


class LogStore:
    """Writes interval lines and totals them back up for the current day."""

    def __init__(self, path: Path, *, debug: bool = False) -> None:
        self.path = Path(path)
        self.debug = debug
        self._handle: Optional[IO[str]] = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def ensure_exists(self) -> None:
        """Create the log file and its directory if they are missing."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch(exist_ok=True)
        except OSError as exc:
            raise LogStoreError(f"Cannot create activity log {self.path}: {exc}") from exc

    def append(self, record: LogRecord) -> None:
        """Write one record and flush it; the handle stays open until close()."""
        if self._handle is None:
            try:
                self._handle = self.path.open("a", encoding="utf-8")
            except OSError as exc:
                raise LogStoreError(
                    f"Cannot open activity log {self.path} for appending: {exc}"
                ) from exc
            logger.debug("Opened %s for appending", self.path)
        try:
            self._handle.write(record.to_line())
            self._handle.flush()
        except OSError as exc:
            raise LogStoreError(f"Cannot write to activity log {self.path}: {exc}") from exc
        logger.info("Recorded interval %s", record.to_line().strip())

    def close(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        handle.close()
        logger.debug("Closed %s", self.path)

    def iter_lines(self) -> Iterator[str]:
        try:
            with self.path.open("r", encoding="utf-8", errors="replace") as fh:
                yield from fh
        except OSError as exc:
            raise LogStoreError(f"Cannot read activity log {self.path}: {exc}") from exc

    def total_active_seconds_today(
        self,
        now: int,
        state: Optional[TrackerState] = None,
        *,
        day_start: Optional[int] = None,
    ) -> int:
        """Sum active seconds since local midnight of ``now``.

        Logged intervals are clipped to midnight. The running interval in
        ``state`` is not in the log yet and is added on top.
        """
        if day_start is None:
            day_start = local_midnight(now)

        total = 0
        for line in self.iter_lines():
            record = parse_line(line)
            if record is None:
                self._debug("ignoring line %r", line.rstrip("\n"))
                continue
            assert record.end is not None
            if record.end <= day_start:
                self._debug("ignoring line from an earlier day %r", line.rstrip("\n"))
                continue
            today = LogRecord(start=max(record.start, day_start), end=record.end)
            self._debug("adding %d (%d to %d)", today.duration_seconds, today.start, today.end)
            total += today.duration_seconds

        if state is not None and state.active_at is not None:
            running = max(0, now - max(state.active_at, day_start))
            self._debug("adding running interval %d", running)
            total += running
        return total

    def _debug(self, msg: str, *args: object) -> None:
        if self.debug:
            logger.debug(msg, *args)
