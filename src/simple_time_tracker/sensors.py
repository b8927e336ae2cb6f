"""Idle-duration sensors for the supported desktop platforms."""

from __future__ import annotations

import ctypes
import logging
import re
import subprocess
import sys
from typing import Protocol

logger = logging.getLogger(__name__)


class IdleSensor(Protocol):
    def idle_seconds(self) -> float:
        """Return seconds elapsed since the last keyboard or mouse input."""
        ...


class WindowsIdleSensor:
    """Reads the last input time using Win32 APIs."""

    def __init__(self) -> None:
        from ctypes import wintypes

        class LASTINPUTINFO(ctypes.Structure):
            _fields_ = [("cbSize", wintypes.UINT), ("dwTime", wintypes.DWORD)]

        self._info_type = LASTINPUTINFO
        self._user32 = ctypes.windll.user32  # type: ignore[attr-defined]
        self._kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
        self._kernel32.GetTickCount.restype = wintypes.DWORD

    def milliseconds_since_input(self) -> int:
        last_input = self._info_type()
        last_input.cbSize = ctypes.sizeof(last_input)
        if not self._user32.GetLastInputInfo(ctypes.byref(last_input)):
            raise ctypes.WinError()  # type: ignore[attr-defined]
        # both counters are 32-bit and wrap after ~49 days
        return (self._kernel32.GetTickCount() - last_input.dwTime) & 0xFFFFFFFF

    def idle_seconds(self) -> float:
        try:
            return self.milliseconds_since_input() / 1000.0
        except OSError:
            logger.exception("Failed to query idle time; assuming not idle.")
            return 0.0


class MacIdleSensor:
    """Reads ``HIDIdleTime`` (nanoseconds) from ``ioreg``."""

    _PATTERN = re.compile(r'"HIDIdleTime"\s*=\s*(\d+)')

    def idle_seconds(self) -> float:
        try:
            out = subprocess.check_output(
                ["/usr/sbin/ioreg", "-c", "IOHIDSystem", "-d", "4"],
                text=True,
                timeout=2,
                stderr=subprocess.DEVNULL,
            )
        except (OSError, subprocess.SubprocessError):
            logger.exception("Failed to query idle time; assuming not idle.")
            return 0.0
        match = self._PATTERN.search(out)
        if not match:
            logger.warning("ioreg output has no HIDIdleTime; assuming not idle.")
            return 0.0
        return int(match.group(1)) / 1_000_000_000


class XprintidleSensor:
    """Reads idle milliseconds from the ``xprintidle`` helper on X11."""

    def idle_seconds(self) -> float:
        try:
            out = subprocess.check_output(["xprintidle"], timeout=2, stderr=subprocess.DEVNULL)
            return int(out.strip()) / 1000.0
        except (OSError, subprocess.SubprocessError, ValueError):
            logger.exception("Failed to query idle time; assuming not idle.")
            return 0.0


def default_idle_sensor() -> IdleSensor:
    if sys.platform.startswith("win"):
        return WindowsIdleSensor()
    if sys.platform == "darwin":
        return MacIdleSensor()
    return XprintidleSensor()
