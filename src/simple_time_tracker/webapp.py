"""FastAPI application exposing the tracker's status and today's total."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .config import TrackerSettings
from .logstore import LogStoreError
from .reporting import format_total, split_hours_minutes
from .tracker import ActivityTracker

logger = logging.getLogger(__name__)


class TrackerRunner:
    """Manage the tracker's tick loop in a background thread."""

    def __init__(self, tracker: ActivityTracker) -> None:
        self._tracker = tracker
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    def start(self) -> None:
        with self._lock:
            if self._thread and self._thread.is_alive():
                return
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run_tracker,
                args=(self._tracker, stop_event),
                daemon=True,
            )
            self._thread = thread
            self._stop_event = stop_event
            thread.start()
            logger.info("Tracker background thread started.")

    def stop(self) -> None:
        thread: Optional[threading.Thread] = None
        with self._lock:
            if not self._thread or not self._thread.is_alive() or not self._stop_event:
                return
            self._stop_event.set()
            thread = self._thread
            self._thread = None
            self._stop_event = None
        if thread:
            thread.join(timeout=10)
            logger.info("Tracker background thread stopped.")

    def is_running(self) -> bool:
        with self._lock:
            return bool(self._thread and self._thread.is_alive())

    def join(self, timeout: Optional[float] = None) -> None:
        with self._lock:
            thread = self._thread
        if thread:
            thread.join(timeout=timeout)

    @staticmethod
    def _run_tracker(tracker: ActivityTracker, stop_event: threading.Event) -> None:
        try:
            tracker.run_until_stopped(stop_event)
        except Exception:
            logger.exception(
                "Tracker stopped unexpectedly; writing to %s has ended.",
                tracker.settings.log_file_path,
            )


class TodayTotal(BaseModel):
    seconds: int
    hours: int
    minutes: int
    display: str


class TrackerStatusPayload(BaseModel):
    runner_running: bool
    tracking: bool
    active: bool
    since: Optional[int] = None
    log_path: str
    idle_wait_seconds: int
    tick_seconds: float


def create_app(
    settings: TrackerSettings,
    *,
    tracker: Optional[ActivityTracker] = None,
) -> FastAPI:
    """Instantiate the FastAPI application."""
    resolved_tracker = tracker or ActivityTracker(settings)
    runner = TrackerRunner(resolved_tracker)

    app = FastAPI(title="Simple Time Tracker", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.tracker = resolved_tracker
    app.state.tracker_runner = runner

    @app.on_event("startup")
    async def _startup() -> None:
        runner.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        runner.stop()

    @app.get("/api/status", response_model=TrackerStatusPayload)
    def status(request: Request) -> TrackerStatusPayload:
        current = request.app.state.tracker.status()
        return TrackerStatusPayload(
            runner_running=request.app.state.tracker_runner.is_running(),
            tracking=current.running,
            active=current.active,
            since=current.since,
            log_path=str(settings.log_file_path),
            idle_wait_seconds=settings.idle_wait_seconds,
            tick_seconds=settings.tick_interval.total_seconds(),
        )

    @app.get("/api/today", response_model=TodayTotal)
    def today(request: Request) -> TodayTotal:
        try:
            seconds = request.app.state.tracker.total_seconds_today()
        except LogStoreError as exc:
            logger.error("Failed to total today's activity: %s", exc)
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        hours, minutes = split_hours_minutes(seconds)
        return TodayTotal(
            seconds=seconds,
            hours=hours,
            minutes=minutes,
            display=format_total(hours, minutes),
        )

    return app
