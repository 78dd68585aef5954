"""
Cancellable periodic refresh for the admin dashboard.

``PeriodicTask`` runs a callable on a daemon thread every ``interval``
seconds. A tick always runs to completion before the next wait starts, so
ticks never overlap; ``cancel()`` stops the loop between ticks.

``AdminDashboardPoller`` refreshes submissions, stats and the cumulative
report through a ``PortalGateway`` on such a task. A failed report fetch is
tolerated: the previous report is kept and the list/stats still refresh.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from showcase.core.exceptions import (
    AuthError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 30

_GATEWAY_ERRORS = (AuthError, NotFoundError, PersistenceError, ValidationError)


class PeriodicTask:
    """Run ``fn`` every ``interval`` seconds on a daemon thread until cancelled."""

    def __init__(self, fn, interval: float, *, name: str = "periodic-task", run_immediately: bool = True):
        self.fn = fn
        self.interval = interval
        self.name = name
        self.run_immediately = run_immediately
        self.tick_count = 0
        self._stop = threading.Event()
        self._tick_lock = threading.Lock()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "PeriodicTask":
        if self.running:
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()
        return self

    def cancel(self, timeout: float | None = None) -> None:
        """Stop the loop. Waits for a running tick unless called from inside it."""
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def run_once(self) -> None:
        """Run one tick in the caller's thread (serialized with the loop's ticks)."""
        self._tick()

    def _loop(self) -> None:
        if self.run_immediately and not self._stop.is_set():
            self._tick()
        while not self._stop.wait(self.interval):
            self._tick()

    def _tick(self) -> None:
        with self._tick_lock:
            try:
                self.fn()
            except Exception:
                logger.exception("Periodic task '%s' tick failed", self.name)
            finally:
                self.tick_count += 1


@dataclass(frozen=True)
class DashboardState:
    submissions: tuple = ()
    stats: dict = field(default_factory=dict)
    report: dict | None = None
    refreshed_at: datetime | None = None
    error: str | None = None
    report_error: str | None = None


class AdminDashboardPoller:
    """Keeps an admin dashboard view fresh.

    Usage:
        poller = AdminDashboardPoller(gateway, interval=30).start()
        # or, from app settings:
        poller = AdminDashboardPoller.from_config(gateway, app.config).start()
        ...
        poller.state.stats
        poller.stop()
    """

    def __init__(self, gateway, *, interval: float = DEFAULT_INTERVAL_SECONDS, top_n: int | None = None):
        self.gateway = gateway
        self.top_n = top_n
        self._lock = threading.Lock()
        self._state = DashboardState()
        self._task = PeriodicTask(self.refresh, interval, name="admin-dashboard-poller")

    @classmethod
    def from_config(cls, gateway, config) -> "AdminDashboardPoller":
        """Build a poller from ADMIN_POLL_INTERVAL_SECONDS and REPORT_TOP_SUPPLIERS."""
        return cls(
            gateway,
            interval=config.get("ADMIN_POLL_INTERVAL_SECONDS", DEFAULT_INTERVAL_SECONDS),
            top_n=config.get("REPORT_TOP_SUPPLIERS"),
        )

    @property
    def state(self) -> DashboardState:
        with self._lock:
            return self._state

    @property
    def task(self) -> PeriodicTask:
        return self._task

    def start(self) -> "AdminDashboardPoller":
        self._task.start()
        return self

    def stop(self, timeout: float | None = None) -> None:
        self._task.cancel(timeout)

    def refresh(self) -> DashboardState:
        """Fetch submissions, stats and report once and publish the new state."""
        previous = self.state
        try:
            submissions = tuple(self.gateway.list_submissions())
            stats = self.gateway.get_stats()
        except _GATEWAY_ERRORS as exc:
            logger.warning("Admin dashboard refresh failed: %s", exc)
            new_state = replace(previous, error=str(exc))
            with self._lock:
                self._state = new_state
            return new_state

        report = previous.report
        report_error = None
        try:
            report = self.gateway.get_report(self.top_n)
        except _GATEWAY_ERRORS as exc:
            logger.warning("Cumulative report fetch failed, keeping previous report: %s", exc)
            report_error = str(exc)

        new_state = DashboardState(
            submissions=submissions,
            stats=stats,
            report=report,
            refreshed_at=datetime.now(timezone.utc),
            error=None,
            report_error=report_error,
        )
        with self._lock:
            self._state = new_state
        return new_state
