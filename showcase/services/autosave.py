"""
Autosave Scheduler — debounced, coalescing persistence of draft snapshots.

One scheduler per submission. It holds the latest unsaved snapshot, one quiet
period timer and an in-flight flag:

    schedule(snap)   replace the pending snapshot, restart the timer
    timer expiry     persist the pending snapshot (one call)
    flush()          persist now, in the caller's thread; errors propagate
    cancel()         drop the timer and the pending snapshot

At most one persistence call runs at a time. A timer that expires while a
write is in flight is deferred; exactly one follow-up write carrying the
latest snapshot is issued when the in-flight write resolves.

Failures never lose the unsaved snapshot: it stays pending until the next
edit re-arms the timer or ``flush()`` is called. There is no backoff retry.

Usage:
    scheduler = AutosaveScheduler(lambda snap: backend.save(sub_id, snap), delay=1.0)
    scheduler.schedule(snapshot)
    ...
    scheduler.flush()
"""

import enum
import functools
import logging
import threading
import time

from showcase.core.exceptions import InvalidStateError, PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_DELAY_SECONDS = 1.0
DEFAULT_FLUSH_TIMEOUT_SECONDS = 30.0


class SaveStatus(str, enum.Enum):
    """What the form shows next to the draft.

    PENDING covers both "edits queued, timer running" and "unsaved after a
    failed write"; the second case has ``last_error`` set and no timer armed
    until the next edit or ``flush()``.
    """

    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"


class AutosaveScheduler:
    """Debounces snapshots into single persistence calls.

    Args:
        persist: Callable(snapshot) → result. Raises on failure.
        delay: Quiet period in seconds.
        timer_factory: Callable(interval, function) → object with
            ``start()``/``cancel()``. Defaults to ``threading.Timer``.
        on_error: Callable(exc) invoked after a failed background write.
        on_saved: Callable(snapshot, result) invoked after every successful write.
        flush_timeout: Max seconds ``flush()`` waits for an in-flight write.
    """

    def __init__(
        self,
        persist,
        *,
        delay: float = DEFAULT_DELAY_SECONDS,
        timer_factory=threading.Timer,
        on_error=None,
        on_saved=None,
        flush_timeout: float = DEFAULT_FLUSH_TIMEOUT_SECONDS,
    ):
        self._persist = persist
        self._delay = delay
        self._timer_factory = timer_factory
        self._on_error = on_error
        self._on_saved = on_saved
        self._flush_timeout = flush_timeout

        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._pending = None
        self._timer = None
        self._generation = 0
        self._in_flight = False
        self._deferred = False
        self.last_error: Exception | None = None
        self.save_count = 0

    # ── Observable state ─────────────────────────────────────────────────

    @property
    def status(self) -> SaveStatus:
        with self._lock:
            if self._in_flight:
                return SaveStatus.SAVING
            if self._pending is not None:
                return SaveStatus.PENDING
            return SaveStatus.IDLE

    @property
    def has_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    # ── Public API ───────────────────────────────────────────────────────

    def schedule(self, snapshot) -> None:
        """Make ``snapshot`` the pending write and restart the quiet period."""
        with self._lock:
            self._pending = snapshot
            self._arm_timer_locked()

    def flush(self):
        """Persist the pending snapshot now and return the persist result.

        Waits for an in-flight write first. Returns None if nothing was
        pending. Raises whatever the persist callable raises, or
        ``PersistenceError`` if the in-flight write does not resolve within
        ``flush_timeout``.
        """
        with self._lock:
            self._cancel_timer_locked()
            self._deferred = False
            deadline = time.monotonic() + self._flush_timeout
            while self._in_flight:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise PersistenceError("Timed out waiting for an in-flight save")
                self._idle.wait(remaining)
            if self._pending is None:
                return None
            snapshot, self._pending = self._pending, None
            self._in_flight = True

        try:
            result = self._persist(snapshot)
        except Exception as exc:
            with self._lock:
                self._in_flight = False
                self.last_error = exc
                if not isinstance(exc, InvalidStateError) and self._pending is None:
                    self._pending = snapshot
                self._after_write_locked()
            raise

        with self._lock:
            self._in_flight = False
            self.last_error = None
            self.save_count += 1
            self._after_write_locked()
        if self._on_saved:
            self._on_saved(snapshot, result)
        return result

    def cancel(self) -> None:
        """Drop the timer and any unsaved snapshot. An in-flight write is not interrupted."""
        with self._lock:
            self._cancel_timer_locked()
            self._pending = None
            self._deferred = False

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no write is in flight. Returns False on timeout."""
        with self._lock:
            return self._idle.wait_for(lambda: not self._in_flight, timeout)

    # ── Internal ─────────────────────────────────────────────────────────

    def _arm_timer_locked(self) -> None:
        self._cancel_timer_locked()
        timer = self._timer_factory(self._delay, functools.partial(self._on_timer, self._generation))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _cancel_timer_locked(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _after_write_locked(self) -> None:
        # A timer that fired during a synchronous flush is re-armed, not dropped.
        if self._deferred and self._pending is not None:
            self._deferred = False
            self._arm_timer_locked()
        self._idle.notify_all()

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
            if self._in_flight:
                self._deferred = True
                return
            if self._pending is None:
                return
            snapshot, self._pending = self._pending, None
            self._in_flight = True

        self._write_loop(snapshot)

    def _write_loop(self, snapshot) -> None:
        """Persist ``snapshot``, then the deferred follow-up if one is owed."""
        while snapshot is not None:
            error = None
            result = None
            try:
                result = self._persist(snapshot)
            except InvalidStateError as exc:
                logger.warning("Autosave rejected, submission is locked: %s", exc)
                error = exc
            except PersistenceError as exc:
                logger.warning("Autosave failed, keeping unsaved changes: %s", exc)
                error = exc
            except Exception as exc:
                logger.exception("Unexpected autosave failure")
                error = exc

            with self._lock:
                self._in_flight = False
                if error is None:
                    self.last_error = None
                    self.save_count += 1
                else:
                    self.last_error = error
                    if isinstance(error, InvalidStateError):
                        self._cancel_timer_locked()
                        self._pending = None
                        self._deferred = False
                    elif self._pending is None:
                        self._pending = snapshot

                saved = snapshot
                snapshot = None
                if self._deferred and self._pending is not None:
                    self._deferred = False
                    snapshot, self._pending = self._pending, None
                    self._in_flight = True
                else:
                    self._deferred = False
                    self._idle.notify_all()

            if error is None:
                if self._on_saved:
                    self._on_saved(saved, result)
            elif self._on_error:
                self._on_error(error)
