"""
Draft editing session — the client-side loop of the submission form.

    edit → Draft Mutator → Autosave Scheduler → persistence backend

A backend exposes the persistence boundary and returns submission documents
(the JSON shape of ``Submission.to_dict()``):

    load()                            → dict
    save(submission_id, snapshot)     → dict
    mark_completed(submission_id)     → dict

``StoreBackend`` talks to the in-process store; ``PortalGateway`` talks to the
REST surface. ``DraftSession`` works with either.
"""

import functools
import logging
import threading

from showcase.core.exceptions import InvalidStateError
from showcase.core.snapshot import ARCHITECTS, MANUFACTURERS_SUPPLIERS, SubmissionSnapshot
from showcase.services import lifecycle
from showcase.services.autosave import DEFAULT_DELAY_SECONDS, AutosaveScheduler, SaveStatus
from showcase.services.draft_mutator import (
    FieldEdit,
    MapEdit,
    NestedEdit,
    apply_edit,
    check_completeness,
)

logger = logging.getLogger(__name__)


class StoreBackend:
    """Persistence backend bound to one owner, using the in-process store.

    Each call runs inside its own application context so it is safe from the
    autosave timer thread.
    """

    def __init__(self, app, owner_id: int):
        self.app = app
        self.owner_id = owner_id

    @property
    def debounce_seconds(self) -> float:
        return self.app.config.get("AUTOSAVE_DEBOUNCE_MS", DEFAULT_DELAY_SECONDS * 1000) / 1000

    def load(self) -> dict:
        from showcase.services import submission_store

        with self.app.app_context():
            return submission_store.load_for_owner(self.owner_id).to_dict()

    def save(self, submission_id: int, snapshot) -> dict:
        from showcase.services import submission_store

        with self.app.app_context():
            return submission_store.save_snapshot(submission_id, self.owner_id, snapshot).to_dict()

    def mark_completed(self, submission_id: int) -> dict:
        from showcase.services import submission_store

        with self.app.app_context():
            submission, _ = submission_store.mark_completed(submission_id, self.owner_id)
            return submission.to_dict()


class DraftSession:
    """One user's editing session over their submission."""

    def __init__(
        self,
        backend,
        *,
        debounce_seconds: float | None = None,
        timer_factory=threading.Timer,
        on_save_error=None,
    ):
        self.backend = backend
        if debounce_seconds is None:
            debounce_seconds = getattr(backend, "debounce_seconds", DEFAULT_DELAY_SECONDS)
        self.debounce_seconds = debounce_seconds
        self.timer_factory = timer_factory
        self.on_save_error = on_save_error

        self._lock = threading.Lock()
        self._scheduler = None
        self._snapshot = None
        self._submission_id = None
        self._status = None
        self._updated_at = None

    # ── Lifecycle ────────────────────────────────────────────────────────

    def open(self) -> SubmissionSnapshot:
        """Load (or lazily create) the submission and start autosaving."""
        doc = self.backend.load()
        with self._lock:
            self._submission_id = doc["id"]
            self._status = doc["status"]
            self._updated_at = doc.get("updated_at")
            self._snapshot = SubmissionSnapshot.from_dict(doc)
        self._scheduler = AutosaveScheduler(
            functools.partial(self.backend.save, self._submission_id),
            delay=self.debounce_seconds,
            timer_factory=self.timer_factory,
            on_error=self._handle_save_error,
            on_saved=self._handle_saved,
        )
        logger.info("Draft session opened", extra={"submission_id": self._submission_id})
        return self._snapshot

    def close(self) -> None:
        """Flush unsaved changes, then stop the scheduler."""
        if self._scheduler is None:
            return
        try:
            if self._status != lifecycle.COMPLETED:
                self._scheduler.flush()
        finally:
            self._scheduler.cancel()

    # ── Editing ──────────────────────────────────────────────────────────

    def edit(self, edit) -> SubmissionSnapshot:
        """Apply one edit locally and schedule an autosave.

        Raises ValidationError (snapshot unchanged) or InvalidStateError when
        the submission is completed.
        """
        self._require_open()
        with self._lock:
            lifecycle.ensure_editable(self._status)
            self._snapshot = apply_edit(self._snapshot, edit)
            snapshot = self._snapshot
        self._scheduler.schedule(snapshot)
        return snapshot

    def set_field(self, field: str, value) -> SubmissionSnapshot:
        return self.edit(FieldEdit(field, value))

    def set_architect_field(self, index: int, field: str, value) -> SubmissionSnapshot:
        return self.edit(NestedEdit(ARCHITECTS, index, field, value))

    def set_supplier(self, category: str, supplier: str) -> SubmissionSnapshot:
        return self.edit(MapEdit(MANUFACTURERS_SUPPLIERS, category, supplier))

    def complete(self) -> dict | None:
        """Flush pending edits, then mark the submission completed.

        Idempotent, also when the submission was completed elsewhere since the
        session last heard from the server. Other failures propagate.
        """
        self._require_open()
        if self._status == lifecycle.COMPLETED:
            return None
        try:
            self._scheduler.flush()
        except InvalidStateError as exc:
            if exc.current_status != lifecycle.COMPLETED:
                raise
            with self._lock:
                self._status = lifecycle.COMPLETED
            self._scheduler.cancel()
            logger.info("Submission already completed", extra={"submission_id": self._submission_id})
            return None
        doc = self.backend.mark_completed(self._submission_id)
        with self._lock:
            self._status = doc["status"]
            self._updated_at = doc.get("updated_at")
        self._scheduler.cancel()
        logger.info("Submission completed from session", extra={"submission_id": self._submission_id})
        return doc

    # ── Observable state ─────────────────────────────────────────────────

    @property
    def submission_id(self):
        return self._submission_id

    @property
    def status(self) -> str | None:
        return self._status

    @property
    def updated_at(self):
        return self._updated_at

    @property
    def snapshot(self) -> SubmissionSnapshot | None:
        return self._snapshot

    @property
    def save_status(self) -> SaveStatus:
        return self._scheduler.status if self._scheduler else SaveStatus.IDLE

    @property
    def last_error(self):
        return self._scheduler.last_error if self._scheduler else None

    @property
    def warnings(self) -> list[dict]:
        return check_completeness(self._snapshot) if self._snapshot is not None else []

    # ── Internal ─────────────────────────────────────────────────────────

    def _require_open(self) -> None:
        if self._scheduler is None:
            raise RuntimeError("DraftSession.open() must be called first")

    def _handle_saved(self, snapshot, doc) -> None:
        if not isinstance(doc, dict):
            return
        with self._lock:
            self._status = doc.get("status", self._status)
            self._updated_at = doc.get("updated_at", self._updated_at)

    def _handle_save_error(self, exc) -> None:
        if isinstance(exc, InvalidStateError) and exc.current_status:
            with self._lock:
                self._status = exc.current_status
        if self.on_save_error:
            self.on_save_error(exc)
