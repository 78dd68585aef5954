"""
Submission Store — durable record of one submission per user.

Persistence boundary:
    load_for_owner(owner_id)                       → Submission (created lazily)
    save_snapshot(submission_id, owner_id, snap)   → Submission
    mark_completed(submission_id, owner_id)        → (Submission, changed)

Admin read boundary:
    list_all()                  → every submission, owner eagerly loaded
    list_completed_snapshots()  → immutable snapshots of completed submissions
    count_by_status()           → {status: count}

Every write goes through the lifecycle module, so a completed submission is
never touched. SQLAlchemy failures are rolled back and re-raised as
``PersistenceError``.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from showcase.core.exceptions import NotFoundError, PersistenceError
from showcase.models import db
from showcase.models.submission import Submission
from showcase.services import lifecycle
from showcase.services.draft_mutator import apply_edit

logger = logging.getLogger(__name__)


@contextmanager
def _db_guard(action: str, **log_extra):
    try:
        yield
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Submission store %s failed: %s", action, exc, extra=log_extra)
        raise PersistenceError(f"Could not {action} submission") from exc


def _as_utc(value):
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _touch(submission: Submission) -> None:
    """Advance ``updated_at``; it never moves backwards even if the clock does."""
    now = datetime.now(timezone.utc)
    previous = _as_utc(submission.updated_at)
    submission.updated_at = max(now, previous) if previous else now


# ═════════════════════════════════════════════════════════════════════════════
# Persistence boundary
# ═════════════════════════════════════════════════════════════════════════════


def load_for_owner(owner_id: int) -> Submission:
    """Return the caller's submission, creating an empty draft on first access."""
    with _db_guard("load", user_id=owner_id):
        submission = Submission.query.filter_by(owner_id=owner_id).first()
        if submission is not None:
            return submission

        submission = Submission(owner_id=owner_id, status=lifecycle.DRAFT)
        submission.apply_snapshot(submission.to_snapshot())
        db.session.add(submission)
        try:
            db.session.commit()
        except IntegrityError:
            # A concurrent first load created it already.
            db.session.rollback()
            submission = Submission.query.filter_by(owner_id=owner_id).first()
            if submission is None:
                raise
            return submission

    logger.info(
        "Submission created",
        extra={"user_id": owner_id, "submission_id": submission.id},
    )
    return submission


def get_owned(submission_id: int, owner_id: int) -> Submission:
    """Return the submission if it exists and belongs to ``owner_id``."""
    with _db_guard("load", user_id=owner_id, submission_id=submission_id):
        submission = db.session.get(Submission, submission_id)
    if submission is None or submission.owner_id != owner_id:
        raise NotFoundError(resource="Submission", resource_id=submission_id, owner_id=owner_id)
    return submission


def save_snapshot(submission_id: int, owner_id: int, snapshot) -> Submission:
    """Persist a full snapshot; promotes ``draft → in_progress`` on success.

    Raises:
        NotFoundError: unknown id or another user's submission.
        InvalidStateError: the submission is completed.
        PersistenceError: the write failed; nothing was changed.
    """
    submission = get_owned(submission_id, owner_id)
    lifecycle.ensure_editable(submission.status)

    with _db_guard("save", user_id=owner_id, submission_id=submission_id):
        submission.apply_snapshot(snapshot)
        _touch(submission)
        lifecycle.promote_on_edit(submission)
        db.session.commit()

    logger.debug(
        "Submission saved",
        extra={"user_id": owner_id, "submission_id": submission_id},
    )
    return submission


def apply_edit_to_submission(submission_id: int, owner_id: int, edit) -> Submission:
    """Apply one edit server-side against the stored snapshot and persist it."""
    submission = get_owned(submission_id, owner_id)
    lifecycle.ensure_editable(submission.status)
    snapshot = apply_edit(submission.to_snapshot(), edit)
    return save_snapshot(submission_id, owner_id, snapshot)


def mark_completed(submission_id: int, owner_id: int) -> tuple[Submission, bool]:
    """Run the complete action. Idempotent: a completed submission is returned as is."""
    submission = get_owned(submission_id, owner_id)

    with _db_guard("complete", user_id=owner_id, submission_id=submission_id):
        changed = lifecycle.complete_submission(submission)
        if changed:
            _touch(submission)
            db.session.commit()

    if changed:
        logger.info(
            "Submission completed",
            extra={"user_id": owner_id, "submission_id": submission_id},
        )
    return submission, changed


# ═════════════════════════════════════════════════════════════════════════════
# Admin read boundary
# ═════════════════════════════════════════════════════════════════════════════


def list_all() -> list[Submission]:
    with _db_guard("list"):
        return (
            Submission.query
            .options(joinedload(Submission.owner))
            .order_by(Submission.updated_at.desc(), Submission.id.desc())
            .all()
        )


def list_completed_snapshots() -> list:
    """Materialize every completed submission in one query, as immutable snapshots."""
    with _db_guard("list"):
        rows = (
            Submission.query
            .filter(Submission.status == lifecycle.COMPLETED)
            .order_by(Submission.completed_at, Submission.id)
            .all()
        )
        return [row.to_snapshot() for row in rows]


def count_by_status() -> dict[str, int]:
    with _db_guard("count"):
        rows = db.session.execute(
            select(Submission.status, func.count(Submission.id)).group_by(Submission.status)
        ).all()
    return {status: count for status, count in rows}
