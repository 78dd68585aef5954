"""
Submission lifecycle state machine.

    draft ──(first persisted edit)──▶ in_progress ──(complete action)──▶ completed

``completed`` is terminal. The transition table lives with the model
(``SUBMISSION_TRANSITIONS``); this module is the only place that moves a
submission along it. Functions here mutate the passed object but never commit:
the submission store owns the transaction.

Usage:
    from showcase.services.lifecycle import ensure_editable, complete_submission

    ensure_editable(submission.status)
    changed = complete_submission(submission)
"""

import logging
from datetime import datetime, timezone

from showcase.core.exceptions import InvalidStateError
from showcase.models.submission import (
    SUBMISSION_STATUSES,
    SUBMISSION_TRANSITIONS,
    validate_submission_transition,
)

logger = logging.getLogger(__name__)

DRAFT = "draft"
IN_PROGRESS = "in_progress"
COMPLETED = "completed"


def validate_transition(old_status: str, new_status: str) -> bool:
    """Return True if ``old_status → new_status`` is a legal edge."""
    return validate_submission_transition(old_status, new_status)


def is_terminal(status: str) -> bool:
    return not SUBMISSION_TRANSITIONS.get(status)


def ensure_editable(status: str) -> None:
    """Raise InvalidStateError when a submission in ``status`` may not be edited."""
    if status not in SUBMISSION_STATUSES:
        raise InvalidStateError(f"Unknown submission status '{status}'", current_status=status)
    if is_terminal(status):
        raise InvalidStateError("Submission is completed and can no longer be edited", current_status=status)


def transition(submission, new_status: str) -> None:
    """Move ``submission`` along one legal edge or raise InvalidStateError."""
    old = submission.status
    if not validate_transition(old, new_status):
        raise InvalidStateError(f"Invalid transition: {old} → {new_status}", current_status=old)

    submission.status = new_status
    if new_status == COMPLETED and not submission.completed_at:
        submission.completed_at = datetime.now(timezone.utc)
    logger.info("Submission %s transitioned: %s → %s", submission.id, old, new_status)


def promote_on_edit(submission) -> bool:
    """Apply the implicit ``draft → in_progress`` edge after an edit is persisted.

    Returns True if the status changed.
    """
    ensure_editable(submission.status)
    if submission.status == DRAFT:
        transition(submission, IN_PROGRESS)
        return True
    return False


def complete_submission(submission) -> bool:
    """Apply the explicit complete action.

    A draft walks both legal edges; an already completed submission is left
    untouched. Returns True if the status changed.
    """
    if submission.status == COMPLETED:
        return False
    if submission.status == DRAFT:
        transition(submission, IN_PROGRESS)
    transition(submission, COMPLETED)
    return True
