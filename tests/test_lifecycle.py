"""
Submission lifecycle state machine tests.

    draft → in_progress → completed (terminal)

Covers the transition table, the edit guard and both automatic and explicit
transitions. Submissions here are transient model instances; no commit is
needed because the lifecycle module never commits.
"""

import pytest

from showcase.core.exceptions import InvalidStateError
from showcase.models.submission import SUBMISSION_TRANSITIONS, Submission
from showcase.services import lifecycle


def _sub(status="draft"):
    return Submission(owner_id=1, status=status)


def _valid_transitions():
    for old, targets in SUBMISSION_TRANSITIONS.items():
        for new in targets:
            yield old, new


def _invalid_transitions():
    statuses = list(SUBMISSION_TRANSITIONS)
    for old in statuses:
        for new in statuses:
            if new not in SUBMISSION_TRANSITIONS[old]:
                yield old, new


# ═════════════════════════════════════════════════════════════════════════════
# Transition table
# ═════════════════════════════════════════════════════════════════════════════


class TestTransitionTable:
    @pytest.mark.parametrize("old,new", list(_valid_transitions()))
    def test_valid(self, old, new):
        assert lifecycle.validate_transition(old, new)

    @pytest.mark.parametrize("old,new", list(_invalid_transitions()))
    def test_invalid(self, old, new):
        assert not lifecycle.validate_transition(old, new)

    def test_completed_is_the_only_terminal_state(self):
        assert lifecycle.is_terminal("completed")
        assert not lifecycle.is_terminal("draft")
        assert not lifecycle.is_terminal("in_progress")

    @pytest.mark.parametrize("old,new", list(_invalid_transitions()))
    def test_transition_rejects_illegal_edge(self, old, new):
        sub = _sub(old)
        with pytest.raises(InvalidStateError) as exc:
            lifecycle.transition(sub, new)
        assert exc.value.current_status == old
        assert sub.status == old


# ═════════════════════════════════════════════════════════════════════════════
# Edit guard
# ═════════════════════════════════════════════════════════════════════════════


class TestEnsureEditable:
    @pytest.mark.parametrize("status", ["draft", "in_progress"])
    def test_editable(self, status):
        lifecycle.ensure_editable(status)

    def test_completed_locked(self):
        with pytest.raises(InvalidStateError):
            lifecycle.ensure_editable("completed")

    def test_unknown_status(self):
        with pytest.raises(InvalidStateError):
            lifecycle.ensure_editable("archived")


# ═════════════════════════════════════════════════════════════════════════════
# Automatic and explicit transitions
# ═════════════════════════════════════════════════════════════════════════════


class TestPromoteOnEdit:
    def test_draft_promoted_once(self):
        sub = _sub()
        assert lifecycle.promote_on_edit(sub) is True
        assert sub.status == "in_progress"
        assert lifecycle.promote_on_edit(sub) is False
        assert sub.status == "in_progress"

    def test_completed_never_reverts(self):
        sub = _sub("completed")
        with pytest.raises(InvalidStateError):
            lifecycle.promote_on_edit(sub)
        assert sub.status == "completed"


class TestCompleteSubmission:
    def test_in_progress_to_completed(self):
        sub = _sub("in_progress")
        assert lifecycle.complete_submission(sub) is True
        assert sub.status == "completed"
        assert sub.completed_at is not None

    def test_draft_walks_both_edges(self):
        sub = _sub("draft")
        assert lifecycle.complete_submission(sub) is True
        assert sub.status == "completed"

    def test_idempotent_keeps_completed_at(self):
        sub = _sub("in_progress")
        lifecycle.complete_submission(sub)
        first = sub.completed_at
        assert lifecycle.complete_submission(sub) is False
        assert sub.completed_at == first
