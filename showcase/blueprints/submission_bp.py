"""
Submission Blueprint — the owning user's persistence boundary.

  GET   /api/v1/submissions/current          — load (lazily create) + advisory warnings
  PUT   /api/v1/submissions/<id>             — save a full snapshot
  PATCH /api/v1/submissions/<id>             — apply one edit server-side
  POST  /api/v1/submissions/<id>/complete    — complete action (idempotent)

Every route is scoped to the bearer's own submission; another user's id is
answered exactly like an unknown id (404).
"""

import logging

from flask import Blueprint, jsonify, request

from showcase.core.exceptions import ValidationError
from showcase.middleware.auth_required import current_user_id, login_required
from showcase.services import lifecycle, submission_store
from showcase.services.draft_mutator import check_completeness, edit_from_dict, snapshot_from_payload
from showcase.utils.errors import register_error_handlers

logger = logging.getLogger(__name__)

submission_bp = Blueprint("submissions", __name__, url_prefix="/api/v1/submissions")
register_error_handlers(submission_bp)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _response(submission, status=200, **extra):
    body = submission.to_dict()
    body["advisory"] = check_completeness(submission.to_snapshot())
    body.update(extra)
    return jsonify(body), status


@submission_bp.route("/current", methods=["GET"])
@login_required
def current_submission():
    submission = submission_store.load_for_owner(current_user_id())
    return _response(submission)


@submission_bp.route("/<int:submission_id>", methods=["PUT"])
@login_required
def save_submission(submission_id):
    """Merge the JSON document onto the stored state and persist it.

    Read-only keys (id, status, timestamps) are ignored; ``updated_at`` in
    the response is the server's.
    """
    user_id = current_user_id()
    data = _json_body()
    submission = submission_store.get_owned(submission_id, user_id)
    lifecycle.ensure_editable(submission.status)
    snapshot = snapshot_from_payload(data, base=submission.to_snapshot())
    submission = submission_store.save_snapshot(submission_id, user_id, snapshot)
    return _response(submission)


@submission_bp.route("/<int:submission_id>", methods=["PATCH"])
@login_required
def patch_submission(submission_id):
    """Apply one edit.

    Body: {"type": "field", "field": "project_name", "value": "..."}
    """
    edit = edit_from_dict(_json_body())
    submission = submission_store.apply_edit_to_submission(submission_id, current_user_id(), edit)
    return _response(submission)


@submission_bp.route("/<int:submission_id>/complete", methods=["POST"])
@login_required
def complete_submission(submission_id):
    submission, changed = submission_store.mark_completed(submission_id, current_user_id())
    return _response(submission, changed=changed)
