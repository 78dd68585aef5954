"""
Route guards for bearer-authenticated endpoints.

Usage:
    @bp.route("/submissions/current", methods=["GET"])
    @login_required
    def current_submission():
        ...

    @bp.route("/admin/stats", methods=["GET"])
    @admin_required
    def stats():
        ...

Both raise ``AuthError``; blueprints map it to 401 / 403 through
``register_error_handlers``.
"""

import functools
import logging

from flask import g

from showcase.core.exceptions import AuthError

logger = logging.getLogger(__name__)


def current_user_id() -> int:
    """Return the authenticated user id or raise AuthError (401)."""
    user_id = getattr(g, "jwt_user_id", None)
    if user_id is None:
        raise AuthError(getattr(g, "jwt_error", None) or "Authentication required")
    return user_id


def login_required(f):
    """Require a valid bearer credential."""
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        current_user_id()
        return f(*args, **kwargs)
    return decorated


def admin_required(f):
    """Require a valid bearer credential carrying the admin flag."""
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        user_id = current_user_id()
        if not getattr(g, "jwt_is_admin", False):
            logger.warning("User %d denied admin access on %s", user_id, f.__name__)
            raise AuthError("Admin access required", forbidden=True)
        return f(*args, **kwargs)
    return decorated
