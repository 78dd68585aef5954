"""
Auth Blueprint — bearer credential endpoints.

  POST /api/v1/auth/register    — email, password, firm_name, contact_name → token + user
  POST /api/v1/auth/login       — email + password → token + user
  GET  /api/v1/auth/me          — current user profile
"""

from flask import Blueprint, current_app, jsonify, request

from showcase.core.exceptions import NotFoundError
from showcase.middleware.auth_required import current_user_id, login_required
from showcase.services.jwt_service import generate_access_token
from showcase.services.user_service import authenticate_user, get_user_by_id, register_user
from showcase.utils.errors import E, api_error, register_error_handlers

auth_bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")
register_error_handlers(auth_bp)


def _token_response(user, status=200):
    token = generate_access_token(user.id, user.is_admin)
    return jsonify({
        "token": token,
        "token_type": "Bearer",
        "expires_in": current_app.config.get("JWT_ACCESS_EXPIRES"),
        "user": user.to_dict(),
    }), status


# ═══════════════════════════════════════════════════════════════
# POST /api/v1/auth/register
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/register", methods=["POST"])
def register():
    """
    Create an account and sign in.

    Body: { "email": "...", "password": "...", "firm_name": "...", "contact_name": "..." }
    """
    data = request.get_json(silent=True) or {}
    if not data.get("email") or not data.get("password"):
        return api_error(E.VALIDATION_REQUIRED, "Email and password are required")

    user = register_user(
        data["email"],
        data["password"],
        firm_name=data.get("firm_name", ""),
        contact_name=data.get("contact_name", ""),
    )
    return _token_response(user, 201)


# ═══════════════════════════════════════════════════════════════
# POST /api/v1/auth/login
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Authenticate with email + password.

    Body: { "email": "...", "password": "..." }
    """
    data = request.get_json(silent=True) or {}
    if not data.get("email") or not data.get("password"):
        return api_error(E.VALIDATION_REQUIRED, "Email and password are required")

    user = authenticate_user(data["email"], data["password"])
    return _token_response(user)


# ═══════════════════════════════════════════════════════════════
# GET /api/v1/auth/me
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    user = get_user_by_id(current_user_id())
    if user is None:
        raise NotFoundError(resource="User")
    return jsonify(user.to_dict()), 200
