"""
JWT Auth Middleware — parses the bearer credential, sets g.jwt_*.

    Authorization: Bearer <token>  →  g.jwt_user_id, g.jwt_is_admin

The middleware never rejects a request itself; route decorators in
``showcase.middleware.auth_required`` decide. A bad token is remembered in
``g.jwt_error`` so the decorator can say why.
"""

import jwt as pyjwt
from flask import g, request

from showcase.services.jwt_service import decode_access_token


# Paths that skip JWT parsing entirely
JWT_SKIP_PREFIXES = (
    "/api/v1/auth/login",
    "/api/v1/auth/register",
    "/api/v1/health",
    "/api/v1/reference",
)


def init_jwt_middleware(app):
    """Register JWT middleware as a before_request hook."""

    @app.before_request
    def _jwt_auth():
        g.jwt_user_id = None
        g.jwt_is_admin = False
        g.jwt_error = None

        path = request.path
        if not path.startswith("/api/v1/"):
            return
        for prefix in JWT_SKIP_PREFIXES:
            if path.startswith(prefix):
                return

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return

        token = auth_header[7:]  # Strip "Bearer "

        try:
            payload = decode_access_token(token)
        except pyjwt.ExpiredSignatureError:
            g.jwt_error = "Token expired"
            return
        except pyjwt.InvalidTokenError:
            g.jwt_error = "Invalid token"
            return

        g.jwt_user_id = payload["sub"]
        g.jwt_is_admin = bool(payload.get("is_admin", False))
