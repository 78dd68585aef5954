"""
Request timing middleware.

Every response carries X-Request-ID (echoed from the request when the client
sent one) and X-Request-Duration-Ms. API requests are logged at DEBUG, slow
ones at WARNING and 5xx responses at ERROR; probe endpoints are not logged.
"""

import logging
import time
import uuid

from flask import Flask, g, request

logger = logging.getLogger(__name__)

PROBE_PATHS = frozenset({"/api/v1/health/live", "/api/v1/health/ready"})

SLOW_THRESHOLD_MS = 1000


def _log_level(status: int, duration_ms: float) -> int:
    if status >= 500:
        return logging.ERROR
    if duration_ms > SLOW_THRESHOLD_MS:
        return logging.WARNING
    return logging.DEBUG


def init_request_timing(app: Flask):
    """Register the before/after hooks that time each request."""

    @app.before_request
    def _stamp_request():
        g.request_started = time.perf_counter()
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]

    @app.after_request
    def _finish_request(response):
        started = getattr(g, "request_started", None)
        if started is None:
            return response

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = g.request_id
        response.headers["X-Request-Duration-Ms"] = f"{elapsed_ms:.1f}"

        if request.path in PROBE_PATHS or not request.path.startswith("/api/"):
            return response

        level = _log_level(response.status_code, elapsed_ms)
        label = {logging.ERROR: "Server error", logging.WARNING: "Slow request"}.get(level, "Request")
        logger.log(
            level, "%s: %s %s -> %d (%.0fms)",
            label, request.method, request.path, response.status_code, elapsed_ms,
            extra={
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "duration_ms": elapsed_ms,
                "remote_addr": request.remote_addr,
                "request_id": g.request_id,
                "user_id": getattr(g, "jwt_user_id", None),
            },
        )
        return response
