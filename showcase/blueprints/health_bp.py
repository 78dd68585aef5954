"""
Health probes.

    GET /api/v1/health/ready  — the process is up
    GET /api/v1/health/live   — the submission store answers a query
"""

import logging
import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from showcase.models import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/v1/health")


@health_bp.route("/ready", methods=["GET"])
def ready():
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    started = time.perf_counter()
    try:
        db.session.execute(db.text("SELECT 1"))
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Liveness probe: database unreachable: %s", exc)
        database = {"status": "error", "detail": str(exc)}
    else:
        database = {"status": "ok", "latency_ms": round((time.perf_counter() - started) * 1000, 1)}

    healthy = database["status"] == "ok"
    return jsonify({
        "status": "healthy" if healthy else "degraded",
        "checks": {
            "database": database,
            "app": {"name": "Architectural Showcase Portal", "testing": current_app.testing},
        },
    }), 200 if healthy else 503
