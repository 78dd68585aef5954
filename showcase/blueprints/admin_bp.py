"""
Admin Blueprint — reporting read side.

  GET /api/v1/admin/submissions                 — [submission, ...], owner joined
  GET /api/v1/admin/stats                       — {total, completed, inProgress, draft}
  GET /api/v1/admin/reports/summary             — cumulative report (?top=N)
  GET /api/v1/admin/export-excel                — .xlsx of all submissions
  GET /api/v1/admin/export-cumulative-report    — .xlsx of the cumulative report
"""

import logging

from flask import Blueprint, Response, jsonify, request

from showcase.middleware.auth_required import admin_required
from showcase.services import reporting
from showcase.services.export_service import XLSX_MIMETYPE
from showcase.utils.errors import E, api_error, register_error_handlers

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__, url_prefix="/api/v1/admin")
register_error_handlers(admin_bp)


def _xlsx_response(buf, filename):
    return Response(
        buf.getvalue(),
        mimetype=XLSX_MIMETYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@admin_bp.route("/submissions", methods=["GET"])
@admin_required
def list_submissions():
    return jsonify(reporting.list_submissions()), 200


@admin_bp.route("/stats", methods=["GET"])
@admin_required
def stats():
    return jsonify(reporting.get_stats()), 200


@admin_bp.route("/reports/summary", methods=["GET"])
@admin_required
def report_summary():
    top_n = request.args.get("top", type=int)
    if top_n is not None and top_n < 0:
        return api_error(E.VALIDATION_INVALID, "'top' must be zero or greater", details={"top": "invalid"})
    return jsonify(reporting.get_cumulative_report(top_n)), 200


@admin_bp.route("/export-excel", methods=["GET"])
@admin_required
def export_excel():
    buf, filename = reporting.export_submissions()
    logger.info("Submissions export downloaded: %s", filename)
    return _xlsx_response(buf, filename)


@admin_bp.route("/export-cumulative-report", methods=["GET"])
@admin_required
def export_cumulative_report():
    buf, filename = reporting.export_cumulative_report()
    logger.info("Cumulative report export downloaded: %s", filename)
    return _xlsx_response(buf, filename)
