"""
Reporting Façade — administrative read side.

    get_stats()                   counts over all submissions
    get_cumulative_report(top_n)  aggregation over completed submissions
    list_submissions()            admin listing, owner joined
    export_submissions()          (BytesIO, filename)
    export_cumulative_report()    (BytesIO, filename)
"""

import logging

from flask import current_app

from showcase.services import submission_store
from showcase.services.aggregation import EMPTY_REPORT, aggregate
from showcase.services.export_service import (
    export_cumulative_report_xlsx,
    export_filename,
    export_submissions_xlsx,
)

logger = logging.getLogger(__name__)

DEFAULT_TOP_SUPPLIERS = 10


def _top_n(top_n):
    if top_n is None:
        return current_app.config.get("REPORT_TOP_SUPPLIERS", DEFAULT_TOP_SUPPLIERS)
    return top_n


def get_stats() -> dict:
    """Submission counts over every submission regardless of status."""
    counts = submission_store.count_by_status()
    return {
        "total": sum(counts.values()),
        "completed": counts.get("completed", 0),
        "inProgress": counts.get("in_progress", 0),
        "draft": counts.get("draft", 0),
    }


def build_cumulative_report():
    """Return the CumulativeReport value over the completed set at call time."""
    snapshots = submission_store.list_completed_snapshots()
    return aggregate(snapshots) if snapshots else EMPTY_REPORT


def get_cumulative_report(top_n: int | None = None) -> dict:
    """Cumulative report as a dict; an explicit no-data result when nothing is completed."""
    report = build_cumulative_report()
    if not report.has_data:
        logger.info("Cumulative report requested with no completed submissions")
    return report.to_dict(top_n=_top_n(top_n))


def list_submissions() -> list[dict]:
    return [s.to_dict(include_owner=True) for s in submission_store.list_all()]


def export_submissions():
    rows = list_submissions()
    return export_submissions_xlsx(rows), export_filename("all")


def export_cumulative_report(top_n: int | None = None):
    report = get_cumulative_report(top_n)
    return export_cumulative_report_xlsx(report), export_filename("cumulative")
