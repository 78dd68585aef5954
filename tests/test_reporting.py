"""
Reporting Façade tests: stats over all statuses, the cumulative report over
the completed set only, admin listing and export filenames.
"""

from datetime import datetime, timezone

from openpyxl import load_workbook

from showcase.core.snapshot import SubmissionSnapshot
from showcase.services import reporting
from showcase.services import submission_store as store
from showcase.services.draft_mutator import FieldEdit, MapEdit, apply_edit
from showcase.services.user_service import register_user


def _make_submission(email, status, cost=None, category=None, supplier=None):
    owner = register_user(email, "s3cret-pass", firm_name=email.split("@")[0].title())
    sub = store.load_for_owner(owner.id)
    if status == "draft":
        return sub

    snap = apply_edit(SubmissionSnapshot(), FieldEdit("project_name", f"Project {email}"))
    if cost is not None:
        snap = apply_edit(snap, FieldEdit("total_construction_cost", cost))
    if category is not None:
        snap = apply_edit(snap, FieldEdit("project_category", category))
    if supplier is not None:
        snap = apply_edit(snap, MapEdit("manufacturers_suppliers", "Pools - Heaters", supplier))
    store.save_snapshot(sub.id, owner.id, snap)
    if status == "completed":
        store.mark_completed(sub.id, owner.id)
    return sub


class TestStats:
    def test_empty(self):
        assert reporting.get_stats() == {"total": 0, "completed": 0, "inProgress": 0, "draft": 0}

    def test_counts_every_status(self):
        _make_submission("a@example.org", "draft")
        _make_submission("b@example.org", "in_progress")
        _make_submission("c@example.org", "in_progress")
        _make_submission("d@example.org", "completed")
        assert reporting.get_stats() == {"total": 4, "completed": 1, "inProgress": 2, "draft": 1}


class TestCumulativeReport:
    def test_no_completed_submissions(self):
        _make_submission("a@example.org", "in_progress", cost="500")
        report = reporting.get_cumulative_report()
        assert report["hasData"] is False
        assert report["total"] == 0

    def test_only_completed_submissions_counted(self):
        _make_submission("a@example.org", "completed", cost="$1,000,000", category="Aquatic", supplier="Acme")
        _make_submission("b@example.org", "completed", cost="2000000", category="Aquatic", supplier="Acme")
        _make_submission("c@example.org", "in_progress", cost="9999999", supplier="Zeta")

        report = reporting.get_cumulative_report()
        assert report["hasData"] is True
        assert report["total"] == 2
        assert report["costAnalysis"] == {
            "totalSpent": 3000000, "averageCost": 1500000, "projectsWithCost": 2,
        }
        assert report["byCategory"] == [{"name": "Aquatic", "count": 2}]
        assert report["topSuppliers"] == [{"name": "Acme", "count": 2}]

    def test_top_n_defaults_from_config(self, app, monkeypatch):
        monkeypatch.setitem(app.config, "REPORT_TOP_SUPPLIERS", 1)
        _make_submission("a@example.org", "completed", supplier="Acme")
        _make_submission("b@example.org", "completed", supplier="Zeta")
        assert len(reporting.get_cumulative_report()["topSuppliers"]) == 1
        assert len(reporting.get_cumulative_report(5)["topSuppliers"]) == 2


class TestListAndExport:
    def test_list_includes_owner_fields(self):
        _make_submission("studio@example.org", "in_progress")
        items = reporting.list_submissions()
        assert len(items) == 1
        assert items[0]["email"] == "studio@example.org"
        assert items[0]["firm_name"] == "Studio"
        assert items[0]["status"] == "in_progress"

    def test_export_submissions_filename_and_content(self):
        _make_submission("studio@example.org", "completed", supplier="Acme")
        buf, filename = reporting.export_submissions()
        today = datetime.now(timezone.utc).date().isoformat()
        assert filename == f"submissions-{today}.xlsx"
        wb = load_workbook(buf)
        assert wb["Submissions"].max_row == 2

    def test_export_cumulative_report_filename(self):
        buf, filename = reporting.export_cumulative_report()
        assert filename.startswith("cumulative-report-")
        wb = load_workbook(buf)
        assert wb["Summary"]["B5"].value == 0
