"""
Excel export tests: workbook structure of both exports, read back with
openpyxl.
"""

from datetime import date

import pytest
from openpyxl import load_workbook

from showcase.core.snapshot import SubmissionSnapshot
from showcase.services.aggregation import aggregate
from showcase.services.export_service import (
    export_cumulative_report_xlsx,
    export_filename,
    export_submissions_xlsx,
)


def _row(**overrides):
    doc = SubmissionSnapshot().to_dict()
    doc.update({
        "id": 1,
        "status": "completed",
        "firm_name": "Stone & Glass",
        "email": "architect@example.org",
        "created_at": "2025-01-01T00:00:00+00:00",
        "updated_at": "2025-01-02T00:00:00+00:00",
        "completed_at": "2025-01-02T00:00:00+00:00",
        "project_name": "Natatorium",
        "authorization": True,
    })
    doc.update(overrides)
    return doc


class TestExportFilename:
    def test_kinds(self):
        day = date(2025, 3, 9)
        assert export_filename("all", day) == "submissions-2025-03-09.xlsx"
        assert export_filename("cumulative", day) == "cumulative-report-2025-03-09.xlsx"

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            export_filename("pdf")


class TestSubmissionsExport:
    def test_sheets_and_rows(self):
        architects = [
            {"firm_name": "AoR Inc", "email": "", "phone": "", "website": "", "address": ""},
            {"firm_name": "", "email": "", "phone": "", "website": "", "address": ""},
            {"firm_name": "Design Co", "email": "d@example.org", "phone": "", "website": "", "address": ""},
        ]
        buf = export_submissions_xlsx([
            _row(architects=architects, manufacturers_suppliers={"Pools - Heaters": "Acme", "Lockers": ""}),
            _row(id=2, project_name="Field House", authorization=False),
        ])
        wb = load_workbook(buf)
        assert wb.sheetnames == ["Submissions", "Architects", "Manufacturers & Suppliers"]

        ws = wb["Submissions"]
        headers = [c.value for c in ws[1]]
        assert headers[:3] == ["ID", "Status", "Firm"]
        assert "Project Name" in headers
        assert ws.max_row == 3
        auth_col = headers.index("Authorization") + 1
        assert ws.cell(row=2, column=auth_col).value == "Yes"
        assert ws.cell(row=3, column=auth_col).value == "No"
        assert ws.cell(row=1, column=1).fill.start_color.rgb.endswith("0066CC")

        arch = wb["Architects"]
        assert arch.max_row == 3
        assert arch.cell(row=3, column=4).value == "Design Co"

        sup = wb["Manufacturers & Suppliers"]
        assert sup.max_row == 2
        assert [c.value for c in sup[2]] == [1, "Natatorium", "Pools - Heaters", "Acme"]

    def test_empty_export_has_headers_only(self):
        wb = load_workbook(export_submissions_xlsx([]))
        assert wb["Submissions"].max_row == 1


class TestCumulativeReportExport:
    def test_summary_and_sections(self):
        snaps = [
            SubmissionSnapshot.from_dict({
                "total_construction_cost": "1000000",
                "project_category": "Aquatic",
                "project_type": "Renovation",
                "manufacturers_suppliers": {"Pools - Heaters": "Acme"},
            }),
            SubmissionSnapshot.from_dict({"total_construction_cost": "2000000"}),
        ]
        wb = load_workbook(export_cumulative_report_xlsx(aggregate(snaps).to_dict()))
        assert wb.sheetnames == ["Summary", "By Category", "By Type", "Top Suppliers"]

        summary = wb["Summary"]
        assert summary["A4"].value == "Metric"
        assert summary["B5"].value == 2
        assert summary["B6"].value == 2
        assert summary["B7"].value == 3000000
        assert summary["B8"].value == 1500000

        cats = [[c.value for c in row] for row in wb["By Category"].iter_rows(min_row=2)]
        assert cats == [["Aquatic", 1], ["Unspecified", 1]]
        assert [c.value for c in wb["Top Suppliers"][2]] == ["Acme", 1]
