"""
Admin API tests — reporting read side over HTTP.

Non-admin bearers get 403, anonymous callers 401. Report shapes follow the
camelCase JSON contract consumed by the admin dashboard.
"""

from datetime import datetime, timezone
from io import BytesIO

import pytest
from openpyxl import load_workbook

BASE = "/api/v1/admin"


def _complete_submission(client, headers, **fields):
    doc = client.get("/api/v1/submissions/current", headers=headers).get_json()
    client.put(f"/api/v1/submissions/{doc['id']}", headers=headers, json=fields)
    client.post(f"/api/v1/submissions/{doc['id']}/complete", headers=headers)
    return doc["id"]


@pytest.mark.parametrize("path", [
    "/submissions", "/stats", "/reports/summary", "/export-excel", "/export-cumulative-report",
])
class TestAccess:
    def test_anonymous_is_401(self, client, path):
        assert client.get(f"{BASE}{path}").status_code == 401

    def test_non_admin_is_403(self, client, auth_headers, path):
        res = client.get(f"{BASE}{path}", headers=auth_headers)
        assert res.status_code == 403
        assert res.get_json()["code"] == "ERR_FORBIDDEN"


class TestReadEndpoints:
    def test_stats(self, client, admin_headers, auth_headers, other_headers):
        _complete_submission(client, auth_headers, project_name="Done")
        client.get("/api/v1/submissions/current", headers=other_headers)

        res = client.get(f"{BASE}/stats", headers=admin_headers)
        assert res.status_code == 200
        assert res.get_json() == {"total": 2, "completed": 1, "inProgress": 0, "draft": 1}

    def test_submissions_listing(self, client, admin_headers, auth_headers):
        _complete_submission(client, auth_headers, project_name="Done")
        body = client.get(f"{BASE}/submissions", headers=admin_headers).get_json()
        assert isinstance(body, list)
        assert len(body) == 1
        item = body[0]
        assert item["firm_name"] == "Stone & Glass Architects"
        assert item["email"] == "architect@example.org"
        assert item["project_name"] == "Done"

    def test_report_summary(self, client, admin_headers, auth_headers, other_headers):
        _complete_submission(
            client, auth_headers,
            total_construction_cost="1000000", project_category="Aquatic",
            manufacturers_suppliers={"Pools - Heaters": "Acme"},
        )
        _complete_submission(
            client, other_headers,
            total_construction_cost="2000000", project_category="Aquatic",
            manufacturers_suppliers={"Pools - Heaters": "Acme", "Lockers": "Zeta"},
        )

        body = client.get(f"{BASE}/reports/summary", headers=admin_headers).get_json()
        assert body["hasData"] is True
        assert body["total"] == 2
        assert body["costAnalysis"] == {"totalSpent": 3000000, "averageCost": 1500000, "projectsWithCost": 2}
        assert body["byCategory"] == [{"name": "Aquatic", "count": 2}]
        assert body["topSuppliers"] == [{"name": "Acme", "count": 2}, {"name": "Zeta", "count": 1}]

        top1 = client.get(f"{BASE}/reports/summary?top=1", headers=admin_headers).get_json()
        assert top1["topSuppliers"] == [{"name": "Acme", "count": 2}]

    def test_report_summary_excludes_exponent_costs(self, client, admin_headers, auth_headers, other_headers):
        _complete_submission(client, auth_headers, total_construction_cost="1e5000")
        _complete_submission(client, other_headers, total_construction_cost="9e999999999")

        res = client.get(f"{BASE}/reports/summary", headers=admin_headers)
        assert res.status_code == 200
        body = res.get_json()
        assert body["total"] == 2
        assert body["costAnalysis"] == {"totalSpent": 0, "averageCost": 0, "projectsWithCost": 0}
        assert client.get(f"{BASE}/export-cumulative-report", headers=admin_headers).status_code == 200

    def test_report_summary_no_data(self, client, admin_headers):
        body = client.get(f"{BASE}/reports/summary", headers=admin_headers).get_json()
        assert body["hasData"] is False
        assert body["total"] == 0

    def test_report_summary_negative_top_is_422(self, client, admin_headers):
        res = client.get(f"{BASE}/reports/summary?top=-1", headers=admin_headers)
        assert res.status_code == 422


class TestExports:
    def test_export_excel(self, client, admin_headers, auth_headers):
        _complete_submission(client, auth_headers, project_name="Done")
        res = client.get(f"{BASE}/export-excel", headers=admin_headers)
        assert res.status_code == 200
        assert res.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        today = datetime.now(timezone.utc).date().isoformat()
        assert res.headers["Content-Disposition"] == f"attachment; filename=submissions-{today}.xlsx"
        wb = load_workbook(BytesIO(res.data))
        assert wb["Submissions"].max_row == 2

    def test_export_cumulative_report(self, client, admin_headers):
        res = client.get(f"{BASE}/export-cumulative-report", headers=admin_headers)
        assert res.status_code == 200
        assert "cumulative-report-" in res.headers["Content-Disposition"]
        wb = load_workbook(BytesIO(res.data))
        assert "Summary" in wb.sheetnames
