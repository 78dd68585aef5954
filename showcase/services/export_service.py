"""
Excel export collaborator.

Receives plain data (submission documents or a cumulative report dict) and
renders an in-memory .xlsx workbook. Nothing here queries the database.
"""

import io
import logging
from datetime import date, datetime, timezone

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from showcase.core.reference import ARCHITECT_SLOT_ROLES
from showcase.core.snapshot import ARCHITECT_SLOT_FIELDS, SCALAR_FIELDS

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER_FILL = PatternFill(start_color="0066CC", end_color="0066CC", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

EXPORT_KINDS = {
    "all": "submissions",
    "cumulative": "cumulative-report",
}

SUBMISSION_META_COLUMNS = (
    ("id", "ID"),
    ("status", "Status"),
    ("firm_name", "Firm"),
    ("email", "Account Email"),
    ("created_at", "Created"),
    ("updated_at", "Last Updated"),
    ("completed_at", "Completed"),
)


def export_filename(kind: str, today: date | None = None) -> str:
    """``submissions-YYYY-MM-DD.xlsx`` or ``cumulative-report-YYYY-MM-DD.xlsx``."""
    if kind not in EXPORT_KINDS:
        raise ValueError(f"Unknown export kind '{kind}'")
    today = today or datetime.now(timezone.utc).date()
    return f"{EXPORT_KINDS[kind]}-{today.isoformat()}.xlsx"


def _label(name: str) -> str:
    return name.replace("_", " ").title()


def _apply_header_style(ws, row: int, col_count: int) -> None:
    """Apply header styling to an Excel row (1-indexed)."""
    for col in range(1, col_count + 1):
        cell = ws.cell(row=row, column=col)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.border = THIN_BORDER
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)


def _auto_width(ws) -> None:
    """Auto-size column widths based on content (capped at 60 chars)."""
    for col in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            if cell.value:
                max_len = max(max_len, min(len(str(cell.value)), 60))
        ws.column_dimensions[col_letter].width = max(max_len + 4, 12)


def _write_table(ws, headers, rows, start_row: int = 1) -> None:
    for col, header in enumerate(headers, 1):
        ws.cell(row=start_row, column=col, value=header)
    _apply_header_style(ws, start_row, len(headers))
    for r, values in enumerate(rows, start_row + 1):
        for col, value in enumerate(values, 1):
            ws.cell(row=r, column=col, value=value).border = THIN_BORDER
    ws.freeze_panes = ws.cell(row=start_row + 1, column=1)
    _auto_width(ws)


def _save(wb) -> io.BytesIO:
    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf


def _cell_value(value):
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return value


# ═════════════════════════════════════════════════════════════════════════════
# All submissions
# ═════════════════════════════════════════════════════════════════════════════


def export_submissions_xlsx(rows: list[dict]) -> io.BytesIO:
    """Render every submission document into a workbook.

    Sheets: Submissions (one row per submission), Architects (one row per
    non-empty slot), Manufacturers & Suppliers (one row per entry).
    """
    wb = Workbook()

    ws = wb.active
    ws.title = "Submissions"
    headers = [label for _, label in SUBMISSION_META_COLUMNS] + [_label(n) for n in SCALAR_FIELDS]
    _write_table(ws, headers, (
        [_cell_value(row.get(key)) for key, _ in SUBMISSION_META_COLUMNS]
        + [_cell_value(row.get(name)) for name in SCALAR_FIELDS]
        for row in rows
    ))

    ws_arch = wb.create_sheet("Architects")
    arch_rows = []
    for row in rows:
        for index, slot in enumerate(row.get("architects") or []):
            if not any(slot.get(f) for f in ARCHITECT_SLOT_FIELDS):
                continue
            role = ARCHITECT_SLOT_ROLES[index] if index < len(ARCHITECT_SLOT_ROLES) else ""
            arch_rows.append(
                [row.get("id"), row.get("project_name"), role]
                + [slot.get(f) for f in ARCHITECT_SLOT_FIELDS]
            )
    _write_table(
        ws_arch,
        ["Submission ID", "Project Name", "Role"] + [_label(f) for f in ARCHITECT_SLOT_FIELDS],
        arch_rows,
    )

    ws_sup = wb.create_sheet("Manufacturers & Suppliers")
    sup_rows = [
        [row.get("id"), row.get("project_name"), category, supplier]
        for row in rows
        for category, supplier in (row.get("manufacturers_suppliers") or {}).items()
        if supplier
    ]
    _write_table(ws_sup, ["Submission ID", "Project Name", "Category", "Supplier"], sup_rows)

    logger.info("Submissions export rendered", extra={"rows": len(rows)})
    return _save(wb)


# ═════════════════════════════════════════════════════════════════════════════
# Cumulative report
# ═════════════════════════════════════════════════════════════════════════════


def export_cumulative_report_xlsx(report: dict) -> io.BytesIO:
    """Render the cumulative report dict (``CumulativeReport.to_dict()``) into a workbook."""
    wb = Workbook()

    ws = wb.active
    ws.title = "Summary"
    ws.merge_cells("A1:D1")
    ws["A1"] = "Cumulative Report — Completed Submissions"
    ws["A1"].font = Font(size=16, bold=True)
    ws["A2"] = f"Generated: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')}"
    ws["A2"].font = Font(size=10, italic=True, color="666666")

    cost = report.get("costAnalysis") or {}
    summary_rows = [
        ["Completed Submissions", report.get("total", 0)],
        ["Projects with Cost Data", cost.get("projectsWithCost", 0)],
        ["Total Construction Cost", cost.get("totalSpent", 0)],
        ["Average Project Cost", cost.get("averageCost", 0)],
    ]
    _write_table(ws, ["Metric", "Value"], summary_rows, start_row=4)
    for r in (7, 8):
        ws.cell(row=r, column=2).number_format = "#,##0.00"

    sections = (
        ("By Category", "Category", report.get("byCategory") or []),
        ("By Type", "Type", report.get("byType") or []),
        ("Top Suppliers", "Supplier", report.get("topSuppliers") or []),
    )
    for title, header, entries in sections:
        sheet = wb.create_sheet(title)
        _write_table(sheet, [header, "Count"], ([e["name"], e["count"]] for e in entries))

    logger.info("Cumulative report export rendered", extra={"total": report.get("total", 0)})
    return _save(wb)
