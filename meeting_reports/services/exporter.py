# meeting_reports/services/exporter.py
"""Serialize report projections into downloadable spreadsheet and PDF files."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Dict, List, Sequence, Tuple, Type

from openpyxl import Workbook
from openpyxl.styles import Font
from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from meeting_reports.core.result import Err, Ok, Result
from meeting_reports.schemas.report import (
    AttendanceRow,
    CancelledRow,
    ReportType,
    SummaryRow,
)
from meeting_reports.services.errors import ExportError

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"
PDF_FILENAME = "report.pdf"

ROW_MODELS: Dict[ReportType, Type] = {
    ReportType.SUMMARY: SummaryRow,
    ReportType.ATTENDANCE: AttendanceRow,
    ReportType.CANCELLED: CancelledRow,
}

REPORT_TITLES: Dict[ReportType, str] = {
    ReportType.SUMMARY: "Meeting Summary Report",
    ReportType.ATTENDANCE: "Attendance Report",
    ReportType.CANCELLED: "Cancelled Meeting Report",
}

# Column title -> row key, in display order.
DOCUMENT_COLUMNS: Dict[ReportType, List[Tuple[str, str]]] = {
    ReportType.SUMMARY: [
        ("Meeting", "meeting"),
        ("Date", "date"),
        ("Participants", "participants"),
        ("Duration", "duration"),
        ("Status", "status"),
    ],
    ReportType.ATTENDANCE: [
        ("Participant", "name"),
        ("Total Meetings", "totalMeetings"),
        ("Attended", "attended"),
        ("Absent", "absent"),
        ("Percentage", "percentage"),
    ],
    ReportType.CANCELLED: [
        ("Meeting", "meeting"),
        ("Scheduled Date", "scheduledDate"),
        ("Reason", "reason"),
        ("Cancelled By", "cancelledBy"),
    ],
}


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    media_type: str
    content: bytes


def _exportable(report_type: ReportType) -> ReportType:
    report_type = ReportType(report_type)
    if report_type not in ROW_MODELS:
        raise ExportError(f"Report type {report_type.value!r} has no rows to export")
    return report_type


def _header_for(report_type: ReportType, records: List[dict]) -> List[str]:
    if records:
        return list(records[0].keys())
    # Empty projection: fall back to the row model's aliases.
    model = ROW_MODELS[report_type]
    return [info.alias or name for name, info in model.model_fields.items()]


def export_spreadsheet(report_type: ReportType, rows: Sequence) -> Result[ExportArtifact]:
    """
    Write the rows to a single-sheet workbook named after the report type.

    Columns are the row keys in insertion order; one spreadsheet row per
    report row.
    """
    try:
        report_type = _exportable(report_type)
        records = [row.as_export_dict() for row in rows]
        header = _header_for(report_type, records)

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = report_type.value
        sheet.append(header)
        for cell in sheet[1]:
            cell.font = Font(bold=True)
        for record in records:
            sheet.append([record.get(key) for key in header])

        buffer = BytesIO()
        workbook.save(buffer)
    except ExportError as exc:
        return Err(exc)
    except Exception as exc:
        logger.exception("Spreadsheet export failed for %s", report_type)
        return Err(ExportError(f"Spreadsheet export failed: {exc}"))

    return Ok(
        ExportArtifact(
            filename=f"{report_type.value}_report.xlsx",
            media_type=XLSX_MEDIA_TYPE,
            content=buffer.getvalue(),
        )
    )


def export_document(report_type: ReportType, rows: Sequence) -> Result[ExportArtifact]:
    """
    Render a titled PDF table using the fixed column layout for the report type.
    """
    try:
        report_type = _exportable(report_type)
        columns = DOCUMENT_COLUMNS[report_type]
        records = [row.as_export_dict() for row in rows]

        data = [[title for title, _ in columns]]
        for record in records:
            data.append(["" if record.get(key) is None else str(record.get(key)) for _, key in columns])

        table = Table(data, repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#2563EB")),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ]
            )
        )

        styles = getSampleStyleSheet()
        buffer = BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=landscape(letter), title=REPORT_TITLES[report_type])
        doc.build([Paragraph(REPORT_TITLES[report_type], styles["Title"]), Spacer(1, 12), table])
    except ExportError as exc:
        return Err(exc)
    except Exception as exc:
        logger.exception("PDF export failed for %s", report_type)
        return Err(ExportError(f"PDF export failed: {exc}"))

    return Ok(ExportArtifact(filename=PDF_FILENAME, media_type=PDF_MEDIA_TYPE, content=buffer.getvalue()))
