# meeting_reports/services/report_orchestrator.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date as date_type
from typing import Callable, List, Optional

from meeting_reports.core.result import Err, Ok, Result
from meeting_reports.schemas.report import (
    AttendanceRow,
    CancelledRow,
    DateWindow,
    MeetingAttendanceRow,
    ReportStateRead,
    ReportType,
    SummaryRow,
)
from meeting_reports.services import date_window
from meeting_reports.services.aggregation import AggregationEngine
from meeting_reports.services.errors import (
    FetchError,
    ReportInProgressError,
    ReportValidationError,
)
from meeting_reports.services.exporter import ExportArtifact, export_document, export_spreadsheet

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("excel", "pdf")


@dataclass
class ReportState:
    """
    Everything the Reports view shows, owned by one ReportOrchestrator.

    Row collections are only replaced after their aggregation succeeds, so a
    failed run leaves the previous rows in place.
    """

    report_type: ReportType
    window: DateWindow
    loading: bool = False
    last_error: Optional[str] = None
    summary_rows: List[SummaryRow] = field(default_factory=list)
    attendance_rows: List[AttendanceRow] = field(default_factory=list)
    cancelled_rows: List[CancelledRow] = field(default_factory=list)
    selected_meeting_id: Optional[str] = None
    selected_meeting_rows: List[MeetingAttendanceRow] = field(default_factory=list)
    last_generated: Optional[ReportType] = None
    # Window the stored rows were built for; `window` may move on mid-run.
    generated_window: Optional[DateWindow] = None
    partial_failures: List[str] = field(default_factory=list)


class ReportOrchestrator:
    """
    Single coordination point between the selected report type / window and
    the AggregationEngine.

    Reentrancy
    ----------
    A generate or meeting-detail call issued while another is loading is
    ignored: it returns Err(ReportInProgressError) and leaves the state
    untouched. The meeting selection is frozen for the same period.
    """

    def __init__(
        self,
        engine: AggregationEngine,
        today: Callable[[], date_type] = date_type.today,
        report_type: ReportType = ReportType.SUMMARY,
    ) -> None:
        self.engine = engine
        self._today = today
        self.state = ReportState(
            report_type=report_type,
            window=date_window.window_for_offset(0, today=today()),
        )

    # ------------------------------------------------------------------
    # Selection and window navigation
    # ------------------------------------------------------------------

    def set_report_type(self, report_type: ReportType) -> None:
        self.state.report_type = ReportType(report_type)

    def navigate_week(self, direction: str) -> DateWindow:
        offset = date_window.navigate(direction, self.state.window.week_offset)
        return self._set_window(date_window.window_for_offset(offset, today=self._today()))

    def go_to_current_week(self) -> DateWindow:
        return self._set_window(
            date_window.window_for_offset(date_window.reset(), today=self._today())
        )

    def change_date_range(
        self,
        from_date: Optional[date_type] = None,
        to_date: Optional[date_type] = None,
    ) -> DateWindow:
        return self._set_window(
            date_window.window_for_manual_edit(from_date, to_date, today=self._today())
        )

    def _set_window(self, window: DateWindow) -> DateWindow:
        self.state.window = window
        return window

    def select_meeting(self, meeting_id: Optional[str]) -> bool:
        """
        Change the selected summary row. Returns False, without touching the
        selection, while a fetch is in flight.
        """
        if self.state.loading:
            return False
        if meeting_id != self.state.selected_meeting_id:
            self.state.selected_meeting_rows = []
        self.state.selected_meeting_id = meeting_id
        return True

    # ------------------------------------------------------------------
    # Report generation
    # ------------------------------------------------------------------

    def _projection_type(self) -> ReportType:
        if self.state.report_type == ReportType.EXPORT:
            return self.state.last_generated or ReportType.SUMMARY
        return self.state.report_type

    async def generate_report(self) -> Result:
        """
        Validate the window, run the matching aggregation and store its rows.

        Returns Ok(rows) on success. Validation, fetch and unexpected
        failures come back as Err and are also recorded in `last_error`; the
        existing row collections are left untouched in that case.
        """
        if self.state.loading:
            return Err(ReportInProgressError("A report is already being generated."))

        try:
            window = date_window.validate_window(self.state.window)
        except ReportValidationError as exc:
            self.state.last_error = str(exc)
            return Err(exc)

        report_type = self._projection_type()
        self.state.loading = True
        logger.info(
            "Generating %s report for %s..%s",
            report_type.value,
            window.from_date,
            window.to_date,
        )
        try:
            if report_type == ReportType.SUMMARY:
                rows = await self.engine.build_summary(window)
                self.state.summary_rows = rows
            elif report_type == ReportType.ATTENDANCE:
                rows = await self.engine.build_attendance(window)
                self.state.attendance_rows = rows
                self.state.partial_failures = [
                    f.meeting_id for f in self.engine.last_partial_failures
                ]
            else:
                rows = await self.engine.build_cancelled(window)
                self.state.cancelled_rows = rows
        except FetchError as exc:
            logger.error("Report generation failed: %s", exc)
            self.state.last_error = str(exc)
            return Err(exc)
        except Exception as exc:
            logger.exception("Unexpected error while generating %s report", report_type.value)
            self.state.last_error = f"Failed to generate report: {exc}"
            return Err(exc)
        finally:
            self.state.loading = False

        self.state.last_generated = report_type
        self.state.generated_window = window
        self.state.last_error = None
        return Ok(rows)

    async def load_selected_meeting_attendance(self, meeting_id: Optional[str] = None) -> Result:
        """
        Fetch participation for the selected summary row ("Generate Meeting Report").

        Passing `meeting_id` selects that meeting first. The busy check runs
        before the selection is touched.
        """
        if self.state.loading:
            return Err(ReportInProgressError("A report is already being generated."))
        if meeting_id is not None:
            self.select_meeting(meeting_id)

        meeting_id = self.state.selected_meeting_id
        if not meeting_id:
            exc = ReportValidationError("Select a meeting first.")
            self.state.last_error = str(exc)
            return Err(exc)

        self.state.loading = True
        try:
            rows = await self.engine.build_meeting_attendance(meeting_id)
        except FetchError as exc:
            logger.error("Meeting attendance failed for %s: %s", meeting_id, exc)
            self.state.last_error = str(exc)
            return Err(exc)
        except Exception as exc:
            logger.exception("Unexpected error while loading attendance for %s", meeting_id)
            self.state.last_error = f"Failed to load meeting attendance: {exc}"
            return Err(exc)
        finally:
            self.state.loading = False

        if meeting_id == self.state.selected_meeting_id:
            self.state.selected_meeting_rows = rows
        self.state.last_error = None
        return Ok(rows)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def active_rows(self) -> List:
        report_type = self._projection_type()
        if report_type == ReportType.SUMMARY:
            return self.state.summary_rows
        if report_type == ReportType.ATTENDANCE:
            return self.state.attendance_rows
        return self.state.cancelled_rows

    def export(self, kind: str) -> Result[ExportArtifact]:
        """
        Serialize the active projection. Export failures never touch
        `last_error` or the row collections.
        """
        report_type = self._projection_type()
        if kind == "excel":
            return export_spreadsheet(report_type, self.active_rows())
        if kind == "pdf":
            return export_document(report_type, self.active_rows())
        raise ValueError(f"Unknown export format: {kind!r}; expected one of {EXPORT_FORMATS}")

    def snapshot(self) -> ReportStateRead:
        s = self.state
        return ReportStateRead(
            report_type=s.report_type,
            window=s.window,
            generated_window=s.generated_window,
            window_label=date_window.describe_offset(s.window.week_offset),
            loading=s.loading,
            last_error=s.last_error,
            summary=s.summary_rows,
            attendance=s.attendance_rows,
            cancelled=s.cancelled_rows,
            selected_meeting_id=s.selected_meeting_id,
            selected_meeting_attendance=s.selected_meeting_rows,
            partial_failures=s.partial_failures,
        )
