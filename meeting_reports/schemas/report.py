# meeting_reports/schemas/report.py
from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ReportType(str, Enum):
    """
    Report views offered by the Reports page.

    EXPORT is a view, not a projection: it exports whichever projection was
    generated last.
    """

    SUMMARY = "summary"
    ATTENDANCE = "attendance"
    CANCELLED = "cancelled"
    EXPORT = "export"


class DateWindow(BaseModel):
    """
    Active reporting period. Both bounds are inclusive.

    Instances are replaced, never mutated; bounds may be None only when the
    user cleared a date field, which blocks report generation.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_date: date | None = Field(
        ...,
        alias="from",
        description="Start date (inclusive) of the reporting window.",
        examples=["2025-10-06"],
    )
    to_date: date | None = Field(
        ...,
        alias="to",
        description="End date (inclusive) of the reporting window.",
        examples=["2025-10-12"],
    )
    week_offset: int = Field(
        0,
        alias="weekOffset",
        description="Weeks relative to the current week (0 = this week).",
    )


class _Row(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def as_export_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class SummaryRow(_Row):
    """
    One row of the Meeting Summary report.
    """

    meeting_id: str = Field(..., alias="_id", description="Portal id of the meeting.")
    meeting: str = Field(..., description="Meeting title.")
    date: str = Field(..., description="Meeting day formatted as M/D/YYYY.")
    participants: int = Field(
        ...,
        description="Participation count as reported when the summary was fetched.",
    )
    duration: str = Field(..., description="Planned duration.")
    status: str = Field(..., description="Scheduled, Completed or Cancelled.")


class AttendanceRow(_Row):
    """
    One row of the Attendance report: a staff member's record over the window.
    """

    name: str = Field(..., description="Staff member name.")
    total_meetings: int = Field(
        ...,
        alias="totalMeetings",
        description="Meetings in the window the staff member was a participant of.",
    )
    attended: int = Field(..., description="Meetings where the staff member was present.")
    absent: int = Field(..., description="totalMeetings - attended.")
    percentage: str = Field(
        ...,
        description="Attendance rate rounded to a whole percent, e.g. '60%'.",
        examples=["60%"],
    )


class CancelledRow(_Row):
    """
    One row of the Cancelled Meeting report.
    """

    meeting: str = Field(..., description="Meeting title.")
    scheduled_date: str = Field(..., alias="scheduledDate", description="M/D/YYYY.")
    reason: str = Field(...)
    cancelled_by: str = Field(..., alias="cancelledBy")


class MeetingAttendanceRow(_Row):
    """
    Attendance detail for a single selected meeting.
    """

    staff_id: str = Field(..., alias="staffId")
    name: str = Field(..., alias="staffName")
    email: str = Field("N/A")
    role: str = Field("N/A")
    is_present: bool = Field(..., alias="isPresent")


class ReportTypeUpdate(BaseModel):
    report_type: ReportType = Field(..., description="Report view to activate.")


class DateRangeUpdate(BaseModel):
    """
    Manual edit of one bound of the window. The other bound is derived.
    """

    model_config = ConfigDict(populate_by_name=True)

    from_date: date | None = Field(None, alias="from")
    to_date: date | None = Field(None, alias="to")


class ReportStateRead(BaseModel):
    """
    Public representation of the orchestrator state.
    """

    model_config = ConfigDict(populate_by_name=True)

    report_type: ReportType
    window: DateWindow
    generated_window: DateWindow | None = Field(
        None,
        description="Window the stored rows were generated for.",
    )
    window_label: str = Field(..., description="Navigation label, e.g. '2 Weeks Ago'.")
    loading: bool
    last_error: str | None = None
    summary: list[SummaryRow] = Field(default_factory=list)
    attendance: list[AttendanceRow] = Field(default_factory=list)
    cancelled: list[CancelledRow] = Field(default_factory=list)
    selected_meeting_id: str | None = None
    selected_meeting_attendance: list[MeetingAttendanceRow] = Field(default_factory=list)
    partial_failures: list[str] = Field(
        default_factory=list,
        description="Meetings whose participation could not be fetched in the last attendance run.",
    )
