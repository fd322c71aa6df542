# meeting_reports/services/aggregation.py
from __future__ import annotations

import logging
import math
from datetime import date as date_type
from typing import Dict, List

from meeting_reports.schemas.meeting import ParticipationRecord, StaffMember
from meeting_reports.schemas.report import (
    AttendanceRow,
    CancelledRow,
    DateWindow,
    MeetingAttendanceRow,
    SummaryRow,
)
from meeting_reports.services.attendance_join import ParticipationJoin, SequentialJoin
from meeting_reports.services.errors import FetchError, PartialFetchError
from meeting_reports.services.repositories import (
    MeetingRepository,
    ParticipationRepository,
    StaffRepository,
)

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"


def format_day(day: date_type | None) -> str:
    """
    Render a calendar day as M/D/YYYY without zero padding (e.g. 10/8/2025).
    """
    if day is None:
        return NOT_AVAILABLE
    return f"{day.month}/{day.day}/{day.year}"


def attendance_percentage(attended: int, total_meetings: int) -> str:
    """
    Whole-percent attendance rate, rounding halves up (12.5 -> 13).

    Only defined for total_meetings > 0.
    """
    if total_meetings <= 0:
        raise ValueError("total_meetings must be positive")
    return f"{math.floor(attended / total_meetings * 100 + 0.5)}%"


class AggregationEngine:
    """
    Joins portal meetings, staff and participation into report projections.

    Responsibilities
    ----------------
    - Summary: one row per meeting in the window.
    - Attendance: per-staff totals across the window's meetings.
    - Cancelled: one row per cancelled meeting in the window.
    - Meeting detail: participation of a single selected meeting.

    Notes
    -----
    - Meeting and staff list failures propagate as FetchError.
    - Participation failures inside the attendance join are isolated: the
      meeting contributes nothing, and the failure is kept in
      `last_partial_failures` for the most recent attendance run.
    """

    def __init__(
        self,
        meetings: MeetingRepository,
        staff: StaffRepository,
        participation: ParticipationRepository,
        join: ParticipationJoin | None = None,
    ) -> None:
        self.meetings = meetings
        self.staff = staff
        self.participation = participation
        self.join = join or SequentialJoin(participation)
        self.last_partial_failures: List[PartialFetchError] = []

    async def build_summary(self, window: DateWindow) -> List[SummaryRow]:
        meetings = await self.meetings.fetch_in_window(window)
        return [
            SummaryRow(
                meeting_id=m.id,
                meeting=m.title,
                date=format_day(m.meeting_date),
                participants=m.participant_count,
                duration=m.duration,
                status=m.status,
            )
            for m in meetings
        ]

    async def build_attendance(self, window: DateWindow) -> List[AttendanceRow]:
        """
        Per-staff attendance over the window.

        Steps
        -----
        1) Fetch meetings in the window, then all staff (either failing is fatal).
        2) Fetch each meeting's participation list through the join strategy.
        3) For every staff member and every meeting, membership counts toward
           totalMeetings and presence toward attended.
        4) Staff with no meetings in the window are left out.
        """
        meetings = await self.meetings.fetch_in_window(window)
        staff_members = await self.staff.fetch_all()

        joined = await self.join.fetch_all(meetings)
        self.last_partial_failures = list(joined.failures)
        if joined.failures:
            logger.warning(
                "Attendance report for %s..%s is missing %d of %d meetings",
                window.from_date,
                window.to_date,
                len(joined.failures),
                len(meetings),
            )

        by_meeting: Dict[str, Dict[str, ParticipationRecord]] = {}
        for meeting_id, records in joined.participation.items():
            index: Dict[str, ParticipationRecord] = {}
            for record in records:
                # Uniqueness per (meeting, staff) is assumed; first record wins.
                index.setdefault(record.staff_id, record)
            by_meeting[meeting_id] = index

        rows: List[AttendanceRow] = []
        for member in staff_members:
            total_meetings = 0
            attended = 0
            for meeting in meetings:
                record = by_meeting.get(meeting.id, {}).get(member.id)
                if record is None:
                    continue
                total_meetings += 1
                if record.is_present:
                    attended += 1

            if total_meetings == 0:
                continue

            rows.append(
                AttendanceRow(
                    name=member.name,
                    total_meetings=total_meetings,
                    attended=attended,
                    absent=total_meetings - attended,
                    percentage=attendance_percentage(attended, total_meetings),
                )
            )

        return rows

    async def build_cancelled(self, window: DateWindow) -> List[CancelledRow]:
        meetings = await self.meetings.fetch_in_window(window)
        return [
            CancelledRow(
                meeting=m.title,
                scheduled_date=format_day(m.meeting_date),
                reason=m.cancellation_reason,
                cancelled_by=m.cancelled_by,
            )
            for m in meetings
            if m.is_cancelled
        ]

    async def build_meeting_attendance(self, meeting_id: str) -> List[MeetingAttendanceRow]:
        """
        Participation detail for one meeting (the one-meeting attendance join).

        The member list fetch is fatal here. When the portal does not embed
        staff documents, names are resolved from the staff list if it can be
        fetched, otherwise shown as N/A.
        """
        records = await self.participation.fetch_for_meeting(meeting_id)

        directory: Dict[str, StaffMember] = {}
        if any(r.staff is None for r in records):
            try:
                directory = {s.id: s for s in await self.staff.fetch_all()}
            except FetchError as exc:
                logger.warning("Staff lookup for meeting %s failed: %s", meeting_id, exc)

        rows: List[MeetingAttendanceRow] = []
        for record in records:
            member = record.staff or directory.get(record.staff_id)
            rows.append(
                MeetingAttendanceRow(
                    staff_id=record.staff_id,
                    name=(member.name if member and member.name else NOT_AVAILABLE),
                    email=(member.email if member and member.email else NOT_AVAILABLE),
                    role=record.role or (member.role if member and member.role else NOT_AVAILABLE),
                    is_present=record.is_present,
                )
            )
        return rows
