# meeting_reports/services/date_window.py
from __future__ import annotations

from datetime import date as date_type, datetime, timedelta

from meeting_reports.schemas.report import DateWindow
from meeting_reports.services.errors import ReportValidationError

WINDOW_DAYS = 7


def _today(today: date_type | None) -> date_type:
    if today is None:
        return date_type.today()
    # Normalize datetimes to their calendar day (midnight).
    if isinstance(today, datetime):
        return today.date()
    return today


def monday_of(day: date_type) -> date_type:
    """
    Monday of the week containing `day`. Sunday closes the week, so its
    Monday is six days earlier.
    """
    return day - timedelta(days=day.weekday())


def window_for_offset(offset_weeks: int, today: date_type | None = None) -> DateWindow:
    """
    Monday-to-Sunday window `offset_weeks` weeks away from the current week.
    """
    start = monday_of(_today(today)) + timedelta(weeks=offset_weeks)
    return DateWindow(
        from_date=start,
        to_date=start + timedelta(days=WINDOW_DAYS - 1),
        week_offset=offset_weeks,
    )


def offset_for_date(from_date: date_type, today: date_type | None = None) -> int:
    """
    Week offset of the week containing `from_date`, relative to today's week.

    Computed as floor(days / 7) where days is measured from the Monday of the
    current week, so window_for_offset(o).from_date maps back to exactly o.
    """
    if isinstance(from_date, datetime):
        from_date = from_date.date()
    days = (from_date - monday_of(_today(today))).days
    return days // WINDOW_DAYS


def navigate(direction: str, current_offset: int) -> int:
    if direction == "prev":
        return current_offset - 1
    if direction == "next":
        return current_offset + 1
    raise ValueError(f"Unknown navigation direction: {direction!r}")


def reset() -> int:
    return 0


def window_for_manual_edit(
    from_date: date_type | None = None,
    to_date: date_type | None = None,
    today: date_type | None = None,
) -> DateWindow:
    """
    Rebuild the window after the user edited one of its bounds directly.

    An edited "From" fixes the start and "To" follows six days later; an
    edited "To" fixes the end and "From" is derived. If both are given,
    "From" wins. With neither, the window is cleared and report generation
    is blocked until a bound is set again.
    """
    if from_date is not None:
        start = from_date
    elif to_date is not None:
        start = to_date - timedelta(days=WINDOW_DAYS - 1)
    else:
        return DateWindow(from_date=None, to_date=None, week_offset=0)

    return DateWindow(
        from_date=start,
        to_date=start + timedelta(days=WINDOW_DAYS - 1),
        week_offset=offset_for_date(start, today=today),
    )


def validate_window(window: DateWindow | None) -> DateWindow:
    """
    Raise ReportValidationError unless both bounds are set and ordered.
    """
    if window is None or window.from_date is None or window.to_date is None:
        raise ReportValidationError("Please select both a From and a To date.")
    if window.from_date > window.to_date:
        raise ReportValidationError(
            f"From date {window.from_date.isoformat()} is after To date "
            f"{window.to_date.isoformat()}."
        )
    return window


def describe_offset(offset: int) -> str:
    """
    Navigation label shown next to the week controls.
    """
    if offset == 0:
        return "This Week"
    weeks = abs(offset)
    unit = "Week" if weeks == 1 else "Weeks"
    if offset < 0:
        return f"{weeks} {unit} Ago"
    return f"Next {weeks} {unit}"
