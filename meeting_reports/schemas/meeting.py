# meeting_reports/schemas/meeting.py
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_STATUS = "Scheduled"
DEFAULT_CANCELLATION_REASON = "No reason provided"
DEFAULT_CANCELLED_BY = "Unknown"


class MeetingStatus(str, Enum):
    """
    Lifecycle states a meeting can be in on the portal.
    """

    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


def parse_calendar_day(value: Any) -> date | None:
    """
    Reduce a portal date value to a calendar day.

    The portal sends ISO timestamps such as "2025-10-08T00:00:00.000Z"; only
    the date part is significant for reporting.
    """
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def _person_label(value: Any) -> Any:
    # cancelledBy may be a populated user document instead of a name
    if isinstance(value, dict):
        return value.get("name") or value.get("username") or value.get("email")
    return value


class Meeting(BaseModel):
    """
    A scheduled meeting as read from the portal, with defaults filled in.

    Missing status, cancellation reason and canceller are replaced here so
    that report projections never need fallback checks of their own.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(
        ...,
        validation_alias=AliasChoices("_id", "id"),
        description="Portal identifier of the meeting.",
    )
    title: str = Field(
        "",
        validation_alias=AliasChoices("meetingTitle", "title"),
        description="Human-readable meeting title.",
    )
    meeting_date: date | None = Field(
        None,
        validation_alias=AliasChoices("meetingDate", "meeting_date", "date"),
        description="Calendar day on which the meeting takes place.",
    )
    meeting_time: str | None = Field(
        None,
        validation_alias=AliasChoices("meetingTime", "meeting_time", "time"),
        description="Start time as sent by the portal.",
    )
    duration: str = Field(
        "",
        validation_alias=AliasChoices("meetingDuration", "duration"),
        description="Planned duration, as entered on the portal.",
    )
    status: str = Field(
        DEFAULT_STATUS,
        validation_alias=AliasChoices("meetingStatus", "status"),
        description="Scheduled, Completed or Cancelled.",
    )
    cancellation_reason: str = Field(
        DEFAULT_CANCELLATION_REASON,
        validation_alias=AliasChoices("cancellationReason", "cancellation_reason"),
    )
    cancelled_by: str = Field(
        DEFAULT_CANCELLED_BY,
        validation_alias=AliasChoices("cancelledBy", "cancelled_by"),
    )
    participant_count: int = Field(
        0,
        validation_alias=AliasChoices("participantCount", "participant_count", "participants"),
        description="Number of participation records reported inline with the meeting.",
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value

    @field_validator("title", mode="before")
    @classmethod
    def _fill_title(cls, value: Any) -> Any:
        return value or ""

    @field_validator("meeting_date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> date | None:
        return parse_calendar_day(value)

    @field_validator("duration", mode="before")
    @classmethod
    def _fill_duration(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("status", mode="before")
    @classmethod
    def _fill_status(cls, value: Any) -> Any:
        return value or DEFAULT_STATUS

    @field_validator("cancellation_reason", mode="before")
    @classmethod
    def _fill_reason(cls, value: Any) -> Any:
        return value or DEFAULT_CANCELLATION_REASON

    @field_validator("cancelled_by", mode="before")
    @classmethod
    def _fill_cancelled_by(cls, value: Any) -> Any:
        return _person_label(value) or DEFAULT_CANCELLED_BY

    @field_validator("participant_count", mode="before")
    @classmethod
    def _count_participants(cls, value: Any) -> int:
        if isinstance(value, (list, tuple)):
            return len(value)
        if isinstance(value, (int, float)):
            return int(value)
        return 0

    @property
    def is_cancelled(self) -> bool:
        return self.status == MeetingStatus.CANCELLED.value


class StaffMember(BaseModel):
    """
    A person eligible to attend meetings.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., validation_alias=AliasChoices("_id", "id"))
    name: str = Field("", validation_alias=AliasChoices("staffName", "name"))
    email: str | None = Field(None, validation_alias=AliasChoices("emailAddress", "email"))
    role: str | None = Field(None)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value

    @field_validator("name", mode="before")
    @classmethod
    def _fill_name(cls, value: Any) -> Any:
        return value or ""


class ParticipationRecord(BaseModel):
    """
    One staff member's link to one meeting.

    The portal either embeds the staff document under `staffId` or sends the
    bare identifier; both shapes normalize to `staff_id` (+ optional `staff`).
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(None, validation_alias=AliasChoices("_id", "id"))
    meeting_id: str | None = Field(None, validation_alias=AliasChoices("meetingId", "meeting_id"))
    staff_id: str = Field(..., validation_alias=AliasChoices("staffId", "staff_id"))
    staff: StaffMember | None = None
    is_present: bool = Field(False, validation_alias=AliasChoices("isPresent", "is_present"))
    role: str = ""

    @model_validator(mode="before")
    @classmethod
    def _split_nested_staff(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        nested = data.get("staffId", data.get("staff_id"))
        if isinstance(nested, dict):
            staff = StaffMember.model_validate(nested)
            data.pop("staffId", None)
            data["staff_id"] = staff.id
            data["staff"] = staff
            if not data.get("role") and staff.role:
                data["role"] = staff.role
        elif nested is not None:
            data.pop("staffId", None)
            data["staff_id"] = str(nested)

        meeting = data.get("meetingId")
        if isinstance(meeting, dict):
            data["meetingId"] = meeting.get("_id") or meeting.get("id")

        if data.get("_id") is not None:
            data["_id"] = str(data["_id"])
        if data.get("role") is None:
            data["role"] = ""
        if data.get("isPresent") is None:
            data.pop("isPresent", None)
        return data
