# meeting_reports/services/repositories.py
from __future__ import annotations

import logging
from datetime import date as date_type
from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from meeting_reports.schemas.meeting import Meeting, ParticipationRecord, StaffMember
from meeting_reports.schemas.report import DateWindow
from meeting_reports.services.errors import FetchError
from meeting_reports.services.portal_client import PortalClient, PortalClientError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _unwrap_list(payload: Any, entity: str) -> List[Dict[str, Any]]:
    """
    Accept both a bare JSON array and the portal's `{"data": [...]}` envelope.
    """
    if isinstance(payload, dict):
        payload = payload.get("data")
    if not isinstance(payload, list):
        raise FetchError(entity, "unexpected response shape (expected a list)")
    return payload


def _parse_each(items: List[Dict[str, Any]], model: Type[ModelT], entity: str) -> List[ModelT]:
    parsed: List[ModelT] = []
    for item in items:
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping malformed %s record: %s", entity, exc.errors()[:1])
    return parsed


class MeetingRepository:
    """
    Reads meetings for a reporting window.

    The portal is asked for the window via startDate/endDate, and the result is
    filtered again locally so that a backend ignoring the filter cannot leak
    out-of-window meetings into a report.
    """

    def __init__(self, client: PortalClient, fetch_limit: int = 50) -> None:
        self.client = client
        self.fetch_limit = fetch_limit

    async def fetch_in_window(self, window: DateWindow) -> List[Meeting]:
        params = {
            "limit": self.fetch_limit,
            "startDate": window.from_date.isoformat(),
            "endDate": window.to_date.isoformat(),
        }
        try:
            payload = await self.client.get_json("/meetings", params=params)
        except PortalClientError as exc:
            raise FetchError("meetings", str(exc)) from exc

        meetings = _parse_each(_unwrap_list(payload, "meetings"), Meeting, "meeting")
        return [m for m in meetings if _in_window(m.meeting_date, window)]


def _in_window(day: date_type | None, window: DateWindow) -> bool:
    if day is None:
        return False
    return window.from_date <= day <= window.to_date


class StaffRepository:
    def __init__(self, client: PortalClient) -> None:
        self.client = client

    async def fetch_all(self) -> List[StaffMember]:
        try:
            payload = await self.client.get_json("/staff")
        except PortalClientError as exc:
            raise FetchError("staff", str(exc)) from exc
        return _parse_each(_unwrap_list(payload, "staff"), StaffMember, "staff")


class ParticipationRepository:
    """
    Reads the member list (participation records) of one meeting.
    """

    def __init__(self, client: PortalClient) -> None:
        self.client = client

    async def fetch_for_meeting(self, meeting_id: str) -> List[ParticipationRecord]:
        entity = f"members of meeting {meeting_id}"
        try:
            payload = await self.client.get_json(f"/meetings/{meeting_id}/members")
        except PortalClientError as exc:
            raise FetchError(entity, str(exc)) from exc

        records = _parse_each(_unwrap_list(payload, entity), ParticipationRecord, "member")
        return [
            r if r.meeting_id else r.model_copy(update={"meeting_id": meeting_id})
            for r in records
        ]


class DashboardRepository:
    """
    Reads the portal's dashboard overview. Passed through as-is; reports never
    aggregate it.
    """

    def __init__(self, client: PortalClient) -> None:
        self.client = client

    async def fetch_overview(self) -> Dict[str, Any]:
        try:
            payload = await self.client.get_json("/dashboard/overview")
        except PortalClientError as exc:
            raise FetchError("dashboard overview", str(exc)) from exc

        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            return payload["data"]
        if isinstance(payload, dict):
            return payload
        raise FetchError("dashboard overview", "unexpected response shape (expected an object)")
