# tests/conftest.py
from datetime import date
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from meeting_reports.main import create_app
from meeting_reports.services.aggregation import AggregationEngine
from meeting_reports.services.portal_client import PortalClientError
from meeting_reports.services.report_orchestrator import ReportOrchestrator
from meeting_reports.services.repositories import (
    DashboardRepository,
    MeetingRepository,
    ParticipationRepository,
    StaffRepository,
)

# Wednesday; its week runs Monday 2025-10-06 .. Sunday 2025-10-12.
TODAY = date(2025, 10, 8)


class FakePortalClient:
    """
    Stand-in for PortalClient that serves canned payloads per path.

    A route mapped to an Exception raises it instead; unknown paths raise
    PortalClientError like a 404 would.
    """

    def __init__(self, routes: Dict[str, Any]):
        self.routes = routes
        self.calls: List[tuple] = []

    async def get_json(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        self.calls.append((path, params))
        if path not in self.routes:
            raise PortalClientError(f"Portal GET {path} failed (status=404)", status_code=404)
        value = self.routes[path]
        if isinstance(value, Exception):
            raise value
        return value

    def paths(self) -> List[str]:
        return [path for path, _ in self.calls]


def portal_routes() -> Dict[str, Any]:
    """
    Two meetings inside the current week, one outside it, two staff members.
    """
    return {
        "/meetings": {
            "data": [
                {
                    "_id": "m1",
                    "meetingTitle": "Weekly Sync",
                    "meetingDate": "2025-10-07T00:00:00.000Z",
                    "meetingTime": "2025-10-07T09:30:00.000Z",
                    "duration": 60,
                    "status": "Completed",
                    "participantCount": 2,
                },
                {
                    "_id": "m2",
                    "meetingTitle": "Budget Review",
                    "meetingDate": "2025-10-08T00:00:00.000Z",
                    "meetingDuration": "45 mins",
                    "meetingStatus": "Cancelled",
                    "cancellationReason": "Venue unavailable",
                    "cancelledBy": "Admin",
                },
                {
                    "_id": "m3",
                    "meetingTitle": "Planning",
                    "meetingDate": "2025-10-20T00:00:00.000Z",
                },
            ]
        },
        "/staff": {
            "data": [
                {"_id": "s1", "staffName": "Alice Tan", "emailAddress": "alice@example.com"},
                {"_id": "s2", "staffName": "Bala Kumar", "emailAddress": "bala@example.com"},
                {"_id": "s3", "staffName": "Chen Wei", "emailAddress": "chen@example.com"},
            ]
        },
        "/meetings/m1/members": {
            "data": [
                {
                    "_id": "mm1",
                    "staffId": {"_id": "s1", "staffName": "Alice Tan", "emailAddress": "alice@example.com"},
                    "isPresent": True,
                    "role": "Chair",
                },
                {"_id": "mm2", "staffId": "s2", "isPresent": False, "role": "Member"},
            ]
        },
        "/meetings/m2/members": {
            "data": [
                {"_id": "mm3", "staffId": "s1", "isPresent": False, "role": "Member"},
            ]
        },
        "/dashboard/overview": {"data": {"totalMeetings": 3, "totalStaff": 3}},
    }


def build_engine(client: FakePortalClient, join=None) -> AggregationEngine:
    participation = ParticipationRepository(client)
    return AggregationEngine(
        meetings=MeetingRepository(client, fetch_limit=50),
        staff=StaffRepository(client),
        participation=participation,
        join=join,
    )


@pytest.fixture
def portal() -> FakePortalClient:
    return FakePortalClient(portal_routes())


@pytest.fixture
def engine(portal: FakePortalClient) -> AggregationEngine:
    return build_engine(portal)


@pytest.fixture
def orchestrator(engine: AggregationEngine) -> ReportOrchestrator:
    return ReportOrchestrator(engine, today=lambda: TODAY)


@pytest.fixture
def client(orchestrator: ReportOrchestrator, portal: FakePortalClient) -> TestClient:
    """
    TestClient wired to the fake portal through the application factory.
    """
    app = create_app(orchestrator=orchestrator, dashboard=DashboardRepository(portal))
    with TestClient(app) as test_client:
        yield test_client
