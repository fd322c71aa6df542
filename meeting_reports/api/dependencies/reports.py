# meeting_reports/api/dependencies/reports.py
"""
Request-scoped accessors for the report orchestrator and dashboard repository.

There is one ReportOrchestrator per application, so every HTTP client sees
the same window, report type, selection and rows. The service is meant to
back a single Reports view at a time; concurrent users would need state
keyed by session.
"""
from fastapi import Request

from meeting_reports.core.config import Settings, get_settings
from meeting_reports.services.aggregation import AggregationEngine
from meeting_reports.services.attendance_join import build_join
from meeting_reports.services.portal_client import PortalClient, get_portal_client
from meeting_reports.services.report_orchestrator import ReportOrchestrator
from meeting_reports.services.repositories import (
    DashboardRepository,
    MeetingRepository,
    ParticipationRepository,
    StaffRepository,
)


def build_orchestrator(
    client: PortalClient | None = None,
    settings: Settings | None = None,
) -> ReportOrchestrator:
    """
    Wire repositories, join strategy and engine from application settings.
    """
    settings = settings or get_settings()
    client = client or get_portal_client()

    participation = ParticipationRepository(client)
    engine = AggregationEngine(
        meetings=MeetingRepository(client, fetch_limit=settings.MEETINGS_FETCH_LIMIT),
        staff=StaffRepository(client),
        participation=participation,
        join=build_join(
            settings.ATTENDANCE_JOIN_STRATEGY,
            participation,
            fanout_limit=settings.ATTENDANCE_FANOUT_LIMIT,
        ),
    )
    return ReportOrchestrator(engine)


def get_orchestrator(request: Request) -> ReportOrchestrator:
    """
    The report state lives for the lifetime of the app, like the portal's
    Reports page state lives for the lifetime of the page.
    """
    return request.app.state.orchestrator


def get_dashboard(request: Request) -> DashboardRepository:
    return request.app.state.dashboard
