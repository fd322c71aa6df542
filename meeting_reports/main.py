# meeting_reports/main.py
from fastapi import FastAPI

from meeting_reports.api.dependencies.reports import build_orchestrator
from meeting_reports.api.routes import health, reports
from meeting_reports.core.config import get_settings
from meeting_reports.core.logging_config import configure_logging
from meeting_reports.services.portal_client import get_portal_client
from meeting_reports.services.report_orchestrator import ReportOrchestrator
from meeting_reports.services.repositories import DashboardRepository


def create_app(
    orchestrator: ReportOrchestrator | None = None,
    dashboard: DashboardRepository | None = None,
) -> FastAPI:
    """
    Application factory for the Meeting Reports service.

    Tests pass their own orchestrator/dashboard wired to fake portal clients.
    """
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Reporting backend for the meeting administration portal: weekly\n"
            "meeting summaries, per-staff attendance statistics, cancelled\n"
            "meetings, and Excel/PDF export of the generated reports."
        ),
        version="0.1.0",
    )

    app.state.orchestrator = orchestrator or build_orchestrator(settings=settings)
    app.state.dashboard = dashboard or DashboardRepository(get_portal_client())

    # Routers
    app.include_router(health.router)
    app.include_router(reports.router)

    return app


app = create_app()
