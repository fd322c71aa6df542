# meeting_reports/api/routes/reports.py
from http import HTTPStatus
from typing import Any, Dict, List, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from meeting_reports.api.dependencies.reports import get_dashboard, get_orchestrator
from meeting_reports.core.result import Err
from meeting_reports.schemas.report import (
    DateRangeUpdate,
    MeetingAttendanceRow,
    ReportStateRead,
    ReportTypeUpdate,
)
from meeting_reports.services.errors import (
    FetchError,
    ReportInProgressError,
    ReportValidationError,
)
from meeting_reports.services.report_orchestrator import ReportOrchestrator
from meeting_reports.services.repositories import DashboardRepository

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
)


def _raise_for(result: Err) -> None:
    error = result.error
    if isinstance(error, ReportValidationError):
        status = HTTPStatus.UNPROCESSABLE_ENTITY
    elif isinstance(error, ReportInProgressError):
        status = HTTPStatus.CONFLICT
    elif isinstance(error, FetchError):
        status = HTTPStatus.BAD_GATEWAY
    else:
        status = HTTPStatus.INTERNAL_SERVER_ERROR
    raise HTTPException(status_code=status, detail=result.message)


@router.get(
    "/state",
    response_model=ReportStateRead,
    summary="Current report type, window and generated rows",
)
async def get_state(
    orchestrator: ReportOrchestrator = Depends(get_orchestrator),
) -> ReportStateRead:
    return orchestrator.snapshot()


@router.put(
    "/type",
    response_model=ReportStateRead,
    summary="Select the active report view",
)
async def set_report_type(
    payload: ReportTypeUpdate,
    orchestrator: ReportOrchestrator = Depends(get_orchestrator),
) -> ReportStateRead:
    orchestrator.set_report_type(payload.report_type)
    return orchestrator.snapshot()


@router.post(
    "/window/navigate",
    response_model=ReportStateRead,
    summary="Move the window one week back or forward",
)
async def navigate_week(
    direction: Literal["prev", "next"] = Query(..., description="'prev' or 'next'."),
    orchestrator: ReportOrchestrator = Depends(get_orchestrator),
) -> ReportStateRead:
    orchestrator.navigate_week(direction)
    return orchestrator.snapshot()


@router.post(
    "/window/current",
    response_model=ReportStateRead,
    summary="Reset the window to the current week",
)
async def go_to_current_week(
    orchestrator: ReportOrchestrator = Depends(get_orchestrator),
) -> ReportStateRead:
    orchestrator.go_to_current_week()
    return orchestrator.snapshot()


@router.put(
    "/window",
    response_model=ReportStateRead,
    summary="Edit the From or To date directly",
    description=(
        "Setting `from` makes `to` six days later; setting only `to` makes "
        "`from` six days earlier. The week offset is recalculated either way. "
        "Sending neither clears the window."
    ),
)
async def change_date_range(
    payload: DateRangeUpdate,
    orchestrator: ReportOrchestrator = Depends(get_orchestrator),
) -> ReportStateRead:
    orchestrator.change_date_range(payload.from_date, payload.to_date)
    return orchestrator.snapshot()


@router.post(
    "/generate",
    response_model=ReportStateRead,
    summary="Generate the active report for the current window",
    responses={
        409: {"description": "A report is already being generated."},
        422: {"description": "The date window is missing a bound or inverted."},
        502: {"description": "Meetings or staff could not be fetched from the portal."},
    },
)
async def generate_report(
    orchestrator: ReportOrchestrator = Depends(get_orchestrator),
) -> ReportStateRead:
    result = await orchestrator.generate_report()
    if isinstance(result, Err):
        _raise_for(result)
    return orchestrator.snapshot()


@router.post(
    "/meetings/{meeting_id}/attendance",
    response_model=List[MeetingAttendanceRow],
    summary="Attendance details for a single meeting",
)
async def meeting_attendance(
    meeting_id: str,
    orchestrator: ReportOrchestrator = Depends(get_orchestrator),
) -> List[MeetingAttendanceRow]:
    result = await orchestrator.load_selected_meeting_attendance(meeting_id)
    if isinstance(result, Err):
        _raise_for(result)
    return result.value


@router.get(
    "/export/{kind}",
    summary="Download the active report as Excel or PDF",
    response_class=Response,
    responses={
        200: {
            "content": {
                "application/pdf": {},
                "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": {},
            }
        },
    },
)
async def export_report(
    kind: Literal["excel", "pdf"],
    orchestrator: ReportOrchestrator = Depends(get_orchestrator),
) -> Response:
    result = orchestrator.export(kind)
    if isinstance(result, Err):
        _raise_for(result)

    artifact = result.value
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


@router.get(
    "/overview",
    summary="Dashboard overview from the portal (informational)",
)
async def dashboard_overview(
    dashboard: DashboardRepository = Depends(get_dashboard),
) -> Dict[str, Any]:
    try:
        return await dashboard.fetch_overview()
    except FetchError as exc:
        raise HTTPException(status_code=HTTPStatus.BAD_GATEWAY, detail=str(exc)) from exc
