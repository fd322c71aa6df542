# tests/test_report_orchestrator.py
import asyncio
from datetime import date

import pytest

from conftest import TODAY, FakePortalClient, build_engine, portal_routes
from meeting_reports.core.result import Err, Ok
from meeting_reports.schemas.report import ReportType
from meeting_reports.services.errors import (
    ExportError,
    FetchError,
    ReportInProgressError,
    ReportValidationError,
)
from meeting_reports.services.portal_client import PortalClientError
from meeting_reports.services.report_orchestrator import ReportOrchestrator


def _orchestrator(routes=None) -> ReportOrchestrator:
    client = FakePortalClient(routes or portal_routes())
    return ReportOrchestrator(build_engine(client), today=lambda: TODAY)


def test_initial_window_is_current_week(orchestrator):
    window = orchestrator.state.window

    assert window.from_date == date(2025, 10, 6)
    assert window.to_date == date(2025, 10, 12)
    assert window.week_offset == 0
    assert orchestrator.state.report_type == ReportType.SUMMARY


def test_navigate_next_then_prev_restores_window(orchestrator):
    original = orchestrator.state.window

    orchestrator.navigate_week("next")
    assert orchestrator.state.window.from_date == date(2025, 10, 13)
    orchestrator.navigate_week("prev")

    assert orchestrator.state.window == original


def test_go_to_current_week_after_manual_edit(orchestrator):
    orchestrator.change_date_range(from_date=date(2025, 8, 1))
    assert orchestrator.state.window.week_offset < 0

    orchestrator.go_to_current_week()

    assert orchestrator.state.window.week_offset == 0
    assert orchestrator.state.window.from_date == date(2025, 10, 6)


@pytest.mark.asyncio
async def test_generate_summary_populates_rows_and_clears_loading(orchestrator):
    result = await orchestrator.generate_report()

    assert isinstance(result, Ok)
    assert [r.meeting for r in orchestrator.state.summary_rows] == ["Weekly Sync", "Budget Review"]
    assert orchestrator.state.loading is False
    assert orchestrator.state.last_error is None
    assert orchestrator.state.last_generated == ReportType.SUMMARY


@pytest.mark.asyncio
async def test_generate_with_cleared_window_is_validation_error(orchestrator):
    orchestrator.change_date_range()

    result = await orchestrator.generate_report()

    assert isinstance(result, Err)
    assert isinstance(result.error, ReportValidationError)
    assert orchestrator.state.last_error
    assert orchestrator.state.loading is False


@pytest.mark.asyncio
async def test_fetch_failure_keeps_previous_rows():
    routes = portal_routes()
    orchestrator = _orchestrator(routes)
    await orchestrator.generate_report()
    previous = list(orchestrator.state.summary_rows)

    routes["/meetings"] = PortalClientError("portal down", status_code=502)
    result = await orchestrator.generate_report()

    assert isinstance(result, Err)
    assert isinstance(result.error, FetchError)
    assert orchestrator.state.summary_rows == previous
    assert "meetings" in orchestrator.state.last_error
    assert orchestrator.state.loading is False

    # Retrying once the portal recovers clears the error.
    routes["/meetings"] = portal_routes()["/meetings"]
    assert isinstance(await orchestrator.generate_report(), Ok)
    assert orchestrator.state.last_error is None


@pytest.mark.asyncio
async def test_attendance_partial_failure_does_not_escape():
    routes = portal_routes()
    routes["/meetings/m2/members"] = PortalClientError("timeout")
    orchestrator = _orchestrator(routes)
    orchestrator.set_report_type(ReportType.ATTENDANCE)

    result = await orchestrator.generate_report()

    assert isinstance(result, Ok)
    alice = next(r for r in orchestrator.state.attendance_rows if r.name == "Alice Tan")
    assert alice.total_meetings == 1
    assert alice.percentage == "100%"
    assert orchestrator.state.partial_failures == ["m2"]
    assert orchestrator.state.last_error is None


@pytest.mark.asyncio
async def test_row_collections_are_retained_across_report_types(orchestrator):
    await orchestrator.generate_report()
    orchestrator.set_report_type(ReportType.CANCELLED)
    await orchestrator.generate_report()

    assert len(orchestrator.state.summary_rows) == 2
    assert len(orchestrator.state.cancelled_rows) == 1


@pytest.mark.asyncio
async def test_second_call_while_loading_is_ignored():
    gate = asyncio.Event()

    class SlowClient(FakePortalClient):
        async def get_json(self, path, *, params=None):
            await gate.wait()
            return await super().get_json(path, params=params)

    orchestrator = ReportOrchestrator(build_engine(SlowClient(portal_routes())), today=lambda: TODAY)

    first = asyncio.create_task(orchestrator.generate_report())
    await asyncio.sleep(0)
    assert orchestrator.state.loading is True

    second = await orchestrator.generate_report()
    assert isinstance(second, Err)
    assert isinstance(second.error, ReportInProgressError)

    gate.set()
    assert isinstance(await first, Ok)
    assert orchestrator.state.loading is False


@pytest.mark.asyncio
async def test_export_mode_regenerates_last_projection(orchestrator):
    orchestrator.set_report_type(ReportType.CANCELLED)
    await orchestrator.generate_report()

    orchestrator.set_report_type(ReportType.EXPORT)
    result = await orchestrator.generate_report()

    assert isinstance(result, Ok)
    assert orchestrator.state.last_generated == ReportType.CANCELLED
    artifact = orchestrator.export("excel").value
    assert artifact.filename == "cancelled_report.xlsx"


@pytest.mark.asyncio
async def test_load_selected_meeting_attendance(orchestrator):
    await orchestrator.generate_report()
    orchestrator.select_meeting("m1")

    result = await orchestrator.load_selected_meeting_attendance()

    assert isinstance(result, Ok)
    assert [r.name for r in orchestrator.state.selected_meeting_rows] == ["Alice Tan", "Bala Kumar"]


@pytest.mark.asyncio
async def test_load_meeting_attendance_requires_selection(orchestrator):
    result = await orchestrator.load_selected_meeting_attendance()

    assert isinstance(result, Err)
    assert isinstance(result.error, ReportValidationError)


def test_export_error_does_not_touch_report_state(orchestrator, monkeypatch):
    from meeting_reports.services import report_orchestrator as module

    monkeypatch.setattr(
        module,
        "export_document",
        lambda report_type, rows: Err(ExportError("disk full")),
    )

    result = orchestrator.export("pdf")

    assert isinstance(result, Err)
    assert orchestrator.state.last_error is None


def test_export_rejects_unknown_format(orchestrator):
    with pytest.raises(ValueError):
        orchestrator.export("docx")


def test_snapshot_reports_window_label(orchestrator):
    orchestrator.navigate_week("prev")
    orchestrator.navigate_week("prev")

    assert orchestrator.snapshot().window_label == "2 Weeks Ago"


def _gated_orchestrator():
    gate = asyncio.Event()

    class SlowClient(FakePortalClient):
        async def get_json(self, path, *, params=None):
            await gate.wait()
            return await super().get_json(path, params=params)

    orchestrator = ReportOrchestrator(build_engine(SlowClient(portal_routes())), today=lambda: TODAY)
    return orchestrator, gate


@pytest.mark.asyncio
async def test_meeting_selection_is_frozen_while_detail_loads():
    orchestrator, gate = _gated_orchestrator()
    orchestrator.select_meeting("m1")

    first = asyncio.create_task(orchestrator.load_selected_meeting_attendance())
    await asyncio.sleep(0)
    assert orchestrator.state.loading is True

    assert orchestrator.select_meeting("m2") is False
    second = await orchestrator.load_selected_meeting_attendance("m2")
    assert isinstance(second, Err)
    assert isinstance(second.error, ReportInProgressError)
    assert orchestrator.state.selected_meeting_id == "m1"

    gate.set()
    assert isinstance(await first, Ok)
    assert orchestrator.state.selected_meeting_id == "m1"
    assert [r.name for r in orchestrator.state.selected_meeting_rows] == ["Alice Tan", "Bala Kumar"]


@pytest.mark.asyncio
async def test_load_meeting_attendance_selects_the_given_meeting(orchestrator):
    result = await orchestrator.load_selected_meeting_attendance("m2")

    assert isinstance(result, Ok)
    assert orchestrator.state.selected_meeting_id == "m2"
    assert [r.name for r in orchestrator.state.selected_meeting_rows] == ["Alice Tan"]


@pytest.mark.asyncio
async def test_unexpected_error_in_meeting_attendance_becomes_err(orchestrator, monkeypatch):
    async def broken(meeting_id):
        raise RuntimeError("bad payload")

    monkeypatch.setattr(orchestrator.engine, "build_meeting_attendance", broken)

    result = await orchestrator.load_selected_meeting_attendance("m1")

    assert isinstance(result, Err)
    assert isinstance(result.error, RuntimeError)
    assert "bad payload" in orchestrator.state.last_error
    assert orchestrator.state.loading is False
    assert orchestrator.state.selected_meeting_rows == []


@pytest.mark.asyncio
async def test_rows_keep_the_window_they_were_generated_for():
    orchestrator, gate = _gated_orchestrator()
    week = orchestrator.state.window

    first = asyncio.create_task(orchestrator.generate_report())
    await asyncio.sleep(0)
    orchestrator.navigate_week("next")

    gate.set()
    assert isinstance(await first, Ok)
    assert orchestrator.state.window.from_date == date(2025, 10, 13)
    assert orchestrator.state.generated_window == week
    assert orchestrator.snapshot().generated_window == week
    assert [r.meeting for r in orchestrator.state.summary_rows] == ["Weekly Sync", "Budget Review"]
