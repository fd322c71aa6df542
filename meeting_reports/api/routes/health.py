# meeting_reports/api/routes/health.py
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel, Field

from meeting_reports.core.config import get_settings


router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str = Field(..., description="Always 'ok' when the process answers.", examples=["ok"])
    app_name: str = Field(..., description="Configured APP_NAME.", examples=["Meeting Reports"])
    environment: str = Field(..., description="Configured APP_ENV.", examples=["local"])
    timestamp_utc: datetime = Field(..., description="Server time (UTC) of this response.")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Answers without contacting the portal API.",
)
async def health_check() -> HealthResponse:
    settings = get_settings()
    return HealthResponse(
        status="ok",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        timestamp_utc=datetime.now(tz=timezone.utc),
    )
