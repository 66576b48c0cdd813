from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request
from pydantic import BaseModel

from src.adapters.api.v1.auth.schemas import Envelope
from src.core.config.settings import settings

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    env: str
    services: Dict[str, Any]
    timestamp: datetime


@router.get("", response_model=Envelope[HealthResponse])
async def health_check(request: Request):
    """
    Liveness endpoint that also reports whether the database answers.
    """
    db_healthy = await request.app.state.database.ping()

    return Envelope(
        data=HealthResponse(
            status="ok" if db_healthy else "degraded",
            env=settings.APP_ENV,
            services={"database": {"status": "healthy" if db_healthy else "unhealthy"}},
            timestamp=datetime.now(timezone.utc),
        )
    )
