"""Unauthenticated liveness probe with a database round-trip."""
from datetime import datetime

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from elacak.core.db import check_db_connection, utcnow

router = APIRouter(tags=["health"])


class HealthStatus(BaseModel):
    status: str
    database: str
    timestamp: datetime


@router.get("/health", response_model=HealthStatus)
async def healthcheck(response: Response) -> HealthStatus:
    """'ok' when the database answers; 'degraded' with a 503 otherwise."""
    if await check_db_connection():
        return HealthStatus(status="ok", database="reachable", timestamp=utcnow())
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthStatus(status="degraded", database="unreachable", timestamp=utcnow())
