from datetime import UTC, datetime

from fastapi import APIRouter
from pydantic import BaseModel

from src.config.settings import settings

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str
    version: str = "0.1.0"
    environment: str
    timestamp: datetime


@router.get("/", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """
    Health check endpoint to verify the API is running.
    Does not touch the local store or the wedding API.
    """
    return HealthCheckResponse(
        status="healthy",
        environment=settings.ENVIRONMENT,
        timestamp=datetime.now(UTC),
    )
