"""Health check endpoint."""

from fastapi import APIRouter
from pydantic import BaseModel

from arcaneledger.config import settings

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    store_configured: bool


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Does not call any upstream; reports whether the spreadsheet store
    settings are present.
    """
    return HealthResponse(status="healthy", store_configured=settings.is_configured)
