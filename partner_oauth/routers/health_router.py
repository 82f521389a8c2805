from fastapi import APIRouter, Depends
from dependency_injector.wiring import inject, Provide

from partner_oauth.config import Settings
from partner_oauth.containers import Container
from partner_oauth.schemas.health import HealthCheckResponse

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
@inject
async def health_check(
    settings: Settings = Depends(Provide[Container.config.config]),
) -> HealthCheckResponse:
    """Health check endpoint."""

    return HealthCheckResponse(session_backend=settings.SESSION_BACKEND)
