"""Health check endpoint for monitoring application status."""

from fastapi import APIRouter, Request

from components.core import schemas
from components.core.config import get_settings

router = APIRouter(
    prefix="/health_check",
    tags=["services"],
    responses={200: {"description": "Service is healthy"}},
)


@router.get("/", response_model=schemas.HealthCheck)
async def health_check(request: Request) -> schemas.HealthCheck:
    """Check the health status of the service and whether the remote API answered at startup."""
    planner = request.app.state.planner
    loaded = planner.initial_data_loaded
    return schemas.HealthCheck(
        service_name=get_settings().SERVICE_NAME,
        status="healthy" if loaded else "degraded",
        initial_data_loaded=loaded,
    )
