"""System settings endpoints for the API."""

from fastapi import APIRouter, Depends

from components.dashboard.router import View
from components.planner.service import TripPlanner
from components.system_settings.schemas import SystemSettings
from components.user.schemas import User
from restapi.dependencies import get_planner, require_view

router = APIRouter(
    prefix="/settings",
    tags=["settings"],
)


@router.get("/", response_model=SystemSettings)
async def read_settings(
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.SETTINGS_MANAGEMENT)),
):
    """Get the system settings."""
    return planner.require_settings()


@router.put("/", response_model=SystemSettings)
async def update_settings(
    settings: SystemSettings,
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.SETTINGS_MANAGEMENT)),
):
    """Save the system settings and return the server's copy."""
    return await planner.update_settings(settings)
