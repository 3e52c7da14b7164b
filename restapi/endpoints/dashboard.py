"""Dashboard endpoint dispatching on the session user's role."""

from typing import Any, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from components.dashboard.router import View
from components.planner.service import TripPlanner
from components.user.schemas import Role, User
from restapi.dependencies import get_current_user, get_planner

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
)


class DashboardResponse(BaseModel):
    """Schema for dashboard response."""
    role: Role
    view: View
    data: Any


@router.get("/", response_model=DashboardResponse)
async def read_dashboard(
    view: Optional[View] = Query(None, description="Sub-view; the role's landing view if omitted"),
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(get_current_user),
):
    """Render the active view of the logged in user."""
    if current_user.role != Role.SystemAdmin:
        await planner.ensure_dashboard()
    try:
        active, model = planner.dashboard(view)
    except ValueError as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    return DashboardResponse(role=current_user.role, view=active, data=model)
