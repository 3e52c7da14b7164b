"""Plan endpoints for the API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from components.dashboard.router import View
from components.planner.service import TripPlanner
from components.plan import schemas
from components.user.schemas import User
from restapi.dependencies import get_planner, require_view

router = APIRouter(
    prefix="/plans",
    tags=["plans"],
    responses={404: {"description": "Not found"}},
)


class ViewedMonth(BaseModel):
    """Schema for the month shown on the trip planning view."""
    month: int
    year: int
    plan: Optional[schemas.PlanView] = None


@router.get("/", response_model=List[schemas.PlanView])
async def read_submitted_plans(
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.ALLOCATIONS_REVIEW)),
):
    """Get the plans submitted for the active month, in arrival order."""
    await planner.ensure_dashboard()
    key = planner.active_month()
    return [schemas.PlanView.from_plan(plan) for plan in planner.plans.all_submitted_for(*key)]


@router.get("/me", response_model=ViewedMonth)
async def read_my_plan(
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.TRIP_PLANNING)),
):
    """Get the logged in user's plan for the viewed month."""
    await planner.ensure_dashboard()
    key = planner.viewed_month
    plan = planner.plans.find_for(current_user.id, key.month, key.year)
    return ViewedMonth(
        month=key.month,
        year=key.year,
        plan=schemas.PlanView.from_plan(plan) if plan else None,
    )


@router.post("/", response_model=schemas.PlanView)
async def submit_plan(
    body: schemas.PlanDays,
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.TRIP_PLANNING)),
):
    """
    Submit the selected days for the viewed month.

    Re-submitting replaces the whole day set. A re-submission into a month
    that already has allocations flags the user for regeneration.
    """
    plan = await planner.submit_plan(body.selected_days)
    return schemas.PlanView.from_plan(plan)


@router.post("/browse", response_model=ViewedMonth)
async def browse_month(
    offset: int = Query(..., ge=-12, le=12, description="Months to move, e.g. -1 or 1"),
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.TRIP_PLANNING)),
):
    """Move the trip planning view to another month."""
    key = await planner.browse_month(offset)
    plan = planner.plans.find_for(current_user.id, key.month, key.year)
    return ViewedMonth(
        month=key.month,
        year=key.year,
        plan=schemas.PlanView.from_plan(plan) if plan else None,
    )
