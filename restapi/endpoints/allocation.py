"""Allocation endpoints for the API."""

from typing import List
from fastapi import APIRouter, Depends

from components.allocation import schemas
from components.dashboard.router import View
from components.dashboard.views import StalenessBanner, staleness_banner
from components.planner.service import TripPlanner
from components.user.schemas import User
from restapi.dependencies import get_planner, require_view

router = APIRouter(
    prefix="/allocations",
    tags=["allocations"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[schemas.Allocation])
async def read_allocations(
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.ALLOCATIONS_REVIEW)),
):
    """Get the master allocation schedule."""
    await planner.ensure_dashboard()
    return planner.allocations.all()


@router.get("/me", response_model=schemas.UserSchedule)
async def read_my_schedule(
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.TRIP_PLANNING)),
):
    """
    Get the logged in user's travel schedule for the viewed month.

    Returns:
    - One entry per allocated date with the trip type, the booker and
      whether the user books it, and the fellow travelers
    - The monthly expense: number of trips times the trip price
    """
    await planner.ensure_dashboard()
    key = planner.viewed_month
    price = planner.require_settings().trip_price
    return schemas.UserSchedule(
        entries=planner.allocations.schedule_for(current_user.id, key.month, key.year),
        expense=planner.allocations.monthly_expense(current_user.id, key.month, key.year, price),
    )


@router.post("/generate", response_model=List[schemas.Allocation])
async def generate_allocations(
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.ALLOCATIONS_REVIEW)),
):
    """Generate the allocations of the active month from the submitted plans."""
    return await planner.generate_allocations()


@router.get("/stale", response_model=StalenessBanner)
async def read_stale_users(
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.ALLOCATIONS_REVIEW)),
):
    """Get the users whose plans changed after the last generation."""
    await planner.ensure_dashboard()
    return staleness_banner(planner.staleness)
