"""Holiday calendar endpoints for the API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from components.dashboard.router import View
from components.holiday import schemas
from components.planner.service import TripPlanner
from components.user.schemas import User
from restapi.dependencies import get_current_user, get_planner, require_view

router = APIRouter(
    prefix="/holidays",
    tags=["holidays"],
)


@router.get("/", response_model=List[str])
async def read_holidays(
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(get_current_user),
):
    """Get all holidays as YYYY-MM-DD dates."""
    await planner.ensure_dashboard()
    return planner.holidays.dates()


@router.get("/month", response_model=schemas.HolidayMonth)
async def read_holiday_month(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1, le=9999),
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.HOLIDAY_CALENDAR)),
):
    """Get the holidays of one month; moves the calendar view when a month is given."""
    await planner.ensure_dashboard()
    if month is not None and year is not None:
        planner.select_holiday_month(month, year)
    key = planner.holiday_month
    return schemas.HolidayMonth(
        month=key.month, year=key.year, days=planner.holidays.days_in(key.month, key.year)
    )


@router.put("/", response_model=List[str])
async def update_holidays(
    body: schemas.HolidayUpdate,
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.HOLIDAY_CALENDAR)),
):
    """Replace the holiday list."""
    return await planner.update_holidays(body.holiday_dates)


@router.post("/toggle/{day}", response_model=List[str])
async def toggle_holiday(
    day: str,
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.HOLIDAY_CALENDAR)),
):
    """Mark or unmark one date (YYYY-MM-DD) as a holiday."""
    await planner.ensure_dashboard()
    return await planner.toggle_holiday(day)
