"""Pydantic schemas for holiday data."""

from typing import List
from pydantic import BaseModel

from components.core.schemas import WireModel


class HolidayUpdate(WireModel):
    """Schema for replacing the holiday list."""
    holiday_dates: List[str]


class HolidayMonth(BaseModel):
    """Schema for the holidays of one month."""
    month: int
    year: int
    days: List[int]
