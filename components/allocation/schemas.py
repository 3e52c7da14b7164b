"""Pydantic schemas for allocation data validation."""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from components.core.schemas import WireModel
from components.cycle.service import MonthKey, parse_iso_date


class Traveler(WireModel):
    """Schema for a traveler on an allocated date."""
    id: int
    name: str


class Allocation(WireModel):
    """Schema for the booking allocation of one calendar date."""
    date: str
    booker_id: int
    booker_name: str
    travelers: List[Traveler] = Field(..., min_length=1)
    trip_type: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, value) -> str:
        # "YYYY-MM-DD" so that string order is chronological order
        return parse_iso_date(value).isoformat()

    @field_validator("trip_type")
    @classmethod
    def empty_trip_type_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @property
    def month_key(self) -> MonthKey:
        year, month, _ = (int(part) for part in self.date.split("-"))
        return MonthKey(month, year)

    def includes(self, user_id: int) -> bool:
        """Check whether the user travels on this date."""
        return any(traveler.id == user_id for traveler in self.travelers)


class GenerateAllocationsRequest(WireModel):
    """Schema for the remote generation request."""
    actor_user_id: int
    year: int
    month: int


class ScheduleEntry(BaseModel):
    """Schema for one date of a user's personal travel schedule."""
    date: str
    trip_type: Optional[str] = None
    booker_id: int
    booker_name: str
    is_booker: bool
    companions: List[str]


class MonthlyExpense(BaseModel):
    """Schema for a user's trip cost in one month."""
    month: int
    year: int
    trips: int
    trip_price: float
    total: float


class UserSchedule(BaseModel):
    """Schema for a user's schedule and cost view."""
    entries: List[ScheduleEntry]
    expense: MonthlyExpense
