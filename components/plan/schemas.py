"""Pydantic schemas for plan data validation."""

from typing import FrozenSet, List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from components.core.schemas import WireModel
from components.cycle.service import MonthKey, days_in_month


class PlanBase(WireModel):
    """Base plan schema."""
    user_id: int
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1, le=9999)
    selected_days: FrozenSet[int] = frozenset()

    @field_validator("selected_days", mode="before")
    @classmethod
    def none_is_empty(cls, value):
        return frozenset() if value is None else value

    @model_validator(mode="after")
    def days_within_month(self):
        last_day = days_in_month(self.year, self.month)
        invalid = sorted(day for day in self.selected_days if not 1 <= day <= last_day)
        if invalid:
            raise ValueError(
                f"Days {invalid} are outside {self.year:04d}-{self.month:02d} (1..{last_day})"
            )
        return self

    @property
    def key(self) -> tuple:
        """Natural key: (user_id, month, year)."""
        return (self.user_id, self.month, self.year)

    @property
    def month_key(self) -> MonthKey:
        return MonthKey(self.month, self.year)

    @property
    def sorted_days(self) -> List[int]:
        return sorted(self.selected_days)


class PlanSubmission(PlanBase):
    """Schema for plan submission to the remote API."""

    def to_wire(self, **kwargs) -> dict:
        payload = super().to_wire(**kwargs)
        payload["selectedDays"] = self.sorted_days
        return payload


class Plan(PlanBase):
    """Schema for a stored plan."""
    user_name: Optional[str] = None


class PlanDays(BaseModel):
    """Request body for submitting the days of the viewed month."""
    selected_days: List[int]


class PlanView(BaseModel):
    """Schema for plan response."""
    user_id: int
    user_name: Optional[str] = None
    month: int
    year: int
    selected_days: List[int]

    @classmethod
    def from_plan(cls, plan: Plan) -> "PlanView":
        return cls(
            user_id=plan.user_id,
            user_name=plan.user_name,
            month=plan.month,
            year=plan.year,
            selected_days=plan.sorted_days,
        )
