"""Pydantic schemas for system-wide settings."""

from pydantic import Field, field_validator

from components.core.schemas import WireModel


class SystemSettings(WireModel):
    """Schema for system settings managed by the system admin."""
    departure_label: str = "Departure"
    arrival_label: str = "Arrival"
    trip_price: float = Field(0.0, ge=0)
    allocate_for_current_month: bool = False
    user_list_view_enabled: bool = True

    @field_validator("departure_label", "arrival_label")
    @classmethod
    def label_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Trip type labels cannot be empty")
        return value.strip()

    @property
    def trip_labels(self) -> tuple:
        return (self.departure_label, self.arrival_label)
