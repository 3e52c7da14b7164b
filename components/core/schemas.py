"""Core schemas for the application."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models exchanged with the remote API (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    def to_wire(self, **kwargs) -> dict:
        """Dump with camelCase keys for the remote API."""
        return self.model_dump(by_alias=True, mode="json", **kwargs)


class HealthCheck(BaseModel):
    """Schema for health check response."""
    service_name: str
    status: str
    initial_data_loaded: bool


class Message(BaseModel):
    """Schema for a plain message response."""
    message: str
