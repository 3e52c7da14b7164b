"""Pydantic schemas for user data validation."""

from enum import IntEnum
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from components.core.schemas import WireModel


class Role(IntEnum):
    """User roles. Values are the integers used by the remote API."""
    AllocationAdmin = 0
    User = 1
    SystemAdmin = 2

    @property
    def title(self) -> str:
        return _ROLE_TITLES[self]


_ROLE_TITLES = {
    Role.AllocationAdmin: "Allocation Administrator",
    Role.User: "User",
    Role.SystemAdmin: "System Administrator",
}

# Order used on the profile picker: admins first
ROLE_DISPLAY_ORDER = {
    Role.SystemAdmin: 0,
    Role.AllocationAdmin: 1,
    Role.User: 2,
}


class UserBase(WireModel):
    """Base user schema."""
    name: str
    email: Optional[str] = None
    role: Role = Role.User
    send_email: bool = True

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Name is required")
        return value.strip()

    @field_validator("email")
    @classmethod
    def empty_email_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()


class User(UserBase):
    """Schema for a user as returned by the remote API."""
    id: int
    # Opaque credential, never serialized outward
    pin: Optional[str] = Field(default=None, exclude=True, repr=False)

    @property
    def login_identifier(self) -> str:
        """Identifier the remote API accepts for this user's login."""
        return self.email or self.name


class UserCreate(UserBase):
    """Schema for user creation."""
    pass


class UserUpdate(UserBase):
    """Schema for user update by a system admin."""
    pass


class ProfileUpdate(BaseModel):
    """Schema for a user editing their own profile."""
    name: str
    email: Optional[str] = None
    current_pin: Optional[str] = None
    new_pin: Optional[str] = None


class UserPublic(BaseModel):
    """Schema for user response (no credential)."""
    id: int
    name: str
    email: Optional[str] = None
    role: Role
    role_title: str
    send_email: bool

    @classmethod
    def from_user(cls, user: User) -> "UserPublic":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            role_title=user.role.title,
            send_email=user.send_email,
        )
