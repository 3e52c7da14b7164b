"""Repository for user operations."""

import logging
from typing import List, Optional

from components.api.client import TripPlannerApi
from components.core.exceptions import ValidationError
from components.core.security import is_valid_pin, validate_pin
from components.user.schemas import (
    ProfileUpdate,
    ROLE_DISPLAY_ORDER,
    Role,
    User,
    UserCreate,
    UserUpdate,
)

logger = logging.getLogger(__name__)


class UserRepository:
    """
    User management over the remote API.

    Writes are validated before any call is issued and the authoritative
    user list is re-fetched after every successful write. The cached list is
    never edited optimistically.
    """

    def __init__(self, api: TripPlannerApi):
        """Initialize repository with the API client."""
        self.api = api
        self._users: List[User] = []

    @property
    def users(self) -> List[User]:
        return list(self._users)

    def load(self, users: List[User]) -> None:
        self._users = list(users)

    async def refresh(self) -> List[User]:
        """Re-fetch the user list."""
        self._users = await self.api.list_users()
        return self.users

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        return next((user for user in self._users if user.id == user_id), None)

    def search(self, term: str = "", descending: bool = False) -> List[User]:
        """
        Users for the profile picker.

        Filtered by a case-insensitive name fragment, admins first, then by
        name in the requested direction.
        """
        term = (term or "").strip().lower()
        matches = [user for user in self._users if term in user.name.lower()]
        matches.sort(key=lambda user: user.name.lower(), reverse=descending)
        # stable sort keeps the name order inside each role group
        matches.sort(key=lambda user: ROLE_DISPLAY_ORDER[user.role])
        return matches

    async def create(self, user: UserCreate, actor: User) -> List[User]:
        """Create a new user."""
        await self.api.create_user(user, actor.id)
        logger.info("User %r created by %s", user.name, actor.id)
        return await self.refresh()

    async def update(self, user_id: int, user: UserUpdate, actor: User) -> List[User]:
        """Update user by ID as a system admin."""
        if user_id == actor.id and actor.role == Role.SystemAdmin and user.role != Role.SystemAdmin:
            raise ValidationError("You cannot remove your own System Admin role.")
        await self.api.update_user(user_id, user, actor.id)
        logger.info("User %s updated by %s", user_id, actor.id)
        return await self.refresh()

    async def update_profile(self, profile: ProfileUpdate, actor: User) -> List[User]:
        """Update the acting user's own name, email and optionally PIN."""
        if not profile.name or not profile.name.strip():
            raise ValidationError("Name is required.")
        if profile.new_pin or profile.current_pin:
            if profile.new_pin and not is_valid_pin(profile.new_pin):
                raise ValidationError("New PIN must be 4 digits.")
            if not profile.current_pin:
                raise ValidationError("Current PIN is required to set a new PIN.")
            validate_pin(profile.current_pin, "Current PIN")

        update = UserUpdate(
            name=profile.name,
            email=profile.email,
            role=actor.role,
            send_email=actor.send_email,
        )
        await self.api.update_user(
            actor.id,
            update,
            actor.id,
            new_pin=profile.new_pin or None,
            current_pin=profile.current_pin or None,
        )
        logger.info("User %s updated their profile", actor.id)
        return await self.refresh()

    async def delete(self, user_id: int, actor: User) -> List[User]:
        """Delete user by ID."""
        if user_id == actor.id:
            raise ValidationError("You cannot delete your own account.")
        await self.api.delete_user(user_id)
        logger.info("User %s deleted by %s", user_id, actor.id)
        return await self.refresh()
