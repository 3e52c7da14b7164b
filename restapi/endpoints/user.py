"""User endpoints for the API."""

from typing import List
from fastapi import APIRouter, Depends

from components.core.schemas import Message
from components.dashboard.router import View
from components.dashboard.views import ManagedUser, system_admin_dashboard
from components.planner.service import TripPlanner
from components.user import schemas
from components.user.schemas import User
from restapi.dependencies import get_planner, require_view

router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={404: {"description": "Not found"}},
)


def _managed(planner: TripPlanner, current_user: User) -> List[ManagedUser]:
    return system_admin_dashboard(current_user, planner.users.users, planner.settings).users


@router.get("/", response_model=List[ManagedUser])
async def read_users(
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.USER_MANAGEMENT)),
):
    """Get list of users."""
    await planner.users.refresh()
    return _managed(planner, current_user)


@router.post("/", response_model=List[ManagedUser])
async def create_user(
    user: schemas.UserCreate,
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.USER_MANAGEMENT)),
):
    """Create a new user; returns the refreshed user list."""
    await planner.add_user(user)
    return _managed(planner, current_user)


@router.put("/me", response_model=schemas.UserPublic)
async def update_my_profile(
    profile: schemas.ProfileUpdate,
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.PROFILE_EDIT)),
):
    """
    Update the logged in user's profile.

    To change the PIN both the current PIN and a new 4-digit PIN are needed.
    """
    await planner.update_profile(profile)
    return schemas.UserPublic.from_user(planner.session.require_user())


@router.put("/{user_id}", response_model=List[ManagedUser])
async def update_user(
    user_id: int,
    user: schemas.UserUpdate,
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.USER_MANAGEMENT)),
):
    """Update a user; a system admin cannot remove their own admin role."""
    await planner.update_user(user_id, user)
    return _managed(planner, planner.session.require_user())


@router.delete("/{user_id}", response_model=Message)
async def delete_user(
    user_id: int,
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(require_view(View.USER_MANAGEMENT)),
):
    """Delete a user other than yourself."""
    await planner.delete_user(user_id)
    return Message(message="User deleted successfully")
