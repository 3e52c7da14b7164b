"""Authentication endpoints for profile selection, PIN entry and login."""

from typing import List
from fastapi import APIRouter, Depends, Query

from components.core.exceptions import SessionStateError
from components.core.security import create_session_token
from components.planner.service import TripPlanner
from components.session.schemas import LoginForm, PinSubmit, SessionView
from components.user.schemas import User, UserPublic
from restapi.dependencies import get_current_user, get_planner

router = APIRouter(prefix="/auth", tags=["authentication"])


def _session_view(planner: TripPlanner, issue_token: bool = False) -> SessionView:
    session = planner.session
    token = None
    if issue_token and session.is_authenticated:
        token = create_session_token(session.user.id, session.epoch)
    return SessionView.from_machine(session, access_token=token)


@router.get("/state", response_model=SessionView)
async def read_state(planner: TripPlanner = Depends(get_planner)):
    """Get the current session state and login mode."""
    return _session_view(planner)


@router.get("/profiles", response_model=List[UserPublic])
async def read_profiles(
    search: str = Query("", description="Filter users by name"),
    descending: bool = Query(False, description="Sort names Z-A"),
    planner: TripPlanner = Depends(get_planner),
):
    """List the profiles shown on the login screen (list view mode only)."""
    if not planner.session.list_view_enabled:
        raise SessionStateError("Profile list is disabled, use the login form")
    return [UserPublic.from_user(user) for user in planner.profiles(search, descending)]


@router.post("/profiles/{user_id}", response_model=SessionView)
async def select_profile(user_id: int, planner: TripPlanner = Depends(get_planner)):
    """Select a profile; the session then waits for its PIN."""
    planner.select_profile(user_id)
    return _session_view(planner)


@router.post("/pin", response_model=SessionView)
async def submit_pin(body: PinSubmit, planner: TripPlanner = Depends(get_planner)):
    """
    Submit the PIN of the selected profile.

    On success the response carries the bearer token of the new session.
    A wrong PIN keeps the session waiting for the PIN with an error attached.
    """
    await planner.submit_pin(body.pin)
    return _session_view(planner, issue_token=True)


@router.post("/cancel", response_model=SessionView)
async def cancel_pin(planner: TripPlanner = Depends(get_planner)):
    """Abort PIN entry."""
    planner.cancel_pin()
    return _session_view(planner)


@router.post("/login", response_model=SessionView)
async def login(body: LoginForm, planner: TripPlanner = Depends(get_planner)):
    """Log in with name or email and PIN (form view mode only)."""
    await planner.login(body.identifier, body.pin)
    return _session_view(planner, issue_token=True)


@router.post("/logout", response_model=SessionView)
async def logout(
    planner: TripPlanner = Depends(get_planner),
    current_user: User = Depends(get_current_user),
):
    """End the session; its token stops working."""
    planner.logout()
    return _session_view(planner)
