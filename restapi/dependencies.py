"""Shared FastAPI dependencies."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from components.core.exceptions import ConnectivityError
from components.core.security import verify_token
from components.dashboard.router import View
from components.planner.service import TripPlanner
from components.user.schemas import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


async def get_planner(request: Request) -> TripPlanner:
    """Get the process planner; retries the initial load if it failed at startup."""
    planner: TripPlanner = request.app.state.planner
    if not planner.initial_data_loaded:
        await planner.load_initial_data()
    if planner.settings is None:
        raise ConnectivityError()
    return planner


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    planner: TripPlanner = Depends(get_planner),
    token: str = Depends(oauth2_scheme),
) -> User:
    """Get the session user; the token must belong to the current session."""
    payload = verify_token(token)
    if payload is None:
        raise _unauthorized("Could not validate credentials")

    user = planner.session.user
    if user is None or payload.get("epoch") != planner.session.epoch:
        raise _unauthorized("Session has ended")
    if payload.get("sub") != str(user.id):
        raise _unauthorized("User not found")
    return user


def require_view(view: View):
    """Dependency factory: the session user's role must be able to open ``view``."""

    async def dependency(
        planner: TripPlanner = Depends(get_planner),
        current_user: User = Depends(get_current_user),
    ) -> User:
        if not planner.router.allows(current_user.role, view):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{view.value} is not available to role {current_user.role.name}",
            )
        return current_user

    return dependency
