"""Pydantic schemas for session state responses."""

from typing import Optional
from pydantic import BaseModel

from components.session.machine import Anonymous, Authenticated, AwaitingPin, SessionMachine
from components.user.schemas import UserPublic


class PinSubmit(BaseModel):
    pin: str


class LoginForm(BaseModel):
    identifier: str
    pin: str


class SessionView(BaseModel):
    """Schema for the current session state."""
    state: str
    login_mode: str
    epoch: int
    error: Optional[str] = None
    identifier: Optional[str] = None
    candidate: Optional[UserPublic] = None
    failed_attempts: int = 0
    user: Optional[UserPublic] = None
    access_token: Optional[str] = None
    token_type: Optional[str] = None

    @classmethod
    def from_machine(cls, machine: SessionMachine, access_token: Optional[str] = None) -> "SessionView":
        state = machine.state
        view = cls(
            state="anonymous",
            login_mode="list" if machine.list_view_enabled else "form",
            epoch=machine.epoch,
        )
        if isinstance(state, Anonymous):
            view.identifier = state.identifier or None
            view.error = state.error
        elif isinstance(state, AwaitingPin):
            view.state = "awaiting_pin"
            view.candidate = UserPublic.from_user(state.candidate)
            view.error = state.error
            view.failed_attempts = state.failed_attempts
        elif isinstance(state, Authenticated):
            view.state = "authenticated"
            view.user = UserPublic.from_user(state.user)
            if access_token:
                view.access_token = access_token
                view.token_type = "bearer"
        return view
