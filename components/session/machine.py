"""
Authentication state machine.

    Anonymous --select_profile--> AwaitingPin --submit_pin--> Authenticated
    Anonymous --submit_form----------------------------------> Authenticated
    AwaitingPin --cancel--> Anonymous
    Authenticated --logout--> Anonymous

The machine lives in memory only: a fresh process always starts Anonymous.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Protocol, Union

from components.core.config import get_settings
from components.core.exceptions import (
    AuthenticationError,
    SessionStateError,
    ValidationError,
)
from components.core.security import validate_pin
from components.system_settings.schemas import SystemSettings
from components.user.schemas import User

logger = logging.getLogger(__name__)

WRONG_PIN_MESSAGE = "Wrong PIN. Please try again."
TOO_MANY_ATTEMPTS_MESSAGE = "Too many wrong PIN attempts. Please select your profile again."


class LoginBackend(Protocol):
    async def login(self, identifier: str, pin: str) -> User: ...


@dataclass(frozen=True)
class Anonymous:
    """No session. Keeps the last typed identifier and error for the form."""
    identifier: str = ""
    error: Optional[str] = None


@dataclass(frozen=True)
class AwaitingPin:
    """A profile was picked from the user list and its PIN is expected."""
    candidate: User
    error: Optional[str] = None
    failed_attempts: int = 0


@dataclass(frozen=True)
class Authenticated:
    user: User


SessionState = Union[Anonymous, AwaitingPin, Authenticated]
AuthenticatedListener = Callable[[User], Awaitable[None]]


class SessionMachine:
    """Drives login, PIN verification, retry and logout for one session."""

    def __init__(
        self,
        backend: LoginBackend,
        settings_provider: Callable[[], Optional[SystemSettings]] = lambda: None,
        max_pin_attempts: Optional[int] = None,
    ):
        self._backend = backend
        self._settings_provider = settings_provider
        self.max_pin_attempts = max_pin_attempts or get_settings().PIN_MAX_ATTEMPTS
        self._state: SessionState = Anonymous()
        self._listeners: List[AuthenticatedListener] = []
        self._epoch = 0
        self._busy = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def epoch(self) -> int:
        """Changes every time a session starts or ends."""
        return self._epoch

    @property
    def user(self) -> Optional[User]:
        if isinstance(self._state, Authenticated):
            return self._state.user
        return None

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self._state, Authenticated)

    @property
    def list_view_enabled(self) -> bool:
        settings = self._settings_provider()
        # the profile list is shown until settings say otherwise
        return True if settings is None else settings.user_list_view_enabled

    def on_authenticated(self, listener: AuthenticatedListener) -> None:
        """Register a coroutine to await after each successful login."""
        self._listeners.append(listener)

    def require_user(self) -> User:
        """Get the authenticated user or raise SessionStateError."""
        user = self.user
        if user is None:
            raise SessionStateError("No authenticated user")
        return user

    def _expect(self, *state_types) -> None:
        if not isinstance(self._state, state_types):
            expected = " or ".join(state_type.__name__ for state_type in state_types)
            raise SessionStateError(
                f"Expected {expected} state, session is {type(self._state).__name__}"
            )

    def select_profile(self, user: User) -> AwaitingPin:
        """Pick a profile from the user list; its PIN is asked next."""
        self._expect(Anonymous)
        if not self.list_view_enabled:
            raise SessionStateError("Profile selection is disabled, use the login form")
        self._state = AwaitingPin(candidate=user)
        return self._state

    def cancel(self) -> Anonymous:
        """Abort PIN entry."""
        self._expect(AwaitingPin)
        self._state = Anonymous()
        return self._state

    async def submit_pin(self, pin: str) -> SessionState:
        """Verify the PIN of the selected profile."""
        self._expect(AwaitingPin)
        pending = self._state
        try:
            validate_pin(pin)
        except ValidationError as exc:
            self._state = AwaitingPin(pending.candidate, exc.message, pending.failed_attempts)
            return self._state

        try:
            user = await self._verify(pending, pending.candidate.login_identifier, pin)
        except AuthenticationError:
            if self._state is not pending:
                return self._state
            attempts = pending.failed_attempts + 1
            logger.warning(
                "Wrong PIN for user %s (%d/%d)", pending.candidate.id, attempts, self.max_pin_attempts
            )
            if attempts >= self.max_pin_attempts:
                self._state = Anonymous(error=TOO_MANY_ATTEMPTS_MESSAGE)
            else:
                self._state = AwaitingPin(pending.candidate, WRONG_PIN_MESSAGE, attempts)
            return self._state

        await self._enter(user)
        return self._state

    async def submit_form(self, identifier: str, pin: str) -> SessionState:
        """Log in with a typed identifier (name or email) and PIN."""
        self._expect(Anonymous)
        if self.list_view_enabled:
            raise SessionStateError("Login form is disabled, select a profile instead")

        identifier = (identifier or "").strip()
        try:
            if not identifier:
                raise ValidationError("Name or email is required.")
            validate_pin(pin)
        except ValidationError as exc:
            self._state = Anonymous(identifier=identifier, error=exc.message)
            return self._state

        started_from = self._state
        try:
            user = await self._verify(started_from, identifier, pin)
        except AuthenticationError as exc:
            if self._state is not started_from:
                return self._state
            logger.warning("Form login rejected for identifier %r", identifier)
            # keep the identifier, the PIN field is cleared by not keeping it
            self._state = Anonymous(identifier=identifier, error=exc.message)
            return self._state

        await self._enter(user)
        return self._state

    async def _verify(self, started_from: SessionState, identifier: str, pin: str) -> User:
        if self._busy:
            raise SessionStateError("A login attempt is already in progress")
        self._busy = True
        try:
            user = await self._backend.login(identifier, pin)
        finally:
            self._busy = False
        if self._state is not started_from:
            raise SessionStateError("Session changed while the login was in flight")
        return user

    async def _enter(self, user: User) -> None:
        self._epoch += 1
        self._state = Authenticated(user)
        logger.info("User %s logged in as %s", user.id, user.role.name)
        epoch = self._epoch
        for listener in self._listeners:
            # a listener may have logged the session out
            if self._epoch != epoch:
                break
            await listener(user)

    def refresh_user(self, user: User) -> None:
        """Replace the session user with a re-fetched copy of the same user."""
        current = self.require_user()
        if current.id != user.id:
            raise SessionStateError("Cannot swap the session user")
        self._state = Authenticated(user)

    def logout(self) -> Anonymous:
        """End the session. Nothing of it is kept."""
        self._expect(Authenticated)
        logger.info("User %s logged out", self._state.user.id)
        self._epoch += 1
        self._state = Anonymous()
        return self._state
