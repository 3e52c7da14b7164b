"""
Trip planner session orchestrator.

Owns the settings, the session and the session-scoped stores, and runs every
load and write flow. Writes follow request -> confirm -> apply: nothing is
committed locally before the remote API has accepted it, and a rejected write
re-fetches the authoritative state.
"""

import asyncio
import logging
from datetime import date
from typing import Callable, Iterable, List, Optional, Tuple

import pydantic
from pydantic import BaseModel

from components.allocation.schemas import Allocation
from components.allocation.store import AllocationStore
from components.api.client import TripPlannerApi
from components.core.exceptions import (
    ConflictOrServerError,
    PermissionDeniedError,
    SessionStateError,
    TripPlannerError,
    ValidationError,
)
from components.cycle.service import MonthKey, active_month, shift_month, validate_month
from components.dashboard import views
from components.dashboard.router import DashboardRouter, View
from components.holiday.calendar import HolidayCalendar
from components.plan.schemas import Plan, PlanSubmission
from components.plan.store import PlanStore
from components.session.machine import SessionMachine, SessionState
from components.staleness.tracker import StalenessTracker
from components.system_settings.schemas import SystemSettings
from components.user.repository import UserRepository
from components.user.schemas import ProfileUpdate, User, UserCreate, UserPublic, UserUpdate

logger = logging.getLogger(__name__)


def _first_error(exc: pydantic.ValidationError) -> str:
    error = exc.errors()[0]
    return str(error.get("msg", "Invalid input"))


class TripPlanner:
    """One user session against the remote Trip Planner API."""

    def __init__(
        self,
        api: TripPlannerApi,
        today: Callable[[], date] = date.today,
        max_pin_attempts: Optional[int] = None,
        router: Optional[DashboardRouter] = None,
    ):
        self.api = api
        self._today = today
        self.router = router or DashboardRouter()

        self.settings: Optional[SystemSettings] = None
        self.users = UserRepository(api)
        self.allocations = AllocationStore()
        self.staleness = StalenessTracker()
        self.plans = PlanStore(self.allocations, self.staleness)
        self.holidays = HolidayCalendar()

        self.session = SessionMachine(api, lambda: self.settings, max_pin_attempts)
        self.session.on_authenticated(self._after_login)

        self.initial_data_loaded = False
        self.dashboard_loaded = False
        self.dashboard_error: Optional[str] = None
        self.batches_issued = 0
        self._generation = 0
        self._viewed: Optional[MonthKey] = None
        self._holiday_month: Optional[MonthKey] = None

    # Months

    def today(self) -> date:
        return self._today()

    def require_settings(self) -> SystemSettings:
        if self.settings is None:
            raise SessionStateError("System settings are not loaded")
        return self.settings

    def active_month(self) -> MonthKey:
        """The month open for planning, from the current settings."""
        settings = self.require_settings()
        return active_month(self.today(), settings.allocate_for_current_month)

    @property
    def viewed_month(self) -> MonthKey:
        """The month the user dashboard shows; the active month by default."""
        return self._viewed or self.active_month()

    @property
    def holiday_month(self) -> MonthKey:
        return self._holiday_month or MonthKey.of(self.today())

    # Loading

    async def load_initial_data(self) -> None:
        """
        Fetch users and settings together.

        Any failure leaves the settings unset so no dashboard can render.
        """
        try:
            users, settings = await asyncio.gather(self.api.list_users(), self.api.get_settings())
        except Exception:
            logger.exception("Failed to fetch initial data")
            self.initial_data_loaded = False
            raise
        self.users.load(users)
        self.settings = settings
        self.initial_data_loaded = True
        logger.info("Initial data loaded: %d users", len(users))

        # a login that completed before settings arrived is still waiting
        if self.session.is_authenticated and not self.dashboard_loaded:
            await self.load_dashboard_data()

    async def _after_login(self, user: User) -> None:
        self._viewed = None
        self._holiday_month = None
        self.dashboard_loaded = False
        self.dashboard_error = None
        if self.settings is None:
            logger.info("Dashboard load for user %s deferred until settings load", user.id)
            return
        try:
            await self.load_dashboard_data()
        except TripPlannerError as exc:
            # the login itself succeeded; the dashboard retries on next access
            logger.exception("Failed to load dashboard data")
            self.dashboard_error = exc.message

    async def ensure_dashboard(self) -> None:
        """Load the dashboard batch if the session has none applied yet."""
        if self.dashboard_loaded:
            return
        self.require_settings()
        await self.load_dashboard_data()
        self.dashboard_error = None

    async def load_dashboard_data(self, keep_stale_after: Optional[int] = None) -> bool:
        """
        Fetch plans, allocations, holidays and stale users as one batch.

        Results are applied only when every fetch succeeded and the batch is
        still the latest one of the same session.

        Args:
            keep_stale_after: Staleness version; local marks stamped after it
                survive a stale-user list that does not show them yet

        Returns:
            True if the batch was applied
        """
        if self.settings is None or not self.session.is_authenticated:
            return False

        self._generation += 1
        generation = self._generation
        epoch = self.session.epoch
        key = self.viewed_month
        self.batches_issued += 1
        logger.debug("Dashboard batch %d for %s", generation, key)

        plans, allocations, holidays, stale_users = await asyncio.gather(
            self.api.list_plans(key.year, key.month),
            self.api.list_allocations(key.year, key.month),
            self.api.list_holidays(),
            self.api.list_stale_users(),
        )

        if generation != self._generation or epoch != self.session.epoch:
            logger.info("Discarding dashboard batch %d, session moved on", generation)
            return False

        self.plans.load(plans)
        self.allocations.replace_all(allocations)
        self.holidays.load(holidays)
        self.staleness.load(stale_users, keep_after=keep_stale_after)
        self.dashboard_loaded = True
        return True

    # Session

    def profiles(self, term: str = "", descending: bool = False) -> List[User]:
        return self.users.search(term, descending)

    def select_profile(self, user_id: int) -> SessionState:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise ValidationError(f"Unknown user {user_id}")
        return self.session.select_profile(user)

    async def submit_pin(self, pin: str) -> SessionState:
        return await self.session.submit_pin(pin)

    def cancel_pin(self) -> SessionState:
        return self.session.cancel()

    async def login(self, identifier: str, pin: str) -> SessionState:
        return await self.session.submit_form(identifier, pin)

    def logout(self) -> SessionState:
        state = self.session.logout()
        # results of batches still in flight belong to the old session
        self._generation += 1
        self._viewed = None
        self._holiday_month = None
        self.dashboard_loaded = False
        self.plans.load([])
        self.allocations.replace_all([])
        self.staleness.load([])
        self.holidays.load([])
        return state

    def _require_view(self, view: View) -> User:
        user = self.session.require_user()
        if not self.router.allows(user.role, view):
            raise PermissionDeniedError(
                f"{view.value} is not available to role {user.role.name}"
            )
        return user

    # Dashboards

    def dashboard(self, selection: Optional[View] = None) -> Tuple[View, BaseModel]:
        """Resolve the active view of the session user and build its model."""
        user = self.session.require_user()
        view = self.router.resolve(user.role, selection)
        settings = self.require_settings()

        if view == View.TRIP_PLANNING:
            model = views.user_dashboard(
                user, self.viewed_month, self.plans, self.allocations, settings, self.holidays
            )
        elif view == View.PROFILE_EDIT:
            model = UserPublic.from_user(user)
        elif view == View.ALLOCATIONS_REVIEW:
            model = views.admin_dashboard(
                self.active_month(), self.plans, self.allocations, self.staleness, settings
            )
        elif view == View.HOLIDAY_CALENDAR:
            model = views.holiday_dashboard(self.holiday_month, self.holidays)
        elif view in (View.USER_MANAGEMENT, View.SETTINGS_MANAGEMENT):
            model = views.system_admin_dashboard(user, self.users.users, settings)
        else:
            raise AssertionError(f"Unhandled view {view!r}")
        return view, model

    # Plans

    async def browse_month(self, offset: int) -> MonthKey:
        """Move the user dashboard to another month and reload it."""
        self._require_view(View.TRIP_PLANNING)
        self._viewed = shift_month(self.viewed_month, offset)
        await self.load_dashboard_data()
        return self._viewed

    async def submit_plan(self, selected_days: Iterable[int]) -> Plan:
        """Submit the session user's days for the viewed month."""
        user = self._require_view(View.TRIP_PLANNING)
        key = self.viewed_month
        try:
            submission = PlanSubmission(
                user_id=user.id, month=key.month, year=key.year, selected_days=selected_days
            )
        except pydantic.ValidationError as exc:
            raise ValidationError(_first_error(exc)) from None

        await self.api.submit_plan(submission)
        plan = Plan(**submission.model_dump(), user_name=user.name)
        captured = self.staleness.capture()
        self.plans.upsert(plan)
        logger.info("Plan of user %s for %s submitted (%d days)", user.id, key, len(plan.selected_days))
        await self.load_dashboard_data(keep_stale_after=captured)
        return plan

    # Allocations

    async def generate_allocations(self) -> List[Allocation]:
        """
        Run the remote allocation for the active month.

        The staleness set is cleared only after the response is observed and
        only up to the version captured when the request was issued; the
        stale-user list is read after that, never concurrently.
        """
        user = self._require_view(View.ALLOCATIONS_REVIEW)
        key = self.active_month()
        epoch = self.session.epoch
        captured = self.staleness.capture()

        allocations = await self.api.generate_allocations(user.id, key.year, key.month)
        if epoch != self.session.epoch:
            logger.info("Discarding allocation result, session moved on")
            return []

        # supersede dashboard batches issued before the generation finished
        self._generation += 1
        self.allocations.replace_all(allocations)
        self.staleness.clear(captured)
        logger.info("Allocations generated for %s: %d dates", key, len(allocations))

        stale_users = await self.api.list_stale_users()
        if epoch == self.session.epoch:
            self.staleness.load(stale_users, keep_after=captured)
        return allocations

    # Holidays

    def select_holiday_month(self, month: int, year: int) -> MonthKey:
        self._require_view(View.HOLIDAY_CALENDAR)
        try:
            self._holiday_month = validate_month(month, year)
        except ValueError as exc:
            raise ValidationError(str(exc)) from None
        return self._holiday_month

    async def update_holidays(self, dates: Iterable[str]) -> List[str]:
        user = self._require_view(View.HOLIDAY_CALENDAR)
        try:
            calendar = HolidayCalendar(dates)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid holiday date: {exc}") from None

        try:
            await self.api.update_holidays(calendar.dates(), user.id)
        except ConflictOrServerError:
            self.holidays.load(await self.api.list_holidays())
            raise
        self.holidays = calendar
        return calendar.dates()

    async def toggle_holiday(self, day: str) -> List[str]:
        """Flip one date and save the resulting holiday list."""
        self._require_view(View.HOLIDAY_CALENDAR)
        try:
            calendar = self.holidays.copy()
            calendar.toggle(day)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid holiday date: {exc}") from None
        return await self.update_holidays(calendar.dates())

    # Settings

    async def update_settings(self, settings: SystemSettings) -> SystemSettings:
        user = self._require_view(View.SETTINGS_MANAGEMENT)
        try:
            await self.api.update_settings(settings, user.id)
        except ConflictOrServerError:
            self.settings = await self.api.get_settings()
            raise
        self.settings = await self.api.get_settings()
        logger.info("System settings updated by %s", user.id)
        return self.settings

    # Users

    async def _user_write(self, write) -> List[User]:
        actor = self.session.require_user()
        try:
            users = await write(actor)
        except ConflictOrServerError:
            await self.users.refresh()
            raise
        refreshed = self.users.get_by_id(actor.id)
        if refreshed is not None and self.session.user is not None:
            self.session.refresh_user(refreshed)
        return users

    async def add_user(self, user: UserCreate) -> List[User]:
        self._require_view(View.USER_MANAGEMENT)
        return await self._user_write(lambda actor: self.users.create(user, actor))

    async def update_user(self, user_id: int, user: UserUpdate) -> List[User]:
        self._require_view(View.USER_MANAGEMENT)
        return await self._user_write(lambda actor: self.users.update(user_id, user, actor))

    async def delete_user(self, user_id: int) -> List[User]:
        self._require_view(View.USER_MANAGEMENT)
        return await self._user_write(lambda actor: self.users.delete(user_id, actor))

    async def update_profile(self, profile: ProfileUpdate) -> List[User]:
        self._require_view(View.PROFILE_EDIT)
        return await self._user_write(lambda actor: self.users.update_profile(profile, actor))
