"""View models rendered by each routed dashboard view."""

from typing import List, Optional
from pydantic import BaseModel

from components.allocation.schemas import Allocation, MonthlyExpense, ScheduleEntry
from components.allocation.store import AllocationStore
from components.cycle.service import MonthKey, month_title
from components.holiday.calendar import HolidayCalendar
from components.plan.schemas import PlanView
from components.plan.store import PlanStore
from components.staleness.tracker import StalenessTracker
from components.system_settings.schemas import SystemSettings
from components.user.schemas import User, UserPublic


class UserDashboard(BaseModel):
    """Trip planning view of a regular user."""
    user: UserPublic
    month: int
    year: int
    month_title: str
    selected_days: List[int]
    plan_submitted: bool
    holidays: List[int]
    schedule: List[ScheduleEntry]
    expense: MonthlyExpense
    departure_label: str
    arrival_label: str


class StalenessBanner(BaseModel):
    visible: bool
    user_names: List[str]


class AdminDashboard(BaseModel):
    """Allocation review view of the allocation admin."""
    month: int
    year: int
    month_title: str
    plans: List[PlanView]
    allocations: List[Allocation]
    banner: StalenessBanner
    can_allocate: bool
    departure_label: str
    arrival_label: str


class HolidayDashboard(BaseModel):
    """Holiday calendar view of the allocation admin."""
    month: int
    year: int
    month_title: str
    days: List[int]
    all_dates: List[str]


class ManagedUser(UserPublic):
    deletable: bool


class SystemAdminDashboard(BaseModel):
    """User and settings management view of the system admin."""
    users: List[ManagedUser]
    settings: Optional[SystemSettings] = None


def user_dashboard(
    user: User,
    key: MonthKey,
    plans: PlanStore,
    allocations: AllocationStore,
    settings: SystemSettings,
    holidays: HolidayCalendar,
) -> UserDashboard:
    plan = plans.find_for(user.id, key.month, key.year)
    return UserDashboard(
        user=UserPublic.from_user(user),
        month=key.month,
        year=key.year,
        month_title=month_title(key),
        selected_days=plan.sorted_days if plan else [],
        plan_submitted=plan is not None,
        holidays=holidays.days_in(key.month, key.year),
        schedule=allocations.schedule_for(user.id, key.month, key.year),
        expense=allocations.monthly_expense(user.id, key.month, key.year, settings.trip_price),
        departure_label=settings.departure_label,
        arrival_label=settings.arrival_label,
    )


def staleness_banner(staleness: StalenessTracker) -> StalenessBanner:
    names = staleness.ordered()
    return StalenessBanner(visible=bool(names), user_names=names)


def admin_dashboard(
    key: MonthKey,
    plans: PlanStore,
    allocations: AllocationStore,
    staleness: StalenessTracker,
    settings: SystemSettings,
) -> AdminDashboard:
    submitted = plans.all_submitted_for(key.month, key.year)
    return AdminDashboard(
        month=key.month,
        year=key.year,
        month_title=month_title(key),
        plans=[PlanView.from_plan(plan) for plan in submitted],
        allocations=allocations.all(),
        banner=staleness_banner(staleness),
        can_allocate=bool(submitted),
        departure_label=settings.departure_label,
        arrival_label=settings.arrival_label,
    )


def holiday_dashboard(key: MonthKey, holidays: HolidayCalendar) -> HolidayDashboard:
    return HolidayDashboard(
        month=key.month,
        year=key.year,
        month_title=month_title(key),
        days=holidays.days_in(key.month, key.year),
        all_dates=holidays.dates(),
    )


def system_admin_dashboard(
    current_user: User, users: List[User], settings: Optional[SystemSettings]
) -> SystemAdminDashboard:
    managed = [
        ManagedUser(**UserPublic.from_user(user).model_dump(), deletable=user.id != current_user.id)
        for user in users
    ]
    return SystemAdminDashboard(users=managed, settings=settings)
