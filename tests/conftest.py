"""Shared fixtures: an in-memory stand-in for the remote Trip Planner API."""

from datetime import date
from typing import Dict, List, Optional

import pytest

from components.allocation.schemas import Allocation, Traveler
from components.core.exceptions import AuthenticationError, ConflictOrServerError
from components.plan.schemas import Plan
from components.planner.service import TripPlanner
from components.system_settings.schemas import SystemSettings
from components.user.schemas import Role, User

# allocate_for_current_month is off in the default settings: July 2025 is open
TODAY = date(2025, 6, 10)


def make_allocation(day: str, booker: User, *travelers: User, trip_type: str = None) -> Allocation:
    people = travelers or (booker,)
    return Allocation(
        date=day,
        booker_id=booker.id,
        booker_name=booker.name,
        travelers=[Traveler(id=person.id, name=person.name) for person in people],
        trip_type=trip_type,
    )


class FakeApi:
    """Records every call and answers from in-memory state."""

    def __init__(self):
        self.users: Dict[int, User] = {
            1: User(id=1, name="Sam Admin", email="sam@example.com", role=Role.SystemAdmin, pin="9999"),
            2: User(id=2, name="Carol", email="carol@example.com", role=Role.AllocationAdmin, pin="2222"),
            7: User(id=7, name="Alice", email="alice@example.com", role=Role.User, pin="1234"),
            8: User(id=8, name="Bob", email=None, role=Role.User, pin="1234"),
            9: User(id=9, name="Dan", email="dan@example.com", role=Role.User, pin="4321"),
        }
        self.settings = SystemSettings(
            departure_label="Departure",
            arrival_label="Arrival",
            trip_price=250,
            allocate_for_current_month=False,
            user_list_view_enabled=True,
        )
        self.plans: List[Plan] = []
        self.allocations: List[Allocation] = []
        self.holidays: List[str] = ["2025-07-04T00:00:00.000Z"]
        self.stale: List[str] = []
        self.generated: List[Allocation] = []
        # whether /plan-updates picks up resubmissions into allocated months
        self.reports_stale = True
        self.calls: List[tuple] = []
        self.failures: Dict[str, Exception] = {}
        self.closed = False
        self._next_id = 100

    def _record(self, name: str, *args):
        self.calls.append((name, *args))
        failure = self.failures.get(name)
        if failure is not None:
            raise failure

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    def names(self) -> List[str]:
        return [call[0] for call in self.calls]

    async def close(self):
        self.closed = True

    async def login(self, identifier: str, pin: str) -> User:
        self._record("login", identifier)
        needle = identifier.lower()
        for user in self.users.values():
            matches = user.name.lower() == needle or (user.email or "").lower() == needle
            if matches and user.pin == pin:
                return user
        raise AuthenticationError()

    async def list_users(self) -> List[User]:
        self._record("list_users")
        return list(self.users.values())

    async def create_user(self, user, actor_id: int) -> User:
        self._record("create_user", actor_id)
        self._next_id += 1
        created = User(id=self._next_id, pin="0000", **user.model_dump())
        self.users[created.id] = created
        return created

    async def update_user(self, user_id, user, actor_id, new_pin=None, current_pin=None) -> None:
        self._record("update_user", user_id, actor_id, new_pin, current_pin)
        existing = self.users.get(user_id)
        if existing is None:
            raise ConflictOrServerError("HTTP error! status: 404", status_code=404)
        if new_pin and existing.pin != current_pin:
            raise ConflictOrServerError("HTTP error! status: 400", status_code=400)
        self.users[user_id] = User(id=user_id, pin=new_pin or existing.pin, **user.model_dump())

    async def delete_user(self, user_id: int) -> None:
        self._record("delete_user", user_id)
        self.users.pop(user_id, None)

    async def list_plans(self, year: int, month: int) -> List[Plan]:
        self._record("list_plans", year, month)
        return [plan for plan in self.plans if (plan.year, plan.month) == (year, month)]

    async def submit_plan(self, plan) -> None:
        self._record("submit_plan", plan.user_id, plan.month, plan.year)
        user = self.users[plan.user_id]
        replaced = any(stored.key == plan.key for stored in self.plans)
        self.plans = [stored for stored in self.plans if stored.key != plan.key]
        self.plans.append(Plan(**plan.model_dump(), user_name=user.name))
        covered = any(
            allocation.month_key == (plan.month, plan.year) for allocation in self.allocations
        )
        if self.reports_stale and replaced and covered and user.name not in self.stale:
            self.stale.append(user.name)

    async def list_allocations(self, year: int, month: int) -> List[Allocation]:
        self._record("list_allocations", year, month)
        return [a for a in self.allocations if a.month_key == (month, year)]

    async def generate_allocations(self, actor_id: int, year: int, month: int) -> List[Allocation]:
        self._record("generate_allocations", actor_id, year, month)
        self.allocations = list(self.generated)
        self.stale = []
        return list(self.generated)

    async def list_holidays(self) -> List[str]:
        self._record("list_holidays")
        return [value.split("T")[0] for value in self.holidays]

    async def update_holidays(self, dates, actor_id: int) -> None:
        self._record("update_holidays", actor_id)
        self.holidays = list(dates)

    async def get_settings(self) -> SystemSettings:
        self._record("get_settings")
        return self.settings.model_copy()

    async def update_settings(self, settings: SystemSettings, actor_id: int) -> None:
        self._record("update_settings", actor_id)
        # the server rounds prices to whole units
        self.settings = settings.model_copy(update={"trip_price": float(round(settings.trip_price))})

    async def list_stale_users(self) -> List[str]:
        self._record("list_stale_users")
        return list(self.stale)


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def make_planner(fake_api):
    def factory(today: date = TODAY, max_pin_attempts: Optional[int] = 3) -> TripPlanner:
        return TripPlanner(fake_api, today=lambda: today, max_pin_attempts=max_pin_attempts)

    return factory


@pytest.fixture
def planner(make_planner) -> TripPlanner:
    return make_planner()
