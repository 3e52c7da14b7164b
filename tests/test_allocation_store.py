import pydantic
import pytest

from components.allocation.schemas import Allocation, Traveler
from components.allocation.store import AllocationStore
from components.user.schemas import User
from tests.conftest import make_allocation

ALICE = User(id=7, name="Alice")
BOB = User(id=8, name="Bob")
DAN = User(id=9, name="Dan")


@pytest.fixture
def store():
    allocations = AllocationStore()
    allocations.replace_all(
        [
            make_allocation("2025-07-10", BOB, BOB, ALICE, trip_type="Arrival"),
            make_allocation("2025-07-02", ALICE, ALICE, DAN, trip_type="Departure"),
            make_allocation("2025-07-21", ALICE, ALICE),
            make_allocation("2025-08-01", ALICE, ALICE),
            make_allocation("2025-07-15", DAN, DAN),
        ]
    )
    return allocations


def test_replace_all_is_idempotent(store):
    batch = store.all()
    store.replace_all(batch)
    first = store.all()
    store.replace_all(batch)

    assert store.all() == first
    assert len(store) == 5


def test_replace_all_discards_previous_batch(store):
    store.replace_all([make_allocation("2025-09-01", BOB)])

    assert [a.date for a in store.all()] == ["2025-09-01"]
    assert store.for_user(ALICE.id) == []


def test_for_user_is_sorted_by_date(store):
    dates = [a.date for a in store.for_user(ALICE.id)]
    assert dates == ["2025-07-02", "2025-07-10", "2025-07-21", "2025-08-01"]


def test_for_month_uses_one_based_months(store):
    assert [a.date for a in store.for_month(8, 2025)] == ["2025-08-01"]
    assert len(store.for_month(7, 2025)) == 4
    assert store.for_month(6, 2025) == []
    with pytest.raises(ValueError):
        store.for_month(0, 2025)


def test_covers(store):
    assert store.covers(7, 2025)
    assert not store.covers(7, 2024)


def test_monthly_expense_multiplies_trips_by_price(store):
    expense = store.monthly_expense(ALICE.id, 7, 2025, 250)

    assert expense.trips == 3
    assert expense.total == 750


def test_monthly_expense_without_trips_is_zero(store):
    expense = store.monthly_expense(BOB.id, 8, 2025, 250)
    assert expense.trips == 0
    assert expense.total == 0


def test_schedule_marks_booker_and_companions(store):
    schedule = store.schedule_for(ALICE.id, 7, 2025)

    assert [entry.date for entry in schedule] == ["2025-07-02", "2025-07-10", "2025-07-21"]
    first, second, third = schedule
    assert first.is_booker and first.companions == ["Dan"]
    assert first.trip_type == "Departure"
    assert not second.is_booker and second.booker_name == "Bob"
    assert second.companions == ["Bob"]
    assert third.companions == [] and third.trip_type is None


def test_allocation_parses_wire_payload_with_timestamp():
    allocation = Allocation.model_validate(
        {
            "date": "2025-07-02T00:00:00",
            "bookerId": 7,
            "bookerName": "Alice",
            "travelers": [{"id": 7, "name": "Alice"}],
            "tripType": "",
        }
    )
    assert allocation.date == "2025-07-02"
    assert allocation.month_key == (7, 2025)
    assert allocation.trip_type is None


def test_allocation_requires_a_traveler():
    with pytest.raises(pydantic.ValidationError):
        Allocation(date="2025-07-02", booker_id=7, booker_name="Alice", travelers=[])


def test_includes():
    allocation = Allocation(
        date="2025-07-02",
        booker_id=7,
        booker_name="Alice",
        travelers=[Traveler(id=7, name="Alice"), Traveler(id=9, name="Dan")],
    )
    assert allocation.includes(9)
    assert not allocation.includes(8)
