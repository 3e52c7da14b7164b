"""In-memory store for the current allocation batch."""

import logging
from typing import Iterable, List, Tuple

from components.allocation import schemas
from components.cycle.service import validate_month

logger = logging.getLogger(__name__)


class AllocationStore:
    """
    Holds the allocation batch of the latest generation run.

    Allocations are never edited one by one: each generation replaces the
    whole batch.
    """

    def __init__(self):
        self._allocations: Tuple[schemas.Allocation, ...] = ()

    def replace_all(self, allocations: Iterable[schemas.Allocation]) -> None:
        """Discard the prior batch and keep the given one."""
        batch = tuple(allocations)
        self._allocations = batch
        logger.debug("Allocation batch replaced (%d dates)", len(batch))

    def all(self) -> List[schemas.Allocation]:
        """All allocations in ascending date order."""
        return sorted(self._allocations, key=lambda allocation: allocation.date)

    def for_user(self, user_id: int) -> List[schemas.Allocation]:
        """Allocations the user travels on, ascending by date."""
        return sorted(
            (allocation for allocation in self._allocations if allocation.includes(user_id)),
            key=lambda allocation: allocation.date,
        )

    def for_month(self, month: int, year: int) -> List[schemas.Allocation]:
        """Allocations dated within a month (1..12), ascending by date."""
        key = validate_month(month, year)
        return sorted(
            (allocation for allocation in self._allocations if allocation.month_key == key),
            key=lambda allocation: allocation.date,
        )

    def covers(self, month: int, year: int) -> bool:
        """Check whether the current batch has any date in the month."""
        key = validate_month(month, year)
        return any(allocation.month_key == key for allocation in self._allocations)

    def user_month(self, user_id: int, month: int, year: int) -> List[schemas.Allocation]:
        """Allocations of one user within one month."""
        key = validate_month(month, year)
        return [allocation for allocation in self.for_user(user_id) if allocation.month_key == key]

    def monthly_expense(
        self, user_id: int, month: int, year: int, trip_price: float
    ) -> schemas.MonthlyExpense:
        """
        Get the trip cost of a user for a month.

        Computed from the current batch on every call: the number of the
        user's allocated dates in the month times the trip price.
        """
        trips = len(self.user_month(user_id, month, year))
        return schemas.MonthlyExpense(
            month=month,
            year=year,
            trips=trips,
            trip_price=trip_price,
            total=trips * trip_price,
        )

    def schedule_for(self, user_id: int, month: int, year: int) -> List[schemas.ScheduleEntry]:
        """Get the user's personal schedule for a month."""
        return [
            schemas.ScheduleEntry(
                date=allocation.date,
                trip_type=allocation.trip_type,
                booker_id=allocation.booker_id,
                booker_name=allocation.booker_name,
                is_booker=allocation.booker_id == user_id,
                companions=[
                    traveler.name for traveler in allocation.travelers if traveler.id != user_id
                ],
            )
            for allocation in self.user_month(user_id, month, year)
        ]

    def __len__(self) -> int:
        return len(self._allocations)
