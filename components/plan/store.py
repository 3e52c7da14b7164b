"""In-memory, session scoped store of submitted plans."""

import logging
from typing import Iterable, List, Optional

from components.allocation.store import AllocationStore
from components.cycle.service import validate_month
from components.plan.schemas import Plan
from components.staleness.tracker import StalenessTracker

logger = logging.getLogger(__name__)


class PlanStore:
    """
    Plans keyed by (user_id, month, year).

    Entries are kept in arrival order. Duplicates for one key are tolerated;
    lookups return the most recently stored one.
    """

    def __init__(
        self,
        allocations: Optional[AllocationStore] = None,
        staleness: Optional[StalenessTracker] = None,
    ):
        self._plans: List[Plan] = []
        self._allocations = allocations
        self._staleness = staleness

    def load(self, plans: Iterable[Plan]) -> None:
        """Replace the contents with a fetched batch."""
        self._plans = list(plans)

    def upsert(self, plan: Plan) -> Optional[Plan]:
        """
        Insert or fully replace the plan for its key.

        A replacement that lands in a month already covered by the current
        allocation batch marks the owner as stale.

        Returns:
            The replaced plan, or None if this was the first plan for the key
        """
        previous = self.find_for(plan.user_id, plan.month, plan.year)
        self._plans = [stored for stored in self._plans if stored.key != plan.key]
        self._plans.append(plan)

        if previous is not None and self._covered(plan):
            user_name = plan.user_name or previous.user_name
            if self._staleness is not None and user_name:
                self._staleness.mark_dirty(user_name)
        return previous

    def _covered(self, plan: Plan) -> bool:
        if self._allocations is None:
            return False
        return self._allocations.covers(plan.month, plan.year)

    def find_for(self, user_id: int, month: int, year: int) -> Optional[Plan]:
        """Get the plan of a user for a month."""
        key = (user_id, *validate_month(month, year))
        for plan in reversed(self._plans):
            if plan.key == key:
                return plan
        return None

    def all_submitted_for(self, month: int, year: int) -> List[Plan]:
        """Plans for a month in arrival order."""
        key = validate_month(month, year)
        latest = {}
        for index, plan in enumerate(self._plans):
            if plan.month_key == key:
                latest[plan.user_id] = index
        return [self._plans[index] for index in sorted(latest.values())]

    def __len__(self) -> int:
        return len(self._plans)
