"""Role based dispatch of dashboard views."""

from enum import Enum
from typing import Dict, Optional, Tuple

from components.core.exceptions import UnknownRoleError
from components.user.schemas import Role


class View(str, Enum):
    TRIP_PLANNING = "trip_planning"
    PROFILE_EDIT = "profile_edit"
    ALLOCATIONS_REVIEW = "allocations_review"
    HOLIDAY_CALENDAR = "holiday_calendar"
    USER_MANAGEMENT = "user_management"
    SETTINGS_MANAGEMENT = "settings_management"


# First entry of each tuple is the role's landing view
ROLE_VIEWS: Dict[Role, Tuple[View, ...]] = {
    Role.User: (View.TRIP_PLANNING, View.PROFILE_EDIT),
    Role.AllocationAdmin: (View.ALLOCATIONS_REVIEW, View.HOLIDAY_CALENDAR),
    Role.SystemAdmin: (View.USER_MANAGEMENT, View.SETTINGS_MANAGEMENT),
}


class DashboardRouter:
    """Maps (role, sub-view selection) to the active view."""

    def __init__(self, table: Dict[Role, Tuple[View, ...]] = None):
        self._table = dict(table or ROLE_VIEWS)

    def views_for(self, role) -> Tuple[View, ...]:
        """Get the views a role can open. Unknown roles are fatal."""
        try:
            role = Role(role)
        except ValueError:
            raise UnknownRoleError(role) from None
        views = self._table.get(role)
        if views is None:
            raise UnknownRoleError(role)
        return views

    def resolve(self, role, selection: Optional[View] = None) -> View:
        """
        Get the active view for a role.

        Args:
            role: The authenticated user's role
            selection: The requested sub-view, or None for the landing view

        Raises:
            UnknownRoleError: role outside the defined set
            ValueError: selection is not one of the role's views
        """
        views = self.views_for(role)
        if selection is None:
            return views[0]
        selection = View(selection)
        if selection not in views:
            raise ValueError(f"View {selection.value} is not available to role {Role(role).name}")
        return selection

    def allows(self, role, view: View) -> bool:
        return View(view) in self.views_for(role)
