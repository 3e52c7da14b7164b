"""Error taxonomy shared by the planner core and the REST layer."""


class TripPlannerError(Exception):
    """Base error for the trip planner."""

    default_message = "Trip planner error"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ConnectivityError(TripPlannerError):
    """The remote API could not be reached."""

    default_message = "Could not connect to the server. Please ensure the backend API is running."


class AuthenticationError(TripPlannerError):
    """Identifier or PIN was rejected."""

    default_message = "Invalid credentials. Please check your details and try again."


class ValidationError(TripPlannerError):
    """Input rejected locally, before any network call."""

    default_message = "Invalid input"


class ConflictOrServerError(TripPlannerError):
    """The server rejected a request or returned something unusable."""

    default_message = "The server rejected the request"

    def __init__(self, message: str = None, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class SessionStateError(TripPlannerError):
    """Operation is not valid in the current session state."""

    default_message = "Operation not allowed in the current session state"


class PermissionDeniedError(TripPlannerError):
    """The authenticated role cannot open the requested view."""

    default_message = "This action is not available to your role"


class UnknownRoleError(TripPlannerError):
    """A role outside the closed role set reached the dispatcher."""

    default_message = "Unknown user role"

    def __init__(self, role=None):
        super().__init__(f"Unknown user role: {role!r}")
        self.role = role
