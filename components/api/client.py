"""Async client for the remote Trip Planner API."""

import logging
from typing import Any, Iterable, List, Optional

import httpx
import pydantic

from components.allocation import schemas as allocation_schemas
from components.core.config import get_settings
from components.core.exceptions import (
    AuthenticationError,
    ConflictOrServerError,
    ConnectivityError,
)
from components.cycle.service import parse_iso_date
from components.holiday.schemas import HolidayUpdate
from components.plan import schemas as plan_schemas
from components.system_settings.schemas import SystemSettings
from components.user import schemas as user_schemas

logger = logging.getLogger(__name__)

# Statuses the login endpoint uses for a rejected identifier or PIN
AUTH_FAILURE_STATUSES = (400, 401, 403, 404)


class TripPlannerApi:
    """
    Thin wrapper around the remote API.

    Transport failures become ConnectivityError, rejected requests become
    ConflictOrServerError (AuthenticationError for the login call) and
    responses are parsed into the component schemas.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        """Initialize the API wrapper with an optional preconfigured client."""
        if client is None:
            settings = get_settings()
            client = httpx.AsyncClient(
                base_url=settings.API_BASE_URL,
                timeout=settings.API_TIMEOUT_SECONDS,
                headers={"Content-Type": "application/json"},
            )
        self.client = client

    async def close(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, endpoint: str, *, auth: bool = False, **kwargs) -> Any:
        try:
            response = await self.client.request(method, endpoint, **kwargs)
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            logger.error("API call %s %s failed: %s", method, endpoint, exc)
            raise ConnectivityError() from exc

        if response.is_error:
            logger.error(
                "HTTP error! status: %s endpoint: %s response: %s",
                response.status_code, endpoint, response.text,
            )
            if auth and response.status_code in AUTH_FAILURE_STATUSES:
                raise AuthenticationError()
            raise ConflictOrServerError(
                f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )

        # 'No Content' responses (like for DELETE)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ConflictOrServerError(f"Malformed response from {endpoint}") from exc

    @staticmethod
    def _parse(model, data: Any):
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as exc:
            logger.error("Unexpected %s payload: %s", model.__name__, exc)
            raise ConflictOrServerError(f"Malformed {model.__name__} in response") from exc

    def _parse_list(self, model, data: Any) -> list:
        if data is None:
            return []
        if not isinstance(data, list):
            raise ConflictOrServerError(f"Expected a list of {model.__name__}")
        return [self._parse(model, item) for item in data]

    # Auth

    async def login(self, identifier: str, pin: str) -> user_schemas.User:
        """Verify an identifier (name or email) and PIN."""
        data = await self._request(
            "POST", "/login", auth=True, json={"identifier": identifier, "pin": pin}
        )
        if data is None:
            raise AuthenticationError()
        return self._parse(user_schemas.User, data)

    # Users

    async def list_users(self) -> List[user_schemas.User]:
        return self._parse_list(user_schemas.User, await self._request("GET", "/users"))

    async def create_user(self, user: user_schemas.UserCreate, actor_id: int) -> Optional[user_schemas.User]:
        payload = user.to_wire()
        payload["actorUserId"] = actor_id
        data = await self._request("POST", "/users", json=payload)
        return self._parse(user_schemas.User, data) if data else None

    async def update_user(
        self,
        user_id: int,
        user: user_schemas.UserUpdate,
        actor_id: int,
        new_pin: Optional[str] = None,
        current_pin: Optional[str] = None,
    ) -> None:
        payload = user.to_wire()
        payload["actorUserId"] = actor_id
        if new_pin:
            payload["newPin"] = new_pin
        if current_pin:
            payload["currentPin"] = current_pin
        await self._request("PUT", f"/users/{user_id}", json=payload)

    async def delete_user(self, user_id: int) -> None:
        await self._request("DELETE", f"/users/{user_id}")

    # Plans

    async def list_plans(self, year: int, month: int) -> List[plan_schemas.Plan]:
        data = await self._request("GET", "/plans", params={"year": year, "month": month})
        return self._parse_list(plan_schemas.Plan, data)

    async def submit_plan(self, plan: plan_schemas.PlanSubmission) -> None:
        await self._request("POST", "/plans", json=plan.to_wire())

    async def list_stale_users(self) -> List[str]:
        """Names of users who updated their plan after the last generation."""
        data = await self._request("GET", "/plan-updates")
        if data is None:
            return []
        if not isinstance(data, list):
            raise ConflictOrServerError("Expected a list of user names")
        return [str(name) for name in data]

    # Allocations

    async def list_allocations(self, year: int, month: int) -> List[allocation_schemas.Allocation]:
        data = await self._request("GET", "/allocations", params={"year": year, "month": month})
        return self._parse_list(allocation_schemas.Allocation, data)

    async def generate_allocations(
        self, actor_id: int, year: int, month: int
    ) -> List[allocation_schemas.Allocation]:
        request = allocation_schemas.GenerateAllocationsRequest(
            actor_user_id=actor_id, year=year, month=month
        )
        data = await self._request("POST", "/allocations/generate", json=request.to_wire())
        return self._parse_list(allocation_schemas.Allocation, data)

    # Holidays

    async def list_holidays(self) -> List[str]:
        data = await self._request("GET", "/holidays")
        if data is None:
            return []
        try:
            return [parse_iso_date(value).isoformat() for value in data]
        except (TypeError, ValueError, AttributeError) as exc:
            raise ConflictOrServerError("Malformed holiday list in response") from exc

    async def update_holidays(self, dates: Iterable[str], actor_id: int) -> None:
        # actor id travels as a query parameter, the dates as a JSON object
        body = HolidayUpdate(holiday_dates=list(dates))
        await self._request(
            "PUT", "/holidays", params={"actorUserId": actor_id}, json=body.to_wire()
        )

    # Settings

    async def get_settings(self) -> SystemSettings:
        return self._parse(SystemSettings, await self._request("GET", "/settings"))

    async def update_settings(self, settings: SystemSettings, actor_id: int) -> None:
        payload = settings.to_wire()
        payload["actorUserId"] = actor_id
        await self._request("PUT", "/settings", json=payload)
