import asyncio
import json

import httpx
import pytest

from components.api.client import TripPlannerApi
from components.core.exceptions import (
    AuthenticationError,
    ConflictOrServerError,
    ConnectivityError,
)
from components.plan.schemas import PlanSubmission
from components.system_settings.schemas import SystemSettings
from components.user.schemas import Role, UserCreate

BASE_URL = "http://api.test/api"

ALICE_WIRE = {
    "id": 7,
    "name": "Alice",
    "email": "alice@example.com",
    "role": 1,
    "sendEmail": False,
}


def call_api(handler, method, *args, **kwargs):
    """Run one TripPlannerApi call against a mocked transport."""

    async def go():
        transport = httpx.MockTransport(handler)
        async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as client:
            api = TripPlannerApi(client)
            return await getattr(api, method)(*args, **kwargs)

    return asyncio.run(go())


class Recorder:
    """Transport handler that records requests and answers with a fixed response."""

    def __init__(self, status_code=200, payload=None, content=None):
        self.status_code = status_code
        self.payload = payload
        self.content = content
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        if self.payload is None:
            return httpx.Response(self.status_code)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def body(self) -> dict:
        return json.loads(self.last.content)


def test_login_posts_identifier_and_pin():
    handler = Recorder(payload=ALICE_WIRE)

    user = call_api(handler, "login", "alice@example.com", "1234")

    assert handler.last.method == "POST"
    assert handler.last.url.path == "/api/login"
    assert handler.body() == {"identifier": "alice@example.com", "pin": "1234"}
    assert user.id == 7
    assert user.role == Role.User
    assert user.send_email is False


@pytest.mark.parametrize("status_code", [400, 401, 403, 404])
def test_login_rejection_is_authentication_error(status_code):
    with pytest.raises(AuthenticationError):
        call_api(Recorder(status_code, {"message": "nope"}), "login", "alice", "0000")


def test_login_server_failure_is_not_authentication_error():
    with pytest.raises(ConflictOrServerError) as exc_info:
        call_api(Recorder(500, {"message": "boom"}), "login", "alice", "1234")
    assert exc_info.value.status_code == 500


def test_login_without_body_is_rejected():
    with pytest.raises(AuthenticationError):
        call_api(Recorder(200), "login", "alice", "1234")


def test_unreachable_server_is_connectivity_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ConnectivityError):
        call_api(refuse, "list_users")


def test_timeout_is_connectivity_error():
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ConnectivityError):
        call_api(slow, "get_settings")


def test_rejected_write_is_conflict():
    submission = PlanSubmission(user_id=7, month=7, year=2025, selected_days=[1])
    with pytest.raises(ConflictOrServerError) as exc_info:
        call_api(Recorder(409, {"message": "conflict"}), "submit_plan", submission)
    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "HTTP error! status: 409"


def test_list_plans_sends_one_based_month():
    handler = Recorder(
        payload=[{"userId": 7, "userName": "Alice", "month": 7, "year": 2025, "selectedDays": [1, 2]}]
    )

    plans = call_api(handler, "list_plans", 2025, 7)

    assert handler.last.url.path == "/api/plans"
    assert handler.last.url.params["year"] == "2025"
    assert handler.last.url.params["month"] == "7"
    assert plans[0].user_name == "Alice"
    assert plans[0].selected_days == {1, 2}


def test_submit_plan_payload():
    handler = Recorder(status_code=204)
    submission = PlanSubmission(user_id=7, month=7, year=2025, selected_days=[22, 3])

    assert call_api(handler, "submit_plan", submission) is None
    assert handler.body() == {"userId": 7, "month": 7, "year": 2025, "selectedDays": [3, 22]}


def test_generate_allocations_payload_and_parse():
    handler = Recorder(
        payload=[
            {
                "date": "2025-07-02T00:00:00",
                "bookerId": 7,
                "bookerName": "Alice",
                "travelers": [{"id": 7, "name": "Alice"}, {"id": 9, "name": "Dan"}],
                "tripType": "Departure",
            }
        ]
    )

    allocations = call_api(handler, "generate_allocations", 2, 2025, 7)

    assert handler.last.url.path == "/api/allocations/generate"
    assert handler.body() == {"actorUserId": 2, "year": 2025, "month": 7}
    assert allocations[0].date == "2025-07-02"
    assert [t.name for t in allocations[0].travelers] == ["Alice", "Dan"]


def test_list_holidays_normalizes_dates():
    handler = Recorder(payload=["2025-12-25T00:00:00Z", "2025-07-04"])
    assert call_api(handler, "list_holidays") == ["2025-12-25", "2025-07-04"]


def test_update_holidays_sends_actor_as_query_parameter():
    handler = Recorder(status_code=204)

    call_api(handler, "update_holidays", ["2025-07-04"], 2)

    assert handler.last.method == "PUT"
    assert handler.last.url.params["actorUserId"] == "2"
    assert handler.body() == {"holidayDates": ["2025-07-04"]}


def test_create_user_payload_carries_actor():
    handler = Recorder(payload={**ALICE_WIRE, "id": 12})

    created = call_api(
        handler, "create_user", UserCreate(name="Eve", email="", role=Role.User), 1
    )

    assert handler.body() == {
        "name": "Eve",
        "email": None,
        "role": 1,
        "sendEmail": True,
        "actorUserId": 1,
    }
    assert created.id == 12


def test_update_user_with_pin_change():
    handler = Recorder(status_code=204)
    update = UserCreate(name="Alice", email="alice@example.com")

    call_api(handler, "update_user", 7, update, 7, new_pin="5678", current_pin="1234")

    assert handler.last.url.path == "/api/users/7"
    body = handler.body()
    assert body["newPin"] == "5678"
    assert body["currentPin"] == "1234"
    assert body["actorUserId"] == 7


def test_delete_user_no_content():
    handler = Recorder(status_code=204)
    assert call_api(handler, "delete_user", 8) is None
    assert handler.last.method == "DELETE"


def test_update_settings_payload():
    handler = Recorder(status_code=204)
    settings = SystemSettings(trip_price=12.5, user_list_view_enabled=False)

    call_api(handler, "update_settings", settings, 1)

    assert handler.body() == {
        "departureLabel": "Departure",
        "arrivalLabel": "Arrival",
        "tripPrice": 12.5,
        "allocateForCurrentMonth": False,
        "userListViewEnabled": False,
        "actorUserId": 1,
    }


def test_list_stale_users():
    assert call_api(Recorder(payload=["Carol", "Dan"]), "list_stale_users") == ["Carol", "Dan"]
    assert call_api(Recorder(status_code=204), "list_stale_users") == []


def test_malformed_payload_is_server_error():
    with pytest.raises(ConflictOrServerError):
        call_api(Recorder(payload=[{"id": "seven"}]), "list_users")
    with pytest.raises(ConflictOrServerError):
        call_api(Recorder(content=b"<html>oops</html>"), "get_settings")
    with pytest.raises(ConflictOrServerError):
        call_api(Recorder(payload={"not": "a list"}), "list_allocations", 2025, 7)
