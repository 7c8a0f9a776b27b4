"""API tests for the coordinator and availability store applications."""

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from seating.clients.availability_client import AvailabilityClient
from seating.main import create_app
from seating.services.reservation_coordinator import ReservationCoordinator
from seating.services.reservation_store import ReservationStore


async def table_available(availability_test_client, table_id: str) -> bool:
    response = await availability_test_client.get(f"/tables/{table_id}")
    assert response.status_code == 200
    return response.json()["available"]


@pytest.mark.asyncio
async def test_reserve_available_table(test_client, availability_test_client, reserve_payload):
    response = await test_client.post("/v1/reservations", json=reserve_payload("T001", "C200"))

    assert response.status_code == 200
    assert response.json() == {"reservationId": "R3", "status": "success", "tableId": "T001"}
    assert await table_available(availability_test_client, "T001") is False


@pytest.mark.asyncio
async def test_reserve_unavailable_table_joins_waitlist(test_client, reserve_payload):
    response = await test_client.post(
        "/v1/reservations", json=reserve_payload("T002", "C104", preferences=["Window"])
    )

    assert response.status_code == 200
    assert response.json() == {
        "reservationId": None,
        "status": "waitlisted",
        "waitlistMessage": "You are #4 in the queue.",
    }

    waitlist = (await test_client.get("/v1/waitlist/T002")).json()
    assert waitlist["tableId"] == "T002"
    assert [(e["position"], e["customerId"]) for e in waitlist["entries"]] == [
        (1, "C101"), (2, "C102"), (3, "C103"), (4, "C104")
    ]
    assert waitlist["entries"][3]["preferences"] == ["Window"]


@pytest.mark.asyncio
async def test_cancel_promotes_next_customer(test_client, availability_test_client, reserve_payload):
    await test_client.post("/v1/reservations", json=reserve_payload("T001", "C200"))
    await test_client.post("/v1/reservations", json=reserve_payload("T001", "C201"))

    response = await test_client.post(
        "/v1/reservations", json=reserve_payload("T001", "C200", "cancel")
    )

    assert response.status_code == 200
    assert response.json() == {
        "reservationId": "R3",
        "status": "cancelled",
        "tableId": "T001",
        "message": "Reservation cancelled. Customer C201 has been confirmed from the waitlist as R4.",
    }
    assert await table_available(availability_test_client, "T001") is False

    reservations = (await test_client.get("/v1/reservations", params={"tableId": "T001"})).json()
    assert reservations == [
        {"reservationId": "R4", "tableId": "T001", "customerId": "C201", "status": "confirmed"}
    ]


@pytest.mark.asyncio
async def test_cancel_releases_table(test_client, availability_test_client, reserve_payload):
    await test_client.post("/v1/reservations", json=reserve_payload("T003", "C200"))

    response = await test_client.post(
        "/v1/reservations", json=reserve_payload("T003", "C200", "cancel")
    )

    assert response.status_code == 200
    assert response.json() == {
        "reservationId": "R3",
        "status": "cancelled",
        "tableId": "T003",
        "message": "Reservation cancelled and table is now available.",
    }
    assert await table_available(availability_test_client, "T003") is True


@pytest.mark.asyncio
async def test_cancel_removes_from_waitlist_then_not_found(test_client, reserve_payload):
    response = await test_client.post(
        "/v1/reservations", json=reserve_payload("T002", "C101", "cancel")
    )

    assert response.status_code == 200
    assert response.json() == {
        "reservationId": None,
        "status": "cancelled",
        "tableId": "T002",
        "message": "Removed from waitlist.",
    }

    repeat = await test_client.post(
        "/v1/reservations", json=reserve_payload("T002", "C101", "cancel")
    )

    assert repeat.status_code == 404
    problem = repeat.json()
    assert problem["title"] == "Resource Not Found"
    assert problem["detail"] == "Reservation not found for cancellation"
    assert problem["resource_type"] == "reservation"


@pytest.mark.asyncio
async def test_invalid_reservation_type(test_client, reserve_payload):
    response = await test_client.post(
        "/v1/reservations", json=reserve_payload("T001", "C200", "upgrade")
    )

    assert response.status_code == 400
    problem = response.json()
    assert problem["title"] == "Validation Error"
    assert problem["detail"] == "Invalid reservation type"
    assert problem["violations"][0]["path"] == "reservationType"


@pytest.mark.asyncio
async def test_malformed_body_is_problem_details(test_client):
    response = await test_client.post("/v1/reservations", json={"tableId": "T001"})

    assert response.status_code == 400
    problem = response.json()
    assert problem["status"] == 400
    paths = {violation["path"] for violation in problem["violations"]}
    assert "body.customerId" in paths
    assert "body.reservationType" in paths


@pytest.mark.asyncio
async def test_unknown_table(test_client, reserve_payload):
    response = await test_client.post("/v1/reservations", json=reserve_payload("T999", "C200"))

    assert response.status_code == 404
    problem = response.json()
    assert problem["detail"] == "Table not found"
    assert problem["resource_id"] == "T999"


@pytest.mark.asyncio
async def test_upstream_failure_is_bad_gateway(reserve_payload):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "database on fire"})

    client = AvailabilityClient("http://availability", transport=httpx.MockTransport(handler))
    app = create_app(coordinator=ReservationCoordinator(availability=client, store=ReservationStore()))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        response = await test_client.post("/v1/reservations", json=reserve_payload("T001", "C200"))

    await client.aclose()

    assert response.status_code == 502
    problem = response.json()
    assert problem["code"] == "UPSTREAM_UNAVAILABLE"
    assert problem["operation"] == "get_table"
    assert "HTTP 500" in problem["cause"]


@pytest.mark.asyncio
async def test_reconciliation_flow(coordinator, upstream, table_store, reserve_payload):
    """A failed release is reported, listed, and cleared by an operator retry."""
    app = create_app(coordinator=coordinator)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        await client.post("/v1/reservations", json=reserve_payload("T003", "C200"))
        upstream.fail_operations.add("set_table_availability")

        response = await client.post(
            "/v1/reservations", json=reserve_payload("T003", "C200", "cancel")
        )
        assert response.status_code == 502
        problem = response.json()
        assert problem["code"] == "RECONCILIATION_REQUIRED"
        assert problem["retryable"] is False
        assert problem["reservation_id"] == "R3"

        pending = (await client.get("/v1/reconciliations")).json()
        assert [(p["tableId"], p["reservationId"], p["customerId"]) for p in pending] == [
            ("T003", "R3", "C200")
        ]
        assert pending[0]["cause"] == "injected failure"

        still_failing = await client.post("/v1/reconciliations/T003/retry")
        assert still_failing.status_code == 502

        upstream.fail_operations.clear()
        retried = await client.post("/v1/reconciliations/T003/retry")
        assert retried.status_code == 200
        assert retried.json() == {
            "tableId": "T003",
            "resolution": "released",
            "reservationId": None,
            "customerId": None,
        }

        assert (await client.get("/v1/reconciliations")).json() == []
        assert (await client.post("/v1/reconciliations/T003/retry")).status_code == 404

    assert (await table_store.get_table("T003")).available is True


@pytest.mark.asyncio
async def test_request_id_echoed(test_client, reserve_payload):
    response = await test_client.post(
        "/v1/reservations",
        json=reserve_payload("T001", "C200"),
        headers={"X-Request-ID": "abc-123"},
    )
    assert response.headers["X-Request-ID"] == "abc-123"

    generated = await test_client.get("/health")
    assert generated.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_list_tables(availability_test_client):
    response = await availability_test_client.get("/tables")

    assert response.status_code == 200
    assert response.json()[0] == {
        "tableId": "T001", "capacity": 4, "location": "Window", "available": True
    }
    assert len(response.json()) == 4


@pytest.mark.asyncio
async def test_get_unknown_table(availability_test_client):
    response = await availability_test_client.get("/tables/T999")

    assert response.status_code == 404
    assert response.json()["detail"] == "Table not found"


@pytest.mark.asyncio
async def test_update_availability(availability_test_client):
    response = await availability_test_client.put("/tables/T002", json={"available": True})

    assert response.status_code == 200
    assert response.json() == {
        "tableId": "T002", "capacity": 2, "location": "Corner", "available": True
    }


@pytest.mark.asyncio
async def test_update_availability_rejects_non_boolean(availability_test_client):
    response = await availability_test_client.put("/tables/T001", json={"available": "yes"})

    assert response.status_code == 400
    assert response.json()["violations"][0]["path"] == "body.available"
    assert (await availability_test_client.get("/tables/T001")).json()["available"] is True
