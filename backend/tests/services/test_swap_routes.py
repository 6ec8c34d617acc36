"""Swap Routes — HTTP surface of the lifecycle: status codes and error shape.

Invariants:
    - Domain errors map to their HTTP status with the structured error body
    - Invalid payloads are 400 VALIDATION_ERROR, never reach the service
"""

from uuid import uuid4

import pytest


@pytest.fixture
async def parties(make_user, make_product):
    alice = await make_user("alice")
    bob = await make_user("bob")
    return {
        "alice": alice,
        "bob": bob,
        "guitar": await make_product(alice, "Guitar"),
        "bike": await make_product(bob, "Bike"),
    }


async def _create(client, parties, **overrides):
    body = {
        "requester_id": str(parties["bob"]),
        "product_id": str(parties["guitar"]),
        "offered_product_id": str(parties["bike"]),
        "message": "Swap?",
    }
    body.update(overrides)
    return await client.post("/api/v1/swap-requests", json=body)


async def test_create_swap_request(client, parties):
    res = await _create(client, parties)
    assert res.status_code == 201
    data = res.json()
    assert data["status"] == "PENDING"
    assert data["is_terminal"] is False
    assert data["offered_product_id"] == str(parties["bike"])

    fetched = await client.get(f"/api/v1/swap-requests/{data['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["message"] == "Swap?"


async def test_self_swap_returns_400(client, parties):
    res = await _create(
        client, parties,
        requester_id=str(parties["alice"]), offered_product_id=None,
    )
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "SELF_SWAP"
    assert error["category"] == "validation"


async def test_invalid_payload_returns_400(client, parties):
    res = await _create(client, parties, product_id="not-a-uuid")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_unknown_request_returns_404(client):
    res = await client.get(f"/api/v1/swap-requests/{uuid4()}")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_full_lifecycle_over_http(client, events, parties):
    request_id = (await _create(client, parties)).json()["id"]

    res = await client.post(
        f"/api/v1/swap-requests/{request_id}/respond", json={"decision": "accept"},
    )
    assert res.status_code == 200
    transaction = res.json()["transaction"]
    assert transaction["status"] == "PENDING"
    assert {transaction["user1_id"], transaction["user2_id"]} == {
        str(parties["alice"]), str(parties["bob"]),
    }

    res = await client.post(f"/api/v1/swap-transactions/{transaction['id']}/confirm")
    assert res.json()["status"] == "ACCEPTED"

    res = await client.post(f"/api/v1/swap-transactions/{transaction['id']}/complete")
    assert res.status_code == 200
    assert res.json()["status"] == "COMPLETED"
    assert res.json()["completed_at"] is not None

    res = await client.get(f"/api/v1/swap-requests/{request_id}")
    assert res.json()["status"] == "COMPLETED"
    assert events.types == [
        "swap_requested", "swap_accepted", "swap_completed",
    ]


async def test_reject_then_accept_returns_422(client, parties):
    request_id = (await _create(client, parties)).json()["id"]
    res = await client.post(
        f"/api/v1/swap-requests/{request_id}/respond", json={"decision": "reject"},
    )
    assert res.json()["request"]["status"] == "REJECTED"
    assert res.json()["request"]["is_terminal"] is True

    res = await client.post(
        f"/api/v1/swap-requests/{request_id}/respond", json={"decision": "accept"},
    )
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "ILLEGAL_TRANSITION"


async def test_unknown_decision_returns_400(client, parties):
    request_id = (await _create(client, parties)).json()["id"]
    res = await client.post(
        f"/api/v1/swap-requests/{request_id}/respond", json={"decision": "maybe"},
    )
    assert res.status_code == 400


async def test_cancel_swap(client, parties):
    request_id = (await _create(client, parties)).json()["id"]
    res = await client.post(f"/api/v1/swaps/{request_id}/cancel")
    assert res.status_code == 200
    assert res.json() == {"message": "Swap cancelled"}

    res = await client.post(f"/api/v1/swaps/{request_id}/cancel")
    assert res.status_code == 422


async def test_held_product_returns_400(client, make_user, parties):
    carol = await make_user("carol")
    first = (await _create(client, parties)).json()["id"]
    second = (await _create(
        client, parties, requester_id=str(carol), offered_product_id=None,
    )).json()["id"]

    await client.post(
        f"/api/v1/swap-requests/{first}/respond", json={"decision": "accept"},
    )
    res = await client.post(
        f"/api/v1/swap-requests/{second}/respond", json={"decision": "accept"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "PRODUCT_UNAVAILABLE"


async def test_list_user_swap_requests(client, make_user, parties):
    carol = await make_user("carol")
    first = (await _create(client, parties)).json()["id"]
    second = (await _create(
        client, parties, requester_id=str(carol), offered_product_id=None,
    )).json()["id"]
    await client.post(
        f"/api/v1/swap-requests/{second}/respond", json={"decision": "reject"},
    )

    res = await client.get(f"/api/v1/users/{parties['alice']}/swap-requests")
    assert res.status_code == 200
    assert {r["id"] for r in res.json()} == {first, second}

    res = await client.get(
        f"/api/v1/users/{parties['alice']}/swap-requests",
        params={"role": "incoming", "status": "PENDING"},
    )
    assert [r["id"] for r in res.json()] == [first]

    res = await client.get(
        f"/api/v1/users/{carol}/swap-requests", params={"role": "outgoing"},
    )
    data = res.json()
    assert [r["id"] for r in data] == [second]
    assert data[0]["is_terminal"] is True


async def test_list_swap_requests_errors(client, parties):
    res = await client.get(f"/api/v1/users/{uuid4()}/swap-requests")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"

    res = await client.get(
        f"/api/v1/users/{parties['bob']}/swap-requests", params={"role": "sideways"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"

async def test_health_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"
