"""Review & Message Routes — eligibility, submission, messaging and notification reads."""

import pytest

from swapmarket.core.domain_types import SwapDecision
from swapmarket.infrastructure.notification_emitter import NotificationEmitter


@pytest.fixture
async def completed_swap(swap_service, make_user, make_product):
    alice = await make_user("alice")
    bob = await make_user("bob")
    guitar = await make_product(alice, "Guitar")
    request = await swap_service.create_swap_request(bob, guitar)
    transaction = await swap_service.respond_to_swap_request(
        request.id, SwapDecision.ACCEPT,
    )
    await swap_service.complete_swap(transaction.id)
    return {"alice": alice, "bob": bob, "guitar": guitar}


def _review_body(swap, **overrides):
    body = {
        "reviewer_id": str(swap["bob"]),
        "reviewee_id": str(swap["alice"]),
        "product_id": str(swap["guitar"]),
        "rating": 5,
        "comment": "  Smooth swap  ",
    }
    body.update(overrides)
    return body


async def test_eligibility_endpoint(client, completed_swap):
    params = {
        "reviewer_id": str(completed_swap["bob"]),
        "reviewee_id": str(completed_swap["alice"]),
        "product_id": str(completed_swap["guitar"]),
    }
    res = await client.get("/api/v1/reviews/eligibility", params=params)
    assert res.json() == {"eligible": True, "reason": None}

    await client.post("/api/v1/reviews", json=_review_body(completed_swap))
    res = await client.get("/api/v1/reviews/eligibility", params=params)
    assert res.json() == {"eligible": False, "reason": "DUPLICATE_REVIEW"}


async def test_submit_review(client, completed_swap):
    res = await client.post("/api/v1/reviews", json=_review_body(completed_swap))
    assert res.status_code == 201
    assert res.json()["comment"] == "Smooth swap"

    res = await client.post("/api/v1/reviews", json=_review_body(completed_swap))
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "DUPLICATE_REVIEW"


async def test_review_rating_out_of_range(client, completed_swap):
    res = await client.post(
        "/api/v1/reviews", json=_review_body(completed_swap, rating=6),
    )
    assert res.status_code == 400


async def test_review_without_swap_returns_422(client, make_user, completed_swap):
    carol = await make_user("carol")
    res = await client.post(
        "/api/v1/reviews", json=_review_body(completed_swap, reviewer_id=str(carol)),
    )
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "NOT_ELIGIBLE"


async def test_send_message_and_read_notifications(
    client, events, test_session_factory, make_user,
):
    alice = await make_user("alice")
    bob = await make_user("bob")
    res = await client.post("/api/v1/messages", json={
        "sender_id": str(bob), "recipient_id": str(alice), "content": "Hi!",
    })
    assert res.status_code == 201
    assert events.types == ["message_sent"]

    await NotificationEmitter(test_session_factory).deliver(events.events[0])

    res = await client.get(f"/api/v1/users/{alice}/notifications")
    assert res.status_code == 200
    notifications = res.json()
    assert len(notifications) == 1
    assert notifications[0]["type"] == "MESSAGE"
    assert notifications[0]["related_message_id"] == str(events.events[0].message_id)

    res = await client.get(f"/api/v1/users/{bob}/notifications")
    assert res.json() == []
