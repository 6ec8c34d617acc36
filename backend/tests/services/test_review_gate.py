"""Review Gate — eligibility and submission against real swap history.

Invariants:
    - Only parties of a COMPLETED swap may review each other for its products
    - A second review for the same (reviewer, reviewee, product) is DuplicateReviewError
    - Rejected submissions write nothing and emit nothing
"""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from swapmarket.core.domain_types import SwapDecision
from swapmarket.core.errors import (
    DuplicateReviewError,
    InvalidReviewError,
    NotEligibleError,
    ResourceNotFoundError,
)
from swapmarket.models.review import Review


@pytest.fixture
async def swap(swap_service, make_user, make_product):
    """A pending reciprocal swap: bob offers his bike for alice's guitar."""
    alice = await make_user("alice")
    bob = await make_user("bob")
    guitar = await make_product(alice, "Guitar")
    bike = await make_product(bob, "Bike")
    request = await swap_service.create_swap_request(bob, guitar, bike)
    transaction = await swap_service.respond_to_swap_request(
        request.id, SwapDecision.ACCEPT,
    )
    return {
        "alice": alice, "bob": bob, "guitar": guitar, "bike": bike,
        "transaction": transaction,
    }


@pytest.fixture
async def completed(swap_service, swap):
    await swap_service.complete_swap(swap["transaction"].id)
    return swap


async def test_not_eligible_before_completion(swap_service, swap):
    error = await swap_service.reviews.can_review(
        swap["bob"], swap["alice"], swap["guitar"],
    )
    assert isinstance(error, NotEligibleError)
    with pytest.raises(NotEligibleError):
        await swap_service.submit_review(
            swap["bob"], swap["alice"], swap["guitar"], 5,
        )


async def test_both_parties_may_review_after_completion(swap_service, events, completed):
    alice, bob = completed["alice"], completed["bob"]
    assert await swap_service.reviews.can_review(bob, alice, completed["guitar"]) is None

    review = await swap_service.submit_review(
        bob, alice, completed["guitar"], 5, "Great guitar",
    )
    assert review.rating == 5
    assert review.key.reviewee_id == alice
    assert events.types[-1] == "review_submitted"
    assert events.events[-1].recipients == (alice,)

    back = await swap_service.submit_review(alice, bob, completed["bike"], 4)
    assert back.key.product_id == completed["bike"]


async def test_duplicate_review_rejected(swap_service, test_db, completed):
    args = (completed["bob"], completed["alice"], completed["guitar"])
    await swap_service.submit_review(*args, 5)

    assert isinstance(await swap_service.reviews.can_review(*args), DuplicateReviewError)
    with pytest.raises(DuplicateReviewError):
        await swap_service.submit_review(*args, 3)
    count = (await test_db.execute(select(func.count()).select_from(Review))).scalar_one()
    assert count == 1


async def test_same_pair_may_review_each_product(swap_service, completed):
    bob, alice = completed["bob"], completed["alice"]
    await swap_service.submit_review(bob, alice, completed["guitar"], 5)
    await swap_service.submit_review(bob, alice, completed["bike"], 4)


async def test_outsider_not_eligible(swap_service, make_user, completed):
    carol = await make_user("carol")
    with pytest.raises(NotEligibleError):
        await swap_service.submit_review(
            carol, completed["alice"], completed["guitar"], 5,
        )


async def test_unrelated_product_not_eligible(swap_service, make_product, completed):
    lamp = await make_product(completed["alice"], "Lamp")
    with pytest.raises(NotEligibleError):
        await swap_service.submit_review(
            completed["bob"], completed["alice"], lamp, 5,
        )


async def test_cancelled_swap_never_eligible(swap_service, swap):
    await swap_service.cancel_swap(swap["transaction"].id)
    error = await swap_service.reviews.can_review(
        swap["alice"], swap["bob"], swap["bike"],
    )
    assert isinstance(error, NotEligibleError)


@pytest.mark.parametrize("rating", [0, 6])
async def test_rating_bounds(swap_service, events, completed, rating):
    emitted = len(events.events)
    with pytest.raises(InvalidReviewError):
        await swap_service.submit_review(
            completed["bob"], completed["alice"], completed["guitar"], rating,
        )
    assert len(events.events) == emitted


async def test_self_review_rejected(swap_service, completed):
    with pytest.raises(InvalidReviewError):
        await swap_service.submit_review(
            completed["bob"], completed["bob"], completed["guitar"], 5,
        )


async def test_unknown_product(swap_service, completed):
    with pytest.raises(ResourceNotFoundError):
        await swap_service.submit_review(
            completed["bob"], completed["alice"], uuid4(), 5,
        )
