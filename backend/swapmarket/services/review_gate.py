"""Review Eligibility Gate — answers "may this review exist?" and records it when it may.

Invariants:
    - can_review is a pure query: it reads history and never writes
    - submit re-runs the gate inside the same transaction as the insert
    - The store's unique (reviewer, reviewee, product) constraint is the
      last line against concurrent duplicates: violation -> DuplicateReviewError
    - REVIEW_SUBMITTED is emitted only after commit
"""

from swapmarket.core.domain_types import ProductId, Rating, UserId
from swapmarket.core.enforce_review import (
    check_review_eligibility,
    validate_review_submission,
)
from swapmarket.core.errors import ResourceNotFoundError, SwapMarketError
from swapmarket.core.repository_protocols import EventSink, SwapStore
from swapmarket.core.swap_entities import ReviewKey, ReviewView
from swapmarket.core import swap_events


class ReviewGate:

    def __init__(self, store: SwapStore, events: EventSink):
        self.store = store
        self.events = events

    async def can_review(
        self, reviewer_id: UserId, reviewee_id: UserId, product_id: ProductId,
    ) -> SwapMarketError | None:
        """None when eligible, otherwise NotEligibleError or DuplicateReviewError."""
        history = await self.store.completed_transactions_between(
            reviewer_id, reviewee_id,
        )
        already = await self.store.review_exists(
            ReviewKey(reviewer_id, reviewee_id, product_id),
        )
        return check_review_eligibility(
            reviewer_id, reviewee_id, product_id, history, already,
        )

    async def submit(
        self,
        reviewer_id: UserId,
        reviewee_id: UserId,
        product_id: ProductId,
        rating: int,
        comment: str | None = None,
    ) -> ReviewView:
        key = ReviewKey(reviewer_id, reviewee_id, product_id)
        async with self.store.transaction():
            if await self.store.get_product(product_id) is None:
                raise ResourceNotFoundError("Product", str(product_id))
            history = await self.store.completed_transactions_between(
                reviewer_id, reviewee_id,
            )
            already = await self.store.review_exists(key)
            error = validate_review_submission(
                reviewer_id, reviewee_id, product_id, rating, history, already,
            )
            if error:
                raise error
            review = await self.store.insert_review(key, Rating(rating), comment)
        self.events.emit(
            swap_events.review_submitted(review.id, reviewee_id, product_id),
        )
        return review
