"""Review Eligibility Gate — may (reviewer, reviewee, product) produce a Review now?

Invariants:
    - Eligible only through a COMPLETED transaction whose participants are
      exactly {reviewer, reviewee} and whose products include the product
    - One review per (reviewer, reviewee, product): a second attempt is DuplicateReview
    - Ratings are integers in RATING_MIN..RATING_MAX
    - All functions are PURE: callers fetch history, the gate only decides

Design Decisions:
    - Input checks (rating, self-review) run before eligibility so malformed
      requests never cost a history query
"""

from swapmarket.core.domain_types import (
    RATING_MAX,
    RATING_MIN,
    ProductId,
    SwapTransactionStatus,
    UserId,
)
from swapmarket.core.errors import (
    DuplicateReviewError,
    InvalidReviewError,
    NotEligibleError,
    SwapMarketError,
)
from swapmarket.core.swap_entities import SwapTransactionView


def check_rating(rating: int) -> SwapMarketError | None:
    if isinstance(rating, bool) or not isinstance(rating, int):
        return InvalidReviewError("Rating must be an integer.")
    if not RATING_MIN <= rating <= RATING_MAX:
        return InvalidReviewError(
            f"Rating must be between {RATING_MIN} and {RATING_MAX}.",
        )
    return None


def check_not_self_review(
    reviewer_id: UserId, reviewee_id: UserId,
) -> SwapMarketError | None:
    if reviewer_id == reviewee_id:
        return InvalidReviewError("You cannot review yourself.")
    return None


def links_parties(
    transaction: SwapTransactionView,
    reviewer_id: UserId,
    reviewee_id: UserId,
    product_id: ProductId,
) -> bool:
    """True when the completed swap connects both parties through the product."""
    return (
        transaction.status == SwapTransactionStatus.COMPLETED
        and transaction.participants.matches(reviewer_id, reviewee_id)
        and transaction.involves_product(product_id)
    )


def check_review_eligibility(
    reviewer_id: UserId,
    reviewee_id: UserId,
    product_id: ProductId,
    history: list[SwapTransactionView],
    already_reviewed: bool,
) -> SwapMarketError | None:
    """Gate: completed swap required, duplicates refused."""
    if not any(
        links_parties(t, reviewer_id, reviewee_id, product_id) for t in history
    ):
        return NotEligibleError()
    if already_reviewed:
        return DuplicateReviewError()
    return None


def validate_review_submission(
    reviewer_id: UserId,
    reviewee_id: UserId,
    product_id: ProductId,
    rating: int,
    history: list[SwapTransactionView],
    already_reviewed: bool,
) -> SwapMarketError | None:
    """Chain input checks and the eligibility gate. First error wins."""
    return (
        check_not_self_review(reviewer_id, reviewee_id)
        or check_rating(rating)
        or check_review_eligibility(
            reviewer_id, reviewee_id, product_id, history, already_reviewed,
        )
    )
