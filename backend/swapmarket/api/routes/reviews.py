"""Review Routes — eligibility query and review submission."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from swapmarket.api.dependencies import get_swap_service
from swapmarket.schemas.review import (
    EligibilityResponse,
    ReviewCreate,
    ReviewResponse,
)
from swapmarket.services.swap_service import SwapService

router = APIRouter(prefix="/api/v1/reviews", tags=["reviews"])


@router.get("/eligibility", response_model=EligibilityResponse)
async def review_eligibility(
    reviewer_id: UUID = Query(...),
    reviewee_id: UUID = Query(...),
    product_id: UUID = Query(...),
    service: SwapService = Depends(get_swap_service),
):
    error = await service.reviews.can_review(reviewer_id, reviewee_id, product_id)
    if error:
        return EligibilityResponse(eligible=False, reason=error.code)
    return EligibilityResponse(eligible=True)


@router.post(
    "", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED,
)
async def submit_review(
    body: ReviewCreate, service: SwapService = Depends(get_swap_service),
):
    review = await service.submit_review(
        body.reviewer_id, body.reviewee_id, body.product_id,
        body.rating, body.comment,
    )
    return ReviewResponse.from_view(review)
