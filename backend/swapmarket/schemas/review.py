"""Review Schemas — rating bounded 1–5, comment optional and stripped."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from swapmarket.core.domain_types import RATING_MAX, RATING_MIN
from swapmarket.core.swap_entities import ReviewView


class ReviewCreate(BaseModel):
    reviewer_id: UUID
    reviewee_id: UUID
    product_id: UUID
    rating: int = Field(ge=RATING_MIN, le=RATING_MAX)
    comment: str | None = Field(None, max_length=2000)

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class ReviewResponse(BaseModel):
    id: UUID
    reviewer_id: UUID
    reviewee_id: UUID
    product_id: UUID
    rating: int
    comment: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_view(cls, view: ReviewView) -> "ReviewResponse":
        return cls(
            id=view.id,
            reviewer_id=view.key.reviewer_id,
            reviewee_id=view.key.reviewee_id,
            product_id=view.key.product_id,
            rating=view.rating,
            comment=view.comment,
            created_at=view.created_at,
        )


class EligibilityResponse(BaseModel):
    eligible: bool
    reason: str | None = None
