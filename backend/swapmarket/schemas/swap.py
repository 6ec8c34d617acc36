"""Swap Schemas — request bodies and responses for the swap lifecycle endpoints.

Invariants:
    - SwapRequestCreate.message: at most 2000 chars, stripped, empty -> None
    - offered_product_id may be omitted (one-way give-away)
    - RespondRequest.decision is "accept" or "reject"
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from swapmarket.core.domain_types import SwapRequestStatus, SwapTransactionStatus
from swapmarket.core.enforce_transitions import is_terminal_request_status
from swapmarket.core.swap_entities import (
    SwapRequestView,
    SwapTransactionView,
    offered_product_id,
)


class SwapRequestCreate(BaseModel):
    requester_id: UUID
    product_id: UUID
    offered_product_id: UUID | None = None
    message: str | None = Field(None, max_length=2000)

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class RespondRequest(BaseModel):
    decision: Literal["accept", "reject"]


class SwapRequestResponse(BaseModel):
    id: UUID
    requester_id: UUID
    target_product_id: UUID
    offered_product_id: UUID | None
    status: SwapRequestStatus
    is_terminal: bool
    message: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_view(cls, view: SwapRequestView) -> "SwapRequestResponse":
        return cls(
            id=view.id,
            requester_id=view.requester_id,
            target_product_id=view.target_product_id,
            offered_product_id=offered_product_id(view.offer),
            status=view.status,
            is_terminal=is_terminal_request_status(view.status),
            message=view.message,
            created_at=view.created_at,
        )


class SwapTransactionResponse(BaseModel):
    id: UUID
    request_id: UUID
    user1_id: UUID
    user2_id: UUID
    product1_id: UUID
    product2_id: UUID | None
    status: SwapTransactionStatus
    completed_at: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_view(cls, view: SwapTransactionView) -> "SwapTransactionResponse":
        return cls(
            id=view.id,
            request_id=view.request_id,
            user1_id=view.participants.first,
            user2_id=view.participants.second,
            product1_id=view.product1_id,
            product2_id=offered_product_id(view.product2),
            status=view.status,
            completed_at=view.completed_at,
            created_at=view.created_at,
        )
