"""Lifecycle Events — what the core tells the notification emitter after a commit.

Invariants:
    - Every event carries a unique event_id (consumer idempotency key)
    - recipients is never empty and never contains duplicates
    - Builders are PURE: they read views, they never touch the store

Design Decisions:
    - Frozen dataclass over dict: the emitter queue holds immutable values
    - Event → NotificationType mapping lives here so the emitter stays a dumb pipe
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from swapmarket.core.domain_types import (
    EventId,
    MessageId,
    NotificationType,
    ProductId,
    ReviewId,
    SwapEventType,
    SwapRequestId,
    SwapTransactionId,
    UserId,
)
from swapmarket.core.swap_entities import (
    SwapRequestView,
    SwapTransactionView,
    offered_product_id,
)


@dataclass(frozen=True)
class SwapEvent:
    event_type: SwapEventType
    recipients: tuple[UserId, ...]
    swap_request_id: SwapRequestId | None = None
    swap_transaction_id: SwapTransactionId | None = None
    product_ids: tuple[ProductId, ...] = ()
    review_id: ReviewId | None = None
    message_id: MessageId | None = None
    event_id: EventId = field(default_factory=lambda: EventId(uuid.uuid4()))
    occurred_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    def __post_init__(self):
        if not self.recipients:
            raise ValueError("event needs at least one recipient")
        if len(set(self.recipients)) != len(self.recipients):
            raise ValueError("duplicate event recipients")


_NOTIFICATION_TYPES: dict[SwapEventType, NotificationType] = {
    SwapEventType.SWAP_REQUESTED: NotificationType.SWAP_REQUEST,
    SwapEventType.SWAP_ACCEPTED: NotificationType.SWAP_UPDATE,
    SwapEventType.SWAP_REJECTED: NotificationType.SWAP_UPDATE,
    SwapEventType.SWAP_COMPLETED: NotificationType.SWAP_UPDATE,
    SwapEventType.SWAP_CANCELLED: NotificationType.SWAP_UPDATE,
    SwapEventType.REVIEW_SUBMITTED: NotificationType.REVIEW,
    SwapEventType.MESSAGE_SENT: NotificationType.MESSAGE,
}

_NOTIFICATION_TEXT: dict[SwapEventType, str] = {
    SwapEventType.SWAP_REQUESTED: "You received a new swap request.",
    SwapEventType.SWAP_ACCEPTED: "Your swap request was accepted.",
    SwapEventType.SWAP_REJECTED: "Your swap request was declined.",
    SwapEventType.SWAP_COMPLETED: "Your swap has been completed.",
    SwapEventType.SWAP_CANCELLED: "A swap you are part of was cancelled.",
    SwapEventType.REVIEW_SUBMITTED: "You received a new review.",
    SwapEventType.MESSAGE_SENT: "You have a new message.",
}


def notification_type_for(event: SwapEvent) -> NotificationType:
    return _NOTIFICATION_TYPES[event.event_type]


def notification_text_for(event: SwapEvent) -> str:
    return _NOTIFICATION_TEXT[event.event_type]


# ─── Builders ────────────────────────────────────────────────────

def _request_products(request: SwapRequestView) -> tuple[ProductId, ...]:
    offered = offered_product_id(request.offer)
    if offered is None:
        return (request.target_product_id,)
    return (request.target_product_id, offered)


def swap_requested(request: SwapRequestView, owner_id: UserId) -> SwapEvent:
    return SwapEvent(
        SwapEventType.SWAP_REQUESTED, (owner_id,),
        swap_request_id=request.id,
        product_ids=_request_products(request),
    )


def swap_accepted(
    request: SwapRequestView, transaction: SwapTransactionView,
) -> SwapEvent:
    return SwapEvent(
        SwapEventType.SWAP_ACCEPTED, (request.requester_id,),
        swap_request_id=request.id,
        swap_transaction_id=transaction.id,
        product_ids=transaction.product_ids,
    )


def swap_rejected(request: SwapRequestView) -> SwapEvent:
    return SwapEvent(
        SwapEventType.SWAP_REJECTED, (request.requester_id,),
        swap_request_id=request.id,
        product_ids=_request_products(request),
    )


def swap_cancelled(
    request: SwapRequestView,
    owner_id: UserId,
    transaction: SwapTransactionView | None = None,
) -> SwapEvent:
    return SwapEvent(
        SwapEventType.SWAP_CANCELLED, (owner_id, request.requester_id),
        swap_request_id=request.id,
        swap_transaction_id=transaction.id if transaction else None,
        product_ids=_request_products(request),
    )


def swap_completed(transaction: SwapTransactionView) -> SwapEvent:
    return SwapEvent(
        SwapEventType.SWAP_COMPLETED, tuple(transaction.participants),
        swap_request_id=transaction.request_id,
        swap_transaction_id=transaction.id,
        product_ids=transaction.product_ids,
    )


def review_submitted(
    review_id: ReviewId, reviewee_id: UserId, product_id: ProductId,
) -> SwapEvent:
    return SwapEvent(
        SwapEventType.REVIEW_SUBMITTED, (reviewee_id,),
        review_id=review_id,
        product_ids=(product_id,),
    )


def message_sent(
    message_id: MessageId, recipient_id: UserId, product_id: ProductId | None,
) -> SwapEvent:
    return SwapEvent(
        SwapEventType.MESSAGE_SENT, (recipient_id,),
        message_id=message_id,
        product_ids=(product_id,) if product_id else (),
    )
