"""Swap Service — the function-call surface of the consistency core.

Invariants:
    - One SwapService per logical operation (it wraps one AsyncSession)
    - Every public method maps 1:1 to an external interface operation
    - Errors propagate as SwapMarketError subclasses; nothing is swallowed here

Design Decisions:
    - Thin facade composing engine, review gate and messaging over one store,
      so routes and scripts share the exact same entry points
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from swapmarket.core.domain_types import (
    ProductId,
    SwapDecision,
    SwapRequestId,
    SwapRequestRole,
    SwapRequestStatus,
    SwapTransactionId,
    UserId,
)
from swapmarket.core.errors import ResourceNotFoundError
from swapmarket.core.repository_protocols import EventSink
from swapmarket.core.swap_entities import (
    MessageView,
    ReviewView,
    SwapRequestView,
    SwapTransactionView,
)
from swapmarket.infrastructure.swap_store import SqlSwapStore
from swapmarket.services.messaging import MessageService
from swapmarket.services.review_gate import ReviewGate
from swapmarket.services.swap_lifecycle import SwapLifecycleEngine


class SwapService:
    """Entry points: create, list, respond, cancel, complete, review, message."""

    def __init__(self, db: AsyncSession, events: EventSink):
        self.store = SqlSwapStore(db)
        self.engine = SwapLifecycleEngine(self.store, events)
        self.reviews = ReviewGate(self.store, events)
        self.messages = MessageService(self.store, events)

    async def create_swap_request(
        self,
        requester_id: UUID,
        product_id: UUID,
        offered_product_id: UUID | None = None,
        message: str | None = None,
    ) -> SwapRequestView:
        return await self.engine.create_request(
            UserId(requester_id),
            ProductId(product_id),
            ProductId(offered_product_id) if offered_product_id else None,
            message,
        )

    async def respond_to_swap_request(
        self, request_id: UUID, decision: SwapDecision,
    ) -> SwapRequestView | SwapTransactionView:
        if decision == SwapDecision.ACCEPT:
            return await self.engine.accept(SwapRequestId(request_id))
        return await self.engine.reject(SwapRequestId(request_id))

    async def cancel_swap(self, request_or_transaction_id: UUID) -> None:
        """Accepts either a request id or a transaction id."""
        if await self.store.get_swap_request(
            SwapRequestId(request_or_transaction_id),
        ) is not None:
            await self.engine.cancel(SwapRequestId(request_or_transaction_id))
            return
        if await self.store.get_swap_transaction(
            SwapTransactionId(request_or_transaction_id),
        ) is not None:
            await self.engine.cancel_transaction(
                SwapTransactionId(request_or_transaction_id),
            )
            return
        raise ResourceNotFoundError("Swap", str(request_or_transaction_id))

    async def list_swap_requests(
        self,
        user_id: UUID,
        role: SwapRequestRole,
        status: SwapRequestStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[SwapRequestView]:
        """Incoming or outgoing requests of one user, newest first."""
        if not await self.store.user_exists(UserId(user_id)):
            raise ResourceNotFoundError("User", str(user_id))
        return await self.store.list_swap_requests(
            UserId(user_id), role, status, limit, offset,
        )

    async def confirm_swap(self, transaction_id: UUID) -> SwapTransactionView:
        return await self.engine.confirm(SwapTransactionId(transaction_id))

    async def complete_swap(self, transaction_id: UUID) -> SwapTransactionView:
        return await self.engine.complete(SwapTransactionId(transaction_id))

    async def submit_review(
        self,
        reviewer_id: UUID,
        reviewee_id: UUID,
        product_id: UUID,
        rating: int,
        comment: str | None = None,
    ) -> ReviewView:
        return await self.reviews.submit(
            UserId(reviewer_id), UserId(reviewee_id), ProductId(product_id),
            rating, comment,
        )

    async def send_message(
        self,
        sender_id: UUID,
        recipient_id: UUID,
        content: str,
        product_id: UUID | None = None,
    ) -> MessageView:
        return await self.messages.send(
            UserId(sender_id), UserId(recipient_id), content,
            ProductId(product_id) if product_id else None,
        )
