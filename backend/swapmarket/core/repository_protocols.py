"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Every mutation happens inside SwapStore.transaction(); leaving the block
      normally commits, leaving it by any exception (CancelledError included) rolls back
    - compare_and_set_* return False instead of raising when the row moved on
    - insert_swap_transaction raises ProductUnavailableError when a product is already held
    - retire_products returns only the ids it flipped; fewer than asked means
      a product was no longer available

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Store speaks in frozen views (core/swap_entities.py), never ORM rows
    - EventSink.emit is synchronous and non-blocking: lifecycle operations
      must never wait on, or fail because of, notification delivery
"""

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Protocol

from swapmarket.core.domain_types import (
    ProductId,
    Rating,
    SwapRequestId,
    SwapRequestRole,
    SwapRequestStatus,
    SwapTransactionId,
    SwapTransactionStatus,
    UserId,
)
from swapmarket.core.swap_entities import (
    MessageView,
    ProductView,
    ReviewKey,
    ReviewView,
    SwapRequestView,
    SwapTransactionView,
)
from swapmarket.core.swap_events import SwapEvent


class SwapStore(Protocol):
    """Contract for the transactional entity store — implemented by shell."""

    def transaction(self) -> AbstractAsyncContextManager[None]: ...

    async def user_exists(self, user_id: UserId) -> bool: ...
    async def get_product(self, product_id: ProductId) -> ProductView | None: ...
    async def get_swap_request(
        self, request_id: SwapRequestId,
    ) -> SwapRequestView | None: ...
    async def get_swap_transaction(
        self, transaction_id: SwapTransactionId,
    ) -> SwapTransactionView | None: ...
    async def get_transaction_for_request(
        self, request_id: SwapRequestId,
    ) -> SwapTransactionView | None: ...

    async def insert_swap_request(
        self,
        requester_id: UserId,
        target_product_id: ProductId,
        offered_product_id: ProductId | None,
        message: str | None,
    ) -> SwapRequestView: ...
    async def compare_and_set_request_status(
        self,
        request_id: SwapRequestId,
        expected_status: SwapRequestStatus,
        expected_version: int,
        new_status: SwapRequestStatus,
    ) -> bool: ...

    async def insert_swap_transaction(
        self, request: SwapRequestView, owner_id: UserId,
    ) -> SwapTransactionView: ...
    async def compare_and_set_transaction_status(
        self,
        transaction_id: SwapTransactionId,
        expected_status: SwapTransactionStatus,
        expected_version: int,
        new_status: SwapTransactionStatus,
        completed_at: datetime | None = None,
    ) -> bool: ...
    async def release_product_holds(
        self, transaction_id: SwapTransactionId,
    ) -> None: ...
    async def retire_products(
        self, product_ids: list[ProductId],
    ) -> list[ProductId]: ...
    async def list_swap_requests(
        self,
        user_id: UserId,
        role: SwapRequestRole,
        status: SwapRequestStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[SwapRequestView]: ...
    async def query_active_transactions_for_product(
        self, product_id: ProductId,
    ) -> list[SwapTransactionView]: ...

    async def completed_transactions_between(
        self, a: UserId, b: UserId,
    ) -> list[SwapTransactionView]: ...
    async def review_exists(self, key: ReviewKey) -> bool: ...
    async def insert_review(
        self, key: ReviewKey, rating: Rating, comment: str | None,
    ) -> ReviewView: ...

    async def insert_message(
        self,
        sender_id: UserId,
        recipient_id: UserId,
        content: str,
        product_id: ProductId | None,
    ) -> MessageView: ...


class EventSink(Protocol):
    """Contract for the notification emitter — implemented by shell."""
    def emit(self, event: SwapEvent) -> None: ...
