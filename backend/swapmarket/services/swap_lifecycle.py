"""Swap Lifecycle Engine — the only writer of request/transaction status and product availability.

Invariants:
    - Every operation runs inside ONE store transaction: all-or-nothing
    - Validation runs on a fresh read; the write itself is compare-and-swap,
      so a concurrent winner turns the loser into AlreadyResolvedError
    - accept holds every referenced product (ProductHold) in the same transaction:
      at most one active SwapTransaction per product
    - complete flips product1 and product2 (if any) unavailable exactly once,
      releases holds, and moves request + transaction to COMPLETED together
    - A product no longer available at complete time aborts the whole
      operation with ProductUnavailableError naming that product
    - cancel of an ACCEPTED request cancels its active transaction in the same transaction
    - Events are emitted only after commit; the engine never logs or swallows errors

Design Decisions:
    - Pure validators (core/) return errors, the engine raises them (ADR: impureim sandwich)
    - Engine depends on SwapStore/EventSink protocols, not on SQLAlchemy
"""

from dataclasses import replace
from datetime import datetime, timezone

from swapmarket.core.domain_types import (
    ProductId,
    SwapRequestId,
    SwapRequestStatus as RS,
    SwapTransactionId,
    SwapTransactionStatus as TS,
    UserId,
)
from swapmarket.core.enforce_swap import (
    check_offered_product_owner,
    validate_products_still_free,
    validate_swap_request_creation,
)
from swapmarket.core.enforce_transitions import (
    check_request_transition,
    check_transaction_transition,
)
from swapmarket.core.errors import (
    AlreadyResolvedError,
    ErrorContext,
    ProductUnavailableError,
    ResourceNotFoundError,
    SwapMarketError,
)
from swapmarket.core.repository_protocols import EventSink, SwapStore
from swapmarket.core.swap_entities import (
    ProductView,
    SwapRequestView,
    SwapTransactionView,
    offered_product_id,
)
from swapmarket.core import swap_events


def _raise_if(error: SwapMarketError | None) -> None:
    if error is not None:
        raise error


class SwapLifecycleEngine:
    """Authoritative state machine for swap requests and transactions."""

    def __init__(self, store: SwapStore, events: EventSink):
        self.store = store
        self.events = events

    # ─── Loaders ─────────────────────────────────────────────────

    async def _require_product(self, product_id: ProductId) -> ProductView:
        product = await self.store.get_product(product_id)
        if product is None:
            raise ResourceNotFoundError("Product", str(product_id))
        return product

    async def _require_request(self, request_id: SwapRequestId) -> SwapRequestView:
        request = await self.store.get_swap_request(request_id)
        if request is None:
            raise ResourceNotFoundError("SwapRequest", str(request_id))
        return request

    async def _require_transaction(
        self, transaction_id: SwapTransactionId,
    ) -> SwapTransactionView:
        transaction = await self.store.get_swap_transaction(transaction_id)
        if transaction is None:
            raise ResourceNotFoundError("SwapTransaction", str(transaction_id))
        return transaction

    async def _held_product_ids(self, products: list[ProductView]) -> set:
        held = set()
        for product in products:
            if await self.store.query_active_transactions_for_product(product.id):
                held.add(product.id)
        return held

    async def _set_request_status(
        self, request: SwapRequestView, new_status: RS,
    ) -> SwapRequestView:
        swapped = await self.store.compare_and_set_request_status(
            request.id, request.status, request.version, new_status,
        )
        if not swapped:
            raise AlreadyResolvedError(
                "SwapRequest", str(request.id),
                ErrorContext(request_id=str(request.id)),
            )
        return replace(request, status=new_status, version=request.version + 1)

    async def _set_transaction_status(
        self,
        transaction: SwapTransactionView,
        new_status: TS,
        completed_at: datetime | None = None,
    ) -> SwapTransactionView:
        swapped = await self.store.compare_and_set_transaction_status(
            transaction.id, transaction.status, transaction.version,
            new_status, completed_at=completed_at,
        )
        if not swapped:
            raise AlreadyResolvedError(
                "SwapTransaction", str(transaction.id),
                ErrorContext(transaction_id=str(transaction.id)),
            )
        return replace(
            transaction,
            status=new_status,
            version=transaction.version + 1,
            completed_at=completed_at or transaction.completed_at,
        )

    # ─── Operations ──────────────────────────────────────────────

    async def create_request(
        self,
        requester_id: UserId,
        product_id: ProductId,
        offered_product_id: ProductId | None = None,
        message: str | None = None,
    ) -> SwapRequestView:
        """Validate and persist a PENDING request."""
        async with self.store.transaction():
            if not await self.store.user_exists(requester_id):
                raise ResourceNotFoundError("User", str(requester_id))
            target = await self._require_product(product_id)
            offered = None
            if offered_product_id is not None:
                offered = await self._require_product(offered_product_id)
            _raise_if(validate_swap_request_creation(requester_id, target, offered))
            request = await self.store.insert_swap_request(
                requester_id, product_id, offered_product_id, message,
            )
        self.events.emit(swap_events.swap_requested(request, target.owner_id))
        return request

    async def accept(self, request_id: SwapRequestId) -> SwapTransactionView:
        """PENDING -> ACCEPTED and create the paired PENDING transaction."""
        async with self.store.transaction():
            request = await self._require_request(request_id)
            _raise_if(check_request_transition(request, RS.ACCEPTED))

            target = await self._require_product(request.target_product_id)
            products = [target]
            offered_id = offered_product_id(request.offer)
            if offered_id is not None:
                offered = await self._require_product(offered_id)
                _raise_if(check_offered_product_owner(request.requester_id, offered))
                products.append(offered)
            held = await self._held_product_ids(products)
            _raise_if(validate_products_still_free(products, held))

            accepted = await self._set_request_status(request, RS.ACCEPTED)
            transaction = await self.store.insert_swap_transaction(
                accepted, target.owner_id,
            )
        self.events.emit(swap_events.swap_accepted(accepted, transaction))
        return transaction

    async def reject(self, request_id: SwapRequestId) -> SwapRequestView:
        """PENDING -> REJECTED."""
        async with self.store.transaction():
            request = await self._require_request(request_id)
            _raise_if(check_request_transition(request, RS.REJECTED))
            rejected = await self._set_request_status(request, RS.REJECTED)
        self.events.emit(swap_events.swap_rejected(rejected))
        return rejected

    async def cancel(self, request_id: SwapRequestId) -> SwapRequestView:
        """Cancel a PENDING request, or an ACCEPTED one with its active transaction."""
        async with self.store.transaction():
            request = await self._require_request(request_id)
            cancelled, transaction, owner_id = await self._cancel_request(request)
        self.events.emit(
            swap_events.swap_cancelled(cancelled, owner_id, transaction),
        )
        return cancelled

    async def cancel_transaction(
        self, transaction_id: SwapTransactionId,
    ) -> SwapRequestView:
        """Cancel an active transaction together with its request."""
        async with self.store.transaction():
            transaction = await self._require_transaction(transaction_id)
            _raise_if(check_transaction_transition(transaction, TS.CANCELLED))
            request = await self._require_request(transaction.request_id)
            cancelled, cancelled_txn, owner_id = await self._cancel_request(request)
        self.events.emit(
            swap_events.swap_cancelled(cancelled, owner_id, cancelled_txn),
        )
        return cancelled

    async def _cancel_request(
        self, request: SwapRequestView,
    ) -> tuple[SwapRequestView, SwapTransactionView | None, UserId]:
        _raise_if(check_request_transition(request, RS.CANCELLED))
        transaction = None
        if request.status == RS.ACCEPTED:
            transaction = await self.store.get_transaction_for_request(request.id)
            if transaction is not None and transaction.is_active:
                transaction = await self._set_transaction_status(
                    transaction, TS.CANCELLED,
                )
                await self.store.release_product_holds(transaction.id)
        cancelled = await self._set_request_status(request, RS.CANCELLED)
        target = await self._require_product(request.target_product_id)
        return cancelled, transaction, target.owner_id

    async def confirm(
        self, transaction_id: SwapTransactionId,
    ) -> SwapTransactionView:
        """PENDING -> ACCEPTED: participants agreed on the handoff."""
        async with self.store.transaction():
            transaction = await self._require_transaction(transaction_id)
            _raise_if(check_transaction_transition(transaction, TS.ACCEPTED))
            confirmed = await self._set_transaction_status(
                transaction, TS.ACCEPTED,
            )
        return confirmed

    async def complete(
        self, transaction_id: SwapTransactionId,
    ) -> SwapTransactionView:
        """Active -> COMPLETED; retire both products; request -> COMPLETED."""
        async with self.store.transaction():
            transaction = await self._require_transaction(transaction_id)
            _raise_if(check_transaction_transition(transaction, TS.COMPLETED))
            request = await self._require_request(transaction.request_id)
            _raise_if(check_request_transition(request, RS.COMPLETED, transaction))

            completed = await self._set_transaction_status(
                transaction, TS.COMPLETED,
                completed_at=datetime.now(timezone.utc),
            )
            product_ids = list(completed.product_ids)
            retired = await self.store.retire_products(product_ids)
            for product_id in product_ids:
                if product_id not in retired:
                    raise ProductUnavailableError(
                        str(product_id),
                        ErrorContext(
                            transaction_id=str(transaction.id),
                            product_id=str(product_id),
                        ),
                    )
            await self.store.release_product_holds(completed.id)
            await self._set_request_status(request, RS.COMPLETED)
        self.events.emit(swap_events.swap_completed(completed))
        return completed
