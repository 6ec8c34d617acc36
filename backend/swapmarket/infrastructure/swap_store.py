"""SQL Swap Store — SQLAlchemy implementation of the SwapStore protocol.

Invariants:
    - Reads use populate_existing: a view always reflects the row, never a stale identity-map copy
    - Status writes are compare-and-swap on (status, version); rowcount 0 means "moved on"
    - A ProductHold row is inserted per referenced product; a unique violation
      is reported as ProductUnavailableError for that product
    - transaction() commits on normal exit and rolls back on ANY exception,
      asyncio.CancelledError included, then re-raises
    - The rollback and session close after a failure are shielded from
      cancellation: a cancelled caller never keeps the connection (or the
      SQLite write lock) checked out
    - SQLAlchemy failures leaving transaction() become StorageError

Design Decisions:
    - Guarded UPDATE statements over ORM attribute writes: the CAS result must
      be observable inside the same transaction (ADR: no pre-read race window)
    - Holds inserted one at a time with INSERT statements (no identity map),
      so the conflicting product is known and the unique index decides
    - retire_products uses UPDATE .. RETURNING so the engine can name the
      product that was no longer available
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncGenerator

from sqlalchemy import and_, delete, insert, or_, select, update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from swapmarket.core.domain_types import (
    ACTIVE_TRANSACTION_STATUSES,
    MessageId,
    ProductId,
    Rating,
    ReviewId,
    SwapRequestId,
    SwapRequestRole,
    SwapRequestStatus,
    SwapTransactionId,
    SwapTransactionStatus,
    UserId,
)
from swapmarket.core.errors import (
    AlreadyResolvedError,
    DuplicateReviewError,
    ProductUnavailableError,
    StorageError,
)
from swapmarket.core.swap_entities import (
    MessageView,
    Participants,
    ProductView,
    ReviewKey,
    ReviewView,
    SwapRequestView,
    SwapTransactionView,
    lifecycle_from,
    offer_from,
    offered_product_id,
)
from swapmarket.models.message import Message
from swapmarket.models.product import Product
from swapmarket.models.product_hold import ProductHold
from swapmarket.models.review import Review
from swapmarket.models.swap_request import SwapRequest
from swapmarket.models.swap_transaction import SwapTransaction
from swapmarket.models.user import User

logger = logging.getLogger(__name__)

_ACTIVE = [s.value for s in ACTIVE_TRANSACTION_STATUSES]


# ─── Row → view ──────────────────────────────────────────────────

def product_view(row: Product) -> ProductView:
    return ProductView(
        id=ProductId(row.id),
        owner_id=UserId(row.owner_id),
        is_available=row.is_available,
        lifecycle=lifecycle_from(row.deleted_at),
        version=row.version,
    )


def request_view(row: SwapRequest) -> SwapRequestView:
    return SwapRequestView(
        id=SwapRequestId(row.id),
        requester_id=UserId(row.requester_id),
        target_product_id=ProductId(row.target_product_id),
        offer=offer_from(row.offered_product_id),
        status=SwapRequestStatus(row.status),
        version=row.version,
        message=row.message,
        created_at=row.created_at,
    )


def transaction_view(row: SwapTransaction) -> SwapTransactionView:
    return SwapTransactionView(
        id=SwapTransactionId(row.id),
        request_id=SwapRequestId(row.request_id),
        participants=Participants(UserId(row.user1_id), UserId(row.user2_id)),
        product1_id=ProductId(row.product1_id),
        product2=offer_from(row.product2_id),
        status=SwapTransactionStatus(row.status),
        version=row.version,
        completed_at=row.completed_at,
        created_at=row.created_at,
    )


def review_view(row: Review) -> ReviewView:
    return ReviewView(
        id=ReviewId(row.id),
        key=ReviewKey(
            UserId(row.reviewer_id), UserId(row.reviewee_id),
            ProductId(row.product_id),
        ),
        rating=Rating(row.rating),
        comment=row.comment,
        created_at=row.created_at,
    )


def message_view(row: Message) -> MessageView:
    return MessageView(
        id=MessageId(row.id),
        sender_id=UserId(row.sender_id),
        recipient_id=UserId(row.recipient_id),
        content=row.content,
        product_id=ProductId(row.product_id) if row.product_id else None,
        is_read=row.is_read,
        created_at=row.created_at,
    )


class SqlSwapStore:
    """SwapStore backed by one AsyncSession (one logical operation)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[None, None]:
        try:
            yield
            await self.db.commit()
        except OperationalError as e:
            await self._abort()
            logger.error(f"Swap store operational error: {e}")
            raise StorageError("Connection or lock timeout", "execute") from e
        except SQLAlchemyError as e:
            await self._abort()
            logger.error(f"Swap store error: {e}")
            raise StorageError("Database operation failed", "commit") from e
        except BaseException:
            await self._abort()
            raise

    async def _abort(self) -> None:
        """Roll back and hand the connection back to the pool, even if cancelled."""
        async def _rollback_and_close():
            try:
                await self.db.rollback()
            finally:
                await self.db.close()

        await asyncio.shield(_rollback_and_close())

    async def _get(self, model, pk):
        result = await self.db.execute(
            select(model)
            .where(model.id == pk)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    # ─── Reads ───────────────────────────────────────────────────

    async def user_exists(self, user_id: UserId) -> bool:
        result = await self.db.execute(select(User.id).where(User.id == user_id))
        return result.scalar_one_or_none() is not None

    async def get_product(self, product_id: ProductId) -> ProductView | None:
        row = await self._get(Product, product_id)
        return product_view(row) if row else None

    async def get_swap_request(
        self, request_id: SwapRequestId,
    ) -> SwapRequestView | None:
        row = await self._get(SwapRequest, request_id)
        return request_view(row) if row else None

    async def get_swap_transaction(
        self, transaction_id: SwapTransactionId,
    ) -> SwapTransactionView | None:
        row = await self._get(SwapTransaction, transaction_id)
        return transaction_view(row) if row else None

    async def get_transaction_for_request(
        self, request_id: SwapRequestId,
    ) -> SwapTransactionView | None:
        result = await self.db.execute(
            select(SwapTransaction)
            .where(SwapTransaction.request_id == request_id)
            .execution_options(populate_existing=True),
        )
        row = result.scalar_one_or_none()
        return transaction_view(row) if row else None

    async def query_active_transactions_for_product(
        self, product_id: ProductId,
    ) -> list[SwapTransactionView]:
        result = await self.db.execute(
            select(SwapTransaction)
            .where(SwapTransaction.status.in_(_ACTIVE))
            .where(or_(
                SwapTransaction.product1_id == product_id,
                SwapTransaction.product2_id == product_id,
            ))
            .execution_options(populate_existing=True),
        )
        return [transaction_view(r) for r in result.scalars().all()]

    async def completed_transactions_between(
        self, a: UserId, b: UserId,
    ) -> list[SwapTransactionView]:
        result = await self.db.execute(
            select(SwapTransaction)
            .where(SwapTransaction.status == SwapTransactionStatus.COMPLETED.value)
            .where(or_(
                and_(SwapTransaction.user1_id == a, SwapTransaction.user2_id == b),
                and_(SwapTransaction.user1_id == b, SwapTransaction.user2_id == a),
            ))
            .execution_options(populate_existing=True),
        )
        return [transaction_view(r) for r in result.scalars().all()]

    async def list_swap_requests(
        self,
        user_id: UserId,
        role: SwapRequestRole,
        status: SwapRequestStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[SwapRequestView]:
        """Incoming: requests for the user's products. Outgoing: requests the user sent."""
        query = select(SwapRequest)
        if role == SwapRequestRole.INCOMING:
            query = query.join(
                Product, Product.id == SwapRequest.target_product_id,
            ).where(Product.owner_id == user_id)
        else:
            query = query.where(SwapRequest.requester_id == user_id)
        if status is not None:
            query = query.where(SwapRequest.status == status.value)
        result = await self.db.execute(
            query.order_by(SwapRequest.created_at.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True),
        )
        return [request_view(r) for r in result.scalars().all()]

    async def review_exists(self, key: ReviewKey) -> bool:
        result = await self.db.execute(
            select(Review.id)
            .where(Review.reviewer_id == key.reviewer_id)
            .where(Review.reviewee_id == key.reviewee_id)
            .where(Review.product_id == key.product_id),
        )
        return result.first() is not None

    # ─── Writes ──────────────────────────────────────────────────

    async def insert_swap_request(
        self,
        requester_id: UserId,
        target_product_id: ProductId,
        offered_product_id: ProductId | None,
        message: str | None,
    ) -> SwapRequestView:
        row = SwapRequest(
            requester_id=requester_id,
            target_product_id=target_product_id,
            offered_product_id=offered_product_id,
            status=SwapRequestStatus.PENDING.value,
            message=message,
            version=1,
        )
        self.db.add(row)
        await self.db.flush()
        return request_view(row)

    async def compare_and_set_request_status(
        self,
        request_id: SwapRequestId,
        expected_status: SwapRequestStatus,
        expected_version: int,
        new_status: SwapRequestStatus,
    ) -> bool:
        result = await self.db.execute(
            update(SwapRequest)
            .where(SwapRequest.id == request_id)
            .where(SwapRequest.status == expected_status.value)
            .where(SwapRequest.version == expected_version)
            .values(status=new_status.value, version=SwapRequest.version + 1)
            .execution_options(synchronize_session=False),
        )
        return result.rowcount == 1

    async def insert_swap_transaction(
        self, request: SwapRequestView, owner_id: UserId,
    ) -> SwapTransactionView:
        row = SwapTransaction(
            request_id=request.id,
            user1_id=owner_id,
            user2_id=request.requester_id,
            product1_id=request.target_product_id,
            product2_id=offered_product_id(request.offer),
            status=SwapTransactionStatus.PENDING.value,
            version=1,
        )
        self.db.add(row)
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise AlreadyResolvedError("SwapRequest", str(request.id)) from e

        view = transaction_view(row)
        for product_id in view.product_ids:
            try:
                await self.db.execute(
                    insert(ProductHold).values(
                        product_id=product_id, transaction_id=row.id,
                    ),
                )
            except IntegrityError as e:
                raise ProductUnavailableError(str(product_id)) from e
        return view

    async def compare_and_set_transaction_status(
        self,
        transaction_id: SwapTransactionId,
        expected_status: SwapTransactionStatus,
        expected_version: int,
        new_status: SwapTransactionStatus,
        completed_at: datetime | None = None,
    ) -> bool:
        values = {
            "status": new_status.value,
            "version": SwapTransaction.version + 1,
        }
        if completed_at is not None:
            values["completed_at"] = completed_at
        result = await self.db.execute(
            update(SwapTransaction)
            .where(SwapTransaction.id == transaction_id)
            .where(SwapTransaction.status == expected_status.value)
            .where(SwapTransaction.version == expected_version)
            .values(**values)
            .execution_options(synchronize_session=False),
        )
        return result.rowcount == 1

    async def release_product_holds(
        self, transaction_id: SwapTransactionId,
    ) -> None:
        await self.db.execute(
            delete(ProductHold)
            .where(ProductHold.transaction_id == transaction_id)
            .execution_options(synchronize_session=False),
        )

    async def retire_products(
        self, product_ids: list[ProductId],
    ) -> list[ProductId]:
        """Flip is_available to false; returns the ids that actually flipped."""
        if not product_ids:
            return []
        result = await self.db.execute(
            update(Product)
            .where(Product.id.in_(product_ids))
            .where(Product.is_available.is_(True))
            .values(is_available=False, version=Product.version + 1)
            .returning(Product.id)
            .execution_options(synchronize_session=False),
        )
        return [ProductId(pid) for pid in result.scalars().all()]

    async def insert_review(
        self, key: ReviewKey, rating: Rating, comment: str | None,
    ) -> ReviewView:
        row = Review(
            reviewer_id=key.reviewer_id,
            reviewee_id=key.reviewee_id,
            product_id=key.product_id,
            rating=rating,
            comment=comment,
        )
        self.db.add(row)
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise DuplicateReviewError() from e
        return review_view(row)

    async def insert_message(
        self,
        sender_id: UserId,
        recipient_id: UserId,
        content: str,
        product_id: ProductId | None,
    ) -> MessageView:
        row = Message(
            sender_id=sender_id,
            recipient_id=recipient_id,
            content=content,
            product_id=product_id,
        )
        self.db.add(row)
        await self.db.flush()
        return message_view(row)
