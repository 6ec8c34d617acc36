"""Swap Entities — immutable domain views the pure core reasons about.

Invariants:
    - A product is offerable only while Active and is_available
    - Participants is an unordered pair of two distinct users
    - A transaction's second leg is Reciprocal(product_id) or OneWay, never a bare None
    - Views are frozen: the core never mutates state, it decides

Design Decisions:
    - Views instead of ORM rows: core stays free of SQLAlchemy (ADR: functional core)
    - Tagged lifecycle (Active | Deleted) replaces a nullable deleted_at check
      that every query would otherwise have to remember
    - Participants keeps storage order (first=user1, second=user2) only for
      round-tripping; equality and membership ignore it
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterator

from swapmarket.core.domain_types import (
    ACTIVE_TRANSACTION_STATUSES,
    MessageId,
    ProductId,
    Rating,
    ReviewId,
    SwapRequestId,
    SwapRequestStatus,
    SwapTransactionId,
    SwapTransactionStatus,
    UserId,
)


# ─── Product lifecycle ───────────────────────────────────────────

@dataclass(frozen=True)
class Active:
    pass


@dataclass(frozen=True)
class Deleted:
    at: datetime


ProductLifecycle = Active | Deleted

ACTIVE = Active()


def lifecycle_from(deleted_at: datetime | None) -> ProductLifecycle:
    return ACTIVE if deleted_at is None else Deleted(at=deleted_at)


# ─── Optional second product ─────────────────────────────────────

@dataclass(frozen=True)
class Reciprocal:
    product_id: ProductId


@dataclass(frozen=True)
class OneWay:
    pass


ProductOffer = Reciprocal | OneWay

ONE_WAY = OneWay()


def offer_from(product_id: ProductId | None) -> ProductOffer:
    return ONE_WAY if product_id is None else Reciprocal(product_id)


def offered_product_id(offer: ProductOffer) -> ProductId | None:
    return offer.product_id if isinstance(offer, Reciprocal) else None


# ─── Participants ────────────────────────────────────────────────

@dataclass(frozen=True, eq=False)
class Participants:
    """The two users of a swap, compared as a set."""
    first: UserId
    second: UserId

    def __post_init__(self):
        if self.first == self.second:
            raise ValueError("a swap needs two distinct participants")

    def __iter__(self) -> Iterator[UserId]:
        yield self.first
        yield self.second

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Participants):
            return NotImplemented
        return self.as_set() == other.as_set()

    def __hash__(self) -> int:
        return hash(self.as_set())

    def as_set(self) -> frozenset[UserId]:
        return frozenset((self.first, self.second))

    def contains(self, user_id: UserId) -> bool:
        return user_id in (self.first, self.second)

    def matches(self, a: UserId, b: UserId) -> bool:
        """True when {a, b} is exactly this pair, in either order."""
        return self.contains(a) and self.other(a) == b

    def other(self, user_id: UserId) -> UserId:
        if user_id == self.first:
            return self.second
        if user_id == self.second:
            return self.first
        raise ValueError(f"user {user_id} is not a participant")


# ─── Entity views ────────────────────────────────────────────────

@dataclass(frozen=True)
class ProductView:
    id: ProductId
    owner_id: UserId
    is_available: bool = True
    lifecycle: ProductLifecycle = ACTIVE
    version: int = 1

    @property
    def is_offerable(self) -> bool:
        return isinstance(self.lifecycle, Active) and self.is_available


@dataclass(frozen=True)
class SwapRequestView:
    id: SwapRequestId
    requester_id: UserId
    target_product_id: ProductId
    offer: ProductOffer = ONE_WAY
    status: SwapRequestStatus = SwapRequestStatus.PENDING
    version: int = 1
    message: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class SwapTransactionView:
    id: SwapTransactionId
    request_id: SwapRequestId
    participants: Participants
    product1_id: ProductId
    product2: ProductOffer = ONE_WAY
    status: SwapTransactionStatus = SwapTransactionStatus.PENDING
    version: int = 1
    completed_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_TRANSACTION_STATUSES

    @property
    def product_ids(self) -> tuple[ProductId, ...]:
        second = offered_product_id(self.product2)
        return (self.product1_id,) if second is None else (self.product1_id, second)

    def involves_product(self, product_id: ProductId) -> bool:
        return product_id in self.product_ids


@dataclass(frozen=True)
class ReviewKey:
    """Uniqueness key of a review: one per party per product."""
    reviewer_id: UserId
    reviewee_id: UserId
    product_id: ProductId


@dataclass(frozen=True)
class ReviewView:
    id: ReviewId
    key: ReviewKey
    rating: Rating
    comment: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class MessageView:
    id: MessageId
    sender_id: UserId
    recipient_id: UserId
    content: str
    product_id: ProductId | None = None
    is_read: bool = False
    created_at: datetime | None = None