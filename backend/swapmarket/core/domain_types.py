"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, ProductId, SwapRequestId, SwapTransactionId, ReviewId wrap UUIDs
    - Rating is bounded 1–5 (RATING_MIN..RATING_MAX)
    - All valid states encoded as Enums — no raw string matching
    - ACTIVE_TRANSACTION_STATUSES is the single definition of "active"

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to String(20) columns without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
ProductId = NewType("ProductId", UUID)
SwapRequestId = NewType("SwapRequestId", UUID)
SwapTransactionId = NewType("SwapTransactionId", UUID)
ReviewId = NewType("ReviewId", UUID)
MessageId = NewType("MessageId", UUID)
EventId = NewType("EventId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

Rating = NewType("Rating", int)     # 1–5

RATING_MIN = 1
RATING_MAX = 5


# ─── Enums ───────────────────────────────────────────────────────

class UserRole(str, Enum):
    BUYER = "BUYER"
    SELLER = "SELLER"
    ADMIN = "ADMIN"


class ProductCondition(str, Enum):
    NEW = "NEW"
    LIKE_NEW = "LIKE_NEW"
    USED = "USED"
    DAMAGED = "DAMAGED"


class SwapRequestStatus(str, Enum):
    """SwapRequest lifecycle states — maps to swap_requests.status."""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class SwapTransactionStatus(str, Enum):
    """SwapTransaction lifecycle states — maps to swap_transactions.status."""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


ACTIVE_TRANSACTION_STATUSES = frozenset({
    SwapTransactionStatus.PENDING,
    SwapTransactionStatus.ACCEPTED,
})


class SwapRequestRole(str, Enum):
    """Which side of a swap request a user is listing."""
    INCOMING = "incoming"   # requests for products the user owns
    OUTGOING = "outgoing"   # requests the user sent


class SwapDecision(str, Enum):
    """Owner's answer to a pending swap request."""
    ACCEPT = "accept"
    REJECT = "reject"


class SwapEventType(str, Enum):
    """Lifecycle events handed to the notification emitter."""
    SWAP_REQUESTED = "swap_requested"
    SWAP_ACCEPTED = "swap_accepted"
    SWAP_REJECTED = "swap_rejected"
    SWAP_COMPLETED = "swap_completed"
    SWAP_CANCELLED = "swap_cancelled"
    REVIEW_SUBMITTED = "review_submitted"
    MESSAGE_SENT = "message_sent"


class NotificationType(str, Enum):
    """Notification row kinds — maps to notifications.type."""
    MESSAGE = "MESSAGE"
    SWAP_REQUEST = "SWAP_REQUEST"
    SWAP_UPDATE = "SWAP_UPDATE"
    REVIEW = "REVIEW"
