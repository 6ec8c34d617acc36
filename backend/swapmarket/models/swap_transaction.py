"""SwapTransaction ORM — the realized exchange once a request is accepted.

Invariants:
    - Exactly one transaction per accepted request (request_id unique)
    - user1/product1 come from the target owner; user2/product2 from the requester
    - product2_id is null for one-way (give-away) swaps
    - completed_at is set once, on the transition to COMPLETED
    - At most one active transaction per product, enforced by product_holds

Design Decisions:
    - user1/user2 stay as two columns in storage; the core reads them as an
      unordered Participants pair
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from swapmarket.core.domain_types import SwapTransactionStatus
from swapmarket.db.base import Base


class SwapTransaction(Base):
    """Accepted swap with its own completion lifecycle."""
    __tablename__ = "swap_transactions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    request_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("swap_requests.id"), nullable=False,
        unique=True,
    )
    user1_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    user2_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    product1_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id"), nullable=False,
        index=True,
    )
    product2_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id"), nullable=True,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False,
        default=SwapTransactionStatus.PENDING.value,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
