"""SwapRequest ORM — a requester's proposal to acquire a target product.

Invariants:
    - requester_id never equals the target product's owner (checked before insert)
    - offered_product_id, when set, belongs to the requester
    - status follows REQUEST_TRANSITIONS (core/enforce_transitions.py)
    - version increments on every status change; updates are compare-and-swap

Design Decisions:
    - Explicit version column instead of SQLAlchemy version_id_col: the engine
      issues guarded UPDATE statements and needs the rowcount, not StaleDataError
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from swapmarket.core.domain_types import SwapRequestStatus
from swapmarket.db.base import Base


class SwapRequest(Base):
    """Swap proposal — PENDING until the target owner answers."""
    __tablename__ = "swap_requests"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    requester_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    target_product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id"), nullable=False,
        index=True,
    )
    offered_product_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id"), nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SwapRequestStatus.PENDING.value,
    )
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
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
