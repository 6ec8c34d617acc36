"""ProductHold ORM — one row per product referenced by an active transaction.

Invariants:
    - product_id is the primary key: a product is held by at most one transaction
    - Inserted in the same DB transaction that creates the SwapTransaction
    - Deleted in the same DB transaction that completes or cancels it

Design Decisions:
    - Separate table over a partial unique index on swap_transactions: the
      constraint spans product1_id OR product2_id, which a single partial
      index cannot express, and it must behave the same on SQLite
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from swapmarket.db.base import Base


class ProductHold(Base):
    __tablename__ = "product_holds"

    product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id"), primary_key=True,
    )
    transaction_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("swap_transactions.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
