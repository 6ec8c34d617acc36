"""Product ORM — an item listed by its owner for swapping.

Invariants:
    - owner_id is required; category_id is optional
    - is_available flips to false only when a swap involving the product completes
    - deleted_at is a soft-delete tombstone; rows referenced by swaps or reviews
      are never purged
    - version increments on every guarded write (compare-and-swap)

Design Decisions:
    - tags and location as JSON: ordered list of strings / {lat, lng} object,
      portable across PostgreSQL and SQLite
    - Numeric(12, 2) for estimated_value: informational only, no value balancing
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    String, Text, Boolean, Integer, Numeric, DateTime, JSON, ForeignKey,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from swapmarket.core.domain_types import ProductCondition
from swapmarket.db.base import Base


class Product(Base):
    """Listed item — weakly referenced by swap requests, transactions, reviews."""
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    category_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("categories.id"), nullable=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    condition: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProductCondition.USED.value,
    )
    desired_items: Mapped[str | None] = mapped_column(Text, nullable=True)
    estimated_value: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True,
    )
    location: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_available: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
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
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    owner: Mapped["User"] = relationship("User", back_populates="products")
    category: Mapped["Category"] = relationship(
        "Category", back_populates="products",
    )
    images: Mapped[list["ProductImage"]] = relationship(
        "ProductImage", back_populates="product",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="ProductImage.order",
    )
