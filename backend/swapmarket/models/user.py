"""User ORM — identity anchor for every marketplace entity.

Invariants:
    - email and external_auth_id are unique
    - Never hard-deleted: products, swaps and reviews keep referencing the row
    - role is one of UserRole (BUYER | SELLER | ADMIN)

Design Decisions:
    - external_auth_id is an opaque string from the identity provider;
      authentication itself lives outside this service
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from swapmarket.core.domain_types import UserRole
from swapmarket.db.base import Base


class User(Base):
    """Marketplace member — owns products, sends requests and messages."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    external_auth_id: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    email: Mapped[str] = mapped_column(
        String(320), nullable=False, unique=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    profile_image: Mapped[str | None] = mapped_column(
        String(1000), nullable=True,
    )
    phone_number: Mapped[str | None] = mapped_column(String(40), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.BUYER.value,
    )
    is_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    terms_accepted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
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
    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    products: Mapped[list["Product"]] = relationship(
        "Product", back_populates="owner", lazy="selectin",
    )
