"""Message & Notification Schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from swapmarket.core.domain_types import NotificationType
from swapmarket.core.swap_entities import MessageView


class MessageCreate(BaseModel):
    sender_id: UUID
    recipient_id: UUID
    content: str = Field(min_length=1, max_length=5000)
    product_id: UUID | None = None


class MessageResponse(BaseModel):
    id: UUID
    sender_id: UUID
    recipient_id: UUID
    content: str
    product_id: UUID | None = None
    is_read: bool
    created_at: datetime | None = None

    @classmethod
    def from_view(cls, view: MessageView) -> "MessageResponse":
        return cls(
            id=view.id,
            sender_id=view.sender_id,
            recipient_id=view.recipient_id,
            content=view.content,
            product_id=view.product_id,
            is_read=view.is_read,
            created_at=view.created_at,
        )


class NotificationResponse(BaseModel):
    id: UUID
    type: NotificationType
    message: str
    is_read: bool
    related_swap_request_id: UUID | None = None
    related_message_id: UUID | None = None
    created_at: datetime
