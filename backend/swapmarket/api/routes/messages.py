"""Message & Notification Routes — send messages, read a user's notifications.

Design Decisions:
    - Notifications are read straight from the table: they are written only
      by the emitter, so there is no domain rule to go through
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from swapmarket.api.dependencies import get_swap_service
from swapmarket.infrastructure.database import get_db
from swapmarket.models.notification import Notification
from swapmarket.schemas.message import (
    MessageCreate,
    MessageResponse,
    NotificationResponse,
)
from swapmarket.services.swap_service import SwapService

router = APIRouter(prefix="/api/v1", tags=["messages"])


@router.post(
    "/messages", response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    body: MessageCreate, service: SwapService = Depends(get_swap_service),
):
    message = await service.send_message(
        body.sender_id, body.recipient_id, body.content, body.product_id,
    )
    return MessageResponse.from_view(message)


@router.get(
    "/users/{user_id}/notifications",
    response_model=list[NotificationResponse],
)
async def list_notifications(
    user_id: UUID,
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    query = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
    )
    if unread_only:
        query = query.where(Notification.is_read.is_(False))
    result = await db.execute(query.limit(limit).offset(offset))
    return [
        NotificationResponse(
            id=n.id,
            type=n.type,
            message=n.message,
            is_read=n.is_read,
            related_swap_request_id=n.related_swap_request_id,
            related_message_id=n.related_message_id,
            created_at=n.created_at,
        )
        for n in result.scalars().all()
    ]
