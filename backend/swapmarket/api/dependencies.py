"""Route Dependencies — one SwapService per request, bound to the request's session."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from swapmarket.core.repository_protocols import EventSink
from swapmarket.infrastructure.database import get_db
from swapmarket.infrastructure.notification_emitter import get_event_sink
from swapmarket.services.swap_service import SwapService


def get_swap_service(
    db: AsyncSession = Depends(get_db),
    events: EventSink = Depends(get_event_sink),
) -> SwapService:
    return SwapService(db, events)
