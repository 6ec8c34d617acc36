"""Notification Emitter — turns lifecycle events into Notification rows, asynchronously.

Invariants:
    - emit() never blocks and never raises: a full queue drops the event with a warning
    - Each event is persisted in its own DB session, after the lifecycle commit
    - Delivery is at-least-once; (event_id, user_id) uniqueness makes it idempotent
    - Failures retry with exponential backoff (±25% jitter) up to max_retries,
      then are logged and dropped — never surfaced to the lifecycle operation

Design Decisions:
    - asyncio.Queue + single consumer task: one background worker per process,
      started and stopped by the FastAPI lifespan
    - session_factory is any zero-arg callable returning an async context manager
      yielding AsyncSession: db_manager.session in the app, async_sessionmaker in tests
"""

import asyncio
import logging
import random
from contextlib import AbstractAsyncContextManager
from typing import Callable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from swapmarket.core.swap_events import (
    SwapEvent,
    notification_text_for,
    notification_type_for,
)
from swapmarket.models.notification import Notification

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class NotificationEmitter:
    """EventSink that persists notifications off the request path."""

    def __init__(
        self,
        session_factory: SessionFactory,
        max_retries: int = 5,
        base_delay_ms: int = 200,
        max_delay_ms: int = 10_000,
        queue_size: int = 1000,
    ):
        self._session_factory = session_factory
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self._queue: asyncio.Queue[SwapEvent] = asyncio.Queue(maxsize=queue_size)
        self._task: asyncio.Task | None = None

    # ─── EventSink ───────────────────────────────────────────────

    def emit(self, event: SwapEvent) -> None:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(
                "Notification queue full, dropping event",
                extra={
                    "event_id": event.event_id,
                    "event_type": event.event_type.value,
                },
            )

    # ─── Consumer lifecycle ──────────────────────────────────────

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(
                self._consume(), name="notification-emitter",
            )

    async def drain(self) -> None:
        """Wait until every queued event has been handled."""
        await self._queue.join()

    async def stop(self, timeout: float = 5.0) -> None:
        if self._task is None:
            return
        try:
            await asyncio.wait_for(self.drain(), timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Stopping with {self._queue.qsize()} undelivered notification events",
            )
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _consume(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self.deliver(event)
            finally:
                self._queue.task_done()

    # ─── Delivery ────────────────────────────────────────────────

    async def deliver(self, event: SwapEvent) -> bool:
        """Persist one event with retry. Returns False if it was given up."""
        for attempt in range(self.max_retries + 1):
            try:
                await self._persist(event)
                return True
            except Exception as e:
                if attempt >= self.max_retries:
                    logger.error(
                        f"Notification delivery failed permanently: {e}",
                        extra={
                            "event_id": event.event_id,
                            "event_type": event.event_type.value,
                            "attempt": attempt + 1,
                        },
                    )
                    return False
                delay = self._backoff_seconds(attempt)
                logger.warning(
                    f"Notification delivery failed, retrying in {delay:.2f}s: {e}",
                    extra={
                        "event_id": event.event_id,
                        "event_type": event.event_type.value,
                        "attempt": attempt + 1,
                    },
                )
                await asyncio.sleep(delay)
        return False

    def _backoff_seconds(self, attempt: int) -> float:
        delay_ms = min(self.base_delay_ms * (2 ** attempt), self.max_delay_ms)
        return delay_ms * random.uniform(0.75, 1.25) / 1000

    async def _persist(self, event: SwapEvent) -> None:
        async with self._session_factory() as db:
            result = await db.execute(
                select(Notification.user_id)
                .where(Notification.event_id == event.event_id),
            )
            delivered = set(result.scalars().all())
            pending = [u for u in event.recipients if u not in delivered]
            if not pending:
                return
            for user_id in pending:
                db.add(Notification(
                    user_id=user_id,
                    event_id=event.event_id,
                    type=notification_type_for(event).value,
                    message=notification_text_for(event),
                    related_swap_request_id=event.swap_request_id,
                    related_message_id=event.message_id,
                ))
            try:
                await db.commit()
            except IntegrityError:
                # A concurrent redelivery won the race; the rows exist.
                await db.rollback()
                logger.info(
                    "Notification already delivered",
                    extra={"event_id": event.event_id},
                )


# Singleton (initialized on startup)
notification_emitter: NotificationEmitter | None = None


def init_emitter(session_factory: SessionFactory, **kwargs) -> NotificationEmitter:
    global notification_emitter
    notification_emitter = NotificationEmitter(session_factory, **kwargs)
    return notification_emitter


def get_event_sink() -> NotificationEmitter:
    """FastAPI dependency for the process-wide emitter."""
    if not notification_emitter:
        raise RuntimeError("Notification emitter not initialized")
    return notification_emitter
