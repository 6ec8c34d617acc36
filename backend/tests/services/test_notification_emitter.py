"""Notification Emitter — persistence, idempotent redelivery, retry with backoff.

Invariants:
    - One Notification row per (event, recipient)
    - Redelivering an event never duplicates rows
    - Transient failures are retried; permanent failure is reported, not raised
    - emit() never raises, even with a full queue
"""

from contextlib import asynccontextmanager
from uuid import uuid4

import pytest
from sqlalchemy import select

from swapmarket.core.domain_types import (
    NotificationType,
    SwapEventType,
    SwapRequestId,
)
from swapmarket.core.swap_events import SwapEvent
from swapmarket.infrastructure.notification_emitter import NotificationEmitter
from swapmarket.models.notification import Notification


@pytest.fixture
async def cancelled_event(make_user):
    owner = await make_user("owner")
    requester = await make_user("requester")
    return SwapEvent(
        SwapEventType.SWAP_CANCELLED, (owner, requester),
        swap_request_id=SwapRequestId(uuid4()),
    )


async def _rows(factory, event):
    async with factory() as db:
        result = await db.execute(
            select(Notification).where(Notification.event_id == event.event_id),
        )
        return result.scalars().all()


def _flaky(factory, failures: int):
    """Session factory that raises on its first `failures` calls."""
    calls = {"n": 0}

    @asynccontextmanager
    async def _session():
        calls["n"] += 1
        if calls["n"] <= failures:
            raise ConnectionError("database unreachable")
        async with factory() as db:
            yield db

    return _session, calls


async def test_deliver_writes_one_row_per_recipient(test_session_factory, cancelled_event):
    emitter = NotificationEmitter(test_session_factory)
    assert await emitter.deliver(cancelled_event) is True

    rows = await _rows(test_session_factory, cancelled_event)
    assert {r.user_id for r in rows} == set(cancelled_event.recipients)
    assert all(r.type == NotificationType.SWAP_UPDATE.value for r in rows)
    assert all(r.related_swap_request_id == cancelled_event.swap_request_id for r in rows)
    assert all(r.is_read is False for r in rows)


async def test_redelivery_is_idempotent(test_session_factory, cancelled_event):
    emitter = NotificationEmitter(test_session_factory)
    await emitter.deliver(cancelled_event)
    await emitter.deliver(cancelled_event)

    rows = await _rows(test_session_factory, cancelled_event)
    assert len(rows) == 2


async def test_transient_failure_is_retried(test_session_factory, cancelled_event):
    factory, calls = _flaky(test_session_factory, failures=2)
    emitter = NotificationEmitter(factory, max_retries=3, base_delay_ms=0)

    assert await emitter.deliver(cancelled_event) is True
    assert calls["n"] == 3
    assert len(await _rows(test_session_factory, cancelled_event)) == 2


async def test_permanent_failure_gives_up(test_session_factory, cancelled_event):
    factory, calls = _flaky(test_session_factory, failures=100)
    emitter = NotificationEmitter(factory, max_retries=2, base_delay_ms=0)

    assert await emitter.deliver(cancelled_event) is False
    assert calls["n"] == 3
    assert await _rows(test_session_factory, cancelled_event) == []


async def test_background_consumer_drains_queue(test_session_factory, cancelled_event):
    emitter = NotificationEmitter(test_session_factory)
    emitter.start()
    emitter.emit(cancelled_event)
    await emitter.drain()
    await emitter.stop()

    assert len(await _rows(test_session_factory, cancelled_event)) == 2


async def test_full_queue_drops_without_raising(test_session_factory, cancelled_event):
    emitter = NotificationEmitter(test_session_factory, queue_size=1)
    emitter.emit(cancelled_event)
    emitter.emit(cancelled_event)
    assert emitter._queue.qsize() == 1


def test_backoff_grows_and_is_capped():
    emitter = NotificationEmitter(
        lambda: None, base_delay_ms=100, max_delay_ms=1000,
    )
    first = emitter._backoff_seconds(0)
    third = emitter._backoff_seconds(2)
    capped = emitter._backoff_seconds(10)
    assert 0.075 <= first <= 0.125
    assert 0.3 <= third <= 0.5
    assert 0.75 <= capped <= 1.25
