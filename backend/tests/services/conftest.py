"""Service test fixtures — async DB, recording event sink, seed helpers, test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db and get_event_sink overridden so routes use the test DB and sink
    - Events are recorded, never delivered: emitter behavior is tested separately

Design Decisions:
    - SQLite in-memory on one shared connection (StaticPool): fast, no external
      dependency, sufficient for sequential lifecycle and route tests
      (ADR: concurrency tests use a file database, see test_concurrent_accept.py)
    - Seed helpers insert ORM rows directly: products and users have no
      lifecycle rules of their own here
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from swapmarket.core.swap_events import SwapEvent
from swapmarket.db.base import Base
from swapmarket.infrastructure.database import get_db
from swapmarket.infrastructure.notification_emitter import get_event_sink
from swapmarket.models.product import Product
from swapmarket.models.user import User
from swapmarket.services.swap_service import SwapService
from swapmarket.main import app


class RecordingSink:
    """EventSink that keeps every emitted event in order."""

    def __init__(self):
        self.events: list[SwapEvent] = []

    def emit(self, event: SwapEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [e.event_type.value for e in self.events]


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def events():
    return RecordingSink()


@pytest.fixture
async def swap_service(test_db, events):
    return SwapService(test_db, events)


@pytest.fixture
def make_user(test_session_factory):
    """Factory: insert a user and return its id."""
    counter = {"n": 0}

    async def _make(name: str = "user"):
        counter["n"] += 1
        n = counter["n"]
        async with test_session_factory() as db:
            user = User(
                external_auth_id=f"auth|{name}-{n}",
                email=f"{name}-{n}@example.com",
                name=name,
            )
            db.add(user)
            await db.commit()
            return user.id

    return _make


@pytest.fixture
def make_product(test_session_factory):
    """Factory: insert a product for an owner and return its id."""

    async def _make(owner_id, title: str = "Item", **fields):
        async with test_session_factory() as db:
            product = Product(owner_id=owner_id, title=title, **fields)
            db.add(product)
            await db.commit()
            return product.id

    return _make


@pytest.fixture
def load_product(test_session_factory):
    """Factory: read a product row fresh from the DB."""

    async def _load(product_id):
        async with test_session_factory() as db:
            return await db.get(Product, product_id)

    return _load


@pytest.fixture
async def client(test_session_factory, events):
    """FastAPI test client with DB and event sink dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_sink] = lambda: events

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
