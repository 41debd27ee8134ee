"""Service test fixtures — async DB, seeded users/books, fakes, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database (CHECK constraints included)
    - get_db dependency overridden to use test DB session
    - db_manager patched so background notification delivery hits the test DB
    - Time is pinned by FixedClock (also injected into routes via get_clock)

Design Decisions:
    - SQLite in-memory: fast, no external dependency; the conditional UPDATEs and CHECKs
      under test are portable SQL
    - RecordingSink instead of the real dispatcher for lifecycle tests: asserts exactly
      which events a committed transition emits
"""

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from app.api.dependencies import get_clock
from app.db.base import Base
from app.infrastructure.database import get_db, DatabaseSessionManager
from app.models.book import Book
from app.models.profile import Profile
import app.infrastructure.database as db_module
from app.main import app
from app.services.book_directory import SqlBookDirectory
from app.services.swap_completion import CompletionTracker
from app.services.swap_lifecycle import SwapLifecycle
from tests.services.fakes import Cast, FixedClock, RecordingSink


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
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
def session_manager(test_engine, test_session_factory):
    """DatabaseSessionManager bound to the test engine (no real pool)."""
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
async def cast(test_db) -> Cast:
    requester, owner, stranger = uuid4(), uuid4(), uuid4()
    test_db.add_all([
        Profile(id=requester, username="reader"),
        Profile(id=owner, username="lender"),
        Profile(id=stranger, username="bystander"),
    ])
    await test_db.flush()
    books = {
        "wanted_book": Book(id=uuid4(), owner_id=owner, title="Dune"),
        "offered_book": Book(id=uuid4(), owner_id=requester, title="Emma"),
        "counter_book": Book(id=uuid4(), owner_id=owner, title="Ulysses"),
        "spare_book": Book(id=uuid4(), owner_id=requester, title="Beloved"),
    }
    test_db.add_all(books.values())
    await test_db.commit()
    return Cast(
        requester=requester, owner=owner, stranger=stranger,
        **{name: book.id for name, book in books.items()},
    )


@pytest.fixture
def lifecycle(test_db, sink, clock):
    return SwapLifecycle(test_db, SqlBookDirectory(test_db, clock), sink, clock)


@pytest.fixture
def tracker(test_db, sink, clock):
    return CompletionTracker(test_db, SqlBookDirectory(test_db, clock), sink, clock)



@pytest.fixture
async def client(test_engine, test_session_factory, session_manager, clock):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    # Patch db_manager for background tasks that use it directly
    original_manager = db_module.db_manager
    db_module.db_manager = session_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
