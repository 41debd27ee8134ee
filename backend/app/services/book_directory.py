"""Book Directory — SQL adapter for the catalog and user lookups the engine needs.

Invariants:
    - reserve() is conditional: it flips books to unavailable only if ALL were available
    - Nothing here commits — the calling service owns the transaction

Design Decisions:
    - reserve as one guarded UPDATE with rowcount check: two requests racing for the
      same book cannot both reserve it (same CAS idiom as SwapRequestStore)
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import BookId, UserId
from app.core.repository_protocols import BookInfo, Clock
from app.models.book import Book
from app.models.profile import Profile


class SqlBookDirectory:
    """BookDirectory backed by the books/profiles tables."""

    def __init__(self, db: AsyncSession, clock: Clock):
        self.db = db
        self.clock = clock

    async def get_book(self, book_id: BookId) -> BookInfo | None:
        result = await self.db.execute(
            select(Book.id, Book.owner_id, Book.is_available)
            .where(Book.id == book_id),
        )
        row = result.one_or_none()
        if row is None:
            return None
        return BookInfo(
            id=row.id, owner_id=row.owner_id, is_available=row.is_available,
        )

    async def user_exists(self, user_id: UserId) -> bool:
        result = await self.db.execute(
            select(Profile.id).where(Profile.id == user_id),
        )
        return result.scalar_one_or_none() is not None

    async def reserve(self, book_ids: list[BookId]) -> bool:
        ids = set(book_ids)
        result = await self.db.execute(
            update(Book)
            .where(Book.id.in_(ids), Book.is_available.is_(True))
            .values(is_available=False, updated_at=self.clock.now())
            .execution_options(synchronize_session=False),
        )
        return result.rowcount == len(ids)

    async def release(self, book_ids: list[BookId]) -> None:
        await self.db.execute(
            update(Book)
            .where(Book.id.in_(set(book_ids)))
            .values(is_available=True, updated_at=self.clock.now())
            .execution_options(synchronize_session=False),
        )

    async def transfer_ownership(
        self, book_id: BookId, new_owner_id: UserId,
    ) -> None:
        await self.db.execute(
            update(Book)
            .where(Book.id == book_id)
            .values(owner_id=new_owner_id, updated_at=self.clock.now())
            .execution_options(synchronize_session=False),
        )
