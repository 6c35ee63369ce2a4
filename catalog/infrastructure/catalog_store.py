"""SQL Entity Store — book/author persistence behind the EntityStore protocol.

Invariants:
    - Every returned Book has author and genre_tags loaded (no lazy IO in async)
    - List reads ordered by (created_at, id): deterministic per store state
    - create_*/save_* commit immediately; each call is its own unit of work
    - Field rule violations raise StoreValidationError before any write;
      unique violations raise it after rollback with kind "unique"

Design Decisions:
    - count_books_by_author is one GROUP BY over the requested author ids:
      the relation count join costs one query regardless of result size
    - Genre membership via EXISTS over book_genres (Book.genre_tags.any)
"""

import logging
from collections.abc import Iterable

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from catalog.core.domain_types import AuthorId
from catalog.core.errors import StoreValidationError
from catalog.core.validation import UNIQUE, check_fields, unique_fields
from catalog.models.author import Author
from catalog.models.book import Book, BookGenre

logger = logging.getLogger(__name__)


class SqlCatalogStore:
    """EntityStore implementation over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Authors ─────────────────────────────────────────────────

    async def find_author_by_name(self, name: str) -> Author | None:
        result = await self.db.execute(
            select(Author).where(Author.name == name),
        )
        return result.scalar_one_or_none()

    async def find_authors(self) -> list[Author]:
        result = await self.db.execute(
            select(Author).order_by(Author.created_at, Author.id),
        )
        return list(result.scalars().all())

    async def count_authors(self) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Author),
        )
        return result.scalar_one()

    async def create_author(
        self, name: str, born: int | None = None,
    ) -> Author:
        self._validate("author", {"name": name})
        author = Author(name=name, born=born)
        self.db.add(author)
        await self._commit("author")
        return author

    async def save_author(self, author: Author) -> Author:
        self._validate("author", {"name": author.name})
        self.db.add(author)
        await self._commit("author")
        return author

    # ─── Books ───────────────────────────────────────────────────

    async def find_book_by_title(self, title: str) -> Book | None:
        result = await self.db.execute(
            self._books_query().where(Book.title == title),
        )
        return result.scalar_one_or_none()

    async def find_books(
        self, author_id: AuthorId | None = None, genre: str | None = None,
    ) -> list[Book]:
        query = self._books_query()
        if author_id is not None:
            query = query.where(Book.author_id == author_id)
        if genre is not None:
            query = query.where(Book.genre_tags.any(BookGenre.genre == genre))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_books(self) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Book),
        )
        return result.scalar_one()

    async def count_books_by_author(
        self, author_ids: Iterable[AuthorId],
    ) -> dict[AuthorId, int]:
        ids = set(author_ids)
        if not ids:
            return {}
        result = await self.db.execute(
            select(Book.author_id, func.count(Book.id))
            .where(Book.author_id.in_(ids))
            .group_by(Book.author_id),
        )
        counts = {author_id: 0 for author_id in ids}
        counts.update({author_id: n for author_id, n in result.all()})
        return counts

    async def list_genres(self) -> list[str]:
        result = await self.db.execute(
            select(BookGenre.genre).distinct().order_by(BookGenre.genre),
        )
        return list(result.scalars().all())

    async def create_book(
        self, title: str, published: int, genres: list[str], author_id: AuthorId,
    ) -> Book:
        self._validate("book", {
            "title": title, "published": published,
            "genres": genres, "author_id": author_id,
        })
        book = Book(
            title=title,
            published=published,
            author_id=author_id,
            genre_tags=[
                BookGenre(position=i, genre=genre)
                for i, genre in enumerate(genres)
            ],
        )
        self.db.add(book)
        await self._commit("book")
        await self.db.refresh(book, attribute_names=["author", "genre_tags"])
        return book

    # ─── Helpers ─────────────────────────────────────────────────

    def _books_query(self):
        return (
            select(Book)
            .options(selectinload(Book.author), selectinload(Book.genre_tags))
            .order_by(Book.created_at, Book.id)
        )

    def _validate(self, entity: str, values: dict) -> None:
        errors = check_fields(entity, values)
        if errors:
            raise StoreValidationError(entity, errors)

    async def _commit(self, entity: str) -> None:
        """Commit, turning unique-constraint violations into StoreValidationError."""
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Unique constraint violated on {entity}: {e.orig}")
            raise StoreValidationError(
                entity, {name: UNIQUE for name in unique_fields(entity)},
            )
