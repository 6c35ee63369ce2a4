"""Book Queries — executes fetch plans and attaches the author book_count on demand.

Invariants:
    - Exactly one store book fetch per all_books call
    - Author-scoped plans resolve the author first; unknown name raises
      AuthorNotFoundError, a known author with no books returns []
    - The count query runs only when FieldDemand asks for it, and only for
      the authors present in the result
    - Result sets are identical with or without the count; only the
      book_count key differs

Design Decisions:
    - Planning is pure (core/fetch_plan.py), this class only performs IO
    - Missing demand defaults to the conservative decision
"""

import logging

from catalog.core.domain_types import ALL_GENRES
from catalog.core.errors import AuthorNotFoundError, ErrorContext
from catalog.core.fetch_plan import plan_book_fetch
from catalog.core.field_demand import FieldDemand
from catalog.core.payloads import author_payload, book_payload
from catalog.core.repository_protocols import EntityStore

logger = logging.getLogger(__name__)


class BookQueries:
    """Read operations over books and authors."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def all_books(
        self,
        author_name: str | None = None,
        genre: str | None = None,
        demand: FieldDemand | None = None,
    ) -> list[dict]:
        """Books matching the filters, author joined, count attached on demand."""
        demand = demand or FieldDemand.conservative()
        plan = plan_book_fetch(author_name, genre)
        logger.debug(
            f"Fetching books with {plan.strategy.value}",
            extra={"strategy": plan.strategy.value},
        )

        author_id = None
        if plan.needs_author:
            author = await self.store.find_author_by_name(plan.author_name)
            if author is None:
                raise AuthorNotFoundError(
                    plan.author_name, ErrorContext(operation="all_books"),
                )
            author_id = author.id

        books = await self.store.find_books(author_id=author_id, genre=plan.genre)

        counts = None
        if demand.needs_author_book_count:
            counts = await self.store.count_books_by_author(
                {book.author_id for book in books},
            )
        return [book_payload(book, counts) for book in books]

    async def all_authors(self, demand: FieldDemand | None = None) -> list[dict]:
        demand = demand or FieldDemand.conservative()
        authors = await self.store.find_authors()
        counts = None
        if demand.needs_author_book_count:
            counts = await self.store.count_books_by_author(
                author.id for author in authors
            )
        return [author_payload(author, counts) for author in authors]

    async def book_count(self) -> int:
        return await self.store.count_books()

    async def author_count(self) -> int:
        return await self.store.count_authors()

    async def all_genres(self) -> list[str]:
        """Distinct genre tags plus the "all" sentinel, sorted."""
        genres = set(await self.store.list_genres())
        genres.add(ALL_GENRES)
        return sorted(genres)
