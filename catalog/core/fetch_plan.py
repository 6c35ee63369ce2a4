"""Relation Fetch Planning — picks exactly one book fetch strategy per read.

Invariants:
    - plan_book_fetch is PURE: returns a plan descriptor, never touches the store
    - Empty strings count as absent filters
    - Genre ALL_GENRES ("all") disables genre filtering entirely
    - Author-scoped strategies carry the author name; the shell resolves it

Design Decisions:
    - Strategy as enum + frozen dataclass: the shell dispatches with match,
      every branch visible in one place
    - Count join is not part of the plan: it depends only on FieldDemand
      and is attached by the shell after the book fetch
"""

from dataclasses import dataclass

from catalog.core.domain_types import ALL_GENRES, FetchStrategy


@dataclass(frozen=True)
class BookFetchPlan:
    """Strategy plus the filter values it needs."""
    strategy: FetchStrategy
    author_name: str | None = None
    genre: str | None = None

    @property
    def needs_author(self) -> bool:
        return self.strategy in (
            FetchStrategy.BY_AUTHOR, FetchStrategy.BY_AUTHOR_AND_GENRE,
        )


def plan_book_fetch(
    author_name: str | None, genre: str | None,
) -> BookFetchPlan:
    """Select the fetch strategy for the given filter arguments."""
    author_name = author_name or None
    genre = genre or None
    if genre == ALL_GENRES:
        genre = None

    if author_name is None and genre is None:
        return BookFetchPlan(FetchStrategy.ALL_BOOKS)
    if genre is None:
        return BookFetchPlan(FetchStrategy.BY_AUTHOR, author_name=author_name)
    if author_name is None:
        return BookFetchPlan(FetchStrategy.BY_GENRE, genre=genre)
    return BookFetchPlan(
        FetchStrategy.BY_AUTHOR_AND_GENRE, author_name=author_name, genre=genre,
    )
