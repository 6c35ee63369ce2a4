"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Store create/save methods raise StoreValidationError with {field: kind}

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass plain fakes
    - Entity shapes (AuthorLike, BookLike, UserLike) avoid coupling services
      to the ORM while still giving the type checker real attributes
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol
from uuid import UUID

from catalog.core.domain_types import AuthorId, EventTopic, UserId


class AuthorLike(Protocol):
    """Structural contract for Author records."""
    id: UUID
    name: str
    born: int | None


class BookLike(Protocol):
    """Structural contract for Book records (author relation loaded)."""
    id: UUID
    title: str
    published: int
    author_id: UUID
    author: AuthorLike

    @property
    def genres(self) -> list[str]: ...


class UserLike(Protocol):
    """Structural contract for authenticated callers."""
    id: UUID
    username: str
    favorite_genre: str


class EntityStore(Protocol):
    """Contract for book/author persistence — implemented by shell."""
    async def find_author_by_name(self, name: str) -> AuthorLike | None: ...
    async def find_authors(self) -> list[AuthorLike]: ...
    async def find_book_by_title(self, title: str) -> BookLike | None: ...
    async def find_books(
        self, author_id: AuthorId | None = None, genre: str | None = None,
    ) -> list[BookLike]: ...
    async def count_books_by_author(
        self, author_ids: Iterable[AuthorId],
    ) -> dict[AuthorId, int]: ...
    async def count_books(self) -> int: ...
    async def count_authors(self) -> int: ...
    async def list_genres(self) -> list[str]: ...
    async def create_author(
        self, name: str, born: int | None = None,
    ) -> AuthorLike: ...
    async def create_book(
        self, title: str, published: int, genres: list[str], author_id: AuthorId,
    ) -> BookLike: ...
    async def save_author(self, author: AuthorLike) -> AuthorLike: ...


class UserStore(Protocol):
    """Contract for user and login-session persistence — implemented by shell."""
    async def find_user_by_username(self, username: str) -> UserLike | None: ...
    async def create_user(
        self, username: str, favorite_genre: str,
    ) -> UserLike: ...
    async def create_user_session(
        self, user_id: UserId, token_hash: str, expires_at: datetime,
    ) -> None: ...
    async def find_user_by_token_hash(
        self, token_hash: str, now: datetime,
    ) -> UserLike | None: ...


class EventPublisher(Protocol):
    """Contract for the change notification broker."""
    def publish(self, topic: EventTopic, payload: dict) -> int: ...
