"""Book Mutations — add_book and edit_author with author resolution and notification.

Invariants:
    - Unauthenticated callers rejected before any store access
    - add_book order: duplicate title -> required args -> resolve/create author
      -> create book -> publish BOOK_ADDED
    - A duplicate title performs no writes
    - Store violations always surface as ValidationFailedError via core/validation.py
    - Publish failures are logged and swallowed: they never fail the mutation
    - edit_author on an unknown name returns None and writes nothing

Design Decisions:
    - Author creation and book creation are separate commits. If the book
      fails after a new author was created, the author row remains
      (accepted partial-failure state, covered by tests)
    - Publisher injected (EventPublisher protocol): the broker instance is owned
      by the app lifespan, tests pass a fake
"""

import logging

from catalog.core.domain_types import EventTopic
from catalog.core.errors import (
    DuplicateTitleError, ErrorContext, InvalidInputError,
    StoreValidationError, UnauthorizedError,
)
from catalog.core.payloads import author_payload, book_payload
from catalog.core.repository_protocols import (
    AuthorLike, EntityStore, EventPublisher, UserLike,
)
from catalog.core.validation import to_validation_failed

logger = logging.getLogger(__name__)


class BookMutations:
    """Write operations over books and authors."""

    def __init__(self, store: EntityStore, publisher: EventPublisher):
        self.store = store
        self.publisher = publisher

    async def add_book(
        self,
        current_user: UserLike | None,
        title: str | None,
        author: str | None,
        published: int | None,
        genres: list[str] | None,
    ) -> dict:
        """Persist a new book (creating its author if needed) and announce it."""
        if current_user is None:
            raise UnauthorizedError(ErrorContext(operation="add_book"))

        args = {
            "title": title, "author": author,
            "published": published, "genres": genres,
        }
        if title is not None and await self.store.find_book_by_title(title):
            raise DuplicateTitleError(title, ErrorContext(operation="add_book"))

        missing = [name for name, value in args.items() if value is None]
        if genres is not None and len(genres) == 0:
            missing.append("genres")
        if missing:
            raise InvalidInputError(
                f"Missing required fields: {', '.join(missing)}",
                invalid_args=args,
                context=ErrorContext(operation="add_book"),
            )

        book_author = await self._resolve_author(author)
        try:
            book = await self.store.create_book(
                title, published, list(genres), book_author.id,
            )
        except StoreValidationError as e:
            raise to_validation_failed(e) from e

        payload = book_payload(book)
        logger.info(
            f"Book '{book.title}' added",
            extra={"book_id": payload["id"], "username": current_user.username},
        )
        self._publish_book_added(payload)
        return payload

    async def edit_author(
        self, current_user: UserLike | None, name: str, born: int | None,
    ) -> dict | None:
        """Set an author's birth year. Unknown name returns None."""
        if current_user is None:
            raise UnauthorizedError(ErrorContext(operation="edit_author"))

        author = await self.store.find_author_by_name(name)
        if author is None:
            return None
        author.born = born
        try:
            author = await self.store.save_author(author)
        except StoreValidationError as e:
            raise to_validation_failed(e) from e
        return author_payload(author)

    async def _resolve_author(self, name: str) -> AuthorLike:
        author = await self.store.find_author_by_name(name)
        if author is not None:
            return author
        try:
            author = await self.store.create_author(name)
        except StoreValidationError as e:
            raise to_validation_failed(e) from e
        logger.info(
            f"Author '{author.name}' created",
            extra={"author_id": str(author.id)},
        )
        return author

    def _publish_book_added(self, payload: dict) -> None:
        try:
            self.publisher.publish(EventTopic.BOOK_ADDED, payload)
        except Exception as e:
            logger.warning(
                f"Failed to publish {EventTopic.BOOK_ADDED.value}: {e}",
                extra={"book_id": payload["id"]}, exc_info=True,
            )
