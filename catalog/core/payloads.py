"""Response Payloads — pure transforms from entity records to JSON-ready dicts.

Invariants:
    - book_count key is present only when counts were computed; a computed
      zero is 0, a count that was not computed is absent
    - Book payloads always embed their author payload
    - All functions are pure — no DB, no async, no side effects
"""

from collections.abc import Mapping
from uuid import UUID

from catalog.core.repository_protocols import AuthorLike, BookLike, UserLike


def author_payload(
    author: AuthorLike, book_counts: Mapping[UUID, int] | None = None,
) -> dict:
    payload = {"id": str(author.id), "name": author.name, "born": author.born}
    if book_counts is not None:
        payload["book_count"] = book_counts.get(author.id, 0)
    return payload


def book_payload(
    book: BookLike, book_counts: Mapping[UUID, int] | None = None,
) -> dict:
    return {
        "id": str(book.id),
        "title": book.title,
        "published": book.published,
        "genres": list(book.genres),
        "author": author_payload(book.author, book_counts),
    }


def user_payload(user: UserLike) -> dict:
    return {
        "id": str(user.id),
        "username": user.username,
        "favorite_genre": user.favorite_genre,
    }
