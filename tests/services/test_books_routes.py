"""Book Routes — HTTP behavior of book reads, add_book and the book_added stream.

Invariants:
    - POST /books without a bearer token is 401 and writes nothing
    - Duplicate title is 409, missing arguments 400 INVALID_INPUT
    - author.book_count present only when requested via `fields` (or no selection)
    - Subscriptions open before a POST receive exactly one event; later ones none

Design Decisions:
    - The SSE endpoint never ends on its own, so stream delivery is asserted
      through the broker fixture and book_added_events directly
"""

import json

import pytest

from catalog.api.routes.books import book_added_events
from catalog.core.domain_types import EventTopic

BOOKS = [
    ("Clean Code", "Robert Martin", 2008, ["refactoring"]),
    ("Agile software development", "Robert Martin", 2002, ["agile", "patterns"]),
    ("Refactoring", "Martin Fowler", 1999, ["refactoring"]),
]


async def _post_book(client, headers, title, author, published, genres):
    return await client.post(
        "/api/v1/books",
        json={"title": title, "author": author, "published": published, "genres": genres},
        headers=headers,
    )


@pytest.fixture
async def seeded(client, auth_headers):
    for book in BOOKS:
        res = await _post_book(client, auth_headers, *book)
        assert res.status_code == 201
    return auth_headers


# ─── add_book ────────────────────────────────────────────────────

async def test_add_book_requires_token(client):
    res = await _post_book(client, {}, *BOOKS[0])
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "UNAUTHORIZED"

    res = await client.get("/api/v1/books/count")
    assert res.json() == {"count": 0}


async def test_add_book_rejects_forged_token(client):
    res = await _post_book(client, {"Authorization": "Bearer forged"}, *BOOKS[0])
    assert res.status_code == 401


async def test_add_book_returns_book_with_author(client, auth_headers):
    res = await _post_book(client, auth_headers, *BOOKS[0])
    assert res.status_code == 201
    body = res.json()
    assert body["title"] == "Clean Code"
    assert body["genres"] == ["refactoring"]
    assert body["author"]["name"] == "Robert Martin"
    assert body["author"]["born"] is None


async def test_add_book_duplicate_title_is_409(client, seeded):
    res = await _post_book(client, seeded, "Clean Code", "Someone Else", 2020, ["x"])
    assert res.status_code == 409
    assert res.json()["error"]["message"] == "Title must be unique"

    res = await client.get("/api/v1/authors/count")
    assert res.json() == {"count": 2}


async def test_add_book_missing_argument_is_400(client, auth_headers):
    res = await client.post(
        "/api/v1/books",
        json={"title": "Clean Code", "author": "Robert Martin", "genres": ["x"]},
        headers=auth_headers,
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_INPUT"


async def test_add_book_short_author_name_is_400(client, auth_headers):
    res = await _post_book(client, auth_headers, "Clean Code", "Bob", 2008, ["x"])
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Name must be at least 5 characters long!"


# ─── reads ───────────────────────────────────────────────────────

async def test_books_unfiltered(client, seeded):
    res = await client.get("/api/v1/books")
    assert res.status_code == 200
    assert len(res.json()) == 3


async def test_books_by_author_and_genre(client, seeded):
    res = await client.get(
        "/api/v1/books", params={"author": "Robert Martin", "genre": "refactoring"},
    )
    assert [b["title"] for b in res.json()] == ["Clean Code"]


async def test_books_all_genre_sentinel(client, seeded):
    res = await client.get("/api/v1/books", params={"genre": "all"})
    assert len(res.json()) == 3


async def test_books_unknown_author_is_404(client, seeded):
    res = await client.get("/api/v1/books", params={"author": "Nobody Known"})
    assert res.status_code == 404


async def test_books_fields_without_count_omit_it(client, seeded):
    res = await client.get("/api/v1/books", params={"fields": "title,author{name}"})
    assert all("book_count" not in b["author"] for b in res.json())


async def test_books_fields_with_count_include_it(client, seeded):
    res = await client.get(
        "/api/v1/books", params={"fields": "title,author{name,bookCount}"},
    )
    counts = {b["author"]["name"]: b["author"]["book_count"] for b in res.json()}
    assert counts == {"Robert Martin": 2, "Martin Fowler": 1}


async def test_books_malformed_fields_compute_count(client, seeded):
    res = await client.get("/api/v1/books", params={"fields": "author{name"})
    assert res.status_code == 200
    assert all("book_count" in b["author"] for b in res.json())


async def test_book_count_and_genres(client, seeded):
    assert (await client.get("/api/v1/books/count")).json() == {"count": 3}
    res = await client.get("/api/v1/genres")
    assert res.json() == {"genres": ["agile", "all", "patterns", "refactoring"]}


# ─── book_added stream ───────────────────────────────────────────

async def test_subscribers_receive_each_added_book_once(client, auth_headers, broker):
    first = broker.subscribe(EventTopic.BOOK_ADDED)
    second = broker.subscribe(EventTopic.BOOK_ADDED)

    res = await _post_book(client, auth_headers, *BOOKS[0])

    for subscription in (first, second):
        assert subscription.pending == 1
        event = await subscription.__anext__()
        assert event == res.json()
        assert subscription.pending == 0


async def test_late_subscriber_receives_nothing(client, auth_headers, broker):
    await _post_book(client, auth_headers, *BOOKS[0])
    late = broker.subscribe(EventTopic.BOOK_ADDED)
    assert late.pending == 0


async def test_failed_add_book_publishes_nothing(client, seeded, broker):
    subscription = broker.subscribe(EventTopic.BOOK_ADDED)
    await _post_book(client, seeded, *BOOKS[0])
    assert subscription.pending == 0


async def test_book_added_events_formats_sse_and_closes(broker):
    subscription = broker.subscribe(EventTopic.BOOK_ADDED)
    events = book_added_events(subscription)

    broker.publish(EventTopic.BOOK_ADDED, {"title": "Clean Code"})
    line = await events.__anext__()

    assert line.startswith("data: ") and line.endswith("\n\n")
    assert json.loads(line[len("data: "):]) == {
        "type": "book_added", "data": {"title": "Clean Code"},
    }

    await events.aclose()
    assert subscription.closed
    assert broker.subscriber_count(EventTopic.BOOK_ADDED) == 0


async def test_book_added_events_ends_when_subscription_closes(broker):
    subscription = broker.subscribe(EventTopic.BOOK_ADDED)
    subscription.close()
    assert [line async for line in book_added_events(subscription)] == []
