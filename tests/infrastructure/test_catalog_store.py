"""SQL Catalog Store — tests against an in-memory SQLite database.

Tests cover:
    - create_author / create_book persist and return loaded relations
    - Field rules raise StoreValidationError before writing
    - Unique violations raise StoreValidationError with kind "unique"
    - find_books filters by author id and genre membership
    - count_books_by_author counts per author, zero for authors without books
    - list_genres returns distinct sorted tags
"""

import inspect
import warnings

import pytest
from sqlalchemy.exc import SAWarning

from catalog.core.errors import StoreValidationError
from catalog.core.repository_protocols import EntityStore
from catalog.infrastructure.catalog_store import SqlCatalogStore


@pytest.fixture
def store(test_db):
    return SqlCatalogStore(test_db)


async def _seed(store):
    martin = await store.create_author("Robert Martin", born=1952)
    fowler = await store.create_author("Martin Fowler", born=1963)
    kafka = await store.create_author("Franz Kafka")
    await store.create_book("Clean Code", 2008, ["refactoring"], martin.id)
    await store.create_book(
        "Agile software development", 2002, ["agile", "patterns", "design"], martin.id,
    )
    await store.create_book("Refactoring", 1999, ["refactoring"], fowler.id)
    return martin, fowler, kafka


async def test_create_book_returns_author_and_ordered_genres(store):
    author = await store.create_author("Robert Martin")
    book = await store.create_book("Clean Code", 2008, ["refactoring", "agile"], author.id)
    assert book.author.name == "Robert Martin"
    assert book.genres == ["refactoring", "agile"]


async def test_create_author_rejects_short_name_without_writing(store):
    with pytest.raises(StoreValidationError) as exc_info:
        await store.create_author("Mao")
    assert exc_info.value.errors == {"name": "minlength"}
    assert await store.count_authors() == 0


async def test_create_book_rejects_short_title(store):
    author = await store.create_author("Robert Martin")
    with pytest.raises(StoreValidationError) as exc_info:
        await store.create_book("X", 2008, ["agile"], author.id)
    assert exc_info.value.entity == "book"
    assert exc_info.value.errors == {"title": "minlength"}
    assert await store.count_books() == 0


async def test_duplicate_author_name_is_unique_violation(store):
    await store.create_author("Robert Martin")
    with pytest.raises(StoreValidationError) as exc_info:
        await store.create_author("Robert Martin")
    assert exc_info.value.errors == {"name": "unique"}
    assert await store.count_authors() == 1


async def test_find_books_unfiltered_returns_all(store):
    await _seed(store)
    books = await store.find_books()
    assert {b.title for b in books} == {
        "Clean Code", "Agile software development", "Refactoring",
    }


async def test_find_books_order_is_deterministic(store):
    await _seed(store)
    first = [b.title for b in await store.find_books()]
    second = [b.title for b in await store.find_books()]
    assert first == second


async def test_find_books_by_author(store):
    martin, _, kafka = await _seed(store)
    books = await store.find_books(author_id=martin.id)
    assert {b.title for b in books} == {"Clean Code", "Agile software development"}
    assert await store.find_books(author_id=kafka.id) == []


async def test_find_books_by_genre_membership(store):
    await _seed(store)
    books = await store.find_books(genre="refactoring")
    assert {b.title for b in books} == {"Clean Code", "Refactoring"}


async def test_find_books_by_author_and_genre(store):
    martin, _, _ = await _seed(store)
    books = await store.find_books(author_id=martin.id, genre="refactoring")
    assert [b.title for b in books] == ["Clean Code"]


async def test_count_books_by_author(store):
    martin, fowler, kafka = await _seed(store)
    counts = await store.count_books_by_author([martin.id, fowler.id, kafka.id])
    assert counts == {martin.id: 2, fowler.id: 1, kafka.id: 0}
    assert await store.count_books_by_author([]) == {}


async def test_list_genres_distinct_and_sorted(store):
    await _seed(store)
    with warnings.catch_warnings():
        warnings.simplefilter("error", SAWarning)
        genres = await store.list_genres()
    assert genres == ["agile", "design", "patterns", "refactoring"]


async def test_save_author_updates_born(store):
    author = await store.create_author("Franz Kafka")
    author.born = 1883
    await store.save_author(author)
    reloaded = await store.find_author_by_name("Franz Kafka")
    assert reloaded.born == 1883


def _operations(cls) -> set[str]:
    return {
        name for name, member in vars(cls).items()
        if not name.startswith("_") and inspect.iscoroutinefunction(member)
    }


def test_store_operations_match_entity_store_protocol():
    assert _operations(SqlCatalogStore) == _operations(EntityStore)
