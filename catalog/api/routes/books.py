"""Book Routes — book reads, add_book, genres and the live book_added stream.

Invariants:
    - GET /books parses `fields` into a selection and lets field-demand analysis
      decide whether author.book_count is computed
    - POST /books requires a bearer token (401 otherwise) and publishes BOOK_ADDED
    - GET /books/stream registers its subscription before the response starts:
      every book added after the request is accepted is delivered
    - Stream subscription closed when the client disconnects

Design Decisions:
    - SSE over WebSocket: one-way notifications, plain HTTP, same framing as
      other streamed endpoints
    - book_added_events is a standalone generator so it can be driven in tests
      without an HTTP client
"""

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse

from catalog.api.dependencies import (
    get_book_mutations, get_book_queries, get_broker, get_current_user,
)
from catalog.core.domain_types import EventTopic
from catalog.core.field_demand import analyze_book_selection, parse_selection
from catalog.core.repository_protocols import UserLike
from catalog.infrastructure.notification_broker import (
    NotificationBroker, Subscription,
)
from catalog.schemas.catalog import BookCreate
from catalog.services.book_mutations import BookMutations
from catalog.services.book_queries import BookQueries

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["books"])

# SSE headers prevent proxy/browser buffering of streamed events
_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}


@router.get("/books")
async def all_books(
    author: str | None = Query(None),
    genre: str | None = Query(None),
    fields: str | None = Query(None),
    queries: BookQueries = Depends(get_book_queries),
):
    """List books, optionally filtered by author name and/or genre."""
    demand = analyze_book_selection(parse_selection(fields))
    return await queries.all_books(author, genre, demand)


@router.get("/books/count")
async def book_count(queries: BookQueries = Depends(get_book_queries)):
    return {"count": await queries.book_count()}


@router.get("/genres")
async def all_genres(queries: BookQueries = Depends(get_book_queries)):
    """Distinct genres including the "all" sentinel."""
    return {"genres": await queries.all_genres()}


@router.post("/books", status_code=status.HTTP_201_CREATED)
async def add_book(
    body: BookCreate,
    current_user: UserLike | None = Depends(get_current_user),
    mutations: BookMutations = Depends(get_book_mutations),
):
    """Add a book, creating its author if unknown."""
    return await mutations.add_book(
        current_user,
        title=body.title,
        author=body.author,
        published=body.published,
        genres=body.genres,
    )


@router.get("/books/stream")
async def book_added_stream(broker: NotificationBroker = Depends(get_broker)):
    """SSE stream — one event per book added while connected."""
    subscription = broker.subscribe(EventTopic.BOOK_ADDED)
    return StreamingResponse(
        book_added_events(subscription),
        media_type="text/event-stream",
        headers=_SSE_HEADERS,
    )


async def book_added_events(subscription: Subscription):
    """Yield one SSE line per delivered book, closing the subscription on exit."""
    try:
        async for book in subscription:
            yield _sse_line({"type": "book_added", "data": book})
    except asyncio.CancelledError:
        logger.info(f"Client disconnected from book stream ({subscription.id})")
        return
    finally:
        subscription.close()


def _sse_line(event: dict) -> str:
    """Format event as SSE data line."""
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"
