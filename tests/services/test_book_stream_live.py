"""Book Stream over HTTP — GET /books/stream served by a real uvicorn server.

Invariants:
    - The stream answers 200 with text/event-stream and subscribes before
      the response starts
    - A book added while connected arrives as one book_added data frame
    - Disconnecting releases the subscription

Design Decisions:
    - uvicorn runs in the test's event loop with lifespan off, so the
      client fixture's DB override and broker stay in effect
    - Books are added through the in-process client: both paths share the
      app, its overrides and the broker
"""

import asyncio
import json

import httpx
import pytest
import uvicorn

from catalog.core.domain_types import EventTopic
from catalog.main import app

TIMEOUT = 5.0


@pytest.fixture
async def live_url(client):
    config = uvicorn.Config(
        app, host="127.0.0.1", port=0, lifespan="off",
        log_level="warning", timeout_graceful_shutdown=1,
    )
    server = uvicorn.Server(config)
    task = asyncio.create_task(server.serve())
    while not server.started:
        await asyncio.sleep(0.01)
    port = server.servers[0].sockets[0].getsockname()[1]
    yield f"http://127.0.0.1:{port}"
    server.should_exit = True
    await asyncio.wait_for(task, TIMEOUT)


async def _add_book(client, headers, title):
    res = await client.post(
        "/api/v1/books",
        json={"title": title, "author": "Robert Martin", "published": 2008,
              "genres": ["refactoring"]},
        headers=headers,
    )
    assert res.status_code == 201
    return res.json()


async def _next_frame(lines) -> dict:
    async for line in lines:
        if line.startswith("data: "):
            return json.loads(line[len("data: "):])
    raise AssertionError("stream ended before a data frame")


async def _wait_for_subscribers(broker, expected: int) -> None:
    async def settled():
        while broker.subscriber_count(EventTopic.BOOK_ADDED) != expected:
            await asyncio.sleep(0.02)
    await asyncio.wait_for(settled(), TIMEOUT)


async def test_stream_delivers_added_book_and_releases_on_disconnect(
    client, auth_headers, broker, live_url,
):
    async with httpx.AsyncClient(base_url=live_url, timeout=TIMEOUT) as http:
        async with http.stream("GET", "/api/v1/books/stream") as res:
            assert res.status_code == 200
            assert res.headers["content-type"].startswith("text/event-stream")
            await _wait_for_subscribers(broker, 1)

            book = await _add_book(client, auth_headers, "Clean Code")
            event = await asyncio.wait_for(_next_frame(res.aiter_lines()), TIMEOUT)

    assert event == {"type": "book_added", "data": book}

    # the next write finds the closed connection
    await _add_book(client, auth_headers, "Clean Architecture")
    await _wait_for_subscribers(broker, 0)


async def test_stream_opened_after_add_receives_nothing_old(
    client, auth_headers, broker, live_url,
):
    await _add_book(client, auth_headers, "Clean Code")

    async with httpx.AsyncClient(base_url=live_url, timeout=TIMEOUT) as http:
        async with http.stream("GET", "/api/v1/books/stream") as res:
            await _wait_for_subscribers(broker, 1)
            newer = await _add_book(client, auth_headers, "Clean Architecture")
            event = await asyncio.wait_for(_next_frame(res.aiter_lines()), TIMEOUT)

    assert event["data"]["title"] == newer["title"]
