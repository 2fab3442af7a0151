"""Shared test fixtures for the DocBench test suite."""

from __future__ import annotations

import asyncio
import socket
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pytest
from aiohttp import web

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator


# =============================================================================
# Pytest configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    for item in items:
        test_path = str(item.fspath)
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)


# =============================================================================
# Network utilities
# =============================================================================


def _get_free_port() -> int:
    """Find an available port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# =============================================================================
# Fake document store
# =============================================================================


@dataclass
class FakeDocumentStore:
    """In-memory stand-in for a CouchDB-style HTTP document store.

    Tables are created with PUT (201), probed with GET (200/404), dropped
    with DELETE (200) and receive documents via POST (201). The status
    overrides let tests force failures of individual steps.
    """

    port: int = 0
    host: str = "127.0.0.1"
    tables: dict[str, list[bytes]] = field(default_factory=dict)
    requests: list[tuple[str, str, dict[str, str]]] = field(default_factory=list)
    auth_headers: list[str | None] = field(default_factory=list)
    content_types: list[str | None] = field(default_factory=list)
    required_auth: str | None = None
    create_status: int | None = None
    delete_status: int | None = None
    insert_status: int = 201

    def methods(self) -> list[str]:
        return [method for method, _table, _query in self.requests]

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_route("*", "/{table}", self._handle)
        return app

    async def _handle(self, request: web.Request) -> web.Response:
        table = request.match_info["table"]
        self.requests.append((request.method, table, dict(request.query)))
        auth = request.headers.get("Authorization")
        self.auth_headers.append(auth)
        if self.required_auth is not None and auth != self.required_auth:
            return web.json_response({"error": "unauthorized"}, status=401)

        if request.method == "GET":
            if table not in self.tables:
                return web.json_response({"error": "not_found"}, status=404)
            return web.json_response({"db_name": table, "doc_count": len(self.tables[table])})

        if request.method == "PUT":
            if self.create_status is not None:
                return web.json_response({}, status=self.create_status)
            if table in self.tables:
                return web.json_response({"error": "file_exists"}, status=412)
            self.tables[table] = []
            return web.json_response({"ok": True}, status=201)

        if request.method == "DELETE":
            if self.delete_status is not None:
                return web.json_response({}, status=self.delete_status)
            if self.tables.pop(table, None) is None:
                return web.json_response({"error": "not_found"}, status=404)
            return web.json_response({"ok": True})

        if request.method == "POST":
            self.content_types.append(request.headers.get("Content-Type"))
            if table not in self.tables:
                return web.json_response({"error": "not_found"}, status=404)
            self.tables[table].append(await request.read())
            return web.json_response({"ok": True}, status=self.insert_status)

        return web.json_response({"error": "method_not_allowed"}, status=405)


@pytest.fixture
def doc_store() -> Iterator[FakeDocumentStore]:
    """Fake document store served from a background thread.

    The benchmark under test blocks the main thread, so the server runs
    on its own event loop.
    """
    store = FakeDocumentStore(port=_get_free_port())
    started = threading.Event()
    loop_holder: list[asyncio.AbstractEventLoop] = []

    def _thread_target() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        runner = web.AppRunner(store.build_app())
        loop.run_until_complete(runner.setup())
        site = web.TCPSite(runner, store.host, store.port)
        loop.run_until_complete(site.start())
        loop_holder.append(loop)
        started.set()
        loop.run_forever()
        loop.run_until_complete(runner.cleanup())
        loop.close()

    thread = threading.Thread(target=_thread_target, daemon=True)
    thread.start()
    started.wait(timeout=5.0)

    yield store

    if loop_holder:
        loop_holder[0].call_soon_threadsafe(loop_holder[0].stop)
    thread.join(timeout=5.0)


@pytest.fixture
async def async_doc_store() -> AsyncIterator[FakeDocumentStore]:
    """Fake document store served on the test's own event loop."""
    store = FakeDocumentStore(port=_get_free_port())
    runner = web.AppRunner(store.build_app())
    await runner.setup()
    site = web.TCPSite(runner, store.host, store.port)
    await site.start()
    yield store
    await runner.cleanup()


@pytest.fixture
def closed_port() -> int:
    """A localhost port with nothing listening on it."""
    return _get_free_port()
