"""Integration tests for HttpClient used from a running event loop."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from docbench._internal.errors import TransportError
from docbench.transport.http_client import HttpClient, basic_auth_header

if TYPE_CHECKING:
    from conftest import FakeDocumentStore


def _url(store: FakeDocumentStore, table: str = "bench_table") -> str:
    return f"http://{store.host}:{store.port}/{table}"


@pytest.mark.timeout(30)
class TestAsyncHttpClient:
    async def test_table_lifecycle(self, async_doc_store: FakeDocumentStore):
        async with HttpClient() as client:
            assert await client.asend("GET", _url(async_doc_store)) == 404
            assert await client.asend("PUT", _url(async_doc_store)) == 201
            assert await client.asend("GET", _url(async_doc_store)) == 200
            assert await client.asend("DELETE", _url(async_doc_store)) == 200

        assert async_doc_store.methods() == ["GET", "PUT", "GET", "DELETE"]

    async def test_insert_carries_body_and_default_headers(
        self, async_doc_store: FakeDocumentStore
    ):
        async_doc_store.tables["bench_table"] = []
        headers = basic_auth_header("admin", "secret")
        body = json.dumps({"field1": "xyz"})

        async with HttpClient(headers=headers) as client:
            status = await client.asend(
                "POST",
                _url(async_doc_store),
                headers={"Content-Type": "application/json"},
                body=body,
            )

        assert status == 201
        assert async_doc_store.tables["bench_table"] == [body.encode()]
        assert async_doc_store.auth_headers == [headers["Authorization"]]
        assert async_doc_store.content_types == ["application/json"]

    async def test_connection_refused(self, closed_port: int):
        async with HttpClient(timeout=5.0) as client:
            with pytest.raises(TransportError) as info:
                await client.asend("GET", f"http://127.0.0.1:{closed_port}/bench_table")
        assert info.value.kind == "ClientConnectorError"

    async def test_asend_requires_open_session(self):
        client = HttpClient()
        with pytest.raises(RuntimeError, match="not open"):
            await client.asend("GET", "http://127.0.0.1:1/bench_table")

    async def test_session_closed_on_exit(self, async_doc_store: FakeDocumentStore):
        client = HttpClient()
        async with client:
            await client.asend("GET", _url(async_doc_store))
        with pytest.raises(RuntimeError):
            await client.asend("GET", _url(async_doc_store))
