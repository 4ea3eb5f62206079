from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from typing import Any

import pytest
import pytest_asyncio
from aiohttp import ClientSession, web
from aiohttp.test_utils import TestServer

from todo_sync import DocumentStoreClient, TodoSyncService
from todo_sync.utils.logging import reset_warnings

FROZEN_NOW = datetime(2025, 4, 12, 9, 30, tzinfo=UTC)


class MemoryDocumentStore:
    """In-memory reference implementation of the Firebase-style REST store."""

    def __init__(self) -> None:
        self.root: dict[str, Any] = {}
        self.requests: list[tuple[str, str, dict[str, str]]] = []
        self._failures: dict[tuple[str, str], int] = {}
        self._delays: dict[tuple[str, str], float] = {}

    # ------------------------------------------------------------------
    def seed(self, path: str, document: Any) -> None:
        *parents, leaf = path.strip("/").split("/")
        node = self.root
        for segment in parents:
            node = node.setdefault(segment, {})
        node[leaf] = json.loads(json.dumps(document))

    def read(self, path: str) -> Any:
        node: Any = self.root
        for segment in path.strip("/").split("/"):
            if not isinstance(node, dict) or segment not in node:
                return None
            node = node[segment]
        return node

    def fail(self, method: str, path: str, status: int = 500) -> None:
        self._failures[(method, path.strip("/"))] = status

    def delay(self, method: str, path: str, seconds: float) -> None:
        self._delays[(method, path.strip("/"))] = seconds

    def calls(self, method: str | None = None) -> list[str]:
        return [path for verb, path, _ in self.requests if method is None or verb == method]

    # ------------------------------------------------------------------
    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_route("*", "/{tail:.*}", self._handle)
        return app

    async def _handle(self, request: web.Request) -> web.StreamResponse:
        tail = request.match_info["tail"]
        if not tail.endswith(".json"):
            return web.json_response({"error": "404 Not Found"}, status=404)
        path = tail[: -len(".json")].strip("/")
        self.requests.append((request.method, path, dict(request.query)))
        delay = self._delays.get((request.method, path))
        if delay:
            await asyncio.sleep(delay)
        status = self._failures.get((request.method, path))
        if status:
            return web.json_response({"error": "injected failure"}, status=status)

        if request.method == "GET":
            return self._json(self._get(path, request.query))
        if request.method == "PUT":
            document = await request.json()
            self.seed(path, document)
            return self._json(document)
        if request.method == "DELETE":
            *parents, leaf = path.split("/")
            parent = self.read("/".join(parents)) if parents else self.root
            if isinstance(parent, dict):
                parent.pop(leaf, None)
            return self._json(None)
        return web.json_response({"error": "405 Method Not Allowed"}, status=405)

    def _get(self, path: str, query) -> Any:
        node = self.read(path)
        if "orderBy" not in query:
            return node
        field = json.loads(query["orderBy"])
        expected = json.loads(query["equalTo"])
        if not isinstance(node, dict):
            return {}
        return {
            key: value
            for key, value in node.items()
            if isinstance(value, dict) and value.get(field) == expected
        }

    @staticmethod
    def _json(payload: Any) -> web.Response:
        return web.Response(text=json.dumps(payload), content_type="application/json")


@pytest.fixture(autouse=True)
def _reset_log_limits():
    reset_warnings()
    yield
    reset_warnings()


@pytest.fixture
def memory_store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest_asyncio.fixture
async def store_client(memory_store: MemoryDocumentStore) -> AsyncIterator[DocumentStoreClient]:
    server = TestServer(memory_store.app())
    await server.start_server()
    try:
        async with ClientSession() as session:
            yield DocumentStoreClient(str(server.make_url("/")).rstrip("/"), session)
    finally:
        await server.close()


@pytest.fixture
def service(store_client: DocumentStoreClient) -> TodoSyncService:
    return TodoSyncService(store_client, clock=lambda: FROZEN_NOW)


@pytest.fixture
def frozen_now() -> datetime:
    return FROZEN_NOW
