from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any, Awaitable, Callable, Optional


class FakeCursor:
    def __init__(self, documents: list[dict]) -> None:
        self._documents = list(documents)

    async def to_list(self, length: Optional[int] = None) -> list[dict]:
        return list(self._documents)


class FakeCollection:
    """
    Minimal stand-in for a motor collection.

    `documents` feeds the read operations, `modified` / `deleted` feed the
    write results, and `error` (if set) is raised by every call.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple, dict]] = []
        self.documents: list[dict] = []
        self.modified = 0
        self.deleted = 0
        self.error: Optional[Exception] = None

    def _record(self, method: str, *args: Any, **kwargs: Any) -> None:
        self.calls.append((method, args, kwargs))
        if self.error is not None:
            raise self.error

    async def insert_one(self, document, **kwargs):
        self._record("insert_one", document, **kwargs)
        return SimpleNamespace(inserted_id="generated")

    async def insert_many(self, documents, **kwargs):
        self._record("insert_many", documents, **kwargs)
        return SimpleNamespace(inserted_ids=[f"id-{i}" for i in range(len(documents))])

    async def update_one(self, filter, update, **kwargs):
        self._record("update_one", filter, update, **kwargs)
        return SimpleNamespace(matched_count=self.modified, modified_count=self.modified)

    async def update_many(self, filter, update, **kwargs):
        self._record("update_many", filter, update, **kwargs)
        return SimpleNamespace(matched_count=self.modified, modified_count=self.modified)

    async def replace_one(self, filter, replacement, **kwargs):
        self._record("replace_one", filter, replacement, **kwargs)
        return SimpleNamespace(matched_count=self.modified, modified_count=self.modified)

    async def delete_one(self, filter, **kwargs):
        self._record("delete_one", filter, **kwargs)
        return SimpleNamespace(deleted_count=self.deleted)

    async def delete_many(self, filter, **kwargs):
        self._record("delete_many", filter, **kwargs)
        return SimpleNamespace(deleted_count=self.deleted)

    def find(self, filter, **kwargs):
        self._record("find", filter, **kwargs)
        return FakeCursor(self.documents)

    async def find_one(self, filter, **kwargs):
        self._record("find_one", filter, **kwargs)
        return self.documents[0] if self.documents else None

    def aggregate(self, pipeline, **kwargs):
        self._record("aggregate", pipeline, **kwargs)
        return FakeCursor(self.documents)

    async def count_documents(self, filter, **kwargs):
        self._record("count_documents", filter, **kwargs)
        return len(self.documents)


class FakeDatabase:
    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


class FakeClient:
    def __init__(
        self,
        url: str,
        database: FakeDatabase,
        ping: Optional[Callable[[], Awaitable[None]]],
        kwargs: dict,
        events: Optional[list[tuple[str, str]]] = None,
        database_error: Optional[Exception] = None,
    ) -> None:
        self.url = url
        self.kwargs = kwargs
        self.closed = False
        self.events = events if events is not None else []
        self.database_error = database_error
        self.pinged = False
        self.database_names: list[str] = []
        self._database = database
        self._ping = ping
        self.admin = SimpleNamespace(command=self._command)

    async def _command(self, name: str) -> dict:
        assert name == "ping"
        self.pinged = True
        if self._ping is not None:
            await self._ping()
        return {"ok": 1}

    def __getitem__(self, name: str) -> FakeDatabase:
        self.database_names.append(name)
        if self.database_error is not None:
            raise self.database_error
        return self._database

    def close(self) -> None:
        self.closed = True
        self.events.append(("closed", self.url))


class FakeClientFactory:
    """
    Callable used in place of AsyncIOMotorClient.

    Every URL gets its own FakeDatabase; `ping[url]` customizes the
    connection handshake for that URL (delay, failure, hang) and
    `database_error[url]` makes the database lookup raise. `events` logs
    client creation and close in the order they happen.
    """

    def __init__(self) -> None:
        self.clients: list[FakeClient] = []
        self.databases: dict[str, FakeDatabase] = {}
        self.ping: dict[str, Callable[[], Awaitable[None]]] = {}
        self.database_error: dict[str, Exception] = {}
        self.events: list[tuple[str, str]] = []

    def database_for(self, url: str) -> FakeDatabase:
        return self.databases.setdefault(url, FakeDatabase())

    def collection_for(self, url: str, name: str) -> FakeCollection:
        return self.database_for(url)[name]

    def __call__(self, url: str, **kwargs: Any) -> FakeClient:
        client = FakeClient(
            url,
            self.database_for(url),
            self.ping.get(url),
            kwargs,
            events=self.events,
            database_error=self.database_error.get(url),
        )
        self.events.append(("created", url))
        self.clients.append(client)
        return client

    def urls(self) -> list[str]:
        return [c.url for c in self.clients]


def hanging_ping(release: asyncio.Event) -> Callable[[], Awaitable[None]]:
    async def _ping() -> None:
        await release.wait()
    return _ping


def failing_ping(exc: Exception) -> Callable[[], Awaitable[None]]:
    async def _ping() -> None:
        raise exc
    return _ping
