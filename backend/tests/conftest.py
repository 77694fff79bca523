"""Shared in-memory fakes for unit tests."""

import asyncio
import itertools
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Any

import pytest

from farmdesk.application.interfaces import ProfileRepository, RecordRepository
from farmdesk.client import SessionContext
from farmdesk.domain.entities import Profile, ResourceName, ResourceRecord
from farmdesk.domain.exceptions import NotFoundError


class InMemoryRecordRepository(RecordRepository):
    """Fake repository over a shared list; newest rows are kept first."""

    def __init__(self, resource: ResourceName, rows: list[ResourceRecord]):
        self._resource = resource
        self.rows = rows

    @property
    def resource(self) -> ResourceName:
        return self._resource

    async def list_for_owner(
        self,
        user_id: str,
        *,
        filters: dict[str, Any] | None = None,
        skip: int = 0,
        limit: int | None = 100,
    ) -> list[ResourceRecord]:
        matches = [
            r
            for r in self.rows
            if r.user_id == user_id
            and all(r.data.get(k) == v for k, v in (filters or {}).items())
        ]
        matches = matches[skip:]
        return matches if limit is None else matches[:limit]

    async def get_for_owner(self, user_id: str, record_id: str) -> ResourceRecord | None:
        for row in self.rows:
            if row.id == record_id and row.user_id == user_id:
                return row
        return None

    async def create(self, record: ResourceRecord) -> ResourceRecord:
        self.rows.insert(0, record)
        return record

    async def update(self, record: ResourceRecord) -> ResourceRecord:
        for index, row in enumerate(self.rows):
            if row.id == record.id:
                self.rows[index] = record
                return record
        raise ValueError(f"{record.id} not found")

    async def delete_for_owner(self, user_id: str, record_id: str) -> bool:
        before = len(self.rows)
        self.rows[:] = [r for r in self.rows if not (r.id == record_id and r.user_id == user_id)]
        return len(self.rows) < before

    async def delete_all_for_owner(self, user_id: str) -> int:
        before = len(self.rows)
        self.rows[:] = [r for r in self.rows if r.user_id != user_id]
        return before - len(self.rows)


class InMemoryProfileRepository(ProfileRepository):
    def __init__(self, profiles: dict[str, Profile]):
        self.profiles = profiles

    async def get(self, user_id: str) -> Profile | None:
        return self.profiles.get(user_id)

    async def save(self, profile: Profile) -> Profile:
        self.profiles[profile.id] = profile
        return profile


class InMemoryDatabase:
    """Tables, profiles and transaction scopes shared by the fakes of one test."""

    def __init__(self):
        self.tables: dict[ResourceName, list[ResourceRecord]] = defaultdict(list)
        self.profiles: dict[str, Profile] = {}
        self.failing: set[ResourceName] = set()

    def repository(self, resource: ResourceName) -> InMemoryRecordRepository:
        return InMemoryRecordRepository(resource, self.tables[resource])

    def profile_repository(self) -> InMemoryProfileRepository:
        return InMemoryProfileRepository(self.profiles)

    def seed(self, resource: ResourceName, user_id: str, **fields: Any) -> ResourceRecord:
        record = ResourceRecord(resource=resource.value, user_id=user_id, data=fields)
        self.tables[resource].insert(0, record)
        return record

    def repository_scope(self):
        @asynccontextmanager
        async def scope(resource: ResourceName):
            if resource in self.failing:
                raise RuntimeError(f"relation \"{resource.value}\" is locked")
            yield self.repository(resource)

        return scope

    def profile_scope(self):
        @asynccontextmanager
        async def scope():
            yield self.profile_repository()

        return scope


@pytest.fixture
def memory_db() -> InMemoryDatabase:
    return InMemoryDatabase()


class FakeRemote:
    """Stand-in for ``RemoteResourceClient`` keeping rows per user in memory.

    ``gates`` holds an ``asyncio.Event`` per method name; a gated call waits
    for its event before answering, so tests can interleave session changes.
    ``failures`` maps a method name to the exception it should raise.
    """

    def __init__(self, session):
        self._session = session
        self.rows: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.gates: dict[str, asyncio.Event] = {}
        self.failures: dict[str, Exception] = {}
        self.calls: list[tuple[str, str]] = []
        self._ids = itertools.count(1)

    def _begin(self, method: str, resource: ResourceName) -> str:
        user_id = self._session.require().user_id
        self.calls.append((method, resource.value))
        return user_id

    async def _answer(self, method: str) -> None:
        gate = self.gates.get(method)
        if gate is not None:
            await gate.wait()
        if method in self.failures:
            raise self.failures[method]

    async def _enter(self, method: str, resource: ResourceName) -> str:
        user_id = self._begin(method, resource)
        await self._answer(method)
        return user_id

    async def list(self, resource, filters=None, *, skip=0, limit=100):
        # rows are read when the request arrives, not when it is answered
        user_id = self._begin("list", resource)
        rows = [dict(r) for r in self.rows[user_id] if r["resource"] == resource.value]
        await self._answer("list")
        return rows[skip : skip + limit]

    async def insert(self, resource, record):
        user_id = await self._enter("insert", resource)
        stored = {"id": f"rec-{next(self._ids)}", "resource": resource.value, "user_id": user_id, **record}
        self.rows[user_id].insert(0, stored)
        return dict(stored)

    async def update(self, resource, record_id, patch):
        user_id = await self._enter("update", resource)
        for row in self.rows[user_id]:
            if row["id"] == record_id:
                row.update(patch)
                return dict(row)
        raise NotFoundError(resource.value, record_id)

    async def remove(self, resource, record_id):
        user_id = await self._enter("remove", resource)
        self.rows[user_id] = [r for r in self.rows[user_id] if r["id"] != record_id]


@pytest.fixture
def session_context() -> SessionContext:
    return SessionContext()


@pytest.fixture
def fake_remote(session_context) -> FakeRemote:
    return FakeRemote(session_context)
