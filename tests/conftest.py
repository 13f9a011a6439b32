"""
Pytest Configuration and Fixtures

The API runs in-process over httpx.ASGITransport. The unit-of-work
dependency is replaced by an in-memory store so endpoint tests need no
database; tests/integration covers the real PostgreSQL path.
"""
import os
import sys
from datetime import datetime, timedelta, timezone

import httpx
import pytest
import pytest_asyncio

# Add services/bridge to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'services', 'bridge'))

from config import Settings  # noqa: E402
from database import get_uow_provider  # noqa: E402


class FakeStore:
    """In-memory stand-in for bridge.shelf_change / bridge.thread_continuity"""

    def __init__(self):
        self.shelf_changes = []
        self.thread_continuity = []
        self.sessions_opened = 0
        self._next_id = 1
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def stamp(self):
        row_id = self._next_id
        self._next_id += 1
        self._clock += timedelta(seconds=1)
        return row_id, self._clock


class FakeShelfChangeRepository:
    def __init__(self, store: FakeStore):
        self._store = store

    async def add(self, session, row):
        row_id, ts = self._store.stamp()
        self._store.shelf_changes.append({"id": row_id, "ts": ts, **row})
        return row_id, ts

    async def feed(self, session, actor, limit):
        rows = [r for r in self._store.shelf_changes if actor is None or r["actor"] == actor]
        rows.sort(key=lambda r: (r["ts"], r["id"]), reverse=True)
        return [dict(r) for r in rows[:limit]]

    async def get_by_receipt(self, session, receipt_hash):
        matches = sorted(
            (r for r in self._store.shelf_changes if r["receipt_hash"] == receipt_hash),
            key=lambda r: r["id"],
        )
        return dict(matches[0]) if matches else None


class FakeThreadContinuityRepository:
    def __init__(self, store: FakeStore):
        self._store = store

    async def add(self, session, row):
        row_id, ts = self._store.stamp()
        self._store.thread_continuity.append({"id": row_id, "ts": ts, **row})
        return row_id, ts


class FakeUnitOfWork:
    def __init__(self, store: FakeStore):
        self._store = store
        self.session = object()
        self.shelf_changes = FakeShelfChangeRepository(store)
        self.thread_continuity = FakeThreadContinuityRepository(store)

    async def __aenter__(self):
        self._store.sessions_opened += 1
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url=None, environment="test", log_level="WARNING", log_json=False)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def app(settings, store):
    """Fresh application wired to the in-memory store"""
    from main import create_app

    application = create_app(settings)
    application.dependency_overrides[get_uow_provider] = lambda: (lambda: FakeUnitOfWork(store))
    return application


@pytest.fixture
def bare_app(settings):
    """Application with no database configured"""
    from main import create_app

    return create_app(settings)


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://bridge.test") as c:
        yield c


@pytest_asyncio.fixture
async def bare_client(bare_app):
    transport = httpx.ASGITransport(app=bare_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://bridge.test") as c:
        yield c


@pytest.fixture
def sample_shelf_change_data():
    """Minimal valid body for POST /shelf-meta"""
    return {
        "actor": "svc-1",
        "action": "SPLIT",
        "shelf": "s42",
        "receipt_hash": "abc123",
    }


@pytest.fixture
def sample_pulse_data():
    """Valid body for POST /pulse"""
    return {
        "actor": "svc-1",
        "thread_tag": "t-7",
        "pulse": "throb",
    }