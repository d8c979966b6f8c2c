from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from trade_journal.db.database import get_db
from trade_journal.main import app


class FakeResult:
    def __init__(self, rows):
        self._rows = rows

    def scalar_one_or_none(self):
        return self._rows[0] if self._rows else None

    def scalar_one(self):
        # Only count queries ask for a single scalar.
        return len(self._rows)

    def scalars(self):
        return self

    def all(self):
        return list(self._rows)


class FakeSession:
    """Just enough of AsyncSession for the routers."""

    def __init__(self):
        self.rows = []
        self.deleted = []
        self.commits = 0
        self.statements = []

    def add(self, obj):
        self.rows.append(obj)

    async def commit(self):
        self.commits += 1

    async def refresh(self, obj):
        if obj.id is None:
            obj.id = len(self.rows)
        if obj.created_at is None:
            obj.created_at = datetime(2024, 3, 4, tzinfo=timezone.utc)

    async def execute(self, stmt):
        self.statements.append(stmt)
        return FakeResult(self.rows)

    async def delete(self, obj):
        self.rows.remove(obj)
        self.deleted.append(obj)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    async def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def patch_fetch(monkeypatch):
    """Replace the trade loader in a router module with a canned list."""

    def _patch(module, trades):
        calls = []

        async def fake_fetch_trades(db, **kwargs):
            calls.append(kwargs)
            return list(trades)

        monkeypatch.setattr(module, "fetch_trades", fake_fetch_trades)
        return calls

    return _patch
