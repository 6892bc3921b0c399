"""
Pytest configuration and fixtures
"""
import copy
import uuid
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from jose import jwt

from config import SUPABASE_JWT_SECRET, JWT_ALGORITHM, JWT_AUDIENCE
from services.streak_service import parse_timestamp

TEST_USER_ID = "8f14e45f-ceea-467f-a9f4-1c6a1f6f0b11"

# Every module that talks to PostgREST directly
STORE_CONSUMERS = [
    "services.health_score_service",
    "services.badge_service",
    "services.symptom_service",
    "services.chat_service",
]


def _sort_key(column):
    def key(row):
        value = row.get(column)
        if value is not None and column.endswith("_at"):
            return parse_timestamp(value)
        return value
    return key


class FakeStore:
    """In-memory stand-in for the PostgREST tables, with the same select/insert surface."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.fail_reads: set[str] = set()
        self.fail_writes: set[str] = set()
        self.calls: list[tuple] = []

    def seed(self, table: str, rows: list[dict]):
        self.tables.setdefault(table, []).extend(copy.deepcopy(rows))

    def rows(self, table: str) -> list[dict]:
        return self.tables.get(table, [])

    async def select(self, table, filters=None, columns="*", gte=None, order=None, limit=None):
        self.calls.append(("select", table))
        if table in self.fail_reads:
            raise httpx.ConnectError(f"cannot reach {table}")

        rows = [dict(r) for r in self.rows(table)]
        for key, value in (filters or {}).items():
            rows = [r for r in rows if str(r.get(key)) == str(value)]
        for key, value in (gte or {}).items():
            rows = [r for r in rows if _sort_key(key)(r) >= _sort_key(key)({key: value})]
        if order:
            column, _, direction = order.partition(".")
            rows.sort(key=_sort_key(column), reverse=direction == "desc")
        if limit is not None:
            rows = rows[:limit]
        if columns != "*":
            wanted = [c.strip() for c in columns.split(",")]
            rows = [{c: r.get(c) for c in wanted} for r in rows]
        return rows

    async def insert(self, table, data):
        self.calls.append(("insert", table))
        if table in self.fail_writes:
            raise httpx.ConnectError(f"cannot write {table}")
        now = datetime.now(timezone.utc).isoformat()
        row = {"id": str(uuid.uuid4()), "created_at": now, **copy.deepcopy(data)}
        if table == "user_badges":
            row.setdefault("earned_at", now)
        self.tables.setdefault(table, []).append(row)
        return dict(row)


@pytest.fixture
def store(monkeypatch) -> FakeStore:
    fake = FakeStore()
    for module in STORE_CONSUMERS:
        monkeypatch.setattr(f"{module}.sb_select", fake.select)
        monkeypatch.setattr(f"{module}.sb_insert", fake.insert)
    return fake


def days_ago(days: int, hour: int = 12) -> str:
    """UTC timestamp string ``days`` calendar days before today."""
    now = datetime.now(timezone.utc)
    ts = now.replace(hour=hour, minute=0, second=0, microsecond=0) - timedelta(days=days)
    return ts.isoformat()


def make_log(days: int, severity=5, symptom_ids=None, user_id=TEST_USER_ID, notes=None) -> dict:
    return {
        "id": str(uuid.uuid4()),
        "user_id": user_id,
        "symptom_ids": symptom_ids or ["s-headache"],
        "severity": severity,
        "notes": notes,
        "created_at": days_ago(days),
    }


def auth_token(user_id: str = TEST_USER_ID) -> str:
    payload = {
        "sub": user_id,
        "aud": JWT_AUDIENCE,
        "role": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    return jwt.encode(payload, SUPABASE_JWT_SECRET, algorithm=JWT_ALGORITHM)


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {auth_token()}"}


@pytest.fixture
async def client():
    from main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
