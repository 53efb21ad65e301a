"""Shared fixtures: in-memory record store, fake OpenAI client, sync HTTP client."""

import asyncio
import itertools
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from api.main import create_app
from wardrobe.config import Settings
from wardrobe.store import (
    And,
    Contains,
    Eq,
    Expr,
    IsBlank,
    Or,
    Record,
    RecordIdIn,
    RecordNotFoundError,
    RecordStore,
)

API_KEY = "test-api-key"


# =============================================================================
# In-memory record store
# =============================================================================


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def evaluate(expr: Expr, record: Record) -> bool:
    """Evaluate a filter expression tree against a record."""
    if isinstance(expr, Eq):
        return _as_text(record.fields.get(expr.field)) == expr.value
    if isinstance(expr, Contains):
        return expr.value.lower() in _as_text(record.fields.get(expr.field)).lower()
    if isinstance(expr, IsBlank):
        return record.fields.get(expr.field) in (None, "", [])
    if isinstance(expr, RecordIdIn):
        return record.id in expr.ids
    if isinstance(expr, And):
        return all(evaluate(op, record) for op in expr.operands)
    if isinstance(expr, Or):
        return any(evaluate(op, record) for op in expr.operands)
    raise TypeError(f"Unsupported expression {expr!r}")


class FakeRecordStore(RecordStore):
    """RecordStore keeping tables in dictionaries."""

    def __init__(self):
        self.tables: dict[str, dict[str, Record]] = {}
        self.calls: list[tuple[str, str]] = []
        self.queries: list[tuple[str, Optional[Expr]]] = []
        self._ids = itertools.count(1)

    def _table(self, table: str) -> dict[str, Record]:
        return self.tables.setdefault(table, {})

    def _copy(self, record: Record) -> Record:
        return Record(id=record.id, fields=dict(record.fields), created_time=record.created_time)

    def seed(self, table: str, fields: dict[str, Any], record_id: Optional[str] = None) -> Record:
        record_id = record_id or f"rec{next(self._ids):014d}"
        record = Record(
            id=record_id,
            fields=dict(fields),
            created_time=datetime.now(timezone.utc),
        )
        self._table(table)[record_id] = record
        return self._copy(record)

    def count(self, table: str) -> int:
        return len(self._table(table))

    async def find(self, table: str, record_id: str) -> Record:
        self.calls.append(("find", table))
        record = self._table(table).get(record_id)
        if record is None:
            raise RecordNotFoundError(table, record_id)
        return self._copy(record)

    async def query(self, table, filter_expr=None, page_size=100, max_records=None):
        self.calls.append(("query", table))
        self.queries.append((table, filter_expr))
        rows = [
            self._copy(r)
            for r in self._table(table).values()
            if filter_expr is None or evaluate(filter_expr, r)
        ]
        return rows[:max_records] if max_records else rows

    async def create(self, table, fields):
        self.calls.append(("create", table))
        return self.seed(table, fields)

    async def update(self, table, record_id, fields):
        self.calls.append(("update", table))
        record = self._table(table).get(record_id)
        if record is None:
            raise RecordNotFoundError(table, record_id)
        for name, value in fields.items():
            if value is None:
                record.fields.pop(name, None)
            else:
                record.fields[name] = value
        return self._copy(record)

    async def delete(self, table, record_id):
        self.calls.append(("delete", table))
        if self._table(table).pop(record_id, None) is None:
            raise RecordNotFoundError(table, record_id)


# =============================================================================
# Fake OpenAI client
# =============================================================================


def make_openai_client(
    responses_text: Optional[str] = None,
    chat_text: Optional[str] = None,
    responses_error: Optional[Exception] = None,
    chat_error: Optional[Exception] = None,
) -> MagicMock:
    """MagicMock shaped like AsyncOpenAI for the two completion APIs."""
    client = MagicMock()
    client.responses.create = AsyncMock(
        side_effect=responses_error,
        return_value=SimpleNamespace(output_text=responses_text),
    )
    client.chat.completions.create = AsyncMock(
        side_effect=chat_error,
        return_value=SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=chat_text))]
        ),
    )
    return client


def openai_error(cls, status: int, message: str = "error"):
    """Build an openai APIStatusError subclass instance."""
    request = httpx.Request("POST", "https://api.openai.com/v1/responses")
    response = httpx.Response(status, request=request)
    return cls(message, response=response, body=None)


@pytest.fixture
def openai_client_factory():
    return make_openai_client


@pytest.fixture
def openai_error_factory():
    return openai_error


# =============================================================================
# HTTP client
# =============================================================================


class SyncClient:
    """Synchronous wrapper around httpx AsyncClient for testing."""

    def __init__(self, app, headers: Optional[dict[str, str]] = None):
        self.app = app
        self.transport = ASGITransport(app=app, raise_app_exceptions=False)
        self.base_url = "http://testserver"
        self.headers = headers or {}

    def _run_async(self, coro):
        """Run async coroutine synchronously."""
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(coro)
        finally:
            loop.close()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        headers = {**self.headers, **kwargs.pop("headers", {})}
        async with AsyncClient(transport=self.transport, base_url=self.base_url) as client:
            return await client.request(method, url, headers=headers, **kwargs)

    def get(self, url: str, **kwargs):
        return self._run_async(self._request("GET", url, **kwargs))

    def post(self, url: str, **kwargs):
        return self._run_async(self._request("POST", url, **kwargs))

    def put(self, url: str, **kwargs):
        return self._run_async(self._request("PUT", url, **kwargs))

    def delete(self, url: str, **kwargs):
        return self._run_async(self._request("DELETE", url, **kwargs))

    def as_user(self, user_id: str) -> "SyncClient":
        return SyncClient(self.app, {**self.headers, "x-user-id": user_id})


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_key=API_KEY,
        openai_api_key="sk-test",
        rate_limit_per_minute=0,
    )


@pytest.fixture
def fake_store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def fake_openai():
    return make_openai_client(responses_text='{"outfits": []}')


@pytest.fixture
def app(settings, fake_store, fake_openai):
    return create_app(settings, store=fake_store, openai_client=fake_openai)


@pytest.fixture
def client(app) -> SyncClient:
    """Authenticated client acting as user-a."""
    return SyncClient(app, {"x-api-key": API_KEY, "x-user-id": "user-a"})


@pytest.fixture
def anon_client(app) -> SyncClient:
    return SyncClient(app)


@pytest.fixture
def sync_client():
    """SyncClient class, for tests that build their own app."""
    return SyncClient
