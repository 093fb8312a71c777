"""
Shared test fixtures.
"""
import os

# Settings are read at import time, so the environment is prepared first.
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ["ENVIRONMENT"] = "testing"
os.environ["RATE_LIMIT_BACKEND"] = "memory"
os.environ["RETRY_BASE_DELAY"] = "0"
os.environ["RETRY_MAX_JITTER"] = "0"
os.environ["SHOTSTACK_RETRY_DELAY"] = "0"
os.environ["MAKE_WEBHOOK_DELAY"] = "0"
for _key in (
    "OPENAI_API_KEY",
    "SHOTSTACK_API_KEY",
    "SHOTSTACK_SANDBOX_API_KEY",
    "SHOTSTACK_PRODUCTION_API_KEY",
    "SHOTSTACK_WEBHOOK_URL",
    "PIXABAY_API_KEY",
    "MAKE_WEBHOOK_URL",
):
    os.environ[_key] = ""

from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.core.rate_limiting import UserRateLimiter, get_rate_limiter
from app.core.supabase import get_supabase
from app.main import app

USER_ID = "8d2f9a0e-4c1b-4f7e-9a53-1f0c2b7d6e11"


class FakeQuery:
    """Records a supabase-py query chain and answers ``execute()`` with canned rows."""

    def __init__(self, table_name: str, data: List[Dict[str, Any]], error: Optional[Exception]):
        self.table_name = table_name
        self.data = data
        self.error = error
        self.calls: List[Tuple[str, tuple, dict]] = []

    def __getattr__(self, name: str):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return method

    def called(self, name: str) -> List[tuple]:
        return [args for call, args, _ in self.calls if call == name]

    def execute(self):
        if self.error is not None:
            raise self.error
        return MagicMock(data=self.data)


class FakeSupabase:
    """Stand-in for the Supabase client used by the API."""

    def __init__(self):
        self.auth = MagicMock()
        self.queries: List[FakeQuery] = []
        self._tables: Dict[str, Tuple[List[Dict[str, Any]], Optional[Exception]]] = {}

    def set_table(self, name: str, data: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None):
        self._tables[name] = (data or [], error)

    def table(self, name: str) -> FakeQuery:
        data, error = self._tables.get(name, ([], None))
        query = FakeQuery(name, data, error)
        self.queries.append(query)
        return query

    def queries_for(self, name: str, operation: Optional[str] = None) -> List[FakeQuery]:
        return [
            query for query in self.queries
            if query.table_name == name and (operation is None or query.called(operation))
        ]


@pytest.fixture
def supabase():
    """Supabase double that accepts ``Bearer test-token``."""
    client = FakeSupabase()

    def get_user(token):
        if token != "test-token":
            raise Exception("invalid JWT")
        return MagicMock(user=MagicMock(id=USER_ID, email="creator@example.com"))

    client.auth.get_user.side_effect = get_user
    return client


@pytest.fixture
def limiter():
    return UserRateLimiter(limit=10, window_seconds=60)


@pytest.fixture
def client(supabase, limiter):
    app.dependency_overrides[get_supabase] = lambda: supabase
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer test-token"}


@pytest.fixture
def user_id():
    return USER_ID
