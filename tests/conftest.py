"""
tests/conftest.py -- Shared test fixtures for catalog API integration tests.

This module provides:
  - _make_test_stores(): creates isolated in-memory DBs for users/items and sessions
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: module-scoped (client, stores) with three seeded accounts
  - login_as: returns a fresh TestClient whose cookie jar holds a live session

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

Environment must be set before any core/auth/api import:
  DEBUG=true               -> get_settings() auto-generates SECRET_KEY
  RATE_LIMIT_ENABLED=false -> the login limiter never trips mid-suite
  BCRYPT_ROUNDS=4          -> cheapest bcrypt cost factor
  ALLOWED_HOSTS            -> TrustedHostMiddleware accepts TestClient's host
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.credentials import hash_password
from auth.models import ROLE_ADMIN, ROLE_USER, User
from auth.sessions import SessionStore
from auth.store import UserStore
from catalog.store import ItemStore

# username -> (password, role)
ACCOUNTS: dict[str, tuple[str, str]] = {
    "alice": ("alice-pass", ROLE_USER),
    "bob": ("bob-pass", ROLE_USER),
    "carol": ("carol-pass", ROLE_ADMIN),
}


@dataclass
class Stores:
    users: UserStore
    items: ItemStore
    sessions: SessionStore

    def close(self) -> None:
        self.sessions.close()
        self.items.close()
        self.users.close()


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> Stores:
    """Create isolated named shared-memory SQLite stores for test isolation.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    catalog_url = f"sqlite:///file:test_catalog_{db_suffix}?mode=memory&cache=shared&uri=true"
    session_url = f"sqlite:///file:test_sessions_{db_suffix}?mode=memory&cache=shared&uri=true"
    return Stores(
        users=UserStore(catalog_url),
        items=ItemStore(catalog_url),
        sessions=SessionStore(session_url, ttl_seconds=3600),
    )


def _patch_lifespan(stores: Stores):
    """Return an async context manager that replaces the real lifespan.

    The purge_task is a long-sleeping coroutine: shutdown calls .cancel() on
    it, which needs a real asyncio.Task.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = stores.users
        app.state.item_store = stores.items
        app.state.session_store = stores.sessions
        app.state.purge_task = asyncio.create_task(asyncio.sleep(99999))
        yield
        app.state.purge_task.cancel()

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, Stores], None, None]:
    """Yield (client, stores) for API integration tests.

    The client has no session cookie. Accounts from ACCOUNTS exist before
    the client starts.
    """
    stores = _make_test_stores(request.module.__name__.rsplit(".", 1)[-1])
    for username, (password, role) in ACCOUNTS.items():
        if stores.users.get_by_username(username) is None:
            stores.users.create_user(User(username=username, hashed_password=hash_password(password), role=role))

    app.router.lifespan_context = _patch_lifespan(stores)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, stores

    stores.close()


@pytest.fixture
def login_as(api_client) -> Callable[[str], TestClient]:
    """Return a factory producing a logged-in TestClient per account.

    Each client has its own cookie jar, so several identities can act in one
    test. The app's lifespan is already running under api_client.
    """

    def _login(username: str) -> TestClient:
        password, _role = ACCOUNTS[username]
        client = TestClient(app, raise_server_exceptions=True)
        resp = client.post("/api/auth/login", json={"username": username, "password": password})
        assert resp.status_code == 200, f"login as {username} failed: {resp.text}"
        return client

    return _login
