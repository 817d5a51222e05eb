"""
tests/conftest.py -- Shared test fixtures for the Chop account service.

This module provides:
  - store / service: in-memory AccountStore + AccountService for unit tests
  - _make_test_store(): named shared-memory DB for the ASGI tests
  - _patch_lifespan(): wires a test store into app.state, bypassing real startup
  - api_client: TestClient against the real app with an isolated store
  - admin_token: a session token for a seeded admin account

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the TestClient because route handlers run in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

DEBUG must be set before any auth/core import so get_settings() auto-generates
SECRET_KEY instead of raising ValueError. BCRYPT_ROUNDS=4 keeps hashing fast.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import AccountType
from auth.service import AccountService
from auth.store import AccountStore
from auth.transport import CookiePolicy
from core.config import get_settings

ADMIN_EMAIL = "root@chop.io"
ADMIN_PASSWORD = "admin-pass-123"


# ---------------------------------------------------------------------------
# Unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[AccountStore, None, None]:
    s = AccountStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def service(store: AccountStore) -> AccountService:
    return AccountService(store)


# ---------------------------------------------------------------------------
# ASGI helpers
# ---------------------------------------------------------------------------


def _make_test_store() -> AccountStore:
    """Create an isolated named shared-memory SQLite store.

    A fresh uuid per call keeps tests from seeing each other's accounts.
    """
    return AccountStore(db_url=f"sqlite:///file:test_accounts_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(store: AccountStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.account_store = store
        app.state.account_service = AccountService(store)
        app.state.cookie_policy = CookiePolicy(token_max_age=get_settings().token_validity_seconds, secure=False)
        yield

    return test_lifespan


@pytest.fixture
def api_client() -> Generator[tuple[TestClient, AccountStore], None, None]:
    """Yield (client, store) with the real routes and an empty test database."""
    store = _make_test_store()
    app.router.lifespan_context = _patch_lifespan(store)
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, store
    store.close()


@pytest.fixture
def admin_token(api_client: tuple[TestClient, AccountStore]) -> str:
    """Seed an admin account directly through the service and return its token."""
    _client, store = api_client
    service = AccountService(store)
    service.create_account(ADMIN_EMAIL, ADMIN_PASSWORD, AccountType.admin)
    return service.login(ADMIN_EMAIL, ADMIN_PASSWORD, AccountType.admin).token
