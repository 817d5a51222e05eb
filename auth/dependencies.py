"""
auth/dependencies.py -- Request identity middleware and FastAPI Depends() helpers.

attach_identity() runs once per request (registered with @app.middleware in
api/main.py). It verifies the session token and stores the result on
request.state.identity -- an AuthenticatedIdentity, or None. It never rejects
a request itself; downstream dependencies decide:

  try_get_identity()      soft variant, returns None when unauthenticated.
  get_identity()          raises AuthenticationError (401) when unauthenticated.
  require_account_type()  dependency factory, 401 unless the identity has one
                          of the given account types.
  require_admin           require_account_type(AccountType.admin).

Wrong-type requests get 401 rather than 403: a token for another account type
is treated the same as no token for that area.

Layer rule: no imports from api/. This module may import from fastapi/starlette
because it is part of the dependency injection system.
"""

from __future__ import annotations

from typing import Callable

from fastapi import Request

from auth import errors
from auth.errors import AuthenticationError
from auth.models import AccountType, AuthenticatedIdentity
from auth.transport import read_identity


async def attach_identity(request: Request, call_next):
    request.state.identity = read_identity(request)
    return await call_next(request)


def try_get_identity(request: Request) -> AuthenticatedIdentity | None:
    """Return the identity attached by the middleware, verifying directly if it did not run."""
    if hasattr(request.state, "identity"):
        return request.state.identity
    return read_identity(request)


def get_identity(request: Request) -> AuthenticatedIdentity:
    """Require authentication.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: AuthenticatedIdentity = Depends(get_identity)): ...
    """
    identity = try_get_identity(request)
    if identity is None:
        raise AuthenticationError(errors.UNAUTHORIZED_REQUEST)
    return identity


def require_account_type(*allowed: AccountType) -> Callable[[Request], AuthenticatedIdentity]:
    """Build a dependency that admits only the given account types."""

    def dependency(request: Request) -> AuthenticatedIdentity:
        identity = get_identity(request)
        if identity.account_type not in allowed:
            raise AuthenticationError(errors.UNAUTHORIZED_REQUEST)
        return identity

    return dependency


require_admin = require_account_type(AccountType.admin)
