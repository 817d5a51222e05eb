"""
api/routes/v1/auth.py -- Account creation, login, and session REST endpoints.

Routes:
  POST /api/v1/auth/{account_type}/create  -- create an account of that type
  POST /api/v1/auth/{account_type}/login   -- password login; sets auth + sessionId cookies
  POST /api/v1/auth/logout                 -- clears the auth cookie; always 200
  PUT  /api/v1/auth/change-password        -- change own password (requires auth)
  GET  /api/v1/auth/me                     -- email of the current account (requires auth)
  GET  /api/v1/auth/accounts               -- list all accounts (admin only)

Handlers are plain `def` so bcrypt and database calls run in the thread pool
instead of blocking the event loop.

Every failure is an AuthError raised by AccountService or an auth dependency;
api/main.py renders it. Handlers here never build error responses themselves.

Security:
  Login responses carry Cache-Control: no-store.
  Unknown email and wrong password return the same 401 body.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from api.models import (
    AccountDetailsResponse,
    AccountRow,
    ChangePasswordRequest,
    CredentialsRequest,
    LoginResponse,
    MessageResponse,
)
from auth.dependencies import get_identity, require_admin, try_get_identity
from auth.errors import UNAUTHORIZED_REQUEST, AuthenticationError
from auth.models import AccountType, AuthenticatedIdentity
from auth.service import AccountService
from auth.transport import CookiePolicy, attach_session, clear_session

# Auth policy:
# - POST /auth/customer/create:        public -- self-registration
# - POST /auth/{other}/create:         requires admin
# - POST /auth/{account_type}/login:   public
# - POST /auth/logout:                 public -- clearing a cookie needs no prior auth
# - PUT  /auth/change-password:        requires auth (get_identity)
# - GET  /auth/me:                     requires auth (get_identity)
# - GET  /auth/accounts:               requires admin (require_admin)
router = APIRouter()

# Account types anyone may create without being signed in.
_SELF_REGISTRATION = frozenset({AccountType.customer})


def _service(request: Request) -> AccountService:
    return request.app.state.account_service


def _cookie_policy(request: Request) -> CookiePolicy:
    return request.app.state.cookie_policy


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/{account_type}/create", status_code=201)
def create_account(request: Request, account_type: AccountType, body: CredentialsRequest) -> Response:
    """Create an account of the given type.

    Customers may self-register. Every other account type is created by an
    admin, so the first admin has to be bootstrapped with `main.py create-account`.
    """
    if account_type not in _SELF_REGISTRATION:
        identity = try_get_identity(request)
        if identity is None or identity.account_type is not AccountType.admin:
            raise AuthenticationError(UNAUTHORIZED_REQUEST)

    _service(request).create_account(body.email, body.password, account_type)
    return Response(status_code=201)


@router.post("/auth/{account_type}/login", response_model=LoginResponse)
def login(request: Request, account_type: AccountType, body: CredentialsRequest) -> JSONResponse:
    """Authenticate against one account type and set the session cookies."""
    result = _service(request).login(body.email, body.password, account_type)
    resp = JSONResponse(status_code=200, content=LoginResponse(success=True).model_dump())
    attach_session(resp, result, _cookie_policy(request))
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/logout", response_model=MessageResponse)
def logout(request: Request) -> JSONResponse:
    """Clear the token cookie and end the session."""
    resp = JSONResponse(content=MessageResponse(message="Logout successful").model_dump())
    clear_session(resp, _cookie_policy(request))
    return resp


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.put("/auth/change-password", response_model=MessageResponse)
def change_password(
    request: Request,
    body: ChangePasswordRequest,
    identity: AuthenticatedIdentity = Depends(get_identity),
) -> MessageResponse:
    """Change the password of the signed-in account. Only ever your own."""
    _service(request).change_password(identity, body.new_password)
    return MessageResponse(message="Account password updated")


@router.get("/auth/me", response_model=AccountDetailsResponse)
def me(request: Request, identity: AuthenticatedIdentity = Depends(get_identity)) -> AccountDetailsResponse:
    account = _service(request).account_details(identity)
    return AccountDetailsResponse(email=account.email)


@router.get("/auth/accounts", response_model=list[AccountRow])
def list_accounts(request: Request, identity: AuthenticatedIdentity = Depends(require_admin)) -> list[AccountRow]:
    """List every account with its type. Admin only."""
    return [AccountRow.from_summary(s) for s in _service(request).list_accounts()]
