"""
auth/transport.py -- Session cookies on the way out, identity on the way in.

CookiePolicy is built once at startup from Settings and passed in explicitly;
nothing here reads the environment. Every cookie gets the same base attributes:

  httponly=True:  JS cannot read the cookie (XSS mitigation).
  samesite="lax": not sent on cross-site POSTs (CSRF mitigation).
  secure:         HTTPS only, on in production.
  domain:         COOKIE_DOMAIN, or host-only when unset.

The token cookie additionally gets max_age equal to the token validity, so
both expire together. The session id cookie has no max_age and lives for the
browser session. That cookie is informational only: it is not bound to the
token and nothing reads it back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from starlette.requests import Request
from starlette.responses import Response

from auth.models import AuthenticatedIdentity, LoginResult
from auth.tokens import identity_from_token
from core.config import Settings

TOKEN_COOKIE = "auth"
SESSION_ID_COOKIE = "sessionId"


@dataclass(frozen=True)
class CookiePolicy:
    token_max_age: int
    secure: bool = False
    domain: Optional[str] = None
    httponly: bool = True
    samesite: str = "lax"

    @classmethod
    def from_settings(cls, settings: Settings) -> "CookiePolicy":
        return cls(
            token_max_age=settings.token_validity_seconds,
            secure=settings.cookies_secure,
            domain=settings.cookie_domain or None,
        )

    def base_attributes(self) -> dict:
        return {
            "httponly": self.httponly,
            "samesite": self.samesite,
            "secure": self.secure,
            "domain": self.domain,
        }


def attach_session(response: Response, result: LoginResult, policy: CookiePolicy) -> None:
    """Write the signed token and the opaque session id cookies."""
    response.set_cookie(TOKEN_COOKIE, value=result.token, max_age=policy.token_max_age, **policy.base_attributes())
    response.set_cookie(SESSION_ID_COOKIE, value=result.session_id, **policy.base_attributes())


def clear_session(response: Response, policy: CookiePolicy) -> None:
    """Delete the token cookie. The session id cookie is left to expire with the browser session."""
    response.delete_cookie(TOKEN_COOKIE, **policy.base_attributes())


def token_from_request(request: Request) -> str | None:
    """Return the session token from the auth cookie, or from a Bearer header.

    The cookie wins when both are present. The Bearer header is the
    equivalent mechanism for non-browser clients.
    """
    token = request.cookies.get(TOKEN_COOKIE)
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:] or None
    return None


def read_identity(request: Request) -> AuthenticatedIdentity | None:
    """Verify whatever token the request carries. None means unauthenticated."""
    return identity_from_token(token_from_request(request))
