"""
auth/errors.py -- Typed failures raised by the authentication service.

Each subclass carries the HTTP status the route layer should answer with and
a short, client-safe message. Messages for credential failures are
deliberately uninformative so they cannot be used to enumerate accounts.

Expected conditions inside the stores (duplicate email, missing row) are
reported as DatabaseResponse values. Only the service turns them into these
exceptions.
"""

from __future__ import annotations

MISSING_FIELD = "Missing field in request body"
ACCOUNT_ALREADY_EXISTS = "Account already exists"
ACCOUNT_DETAILS_INVALID = "Account details invalid"
ACCOUNT_TYPE_INVALID = "Account type invalid"
UNAUTHORIZED_REQUEST = "Unauthorized request"
INTERNAL_ERROR = "Internal error"


class AuthError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    default_message: str = INTERNAL_ERROR

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    """Malformed or missing input."""

    status_code = 400
    code = "validation_error"
    default_message = MISSING_FIELD


class AuthenticationError(AuthError):
    """Bad credentials, wrong account type, or no valid session."""

    status_code = 401
    code = "unauthorized"
    default_message = ACCOUNT_DETAILS_INVALID


class ConflictError(AuthError):
    status_code = 409
    code = "conflict"
    default_message = ACCOUNT_ALREADY_EXISTS


class NotFoundError(AuthError):
    """Referenced id is absent. A caller mistake in update flows, so 400 rather than 404."""

    status_code = 400
    code = "not_found"
    default_message = ACCOUNT_DETAILS_INVALID


class InternalError(AuthError):
    """Hashing/signing failure, unmapped account type, or storage fault. Never detailed to clients."""
