"""
auth/tokens.py -- Session token issuance and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       account_id, account_type, account_type_id, iat and exp. Nothing is
       stored server-side: a token is valid until its exp passes.

  Verification order: structure, then signature, then expiry, then claim
       shape. verify_token() returns a TokenFailure for each kind so the cause
       can be logged, but every failure means "unauthenticated" to callers --
       clients never see which check failed.

  Signing failures are not caught here. An exception from jwt.encode()
       propagates so a caller can never hand out an unsigned token.

  SECRET_KEY: sourced from core.config.get_settings() at module load and
       never changed afterwards.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Union

from jose import ExpiredSignatureError, JWTError, jwt

from auth.models import AccountType, AuthenticatedIdentity, TokenFailure
from core.config import get_settings

logger = logging.getLogger("chop.auth")

_settings = get_settings()

_ALGORITHM = "HS256"


def default_validity() -> timedelta:
    return timedelta(seconds=_settings.token_validity_seconds)


def issue_token(
    account_id: int,
    account_type: AccountType,
    account_type_id: int,
    validity: timedelta | None = None,
) -> str:
    """Encode a signed session token.

    Args:
        account_id:      Primary key of the accounts row.
        account_type:    The role the holder logged in as.
        account_type_id: Primary key of the holder's row in that role table.
        validity:        Lifetime of the token. Defaults to
                         Settings.token_validity_seconds (one year).
    """
    issued_at = datetime.now(timezone.utc)
    payload = {
        "account_id": account_id,
        "account_type": AccountType(account_type).value,
        "account_type_id": account_type_id,
        "iat": issued_at,
        "exp": issued_at + (validity if validity is not None else default_validity()),
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def verify_token(token: str) -> Union[AuthenticatedIdentity, TokenFailure]:
    """Verify a session token and rebuild the identity it carries.

    Returns an AuthenticatedIdentity on success, otherwise the TokenFailure
    describing the first check that failed. Never raises for bad input.
    """
    try:
        jwt.get_unverified_claims(token)
    except JWTError:
        return TokenFailure.MALFORMED

    try:
        claims = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except ExpiredSignatureError:
        return TokenFailure.EXPIRED
    except JWTError:
        return TokenFailure.INVALID_SIGNATURE

    identity = _claims_to_identity(claims)
    if identity is None:
        return TokenFailure.MALFORMED
    return identity


def identity_from_token(token: str | None) -> AuthenticatedIdentity | None:
    """Collapse verify_token() into identity-or-None for request handling."""
    if not token:
        return None
    result = verify_token(token)
    if isinstance(result, TokenFailure):
        logger.debug("Rejected session token: %s", result.value)
        return None
    return result


def _claims_to_identity(claims: dict) -> AuthenticatedIdentity | None:
    account_id = claims.get("account_id")
    account_type_id = claims.get("account_type_id")
    # bool is an int subclass; a token claiming account_id=true is not ours.
    for value in (account_id, account_type_id):
        if not isinstance(value, int) or isinstance(value, bool):
            return None
    try:
        account_type = AccountType(claims.get("account_type"))
    except ValueError:
        return None
    return AuthenticatedIdentity(
        account_id=account_id,
        account_type=account_type,
        account_type_id=account_type_id,
    )
