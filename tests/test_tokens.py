"""
tests/test_tokens.py -- Unit tests for session token issuance and verification.

Covers:
  - issue -> verify round trip returns the same identity
  - expired, foreign-signed, garbage and claim-less tokens map to the right TokenFailure
  - identity_from_token() collapses every failure to None
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.models import AccountType, AuthenticatedIdentity, TokenFailure
from auth.tokens import identity_from_token, issue_token, verify_token
from core.config import get_settings


def _sign(claims: dict, key: str | None = None) -> str:
    return jwt.encode(claims, key or get_settings().secret_key, algorithm="HS256")


def _future() -> datetime:
    return datetime.now(timezone.utc) + timedelta(hours=1)


@pytest.mark.parametrize("account_type", list(AccountType))
def test_round_trip_preserves_identity(account_type: AccountType):
    token = issue_token(42, account_type, 7)
    assert verify_token(token) == AuthenticatedIdentity(account_id=42, account_type=account_type, account_type_id=7)


def test_default_validity_is_one_year():
    claims = jwt.get_unverified_claims(issue_token(1, AccountType.customer, 1))
    assert claims["exp"] - claims["iat"] == 365 * 24 * 60 * 60


def test_expired_token_is_rejected():
    token = issue_token(1, AccountType.customer, 1, validity=timedelta(seconds=-10))
    assert verify_token(token) is TokenFailure.EXPIRED


def test_token_signed_with_other_key_is_rejected():
    token = _sign(
        {"account_id": 1, "account_type": "admin", "account_type_id": 1, "exp": _future()},
        key="x" * 64,
    )
    assert verify_token(token) is TokenFailure.INVALID_SIGNATURE


def test_bad_signature_checked_before_expiry():
    long_ago = datetime(2000, 1, 1, tzinfo=timezone.utc)
    token = _sign(
        {"account_id": 1, "account_type": "admin", "account_type_id": 1, "exp": long_ago},
        key="y" * 64,
    )
    assert verify_token(token) is TokenFailure.INVALID_SIGNATURE


@pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c", "...."])
def test_garbage_is_malformed(garbage: str):
    assert verify_token(garbage) is TokenFailure.MALFORMED


@pytest.mark.parametrize(
    "claims",
    [
        {"exp": None},
        {"account_id": 1, "account_type": "admin"},
        {"account_id": "1", "account_type": "admin", "account_type_id": 1},
        {"account_id": True, "account_type": "admin", "account_type_id": 1},
        {"account_id": 1, "account_type": "janitor", "account_type_id": 1},
    ],
)
def test_missing_or_mistyped_claims_are_malformed(claims: dict):
    claims = {**claims, "exp": _future()}
    assert verify_token(_sign(claims)) is TokenFailure.MALFORMED


def test_identity_from_token_collapses_failures():
    assert identity_from_token(None) is None
    assert identity_from_token("") is None
    assert identity_from_token("junk") is None
    assert identity_from_token(issue_token(3, AccountType.sales, 9, validity=timedelta(seconds=-1))) is None


def test_identity_from_token_success():
    identity = identity_from_token(issue_token(3, AccountType.sales, 9))
    assert identity is not None
    assert identity.account_type is AccountType.sales
    assert identity.account_type_id == 9
