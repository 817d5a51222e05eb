"""
auth/passwords.py -- One-way password hashing and verification.

bcrypt is used directly (no passlib wrapper). Every hash embeds its own random
salt and cost factor, so verify_password() needs nothing but the stored string.

The cost factor comes from Settings.bcrypt_rounds (BCRYPT_ROUNDS). Tests run
with the minimum of 4 to stay fast.

_DUMMY_HASH enables timing equalization in the login flow: when an email does
not exist the service still runs bcrypt against this hash, so response time
does not reveal whether an account exists.
"""

from __future__ import annotations

import bcrypt

from core.config import get_settings

_settings = get_settings()

# bcrypt only reads the first 72 bytes; newer releases raise instead of truncating.
_BCRYPT_MAX_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Any exception (e.g. the entropy source failing inside gensalt) propagates:
    the caller must abort the flow rather than store something unhashed.
    Only the first 72 bytes of the password take part in the hash.
    """
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(plain), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    Never raises for a wrong password or a malformed stored hash.
    """
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("chop_timing_dummy")


def burn_verification(plain: str) -> None:
    """Run a full bcrypt check against the dummy hash and discard the result."""
    verify_password(plain, _DUMMY_HASH)
