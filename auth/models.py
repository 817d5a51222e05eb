"""
auth/models.py -- Domain types for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and the
service do the work; these types only carry shape.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """The five account kinds. Carried inside session tokens as the value string."""

    customer = "customer"
    admin = "admin"
    sales = "sales"
    support = "support"
    warehouse = "warehouse"


class RoleTable(str, Enum):
    """Role-specific membership tables, one per AccountType."""

    customer = "customer_accounts"
    admin = "admin_accounts"
    sales = "sale_accounts"
    support = "support_accounts"
    warehouse = "warehouse_accounts"


class DatabaseResponse(Enum):
    """Outcome kinds for store writes. Expected conditions are returned, not raised."""

    OK = "ok"
    CONFLICT = "conflict"
    DOES_NOT_EXIST = "does_not_exist"
    ERROR = "error"


class TokenFailure(Enum):
    """Why a session token was rejected. Diagnostic only -- all map to 401."""

    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"
    MALFORMED = "malformed"


@dataclass
class Account:
    """Identity record: email + bcrypt hash, independent of role."""

    email: str
    password_hash: str
    id: Optional[int] = None


@dataclass(frozen=True)
class Membership:
    """Result of a role-table lookup. account_type_id is set iff is_member."""

    is_member: bool
    account_type_id: Optional[int] = None


@dataclass(frozen=True)
class AccountSummary:
    """One row of the administrative account listing."""

    id: int
    email: str
    type: Optional[AccountType]


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Request-scoped identity reconstructed from a verified session token."""

    account_id: int
    account_type: AccountType
    account_type_id: int


@dataclass(frozen=True)
class LoginResult:
    """Everything the transport needs after a successful login.

    session_id is an opaque per-login value delivered as its own cookie. It is
    not bound to the token and no verification path reads it back.
    """

    token: str
    session_id: str
    identity: AuthenticatedIdentity
