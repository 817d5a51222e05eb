"""
API request and response models for the account REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py, which own the
domain representation. Route handlers map between the two.

Request models only check types and lengths. Emptiness and email syntax are
the service's job, so a direct caller of AccountService gets the same rules.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import AccountSummary, AccountType

# bcrypt only looks at the first 72 bytes; keep passwords under that.
_MAX_PASSWORD = 72


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CredentialsRequest(BaseModel):
    """Body for POST /auth/{account_type}/create and /auth/{account_type}/login."""

    email: str = Field(max_length=320)
    password: str = Field(max_length=_MAX_PASSWORD)


class ChangePasswordRequest(BaseModel):
    """Body for PUT /auth/change-password. Accepts newPassword or new_password."""

    model_config = ConfigDict(populate_by_name=True)

    new_password: str = Field(alias="newPassword", max_length=_MAX_PASSWORD)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class LoginResponse(BaseModel):
    success: bool = True


class MessageResponse(BaseModel):
    message: str


class AccountDetailsResponse(BaseModel):
    email: str


class AccountRow(BaseModel):
    """One row of GET /auth/accounts."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    type: Optional[AccountType]

    @classmethod
    def from_summary(cls, summary: AccountSummary) -> "AccountRow":
        return cls(id=summary.id, email=summary.email, type=summary.type)


class ErrorDetail(BaseModel):
    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Uniform error envelope for every non-2xx response."""

    error: ErrorDetail


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
