"""
auth/service.py -- Account creation, login, and password change flows.

Each flow is a straight line of steps. A step either returns its value or
raises an AuthError subclass, and the first failure ends the flow. The route
layer turns the error into a status code; it never re-implements any step.

Stores report expected conditions (duplicate email, missing row) as
DatabaseResponse values. Anything they raise is unexpected: the service logs
it and re-raises it as InternalError, so clients only ever see "Internal error".

Login ordering is fixed: the password is verified before role membership is
looked at. A wrong-role login with good credentials therefore gets its own
message, and role data is never evaluated for an unauthenticated caller.
Unknown email and wrong password get the same message, and the unknown-email
path still pays for a bcrypt check so timing does not leak either.
"""

from __future__ import annotations

import logging
import uuid
from datetime import timedelta

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import SQLAlchemyError

from auth import errors
from auth.errors import AuthenticationError, ConflictError, InternalError, NotFoundError, ValidationError
from auth.models import (
    Account,
    AccountSummary,
    AccountType,
    AuthenticatedIdentity,
    DatabaseResponse,
    LoginResult,
)
from auth.passwords import burn_verification, hash_password, verify_password
from auth.registry import AccountTypeRegistry, account_type_for_table, resolve_role_table
from auth.store import AccountStore
from auth.tokens import issue_token

logger = logging.getLogger("chop.auth")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _require_text(*values: object) -> None:
    for value in values:
        if not isinstance(value, str) or not value:
            raise ValidationError()


class AccountService:
    """Composes hashing, storage, the role registry and token issuance.

    Holds no per-request state; one instance is shared by every request.
    """

    def __init__(
        self,
        store: AccountStore,
        registry: AccountTypeRegistry | None = None,
        token_validity: timedelta | None = None,
    ) -> None:
        self.store = store
        self.registry = registry or store.registry
        self.token_validity = token_validity

    # ------------------------------------------------------------------
    # Create account
    # ------------------------------------------------------------------

    def create_account(self, email: object, password: object, account_type: AccountType) -> None:
        """Create an account with a membership in account_type's role table.

        Raises:
            ValidationError: email/password missing, not strings, or the email
                is not structurally valid.
            ConflictError:   the (normalized) email is already registered.
            InternalError:   hashing or storage failed, or account_type is unmapped.
        """
        _require_text(email, password)
        email = normalize_email(email)
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValidationError() from exc

        role_table = resolve_role_table(account_type)
        if role_table is None:
            logger.error("No role table mapped for account type %r", account_type)
            raise InternalError()

        try:
            hashed = hash_password(password)
        except Exception as exc:
            logger.exception("Password hashing failed")
            raise InternalError() from exc

        try:
            outcome = self.store.create_account(email, hashed, role_table)
        except SQLAlchemyError as exc:
            logger.exception("Storage fault creating %s account", account_type.value)
            raise InternalError() from exc

        if outcome is DatabaseResponse.CONFLICT:
            raise ConflictError()
        if outcome is not DatabaseResponse.OK:
            raise InternalError()
        logger.info("Created %s account", account_type.value)

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def login(self, email: object, password: object, account_type: AccountType) -> LoginResult:
        """Authenticate credentials against one role and mint a session.

        Raises:
            ValidationError:     email/password missing or not strings.
            AuthenticationError: unknown email or wrong password
                                 (ACCOUNT_DETAILS_INVALID), or valid credentials
                                 without a record in the role table
                                 (ACCOUNT_TYPE_INVALID).
            InternalError:       storage fault, unmapped account type, or a
                                 token signing failure.
        """
        _require_text(email, password)

        role_table = resolve_role_table(account_type)
        if role_table is None:
            logger.error("No role table mapped for account type %r", account_type)
            raise InternalError()

        try:
            account = self.store.get_by_email(normalize_email(email))
        except SQLAlchemyError as exc:
            logger.exception("Storage fault looking up account")
            raise InternalError() from exc

        if account is None:
            burn_verification(password)
            raise AuthenticationError(errors.ACCOUNT_DETAILS_INVALID)
        if not verify_password(password, account.password_hash):
            raise AuthenticationError(errors.ACCOUNT_DETAILS_INVALID)

        try:
            membership = self.registry.is_account_of_type(role_table, account.id)
        except SQLAlchemyError as exc:
            logger.exception("Storage fault resolving account type")
            raise InternalError() from exc
        if not membership.is_member:
            raise AuthenticationError(errors.ACCOUNT_TYPE_INVALID)

        token_type = account_type_for_table(role_table)
        if token_type is None:
            logger.error("No account type mapped for role table %r", role_table)
            raise InternalError()

        identity = AuthenticatedIdentity(
            account_id=account.id,
            account_type=token_type,
            account_type_id=membership.account_type_id,
        )
        try:
            token = issue_token(
                identity.account_id,
                identity.account_type,
                identity.account_type_id,
                self.token_validity,
            )
        except Exception as exc:
            logger.exception("Session token signing failed")
            raise InternalError() from exc

        return LoginResult(token=token, session_id=str(uuid.uuid4()), identity=identity)

    # ------------------------------------------------------------------
    # Authenticated operations
    # ------------------------------------------------------------------

    def change_password(self, identity: AuthenticatedIdentity, new_password: object) -> None:
        """Set a new password for the identity's own account.

        Raises NotFoundError if the account vanished after the token was issued.
        """
        _require_text(new_password)
        try:
            hashed = hash_password(new_password)
        except Exception as exc:
            logger.exception("Password hashing failed")
            raise InternalError() from exc

        try:
            outcome = self.store.update_password(identity.account_id, hashed)
        except SQLAlchemyError as exc:
            logger.exception("Storage fault updating password")
            raise InternalError() from exc

        if outcome is DatabaseResponse.DOES_NOT_EXIST:
            raise NotFoundError()
        if outcome is not DatabaseResponse.OK:
            raise InternalError()
        logger.info("Password changed for account %d", identity.account_id)

    def account_details(self, identity: AuthenticatedIdentity) -> Account:
        try:
            account = self.store.get_by_id(identity.account_id)
        except SQLAlchemyError as exc:
            logger.exception("Storage fault loading account details")
            raise InternalError() from exc
        if account is None:
            raise AuthenticationError(errors.UNAUTHORIZED_REQUEST)
        return account

    def list_accounts(self) -> list[AccountSummary]:
        try:
            return self.store.list_accounts()
        except SQLAlchemyError as exc:
            logger.exception("Storage fault listing accounts")
            raise InternalError() from exc
