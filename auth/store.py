"""
auth/store.py -- SQLAlchemy Core persistence layer for accounts.

Pattern: Repository + Data Mapper. AccountStore is the repository;
_row_to_account is the mapper. Service and route code never touches SQL.

Security:
  All queries use bound parameters. Role table names come from the closed
  RoleTable enum via auth.schema, never from request input.

Concurrency:
  Email uniqueness is the UNIQUE constraint on accounts.email. create_account()
  never checks-then-inserts; two concurrent creations of the same email race
  on the constraint and exactly one wins.

  Every connection is bounded by Settings.db_timeout_seconds (SQLite busy
  timeout, pool checkout timeout elsewhere). A timeout surfaces as
  sqlalchemy.exc.OperationalError, which the service maps to an internal error.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import create_engine, event, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import Account, AccountSummary, DatabaseResponse, RoleTable
from auth.registry import AccountTypeRegistry, account_type_for_table
from auth.schema import accounts, metadata
from core.config import get_settings

logger = logging.getLogger("chop.store")

_POSTGRES_UNIQUE_VIOLATION = "23505"


# ---------------------------------------------------------------------------
# SQLite connection setup
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "pgcode", None) == _POSTGRES_UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(orig)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AccountStore:
    """Repository for the accounts table and account creation.

    Usage:
        store = AccountStore()
        store.create_account("a@b.com", hash_password("secret"), RoleTable.customer)
        account = store.get_by_email("a@b.com")
        store.close()
    """

    def __init__(self, db_url: str | None = None, timeout: float | None = None) -> None:
        settings = get_settings()
        db_url = db_url or settings.database_url
        timeout = timeout if timeout is not None else settings.db_timeout_seconds

        connect_args: dict = {}
        engine_kwargs: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
            connect_args["timeout"] = timeout
        else:
            engine_kwargs["pool_timeout"] = timeout
        self.engine: Engine = create_engine(db_url, connect_args=connect_args, **engine_kwargs)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_sqlite_pragmas)
        metadata.create_all(self.engine)
        self.registry = AccountTypeRegistry(self.engine)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_account(self, email: str, hashed_password: str, role_table: RoleTable) -> DatabaseResponse:
        """Insert the account row and its role membership in one transaction.

        Returns OK on success, CONFLICT if the email is already taken, ERROR
        for any other integrity failure. Other database faults propagate.
        The transaction is rolled back on every non-OK outcome.
        """
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    accounts.insert().values(email=email, password=hashed_password, created_at=_now_iso())
                )
                account_id = result.inserted_primary_key[0]
                self.registry.add_membership(conn, role_table, account_id)
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                return DatabaseResponse.CONFLICT
            logger.error("create_account integrity failure: %s", exc.orig)
            return DatabaseResponse.ERROR
        return DatabaseResponse.OK

    def update_password(self, account_id: int, hashed_password: str) -> DatabaseResponse:
        """Replace an account's password hash. DOES_NOT_EXIST if no row matched."""
        with self.engine.begin() as conn:
            result = conn.execute(
                accounts.update().where(accounts.c.id == account_id).values(password=hashed_password)
            )
        return DatabaseResponse.OK if result.rowcount > 0 else DatabaseResponse.DOES_NOT_EXIST

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_email(self, email: str) -> Account | None:
        """Exact email lookup. None means no such identity, never an error."""
        with self.engine.connect() as conn:
            row = conn.execute(accounts.select().where(accounts.c.email == email)).fetchone()
        return _row_to_account(row) if row is not None else None

    def get_by_id(self, account_id: int) -> Account | None:
        with self.engine.connect() as conn:
            row = conn.execute(accounts.select().where(accounts.c.id == account_id)).fetchone()
        return _row_to_account(row) if row is not None else None

    def has_accounts(self) -> bool:
        with self.engine.connect() as conn:
            count = conn.execute(select(func.count()).select_from(accounts)).scalar()
        return (count or 0) > 0

    def list_accounts(self) -> list[AccountSummary]:
        """Return one row per (account, role membership), ordered by account id.

        Accounts in several role tables appear once per table. Accounts with
        no membership at all are listed with type=None. No authorization is
        applied here; the caller decides who may see this.
        """
        with self.engine.connect() as conn:
            rows = conn.execute(select(accounts.c.id, accounts.c.email).order_by(accounts.c.id)).fetchall()
        members = {rt: self.registry.memberships(rt) for rt in RoleTable}

        summaries: list[AccountSummary] = []
        for row in rows:
            types = [account_type_for_table(rt) for rt in RoleTable if row.id in members[rt]]
            if not types:
                summaries.append(AccountSummary(id=row.id, email=row.email, type=None))
            for account_type in types:
                summaries.append(AccountSummary(id=row.id, email=row.email, type=account_type))
        return summaries

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_account(row) -> Account:
    return Account(id=row.id, email=row.email, password_hash=row.password)
