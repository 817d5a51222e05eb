"""
auth/schema.py -- SQLAlchemy Core table definitions for auth entities.

One identity table (accounts) plus one membership table per RoleTable. Each
membership row has its own primary key -- the type-local id carried in
session tokens -- and a UNIQUE foreign key to accounts.id, so an account can
appear at most once per role table. Nothing stops an account from appearing in
several role tables at once.

Shared by store.py and registry.py so neither has to import the other's
internals.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, MetaData, String, Table, Text

from auth.models import RoleTable

metadata = MetaData()

accounts = Table(
    "accounts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(320), nullable=False, unique=True),
    Column("password", Text, nullable=False),  # bcrypt hash, never plaintext
    Column("created_at", String(32), nullable=False),
)


def _role_table(role_table: RoleTable) -> Table:
    return Table(
        role_table.value,
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("account_id", Integer, ForeignKey("accounts.id"), nullable=False, unique=True),
    )


# Table names come from the closed RoleTable enum, never from request input.
role_tables: dict[RoleTable, Table] = {rt: _role_table(rt) for rt in RoleTable}
