"""
auth/registry.py -- Account-type registry: which role tables an account belongs to.

The two mapping functions are the only place AccountType and RoleTable meet.
Both are total over the enums and return None for anything else, so an
unmapped value surfaces as an explicit internal error in the caller instead of
falling through to a default table.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection, Engine

from auth.models import AccountType, Membership, RoleTable
from auth.schema import role_tables

_TYPE_TO_TABLE: dict[AccountType, RoleTable] = {
    AccountType.customer: RoleTable.customer,
    AccountType.admin: RoleTable.admin,
    AccountType.sales: RoleTable.sales,
    AccountType.support: RoleTable.support,
    AccountType.warehouse: RoleTable.warehouse,
}

_TABLE_TO_TYPE: dict[RoleTable, AccountType] = {table: kind for kind, table in _TYPE_TO_TABLE.items()}


def resolve_role_table(account_type: AccountType) -> Optional[RoleTable]:
    """Return the membership table for an account type, or None if unmapped."""
    return _TYPE_TO_TABLE.get(account_type)


def account_type_for_table(role_table: RoleTable) -> Optional[AccountType]:
    """Inverse of resolve_role_table()."""
    return _TABLE_TO_TYPE.get(role_table)


class AccountTypeRegistry:
    """Reads and writes role-table membership rows.

    Shares the engine owned by AccountStore; it never creates or disposes one.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def is_account_of_type(self, role_table: RoleTable, account_id: int) -> Membership:
        """Look up account_id in role_table.

        Returns Membership(is_member=False) when no row matches. Database
        faults propagate as sqlalchemy exceptions.
        """
        table = role_tables[role_table]
        with self.engine.connect() as conn:
            row = conn.execute(select(table.c.id).where(table.c.account_id == account_id)).fetchone()
        if row is None:
            return Membership(is_member=False)
        return Membership(is_member=True, account_type_id=row.id)

    def memberships(self, role_table: RoleTable) -> set[int]:
        """Return the account ids holding a record in role_table."""
        table = role_tables[role_table]
        with self.engine.connect() as conn:
            rows = conn.execute(select(table.c.account_id)).fetchall()
        return {r.account_id for r in rows}

    @staticmethod
    def add_membership(conn: Connection, role_table: RoleTable, account_id: int) -> int:
        """Insert a membership row on an open connection and return its type-local id.

        Takes the caller's connection so the insert joins the caller's
        transaction (account creation writes both rows atomically).
        """
        table = role_tables[role_table]
        result = conn.execute(table.insert().values(account_id=account_id))
        return result.inserted_primary_key[0]
