"""
tests/test_store.py -- Unit tests for auth/store.py and auth/registry.py.

Covers:
  - create_account() writes the account and its role record atomically
  - duplicate email -> CONFLICT, and the losing attempt leaves no role row
  - update_password() OK / DOES_NOT_EXIST
  - list_accounts() with single-role, multi-role and role-less accounts
  - registry mappings are total over both enums
"""

from __future__ import annotations

from sqlalchemy import select

from auth.models import AccountType, DatabaseResponse, Membership, RoleTable
from auth.registry import account_type_for_table, resolve_role_table
from auth.schema import accounts, role_tables
from auth.store import AccountStore


def _count(store: AccountStore, table) -> int:
    with store.engine.connect() as conn:
        return len(conn.execute(select(table)).fetchall())


class TestCreateAccount:
    def test_creates_account_and_membership(self, store: AccountStore) -> None:
        assert store.create_account("a@b.com", "hash", RoleTable.customer) is DatabaseResponse.OK
        account = store.get_by_email("a@b.com")
        assert account is not None
        assert account.password_hash == "hash"
        membership = store.registry.is_account_of_type(RoleTable.customer, account.id)
        assert membership.is_member
        assert membership.account_type_id is not None

    def test_only_requested_role_is_created(self, store: AccountStore) -> None:
        store.create_account("a@b.com", "hash", RoleTable.warehouse)
        account = store.get_by_email("a@b.com")
        for rt in RoleTable:
            assert store.registry.is_account_of_type(rt, account.id).is_member is (rt is RoleTable.warehouse)

    def test_duplicate_email_conflicts(self, store: AccountStore) -> None:
        assert store.create_account("a@b.com", "hash", RoleTable.customer) is DatabaseResponse.OK
        assert store.create_account("a@b.com", "other", RoleTable.admin) is DatabaseResponse.CONFLICT
        assert _count(store, accounts) == 1
        assert _count(store, role_tables[RoleTable.admin]) == 0
        assert store.get_by_email("a@b.com").password_hash == "hash"

    def test_type_local_ids_are_per_table(self, store: AccountStore) -> None:
        store.create_account("one@b.com", "h", RoleTable.customer)
        store.create_account("two@b.com", "h", RoleTable.sales)
        two = store.get_by_email("two@b.com")
        assert two.id == 2
        assert store.registry.is_account_of_type(RoleTable.sales, two.id).account_type_id == 1


class TestLookups:
    def test_unknown_email_is_none(self, store: AccountStore) -> None:
        assert store.get_by_email("ghost@b.com") is None

    def test_lookup_is_exact(self, store: AccountStore) -> None:
        store.create_account("a@b.com", "hash", RoleTable.customer)
        assert store.get_by_email("A@B.com") is None

    def test_get_by_id(self, store: AccountStore) -> None:
        store.create_account("a@b.com", "hash", RoleTable.customer)
        account = store.get_by_email("a@b.com")
        assert store.get_by_id(account.id).email == "a@b.com"
        assert store.get_by_id(999) is None

    def test_has_accounts(self, store: AccountStore) -> None:
        assert store.has_accounts() is False
        store.create_account("a@b.com", "hash", RoleTable.customer)
        assert store.has_accounts() is True

    def test_non_member(self, store: AccountStore) -> None:
        store.create_account("a@b.com", "hash", RoleTable.customer)
        account = store.get_by_email("a@b.com")
        assert store.registry.is_account_of_type(RoleTable.admin, account.id) == Membership(is_member=False)


class TestUpdatePassword:
    def test_updates_existing(self, store: AccountStore) -> None:
        store.create_account("a@b.com", "old", RoleTable.customer)
        account = store.get_by_email("a@b.com")
        assert store.update_password(account.id, "new") is DatabaseResponse.OK
        assert store.get_by_email("a@b.com").password_hash == "new"

    def test_missing_account(self, store: AccountStore) -> None:
        assert store.update_password(12345, "new") is DatabaseResponse.DOES_NOT_EXIST


class TestListAccounts:
    def test_lists_type_per_membership(self, store: AccountStore) -> None:
        store.create_account("cust@b.com", "h", RoleTable.customer)
        store.create_account("boss@b.com", "h", RoleTable.admin)
        boss = store.get_by_email("boss@b.com")
        # Multi-role membership is allowed.
        with store.engine.begin() as conn:
            store.registry.add_membership(conn, RoleTable.sales, boss.id)
        with store.engine.begin() as conn:
            conn.execute(accounts.insert().values(email="orphan@b.com", password="h", created_at="x"))

        rows = [(r.email, r.type) for r in store.list_accounts()]
        assert rows == [
            ("cust@b.com", AccountType.customer),
            ("boss@b.com", AccountType.admin),
            ("boss@b.com", AccountType.sales),
            ("orphan@b.com", None),
        ]

    def test_empty(self, store: AccountStore) -> None:
        assert store.list_accounts() == []


class TestRegistryMapping:
    def test_every_type_maps_to_a_distinct_table(self) -> None:
        tables = {resolve_role_table(t) for t in AccountType}
        assert None not in tables
        assert len(tables) == len(AccountType)

    def test_mapping_round_trips(self) -> None:
        for account_type in AccountType:
            assert account_type_for_table(resolve_role_table(account_type)) is account_type

    def test_unmapped_value_is_none(self) -> None:
        assert resolve_role_table("janitor") is None
        assert account_type_for_table("janitor_accounts") is None

    def test_sales_table_name(self) -> None:
        assert resolve_role_table(AccountType.sales).value == "sale_accounts"
