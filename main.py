#!/usr/bin/env python3
"""
Chop accounts -- command line administration.

Creating any account type other than customer over HTTP requires an admin
session, so the first admin has to come from here.

Usage:
  python main.py create-account --type admin --email ops@chop.io --password 'correct horse'
  python main.py create-account --type sales --email rep@chop.io
  python main.py list-accounts
  python main.py list-accounts --json

Environment variables:
  DATABASE_URL  SQLAlchemy URL of the accounts database (default sqlite:///chop_accounts.db)
  SECRET_KEY    Required unless DEBUG=true (see core/config.py)
"""

import argparse
import getpass
import json
import logging
import sys
from typing import Optional

from auth.errors import AuthError
from auth.models import AccountType
from auth.service import AccountService
from auth.store import AccountStore


def _create_account(service: AccountService, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    try:
        service.create_account(args.email, password, AccountType(args.type))
    except AuthError as e:
        print(f"  [!] {e.message}")
        return 1
    print(f"  Created {args.type} account for {args.email.strip().lower()}")
    return 0


def _list_accounts(service: AccountService, args: argparse.Namespace) -> int:
    try:
        rows = service.list_accounts()
    except AuthError as e:
        print(f"  [!] {e.message}")
        return 1
    if args.json:
        print(json.dumps([{"id": r.id, "email": r.email, "type": r.type.value if r.type else None} for r in rows]))
        return 0
    if not rows:
        print("  No accounts.")
        return 0
    for r in rows:
        print(f"  {r.id:>5}  {(r.type.value if r.type else '-'):<10} {r.email}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chop-accounts", description="Chop account administration")
    parser.add_argument("--db", help="SQLAlchemy database URL (overrides DATABASE_URL)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-account", help="Create an account of any type")
    create.add_argument("--type", required=True, choices=[t.value for t in AccountType])
    create.add_argument("--email", required=True)
    create.add_argument("--password", help="Prompted for when omitted")
    create.set_defaults(handler=_create_account)

    listing = sub.add_parser("list-accounts", help="List all accounts and their types")
    listing.add_argument("--json", action="store_true", help="Output JSON")
    listing.set_defaults(handler=_list_accounts)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    )
    store = AccountStore(db_url=args.db)
    try:
        return args.handler(AccountService(store), args)
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
