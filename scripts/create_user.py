#!/usr/bin/env python3
from __future__ import annotations

import os
from getpass import getpass
from pathlib import Path

from loginapp.core.errors import ConflictError, ValidationError
from loginapp.core.models import Role
from loginapp.infra.account_repo import AccountRepository
from loginapp.logs import configure_logging
from loginapp.services.account_service import AccountService

DATA_DIR = Path(os.getenv("LOGINAPP_DATA_DIR", "data")).resolve()
DB_PATH = Path(os.getenv("LOGINAPP_DB_PATH", str(DATA_DIR / "accounts.db"))).resolve()


def main() -> None:
    configure_logging()
    service = AccountService(AccountRepository(DB_PATH))

    email = input("Email: ").strip()
    role_in = (input("Role [USER/ADMIN]: ").strip().upper() or "USER")
    if role_in not in {r.value for r in Role}:
        raise SystemExit(f"Unknown role: {role_in}")
    full_name = input("Full name (optional): ").strip()

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    try:
        account = service.create_account(email, pw1, role=Role(role_in), full_name=full_name)
    except ValidationError as e:
        raise SystemExit("; ".join(f"{err.field}: {err.message}" for err in e.errors))
    except ConflictError as e:
        raise SystemExit(e.message)

    print(f"OK -> {account.email} ({account.role.value}) in {DB_PATH}")


if __name__ == "__main__":
    main()
