# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""SQLite-backed account store.

Also holds the server-side session table; a session exists only while its
row does, so logout and account deletion end it immediately.

Email uniqueness is enforced by the table itself (PRIMARY KEY COLLATE NOCASE),
so concurrent registrations of the same address cannot both succeed.
"""

from __future__ import annotations

import secrets
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from loginapp.core.errors import ConflictError
from loginapp.core.models import Account, Role, normalize_email, utcnow_iso

_SCHEMA = """
CREATE TABLE IF NOT EXISTS accounts (
    email TEXT PRIMARY KEY COLLATE NOCASE,
    password_hash TEXT NOT NULL,
    role TEXT NOT NULL DEFAULT 'USER' CHECK (role IN ('USER', 'ADMIN')),
    full_name TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL
)
"""

_SESSIONS_SCHEMA = """
CREATE TABLE IF NOT EXISTS sessions (
    sid TEXT PRIMARY KEY,
    email TEXT NOT NULL COLLATE NOCASE,
    created_at TEXT NOT NULL
)
"""

_COLUMNS = "email, password_hash, role, full_name, created_at"


class AccountRepository:
    def __init__(self, db_path: str | Path) -> None:
        self._db_path = str(db_path)
        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._ensure_table()

    @property
    def db_path(self) -> str:
        return self._db_path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._db_path, timeout=10)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _ensure_table(self) -> None:
        with self._connect() as conn:
            conn.execute(_SCHEMA)
            conn.execute(_SESSIONS_SCHEMA)

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> Account:
        return Account(
            email=row["email"],
            password_hash=row["password_hash"],
            role=Role(row["role"]),
            full_name=row["full_name"] or "",
            created_at=row["created_at"],
        )

    def find_by_email(self, email: str) -> Optional[Account]:
        e = normalize_email(email)
        if not e:
            return None
        with self._connect() as conn:
            row = conn.execute(f"SELECT {_COLUMNS} FROM accounts WHERE email = ?", (e,)).fetchone()
        return self._to_domain(row) if row else None

    def find_all(self) -> List[Account]:
        with self._connect() as conn:
            rows = conn.execute(f"SELECT {_COLUMNS} FROM accounts ORDER BY email").fetchall()
        return [self._to_domain(r) for r in rows]

    def count(self) -> int:
        with self._connect() as conn:
            return int(conn.execute("SELECT COUNT(*) FROM accounts").fetchone()[0])

    def save(self, account: Account) -> Account:
        """Insert a new account. Raises ConflictError if the email is taken."""
        email = normalize_email(account.email)
        try:
            with self._connect() as conn:
                conn.execute(
                    f"INSERT INTO accounts ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
                    (email, account.password_hash, Role(account.role).value, account.full_name, account.created_at),
                )
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e).upper():
                raise ConflictError(email) from e
            raise
        return self.find_by_email(email) or account

    def update_password_hash(self, email: str, password_hash: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE accounts SET password_hash = ? WHERE email = ?",
                (password_hash, normalize_email(email)),
            )

    def delete(self, email: str) -> bool:
        """Delete a non-admin account. Returns False when nothing was removed.

        The role check is part of the DELETE itself, so an admin row is never
        removed through this path.
        """
        with self._connect() as conn:
            cur = conn.execute(
                "DELETE FROM accounts WHERE email = ? AND role <> ?",
                (normalize_email(email), Role.ADMIN.value),
            )
            if cur.rowcount == 0:
                return False
            conn.execute("DELETE FROM sessions WHERE email = ?", (normalize_email(email),))
            return True

    # --- sessions ---

    def create_session(self, email: str) -> str:
        """Open a server-side session for ``email`` and return its id."""
        sid = secrets.token_urlsafe(32)
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO sessions (sid, email, created_at) VALUES (?, ?, ?)",
                (sid, normalize_email(email), utcnow_iso()),
            )
        return sid

    def session_email(self, sid: str) -> Optional[str]:
        if not sid:
            return None
        with self._connect() as conn:
            row = conn.execute("SELECT email FROM sessions WHERE sid = ?", (sid,)).fetchone()
        return row["email"] if row else None

    def delete_session(self, sid: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM sessions WHERE sid = ?", (sid,))
