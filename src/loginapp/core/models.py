# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


def normalize_email(raw: str | None) -> str:
    """Canonical form used as account identity (trim + lower)."""
    return (raw or "").strip().lower()


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass(frozen=True)
class Account:
    email: str
    password_hash: str
    role: Role = Role.USER
    full_name: str = ""
    created_at: str = field(default_factory=utcnow_iso)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
