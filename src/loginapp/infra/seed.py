# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Optional YAML seed file with pre-hashed accounts.

Format::

    version: 1
    accounts:
      admin@corp.io:
        role: ADMIN
        full_name: Site Admin
        password_hash: $argon2id$...
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import yaml

from loginapp.core.errors import ConflictError
from loginapp.core.masking import mask_email
from loginapp.core.models import Account, Role, normalize_email
from loginapp.infra.account_repo import AccountRepository

logger = logging.getLogger("loginapp.seed")


def load_seed_accounts(path: Path) -> List[Account]:
    if not path.exists():
        return []
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    entries = (raw.get("accounts") or {}) if isinstance(raw, dict) else {}
    out: List[Account] = []
    for email, data in entries.items():
        if not isinstance(data, dict):
            continue
        e = normalize_email(str(email))
        ph = str(data.get("password_hash") or "").strip()
        if not e or not ph:
            logger.warning("Skipping incomplete seed entry %s", mask_email(e))
            continue
        role_name = str(data.get("role") or "USER").strip().upper()
        try:
            role = Role(role_name)
        except ValueError:
            logger.warning("Skipping seed entry %s with unknown role %r", mask_email(e), role_name)
            continue
        out.append(
            Account(
                email=e,
                password_hash=ph,
                role=role,
                full_name=str(data.get("full_name") or "").strip(),
            )
        )
    return out


def apply_seed(repo: AccountRepository, path: Path) -> int:
    """Insert seed accounts that are not in the store yet. Returns the number added."""
    added = 0
    for account in load_seed_accounts(path):
        if repo.find_by_email(account.email) is not None:
            continue
        try:
            repo.save(account)
        except ConflictError:
            continue
        added += 1
        logger.info("Seeded account %s (%s)", mask_email(account.email), account.role.value)
    return added
