# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from loginapp.auth.passwords import hash_password, needs_rehash, verify_password
from loginapp.core.masking import mask_email
from loginapp.core.models import Account, normalize_email
from loginapp.infra.account_repo import AccountRepository

logger = logging.getLogger("loginapp.auth")


def authenticate(repo: AccountRepository, email: str, password: str) -> Optional[Account]:
    """Return the account when the credentials match, else None.

    Unknown email and wrong password are indistinguishable to the caller.
    """
    e = normalize_email(email)
    if not e or not password:
        return None
    account = repo.find_by_email(e)
    if account is None:
        logger.debug("Login rejected: unknown account %s", mask_email(e))
        return None
    if not verify_password(account.password_hash, password):
        logger.debug("Login rejected: bad password for %s", mask_email(e))
        return None
    if needs_rehash(account.password_hash):
        account = replace(account, password_hash=hash_password(password))
        repo.update_password_hash(account.email, account.password_hash)
        logger.info("Password hash upgraded for %s", mask_email(e))
    return account
