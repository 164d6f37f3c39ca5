# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Account lifecycle: registration, listing and admin-initiated deletion.

Every failure is raised as an ``AccountError`` subclass so route handlers can
map it to a view. Emails are masked in every log line.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from loginapp.auth.passwords import hash_password
from loginapp.core.errors import (
    AuthorizationRefusal,
    ConflictError,
    FieldError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from loginapp.core.masking import mask_email, sanitize_email
from loginapp.core.models import Account, Role, normalize_email
from loginapp.core.validation import validate_registration
from loginapp.infra.account_repo import AccountRepository


class AccountService:
    def __init__(self, repo: AccountRepository, log: Optional[logging.Logger] = None) -> None:
        self._repo = repo
        self._log = log or logging.getLogger("loginapp.accounts")

    def register(self, data: Mapping[str, Any]) -> Account:
        """Create a USER account from raw form data.

        Raises ValidationError before touching the store, ConflictError when
        the email is already registered and UnexpectedError for anything else.
        """
        masked = mask_email(str(data.get("email") or ""))
        self._log.debug("Processing registration for email: %s", masked)

        req, errors = validate_registration(data)
        if req is None:
            self._log.warning("Registration failed due to validation errors for email: %s", masked)
            raise ValidationError(errors)

        masked = mask_email(req.email)
        try:
            account = self._repo.save(
                Account(email=req.email, password_hash=hash_password(req.password), full_name=req.full_name)
            )
        except ConflictError:
            self._log.warning("Registration failed due to email already being registered: %s", masked)
            raise
        except Exception as e:
            self._log.exception("An unexpected error occurred during registration for email: %s", masked)
            raise UnexpectedError() from e

        self._log.info("User successfully registered with email: %s", masked)
        return account

    def create_account(
        self,
        email: str,
        password: str,
        *,
        role: Role = Role.USER,
        full_name: str = "",
    ) -> Account:
        """Operator path (bootstrap, CLI). Unlike register() it may create admins."""
        req, errors = validate_registration({"email": email, "password": password, "full_name": full_name})
        if req is None:
            raise ValidationError(errors)
        account = self._repo.save(
            Account(email=req.email, password_hash=hash_password(req.password), role=role, full_name=req.full_name)
        )
        self._log.info("Created %s account %s", role.value, mask_email(account.email))
        return account

    def bootstrap_admin_if_needed(self, email: str, password: str) -> Optional[Account]:
        """Create the first admin when the store is empty."""
        if not normalize_email(email) or not password:
            return None
        if self._repo.count() > 0:
            return None
        return self.create_account(email, password, role=Role.ADMIN)

    def list_accounts(self) -> List[Account]:
        return self._repo.find_all()

    def delete_by_email(self, raw_email: str | None) -> Account:
        """Delete a non-admin account.

        The caller must already hold the ADMIN role. Raises NotFoundError
        (carrying the sanitized email), AuthorizationRefusal for admin
        targets and UnexpectedError for store failures.
        """
        lookup = normalize_email(raw_email)
        # Escaped form is only for echoing back; lookups use the raw value.
        email = sanitize_email(raw_email)
        masked = mask_email(lookup)
        self._log.debug("Processing user deletion.")
        if not lookup:
            raise ValidationError([FieldError(field="email", message="This field is required")])

        try:
            account = self._repo.find_by_email(lookup)
            if account is None:
                self._log.warning("User %s not found for deletion.", masked)
                raise NotFoundError(email)
            if account.is_admin:
                self._log.warning("ADMIN cannot be deleted.")
                raise AuthorizationRefusal(email)

            if not self._repo.delete(account.email):
                # Changed between the read and the delete.
                current = self._repo.find_by_email(account.email)
                if current is None:
                    self._log.warning("User %s not found for deletion.", masked)
                    raise NotFoundError(email)
                self._log.warning("ADMIN cannot be deleted.")
                raise AuthorizationRefusal(email)
        except (NotFoundError, AuthorizationRefusal):
            raise
        except Exception as e:
            self._log.exception("An error occurred while deleting the user: %s", masked)
            raise UnexpectedError("An error occurred while deleting the user.") from e

        self._log.info("User deleted: %s", masked)
        return account
