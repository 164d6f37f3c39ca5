# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Account lifecycle errors.

Each error carries a short, user-facing ``message``. Anything more detailed
belongs in the logs, never in a response body.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class AccountError(Exception):
    message = "An unexpected error occurred"

    def __init__(self, message: str | None = None) -> None:
        if message:
            self.message = message
        super().__init__(self.message)


class ValidationError(AccountError):
    message = "Please correct the highlighted fields"

    def __init__(self, errors: List[FieldError]) -> None:
        self.errors = list(errors)
        super().__init__()

    def for_field(self, name: str) -> List[str]:
        return [e.message for e in self.errors if e.field == name]


class ConflictError(AccountError):
    message = "Email already registered"

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__()


class NotFoundError(AccountError):
    message = "User not found"

    def __init__(self, email: str) -> None:
        # Already sanitized; safe to echo back.
        self.email = email
        super().__init__()


class AuthorizationRefusal(AccountError):
    message = "Administrators cannot be deleted"

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__()


class UnexpectedError(AccountError):
    pass
