# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Access policy.

Requests are matched against an ordered list of rules; the first rule whose
pattern matches decides. ``/x`` matches exactly, ``/x/**`` matches ``/x`` and
everything below it.

Two deliberate policy choices live here and in the app:
- Successful login always lands on ``/homepage`` (the originally requested URL
  is ignored).
- No ``X-Frame-Options`` header is sent unless LOGINAPP_FRAME_OPTIONS is set,
  so the database console can be framed.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from fastapi import Request

from loginapp.auth.session import COOKIE_NAME, verify_session
from loginapp.core.models import Role, normalize_email
from loginapp.infra.account_repo import AccountRepository

DB_CONSOLE_PATH = "/" + os.getenv("LOGINAPP_DB_CONSOLE_PATH", "/db-console").strip("/")
FRAME_OPTIONS = os.getenv("LOGINAPP_FRAME_OPTIONS", "").strip()

LOGIN_URL = "/login"
HOME_URL = "/homepage"

UNSAFE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


class Requirement(str, Enum):
    PERMIT = "permit"
    REQUIRE_AUTHENTICATED = "authenticated"
    REQUIRE_ROLE = "role"


class Verdict(str, Enum):
    ALLOW = "allow"
    LOGIN = "login"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Decision:
    requirement: Requirement
    role: Optional[Role] = None


PERMIT = Decision(Requirement.PERMIT)
AUTHENTICATED = Decision(Requirement.REQUIRE_AUTHENTICATED)


def require_role(role: Role) -> Decision:
    return Decision(Requirement.REQUIRE_ROLE, role)


@dataclass(frozen=True)
class AccessRule:
    patterns: Tuple[str, ...]
    decision: Decision


RULES: Tuple[AccessRule, ...] = (
    AccessRule(("/login", "/logout", "/perform_logout", "/register", f"{DB_CONSOLE_PATH}/**"), PERMIT),
    AccessRule(("/admin/**", "/users", "/delete"), require_role(Role.ADMIN)),
    AccessRule(("/**",), AUTHENTICATED),
)


def normalize_path(path: str) -> str:
    p = "/" + (path or "").split("?", 1)[0].strip("/")
    return p


def path_matches(pattern: str, path: str) -> bool:
    p = normalize_path(path)
    if pattern.endswith("/**"):
        prefix = pattern[:-3]
        if not prefix:
            return True
        return p == prefix or p.startswith(prefix + "/")
    return p == pattern


def evaluate(path: str, rules: Tuple[AccessRule, ...] = RULES) -> Decision:
    for rule in rules:
        if any(path_matches(pat, path) for pat in rule.patterns):
            return rule.decision
    return AUTHENTICATED


@dataclass(frozen=True)
class CurrentUser:
    email: str
    role: Role
    sid: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def check_access(decision: Decision, user: Optional[CurrentUser]) -> Verdict:
    if decision.requirement == Requirement.PERMIT:
        return Verdict.ALLOW
    if user is None:
        return Verdict.LOGIN
    if decision.requirement == Requirement.REQUIRE_ROLE and user.role != decision.role:
        return Verdict.FORBIDDEN
    return Verdict.ALLOW


def csrf_required(method: str, path: str) -> bool:
    if (method or "").upper() not in UNSAFE_METHODS:
        return False
    return not path_matches(f"{DB_CONSOLE_PATH}/**", path)


def load_user_from_request(request: Request, repo: AccountRepository) -> Optional[CurrentUser]:
    token = request.cookies.get(COOKIE_NAME, "")
    sess = verify_session(token)
    if not sess:
        return None
    # The signed cookie alone is not enough: the session row must still exist.
    owner = repo.session_email(sess.sid)
    if owner is None or normalize_email(owner) != normalize_email(sess.email):
        return None
    account = repo.find_by_email(sess.email)
    if account is None:
        return None
    return CurrentUser(email=account.email, role=account.role, sid=sess.sid)


def current_user_optional(request: Request) -> Optional[CurrentUser]:
    return getattr(request.state, "user", None)


def cookie_settings() -> dict:
    secure = os.getenv("LOGINAPP_COOKIE_SECURE", "false").lower() in {"1", "true", "yes", "y"}
    return {"httponly": True, "samesite": "lax", "secure": secure}
