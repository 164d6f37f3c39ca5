# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer

COOKIE_NAME = os.getenv("LOGINAPP_COOKIE_NAME", "loginapp_session")
DEFAULT_MAX_AGE_SECONDS = int(os.getenv("LOGINAPP_SESSION_MAX_AGE", "28800"))  # 8 hours


def _serializer() -> URLSafeTimedSerializer:
    secret = os.getenv("SECRET_KEY") or os.getenv("LOGINAPP_SECRET_KEY")
    if not secret:
        raise RuntimeError("Missing SECRET_KEY (or LOGINAPP_SECRET_KEY) in environment")
    salt = os.getenv("LOGINAPP_SESSION_SALT", "loginapp.session.v1")
    return URLSafeTimedSerializer(secret_key=secret, salt=salt)


@dataclass(frozen=True)
class SessionData:
    email: str
    sid: str


def sign_session(email: str, sid: str) -> str:
    """Sign a cookie for a server-side session opened with ``create_session``."""
    if not sid:
        raise ValueError("Missing session id")
    s = _serializer()
    return s.dumps({"u": email, "sid": sid})


def verify_session(token: str, *, max_age: int = DEFAULT_MAX_AGE_SECONDS) -> Optional[SessionData]:
    if not token:
        return None
    s = _serializer()
    try:
        data = s.loads(token, max_age=max_age)
    except (BadSignature, BadTimeSignature):
        return None
    if not isinstance(data, dict):
        return None
    u = str(data.get("u") or "").strip()
    sid = str(data.get("sid") or "").strip()
    if not u or not sid:
        return None
    return SessionData(email=u, sid=sid)
