# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Double-submit CSRF tokens.

The token lives in a cookie and every state-changing form echoes it back in a
hidden ``csrf_token`` field (or the ``X-CSRF-Token`` header).
"""

from __future__ import annotations

import hmac
import os
import secrets

CSRF_COOKIE_NAME = os.getenv("LOGINAPP_CSRF_COOKIE_NAME", "loginapp_csrf")
CSRF_FORM_FIELD = "csrf_token"
CSRF_HEADER = "X-CSRF-Token"


def new_csrf_token() -> str:
    return secrets.token_urlsafe(32)


def tokens_match(cookie_token: str | None, submitted: str | None) -> bool:
    if not cookie_token or not submitted:
        return False
    return hmac.compare_digest(cookie_token.encode("utf-8"), submitted.encode("utf-8"))
