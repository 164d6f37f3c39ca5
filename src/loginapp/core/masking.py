# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Helpers that keep personal data out of logs and markup out of responses."""

from __future__ import annotations

from markupsafe import escape


def _mask_part(s: str) -> str:
    return f"{s[0]}***" if s else "***"


def mask_email(value: str | None) -> str:
    """Anonymize an identifier for log lines.

    ``alice@corp.io`` becomes ``a***@c***.io``. Strings without an ``@`` keep
    only their first character.
    """
    v = (value or "").strip()
    if not v:
        return "<empty>"
    local, sep, domain = v.rpartition("@")
    if not sep:
        return _mask_part(v)
    host, dot, tld = domain.rpartition(".")
    if not dot:
        return f"{_mask_part(local)}@{_mask_part(domain)}"
    return f"{_mask_part(local)}@{_mask_part(host)}.{tld}"


def sanitize_email(raw: str | None) -> str:
    """Trim and HTML-escape user input before echoing it back."""
    return str(escape((raw or "").strip()))
