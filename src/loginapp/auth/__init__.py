# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Password hashing/verification (argon2)
- Credential checks against the account store
- Signed session cookies (itsdangerous)
- Double-submit CSRF tokens
"""
