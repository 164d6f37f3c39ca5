# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Server-rendered user management: registration, login and admin pages."""

__version__ = "0.1.0"
