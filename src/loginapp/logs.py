# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the ``loginapp`` logger tree once per process."""
    lvl = (level or os.getenv("LOGINAPP_LOG_LEVEL", "INFO")).upper()
    root = logging.getLogger("loginapp")
    root.setLevel(getattr(logging, lvl, logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
