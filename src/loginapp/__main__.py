"""loginapp entrypoint.

Run with:
  python -m loginapp [--host H] [--port P] [--reload] [--log-level LEVEL]

Command-line flags override the LOGINAPP_* environment variables.
"""

from __future__ import annotations

import argparse
import os
from typing import List, Optional

import uvicorn

from loginapp.logs import configure_logging


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() in {"1", "true", "yes", "y"}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="loginapp", description="Serve the account management web app.")
    p.add_argument("--host", default=os.getenv("LOGINAPP_HOST", "0.0.0.0"))
    p.add_argument("--port", type=int, default=int(os.getenv("LOGINAPP_PORT", "8000")))
    p.add_argument("--reload", action="store_true", default=_env_flag("LOGINAPP_RELOAD"))
    p.add_argument("--log-level", default=os.getenv("LOGINAPP_LOG_LEVEL", "INFO"))
    return p


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    # Sessions cannot be signed without a secret; fail before binding the port.
    if not (os.getenv("SECRET_KEY") or os.getenv("LOGINAPP_SECRET_KEY")):
        raise SystemExit("Missing SECRET_KEY (or LOGINAPP_SECRET_KEY) in environment")
    configure_logging(args.log_level)
    uvicorn.run(
        "loginapp.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
