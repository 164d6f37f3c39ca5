# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from markupsafe import Markup
from starlette.concurrency import run_in_threadpool

from loginapp.auth.csrf import CSRF_COOKIE_NAME, CSRF_FORM_FIELD, CSRF_HEADER, new_csrf_token, tokens_match
from loginapp.auth.session import COOKIE_NAME, DEFAULT_MAX_AGE_SECONDS, sign_session
from loginapp.auth.users import authenticate
from loginapp.core.errors import (
    AuthorizationRefusal,
    ConflictError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from loginapp.core.masking import mask_email
from loginapp.infra.account_repo import AccountRepository
from loginapp.infra.seed import apply_seed
from loginapp.logs import configure_logging
from loginapp.permissions import (
    FRAME_OPTIONS,
    HOME_URL,
    LOGIN_URL,
    Verdict,
    check_access,
    cookie_settings,
    csrf_required,
    current_user_optional,
    evaluate,
    load_user_from_request,
)
from loginapp.services.account_service import AccountService

configure_logging()
logger = logging.getLogger("loginapp.web")

app = FastAPI()

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

DATA_DIR = Path(os.getenv("LOGINAPP_DATA_DIR", "data")).resolve()
DB_PATH = Path(os.getenv("LOGINAPP_DB_PATH", str(DATA_DIR / "accounts.db"))).resolve()

REPO = AccountRepository(DB_PATH)
SERVICE = AccountService(REPO)

SEED_PATH = os.getenv("LOGINAPP_SEED_PATH", "").strip()
if SEED_PATH:
    apply_seed(REPO, Path(SEED_PATH).resolve())

if SERVICE.bootstrap_admin_if_needed(
    os.getenv("LOGINAPP_BOOTSTRAP_ADMIN_EMAIL", ""),
    os.getenv("LOGINAPP_BOOTSTRAP_ADMIN_PASSWORD", ""),
):
    logger.info("Bootstrap admin created")


def _render(request: Request, template_name: str, ctx: Optional[dict] = None, *, status_code: int = 200):
    """TemplateResponse wrapper injecting the current user and CSRF token."""
    base_ctx = {
        "current_user": current_user_optional(request),
        "csrf_token": getattr(request.state, "csrf_token", ""),
    }
    merged = {**base_ctx, **(ctx or {})}
    return templates.TemplateResponse(request, template_name, merged, status_code=status_code)


def _set_csrf_cookie(request: Request, response, token: str) -> None:
    response.set_cookie(CSRF_COOKIE_NAME, token, max_age=DEFAULT_MAX_AGE_SECONDS, **cookie_settings())
    request.state.csrf_issued = True


def _errors_by_field(err: ValidationError) -> Dict[str, List[str]]:
    out: Dict[str, List[str]] = {}
    for e in err.errors:
        out.setdefault(e.field, []).append(e.message)
    return out


@app.middleware("http")
async def _security_middleware(request: Request, call_next):
    request.state.user = await run_in_threadpool(load_user_from_request, request, REPO)

    csrf_token = request.cookies.get(CSRF_COOKIE_NAME, "")
    new_token = not csrf_token
    if new_token:
        csrf_token = new_csrf_token()
    request.state.csrf_token = csrf_token
    request.state.csrf_issued = False

    verdict = check_access(evaluate(request.url.path), request.state.user)
    if verdict == Verdict.LOGIN:
        response = RedirectResponse(url=LOGIN_URL, status_code=303)
    elif verdict == Verdict.FORBIDDEN:
        logger.warning("Access denied to %s for %s", request.url.path, mask_email(request.state.user.email))
        response = _render(request, "access_denied.html", status_code=403)
    else:
        response = await call_next(request)

    # Handlers that rotate the token set the cookie themselves.
    if new_token and not request.state.csrf_issued:
        _set_csrf_cookie(request, response, csrf_token)

    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    if FRAME_OPTIONS:
        response.headers["X-Frame-Options"] = FRAME_OPTIONS
    return response


async def csrf_protect(request: Request) -> None:
    if not csrf_required(request.method, request.url.path):
        return
    submitted = request.headers.get(CSRF_HEADER, "")
    if not submitted:
        form = await request.form()
        submitted = str(form.get(CSRF_FORM_FIELD) or "")
    if not tokens_match(request.cookies.get(CSRF_COOKIE_NAME), submitted):
        logger.warning("Rejected %s %s: missing or invalid CSRF token", request.method, request.url.path)
        raise HTTPException(status_code=403, detail="Invalid CSRF token")


def _rotate_csrf(request: Request, response) -> None:
    token = new_csrf_token()
    request.state.csrf_token = token
    _set_csrf_cookie(request, response, token)


# ------------------ Routes ------------------


@app.get("/", include_in_schema=False)
def index():
    return RedirectResponse(url=HOME_URL, status_code=303)


@app.get("/login", response_class=HTMLResponse)
def login_get(request: Request, error: str = ""):
    logger.debug("Showing login page.")
    message = "Invalid email or password." if error else ""
    return _render(request, "login.html", {"error": message})


@app.post("/login", dependencies=[Depends(csrf_protect)])
def login_post(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
):
    # Always lands on the homepage; any originally requested URL is ignored.
    failed = RedirectResponse(url=f"{LOGIN_URL}?error=true", status_code=303)
    try:
        account = authenticate(REPO, username, password)
        if account is None:
            logger.warning("Login failed for %s", mask_email(username))
            return failed
        previous = current_user_optional(request)
        if previous is not None and previous.sid:
            REPO.delete_session(previous.sid)
        sid = REPO.create_session(account.email)
    except Exception:
        logger.exception("An unexpected error occurred during login for %s", mask_email(username))
        return failed

    resp = RedirectResponse(url=HOME_URL, status_code=303)
    resp.set_cookie(COOKIE_NAME, sign_session(account.email, sid), max_age=DEFAULT_MAX_AGE_SECONDS, **cookie_settings())
    _rotate_csrf(request, resp)
    logger.info("Login succeeded for %s", mask_email(account.email))
    return resp


@app.api_route("/logout", methods=["GET", "POST"], dependencies=[Depends(csrf_protect)])
@app.api_route("/perform_logout", methods=["GET", "POST"], dependencies=[Depends(csrf_protect)])
def logout(request: Request):
    user = current_user_optional(request)
    if user is not None:
        if user.sid:
            REPO.delete_session(user.sid)
        logger.info("Logout for %s", mask_email(user.email))
    resp = RedirectResponse(url=LOGIN_URL, status_code=303)
    resp.delete_cookie(COOKIE_NAME)
    _rotate_csrf(request, resp)
    return resp


@app.get("/register", response_class=HTMLResponse)
def register_get(request: Request):
    logger.debug("Register user")
    return _render(request, "register_form.html", {"form": {}, "errors": {}})


@app.post("/register", response_class=HTMLResponse, dependencies=[Depends(csrf_protect)])
def register_post(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    full_name: str = Form(""),
):
    form = {"email": email, "full_name": full_name}
    try:
        account = SERVICE.register({**form, "password": password})
    except ValidationError as e:
        return _render(request, "register_form.html", {"form": form, "errors": _errors_by_field(e)})
    except (ConflictError, UnexpectedError) as e:
        return _render(request, "register_error.html", {"error": e.message})
    return _render(request, "register_success.html", {"email": account.email})


@app.get("/homepage", response_class=HTMLResponse)
def homepage(request: Request):
    logger.debug("Homepage")
    return _render(request, "homepage.html")


@app.get("/admin", response_class=HTMLResponse)
def admin_page(request: Request):
    logger.debug("Admin accessed admin page.")
    return _render(request, "admin_page.html")


@app.get("/users", response_class=HTMLResponse)
def users_page(request: Request):
    logger.debug("Showing usersPage with a list of registered users.")
    return _render(request, "users_list.html", {"users": SERVICE.list_accounts()})


@app.get("/delete", response_class=HTMLResponse)
def delete_get(request: Request):
    logger.debug("Displaying user deletion form.")
    return _render(request, "delete_form.html", {"users": SERVICE.list_accounts(), "error": ""})


@app.post("/delete", response_class=HTMLResponse, dependencies=[Depends(csrf_protect)])
def delete_post(request: Request, email: str = Form("")):
    try:
        SERVICE.delete_by_email(email)
    except ValidationError as e:
        return _render(
            request,
            "delete_form.html",
            {"users": SERVICE.list_accounts(), "error": "; ".join(e.for_field("email"))},
        )
    except NotFoundError as e:
        # e.email is already HTML-escaped
        return _render(request, "user_not_found.html", {"id": Markup(e.email)})
    except AuthorizationRefusal:
        return _render(request, "admin_error.html")
    except UnexpectedError as e:
        return _render(request, "delete_error.html", {"error": e.message})
    return _render(request, "delete_success.html")


@app.get("/delete_success", response_class=HTMLResponse)
def delete_success(request: Request):
    logger.debug("User deleted successfully.")
    return _render(request, "delete_success.html")


@app.get("/delete-error", response_class=HTMLResponse)
def delete_error(request: Request):
    logger.debug("Error during user deletion.")
    return _render(request, "delete_error.html", {"error": ""})
