import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

import importlib
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from loginapp.auth.csrf import CSRF_COOKIE_NAME
from loginapp.infra.account_repo import AccountRepository
from loginapp.services.account_service import AccountService

ADMIN_EMAIL = "admin@corp.io"
ADMIN_PASSWORD = "admin-pass"


@pytest.fixture(autouse=True)
def secret_key(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret-key")


@pytest.fixture()
def repo(tmp_path: Path) -> AccountRepository:
    return AccountRepository(tmp_path / "accounts.db")


@pytest.fixture()
def service(repo) -> AccountService:
    return AccountService(repo)


@pytest.fixture()
def app_module(tmp_path: Path, monkeypatch):
    """Reload the app against a fresh database with a bootstrap admin."""
    monkeypatch.setenv("LOGINAPP_DB_PATH", str(tmp_path / "web.db"))
    monkeypatch.setenv("LOGINAPP_BOOTSTRAP_ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setenv("LOGINAPP_BOOTSTRAP_ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.delenv("LOGINAPP_SEED_PATH", raising=False)

    import loginapp.app as app_module
    importlib.reload(app_module)
    return app_module


@pytest.fixture()
def client(app_module) -> TestClient:
    return TestClient(app_module.app)


def csrf_token(client: TestClient) -> str:
    token = client.cookies.get(CSRF_COOKIE_NAME)
    if not token:
        client.get("/login")
        token = client.cookies.get(CSRF_COOKIE_NAME)
    assert token
    return token


def login(client: TestClient, email: str, password: str):
    return client.post(
        "/login",
        data={"username": email, "password": password, "csrf_token": csrf_token(client)},
        follow_redirects=False,
    )


def register(client: TestClient, email: str, password: str, **extra):
    data = {"email": email, "password": password, "csrf_token": csrf_token(client), **extra}
    return client.post("/register", data=data)
