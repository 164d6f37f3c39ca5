import pytest

import loginapp.__main__ as entry


def test_cli_flags_override_environment(monkeypatch):
    calls = {}

    def fake_run(target, **kwargs):
        calls["target"] = target
        calls.update(kwargs)

    monkeypatch.setenv("LOGINAPP_PORT", "9000")
    monkeypatch.setattr(entry.uvicorn, "run", fake_run)
    entry.main(["--host", "127.0.0.1", "--port", "8123", "--log-level", "debug"])
    assert calls["target"] == "loginapp.app:app"
    assert calls["host"] == "127.0.0.1"
    assert calls["port"] == 8123
    assert calls["reload"] is False
    assert calls["log_level"] == "debug"


def test_environment_defaults(monkeypatch):
    monkeypatch.setenv("LOGINAPP_PORT", "9000")
    monkeypatch.setenv("LOGINAPP_RELOAD", "yes")
    args = entry.build_parser().parse_args([])
    assert args.port == 9000
    assert args.reload is True


def test_missing_secret_fails_before_serving(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    monkeypatch.delenv("LOGINAPP_SECRET_KEY", raising=False)
    monkeypatch.setattr(entry.uvicorn, "run", lambda *a, **kw: pytest.fail("server must not start"))
    with pytest.raises(SystemExit):
        entry.main([])
