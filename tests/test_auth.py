import pytest

from loginapp.auth.csrf import new_csrf_token, tokens_match
from loginapp.auth.passwords import hash_password, needs_rehash, verify_password
from loginapp.auth.session import sign_session, verify_session
from loginapp.auth.users import authenticate
from loginapp.core.models import Account


def test_hash_and_verify():
    h = hash_password("pw1")
    assert h != "pw1"
    assert h.startswith("$argon2")
    assert verify_password(h, "pw1")
    assert not verify_password(h, "pw2")
    assert not needs_rehash(h)


def test_hashes_are_salted():
    assert hash_password("same") != hash_password("same")


def test_verify_rejects_blank_and_garbage():
    assert not verify_password("", "pw1")
    assert not verify_password(hash_password("pw1"), "")
    assert not verify_password("not-a-hash", "pw1")


def test_hash_rejects_empty_password():
    with pytest.raises(ValueError):
        hash_password("")


def test_session_roundtrip_carries_sid():
    s = verify_session(sign_session("a@x.com", "sid-1"))
    assert s is not None
    assert s.email == "a@x.com"
    assert s.sid == "sid-1"


def test_session_requires_sid():
    with pytest.raises(ValueError):
        sign_session("a@x.com", "")


def test_session_rejects_tampered_and_expired_tokens():
    token = sign_session("a@x.com", "sid-1")
    assert verify_session(token[:-2] + "xx") is None
    assert verify_session(token, max_age=-1) is None
    assert verify_session("") is None


def test_session_rejects_other_secret(monkeypatch):
    token = sign_session("a@x.com", "sid-1")
    monkeypatch.setenv("SECRET_KEY", "another-secret")
    assert verify_session(token) is None


def test_session_requires_secret(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    monkeypatch.delenv("LOGINAPP_SECRET_KEY", raising=False)
    with pytest.raises(RuntimeError):
        sign_session("a@x.com", "sid-1")


def test_csrf_tokens():
    t = new_csrf_token()
    assert tokens_match(t, t)
    assert not tokens_match(t, new_csrf_token())
    assert not tokens_match(t, "")
    assert not tokens_match(None, t)


def test_authenticate_is_uniform(repo):
    repo.save(Account(email="a@x.com", password_hash=hash_password("pw1")))
    assert authenticate(repo, "A@X.com ", "pw1").email == "a@x.com"
    assert authenticate(repo, "a@x.com", "wrong") is None
    assert authenticate(repo, "nobody@x.com", "pw1") is None
    assert authenticate(repo, "", "") is None


def test_authenticate_store_failure_propagates(repo, monkeypatch):
    def broken(email):
        raise RuntimeError("disk I/O error")

    monkeypatch.setattr(repo, "find_by_email", broken)
    with pytest.raises(RuntimeError):
        authenticate(repo, "a@x.com", "pw1")
