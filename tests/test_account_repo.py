import pytest

from loginapp.core.errors import ConflictError
from loginapp.core.models import Account, Role


def _acc(email, role=Role.USER):
    return Account(email=email, password_hash="h", role=role)


def test_save_and_find_is_case_insensitive(repo):
    repo.save(_acc("a@x.com"))
    found = repo.find_by_email("A@X.COM")
    assert found is not None
    assert found.email == "a@x.com"
    assert found.role == Role.USER
    assert repo.find_by_email("b@x.com") is None
    assert repo.find_by_email("") is None


def test_duplicate_email_conflicts(repo):
    repo.save(_acc("a@x.com"))
    with pytest.raises(ConflictError):
        repo.save(_acc("A@x.com"))
    assert repo.count() == 1


def test_find_all_is_ordered(repo):
    for e in ("c@x.com", "a@x.com", "b@x.com"):
        repo.save(_acc(e))
    assert [a.email for a in repo.find_all()] == ["a@x.com", "b@x.com", "c@x.com"]


def test_delete_never_removes_admin(repo):
    repo.save(_acc("root@x.com", Role.ADMIN))
    repo.save(_acc("a@x.com"))
    assert repo.delete("root@x.com") is False
    assert repo.delete("a@x.com") is True
    assert repo.delete("a@x.com") is False
    assert [a.email for a in repo.find_all()] == ["root@x.com"]


def test_update_password_hash(repo):
    repo.save(_acc("a@x.com"))
    repo.update_password_hash("a@x.com", "h2")
    assert repo.find_by_email("a@x.com").password_hash == "h2"


def test_sessions_live_in_the_store(repo):
    repo.save(_acc("a@x.com"))
    sid = repo.create_session("A@x.com")
    other = repo.create_session("a@x.com")
    assert sid != other
    assert repo.session_email(sid) == "a@x.com"
    repo.delete_session(sid)
    assert repo.session_email(sid) is None
    assert repo.session_email(other) == "a@x.com"
    assert repo.session_email("") is None


def test_deleting_account_drops_its_sessions(repo):
    repo.save(_acc("a@x.com"))
    repo.save(_acc("root@x.com", Role.ADMIN))
    sid = repo.create_session("a@x.com")
    admin_sid = repo.create_session("root@x.com")
    assert repo.delete("root@x.com") is False
    assert repo.session_email(admin_sid) == "root@x.com"
    assert repo.delete("a@x.com") is True
    assert repo.session_email(sid) is None
