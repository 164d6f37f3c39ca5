from loginapp.core.masking import mask_email, sanitize_email
from loginapp.core.validation import validate_registration


def test_valid_request_is_normalized():
    req, errors = validate_registration({"email": "  A@X.com ", "password": "pw1", "full_name": " Ann "})
    assert errors == []
    assert req.email == "a@x.com"
    assert req.full_name == "Ann"


def test_missing_fields():
    req, errors = validate_registration({})
    assert req is None
    fields = {e.field for e in errors}
    assert fields == {"email", "password"}


def test_malformed_email():
    req, errors = validate_registration({"email": "not-an-email", "password": "pw1"})
    assert req is None
    assert [e.field for e in errors] == ["email"]
    assert errors[0].message == "Enter a valid email address"


def test_password_policy():
    _, errors = validate_registration({"email": "a@x.com", "password": "pw"})
    assert [e.field for e in errors] == ["password"]
    _, errors = validate_registration({"email": "a@x.com", "password": "     "})
    assert errors[0].message == "Password must not be blank"
    _, errors = validate_registration({"email": "a@x.com", "password": "x" * 129})
    assert [e.field for e in errors] == ["password"]


def test_mask_email():
    assert mask_email("alice@corp.io") == "a***@c***.io"
    assert mask_email("bob@localhost") == "b***@l***"
    assert mask_email("someone") == "s***"
    assert mask_email("") == "<empty>"
    assert mask_email(None) == "<empty>"
    assert "alice" not in mask_email("alice@corp.io")


def test_sanitize_email_escapes_markup():
    assert sanitize_email(" a@x.com ") == "a@x.com"
    assert sanitize_email("<script>@x.com") == "&lt;script&gt;@x.com"
    assert sanitize_email(None) == ""
