# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from typing import Any, List, Mapping, Optional, Tuple

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from loginapp.core.errors import FieldError
from loginapp.core.models import normalize_email

PASSWORD_MIN_LENGTH = int(os.getenv("LOGINAPP_PASSWORD_MIN_LENGTH", "3"))
PASSWORD_MAX_LENGTH = 128

_MESSAGES = {
    "missing": "This field is required",
    "string_too_short": f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
    "string_too_long": "Value is too long",
}


class RegistrationRequest(BaseModel):
    """Transient registration input. Never persisted as-is."""

    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    full_name: str = Field(default="", max_length=120)

    @field_validator("email", mode="before")
    @classmethod
    def _strip_email(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Password must not be blank")
        return v

    @field_validator("full_name", mode="before")
    @classmethod
    def _strip_name(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v


def _to_field_error(err: Mapping[str, Any]) -> FieldError:
    loc = err.get("loc") or ("__root__",)
    name = str(loc[0])
    etype = err.get("type", "")
    if name == "email" and etype not in _MESSAGES:
        return FieldError(field="email", message="Enter a valid email address")
    if etype == "value_error":
        # pydantic prefixes messages raised from validators with "Value error, "
        msg = str(err.get("msg", "")).split(", ", 1)[-1]
        return FieldError(field=name, message=msg)
    return FieldError(field=name, message=_MESSAGES.get(etype, str(err.get("msg", "Invalid value"))))


def validate_registration(
    data: Mapping[str, Any],
) -> Tuple[Optional[RegistrationRequest], List[FieldError]]:
    """Validate raw form data. Returns the request or a list of field errors."""
    payload = {k: data.get(k) for k in ("email", "password", "full_name") if data.get(k) is not None}
    if not str(payload.get("email") or "").strip():
        payload.pop("email", None)
    try:
        return RegistrationRequest(**payload), []
    except PydanticValidationError as e:
        return None, [_to_field_error(err) for err in e.errors()]
