"""Structural validation for registration and login input.

Every check for a request runs before any error is reported, so callers
receive the complete set of violations at once. Each field contributes at
most one message: the first rule it fails.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email

from .account import Role
from .contracts import LoginInput, RegistrationInput
from .errors import FieldError, ValidationError

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 8
# bcrypt ignores everything past 72 bytes
PASSWORD_MAX_BYTES = 72
PASSWORD_SYMBOLS = "!@#$%^&*"

_ALPHANUMERIC = re.compile(r"[A-Za-z0-9]+")
_PASSWORD_CLASSES = (
    re.compile(r"[a-z]"),
    re.compile(r"[A-Z]"),
    re.compile(r"[0-9]"),
    re.compile("[" + re.escape(PASSWORD_SYMBOLS) + "]"),
)


@dataclass(frozen=True, slots=True)
class NewAccount:
    """Registration input that passed structural validation."""

    username: str
    email: str
    password: str
    role: Role


@dataclass(frozen=True, slots=True)
class Credentials:
    """Login input that passed structural validation."""

    email: str
    password: str


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_registration(
    payload: RegistrationInput, *, allow_admin: bool = False
) -> NewAccount:
    """Validate a registration request or raise :class:`ValidationError`."""
    errors: list[FieldError] = []

    username_error = _check_username(payload.username)
    if username_error:
        errors.append(FieldError("username", username_error))

    email_error = _check_email(payload.email)
    if email_error:
        errors.append(FieldError("email", email_error))

    password_error = _check_password(payload.password, strict=True)
    if password_error:
        errors.append(FieldError("password", password_error))

    role, role_error = _check_role(payload.role, allow_admin=allow_admin)
    if role_error:
        errors.append(FieldError("role", role_error))

    if errors:
        raise ValidationError(errors)

    return NewAccount(
        username=payload.username,
        email=normalize_email(payload.email),
        password=payload.password,
        role=role,
    )


def validate_login(payload: LoginInput) -> Credentials:
    """Validate a login request or raise :class:`ValidationError`."""
    errors: list[FieldError] = []

    email_error = _check_email(payload.email)
    if email_error:
        errors.append(FieldError("email", email_error))

    password_error = _check_password(payload.password, strict=False)
    if password_error:
        errors.append(FieldError("password", password_error))

    if errors:
        raise ValidationError(errors)

    return Credentials(email=normalize_email(payload.email), password=payload.password)


def _check_username(username: str | None) -> str | None:
    if not username:
        return "Username is required"
    if not _ALPHANUMERIC.fullmatch(username):
        return "Username must contain only letters and numbers"
    if len(username) < USERNAME_MIN_LENGTH:
        return f"Username must be at least {USERNAME_MIN_LENGTH} characters"
    if len(username) > USERNAME_MAX_LENGTH:
        return f"Username cannot exceed {USERNAME_MAX_LENGTH} characters"
    return None


def _check_email(email: str | None) -> str | None:
    if not email or not email.strip():
        return "Email is required"
    try:
        validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError:
        return "Please provide a valid email address"
    return None


def _check_password(password: str | None, *, strict: bool) -> str | None:
    if not password:
        return "Password is required"
    if len(password) < PASSWORD_MIN_LENGTH:
        if strict:
            return f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
    if not strict:
        return None
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        return f"Password cannot exceed {PASSWORD_MAX_BYTES} bytes"
    if not all(pattern.search(password) for pattern in _PASSWORD_CLASSES):
        return (
            "Password must contain at least one lowercase, uppercase, number, "
            "and special character"
        )
    return None


def _check_role(role: str | None, *, allow_admin: bool) -> tuple[Role, str | None]:
    if role is None:
        return Role.user, None
    try:
        parsed = Role(role)
    except ValueError:
        allowed = ", ".join(member.value for member in Role)
        return Role.user, f"Role must be one of [{allowed}]"
    if parsed is Role.admin and not allow_admin:
        return Role.user, "Admin accounts cannot be self-registered"
    return parsed, None
