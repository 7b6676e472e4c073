"""Domain error taxonomy for the credential lifecycle."""

from __future__ import annotations

from dataclasses import dataclass


class AuthServiceError(Exception):
    """Base class for every error raised by the credential lifecycle core."""


@dataclass(frozen=True, slots=True)
class FieldError:
    """A single (field, message) validation failure."""

    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class ValidationError(AuthServiceError):
    """Client input failed structural or business validation."""

    def __init__(self, errors: list[FieldError]) -> None:
        super().__init__("; ".join(f"{error.field}: {error.message}" for error in errors))
        self.errors = list(errors)


class ConflictError(AuthServiceError):
    """A uniqueness constraint on ``email`` or ``username`` was violated."""

    messages = {
        "email": "Email already in use",
        "username": "Username already taken",
    }

    def __init__(self, field: str) -> None:
        if field not in self.messages:
            raise ValueError(f"unknown conflict field: {field!r}")
        super().__init__(self.messages[field])
        self.field = field
        self.message = self.messages[field]


class InvalidCredentials(AuthServiceError):
    """Authentication failed; deliberately carries no detail."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class Unauthorized(AuthServiceError):
    """No usable bearer token was presented to the access gate."""

    def __init__(self) -> None:
        super().__init__("Unauthorized")


class InvalidToken(AuthServiceError):
    """Token is malformed, forged or expired."""


class StoreUnavailable(AuthServiceError):
    """The credential store could not complete an operation."""


class MissingSigningKey(AuthServiceError):
    """No token signing secret is configured; the service must not start."""
