"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from .account import Account, Role


@dataclass(slots=True)
class RegistrationInput:
    """Raw registration fields as supplied by the caller."""

    username: str | None
    email: str | None
    password: str | None
    role: str | None = None


@dataclass(slots=True)
class LoginInput:
    """Raw login fields as supplied by the caller."""

    email: str | None
    password: str | None


@dataclass(frozen=True, slots=True)
class Identity:
    """Decoded bearer token identity handed to protected operations."""

    account_id: int
    role: Role


class CredentialStore(Protocol):
    """Persistence contract the registration and authentication services rely on.

    ``insert`` must raise :class:`~auth_service.domain.errors.ConflictError`
    when its own uniqueness enforcement rejects the row, even if a prior
    ``find_by_*`` lookup returned ``None``.
    """

    def find_by_email(self, email: str) -> Account | None: ...

    def find_by_username(self, username: str) -> Account | None: ...

    def insert(self, username: str, email: str, password_hash: str, role: Role) -> Account: ...
