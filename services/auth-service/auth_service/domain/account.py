from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    user = "user"
    admin = "admin"


@dataclass(slots=True)
class Account:
    """Stored credential record for a registered user."""

    account_id: int
    username: str
    email: str
    password_hash: str
    role: Role
    created_at: datetime

    def __repr__(self) -> str:
        # keep the hash out of logs and tracebacks
        return (
            f"Account(account_id={self.account_id!r}, username={self.username!r}, "
            f"email={self.email!r}, role={self.role.value!r})"
        )
