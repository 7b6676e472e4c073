"""bcrypt password hashing."""

from __future__ import annotations

import bcrypt

BCRYPT_MAX_BYTES = 72
MIN_ROUNDS = 4
MAX_ROUNDS = 31


class PasswordHasher:
    """Salted, adaptive-cost one-way hashing with a fixed work factor.

    Parameters
    ----------
    rounds:
        bcrypt cost factor (log2 of the iteration count). Each increment
        doubles hashing time; 12 takes roughly 100-250 ms on current hardware.
    """

    def __init__(self, rounds: int = 12) -> None:
        if not MIN_ROUNDS <= rounds <= MAX_ROUNDS:
            raise ValueError(f"bcrypt rounds must be between {MIN_ROUNDS} and {MAX_ROUNDS}")
        self._rounds = rounds
        # verified against when an account does not exist so timing stays uniform
        self._dummy_hash = self.hash("dummy-password-for-timing")

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, plaintext: str) -> str:
        """Return a ``$2b$`` hash string embedding a fresh random salt."""
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_encode(plaintext), salt).decode("utf-8")

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Return ``True`` when ``plaintext`` matches ``hashed``.

        Comparison is constant-time; a malformed stored hash yields ``False``.
        """
        try:
            return bcrypt.checkpw(_encode(plaintext), hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def verify_dummy(self, plaintext: str) -> None:
        """Spend the same work as a real verification and discard the result."""
        self.verify(plaintext, self._dummy_hash)


def _encode(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]
