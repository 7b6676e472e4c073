"""Utilities for issuing and validating application JWTs."""

from __future__ import annotations

import time
from typing import Any, Callable

import jwt

from ..domain.account import Role
from ..domain.contracts import Identity
from ..domain.errors import InvalidToken, MissingSigningKey

ALGORITHM = "HS256"


class TokenIssuer:
    """Issue and verify HS256 bearer tokens carrying account id and role.

    Parameters
    ----------
    secret:
        Process-wide signing key. An empty value raises
        :class:`~auth_service.domain.errors.MissingSigningKey`.
    ttl_seconds:
        Lifetime of every issued token.
    issuer:
        Value of the ``iss`` claim; tokens from other issuers are rejected.
    clock:
        Returns the current UNIX time in seconds; used for both ``iat``/``exp``
        and the expiry check.
    """

    def __init__(
        self,
        secret: str,
        *,
        ttl_seconds: int = 3600,
        issuer: str = "auth-service",
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise MissingSigningKey("JWT_SECRET must be set before the service can start")
        if ttl_seconds <= 0:
            raise ValueError("token ttl must be positive")
        self._secret = secret
        self._ttl_seconds = ttl_seconds
        self._issuer = issuer
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def issue(self, account_id: int, role: Role) -> str:
        """Create a signed JWT for the account, valid for ``ttl_seconds``."""
        now = int(self._clock())
        payload: dict[str, Any] = {
            "iss": self._issuer,
            "sub": str(account_id),
            "role": Role(role).value,
            "iat": now,
            "exp": now + self._ttl_seconds,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> Identity:
        """Decode ``token`` and return the identity it carries.

        Raises
        ------
        InvalidToken
            When the token is malformed, its signature or issuer do not match,
            a required claim is missing, or it has expired.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                issuer=self._issuer,
                # expiry is checked below against the injected clock
                options={"require": ["exp", "iat", "sub"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.PyJWTError as exc:
            raise InvalidToken(str(exc)) from exc

        expires_at = claims["exp"]
        if not isinstance(expires_at, (int, float)) or expires_at <= self._clock():
            raise InvalidToken("token has expired")

        try:
            return Identity(account_id=int(claims["sub"]), role=Role(claims.get("role")))
        except (TypeError, ValueError) as exc:
            raise InvalidToken("token carries malformed claims") from exc
