"""Bearer token gate in front of protected operations."""

from __future__ import annotations

import logging

from fastapi import Header, Request

from ..domain.contracts import Identity
from ..domain.errors import InvalidToken, Unauthorized
from ..metrics import record_outcome
from .tokens import TokenIssuer

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


class AccessGate:
    """Verify a presented bearer token and expose the identity it carries.

    Expired, forged and malformed tokens are all reported as the same
    :class:`Unauthorized`. Role checks belong to the protected operation.
    """

    def __init__(self, issuer: TokenIssuer) -> None:
        self._issuer = issuer

    def check(self, authorization: str | None) -> Identity:
        token = extract_bearer_token(authorization)
        if token is None:
            raise Unauthorized()
        try:
            return self._issuer.verify(token)
        except InvalidToken as exc:
            logger.info("rejected bearer token: %s", exc)
            raise Unauthorized() from exc


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` value."""
    if not authorization:
        return None
    if authorization[: len(BEARER_PREFIX)].lower() != BEARER_PREFIX:
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def require_identity(
    request: Request,
    authorization: str | None = Header(default=None),
) -> Identity:
    """FastAPI dependency resolving the caller's identity.

    Raises :class:`Unauthorized`, which the application's error handlers
    render as a 401 response.
    """
    gate: AccessGate = request.app.state.access_gate
    try:
        identity = gate.check(authorization)
    except Unauthorized:
        record_outcome("gate", "unauthorized")
        raise
    record_outcome("gate", "success")
    return identity
