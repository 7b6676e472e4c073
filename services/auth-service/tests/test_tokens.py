from __future__ import annotations

import jwt
import pytest

from auth_service.domain.account import Role
from auth_service.domain.errors import InvalidToken, MissingSigningKey, Unauthorized
from auth_service.security.gate import AccessGate, extract_bearer_token
from auth_service.security.tokens import TokenIssuer

SECRET = "unit-test-secret-with-enough-entropy-0123"


def test_token_valid_within_the_hour(issuer, clock):
    token = issuer.issue(7, Role.admin)

    clock.advance(59 * 60)
    identity = issuer.verify(token)

    assert identity.account_id == 7
    assert identity.role is Role.admin


def test_token_rejected_after_the_hour(issuer, clock):
    token = issuer.issue(7, Role.user)

    clock.advance(61 * 60)

    with pytest.raises(InvalidToken):
        issuer.verify(token)


def test_token_claims(issuer, clock):
    claims = jwt.decode(issuer.issue(3, Role.user), options={"verify_signature": False})

    assert claims["sub"] == "3"
    assert claims["role"] == "user"
    assert claims["exp"] - claims["iat"] == 3600
    assert claims["iat"] == int(clock.now)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_tokens_rejected(issuer, token):
    with pytest.raises(InvalidToken):
        issuer.verify(token)


def test_tampered_signature_rejected(issuer):
    header, payload, signature = issuer.issue(1, Role.user).split(".")
    tampered = ".".join([header, payload, signature[::-1]])

    with pytest.raises(InvalidToken):
        issuer.verify(tampered)


def test_token_with_unknown_role_rejected(clock):
    issuer = TokenIssuer(SECRET, issuer="auth-service-test", clock=clock)
    token = jwt.encode(
        {"iss": "auth-service-test", "sub": "1", "role": "root", "iat": 0, "exp": clock.now + 60},
        SECRET,
        algorithm="HS256",
    )

    with pytest.raises(InvalidToken):
        issuer.verify(token)


def test_missing_secret_is_fatal():
    with pytest.raises(MissingSigningKey):
        TokenIssuer("")


def test_gate_returns_identity(issuer):
    gate = AccessGate(issuer)

    identity = gate.check(f"Bearer {issuer.issue(5, Role.user)}")

    assert identity.account_id == 5


@pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer ", "Basic abc", "Bearer nope"])
def test_gate_rejects_unusable_headers(issuer, header):
    with pytest.raises(Unauthorized):
        AccessGate(issuer).check(header)


def test_gate_hides_expiry_reason(issuer, clock):
    token = issuer.issue(5, Role.user)
    clock.advance(2 * 3600)

    with pytest.raises(Unauthorized) as excinfo:
        AccessGate(issuer).check(f"Bearer {token}")

    assert str(excinfo.value) == "Unauthorized"


def test_extract_bearer_token_is_case_insensitive():
    assert extract_bearer_token("bearer abc") == "abc"
    assert extract_bearer_token("BEARER  abc ") == "abc"
