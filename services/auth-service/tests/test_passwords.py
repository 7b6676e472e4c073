from __future__ import annotations

import pytest

from auth_service.security.passwords import PasswordHasher


@pytest.mark.parametrize("password", ["Str0ng!Pass", "pässwörd-ünïcode", "x" * 72])
def test_hash_verifies_original(hasher, password):
    assert hasher.verify(password, hasher.hash(password))


@pytest.mark.parametrize("other", ["str0ng!Pass", "Str0ng!Pas", "Str0ng!Pass ", ""])
def test_hash_rejects_other_passwords(hasher, other):
    assert not hasher.verify(other, hasher.hash("Str0ng!Pass"))


def test_hash_is_salted(hasher):
    first = hasher.hash("Str0ng!Pass")
    second = hasher.hash("Str0ng!Pass")

    assert first != second
    assert "Str0ng!Pass" not in first


def test_hash_embeds_cost_factor():
    hasher = PasswordHasher(rounds=5)

    assert hasher.hash("Str0ng!Pass").startswith("$2b$05$")


def test_malformed_hash_does_not_verify(hasher):
    assert hasher.verify("Str0ng!Pass", "not-a-bcrypt-hash") is False


@pytest.mark.parametrize("rounds", [3, 32])
def test_rounds_out_of_range(rounds):
    with pytest.raises(ValueError):
        PasswordHasher(rounds=rounds)
