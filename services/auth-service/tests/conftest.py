from __future__ import annotations

import threading
from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from auth_service.api import routes
from auth_service.api.errors import install_error_handlers
from auth_service.domain.account import Account, Role
from auth_service.domain.errors import ConflictError
from auth_service.domain.service import AuthenticationService, RegistrationService
from auth_service.security.gate import AccessGate
from auth_service.security.passwords import PasswordHasher
from auth_service.security.tokens import TokenIssuer

TEST_SECRET = "test-secret-with-enough-entropy-0123456789"
START_TIME = 1_700_000_000.0


class FakeCredentialStore:
    """In-memory store enforcing the same uniqueness rules as the users table."""

    def __init__(self) -> None:
        self._accounts: dict[int, Account] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self.insert_calls = 0
        self.lookup_calls = 0

    def find_by_email(self, email: str):
        with self._lock:
            self.lookup_calls += 1
            return next((a for a in self._accounts.values() if a.email == email), None)

    def find_by_username(self, username: str):
        with self._lock:
            self.lookup_calls += 1
            return next((a for a in self._accounts.values() if a.username == username), None)

    def insert(self, username: str, email: str, password_hash: str, role: Role) -> Account:
        with self._lock:
            self.insert_calls += 1
            for existing in self._accounts.values():
                if existing.email == email:
                    raise ConflictError("email")
                if existing.username == username:
                    raise ConflictError("username")
            account = Account(
                account_id=self._next_id,
                username=username,
                email=email,
                password_hash=password_hash,
                role=Role(role),
                created_at=datetime.now(timezone.utc),
            )
            self._accounts[account.account_id] = account
            self._next_id += 1
            return account

    @property
    def accounts(self) -> list[Account]:
        return list(self._accounts.values())


class RacingCredentialStore(FakeCredentialStore):
    """Store whose lookups miss, as if a concurrent insert committed in between."""

    def find_by_email(self, email: str):
        self.lookup_calls += 1
        return None

    def find_by_username(self, username: str):
        self.lookup_calls += 1
        return None


class FakeClock:
    def __init__(self, now: float = START_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def issuer(clock: FakeClock) -> TokenIssuer:
    return TokenIssuer(TEST_SECRET, ttl_seconds=3600, issuer="auth-service-test", clock=clock)


@pytest.fixture
def store() -> FakeCredentialStore:
    return FakeCredentialStore()


@pytest.fixture
def registration_service(store, hasher, issuer) -> RegistrationService:
    return RegistrationService(store, hasher, issuer)


@pytest.fixture
def authentication_service(store, hasher, issuer) -> AuthenticationService:
    return AuthenticationService(store, hasher, issuer)


def build_app(store, hasher, issuer, *, allow_admin: bool = False) -> FastAPI:
    app = FastAPI()
    app.include_router(routes.router)
    install_error_handlers(app)
    app.state.registration_service = RegistrationService(
        store, hasher, issuer, allow_admin_self_registration=allow_admin
    )
    app.state.authentication_service = AuthenticationService(store, hasher, issuer)
    app.state.access_gate = AccessGate(issuer)
    return app


@pytest.fixture
def api_client(store, hasher, issuer):
    """Provide a FastAPI test client with isolated state."""
    with TestClient(build_app(store, hasher, issuer)) as client:
        yield client


@pytest.fixture
def app_factory():
    return build_app


@pytest.fixture
def racing_store() -> RacingCredentialStore:
    return RacingCredentialStore()
