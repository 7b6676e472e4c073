"""Registration and authentication workflows."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .account import Account, Role
from .contracts import CredentialStore, LoginInput, RegistrationInput
from .errors import ConflictError, InvalidCredentials
from .validation import validate_login, validate_registration
from ..security.passwords import PasswordHasher
from ..security.tokens import TokenIssuer

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AccountSummary:
    """Public projection of an account; never carries credentials."""

    account_id: int
    username: str
    email: str
    role: Role

    @classmethod
    def from_domain(cls, account: Account) -> "AccountSummary":
        return cls(
            account_id=account.account_id,
            username=account.username,
            email=account.email,
            role=account.role,
        )


@dataclass(frozen=True, slots=True)
class RegistrationResult:
    account: AccountSummary
    token: str


@dataclass(frozen=True, slots=True)
class AuthenticationResult:
    account: AccountSummary
    token: str


class RegistrationService:
    """Create accounts and issue their first token."""

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        *,
        allow_admin_self_registration: bool = False,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._issuer = issuer
        self._allow_admin = allow_admin_self_registration

    def register(self, payload: RegistrationInput) -> RegistrationResult:
        """Register a new account.

        Validation runs first and touches no storage. Email is checked for
        uniqueness before username; the store's own constraint settles any
        race that slips past these lookups.

        Raises
        ------
        ValidationError
            The input is structurally invalid.
        ConflictError
            The email or username already belongs to an account.
        StoreUnavailable
            The credential store could not be reached.
        """
        new_account = validate_registration(payload, allow_admin=self._allow_admin)

        if self._store.find_by_email(new_account.email) is not None:
            raise ConflictError("email")
        if self._store.find_by_username(new_account.username) is not None:
            raise ConflictError("username")

        password_hash = self._hasher.hash(new_account.password)
        try:
            account = self._store.insert(
                new_account.username,
                new_account.email,
                password_hash,
                new_account.role,
            )
        except ConflictError as exc:
            logger.info("registration lost uniqueness race on %s", exc.field)
            raise

        token = self._issuer.issue(account.account_id, account.role)
        logger.info("account registered id=%s role=%s", account.account_id, account.role.value)
        return RegistrationResult(account=AccountSummary.from_domain(account), token=token)


class AuthenticationService:
    """Exchange email and password for a bearer token."""

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._issuer = issuer

    def authenticate(self, payload: LoginInput) -> AuthenticationResult:
        """Verify credentials and issue a token.

        An unknown email and a wrong password raise the same
        :class:`InvalidCredentials`, and both cost one bcrypt verification.
        """
        credentials = validate_login(payload)

        account = self._store.find_by_email(credentials.email)
        if account is None:
            self._hasher.verify_dummy(credentials.password)
            logger.info("login failed")
            raise InvalidCredentials()

        if not self._hasher.verify(credentials.password, account.password_hash):
            logger.info("login failed")
            raise InvalidCredentials()

        token = self._issuer.issue(account.account_id, account.role)
        logger.info("login succeeded id=%s", account.account_id)
        return AuthenticationResult(account=AccountSummary.from_domain(account), token=token)
