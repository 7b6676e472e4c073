"""HTTP route definitions for the auth service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..domain.contracts import Identity, LoginInput, RegistrationInput
from ..domain.errors import ConflictError, InvalidCredentials, ValidationError
from ..domain.service import AccountSummary, AuthenticationService, RegistrationService
from ..metrics import record_outcome
from ..security.gate import require_identity
from .errors import (
    conflict_response,
    error_response,
    unexpected_error_response,
    validation_response,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class RegisterRequest(BaseModel):
    """Payload accepted by the registration endpoint."""

    username: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None


class LoginRequest(BaseModel):
    """Payload accepted by the login endpoint."""

    email: str | None = None
    password: str | None = None


class RegisteredUser(BaseModel):
    id: int
    username: str
    email: str
    role: str

    @classmethod
    def from_summary(cls, summary: AccountSummary) -> "RegisteredUser":
        return cls(
            id=summary.account_id,
            username=summary.username,
            email=summary.email,
            role=summary.role.value,
        )


class AuthenticatedUser(BaseModel):
    id: int
    email: str
    role: str

    @classmethod
    def from_summary(cls, summary: AccountSummary) -> "AuthenticatedUser":
        return cls(id=summary.account_id, email=summary.email, role=summary.role.value)


class RegisterResponse(BaseModel):
    message: str = "User registered successfully"
    user: RegisteredUser
    token: str


class LoginResponse(BaseModel):
    message: str = "Login successful"
    token: str
    user: AuthenticatedUser


class IdentityResponse(BaseModel):
    id: int
    role: str


class ProtectedResponse(BaseModel):
    message: str = "This is a protected route"
    user: IdentityResponse


def get_registration_service(request: Request) -> RegistrationService:
    """Resolve the `RegistrationService` stored on the FastAPI application state."""
    service: RegistrationService = request.app.state.registration_service
    return service


def get_authentication_service(request: Request) -> AuthenticationService:
    """Resolve the `AuthenticationService` stored on the FastAPI application state."""
    service: AuthenticationService = request.app.state.authentication_service
    return service


@router.post(
    "/api/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["auth"],
)
def register(
    payload: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse | JSONResponse:
    """Create an account and return it with a bearer token."""
    try:
        result = service.register(
            RegistrationInput(
                username=payload.username,
                email=payload.email,
                password=payload.password,
                role=payload.role,
            )
        )
    except ValidationError as exc:
        record_outcome("register", "invalid")
        return validation_response(exc.errors)
    except ConflictError as exc:
        record_outcome("register", "conflict")
        return conflict_response(exc)
    except Exception as exc:
        logger.exception("registration error")
        record_outcome("register", "error")
        return unexpected_error_response("Registration failed", exc)

    record_outcome("register", "success")
    return RegisterResponse(user=RegisteredUser.from_summary(result.account), token=result.token)


@router.post("/api/login", response_model=LoginResponse, tags=["auth"])
def login(
    payload: LoginRequest,
    service: AuthenticationService = Depends(get_authentication_service),
) -> LoginResponse | JSONResponse:
    """Authenticate with email and password."""
    try:
        result = service.authenticate(LoginInput(email=payload.email, password=payload.password))
    except ValidationError as exc:
        record_outcome("login", "invalid")
        return validation_response(exc.errors)
    except InvalidCredentials as exc:
        record_outcome("login", "rejected")
        return error_response(status.HTTP_401_UNAUTHORIZED, str(exc))
    except Exception as exc:
        logger.exception("error during login")
        record_outcome("login", "error")
        return unexpected_error_response("Authentication failed", exc)

    record_outcome("login", "success")
    return LoginResponse(token=result.token, user=AuthenticatedUser.from_summary(result.account))


@router.get("/protected", response_model=ProtectedResponse, tags=["auth"])
def protected(identity: Identity = Depends(require_identity)) -> ProtectedResponse:
    """Example protected resource echoing the caller's identity."""
    return ProtectedResponse(user=IdentityResponse(id=identity.account_id, role=identity.role.value))
