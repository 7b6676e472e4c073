"""FastAPI application wiring for the auth service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.errors import install_error_handlers
from .api.routes import router
from .config import Settings, get_settings
from .domain.contracts import CredentialStore
from .domain.service import AuthenticationService, RegistrationService
from .logging_config import configure_logging
from .middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from .repository import AccountRepository
from .security.gate import AccessGate
from .security.passwords import PasswordHasher
from .security.tokens import TokenIssuer

logger = logging.getLogger(__name__)

settings = get_settings()


def build_services(app: FastAPI, repository: CredentialStore, settings: Settings) -> None:
    """Construct the credential services and attach them to ``app.state``.

    Raises ``MissingSigningKey`` when no JWT secret is configured.
    """
    issuer = TokenIssuer(
        settings.jwt_secret,
        ttl_seconds=settings.jwt_ttl_seconds,
        issuer=settings.jwt_issuer,
    )
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.registration_service = RegistrationService(
        repository,
        hasher,
        issuer,
        allow_admin_self_registration=settings.allow_admin_self_registration,
    )
    app.state.authentication_service = AuthenticationService(repository, hasher, issuer)
    app.state.access_gate = AccessGate(issuer)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (Postgres pool, services) for the app lifecycle."""
    configure_logging(settings.log_level)
    pool = ConnectionPool(settings.database_url, open=False)
    repository = AccountRepository(pool)
    # fails fast on a missing signing secret, before any connection is made
    build_services(app, repository, settings)
    pool.open()
    app.state.pool = pool
    try:
        if settings.auto_migrate:
            repository.ensure_schema()
        logger.info("%s %s started (%s)", settings.app_name, settings.version, settings.environment)
        yield
    finally:
        pool.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)

install_error_handlers(app)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics", tags=["health"])
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(router)
