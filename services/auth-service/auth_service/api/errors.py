"""Translation of domain errors into JSON error responses."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..config import get_settings
from ..domain.errors import ConflictError, FieldError, Unauthorized


def validation_response(errors: list[FieldError]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"errors": [error.as_dict() for error in errors]},
    )


def conflict_response(exc: ConflictError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"error": exc.message})


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def unexpected_error_response(message: str, exc: Exception) -> JSONResponse:
    """Build a 500 body, adding diagnostic detail outside production."""
    content: dict[str, Any] = {"error": message}
    if not get_settings().is_production:
        content["details"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def _field_from_location(location: tuple[Any, ...]) -> str:
    # json decode errors carry a character offset instead of a field name
    names = [part for part in location if isinstance(part, str) and part != "body"]
    return names[-1] if names else "body"


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        FieldError(_field_from_location(tuple(error.get("loc", ()))), error.get("msg", "Invalid value"))
        for error in exc.errors()
    ]
    return validation_response(errors)


async def _unauthorized_handler(request: Request, exc: Unauthorized) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


def install_error_handlers(app: FastAPI) -> None:
    """Register handlers so malformed bodies and gate failures use our error shapes."""
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Unauthorized, _unauthorized_handler)
