"""Error taxonomy and the JSON error envelope shared by every endpoint."""
from __future__ import annotations

from typing import Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

_HTTP_ERROR_KINDS = {
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


class FurnishopError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StorageConnectionError(FurnishopError):
    """Raised when the document store cannot be reached at startup."""

    error = "connection_error"


class MigrationError(FurnishopError):
    """Raised when a schema migration step fails."""

    error = "migration_error"

    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"Migration '{step}' failed: {message}")
        self.step = step


class DecodeError(FurnishopError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "decode_error"


class MalformedIdentifierError(FurnishopError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "malformed_identifier"


class NotFoundError(FurnishopError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "not_found"


class StoreError(FurnishopError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "store_error"


def error_envelope(status_code: int, message: str, error: str) -> Dict[str, str]:
    return {"status": str(status_code), "message": message, "error": error}


def error_response(exc: FurnishopError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.status_code, exc.message, exc.error),
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for item in exc.errors():
        location = ".".join(str(part) for part in item.get("loc", ()) if part != "body")
        message = item.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Malformed request body"


def register_error_handlers(app: FastAPI) -> None:
    """Render every handled failure through the shared envelope."""

    @app.exception_handler(FurnishopError)
    async def _handle_furnishop_error(request: Request, exc: FurnishopError) -> JSONResponse:
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(DecodeError(_describe_validation_error(exc)))

    # Unknown paths, unsupported methods and static file misses.
    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        kind = _HTTP_ERROR_KINDS.get(exc.status_code, "http_error")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(exc.status_code, str(exc.detail), kind),
            headers=exc.headers,
        )


__all__ = [
    "DecodeError",
    "FurnishopError",
    "MalformedIdentifierError",
    "MigrationError",
    "NotFoundError",
    "StorageConnectionError",
    "StoreError",
    "error_envelope",
    "error_response",
    "register_error_handlers",
]
