"""Application errors and their JSON rendering."""

from typing import Any

from fastapi import Request
from loguru import logger
from starlette.responses import JSONResponse

from src.luxgold.runtime.context import get_config

GENERIC_SERVER_ERROR = "Internal server error"


class ApiError(Exception):
    """An error that maps directly onto an HTTP response."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details

    @classmethod
    def not_found(cls, entity: str, key: str) -> "ApiError":
        return cls(f"{entity} {key!r} not found", status_code=404, code="not_found")

    @classmethod
    def conflict(cls, message: str) -> "ApiError":
        return cls(message, status_code=409, code="conflict")


def request_id_of(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def error_body(
    message: str, code: str, request_id: str | None, details: Any = None
) -> dict[str, Any]:
    body: dict[str, Any] = {"error": message, "code": code}
    if details is not None:
        body["details"] = details
    body["request_id"] = request_id
    return body


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    level = "WARNING" if exc.status_code < 500 else "ERROR"
    logger.bind(status_code=exc.status_code, error_code=exc.code).log(
        level, "API error: {}", exc.message
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.code, request_id_of(request), exc.details),
    )


def unhandled_error_response(exc: Exception, request_id: str | None) -> JSONResponse:
    """Render an unexpected exception as a 500.

    Outside production the exception text is returned to help debugging.
    """
    if get_config().app.environment == "production":
        message = GENERIC_SERVER_ERROR
    else:
        message = str(exc) or GENERIC_SERVER_ERROR
    return JSONResponse(
        status_code=500,
        content=error_body(message, "internal_error", request_id),
    )
