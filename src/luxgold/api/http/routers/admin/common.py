"""Helpers shared by the admin routers."""

from collections.abc import Callable
from typing import TypeVar

from fastapi import Request
from loguru import logger
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.luxgold.api.http.deps import get_database_service
from src.luxgold.api.http.errors import ApiError
from src.luxgold.core.services.database.db_retry import with_database_retry

T = TypeVar("T")


async def run_admin_write(
    request: Request, operation: Callable[[Session], T], conflict_message: str
) -> T:
    """Run a write in its own transaction and map data errors to client errors.

    Raises:
        ApiError: 409 on unique constraint violations, 400 on invalid input
    """
    try:
        return await with_database_retry(get_database_service(request), operation)
    except IntegrityError as e:
        logger.bind(error_type=type(e).__name__).info("Admin write conflict: {}", e.orig)
        raise ApiError.conflict(conflict_message) from e
    except ValidationError as e:
        raise ApiError(
            "Invalid data",
            status_code=400,
            code="invalid",
            details=e.errors(include_url=False, include_context=False, include_input=False),
        ) from e
    except ValueError as e:
        raise ApiError(str(e), status_code=400, code="invalid") from e


async def run_admin_read(request: Request, operation: Callable[[Session], T]) -> T:
    return await with_database_retry(get_database_service(request), operation)
