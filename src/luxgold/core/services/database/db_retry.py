"""Retry wrapper for database operations that fail transiently.

Errors are classified once, at the driver boundary, into a closed set of
kinds; the retry loop only ever looks at the kind.
"""

from __future__ import annotations

import asyncio
import enum
import errno
import inspect
import random
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from loguru import logger
from sqlalchemy import exc as sa_exc
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from src.luxgold.runtime.config.config_data import RetryConfig
from src.luxgold.runtime.context import get_config

if TYPE_CHECKING:
    from src.luxgold.core.services.database.db_session import DbSessionService

T = TypeVar("T")


class DbErrorKind(enum.Enum):
    """Classification of a database failure."""

    PREPARED_STATEMENT = "prepared_statement"
    CONNECTION = "connection"
    TRANSACTION_CONFLICT = "transaction_conflict"
    FATAL = "fatal"

    @property
    def retryable(self) -> bool:
        return self is not DbErrorKind.FATAL


@dataclass(frozen=True)
class RetryPolicy:
    """Error codes and message fragments that mark an error as transient."""

    prepared_statement_codes: frozenset[str]
    prepared_statement_messages: tuple[str, ...]
    connection_codes: frozenset[str]
    connection_messages: tuple[str, ...]
    transaction_codes: frozenset[str]
    transaction_messages: tuple[str, ...]
    base_delay_ms: int = 200
    max_delay_ms: int = 5000
    jitter_ms: int = 100
    log_message_length: int = 200

    @classmethod
    def from_config(cls, config: RetryConfig) -> RetryPolicy:
        def _codes(values: Iterable[str]) -> frozenset[str]:
            return frozenset(v.upper() for v in values)

        def _messages(values: Iterable[str]) -> tuple[str, ...]:
            return tuple(v.lower() for v in values)

        return cls(
            prepared_statement_codes=_codes(config.prepared_statement_codes),
            prepared_statement_messages=_messages(config.prepared_statement_messages),
            connection_codes=_codes(config.connection_codes),
            connection_messages=_messages(config.connection_messages),
            transaction_codes=_codes(config.transaction_codes),
            transaction_messages=_messages(config.transaction_messages),
            base_delay_ms=config.base_delay_ms,
            max_delay_ms=config.max_delay_ms,
            jitter_ms=config.jitter_ms,
            log_message_length=config.log_message_length,
        )


def get_retry_policy() -> RetryPolicy:
    """Build the retry policy from the current configuration."""
    return RetryPolicy.from_config(get_config().retry)


def _error_chain(error: BaseException) -> list[BaseException]:
    """Return ``error`` followed by the driver errors it wraps."""
    chain: list[BaseException] = []
    current: BaseException | None = error
    while current is not None and current not in chain:
        chain.append(current)
        orig = getattr(current, "orig", None)
        if isinstance(orig, BaseException):
            current = orig
        else:
            current = current.__cause__
    return chain


def extract_error_codes(error: BaseException) -> set[str]:
    """Collect every error code the exception (or what it wraps) carries."""
    codes: set[str] = set()
    for item in _error_chain(error):
        # SQLAlchemy's own ``code`` is a documentation link id, not a driver code
        if not isinstance(item, sa_exc.SQLAlchemyError):
            code = getattr(item, "code", None)
            if isinstance(code, str) and code:
                codes.add(code.upper())
        for attr in ("pgcode", "sqlstate"):
            value = getattr(item, attr, None)
            if isinstance(value, str) and value:
                codes.add(value.upper())
        if isinstance(item, OSError) and item.errno in errno.errorcode:
            codes.add(errno.errorcode[item.errno])
    return codes


def extract_error_message(error: BaseException) -> str:
    return " | ".join(str(item) for item in _error_chain(error) if str(item))


def extract_driver_message(error: BaseException) -> str:
    """Messages of the driver errors only.

    SQLAlchemy renders the statement and its bound parameters into its own
    message, so matching against it would let row data decide the error kind.
    """
    return " | ".join(
        str(item)
        for item in _error_chain(error)
        if not isinstance(item, sa_exc.SQLAlchemyError) and str(item)
    )


def classify_error(error: BaseException, policy: RetryPolicy | None = None) -> DbErrorKind:
    """Map an exception raised by a database operation to a :class:`DbErrorKind`."""
    if policy is None:
        policy = get_retry_policy()

    if isinstance(error, sa_exc.DisconnectionError | sa_exc.TimeoutError):
        return DbErrorKind.CONNECTION
    if isinstance(error, sa_exc.DBAPIError) and error.connection_invalidated:
        return DbErrorKind.CONNECTION
    # constraint violations never succeed on a retry
    if isinstance(error, sa_exc.IntegrityError):
        return DbErrorKind.FATAL

    codes = extract_error_codes(error)
    message = extract_driver_message(error).lower()

    if codes & policy.prepared_statement_codes or any(
        fragment in message for fragment in policy.prepared_statement_messages
    ):
        return DbErrorKind.PREPARED_STATEMENT
    if codes & policy.transaction_codes or any(
        fragment in message for fragment in policy.transaction_messages
    ):
        return DbErrorKind.TRANSACTION_CONFLICT
    if codes & policy.connection_codes or any(
        fragment in message for fragment in policy.connection_messages
    ):
        return DbErrorKind.CONNECTION
    if isinstance(error, ConnectionError | TimeoutError):
        return DbErrorKind.CONNECTION

    return DbErrorKind.FATAL


def compute_backoff_delay(
    attempt: int,
    base_delay_ms: int,
    max_delay_ms: int = 5000,
    jitter_ms: int = 100,
) -> float:
    """Delay in milliseconds to wait after failed ``attempt`` (1-indexed)."""
    exponential = base_delay_ms * 2 ** (attempt - 1)
    jitter = random.uniform(0, jitter_ms) if jitter_ms > 0 else 0.0
    return min(exponential + jitter, max_delay_ms)


def _truncate(message: str, length: int) -> str:
    return message if len(message) <= length else f"{message[:length]}..."


async def with_retry(
    operation: Callable[[], Awaitable[T] | T],
    max_retries: int | None = None,
    base_delay_ms: int | None = None,
    policy: RetryPolicy | None = None,
) -> T:
    """Run ``operation`` and retry it while it fails with transient errors.

    Args:
        operation: Zero-argument callable, sync or async
        max_retries: Total number of attempts (defaults to ``retry.max_retries``)
        base_delay_ms: Base of the exponential backoff (defaults to ``retry.base_delay_ms``)
        policy: Error classification and backoff bounds (defaults to the configured policy)

    Returns:
        The result of the first successful attempt

    Raises:
        The first non-transient error immediately, or the last transient
        error once all attempts are used
    """
    retry_config = get_config().retry
    if policy is None:
        policy = RetryPolicy.from_config(retry_config)
    if max_retries is None:
        max_retries = retry_config.max_retries
    if base_delay_ms is None:
        base_delay_ms = policy.base_delay_ms
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    attempt = 1
    while True:
        try:
            result = operation()
            if inspect.isawaitable(result):
                result = await result
            if attempt > 1:
                logger.info("Database operation succeeded on attempt {}/{}", attempt, max_retries)
            return result
        except Exception as error:
            kind = classify_error(error, policy)
            codes = ",".join(sorted(extract_error_codes(error))) or "-"
            message = _truncate(str(error), policy.log_message_length)

            if not kind.retryable:
                logger.bind(attempt=attempt, error_kind=kind.value, error_code=codes).error(
                    "Non-retryable database error on attempt {}/{}: {}",
                    attempt,
                    max_retries,
                    message,
                )
                raise

            if attempt >= max_retries:
                logger.bind(attempt=attempt, error_kind=kind.value, error_code=codes).error(
                    "All {} database attempts failed; last error ({}): {}",
                    max_retries,
                    kind.value,
                    message,
                )
                raise

            delay_ms = compute_backoff_delay(
                attempt, base_delay_ms, policy.max_delay_ms, policy.jitter_ms
            )
            logger.bind(attempt=attempt, error_kind=kind.value, error_code=codes).warning(
                "Transient database error on attempt {}/{} ({}, code {}): {}; retrying in {:.0f}ms",
                attempt,
                max_retries,
                kind.value,
                codes,
                message,
                delay_ms,
            )
            await asyncio.sleep(delay_ms / 1000)
            attempt += 1


async def with_database_retry(
    db_service: DbSessionService,
    operation: Callable[[Session], T],
    max_retries: int | None = None,
    base_delay_ms: int | None = None,
) -> T:
    """Run ``operation(session)`` in its own transaction, retrying transient failures.

    Each attempt gets a fresh session from ``db_service.session_scope()`` and
    runs on the thread pool so the event loop keeps serving other requests.
    """

    def _attempt() -> T:
        with db_service.session_scope() as session:
            return operation(session)

    return await with_retry(
        lambda: run_in_threadpool(_attempt),
        max_retries=max_retries,
        base_delay_ms=base_delay_ms,
    )
