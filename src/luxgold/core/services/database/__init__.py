from .db_manage import DbManageService
from .db_retry import DbErrorKind, RetryPolicy, classify_error, with_database_retry, with_retry
from .db_session import DbSessionService

__all__ = [
    "DbErrorKind",
    "DbManageService",
    "DbSessionService",
    "RetryPolicy",
    "classify_error",
    "with_database_retry",
    "with_retry",
]
