"""Translate storage-level failures into AppError kinds.

Lock timeouts, serialization failures and deadlocks are contention: the
caller may retry. Anything else from the driver, or a refused connection,
means storage is not usable for this request.
"""

import logging

from sqlalchemy.exc import DBAPIError

from src.rs_common.errors import AppError, ConflictError, PersistenceUnavailableError

logger = logging.getLogger(__name__)

# SQLSTATE codes
_LOCK_NOT_AVAILABLE = "55P03"
_SERIALIZATION_FAILURE = "40001"
_DEADLOCK_DETECTED = "40P01"
_CONTENTION_STATES = frozenset({_LOCK_NOT_AVAILABLE, _SERIALIZATION_FAILURE, _DEADLOCK_DETECTED})

# Exceptions a repository call may raise when storage itself misbehaves
STORAGE_ERRORS = (DBAPIError, OSError)


def sqlstate_of(exc: BaseException) -> str | None:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def translate_db_error(exc: BaseException) -> AppError:
    state = sqlstate_of(exc)
    if state in _CONTENTION_STATES:
        logger.warning("Database contention (sqlstate=%s): %s", state, exc)
        return ConflictError()
    logger.warning("Database unavailable (sqlstate=%s): %s", state, exc)
    return PersistenceUnavailableError()
