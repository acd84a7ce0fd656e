import inspect
from functools import wraps
from typing import Optional

from sqlalchemy import exc as sa_exc

from payoutstore.commons.core.errors import (
    DBConnectionError,
    DBOperationError,
    DBIntegrityError,
    DBProgrammingError,
    DBDataError,
    DBNotSupportedError,
    DBInternalError,
    DBIntegrityUniqueViolationError,
    DBOperationLockNotAvailableError,
)

# SQLSTATE codes, see https://www.postgresql.org/docs/current/errcodes-appendix.html
UNIQUE_VIOLATION = "23505"
LOCK_NOT_AVAILABLE = "55P03"

# sqlite does not report SQLSTATE, only messages
_SQLITE_UNIQUE_VIOLATION_MESSAGES = ("UNIQUE constraint failed",)
_SQLITE_LOCK_NOT_AVAILABLE_MESSAGES = ("database is locked",)


def _error_code(e: sa_exc.DBAPIError) -> Optional[str]:
    # psycopg exposes pgcode, asyncpg exposes sqlstate
    return getattr(e.orig, "pgcode", None) or getattr(e.orig, "sqlstate", None)


def _error_message(e: sa_exc.DBAPIError) -> str:
    return str(e.orig)


def _is_error(e: sa_exc.DBAPIError, code: str, sqlite_messages) -> bool:
    if _error_code(e) == code:
        return True
    message = _error_message(e)
    return any(m in message for m in sqlite_messages)


def translate_db_error(func):
    """Translate DB Errors into processor layer errors.

    This function should be used to decorate payoutstore.commons.database.client.sa_engine.SAConnection methods,
    to translate sqlalchemy wrapped DBAPI errors into general db errors.

    sqlalchemy follows DB API 2.0 specification(https://www.python.org/dev/peps/pep-0249/), which defines db
    errors into the following structure,
        StandardError
            - Warning
            - Error
                - InterfaceError
                - DatabaseError
                    - DataError
                    - OperationalError
                    - IntegrityError
                    - InternalError
                    - ProgrammingError
                    - NotSupportedError

    The error mapping hides the underlying driver (asyncpg, aiosqlite) from the layers above, so swapping drivers
    keeps the same processor layer db errors.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        if not inspect.iscoroutinefunction(func):
            raise Exception(
                "translate_db_error decorator can only be used in async functions."
            )
        try:
            return await func(*args, **kwargs)
        except sa_exc.InterfaceError as e:
            raise DBConnectionError(_error_message(e)) from e
        except sa_exc.OperationalError as e:
            if _is_error(e, LOCK_NOT_AVAILABLE, _SQLITE_LOCK_NOT_AVAILABLE_MESSAGES):
                raise DBOperationLockNotAvailableError from e
            raise DBOperationError(_error_message(e)) from e
        except sa_exc.IntegrityError as e:
            if _is_error(e, UNIQUE_VIOLATION, _SQLITE_UNIQUE_VIOLATION_MESSAGES):
                raise DBIntegrityUniqueViolationError from e
            raise DBIntegrityError(_error_message(e)) from e
        except sa_exc.ProgrammingError as e:
            raise DBProgrammingError(_error_message(e)) from e
        except sa_exc.DataError as e:
            raise DBDataError(_error_message(e)) from e
        except sa_exc.InternalError as e:
            raise DBInternalError(_error_message(e)) from e
        except sa_exc.NotSupportedError as e:
            raise DBNotSupportedError(_error_message(e)) from e

    return wrapper
