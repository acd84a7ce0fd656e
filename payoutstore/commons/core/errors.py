from enum import Enum
from typing import ClassVar, Generic, Optional, TypeVar

ErrorCodeT = TypeVar("ErrorCodeT", bound=str)


class PaymentError(Generic[ErrorCodeT], Exception):
    """
    Base of every error raised by payoutstore.

    :param error_code: stable code callers can branch on
    :param error_message: human readable description
    :param retryable: whether repeating the same operation may succeed
    """

    error_code: ErrorCodeT
    error_message: str
    retryable: bool

    def __init__(self, error_code: ErrorCodeT, error_message: str, retryable: bool):
        super().__init__(error_message)
        self.error_code = error_code
        self.error_message = error_message
        self.retryable = retryable


###########################################
# DatabaseError, raised by database clients, see
# payoutstore.commons.database.client.error_handlers.translate_db_error
#   - DBConnectionError
#   - DBOperationError
#     + DBOperationLockNotAvailableError
#   - DBIntegrityError
#     + DBIntegrityUniqueViolationError
#   - DBProgrammingError
#   - DBDataError
#   - DBInternalError
#   - DBNotSupportedError
###########################################
class DatabaseErrorCode(str, Enum):
    DB_CONNECTION_ERROR = "db_connection_error"
    DB_OPERATION_ERROR = "db_operation_error"
    DB_OPERATION_LOCK_NOT_AVAILABLE_ERROR = "db_operation_lock_not_available_error"
    DB_INTEGRITY_ERROR = "db_integrity_error"
    DB_INTEGRITY_UNIQUE_VIOLATION_ERROR = "db_integrity_unique_violation_error"
    DB_PROGRAMMING_ERROR = "db_programming_error"
    DB_DATA_ERROR = "db_data_error"
    DB_INTERNAL_ERROR = "db_internal_error"
    DB_NOT_SUPPORTED_ERROR = "db_not_supported_error"


database_error_message_maps = {
    DatabaseErrorCode.DB_CONNECTION_ERROR: "database connection failed",
    DatabaseErrorCode.DB_OPERATION_ERROR: "database operation failed",
    DatabaseErrorCode.DB_OPERATION_LOCK_NOT_AVAILABLE_ERROR: "lock is not available",
    DatabaseErrorCode.DB_INTEGRITY_ERROR: "integrity constraint violated",
    DatabaseErrorCode.DB_INTEGRITY_UNIQUE_VIOLATION_ERROR: "unique violation error",
    DatabaseErrorCode.DB_PROGRAMMING_ERROR: "invalid statement",
    DatabaseErrorCode.DB_DATA_ERROR: "invalid data",
    DatabaseErrorCode.DB_INTERNAL_ERROR: "database internal error",
    DatabaseErrorCode.DB_NOT_SUPPORTED_ERROR: "not supported by database",
}


class DatabaseError(PaymentError[DatabaseErrorCode]):
    """
    Subclasses pick their code and retryability through class attributes,
    the message defaults to the one registered for the code.
    """

    code: ClassVar[DatabaseErrorCode]
    is_retryable: ClassVar[bool] = False

    def __init__(self, error_message: Optional[str] = None):
        super().__init__(
            error_code=self.code,
            error_message=error_message or database_error_message_maps[self.code],
            retryable=self.is_retryable,
        )


class DBConnectionError(DatabaseError):
    """Failed to reach the database, e.g. refused or dropped connection."""

    code = DatabaseErrorCode.DB_CONNECTION_ERROR


class DBOperationError(DatabaseError):
    """Database failed to run an operation for reasons outside the statement, e.g. timeouts."""

    code = DatabaseErrorCode.DB_OPERATION_ERROR
    is_retryable = True


class DBOperationLockNotAvailableError(DBOperationError):
    code = DatabaseErrorCode.DB_OPERATION_LOCK_NOT_AVAILABLE_ERROR


class DBIntegrityError(DatabaseError):
    """A constraint refused the change, e.g. a payout method of an unknown contributor."""

    code = DatabaseErrorCode.DB_INTEGRITY_ERROR


class DBIntegrityUniqueViolationError(DBIntegrityError):
    """A unique key already exists, e.g. the same payout method registered twice."""

    code = DatabaseErrorCode.DB_INTEGRITY_UNIQUE_VIOLATION_ERROR


class DBProgrammingError(DatabaseError):
    """Statement is wrong, e.g. unknown table or syntax error."""

    code = DatabaseErrorCode.DB_PROGRAMMING_ERROR


class DBDataError(DatabaseError):
    code = DatabaseErrorCode.DB_DATA_ERROR


class DBInternalError(DatabaseError):
    code = DatabaseErrorCode.DB_INTERNAL_ERROR


class DBNotSupportedError(DatabaseError):
    code = DatabaseErrorCode.DB_NOT_SUPPORTED_ERROR
