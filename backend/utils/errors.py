"""Location API errors and the store-error classifier.

Every error the API returns is one of the LocationApiError subclasses below,
rendered by main.py as {"error": message} with the class's status code.
classify_db_error() maps a SQLAlchemy failure raised inside (or around) a
transactional unit onto that taxonomy. Driver-specific codes are recognised for
SQL Server, PostgreSQL, MySQL and SQLite.
"""
import re

from fastapi import status
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

# SQL Server error numbers
MSSQL_UNIQUE_CONSTRAINT = 2627
MSSQL_UNIQUE_INDEX = 2601
MSSQL_FOREIGN_KEY = 547

# SQLSTATE (PostgreSQL and ODBC)
SQLSTATE_UNIQUE = "23505"
SQLSTATE_FOREIGN_KEY = "23503"
SQLSTATE_QUERY_CANCELED = "57014"
SQLSTATE_TIMEOUTS = ("HYT00", "HYT01")

# MySQL errno
MYSQL_DUPLICATE_ENTRY = 1062
MYSQL_FOREIGN_KEY = (1451, 1452)

UNIQUE_VIOLATION = "unique"
FOREIGN_KEY_VIOLATION = "foreign_key"
TIMEOUT = "timeout"
OTHER = "other"

# Operations, as passed to classify_db_error
LIST = "getLocations"
ADD = "addLocation"
UPDATE = "updateLocation"
DELETE = "deleteLocation"

_MSSQL_NUMBER_RE = re.compile(r"\((\d{3,5})\)")


class LocationApiError(Exception):
    """Base for errors returned to API callers."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class LocationValidationError(LocationApiError):
    """Payload or route parameter failed validation. Raised before any store access."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class LocationNotFoundError(LocationApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Location not found"


class LocationConflictError(LocationApiError):
    """Duplicate id on insert, or dependents still referencing a location on delete."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Location with this ID already exists"


class InvalidReferenceError(LocationApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid reference in the data provided"


class DatabaseTimeoutError(LocationApiError):
    """Transient; the caller may retry."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Database connection timeout. Try again later."


class InternalServerError(LocationApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


DEPENDENTS_EXIST_MESSAGE = (
    "Cannot delete this location due to existing related records. Please remove them first."
)


def _driver_codes(exc: SQLAlchemyError) -> set[str]:
    """Collect every error code the DBAPI exception exposes, as strings."""
    codes: set[str] = set()
    orig = getattr(exc, "orig", None)
    if orig is None:
        return codes
    for attr in ("sqlstate", "pgcode", "errno", "number"):
        value = getattr(orig, attr, None)
        if value is not None:
            codes.add(str(value))
    args = tuple(getattr(orig, "args", ()) or ())
    # pymssql / pymysql: args = (2627, "...")
    if args and isinstance(args[0], int):
        codes.add(str(args[0]))
    # pyodbc: args = ("23000", "[Microsoft]... (2627) (SQLExecDirectW)")
    if len(args) >= 2 and isinstance(args[0], str) and len(args[0]) == 5 and isinstance(args[1], str):
        codes.add(args[0])
        codes.update(_MSSQL_NUMBER_RE.findall(args[1]))
    return codes


def detect_violation(exc: BaseException) -> str:
    """Return UNIQUE_VIOLATION, FOREIGN_KEY_VIOLATION, TIMEOUT or OTHER for a store failure."""
    if isinstance(exc, PoolTimeoutError):
        return TIMEOUT
    if not isinstance(exc, SQLAlchemyError):
        return OTHER
    codes = _driver_codes(exc)
    text = str(getattr(exc, "orig", None) or exc).lower()

    if isinstance(exc, IntegrityError):
        if (
            codes & {str(MSSQL_UNIQUE_CONSTRAINT), str(MSSQL_UNIQUE_INDEX), SQLSTATE_UNIQUE, str(MYSQL_DUPLICATE_ENTRY)}
            or "unique constraint" in text
            or "duplicate key" in text
            or "duplicate entry" in text
        ):
            return UNIQUE_VIOLATION
        if (
            codes & {str(MSSQL_FOREIGN_KEY), SQLSTATE_FOREIGN_KEY, *(str(c) for c in MYSQL_FOREIGN_KEY)}
            or "foreign key" in text
        ):
            return FOREIGN_KEY_VIOLATION
        return OTHER

    if isinstance(exc, DBAPIError):
        if codes & {SQLSTATE_QUERY_CANCELED, *SQLSTATE_TIMEOUTS} or "timeout" in text or "timed out" in text:
            return TIMEOUT
    return OTHER


def classify_db_error(exc: BaseException, operation: str) -> LocationApiError:
    """Map a failure from the write/read path to the error returned to the caller.

    Foreign-key violations mean different things per operation: on delete the
    location still has dependents (409); on add/update the payload referenced
    something that does not exist (400).
    """
    kind = detect_violation(exc)
    if kind == UNIQUE_VIOLATION:
        return LocationConflictError()
    if kind == FOREIGN_KEY_VIOLATION:
        if operation == DELETE:
            return LocationConflictError(DEPENDENTS_EXIST_MESSAGE)
        return InvalidReferenceError()
    if kind == TIMEOUT:
        return DatabaseTimeoutError()
    return InternalServerError()
