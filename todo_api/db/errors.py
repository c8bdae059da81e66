"""Translate database errors into API errors.

Integrity errors are classified by driver error code, not by message text.
"""

from collections.abc import Generator
from contextlib import contextmanager
from enum import StrEnum

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from todo_api.exceptions import ConflictError, DatabaseError, ValidationError

# PostgreSQL SQLSTATE class 23 (integrity constraint violation)
PG_UNIQUE_VIOLATION = "23505"
PG_FOREIGN_KEY_VIOLATION = "23503"
PG_NOT_NULL_VIOLATION = "23502"

# sqlite3 extended result codes, exposed as sqlite3.Error.sqlite_errorname
SQLITE_UNIQUE = {"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"}
SQLITE_FOREIGN_KEY = {"SQLITE_CONSTRAINT_FOREIGNKEY"}
SQLITE_NOT_NULL = {"SQLITE_CONSTRAINT_NOTNULL"}


class ConstraintViolation(StrEnum):
    UNIQUE = "unique"
    FOREIGN_KEY = "foreign_key"
    NOT_NULL = "not_null"
    OTHER = "other"


def classify_integrity_error(exc: IntegrityError) -> ConstraintViolation:
    """Map a wrapped DBAPI integrity error to the violated constraint kind.

    psycopg2 exposes the SQLSTATE as ``pgcode``, psycopg 3 as ``sqlstate`` and
    sqlite3 the extended result code name as ``sqlite_errorname``.
    """
    orig = exc.orig
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate == PG_UNIQUE_VIOLATION:
        return ConstraintViolation.UNIQUE
    if sqlstate == PG_FOREIGN_KEY_VIOLATION:
        return ConstraintViolation.FOREIGN_KEY
    if sqlstate == PG_NOT_NULL_VIOLATION:
        return ConstraintViolation.NOT_NULL

    errorname = getattr(orig, "sqlite_errorname", None)
    if errorname in SQLITE_UNIQUE:
        return ConstraintViolation.UNIQUE
    if errorname in SQLITE_FOREIGN_KEY:
        return ConstraintViolation.FOREIGN_KEY
    if errorname in SQLITE_NOT_NULL:
        return ConstraintViolation.NOT_NULL
    return ConstraintViolation.OTHER


@contextmanager
def translate_db_errors(
    session: Session,
    *,
    unique_message: str = "Resource already exists",
    foreign_key_message: str = "Referenced resource does not exist",
) -> Generator[None, None, None]:
    """Roll back and re-raise SQLAlchemy errors as API errors.

    - unique violation -> ConflictError (409)
    - foreign key violation -> ValidationError (400)
    - anything else -> DatabaseError (500)
    """
    try:
        yield
    except IntegrityError as e:
        session.rollback()
        violation = classify_integrity_error(e)
        details = str(e.orig)
        if violation is ConstraintViolation.UNIQUE:
            raise ConflictError(unique_message, details=details) from e
        if violation is ConstraintViolation.FOREIGN_KEY:
            raise ValidationError(foreign_key_message, details=details) from e
        raise DatabaseError("Integrity constraint violated", details=details) from e
    except SQLAlchemyError as e:
        session.rollback()
        raise DatabaseError(details=str(e)) from e
