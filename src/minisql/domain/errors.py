"""Error kinds raised by the query engine.

Every failure a statement can produce is an ``EngineError`` subclass
carrying an ``ErrorKind``. Domain services raise them; the executor turns
them into error results so callers always receive a synchronous return.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar


class ErrorKind(Enum):
    """Kinds of statement failure."""

    DUPLICATE_DATABASE = "DuplicateDatabase"
    NO_SUCH_DATABASE = "NoSuchDatabase"
    NO_DATABASE_SELECTED = "NoDatabaseSelected"
    DUPLICATE_TABLE = "DuplicateTable"
    NO_SUCH_TABLE = "NoSuchTable"
    INVALID_SCHEMA = "InvalidSchema"
    MISSING_REQUIRED_COLUMN = "MissingRequiredColumn"
    NULL_NOT_ALLOWED = "NullNotAllowed"
    TYPE_MISMATCH = "TypeMismatch"
    VALUE_TOO_LONG = "ValueTooLong"
    DUPLICATE_KEY = "DuplicateKey"
    UNKNOWN_COLUMN = "UnknownColumn"
    UNKNOWN_FUNCTION = "UnknownFunction"
    COLUMN_COUNT_MISMATCH = "ColumnCountMismatch"
    INVALID_STATEMENT = "InvalidStatement"
    PARSE_ERROR = "ParseError"
    UNSUPPORTED = "Unsupported"
    LOCK_TIMEOUT = "LockTimeout"


class EngineError(Exception):
    """Base class for all engine errors."""

    kind: ClassVar[ErrorKind] = ErrorKind.INVALID_STATEMENT

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class DuplicateDatabaseError(EngineError):
    kind = ErrorKind.DUPLICATE_DATABASE


class NoSuchDatabaseError(EngineError):
    kind = ErrorKind.NO_SUCH_DATABASE


class NoDatabaseSelectedError(EngineError):
    kind = ErrorKind.NO_DATABASE_SELECTED


class DuplicateTableError(EngineError):
    kind = ErrorKind.DUPLICATE_TABLE


class NoSuchTableError(EngineError):
    kind = ErrorKind.NO_SUCH_TABLE


class InvalidSchemaError(EngineError):
    kind = ErrorKind.INVALID_SCHEMA


class MissingRequiredColumnError(EngineError):
    """A NOT NULL column without a default was omitted from an INSERT."""

    kind = ErrorKind.MISSING_REQUIRED_COLUMN


class NullNotAllowedError(EngineError):
    kind = ErrorKind.NULL_NOT_ALLOWED


class TypeMismatchError(EngineError):
    kind = ErrorKind.TYPE_MISMATCH


class ValueTooLongError(EngineError):
    """Text exceeds VARCHAR(n), or a number exceeds DECIMAL(p, s)."""

    kind = ErrorKind.VALUE_TOO_LONG


class DuplicateKeyError(EngineError):
    kind = ErrorKind.DUPLICATE_KEY


class UnknownColumnError(EngineError):
    kind = ErrorKind.UNKNOWN_COLUMN


class UnknownFunctionError(EngineError):
    kind = ErrorKind.UNKNOWN_FUNCTION


class ColumnCountMismatchError(EngineError):
    kind = ErrorKind.COLUMN_COUNT_MISMATCH


class InvalidStatementError(EngineError):
    kind = ErrorKind.INVALID_STATEMENT


class UnsupportedError(EngineError):
    kind = ErrorKind.UNSUPPORTED
