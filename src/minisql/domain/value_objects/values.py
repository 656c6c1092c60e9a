"""Scalar values and the column type system.

Values are plain Python objects tagged by their type:

    - Integer: ``int``
    - Decimal: ``decimal.Decimal``
    - Text: ``str``
    - Datetime: ``datetime.datetime``
    - Null: ``None``

Column types decide which values a column accepts (``coerce``). Comparison
follows MySQL's default collation: text compares case-insensitively, and
Null is incomparable with everything, Null included.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Literal

from minisql.domain.errors import InvalidSchemaError, TypeMismatchError, ValueTooLongError

TEXT_MAX_LENGTH = 65535
DEFAULT_DECIMAL_PRECISION = 10
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

OverflowPolicy = Literal["error", "truncate"]


class SqlType(Enum):
    """Base column types."""

    INT = "int"
    DECIMAL = "decimal"
    VARCHAR = "varchar"
    TEXT = "text"
    DATETIME = "datetime"


# SQL type names accepted in column definitions, by base type.
_TYPE_NAMES: dict[str, SqlType] = {
    "TINYINT": SqlType.INT,
    "SMALLINT": SqlType.INT,
    "MEDIUMINT": SqlType.INT,
    "INT": SqlType.INT,
    "INTEGER": SqlType.INT,
    "BIGINT": SqlType.INT,
    "UTINYINT": SqlType.INT,
    "USMALLINT": SqlType.INT,
    "UMEDIUMINT": SqlType.INT,
    "UINT": SqlType.INT,
    "UBIGINT": SqlType.INT,
    "DECIMAL": SqlType.DECIMAL,
    "NUMERIC": SqlType.DECIMAL,
    "FLOAT": SqlType.DECIMAL,
    "DOUBLE": SqlType.DECIMAL,
    "VARCHAR": SqlType.VARCHAR,
    "CHAR": SqlType.VARCHAR,
    "NVARCHAR": SqlType.VARCHAR,
    "NCHAR": SqlType.VARCHAR,
    "TEXT": SqlType.TEXT,
    "TINYTEXT": SqlType.TEXT,
    "MEDIUMTEXT": SqlType.TEXT,
    "LONGTEXT": SqlType.TEXT,
    "DATETIME": SqlType.DATETIME,
    "TIMESTAMP": SqlType.DATETIME,
    "DATE": SqlType.DATETIME,
}


@dataclass(frozen=True)
class ColumnType:
    """A declared column type, e.g. ``VARCHAR(50)`` or ``DECIMAL(10,2)``."""

    base: SqlType
    length: int | None = None
    precision: int | None = None
    scale: int | None = None

    @classmethod
    def from_sql(cls, name: str, params: list[int] | None = None) -> ColumnType:
        """Build a column type from a SQL type name and its parameters.

        Raises:
            InvalidSchemaError: For unknown type names or bad parameters.
        """
        params = params or []
        base = _TYPE_NAMES.get(name.upper())
        if base is None:
            raise InvalidSchemaError(f"Unsupported column type '{name}'")

        if base is SqlType.VARCHAR:
            if not params:
                if name.upper() in ("CHAR", "NCHAR"):
                    return cls(base, length=1)
                raise InvalidSchemaError(f"{name.upper()} requires a length")
            if params[0] < 0:
                raise InvalidSchemaError(f"Invalid length {params[0]} for {name.upper()}")
            return cls(base, length=params[0])

        if base is SqlType.DECIMAL:
            precision = params[0] if params else DEFAULT_DECIMAL_PRECISION
            scale = params[1] if len(params) > 1 else 0
            if precision < 1 or scale < 0 or scale > precision:
                raise InvalidSchemaError(f"Invalid DECIMAL({precision},{scale})")
            return cls(base, precision=precision, scale=scale)

        return cls(base)

    def __str__(self) -> str:
        if self.base is SqlType.VARCHAR:
            return f"varchar({self.length})"
        if self.base is SqlType.DECIMAL:
            return f"decimal({self.precision},{self.scale})"
        return self.base.value


class _CurrentTimestamp:
    """Marker for a value computed at statement time (``NOW()`` defaults)."""

    def __repr__(self) -> str:
        return "CURRENT_TIMESTAMP"


CURRENT_TIMESTAMP = _CurrentTimestamp()


class Ordering(Enum):
    """Outcome of comparing two values."""

    LT = -1
    EQ = 0
    GT = 1
    INCOMPARABLE = None


def now() -> datetime:
    """Current time at DATETIME precision."""
    return datetime.now().replace(microsecond=0)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, Decimal)) and not isinstance(value, bool)


def coerce(
    raw: Any,
    column_type: ColumnType,
    *,
    overflow: OverflowPolicy = "error",
    column: str = "",
) -> Any:
    """Convert a raw value to the representation of ``column_type``.

    Null passes through unchanged; nullability is checked by the caller.

    Raises:
        TypeMismatchError: If the value does not belong to the type.
        ValueTooLongError: If text exceeds the declared length (policy
            ``error``) or a number exceeds the declared precision.
    """
    if raw is None:
        return None
    if raw is CURRENT_TIMESTAMP:
        raw = now()

    base = column_type.base
    if base is SqlType.INT:
        return _coerce_int(raw, column)
    if base is SqlType.DECIMAL:
        return _coerce_decimal(raw, column_type, column)
    if base in (SqlType.VARCHAR, SqlType.TEXT):
        return _coerce_text(raw, column_type, overflow, column)
    return _coerce_datetime(raw, column)


def _coerce_int(raw: Any, column: str) -> int:
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, Decimal) and raw == raw.to_integral_value():
        return int(raw)
    raise TypeMismatchError(f"Incorrect integer value: {_describe(raw)} for column '{column}'")


def _coerce_decimal(raw: Any, column_type: ColumnType, column: str) -> Decimal:
    if isinstance(raw, bool):
        value = Decimal(int(raw))
    elif isinstance(raw, int):
        value = Decimal(raw)
    elif isinstance(raw, float):
        value = Decimal(str(raw))
    elif isinstance(raw, Decimal):
        value = raw
    else:
        raise TypeMismatchError(
            f"Incorrect decimal value: {_describe(raw)} for column '{column}'"
        )

    precision = column_type.precision or DEFAULT_DECIMAL_PRECISION
    scale = column_type.scale or 0
    limit = Decimal(10) ** (precision - scale)
    try:
        value = value.quantize(Decimal(1).scaleb(-scale), rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueTooLongError(f"Out of range value for column '{column}'") from e
    if abs(value) >= limit:
        raise ValueTooLongError(f"Out of range value for column '{column}'")
    return value


def _coerce_text(
    raw: Any, column_type: ColumnType, overflow: OverflowPolicy, column: str
) -> str:
    if not isinstance(raw, str):
        raise TypeMismatchError(f"Incorrect string value: {_describe(raw)} for column '{column}'")

    limit = column_type.length if column_type.base is SqlType.VARCHAR else TEXT_MAX_LENGTH
    if limit is not None and len(raw) > limit:
        if overflow == "truncate":
            return raw[:limit]
        raise ValueTooLongError(f"Data too long for column '{column}'")
    return raw


def _coerce_datetime(raw: Any, column: str) -> datetime:
    if isinstance(raw, datetime):
        return raw.replace(microsecond=0, tzinfo=None)
    if isinstance(raw, str):
        parsed = parse_datetime(raw)
        if parsed is not None:
            return parsed
    raise TypeMismatchError(f"Incorrect datetime value: {_describe(raw)} for column '{column}'")


def parse_datetime(text: str) -> datetime | None:
    """Parse ISO-8601-like text (``2017-04-21`` or ``2017-04-21 10:30:00``)."""
    text = text.strip()
    try:
        if len(text) == 10:
            day = date.fromisoformat(text)
            return datetime(day.year, day.month, day.day)
        return datetime.fromisoformat(text.replace(" ", "T", 1)).replace(
            microsecond=0, tzinfo=None
        )
    except ValueError:
        return None


def to_text(value: Any) -> str | None:
    """Textual form of a value, as used by CONCAT and result rendering."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, datetime):
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def to_number(value: Any) -> int | Decimal | None:
    """Numeric form of a value; numeric text is converted.

    Raises:
        TypeMismatchError: If the value has no numeric form.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if is_number(value):
        return value
    if isinstance(value, str):
        number = _parse_number(value)
        if number is not None:
            return number
    raise TypeMismatchError(f"Expected a number, got {_describe(value)}")


def to_int(value: Any) -> int | None:
    """Integer form of a value; decimals round half-up like MySQL."""
    number = to_number(value)
    if number is None or isinstance(number, int):
        return number
    return int(number.to_integral_value(rounding=ROUND_HALF_UP))


def _parse_number(text: str) -> int | Decimal | None:
    text = text.strip()
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    if number == number.to_integral_value() and "." not in text and "e" not in text.lower():
        return int(number)
    return number


def compare(a: Any, b: Any) -> Ordering:
    """Compare two values.

    Text compares case-insensitively by code point. Numbers compare with
    numeric text, datetimes with ISO text. Null, and any pair without a
    common representation, is INCOMPARABLE.
    """
    if a is None or b is None:
        return Ordering.INCOMPARABLE

    pair = _comparable_pair(a, b)
    if pair is None:
        return Ordering.INCOMPARABLE
    x, y = pair
    if x < y:
        return Ordering.LT
    if x > y:
        return Ordering.GT
    return Ordering.EQ


def _comparable_pair(a: Any, b: Any) -> tuple[Any, Any] | None:
    if isinstance(a, bool):
        a = int(a)
    if isinstance(b, bool):
        b = int(b)

    if isinstance(a, str) and isinstance(b, str):
        return a.casefold(), b.casefold()
    if is_number(a) and is_number(b):
        return a, b
    if isinstance(a, datetime) and isinstance(b, datetime):
        return a, b

    if is_number(a) and isinstance(b, str):
        other = _parse_number(b)
        return None if other is None else (a, other)
    if isinstance(a, str) and is_number(b):
        other = _parse_number(a)
        return None if other is None else (other, b)
    if isinstance(a, datetime) and isinstance(b, str):
        other = parse_datetime(b)
        return None if other is None else (a, other)
    if isinstance(a, str) and isinstance(b, datetime):
        other = parse_datetime(a)
        return None if other is None else (other, b)
    return None


def values_equal(a: Any, b: Any) -> bool | None:
    """Three-valued equality: None when either side is Null."""
    ordering = compare(a, b)
    if ordering is Ordering.INCOMPARABLE:
        return None if a is None or b is None else False
    return ordering is Ordering.EQ


def normalize(value: Any) -> Any:
    """Hashable form under which equal values collide.

    Used for DISTINCT and the primary-key index. Nulls normalise to None,
    so two Nulls count as duplicates here.
    """
    if isinstance(value, str):
        return ("t", value.casefold())
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else value.normalize()
    return value


_TYPE_RANK = {int: 0, Decimal: 0, datetime: 1, str: 2}


def sort_compare(a: Any, b: Any, nulls_low: bool = True) -> int:
    """Total order used by ORDER BY.

    Null is the lowest value when ``nulls_low`` is set, otherwise the
    highest. Incomparable non-null pairs order by type, then by text.
    """
    if a is None and b is None:
        return 0
    if a is None:
        return -1 if nulls_low else 1
    if b is None:
        return 1 if nulls_low else -1

    ordering = compare(a, b)
    if ordering is not Ordering.INCOMPARABLE:
        return ordering.value

    rank_a = _TYPE_RANK.get(type(a), 3)
    rank_b = _TYPE_RANK.get(type(b), 3)
    if rank_a != rank_b:
        return -1 if rank_a < rank_b else 1
    text_a, text_b = to_text(a) or "", to_text(b) or ""
    return (text_a > text_b) - (text_a < text_b)


def _describe(value: Any) -> str:
    if isinstance(value, str):
        return f"'{value}'"
    return to_text(value) or "NULL"
