"""Value objects for the query engine domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Identifiers:
        - RowId: Type-safe row identifier within a table
        - SessionId: Type-safe session identifier
        - LockMode: SHARED / EXCLUSIVE lock modes

    Values:
        - SqlType, ColumnType: Declared column types
        - Ordering: Result of comparing two values
        - CURRENT_TIMESTAMP: Marker for statement-time defaults
        - coerce, compare, sort_compare, normalize: Type rules
"""

from minisql.domain.value_objects.identifiers import (
    INVALID_ROW_ID,
    LockMode,
    RowId,
    SessionId,
)
from minisql.domain.value_objects.values import (
    CURRENT_TIMESTAMP,
    TEXT_MAX_LENGTH,
    ColumnType,
    Ordering,
    OverflowPolicy,
    SqlType,
    coerce,
    compare,
    is_number,
    normalize,
    now,
    parse_datetime,
    sort_compare,
    to_int,
    to_number,
    to_text,
    values_equal,
)

__all__ = [
    # Identifiers
    "RowId",
    "SessionId",
    "INVALID_ROW_ID",
    "LockMode",
    # Values
    "SqlType",
    "ColumnType",
    "Ordering",
    "OverflowPolicy",
    "CURRENT_TIMESTAMP",
    "TEXT_MAX_LENGTH",
    "coerce",
    "compare",
    "sort_compare",
    "values_equal",
    "normalize",
    "is_number",
    "now",
    "parse_datetime",
    "to_text",
    "to_number",
    "to_int",
]
