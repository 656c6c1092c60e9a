"""Table, column and database entities.

A ``Table`` owns its rows in an insertion-ordered arena keyed by ``RowId``,
a primary-key index over those rows, and its auto-increment counter. Rows
are plain value lists aligned to the table's column order.

Names of databases, tables and columns match case-insensitively and keep
the spelling they were created with.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from minisql.domain.errors import UnknownColumnError
from minisql.domain.value_objects import (
    CURRENT_TIMESTAMP,
    ColumnType,
    RowId,
    normalize,
    now,
    to_text,
)


@dataclass
class Column:
    """A column definition. Immutable once its table exists."""

    name: str
    column_type: ColumnType
    nullable: bool = True
    default: Any = None
    has_default: bool = False
    primary_key: bool = False
    auto_increment: bool = False

    def resolve_default(self) -> Any:
        """The default value for a new row (``NOW()`` evaluates here)."""
        if self.default is CURRENT_TIMESTAMP:
            return now()
        return self.default


@dataclass
class AutoIncrementCounter:
    """Per-table id generator. Moves forward only."""

    next_value: int = 1

    def next(self) -> int:
        value = self.next_value
        self.next_value += 1
        return value

    def observe(self, value: int) -> None:
        """Account for an explicitly supplied id."""
        if value >= self.next_value:
            self.next_value = value + 1


@dataclass
class Table:
    """A table: ordered columns plus ordered rows."""

    name: str
    columns: list[Column]
    primary_key: tuple[str, ...] = ()
    auto_increment: AutoIncrementCounter = field(default_factory=AutoIncrementCounter)
    rows: dict[RowId, list[Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._positions = {col.name.lower(): i for i, col in enumerate(self.columns)}
        self._pk_positions = tuple(self.column_index(name) for name in self.primary_key)
        self._pk_index: dict[tuple[Any, ...], RowId] = {}
        self._next_row_id = 1
        for row_id, values in self.rows.items():
            self._index_row(row_id, values)
            self._next_row_id = max(self._next_row_id, row_id + 1)

    @property
    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]

    @property
    def auto_increment_column(self) -> Column | None:
        for col in self.columns:
            if col.auto_increment:
                return col
        return None

    @property
    def pk_positions(self) -> tuple[int, ...]:
        return self._pk_positions

    def has_column(self, name: str) -> bool:
        return name.lower() in self._positions

    def column_index(self, name: str) -> int:
        """Position of a column.

        Raises:
            UnknownColumnError: If the table has no such column.
        """
        try:
            return self._positions[name.lower()]
        except KeyError:
            raise UnknownColumnError(
                f"Unknown column '{name}' in '{self.name}'"
            ) from None

    def column(self, name: str) -> Column:
        return self.columns[self.column_index(name)]

    def pk_key(self, values: list[Any]) -> tuple[Any, ...] | None:
        """Normalised primary-key tuple of a row, or None without a key."""
        if not self._pk_positions:
            return None
        return tuple(normalize(values[i]) for i in self._pk_positions)

    def lookup_key(self, key: tuple[Any, ...]) -> RowId | None:
        return self._pk_index.get(key)

    def allocate_row_id(self) -> RowId:
        row_id = RowId(self._next_row_id)
        self._next_row_id += 1
        return row_id

    def put_rows(self, new_rows: Iterable[tuple[RowId, list[Any]]]) -> None:
        """Add or replace rows; keys must already be validated unique.

        All replaced keys are dropped before any new key is indexed, so an
        update may hand one row's old key to another row.
        """
        new_rows = list(new_rows)
        for row_id, _ in new_rows:
            old = self.rows.get(row_id)
            if old is not None:
                self._unindex_row(old)
        for row_id, values in new_rows:
            self.rows[row_id] = values
            self._index_row(row_id, values)

    def remove_rows(self, row_ids: Iterable[RowId]) -> int:
        count = 0
        for row_id in row_ids:
            values = self.rows.pop(row_id, None)
            if values is not None:
                self._unindex_row(values)
                count += 1
        return count

    def _index_row(self, row_id: RowId, values: list[Any]) -> None:
        key = self.pk_key(values)
        if key is not None:
            self._pk_index[key] = row_id

    def _unindex_row(self, values: list[Any]) -> None:
        key = self.pk_key(values)
        if key is not None:
            self._pk_index.pop(key, None)

    def describe(self) -> list[list[Any]]:
        """Rows for DESCRIBE: Field, Type, Null, Key, Default, Extra."""
        result = []
        for col in self.columns:
            if col.has_default and col.default is CURRENT_TIMESTAMP:
                default = "CURRENT_TIMESTAMP"
            elif col.has_default and col.default is not None:
                default = to_text(col.default)
            else:
                default = None
            result.append(
                [
                    col.name,
                    str(col.column_type),
                    "YES" if col.nullable else "NO",
                    "PRI" if col.primary_key else "",
                    default,
                    "auto_increment" if col.auto_increment else "",
                ]
            )
        return result


@dataclass
class Database:
    """A named namespace of tables."""

    name: str
    tables: dict[str, Table] = field(default_factory=dict)

    def get_table(self, name: str) -> Table | None:
        return self.tables.get(name.lower())

    def add_table(self, table: Table) -> None:
        self.tables[table.name.lower()] = table

    def remove_table(self, name: str) -> Table | None:
        return self.tables.pop(name.lower(), None)

    def table_names(self) -> list[str]:
        return [table.name for table in self.tables.values()]
