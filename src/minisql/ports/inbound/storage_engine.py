"""Storage engine port for row data.

This inbound port defines the contract for mutating and scanning the rows
of a table while enforcing its constraints.

Key responsibilities:
- Insert value tuples with defaults, auto-increment and type coercion
- Update and delete rows selected by a predicate
- Enforce NOT NULL and primary-key uniqueness
- Apply every statement atomically: a failing statement changes nothing

Predicates and assignment expressions are plain callables over a row's
value list, so the storage engine is independent of the expression language.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Protocol, Sequence

from minisql.domain.entities import Table
from minisql.domain.value_objects import RowId

RowPredicate = Callable[[list[Any]], bool]
"""Returns True for rows the statement applies to."""

RowExpression = Callable[[list[Any]], Any]
"""Computes a new column value from the current row values."""


@dataclass
class InsertOutcome:
    """Result of a successful INSERT."""

    row_ids: list[RowId] = field(default_factory=list)
    last_insert_id: int | None = None

    @property
    def count(self) -> int:
        return len(self.row_ids)


@dataclass
class StorageStats:
    """Statistics for storage monitoring."""

    rows_inserted: int
    rows_updated: int
    rows_deleted: int


class StorageEngine(Protocol):
    """Protocol for the row store."""

    @abstractmethod
    def insert(
        self,
        table: Table,
        columns: Sequence[str] | None,
        tuples: Sequence[Sequence[Any]],
    ) -> InsertOutcome:
        """Insert one row per value tuple.

        Args:
            table: Target table.
            columns: Column names the tuple values are assigned to, in
                order, or None for all columns in table order.
            tuples: Raw values, one sequence per row.

        Raises:
            UnknownColumnError, ColumnCountMismatchError,
            MissingRequiredColumnError, NullNotAllowedError,
            TypeMismatchError, ValueTooLongError, DuplicateKeyError
        """
        ...

    @abstractmethod
    def update(
        self,
        table: Table,
        assignments: Mapping[str, RowExpression],
        predicate: RowPredicate | None = None,
    ) -> int:
        """Assign new values to the listed columns of every matching row.

        Returns:
            Number of matched rows.
        """
        ...

    @abstractmethod
    def delete(self, table: Table, predicate: RowPredicate | None = None) -> int:
        """Remove every matching row (all rows without a predicate).

        Returns:
            Number of deleted rows.
        """
        ...

    @abstractmethod
    def scan(self, table: Table) -> Iterator[tuple[RowId, list[Any]]]:
        """Iterate rows in insertion order as of the call."""
        ...

    @abstractmethod
    def stats(self) -> StorageStats:
        ...
