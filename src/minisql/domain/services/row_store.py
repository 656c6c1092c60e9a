"""Row store: the storage engine behind INSERT, UPDATE, DELETE and scans.

Every mutation is validated in full before anything is written, so a
statement either applies to all of its rows or leaves the table (and its
auto-increment counter) untouched.

INSERT builds each candidate row as follows:

    1. Listed columns take the supplied values, coerced to the column type.
       An explicit NULL into a NOT NULL column fails (NullNotAllowed).
    2. Unlisted columns take their default, else NULL when nullable, else
       the statement fails (MissingRequiredColumn).
    3. An AUTO_INCREMENT column left NULL (or 0) takes the counter's next
       value; an explicit value moves the counter past it.
    4. Primary keys must be unique against stored rows and earlier tuples
       of the same statement (DuplicateKey).
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Mapping, Sequence

from minisql.domain.entities import Table
from minisql.domain.errors import (
    ColumnCountMismatchError,
    DuplicateKeyError,
    EngineError,
    InvalidStatementError,
    MissingRequiredColumnError,
    NullNotAllowedError,
)
from minisql.domain.value_objects import OverflowPolicy, RowId, coerce, to_text
from minisql.ports.inbound.storage_engine import (
    InsertOutcome,
    RowExpression,
    RowPredicate,
    StorageStats,
)

logger = logging.getLogger(__name__)

_MISSING = object()


class RowStore:
    """Storage engine over in-memory tables."""

    def __init__(self, overflow: OverflowPolicy = "error") -> None:
        """Initialize the row store.

        Args:
            overflow: What to do with text longer than VARCHAR(n):
                'error' fails the statement, 'truncate' cuts the text.
        """
        self._overflow = overflow
        self._rows_inserted = 0
        self._rows_updated = 0
        self._rows_deleted = 0

    def insert(
        self,
        table: Table,
        columns: Sequence[str] | None,
        tuples: Sequence[Sequence[Any]],
    ) -> InsertOutcome:
        positions = self._resolve_columns(table, columns)
        auto_col = table.auto_increment_column
        auto_pos = table.column_index(auto_col.name) if auto_col else None
        counter_before = table.auto_increment.next_value

        pending: list[list[Any]] = []
        statement_keys: set[tuple[Any, ...]] = set()
        first_generated: int | None = None
        try:
            for number, tuple_values in enumerate(tuples, start=1):
                # VALUES () with no column list means "all defaults".
                row_positions = positions
                if columns is None and len(tuple_values) == 0:
                    row_positions = []
                if len(tuple_values) != len(row_positions):
                    raise ColumnCountMismatchError(
                        f"Column count doesn't match value count at row {number}"
                    )

                values = self._build_row(table, row_positions, tuple_values)
                if auto_pos is not None:
                    if values[auto_pos] in (None, 0):
                        values[auto_pos] = table.auto_increment.next()
                        if first_generated is None:
                            first_generated = values[auto_pos]
                    else:
                        table.auto_increment.observe(values[auto_pos])
                self._check_not_null(table, values)

                key = table.pk_key(values)
                if key is not None:
                    if key in statement_keys or table.lookup_key(key) is not None:
                        raise DuplicateKeyError(
                            f"Duplicate entry '{_key_text(table, values)}' for key 'PRIMARY'"
                        )
                    statement_keys.add(key)
                pending.append(values)
        except EngineError:
            table.auto_increment.next_value = counter_before
            raise

        entries = [(table.allocate_row_id(), values) for values in pending]
        table.put_rows(entries)
        self._rows_inserted += len(entries)
        logger.debug("Inserted %d row(s) into %s", len(entries), table.name)
        return InsertOutcome(
            row_ids=[row_id for row_id, _ in entries],
            last_insert_id=first_generated,
        )

    def update(
        self,
        table: Table,
        assignments: Mapping[str, RowExpression],
        predicate: RowPredicate | None = None,
    ) -> int:
        targets = [(table.column_index(name), expr) for name, expr in assignments.items()]

        changed: list[tuple[RowId, list[Any]]] = []
        for row_id, values in table.rows.items():
            if predicate is not None and not predicate(values):
                continue
            new_values = list(values)
            # Every expression sees the row as it was before the statement.
            for pos, expr in targets:
                col = table.columns[pos]
                value = coerce(
                    expr(values), col.column_type, overflow=self._overflow, column=col.name
                )
                if value is None and not col.nullable:
                    raise NullNotAllowedError(f"Column '{col.name}' cannot be null")
                new_values[pos] = value
            changed.append((row_id, new_values))

        if table.pk_positions and changed:
            self._check_updated_keys(table, changed)

        auto_col = table.auto_increment_column
        if auto_col is not None:
            auto_pos = table.column_index(auto_col.name)
            for _, new_values in changed:
                table.auto_increment.observe(new_values[auto_pos])

        table.put_rows(changed)
        self._rows_updated += len(changed)
        logger.debug("Updated %d row(s) in %s", len(changed), table.name)
        return len(changed)

    def delete(self, table: Table, predicate: RowPredicate | None = None) -> int:
        doomed = [
            row_id
            for row_id, values in table.rows.items()
            if predicate is None or predicate(values)
        ]
        count = table.remove_rows(doomed)
        self._rows_deleted += count
        logger.debug("Deleted %d row(s) from %s", count, table.name)
        return count

    def scan(self, table: Table) -> Iterator[tuple[RowId, list[Any]]]:
        # The row list is captured now; values are copied as they are pulled.
        return ((row_id, list(values)) for row_id, values in list(table.rows.items()))

    def stats(self) -> StorageStats:
        return StorageStats(
            rows_inserted=self._rows_inserted,
            rows_updated=self._rows_updated,
            rows_deleted=self._rows_deleted,
        )

    def _resolve_columns(self, table: Table, columns: Sequence[str] | None) -> list[int]:
        if columns is None:
            return list(range(len(table.columns)))
        positions = []
        for name in columns:
            pos = table.column_index(name)
            if pos in positions:
                raise InvalidStatementError(f"Column '{name}' specified twice")
            positions.append(pos)
        return positions

    def _build_row(
        self, table: Table, positions: list[int], tuple_values: Sequence[Any]
    ) -> list[Any]:
        values: list[Any] = [_MISSING] * len(table.columns)
        for pos, raw in zip(positions, tuple_values):
            col = table.columns[pos]
            value = coerce(raw, col.column_type, overflow=self._overflow, column=col.name)
            if value is None and not col.nullable and not col.auto_increment:
                raise NullNotAllowedError(f"Column '{col.name}' cannot be null")
            values[pos] = value

        for pos, col in enumerate(table.columns):
            if values[pos] is not _MISSING:
                continue
            if col.auto_increment:
                values[pos] = None
            elif col.has_default:
                values[pos] = coerce(col.resolve_default(), col.column_type, column=col.name)
            elif col.nullable:
                values[pos] = None
            else:
                raise MissingRequiredColumnError(
                    f"Field '{col.name}' doesn't have a default value"
                )
        return values

    def _check_not_null(self, table: Table, values: list[Any]) -> None:
        for col, value in zip(table.columns, values):
            if value is None and not col.nullable:
                raise NullNotAllowedError(f"Column '{col.name}' cannot be null")

    def _check_updated_keys(
        self, table: Table, changed: list[tuple[RowId, list[Any]]]
    ) -> None:
        changed_ids = {row_id for row_id, _ in changed}
        keys = {
            table.pk_key(values)
            for row_id, values in table.rows.items()
            if row_id not in changed_ids
        }
        for _, new_values in changed:
            key = table.pk_key(new_values)
            if key in keys:
                raise DuplicateKeyError(
                    f"Duplicate entry '{_key_text(table, new_values)}' for key 'PRIMARY'"
                )
            keys.add(key)


def _key_text(table: Table, values: list[Any]) -> str:
    return "-".join(to_text(values[pos]) or "NULL" for pos in table.pk_positions)
