"""Unit tests for the row store."""

from __future__ import annotations

import pytest

from minisql.domain.entities import Column, Table
from minisql.domain.errors import (
    ColumnCountMismatchError,
    DuplicateKeyError,
    MissingRequiredColumnError,
    NullNotAllowedError,
    TypeMismatchError,
    UnknownColumnError,
    ValueTooLongError,
)
from minisql.domain.services import InMemoryCatalog, RowStore
from minisql.domain.value_objects import ColumnType, SqlType


@pytest.fixture
def cats() -> Table:
    """A cats table with an auto-increment key."""
    catalog = InMemoryCatalog()
    catalog.create_database("shop")
    catalog.create_table(
        "shop",
        "cats",
        [
            Column(
                name="cat_id",
                column_type=ColumnType(SqlType.INT),
                primary_key=True,
                auto_increment=True,
            ),
            Column(name="name", column_type=ColumnType(SqlType.VARCHAR, length=10), nullable=False),
            Column(
                name="breed",
                column_type=ColumnType(SqlType.VARCHAR, length=20),
                default="unknown",
                has_default=True,
            ),
            Column(name="age", column_type=ColumnType(SqlType.INT)),
        ],
    )
    return catalog.get_table("shop", "cats")


@pytest.fixture
def store() -> RowStore:
    return RowStore()


def _rows(store: RowStore, table: Table) -> list[list]:
    return [values for _, values in store.scan(table)]


@pytest.mark.unit
class TestInsert:
    """Tests for INSERT semantics."""

    def test_defaults_and_auto_increment(self, store: RowStore, cats: Table) -> None:
        outcome = store.insert(cats, ["name"], [["Ringo"], ["Cindy"]])

        assert outcome.count == 2
        assert outcome.last_insert_id == 1
        assert _rows(store, cats) == [[1, "Ringo", "unknown", None], [2, "Cindy", "unknown", None]]

    def test_all_columns_without_list(self, store: RowStore, cats: Table) -> None:
        store.insert(cats, None, [[None, "Ringo", "Tabby", 4]])

        assert _rows(store, cats) == [[1, "Ringo", "Tabby", 4]]

    def test_explicit_id_moves_counter(self, store: RowStore, cats: Table) -> None:
        store.insert(cats, ["cat_id", "name"], [[10, "Ringo"]])
        outcome = store.insert(cats, ["name"], [["Cindy"]])

        assert outcome.last_insert_id == 11

    def test_ids_not_reused_after_delete(self, store: RowStore, cats: Table) -> None:
        store.insert(cats, ["name"], [["a"], ["b"], ["c"]])
        store.delete(cats, lambda row: row[0] == 3)

        outcome = store.insert(cats, ["name"], [["d"]])

        assert outcome.last_insert_id == 4

    def test_missing_required_column(self, store: RowStore, cats: Table) -> None:
        with pytest.raises(MissingRequiredColumnError):
            store.insert(cats, ["age"], [[3]])

    def test_explicit_null_into_not_null(self, store: RowStore, cats: Table) -> None:
        with pytest.raises(NullNotAllowedError):
            store.insert(cats, ["name"], [[None]])

    def test_type_mismatch(self, store: RowStore, cats: Table) -> None:
        with pytest.raises(TypeMismatchError):
            store.insert(cats, ["name", "age"], [["Ringo", "old"]])

    def test_value_too_long(self, store: RowStore, cats: Table) -> None:
        with pytest.raises(ValueTooLongError):
            store.insert(cats, ["name"], [["Bartholomew"]])

    def test_truncate_policy(self, cats: Table) -> None:
        store = RowStore(overflow="truncate")
        store.insert(cats, ["name"], [["Bartholomew"]])

        assert _rows(store, cats)[0][1] == "Bartholome"

    def test_unknown_column(self, store: RowStore, cats: Table) -> None:
        with pytest.raises(UnknownColumnError):
            store.insert(cats, ["colour"], [["grey"]])

    def test_column_count_mismatch(self, store: RowStore, cats: Table) -> None:
        with pytest.raises(ColumnCountMismatchError):
            store.insert(cats, ["name", "age"], [["Ringo"]])

    def test_duplicate_key_within_statement(self, store: RowStore, cats: Table) -> None:
        with pytest.raises(DuplicateKeyError):
            store.insert(cats, ["cat_id", "name"], [[5, "a"], [5, "b"]])
        assert _rows(store, cats) == []

    def test_failed_insert_is_atomic(self, store: RowStore, cats: Table) -> None:
        """A failing tuple leaves no rows and no consumed ids behind."""
        with pytest.raises(NullNotAllowedError):
            store.insert(cats, ["name"], [["a"], ["b"], [None]])

        assert _rows(store, cats) == []
        outcome = store.insert(cats, ["name"], [["a"]])
        assert outcome.last_insert_id == 1


@pytest.mark.unit
class TestUpdateDelete:
    """Tests for UPDATE and DELETE semantics."""

    def test_update_matching_rows(self, store: RowStore, cats: Table) -> None:
        store.insert(cats, ["name", "age"], [["a", 1], ["b", 2], ["c", 3]])

        count = store.update(cats, {"age": lambda row: row[3] + 10}, lambda row: row[3] >= 2)

        assert count == 2
        assert [row[3] for row in _rows(store, cats)] == [1, 12, 13]

    def test_update_sees_old_values(self, store: RowStore, cats: Table) -> None:
        store.insert(cats, ["name", "breed"], [["a", "x"]])

        store.update(cats, {"name": lambda row: row[2], "breed": lambda row: row[1]})

        assert _rows(store, cats)[0][1:3] == ["x", "a"]

    def test_update_not_null(self, store: RowStore, cats: Table) -> None:
        store.insert(cats, ["name"], [["a"]])
        with pytest.raises(NullNotAllowedError):
            store.update(cats, {"name": lambda row: None})
        assert _rows(store, cats)[0][1] == "a"

    def test_update_duplicate_key_is_atomic(self, store: RowStore, cats: Table) -> None:
        store.insert(cats, ["name"], [["a"], ["b"]])
        with pytest.raises(DuplicateKeyError):
            store.update(cats, {"cat_id": lambda row: 1})
        assert [row[0] for row in _rows(store, cats)] == [1, 2]

    def test_update_shifting_keys_keeps_index(self, store: RowStore, cats: Table) -> None:
        """Rows may take over each other's keys within one update."""
        store.insert(cats, ["name"], [["a"], ["b"]])

        assert store.update(cats, {"cat_id": lambda row: row[0] + 1}) == 2
        assert [row[0] for row in _rows(store, cats)] == [2, 3]

        with pytest.raises(DuplicateKeyError):
            store.insert(cats, ["cat_id", "name"], [[2, "dup"]])
        with pytest.raises(DuplicateKeyError):
            store.insert(cats, ["cat_id", "name"], [[3, "dup"]])

        store.insert(cats, ["cat_id", "name"], [[1, "c"]])
        assert sorted(row[0] for row in _rows(store, cats)) == [1, 2, 3]

    def test_update_shifting_keys_down(self, store: RowStore, cats: Table) -> None:
        store.insert(cats, ["cat_id", "name"], [[2, "a"], [3, "b"]])

        store.update(cats, {"cat_id": lambda row: row[0] - 1})

        assert cats.lookup_key((1,)) is not None
        assert cats.lookup_key((2,)) is not None
        assert cats.lookup_key((3,)) is None

    def test_index_matches_rows_after_mixed_mutations(
        self, store: RowStore, cats: Table
    ) -> None:
        store.insert(cats, ["name"], [["a"], ["b"], ["c"], ["d"]])
        store.update(cats, {"cat_id": lambda row: row[0] + 10})
        store.delete(cats, lambda row: row[0] == 12)
        store.update(cats, {"cat_id": lambda row: row[0] - 10}, lambda row: row[0] > 12)
        store.insert(cats, ["name"], [["e"]])

        ids = [row[0] for row in _rows(store, cats)]
        assert len(cats._pk_index) == len(cats.rows) == len(set(ids))
        for cat_id in ids:
            assert cats.lookup_key((cat_id,)) is not None

    def test_delete_all(self, store: RowStore, cats: Table) -> None:
        store.insert(cats, ["name"], [["a"], ["b"]])

        assert store.delete(cats) == 2
        assert _rows(store, cats) == []

        store.insert(cats, ["name"], [["c"]])
        assert _rows(store, cats)[0][0] == 3

    def test_stats(self, store: RowStore, cats: Table) -> None:
        store.insert(cats, ["name"], [["a"], ["b"]])
        store.update(cats, {"age": lambda row: 1})
        store.delete(cats, lambda row: row[0] == 1)

        stats = store.stats()
        assert (stats.rows_inserted, stats.rows_updated, stats.rows_deleted) == (2, 2, 1)
