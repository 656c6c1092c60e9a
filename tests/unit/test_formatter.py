"""Unit tests for result rendering."""

from __future__ import annotations

from decimal import Decimal

import pytest

from minisql.application import ExecutionResult, ResultFormatter, Row
from minisql.domain.errors import NoSuchTableError
from minisql.infrastructure.config import FormatterConfig


@pytest.fixture
def formatter() -> ResultFormatter:
    return ResultFormatter()


def _row_set(columns: list[str], *rows: list) -> ExecutionResult:
    return ExecutionResult(
        rows=[Row(columns=columns, values=list(values)) for values in rows],
        columns=columns,
    )


@pytest.mark.unit
class TestResultFormatter:
    """Tests for ResultFormatter."""

    def test_grid_has_headers_and_values(self, formatter: ResultFormatter) -> None:
        text = formatter.format(["title", "pages"], [["Just Kids", 304]])

        lines = text.splitlines()
        assert "title" in lines[1] and "pages" in lines[1]
        assert "Just Kids" in text
        assert "304" in text

    def test_null_distinct_from_empty_text(self, formatter: ResultFormatter) -> None:
        text = formatter.format(["a", "b"], [[None, ""]])

        assert "NULL" in text

    def test_custom_null_text(self) -> None:
        formatter = ResultFormatter(FormatterConfig(null_text="<null>"))

        assert "<null>" in formatter.format(["a"], [[None]])

    def test_decimal_keeps_scale(self, formatter: ResultFormatter) -> None:
        assert "10.00" in formatter.format(["price"], [[Decimal("10.00")]])

    def test_empty_set(self, formatter: ResultFormatter) -> None:
        assert formatter.format(["a"], []) == "Empty set"
        assert formatter.render(_row_set(["a"])) == "Empty set"

    def test_render_row_count(self, formatter: ResultFormatter) -> None:
        one = formatter.render(_row_set(["a"], [1]))
        two = formatter.render(_row_set(["a"], [1], [2]))

        assert one.endswith("\n1 row in set")
        assert two.endswith("\n2 rows in set")

    def test_render_mutation(self, formatter: ResultFormatter) -> None:
        assert formatter.render(ExecutionResult(affected_rows=1)) == "Query OK, 1 row affected"
        assert formatter.render(ExecutionResult(affected_rows=3)) == "Query OK, 3 rows affected"

    def test_render_note(self, formatter: ResultFormatter) -> None:
        result = ExecutionResult(message="Note: Table 'cats' already exists")

        assert formatter.render(result) == (
            "Query OK, 0 rows affected\nNote: Table 'cats' already exists"
        )

    def test_render_error(self, formatter: ResultFormatter) -> None:
        result = ExecutionResult.from_error(NoSuchTableError("Table 'shop.cats' doesn't exist"))

        assert formatter.render(result) == (
            "ERROR (NoSuchTable): Table 'shop.cats' doesn't exist"
        )

    def test_to_records(self, formatter: ResultFormatter) -> None:
        result = _row_set(["title", "pages"], ["Just Kids", 304])

        assert formatter.to_records(result) == [{"title": "Just Kids", "pages": 304}]
