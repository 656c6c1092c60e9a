"""Unit tests for scalar values and column types."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from minisql.domain.errors import InvalidSchemaError, TypeMismatchError, ValueTooLongError
from minisql.domain.value_objects import (
    ColumnType,
    Ordering,
    SqlType,
    coerce,
    compare,
    normalize,
    sort_compare,
    to_number,
    to_text,
    values_equal,
)


@pytest.mark.unit
class TestColumnType:
    """Tests for ColumnType.from_sql."""

    def test_int_aliases(self) -> None:
        for name in ("INT", "integer", "BIGINT", "tinyint"):
            assert ColumnType.from_sql(name).base is SqlType.INT

    def test_varchar_requires_length(self) -> None:
        with pytest.raises(InvalidSchemaError):
            ColumnType.from_sql("VARCHAR")

    def test_char_defaults_to_one(self) -> None:
        assert ColumnType.from_sql("CHAR").length == 1

    def test_decimal_params(self) -> None:
        ct = ColumnType.from_sql("DECIMAL", [5, 2])
        assert (ct.precision, ct.scale) == (5, 2)
        assert str(ct) == "decimal(5,2)"

    def test_decimal_scale_above_precision(self) -> None:
        with pytest.raises(InvalidSchemaError):
            ColumnType.from_sql("DECIMAL", [2, 5])

    def test_unknown_type(self) -> None:
        with pytest.raises(InvalidSchemaError):
            ColumnType.from_sql("BLOB")


@pytest.mark.unit
class TestCoerce:
    """Tests for coercing raw values into column types."""

    def test_null_passes_through(self) -> None:
        assert coerce(None, ColumnType(SqlType.INT)) is None

    def test_text_into_int_fails(self) -> None:
        with pytest.raises(TypeMismatchError):
            coerce("abc", ColumnType(SqlType.INT), column="pages")

    def test_integral_decimal_into_int(self) -> None:
        assert coerce(Decimal("7.0"), ColumnType(SqlType.INT)) == 7

    def test_decimal_is_rounded_to_scale(self) -> None:
        ct = ColumnType.from_sql("DECIMAL", [5, 2])
        assert coerce(Decimal("7.999"), ct) == Decimal("8.00")
        assert coerce(3, ct) == Decimal("3.00")

    def test_decimal_out_of_range(self) -> None:
        ct = ColumnType.from_sql("DECIMAL", [5, 2])
        with pytest.raises(ValueTooLongError):
            coerce(Decimal("1000.00"), ct)

    def test_varchar_too_long(self) -> None:
        ct = ColumnType.from_sql("VARCHAR", [3])
        with pytest.raises(ValueTooLongError):
            coerce("abcd", ct, column="code")

    def test_varchar_truncate_policy(self) -> None:
        ct = ColumnType.from_sql("VARCHAR", [3])
        assert coerce("abcd", ct, overflow="truncate") == "abc"

    def test_datetime_from_text(self) -> None:
        ct = ColumnType(SqlType.DATETIME)
        assert coerce("2017-04-21", ct) == datetime(2017, 4, 21)
        assert coerce("2017-04-21 10:30:00", ct) == datetime(2017, 4, 21, 10, 30)

    def test_bad_datetime(self) -> None:
        with pytest.raises(TypeMismatchError):
            coerce("yesterday", ColumnType(SqlType.DATETIME))


@pytest.mark.unit
class TestCompare:
    """Tests for value comparison."""

    def test_text_is_case_insensitive(self) -> None:
        assert compare("Dan", "DAN") is Ordering.EQ
        assert compare("apple", "Banana") is Ordering.LT

    def test_null_is_incomparable(self) -> None:
        assert compare(None, None) is Ordering.INCOMPARABLE
        assert compare(1, None) is Ordering.INCOMPARABLE

    def test_number_with_numeric_text(self) -> None:
        assert compare(10, "9") is Ordering.GT
        assert compare(Decimal("2.50"), 2) is Ordering.GT

    def test_number_with_word_is_incomparable(self) -> None:
        assert compare(1, "one") is Ordering.INCOMPARABLE

    def test_values_equal_three_valued(self) -> None:
        assert values_equal("a", "A") is True
        assert values_equal(1, "one") is False
        assert values_equal(None, 1) is None

    def test_sort_compare_nulls(self) -> None:
        assert sort_compare(None, 1) == -1
        assert sort_compare(None, 1, nulls_low=False) == 1
        assert sort_compare(None, None) == 0

    def test_normalize_merges_case_and_scale(self) -> None:
        assert normalize("Harris") == normalize("HARRIS")
        assert normalize(Decimal("3.00")) == normalize(3)


@pytest.mark.unit
class TestConversions:
    """Tests for text and number conversion."""

    def test_to_text(self) -> None:
        assert to_text(None) is None
        assert to_text(Decimal("10.00")) == "10.00"
        assert to_text(datetime(2020, 1, 2, 3, 4, 5)) == "2020-01-02 03:04:05"

    def test_to_number(self) -> None:
        assert to_number("42") == 42
        assert to_number("4.5") == Decimal("4.5")
        with pytest.raises(TypeMismatchError):
            to_number("forty")
