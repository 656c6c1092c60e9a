"""Unit tests for LIKE pattern matching."""

from __future__ import annotations

import pytest

from minisql.domain.services.patterns import like


@pytest.mark.unit
class TestLike:
    """Tests for LIKE wildcards and escapes."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("Dan", True), ("David", True), ("Linda", False)],
    )
    def test_prefix(self, text: str, expected: bool) -> None:
        assert like(text, "da%") is expected

    @pytest.mark.parametrize("text", ["Dan", "David", "Linda"])
    def test_contains(self, text: str) -> None:
        assert like(text, "%da%")

    def test_underscore_matches_one_character(self) -> None:
        assert like("Dan", "_an")
        assert not like("Dean", "_an")
        assert like("Dean", "__an")

    def test_escaped_percent(self) -> None:
        assert like("100% cotton", "%\\%%")
        assert not like("cotton", "%\\%%")

    def test_escaped_underscore(self) -> None:
        assert like("a_b", "a\\_b")
        assert not like("axb", "a\\_b")

    def test_custom_escape(self) -> None:
        assert like("50%", "50!%", escape="!")
        assert not like("500", "50!%", escape="!")

    def test_regex_characters_are_literal(self) -> None:
        assert like("a.b", "a.b")
        assert not like("axb", "a.b")
        assert like("(x)", "(%)")

    def test_empty_pattern(self) -> None:
        assert like("", "")
        assert not like("a", "")
        assert like("", "%")
