"""Result rendering.

Turns executor results into text grids with ``tabulate``. Values are
converted to text before rendering so numbers keep their declared scale
(``10.00`` stays ``10.00``) and NULL renders as a marker distinct from
empty text.
"""

from __future__ import annotations

from typing import Any, Sequence

from tabulate import tabulate

from minisql.application.executor import ExecutionResult, Row
from minisql.domain.value_objects import to_text
from minisql.infrastructure.config import FormatterConfig

EMPTY_SET = "Empty set"


class ResultFormatter:
    """Renders row sets, mutation counts and errors."""

    def __init__(self, config: FormatterConfig | None = None) -> None:
        self._config = config or FormatterConfig()

    def format(self, labels: Sequence[str], rows: Sequence[Row | Sequence[Any]]) -> str:
        """Render labelled rows as a grid, preserving row order."""
        if not rows:
            return EMPTY_SET
        table = [
            [to_text(value) for value in (row.values if isinstance(row, Row) else row)]
            for row in rows
        ]
        return tabulate(
            table,
            headers=list(labels),
            tablefmt=self._config.table_format,
            missingval=self._config.null_text,
            disable_numparse=True,
        )

    def render(self, result: ExecutionResult) -> str:
        """Render any result the way a SQL shell prints it."""
        if not result.success:
            kind = result.error_kind.value if result.error_kind else "Error"
            return f"ERROR ({kind}): {result.message}"
        if result.is_row_set:
            if not result.rows:
                return EMPTY_SET
            count = len(result.rows)
            noun = "row" if count == 1 else "rows"
            return f"{self.format(result.columns, result.rows)}\n{count} {noun} in set"
        noun = "row" if result.affected_rows == 1 else "rows"
        text = f"Query OK, {result.affected_rows} {noun} affected"
        if result.message.startswith("Note:") or result.message == "Database changed":
            text = f"{text}\n{result.message}"
        return text

    def to_records(self, result: ExecutionResult) -> list[dict[str, Any]]:
        """Rows as ``{label: value}`` dicts; later duplicate labels win."""
        return [dict(zip(row.columns, row.values)) for row in result.rows]
