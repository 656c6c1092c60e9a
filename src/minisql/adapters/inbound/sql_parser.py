"""SQL Parser using sqlglot.

This module decodes SQL text into statement plans using sqlglot's MySQL
dialect. Queries become a tree of logical plan nodes that the executor
runs with Volcano operators; other statements become flat plans.

Supported statements:
    - CREATE DATABASE / DROP DATABASE / USE
    - SHOW DATABASES / SHOW TABLES / DESCRIBE
    - CREATE TABLE / DROP TABLE
    - INSERT
    - SELECT (with WHERE, DISTINCT, ORDER BY, LIMIT)
    - UPDATE
    - DELETE

References:
    - sqlglot documentation: https://sqlglot.com/
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from minisql.domain.errors import (
    EngineError,
    ErrorKind,
    UnknownColumnError,
    UnsupportedError,
)
from minisql.domain.services import string_functions
from minisql.domain.value_objects import CURRENT_TIMESTAMP


class ComparisonOp(Enum):
    """Comparison operators for predicates."""

    EQ = "="
    NE = "<>"
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    IS_NULL = "IS NULL"
    IS_NOT_NULL = "IS NOT NULL"


class LogicalOp(Enum):
    """Logical operators for combining predicates."""

    AND = "AND"
    OR = "OR"
    NOT = "NOT"


class ArithmeticOp(Enum):
    """Arithmetic operators."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    INT_DIV = "DIV"
    MOD = "%"


class ShowKind(Enum):
    DATABASES = "DATABASES"
    TABLES = "TABLES"


# sqlglot type names that differ from the SQL spelling.
_TYPE_ALIASES = {
    "TIMESTAMPTZ": "TIMESTAMP",
    "TIMESTAMPLTZ": "TIMESTAMP",
    "DATETIME2": "DATETIME",
}

_COMPARISONS = {
    exp.EQ: ComparisonOp.EQ,
    exp.NEQ: ComparisonOp.NE,
    exp.LT: ComparisonOp.LT,
    exp.LTE: ComparisonOp.LE,
    exp.GT: ComparisonOp.GT,
    exp.GTE: ComparisonOp.GE,
}

_ARITHMETIC = {
    exp.Add: ArithmeticOp.ADD,
    exp.Sub: ArithmeticOp.SUB,
    exp.Mul: ArithmeticOp.MUL,
    exp.Div: ArithmeticOp.DIV,
    exp.IntDiv: ArithmeticOp.INT_DIV,
    exp.Mod: ArithmeticOp.MOD,
}


@dataclass
class ColumnDef:
    """Column definition for CREATE TABLE."""

    name: str
    type_name: str
    type_params: list[int] = field(default_factory=list)
    nullable: bool = True
    default: Any = None
    has_default: bool = False
    primary_key: bool = False
    auto_increment: bool = False


@dataclass
class ColumnRef:
    """Reference to a column, optionally qualified with table name."""

    name: str
    table: str | None = None

    def __str__(self) -> str:
        if self.table:
            return f"{self.table}.{self.name}"
        return self.name


@dataclass
class Expression(ABC):
    """Base class for expressions."""

    @abstractmethod
    def __str__(self) -> str:
        pass


@dataclass
class ColumnExpr(Expression):
    """Column reference expression."""

    column: ColumnRef

    def __str__(self) -> str:
        return str(self.column)


@dataclass
class LiteralExpr(Expression):
    """Literal value expression. ``None`` is SQL NULL."""

    value: Any

    def __str__(self) -> str:
        if self.value is None:
            return "NULL"
        if isinstance(self.value, str):
            return f"'{self.value}'"
        return str(self.value)


@dataclass
class NowExpr(Expression):
    """NOW() / CURRENT_TIMESTAMP, evaluated once per statement."""

    def __str__(self) -> str:
        return "NOW()"


@dataclass
class ComparisonExpr(Expression):
    """Comparison expression (e.g., col = value)."""

    left: Expression
    op: ComparisonOp
    right: Expression | None = None  # None for IS NULL / IS NOT NULL

    def __str__(self) -> str:
        if self.right is None:
            return f"{self.left} {self.op.value}"
        return f"{self.left} {self.op.value} {self.right}"


@dataclass
class LikeExpr(Expression):
    """``value LIKE pattern [ESCAPE c]``."""

    value: Expression
    pattern: Expression
    escape: str | None = None

    def __str__(self) -> str:
        escape = f" ESCAPE '{self.escape}'" if self.escape is not None else ""
        return f"{self.value} LIKE {self.pattern}{escape}"


@dataclass
class InExpr(Expression):
    """``value IN (options...)``."""

    value: Expression
    options: list[Expression]

    def __str__(self) -> str:
        return f"{self.value} IN ({', '.join(str(o) for o in self.options)})"


@dataclass
class BetweenExpr(Expression):
    """``value BETWEEN low AND high``."""

    value: Expression
    low: Expression
    high: Expression

    def __str__(self) -> str:
        return f"{self.value} BETWEEN {self.low} AND {self.high}"


@dataclass
class LogicalExpr(Expression):
    """Logical expression combining other expressions."""

    op: LogicalOp
    operands: list[Expression] = field(default_factory=list)

    def __str__(self) -> str:
        if self.op == LogicalOp.NOT:
            return f"NOT ({self.operands[0]})"
        op_str = f" {self.op.value} "
        return f"({op_str.join(str(o) for o in self.operands)})"


@dataclass
class ArithmeticExpr(Expression):
    """Binary arithmetic expression."""

    left: Expression
    op: ArithmeticOp
    right: Expression

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"


@dataclass
class FunctionExpr(Expression):
    """Call into the string function library."""

    name: str
    args: list[Expression] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.name}({', '.join(str(a) for a in self.args)})"


@dataclass
class SelectItem:
    """An item in a SELECT list.

    ``label`` is the output column name: the alias, else the column name,
    else the expression text.
    """

    expr: Expression | None  # None for *
    label: str = "*"
    alias: str | None = None

    @property
    def is_star(self) -> bool:
        return self.expr is None


@dataclass
class OrderByItem:
    """An item in an ORDER BY clause."""

    expr: Expression
    ascending: bool = True


# Logical Plan Nodes


@dataclass
class LogicalPlan(ABC):
    """Base class for logical plan nodes."""

    @abstractmethod
    def __str__(self) -> str:
        pass


@dataclass
class TableScan(LogicalPlan):
    """Scan a table."""

    table_name: str
    database: str | None = None
    alias: str | None = None

    def __str__(self) -> str:
        name = f"{self.database}.{self.table_name}" if self.database else self.table_name
        if self.alias:
            return f"TableScan({name} AS {self.alias})"
        return f"TableScan({name})"


@dataclass
class SingleRow(LogicalPlan):
    """One empty row, the source of a SELECT without FROM."""

    def __str__(self) -> str:
        return "SingleRow()"


@dataclass
class Filter(LogicalPlan):
    """Filter rows based on a predicate."""

    input: LogicalPlan
    predicate: Expression

    def __str__(self) -> str:
        return f"Filter({self.predicate})\n  -> {self.input}"


@dataclass
class Sort(LogicalPlan):
    """Sort rows by specified keys."""

    input: LogicalPlan
    order_by: list[OrderByItem]

    def __str__(self) -> str:
        cols = ", ".join(
            f"{item.expr} {'ASC' if item.ascending else 'DESC'}" for item in self.order_by
        )
        return f"Sort({cols})\n  -> {self.input}"


@dataclass
class Project(LogicalPlan):
    """Project (select) specific columns."""

    input: LogicalPlan
    items: list[SelectItem]

    def __str__(self) -> str:
        cols = ", ".join(item.label for item in self.items)
        return f"Project({cols})\n  -> {self.input}"


@dataclass
class Distinct(LogicalPlan):
    """Drop rows that repeat an earlier row."""

    input: LogicalPlan

    def __str__(self) -> str:
        return f"Distinct()\n  -> {self.input}"


@dataclass
class Limit(LogicalPlan):
    """Limit the number of rows returned."""

    input: LogicalPlan
    count: int
    offset: int = 0

    def __str__(self) -> str:
        return f"Limit({self.count}, offset={self.offset})\n  -> {self.input}"


@dataclass
class InsertPlan(LogicalPlan):
    """Insert rows into a table. ``columns`` is None when no list was given."""

    table_name: str
    columns: list[str] | None
    values: list[list[Expression]]
    database: str | None = None

    def __str__(self) -> str:
        return f"Insert({self.table_name}, cols={self.columns}, rows={len(self.values)})"


@dataclass
class UpdatePlan(LogicalPlan):
    """Update rows in a table."""

    table_name: str
    assignments: dict[str, Expression]
    predicate: Expression | None = None
    database: str | None = None

    def __str__(self) -> str:
        assigns = ", ".join(f"{k}={v}" for k, v in self.assignments.items())
        where = f" WHERE {self.predicate}" if self.predicate else ""
        return f"Update({self.table_name}, SET {assigns}{where})"


@dataclass
class DeletePlan(LogicalPlan):
    """Delete rows from a table."""

    table_name: str
    predicate: Expression | None = None
    database: str | None = None

    def __str__(self) -> str:
        where = f" WHERE {self.predicate}" if self.predicate else ""
        return f"Delete({self.table_name}{where})"


@dataclass
class CreateTablePlan(LogicalPlan):
    """Create a new table."""

    table_name: str
    columns: list[ColumnDef]
    primary_key: list[str] = field(default_factory=list)
    auto_increment_start: int = 1
    if_not_exists: bool = False
    database: str | None = None

    def __str__(self) -> str:
        cols = ", ".join(f"{c.name} {c.type_name}" for c in self.columns)
        return f"CreateTable({self.table_name}, [{cols}])"


@dataclass
class DropTablePlan(LogicalPlan):
    """Drop a table."""

    table_name: str
    if_exists: bool = False
    database: str | None = None

    def __str__(self) -> str:
        return f"DropTable({self.table_name})"


@dataclass
class DescribePlan(LogicalPlan):
    """Describe a table's columns."""

    table_name: str
    database: str | None = None

    def __str__(self) -> str:
        return f"Describe({self.table_name})"


@dataclass
class CreateDatabasePlan(LogicalPlan):
    name: str
    if_not_exists: bool = False

    def __str__(self) -> str:
        return f"CreateDatabase({self.name})"


@dataclass
class DropDatabasePlan(LogicalPlan):
    name: str
    if_exists: bool = False

    def __str__(self) -> str:
        return f"DropDatabase({self.name})"


@dataclass
class UseDatabasePlan(LogicalPlan):
    name: str

    def __str__(self) -> str:
        return f"Use({self.name})"


@dataclass
class ShowPlan(LogicalPlan):
    """SHOW DATABASES / SHOW TABLES [FROM db] [LIKE pattern]."""

    kind: ShowKind
    database: str | None = None
    like: str | None = None

    def __str__(self) -> str:
        return f"Show({self.kind.value})"


class ParseError(EngineError):
    """Error during SQL parsing."""

    kind = ErrorKind.PARSE_ERROR


class SQLParser:
    """SQL parser using sqlglot.

    Parses SQL strings and produces logical plans that can be executed.

    Example:
        >>> parser = SQLParser()
        >>> plan = parser.parse("SELECT title FROM books WHERE pages > 300")
        >>> print(plan)
        Project(title)
          -> Filter(pages > 300)
            -> TableScan(books)
    """

    def __init__(self, dialect: str = "mysql") -> None:
        """Initialize the parser.

        Args:
            dialect: SQL dialect to use for parsing (default: mysql).
        """
        self._dialect = dialect

    @property
    def dialect(self) -> str:
        return self._dialect

    def parse(self, sql: str | exp.Expression) -> LogicalPlan:
        """Parse one SQL statement into a logical plan.

        Args:
            sql: The SQL statement, as text or as an already split
                sqlglot expression (see ``split``).

        Returns:
            A logical plan representing the statement.

        Raises:
            ParseError: If the SQL is invalid.
            UnsupportedError: If the statement is valid SQL outside the
                supported subset.
        """
        if isinstance(sql, exp.Expression):
            return self._convert_statement(sql)

        statements = self.split(sql)
        if not statements:
            raise ParseError("Empty SQL statement")
        if len(statements) > 1:
            raise ParseError("Multiple statements not supported")
        return self._convert_statement(statements[0])

    def split(self, sql: str) -> list[exp.Expression]:
        """Split a script into statement expressions, skipping empty ones."""
        try:
            statements = sqlglot.parse(sql, read=self._dialect)
        except SqlglotError as e:
            raise ParseError(f"Failed to parse SQL: {e}") from e
        return [stmt for stmt in statements if stmt is not None]

    def _convert_statement(self, stmt: exp.Expression) -> LogicalPlan:
        """Convert a sqlglot expression to a logical plan."""
        if isinstance(stmt, exp.Select):
            return self._convert_select(stmt)
        elif isinstance(stmt, exp.Insert):
            return self._convert_insert(stmt)
        elif isinstance(stmt, exp.Update):
            return self._convert_update(stmt)
        elif isinstance(stmt, exp.Delete):
            return self._convert_delete(stmt)
        elif isinstance(stmt, exp.Create):
            return self._convert_create(stmt)
        elif isinstance(stmt, exp.Drop):
            return self._convert_drop(stmt)
        elif isinstance(stmt, exp.Use):
            return UseDatabasePlan(name=_object_name(stmt.this))
        elif isinstance(stmt, exp.Show):
            return self._convert_show(stmt)
        elif isinstance(stmt, exp.Describe):
            database, name = _table_name(stmt.this)
            return DescribePlan(table_name=name, database=database)
        elif isinstance(stmt, exp.Command):
            return self._convert_command(stmt)
        else:
            raise UnsupportedError(f"Unsupported statement type: {stmt.key.upper()}")

    # Queries

    def _convert_select(self, stmt: exp.Select) -> LogicalPlan:
        """Convert a SELECT statement to a logical plan."""
        for clause in ("joins", "group", "having", "windows", "laterals"):
            if stmt.args.get(clause):
                raise UnsupportedError(f"{clause.upper()} is not supported")
        if list(stmt.find_all(exp.Subquery)):
            raise UnsupportedError("Subqueries are not supported")

        from_clause = stmt.find(exp.From)
        plan: LogicalPlan
        if from_clause is None:
            plan = SingleRow()
        else:
            table = from_clause.this
            if not isinstance(table, exp.Table):
                raise UnsupportedError("FROM supports a single table")
            database, name = _table_name(table)
            plan = TableScan(table_name=name, database=database, alias=table.alias or None)

        # Apply WHERE filter
        where = stmt.args.get("where")
        if where:
            plan = Filter(input=plan, predicate=self._convert_expression(where.this))

        select_items = [self._convert_select_item(col) for col in stmt.expressions]

        # ORDER BY runs before projection so keys may use source columns;
        # aliases and positions resolve to the select-list expression.
        order = stmt.args.get("order")
        if order:
            order_items = [
                self._convert_order_item(expr, select_items) for expr in order.expressions
            ]
            plan = Sort(input=plan, order_by=order_items)

        plan = Project(input=plan, items=select_items)

        if stmt.args.get("distinct"):
            plan = Distinct(input=plan)

        # Apply LIMIT
        limit = stmt.args.get("limit")
        offset_node = stmt.args.get("offset")
        if limit is not None or offset_node is not None:
            count = -1
            offset = 0
            if limit is not None:
                count = self._int_value(limit.args.get("expression") or limit.this, "LIMIT")
                if limit.args.get("offset") is not None:
                    offset = self._int_value(limit.args["offset"], "OFFSET")
            if offset_node is not None:
                offset = self._int_value(
                    offset_node.args.get("expression") or offset_node.this, "OFFSET"
                )
            plan = Limit(input=plan, count=count, offset=offset)

        return plan

    def _convert_select_item(self, col: exp.Expression) -> SelectItem:
        """Convert a SELECT item."""
        if isinstance(col, exp.Star) or (
            isinstance(col, exp.Column) and isinstance(col.this, exp.Star)
        ):
            return SelectItem(expr=None)

        alias = None
        if isinstance(col, exp.Alias):
            alias = col.alias
            col = col.this

        expr = self._convert_expression(col)
        if alias:
            label = alias
        elif isinstance(col, exp.Column):
            label = col.name
        else:
            label = col.sql(dialect=self._dialect)
        return SelectItem(expr=expr, label=label, alias=alias)

    def _convert_order_item(
        self, node: exp.Expression, select_items: list[SelectItem]
    ) -> OrderByItem:
        ascending = True
        if isinstance(node, exp.Ordered):
            ascending = not node.args.get("desc", False)
            node = node.this

        if isinstance(node, exp.Literal) and node.is_int:
            position = int(node.this)
            if not 1 <= position <= len(select_items) or select_items[position - 1].is_star:
                raise UnknownColumnError(f"Unknown column '{position}' in 'order clause'")
            item = select_items[position - 1]
            return OrderByItem(expr=item.expr, ascending=ascending)  # type: ignore[arg-type]

        if isinstance(node, exp.Column) and not node.table:
            for item in select_items:
                if item.alias and item.alias.lower() == node.name.lower():
                    return OrderByItem(expr=item.expr, ascending=ascending)  # type: ignore[arg-type]

        return OrderByItem(expr=self._convert_expression(node), ascending=ascending)

    def _int_value(self, node: exp.Expression | None, clause: str) -> int:
        if isinstance(node, exp.Literal) and node.is_int:
            return int(node.this)
        raise ParseError(f"{clause} requires a non-negative integer")

    # Expressions

    def _convert_expression(self, expr: exp.Expression) -> Expression:
        """Convert a sqlglot expression to our internal representation."""
        if isinstance(expr, exp.Column):
            if isinstance(expr.this, exp.Star):
                raise ParseError("'*' is only allowed in the select list")
            return ColumnExpr(column=ColumnRef(name=expr.name, table=expr.table or None))
        elif isinstance(expr, exp.Literal):
            return LiteralExpr(value=_literal_value(expr))
        elif isinstance(expr, exp.Null):
            return LiteralExpr(value=None)
        elif isinstance(expr, exp.Boolean):
            return LiteralExpr(value=1 if expr.this else 0)
        elif isinstance(expr, exp.Paren):
            return self._convert_expression(expr.this)
        elif isinstance(expr, exp.Neg):
            inner = self._convert_expression(expr.this)
            if isinstance(inner, LiteralExpr) and isinstance(inner.value, (int, Decimal)):
                return LiteralExpr(value=-inner.value)
            return ArithmeticExpr(left=LiteralExpr(value=0), op=ArithmeticOp.SUB, right=inner)
        elif type(expr) in _COMPARISONS:
            return ComparisonExpr(
                left=self._convert_expression(expr.left),
                op=_COMPARISONS[type(expr)],
                right=self._convert_expression(expr.right),
            )
        elif type(expr) in _ARITHMETIC:
            return ArithmeticExpr(
                left=self._convert_expression(expr.left),
                op=_ARITHMETIC[type(expr)],
                right=self._convert_expression(expr.right),
            )
        elif isinstance(expr, (exp.And, exp.Or)):
            return LogicalExpr(
                op=LogicalOp.AND if isinstance(expr, exp.And) else LogicalOp.OR,
                operands=[
                    self._convert_expression(expr.left),
                    self._convert_expression(expr.right),
                ],
            )
        elif isinstance(expr, exp.Not):
            if isinstance(expr.this, exp.Is) and isinstance(expr.this.expression, exp.Null):
                return ComparisonExpr(
                    left=self._convert_expression(expr.this.this),
                    op=ComparisonOp.IS_NOT_NULL,
                )
            return LogicalExpr(op=LogicalOp.NOT, operands=[self._convert_expression(expr.this)])
        elif isinstance(expr, exp.Is):
            if not isinstance(expr.expression, exp.Null):
                raise UnsupportedError("IS supports only NULL")
            return ComparisonExpr(
                left=self._convert_expression(expr.this),
                op=ComparisonOp.IS_NOT_NULL if expr.args.get("negate") else ComparisonOp.IS_NULL,
            )
        elif isinstance(expr, exp.Escape):
            like = expr.this
            if not isinstance(like, (exp.Like, exp.ILike)):
                raise UnsupportedError("ESCAPE applies only to LIKE")
            return _negate_if(expr, self._convert_like(like, expr.expression))
        elif isinstance(expr, (exp.Like, exp.ILike)):
            return self._convert_like(expr, expr.args.get("escape"))
        elif isinstance(expr, exp.In):
            if expr.args.get("query") is not None:
                raise UnsupportedError("Subqueries are not supported")
            return _negate_if(
                expr,
                InExpr(
                    value=self._convert_expression(expr.this),
                    options=[self._convert_expression(e) for e in expr.expressions],
                ),
            )
        elif isinstance(expr, exp.Between):
            return _negate_if(
                expr,
                BetweenExpr(
                    value=self._convert_expression(expr.this),
                    low=self._convert_expression(expr.args["low"]),
                    high=self._convert_expression(expr.args["high"]),
                ),
            )
        elif isinstance(expr, exp.CurrentTimestamp):
            return NowExpr()
        elif isinstance(expr, exp.AggFunc):
            raise UnsupportedError(f"Aggregate function {expr.sql_name()} is not supported")
        elif isinstance(expr, exp.Trim):
            return self._convert_trim(expr)
        elif isinstance(expr, exp.Anonymous):
            if expr.name.upper() == "NOW":
                return NowExpr()
            return FunctionExpr(
                name=string_functions.canonical_name(expr.name),
                args=[self._convert_expression(a) for a in expr.expressions],
            )
        elif isinstance(expr, (exp.Concat, exp.ConcatWs)):
            return FunctionExpr(
                name=expr.sql_name(),
                args=[self._convert_expression(a) for a in expr.expressions],
            )
        elif isinstance(expr, exp.Func):
            return FunctionExpr(
                name=string_functions.canonical_name(expr.sql_name()),
                args=[self._convert_expression(a) for a in _func_args(expr)],
            )
        elif isinstance(expr, exp.Alias):
            return self._convert_expression(expr.this)
        elif isinstance(expr, exp.Subquery):
            raise UnsupportedError("Subqueries are not supported")
        else:
            raise UnsupportedError(f"Unsupported expression type: {type(expr).__name__}")

    def _convert_like(
        self, like: exp.Like | exp.ILike, escape: exp.Expression | None
    ) -> Expression:
        """LIKE with an optional single-character ESCAPE; honours NOT LIKE."""
        escape_char = None
        if escape is not None:
            if not (isinstance(escape, exp.Literal) and escape.is_string and len(escape.this) == 1):
                raise ParseError("ESCAPE requires a single character")
            escape_char = escape.this
        result = LikeExpr(
            value=self._convert_expression(like.this),
            pattern=self._convert_expression(like.expression),
            escape=escape_char,
        )
        return _negate_if(like, result)

    def _convert_trim(self, expr: exp.Trim) -> FunctionExpr:
        args = [self._convert_expression(expr.this)]
        chars = expr.args.get("expression")
        if chars is not None:
            args.append(self._convert_expression(chars))
        options = {}
        position = expr.args.get("position")
        if position:
            options["position"] = str(position).upper()
        return FunctionExpr(name="TRIM", args=args, options=options)

    # DML

    def _convert_insert(self, stmt: exp.Insert) -> LogicalPlan:
        """Convert an INSERT statement to a logical plan."""
        target = stmt.this
        columns: list[str] | None = None
        if isinstance(target, exp.Schema):
            columns = [col.name for col in target.expressions]
            target = target.this
        if not isinstance(target, exp.Table):
            raise ParseError("INSERT requires table name")
        database, name = _table_name(target)

        values = stmt.args.get("expression")
        if not isinstance(values, exp.Values):
            raise UnsupportedError("INSERT supports only a VALUES list")

        rows = []
        for tuple_expr in values.expressions:
            items = tuple_expr.expressions if isinstance(tuple_expr, exp.Tuple) else [tuple_expr]
            rows.append([self._convert_expression(val) for val in items])

        return InsertPlan(table_name=name, columns=columns, values=rows, database=database)

    def _convert_update(self, stmt: exp.Update) -> LogicalPlan:
        """Convert an UPDATE statement to a logical plan."""
        table = stmt.this
        if not isinstance(table, exp.Table):
            raise ParseError("UPDATE requires table name")
        database, name = _table_name(table)

        assignments: dict[str, Expression] = {}
        for child in stmt.expressions:
            if not isinstance(child, exp.EQ) or not isinstance(child.left, exp.Column):
                raise ParseError("SET expects column = value assignments")
            assignments[child.left.name] = self._convert_expression(child.right)

        predicate = None
        where = stmt.args.get("where")
        if where:
            predicate = self._convert_expression(where.this)

        return UpdatePlan(
            table_name=name, assignments=assignments, predicate=predicate, database=database
        )

    def _convert_delete(self, stmt: exp.Delete) -> LogicalPlan:
        """Convert a DELETE statement to a logical plan."""
        table = stmt.this
        if not isinstance(table, exp.Table):
            raise ParseError("DELETE requires table name")
        database, name = _table_name(table)

        predicate = None
        where = stmt.args.get("where")
        if where:
            predicate = self._convert_expression(where.this)

        return DeletePlan(table_name=name, predicate=predicate, database=database)

    # DDL

    def _convert_create(self, stmt: exp.Create) -> LogicalPlan:
        """Convert a CREATE DATABASE / CREATE TABLE statement."""
        kind = str(stmt.args.get("kind") or "").upper()
        if_not_exists = bool(stmt.args.get("exists", False))

        if kind in ("DATABASE", "SCHEMA"):
            return CreateDatabasePlan(name=_object_name(stmt.this), if_not_exists=if_not_exists)
        if kind != "TABLE":
            raise UnsupportedError(f"CREATE {kind} is not supported")
        if stmt.args.get("expression") is not None:
            raise UnsupportedError("CREATE TABLE ... AS SELECT is not supported")

        schema = stmt.this
        if not isinstance(schema, exp.Schema):
            raise ParseError("CREATE TABLE requires a column list")
        database, name = _table_name(schema.this)

        columns = []
        primary_key: list[str] = []
        for node in schema.expressions:
            if isinstance(node, exp.ColumnDef):
                columns.append(self._convert_column_def(node))
            elif isinstance(node, exp.PrimaryKey) or (
                isinstance(node, exp.Constraint) and node.find(exp.PrimaryKey)
            ):
                key = node if isinstance(node, exp.PrimaryKey) else node.find(exp.PrimaryKey)
                if primary_key:
                    raise ParseError("Multiple primary key defined")
                primary_key = [part.find(exp.Identifier).name for part in key.expressions]
            else:
                raise UnsupportedError(f"Unsupported table element: {node.sql(dialect=self._dialect)}")

        auto_increment_start = 1
        properties = stmt.args.get("properties")
        if properties is not None:
            for prop in properties.expressions:
                if isinstance(prop, exp.AutoIncrementProperty):
                    auto_increment_start = self._int_value(prop.this, "AUTO_INCREMENT")

        return CreateTablePlan(
            table_name=name,
            columns=columns,
            primary_key=primary_key,
            auto_increment_start=auto_increment_start,
            if_not_exists=if_not_exists,
            database=database,
        )

    def _convert_column_def(self, col_def: exp.ColumnDef) -> ColumnDef:
        dtype = col_def.args.get("kind")
        if not isinstance(dtype, exp.DataType):
            raise ParseError(f"Column '{col_def.name}' requires a type")

        column = ColumnDef(
            name=col_def.name,
            type_name=self._convert_data_type(dtype),
            type_params=self._type_params(dtype),
        )

        for constraint in col_def.args.get("constraints") or []:
            kind = constraint.kind
            if isinstance(kind, exp.NotNullColumnConstraint):
                column.nullable = bool(kind.args.get("allow_null"))
            elif isinstance(kind, exp.PrimaryKeyColumnConstraint):
                column.primary_key = True
            elif isinstance(kind, exp.AutoIncrementColumnConstraint):
                column.auto_increment = True
            elif isinstance(kind, exp.DefaultColumnConstraint):
                column.default = self._default_value(kind.this, col_def.name)
                column.has_default = True
            elif isinstance(kind, exp.CommentColumnConstraint):
                continue
            else:
                raise UnsupportedError(
                    f"Unsupported column constraint: {constraint.sql(dialect=self._dialect)}"
                )
        return column

    def _convert_data_type(self, dtype: exp.DataType) -> str:
        """SQL type name of a sqlglot data type."""
        # dtype.this is a DataType.Type enum, we need its name
        if hasattr(dtype.this, "name"):
            type_name = dtype.this.name.upper()
        else:
            type_name = str(dtype.this).upper()
        return _TYPE_ALIASES.get(type_name, type_name)

    def _type_params(self, dtype: exp.DataType) -> list[int]:
        params = []
        for param in dtype.expressions:
            literal = param if isinstance(param, exp.Literal) else param.find(exp.Literal)
            if literal is None or not literal.is_int:
                raise ParseError(f"Invalid type parameter: {param.sql(dialect=self._dialect)}")
            params.append(int(literal.this))
        return params

    def _default_value(self, node: exp.Expression, column: str) -> Any:
        value = self._convert_expression(node)
        if isinstance(value, NowExpr):
            return CURRENT_TIMESTAMP
        if isinstance(value, LiteralExpr):
            return value.value
        raise ParseError(f"Invalid default value for '{column}'")

    def _convert_drop(self, stmt: exp.Drop) -> LogicalPlan:
        """Convert a DROP DATABASE / DROP TABLE statement."""
        kind = str(stmt.args.get("kind") or "").upper()
        if_exists = bool(stmt.args.get("exists", False))

        if kind in ("DATABASE", "SCHEMA"):
            return DropDatabasePlan(name=_object_name(_drop_target(stmt)), if_exists=if_exists)
        if kind != "TABLE":
            raise UnsupportedError(f"DROP {kind} is not supported")

        database, name = _table_name(_drop_target(stmt))
        return DropTablePlan(table_name=name, if_exists=if_exists, database=database)

    # Catalog statements

    def _convert_show(self, stmt: exp.Show) -> LogicalPlan:
        what = str(stmt.name or stmt.this or "").upper()
        like = stmt.args.get("like")
        like_text = like.name if isinstance(like, exp.Literal) else None
        if what == "DATABASES" or what == "SCHEMAS":
            return ShowPlan(kind=ShowKind.DATABASES, like=like_text)
        if what == "TABLES":
            db = stmt.args.get("db") or stmt.args.get("target")
            return ShowPlan(
                kind=ShowKind.TABLES,
                database=_object_name(db) if db is not None else None,
                like=like_text,
            )
        raise UnsupportedError(f"SHOW {what} is not supported")

    def _convert_command(self, stmt: exp.Command) -> LogicalPlan:
        """Statements sqlglot leaves unparsed, e.g. SHOW in some dialects."""
        command = str(stmt.this).upper()
        rest = stmt.expression.name if isinstance(stmt.expression, exp.Literal) else ""
        words = rest.replace(";", " ").split()
        if command == "SHOW" and words:
            what = words[0].upper()
            if what in ("DATABASES", "SCHEMAS"):
                return ShowPlan(kind=ShowKind.DATABASES)
            if what == "TABLES":
                database = None
                if len(words) >= 3 and words[1].upper() in ("FROM", "IN"):
                    database = words[2].strip("`")
                return ShowPlan(kind=ShowKind.TABLES, database=database)
        if command in ("DESCRIBE", "DESC", "EXPLAIN") and len(words) == 1:
            database, _, name = words[0].strip("`").rpartition(".")
            return DescribePlan(table_name=name, database=database or None)
        raise UnsupportedError(f"Unsupported statement: {command} {rest}".strip())


def _literal_value(literal: exp.Literal) -> Any:
    if literal.is_string:
        return literal.this
    text = literal.this
    if literal.is_int:
        return int(text)
    return Decimal(text)


def _func_args(func: exp.Func) -> list[exp.Expression]:
    """Arguments of a typed sqlglot function node, in declaration order."""
    args: list[exp.Expression] = []
    for key in func.arg_types:
        value = func.args.get(key)
        if isinstance(value, list):
            args.extend(v for v in value if isinstance(v, exp.Expression))
        elif isinstance(value, exp.Expression):
            args.append(value)
    return args


def _negate_if(node: exp.Expression, converted: Expression) -> Expression:
    """Wrap in NOT when sqlglot folded the negation into the node itself."""
    if node.args.get("negate"):
        return LogicalExpr(op=LogicalOp.NOT, operands=[converted])
    return converted


def _drop_target(stmt: exp.Drop) -> exp.Expression | None:
    """The single object named by DROP, wherever sqlglot placed it."""
    tables = stmt.args.get("tables") or []
    if len(tables) > 1 or stmt.expressions:
        raise UnsupportedError("DROP TABLE supports one table at a time")
    if stmt.this is not None:
        return stmt.this
    return tables[0] if tables else None


def _object_name(node: exp.Expression | None) -> str:
    """Name of a database in CREATE/DROP DATABASE, USE and SHOW ... FROM."""
    if node is None:
        raise ParseError("Missing database name")
    if isinstance(node, exp.Table):
        name = node.name or node.text("db")
        if name:
            return name
    elif isinstance(node, (exp.Identifier, exp.Var, exp.Literal)):
        return node.name
    identifier = node.find(exp.Identifier)
    if identifier is None:
        raise ParseError("Missing database name")
    return identifier.name


def _table_name(node: exp.Expression | None) -> tuple[str | None, str]:
    """``(database, table)`` of a possibly qualified table reference."""
    if isinstance(node, exp.Schema):
        node = node.this
    if not isinstance(node, exp.Table) or not node.name:
        raise ParseError("Missing table name")
    return node.text("db") or None, node.name
