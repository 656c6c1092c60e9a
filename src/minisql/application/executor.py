"""Query Executor using Volcano iterator model.

This module implements a query executor that interprets logical plans
and executes them against the catalog and row store using a pull-based
iterator model.

The Volcano model:
    - Each operator is an iterator with open(), next(), close() methods
    - Operators pull tuples from their children on demand
    - Enables pipelining without materializing intermediate results

A query runs as ``SeqScan | SingleRow -> Filter -> Sort -> Project ->
Distinct -> Limit``. Sort materializes its whole input, so ORDER BY ...
LIMIT sorts every row before taking the prefix.

Expressions are compiled once per statement into closures over a row's
value list. Column references are resolved at compile time, so an unknown
column fails the statement even when the table is empty. Predicates use
three-valued logic: True, False or None (unknown), and only True keeps a
row.

References:
    - Graefe, "Volcano" (1994)
"""

from __future__ import annotations

import functools
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Any, Callable, Iterable, Iterator

from minisql.adapters.inbound.sql_parser import (
    ArithmeticExpr,
    ArithmeticOp,
    BetweenExpr,
    ColumnExpr,
    ComparisonExpr,
    ComparisonOp,
    CreateDatabasePlan,
    CreateTablePlan,
    DeletePlan,
    DescribePlan,
    Distinct,
    DropDatabasePlan,
    DropTablePlan,
    Expression,
    Filter,
    FunctionExpr,
    InExpr,
    InsertPlan,
    LikeExpr,
    Limit,
    LiteralExpr,
    LogicalExpr,
    LogicalOp,
    LogicalPlan,
    NowExpr,
    Project,
    ShowKind,
    ShowPlan,
    SingleRow,
    Sort,
    TableScan,
    UpdatePlan,
    UseDatabasePlan,
)
from minisql.domain.entities import Column, Table
from minisql.domain.errors import (
    EngineError,
    ErrorKind,
    InvalidStatementError,
    NoDatabaseSelectedError,
    TypeMismatchError,
    UnknownColumnError,
    UnsupportedError,
)
from minisql.domain.services import patterns, string_functions
from minisql.domain.value_objects import (
    ColumnType,
    Ordering,
    compare,
    normalize,
    now,
    sort_compare,
    to_number,
    to_text,
    values_equal,
)
from minisql.infrastructure.config import EngineConfig
from minisql.ports.inbound import Catalog, StorageEngine

Compiled = Callable[[list[Any]], Any]

# Extra scale digits of a division result, as MySQL's div_precision_increment.
DIV_PRECISION_INCREMENT = 4


@dataclass
class Row:
    """A row of data returned by the executor.

    Rows are named tuples that can be accessed by column name or index.
    """

    columns: list[str]
    values: list[Any]

    def __getitem__(self, key: str | int) -> Any:
        if isinstance(key, int):
            return self.values[key]
        try:
            idx = self.columns.index(key)
            return self.values[idx]
        except ValueError as e:
            raise KeyError(f"Column '{key}' not found") from e

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    def __repr__(self) -> str:
        pairs = ", ".join(f"{c}={v!r}" for c, v in zip(self.columns, self.values))
        return f"Row({pairs})"


@dataclass
class ExecutionResult:
    """Result of statement execution.

    A row set carries ``columns`` (the output labels, known even when no
    rows match) and ``rows``. A mutation carries ``affected_rows`` and, for
    INSERT into an AUTO_INCREMENT table, ``last_insert_id``. A failure
    carries ``error_kind`` and the error text in ``message``.
    """

    rows: list[Row] = field(default_factory=list)
    affected_rows: int = 0
    message: str = ""
    columns: list[str] = field(default_factory=list)
    last_insert_id: int | None = None
    error_kind: ErrorKind | None = None
    database: str | None = None  # set by USE

    @classmethod
    def from_error(cls, error: EngineError) -> ExecutionResult:
        return cls(message=error.message, error_kind=error.kind)

    @property
    def success(self) -> bool:
        return self.error_kind is None

    @property
    def is_row_set(self) -> bool:
        return self.success and bool(self.columns)

    def tuples(self) -> list[tuple[Any, ...]]:
        """Row values as plain tuples."""
        return [tuple(row.values) for row in self.rows]


class Operator(ABC):
    """Base class for executor operators (Volcano model)."""

    @abstractmethod
    def open(self) -> None:
        """Initialize the operator."""
        pass

    @abstractmethod
    def next(self) -> Row | None:
        """Return the next row or None if exhausted."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Clean up resources."""
        pass

    def __iter__(self) -> Iterator[Row]:
        """Allow iteration over operator results."""
        self.open()
        try:
            while True:
                row = self.next()
                if row is None:
                    break
                yield row
        finally:
            self.close()


class SeqScanOperator(Operator):
    """Sequential scan operator.

    Pulls rows from the storage engine in insertion order.
    """

    def __init__(self, table: Table, storage: StorageEngine) -> None:
        self._table = table
        self._storage = storage
        self._columns = table.column_names
        self._rows: Iterator[tuple[Any, list[Any]]] | None = None

    def open(self) -> None:
        self._rows = self._storage.scan(self._table)

    def next(self) -> Row | None:
        if self._rows is None:
            return None
        entry = next(self._rows, None)
        if entry is None:
            return None
        return Row(columns=self._columns, values=entry[1])

    def close(self) -> None:
        self._rows = None


class SingleRowOperator(Operator):
    """Produces one row without columns, the input of SELECT without FROM."""

    def __init__(self) -> None:
        self._returned = False

    def open(self) -> None:
        self._returned = False

    def next(self) -> Row | None:
        if self._returned:
            return None
        self._returned = True
        return Row(columns=[], values=[])

    def close(self) -> None:
        pass


class FilterOperator(Operator):
    """Filter operator that keeps rows whose predicate is True."""

    def __init__(self, child: Operator, predicate: Compiled) -> None:
        self._child = child
        self._predicate = predicate

    def open(self) -> None:
        self._child.open()

    def next(self) -> Row | None:
        while True:
            row = self._child.next()
            if row is None:
                return None
            if _truth(self._predicate(row.values)) is True:
                return row

    def close(self) -> None:
        self._child.close()


class SortOperator(Operator):
    """Sort operator that orders rows.

    Stable multi-key sort over the fully materialized input. Each key is
    ascending or descending on its own.
    """

    def __init__(
        self,
        child: Operator,
        keys: list[Compiled],
        ascending: list[bool],
        nulls_low: bool = True,
    ) -> None:
        self._child = child
        self._keys = keys
        self._ascending = ascending
        self._nulls_low = nulls_low
        self._sorted_rows: list[Row] = []
        self._current_idx = 0

    def open(self) -> None:
        self._child.open()
        # Materialize all rows with their key values
        decorated = []
        while True:
            row = self._child.next()
            if row is None:
                break
            decorated.append(([key(row.values) for key in self._keys], row))

        def cmp(a: tuple[list[Any], Row], b: tuple[list[Any], Row]) -> int:
            for x, y, asc in zip(a[0], b[0], self._ascending):
                result = sort_compare(x, y, self._nulls_low)
                if result:
                    return result if asc else -result
            return 0

        decorated.sort(key=functools.cmp_to_key(cmp))
        self._sorted_rows = [row for _, row in decorated]
        self._current_idx = 0

    def next(self) -> Row | None:
        if self._current_idx >= len(self._sorted_rows):
            return None
        row = self._sorted_rows[self._current_idx]
        self._current_idx += 1
        return row

    def close(self) -> None:
        self._child.close()
        self._sorted_rows = []
        self._current_idx = 0


class ProjectOperator(Operator):
    """Project operator that computes the output columns."""

    def __init__(self, child: Operator, labels: list[str], outputs: list[Compiled]) -> None:
        self._child = child
        self._labels = labels
        self._outputs = outputs

    def open(self) -> None:
        self._child.open()

    def next(self) -> Row | None:
        row = self._child.next()
        if row is None:
            return None
        return Row(columns=self._labels, values=[out(row.values) for out in self._outputs])

    def close(self) -> None:
        self._child.close()


class DistinctOperator(Operator):
    """Drops rows equal to an earlier row; the first occurrence is kept."""

    def __init__(self, child: Operator) -> None:
        self._child = child
        self._seen: set[tuple[Any, ...]] = set()

    def open(self) -> None:
        self._child.open()
        self._seen = set()

    def next(self) -> Row | None:
        while True:
            row = self._child.next()
            if row is None:
                return None
            key = tuple(normalize(v) for v in row.values)
            if key not in self._seen:
                self._seen.add(key)
                return row

    def close(self) -> None:
        self._child.close()
        self._seen = set()


class LimitOperator(Operator):
    """Limit operator that restricts row count. A negative limit is unbounded."""

    def __init__(self, child: Operator, limit: int, offset: int = 0) -> None:
        self._child = child
        self._limit = limit
        self._offset = offset
        self._returned = 0
        self._offset_done = False

    def open(self) -> None:
        self._child.open()
        self._returned = 0
        self._offset_done = False

    def next(self) -> Row | None:
        # Skip offset rows (only once at the beginning)
        if not self._offset_done:
            self._offset_done = True
            for _ in range(self._offset):
                if self._child.next() is None:
                    return None

        if 0 <= self._limit <= self._returned:
            return None
        row = self._child.next()
        if row is None:
            return None
        self._returned += 1
        return row

    def close(self) -> None:
        self._child.close()


@dataclass
class Scope:
    """Columns visible to expressions: those of one table, or none."""

    columns: list[str] = field(default_factory=list)
    table_names: tuple[str, ...] = ()

    @classmethod
    def of_table(cls, table: Table, alias: str | None = None) -> Scope:
        names = (table.name.lower(),) + ((alias.lower(),) if alias else ())
        return cls(columns=table.column_names, table_names=names)

    def resolve(self, expr: ColumnExpr) -> int:
        ref = expr.column
        if ref.table and ref.table.lower() not in self.table_names:
            raise UnknownColumnError(f"Unknown column '{ref}' in 'field list'")
        lowered = ref.name.lower()
        for i, name in enumerate(self.columns):
            if name.lower() == lowered:
                return i
        raise UnknownColumnError(f"Unknown column '{ref}' in 'field list'")


class ExpressionCompiler:
    """Compiles expression trees into closures over a row's value list.

    NOW() is fixed when the compiler is created, so every row of a
    statement sees the same timestamp.
    """

    def __init__(self, scope: Scope) -> None:
        self._scope = scope
        self._now = now()

    def compile(self, expr: Expression) -> Compiled:
        if isinstance(expr, LiteralExpr):
            value = expr.value
            return lambda row: value
        elif isinstance(expr, ColumnExpr):
            pos = self._scope.resolve(expr)
            return lambda row: row[pos]
        elif isinstance(expr, NowExpr):
            stamp = self._now
            return lambda row: stamp
        elif isinstance(expr, ComparisonExpr):
            return self._compile_comparison(expr)
        elif isinstance(expr, LogicalExpr):
            return self._compile_logical(expr)
        elif isinstance(expr, LikeExpr):
            value = self.compile(expr.value)
            pattern = self.compile(expr.pattern)
            escape = expr.escape if expr.escape is not None else patterns.DEFAULT_ESCAPE
            return lambda row: _like(value(row), pattern(row), escape)
        elif isinstance(expr, InExpr):
            value = self.compile(expr.value)
            options = [self.compile(o) for o in expr.options]
            return lambda row: _in(value(row), [o(row) for o in options])
        elif isinstance(expr, BetweenExpr):
            value = self.compile(expr.value)
            low = self.compile(expr.low)
            high = self.compile(expr.high)
            return lambda row: _between(value(row), low(row), high(row))
        elif isinstance(expr, ArithmeticExpr):
            left = self.compile(expr.left)
            right = self.compile(expr.right)
            op = expr.op
            return lambda row: arithmetic(op, left(row), right(row))
        elif isinstance(expr, FunctionExpr):
            fn = string_functions.lookup(expr.name)
            args = [self.compile(a) for a in expr.args]
            options = expr.options
            return lambda row: fn([a(row) for a in args], **options)
        raise UnsupportedError(f"Unsupported expression: {expr}")

    def _compile_comparison(self, expr: ComparisonExpr) -> Compiled:
        left = self.compile(expr.left)
        if expr.op == ComparisonOp.IS_NULL:
            return lambda row: left(row) is None
        if expr.op == ComparisonOp.IS_NOT_NULL:
            return lambda row: left(row) is not None
        if expr.right is None:
            raise UnsupportedError(f"Incomplete comparison: {expr}")
        right = self.compile(expr.right)
        op = expr.op
        return lambda row: _compare(left(row), op, right(row))

    def _compile_logical(self, expr: LogicalExpr) -> Compiled:
        operands = [self.compile(o) for o in expr.operands]
        if expr.op == LogicalOp.NOT:
            operand = operands[0]
            return lambda row: _not(operand(row))
        if expr.op == LogicalOp.AND:
            return lambda row: _and(o(row) for o in operands)
        return lambda row: _or(o(row) for o in operands)


def _truth(value: Any) -> bool | None:
    """SQL truth of a value: numbers are true when non-zero."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, Decimal)):
        return value != 0
    if isinstance(value, str):
        try:
            return to_number(value) != 0
        except TypeMismatchError:
            return False
    return True


def _not(value: Any) -> bool | None:
    truth = _truth(value)
    return None if truth is None else not truth


def _and(values: Iterable[Any]) -> bool | None:
    unknown = False
    for value in values:
        truth = _truth(value)
        if truth is False:
            return False
        if truth is None:
            unknown = True
    return None if unknown else True


def _or(values: Iterable[Any]) -> bool | None:
    unknown = False
    for value in values:
        truth = _truth(value)
        if truth is True:
            return True
        if truth is None:
            unknown = True
    return None if unknown else False


def _compare(left: Any, op: ComparisonOp, right: Any) -> bool | None:
    """Compare two values with the given operator, three-valued."""
    if left is None or right is None:
        return None
    ordering = compare(left, right)
    if ordering is Ordering.INCOMPARABLE:
        # Values without a common representation are never equal.
        return op == ComparisonOp.NE
    if op == ComparisonOp.EQ:
        return ordering is Ordering.EQ
    elif op == ComparisonOp.NE:
        return ordering is not Ordering.EQ
    elif op == ComparisonOp.LT:
        return ordering is Ordering.LT
    elif op == ComparisonOp.LE:
        return ordering is not Ordering.GT
    elif op == ComparisonOp.GT:
        return ordering is Ordering.GT
    elif op == ComparisonOp.GE:
        return ordering is not Ordering.LT
    raise UnsupportedError(f"Unsupported comparison: {op.value}")


def _like(value: Any, pattern: Any, escape: str) -> bool | None:
    text, pattern_text = to_text(value), to_text(pattern)
    if text is None or pattern_text is None:
        return None
    return patterns.like(text, pattern_text, escape)


def _in(value: Any, options: list[Any]) -> bool | None:
    if value is None:
        return None
    unknown = False
    for option in options:
        equal = values_equal(value, option)
        if equal:
            return True
        if equal is None:
            unknown = True
    return None if unknown else False


def _between(value: Any, low: Any, high: Any) -> bool | None:
    return _and((_compare(value, ComparisonOp.GE, low), _compare(value, ComparisonOp.LE, high)))


def arithmetic(op: ArithmeticOp, left: Any, right: Any) -> Any:
    """Evaluate a binary arithmetic operator.

    Null propagates; division or modulo by zero gives Null. Integer
    operands stay integers except under ``/``, whose result is a Decimal
    carrying four more digits of scale than the dividend.
    """
    a, b = to_number(left), to_number(right)
    if a is None or b is None:
        return None
    if op == ArithmeticOp.ADD:
        return a + b
    if op == ArithmeticOp.SUB:
        return a - b
    if op == ArithmeticOp.MUL:
        return a * b

    if b == 0:
        return None
    da, db = Decimal(a), Decimal(b)
    if op == ArithmeticOp.DIV:
        scale = max(-da.as_tuple().exponent, 0) + DIV_PRECISION_INCREMENT  # type: ignore[operator]
        return (da / db).quantize(Decimal(1).scaleb(-scale), rounding=ROUND_HALF_UP)
    if op == ArithmeticOp.INT_DIV:
        return int((da / db).to_integral_value(rounding=ROUND_DOWN))
    # MOD keeps the sign of the dividend.
    remainder = da % db
    if isinstance(a, int) and isinstance(b, int):
        return int(remainder)
    return remainder


class QueryExecutor:
    """Executes logical plans against the catalog and row store.

    The executor converts logical plans into physical operator trees
    and executes them using the Volcano iterator model. Every
    ``EngineError`` raised while planning or running a statement is
    returned as an error result.
    """

    def __init__(
        self,
        catalog: Catalog,
        storage: StorageEngine,
        config: EngineConfig | None = None,
    ) -> None:
        self._catalog = catalog
        self._storage = storage
        self._config = config or EngineConfig()
        self._nulls_low = self._config.null_ordering == "first"

    def execute(self, plan: LogicalPlan, current_database: str | None = None) -> ExecutionResult:
        """Execute a logical plan.

        Args:
            plan: The logical plan to execute.
            current_database: The session's current database, if any.

        Returns:
            ExecutionResult with rows, a mutation count or an error.
        """
        try:
            return self._dispatch(plan, current_database)
        except EngineError as e:
            return ExecutionResult.from_error(e)

    def _dispatch(self, plan: LogicalPlan, current_database: str | None) -> ExecutionResult:
        if isinstance(plan, (Project, Sort, Limit, Filter, Distinct, TableScan, SingleRow)):
            return self._execute_query(plan, current_database)
        elif isinstance(plan, InsertPlan):
            return self._execute_insert(plan, current_database)
        elif isinstance(plan, UpdatePlan):
            return self._execute_update(plan, current_database)
        elif isinstance(plan, DeletePlan):
            return self._execute_delete(plan, current_database)
        elif isinstance(plan, CreateTablePlan):
            return self._execute_create_table(plan, current_database)
        elif isinstance(plan, DropTablePlan):
            return self._execute_drop_table(plan, current_database)
        elif isinstance(plan, DescribePlan):
            return self._execute_describe(plan, current_database)
        elif isinstance(plan, CreateDatabasePlan):
            created = self._catalog.create_database(plan.name, plan.if_not_exists)
            return _ddl_result(created, affected=1, skipped=f"Database '{plan.name}' exists")
        elif isinstance(plan, DropDatabasePlan):
            dropped = self._catalog.drop_database(plan.name, plan.if_exists)
            return _ddl_result(dropped, affected=0, skipped=f"Database '{plan.name}' doesn't exist")
        elif isinstance(plan, UseDatabasePlan):
            database = self._catalog.get_database(plan.name)
            return ExecutionResult(message="Database changed", database=database.name)
        elif isinstance(plan, ShowPlan):
            return self._execute_show(plan, current_database)
        raise UnsupportedError(f"Unsupported plan type: {type(plan).__name__}")

    # Queries

    def _execute_query(self, plan: LogicalPlan, current_database: str | None) -> ExecutionResult:
        """Execute a SELECT query."""
        operator, labels, _ = self._build_operator_tree(plan, current_database)
        rows = list(operator)
        return ExecutionResult(rows=rows, columns=labels)

    def _build_operator_tree(
        self, plan: LogicalPlan, current_database: str | None
    ) -> tuple[Operator, list[str], Scope]:
        """Build a physical operator tree from a logical plan.

        Returns:
            The root operator, the labels of the rows it yields and the
            source columns visible to expressions above it.
        """
        if isinstance(plan, TableScan):
            table = self._catalog.get_table(
                self._database_for(plan.database, current_database), plan.table_name
            )
            scope = Scope.of_table(table, plan.alias)
            return SeqScanOperator(table, self._storage), table.column_names, scope
        elif isinstance(plan, SingleRow):
            return SingleRowOperator(), [], Scope()
        elif isinstance(plan, Filter):
            child, labels, scope = self._build_operator_tree(plan.input, current_database)
            predicate = ExpressionCompiler(scope).compile(plan.predicate)
            return FilterOperator(child=child, predicate=predicate), labels, scope
        elif isinstance(plan, Sort):
            child, labels, scope = self._build_operator_tree(plan.input, current_database)
            compiler = ExpressionCompiler(scope)
            keys = [compiler.compile(item.expr) for item in plan.order_by]
            ascending = [item.ascending for item in plan.order_by]
            sort = SortOperator(
                child=child, keys=keys, ascending=ascending, nulls_low=self._nulls_low
            )
            return sort, labels, scope
        elif isinstance(plan, Project):
            child, _, scope = self._build_operator_tree(plan.input, current_database)
            compiler = ExpressionCompiler(scope)
            labels = []
            outputs: list[Compiled] = []
            for item in plan.items:
                if item.is_star:
                    if not scope.columns:
                        raise InvalidStatementError("No tables used")
                    for pos, name in enumerate(scope.columns):
                        labels.append(name)
                        outputs.append(functools.partial(_column_at, pos))
                else:
                    labels.append(item.label)
                    outputs.append(compiler.compile(item.expr))  # type: ignore[arg-type]
            return ProjectOperator(child=child, labels=labels, outputs=outputs), labels, scope
        elif isinstance(plan, Distinct):
            child, labels, scope = self._build_operator_tree(plan.input, current_database)
            return DistinctOperator(child=child), labels, scope
        elif isinstance(plan, Limit):
            child, labels, scope = self._build_operator_tree(plan.input, current_database)
            limit = LimitOperator(child=child, limit=plan.count, offset=plan.offset)
            return limit, labels, scope
        raise UnsupportedError(f"Unsupported plan node: {type(plan).__name__}")

    # DML

    def _execute_insert(self, plan: InsertPlan, current_database: str | None) -> ExecutionResult:
        """Execute an INSERT statement."""
        table = self._catalog.get_table(
            self._database_for(plan.database, current_database), plan.table_name
        )
        # Value expressions see no columns.
        compiler = ExpressionCompiler(Scope())
        tuples = [[compiler.compile(expr)([]) for expr in row] for row in plan.values]

        outcome = self._storage.insert(table, plan.columns, tuples)
        return ExecutionResult(
            affected_rows=outcome.count,
            last_insert_id=outcome.last_insert_id,
            message=f"{outcome.count} row(s) affected",
        )

    def _execute_update(self, plan: UpdatePlan, current_database: str | None) -> ExecutionResult:
        """Execute an UPDATE statement."""
        table = self._catalog.get_table(
            self._database_for(plan.database, current_database), plan.table_name
        )
        compiler = ExpressionCompiler(Scope.of_table(table))
        assignments = {name: compiler.compile(expr) for name, expr in plan.assignments.items()}
        predicate = self._compile_predicate(compiler, plan.predicate)

        count = self._storage.update(table, assignments, predicate)
        return ExecutionResult(affected_rows=count, message=f"{count} row(s) affected")

    def _execute_delete(self, plan: DeletePlan, current_database: str | None) -> ExecutionResult:
        """Execute a DELETE statement."""
        table = self._catalog.get_table(
            self._database_for(plan.database, current_database), plan.table_name
        )
        compiler = ExpressionCompiler(Scope.of_table(table))
        predicate = self._compile_predicate(compiler, plan.predicate)

        count = self._storage.delete(table, predicate)
        return ExecutionResult(affected_rows=count, message=f"{count} row(s) affected")

    def _compile_predicate(
        self, compiler: ExpressionCompiler, expr: Expression | None
    ) -> Callable[[list[Any]], bool] | None:
        if expr is None:
            return None
        compiled = compiler.compile(expr)
        return lambda row: _truth(compiled(row)) is True

    # DDL and catalog statements

    def _execute_create_table(
        self, plan: CreateTablePlan, current_database: str | None
    ) -> ExecutionResult:
        """Execute a CREATE TABLE statement."""
        columns = [
            Column(
                name=col.name,
                column_type=ColumnType.from_sql(col.type_name, col.type_params),
                nullable=col.nullable,
                default=col.default,
                has_default=col.has_default,
                primary_key=col.primary_key,
                auto_increment=col.auto_increment,
            )
            for col in plan.columns
        ]
        created = self._catalog.create_table(
            self._database_for(plan.database, current_database),
            plan.table_name,
            columns,
            primary_key=plan.primary_key,
            auto_increment_start=plan.auto_increment_start,
            if_not_exists=plan.if_not_exists,
        )
        return _ddl_result(created, affected=0, skipped=f"Table '{plan.table_name}' already exists")

    def _execute_drop_table(
        self, plan: DropTablePlan, current_database: str | None
    ) -> ExecutionResult:
        """Execute a DROP TABLE statement."""
        dropped = self._catalog.drop_table(
            self._database_for(plan.database, current_database),
            plan.table_name,
            if_exists=plan.if_exists,
        )
        return _ddl_result(dropped, affected=0, skipped=f"Unknown table '{plan.table_name}'")

    def _execute_describe(
        self, plan: DescribePlan, current_database: str | None
    ) -> ExecutionResult:
        table = self._catalog.get_table(
            self._database_for(plan.database, current_database), plan.table_name
        )
        labels = ["Field", "Type", "Null", "Key", "Default", "Extra"]
        rows = [Row(columns=labels, values=values) for values in table.describe()]
        return ExecutionResult(rows=rows, columns=labels)

    def _execute_show(self, plan: ShowPlan, current_database: str | None) -> ExecutionResult:
        if plan.kind is ShowKind.DATABASES:
            label = "Database"
            names = self._catalog.list_databases()
        else:
            database = self._catalog.get_database(
                self._database_for(plan.database, current_database)
            )
            label = f"Tables_in_{database.name}"
            names = self._catalog.list_tables(database.name)
        if plan.like is not None:
            names = [name for name in names if patterns.like(name, plan.like)]
        rows = [Row(columns=[label], values=[name]) for name in names]
        return ExecutionResult(rows=rows, columns=[label])

    def _database_for(self, explicit: str | None, current: str | None) -> str:
        database = explicit or current
        if database is None:
            raise NoDatabaseSelectedError("No database selected")
        return database


def _column_at(pos: int, row: list[Any]) -> Any:
    return row[pos]


def _ddl_result(applied: bool, affected: int, skipped: str) -> ExecutionResult:
    """Outcome of a DDL statement; IF [NOT] EXISTS no-ops report a note."""
    if applied:
        return ExecutionResult(affected_rows=affected, message=f"{affected} row(s) affected")
    return ExecutionResult(message=f"Note: {skipped}")
