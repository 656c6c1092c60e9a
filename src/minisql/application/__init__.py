"""Application layer for the query engine.

The application layer orchestrates domain logic to fulfill use cases:
it runs parsed statements against the catalog and row store and renders
their results.

Exports:
    DatabaseEngine:
        - DatabaseEngine: Main entry point for the engine
        - SessionState: Per-session state (current database)
    Executor:
        - QueryExecutor: Executes SQL plans using Volcano iterator model
        - ExecutionResult: Result of statement execution
        - Row: A row of data
        - Operator: Base class for executor operators
    Formatter:
        - ResultFormatter: Renders results as text grids
"""

from minisql.application.database_engine import DatabaseEngine, SessionState
from minisql.application.executor import (
    DistinctOperator,
    ExecutionResult,
    FilterOperator,
    LimitOperator,
    Operator,
    ProjectOperator,
    QueryExecutor,
    Row,
    SeqScanOperator,
    SingleRowOperator,
    SortOperator,
)
from minisql.application.formatter import ResultFormatter

__all__ = [
    "DatabaseEngine",
    "SessionState",
    "QueryExecutor",
    "ExecutionResult",
    "Row",
    "Operator",
    "SeqScanOperator",
    "SingleRowOperator",
    "FilterOperator",
    "SortOperator",
    "ProjectOperator",
    "DistinctOperator",
    "LimitOperator",
    "ResultFormatter",
]
