"""Inbound adapters for the query engine.

Inbound adapters handle incoming requests and convert them to
internal domain operations.

Exports:
    SQL Parser:
        - SQLParser: Parser that converts SQL strings to logical plans
        - LogicalPlan: Base class for all logical plan nodes
        - ParseError: Error for invalid SQL
"""

from minisql.adapters.inbound.sql_parser import (
    ArithmeticExpr,
    ArithmeticOp,
    BetweenExpr,
    ColumnDef,
    ColumnExpr,
    ColumnRef,
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
    OrderByItem,
    ParseError,
    Project,
    SelectItem,
    ShowKind,
    ShowPlan,
    SingleRow,
    Sort,
    SQLParser,
    TableScan,
    UpdatePlan,
    UseDatabasePlan,
)

__all__ = [
    # SQL Parser
    "SQLParser",
    "ParseError",
    # Types
    "ArithmeticOp",
    "ComparisonOp",
    "LogicalOp",
    "ShowKind",
    # Expressions
    "Expression",
    "ColumnRef",
    "ColumnExpr",
    "LiteralExpr",
    "NowExpr",
    "ComparisonExpr",
    "LikeExpr",
    "InExpr",
    "BetweenExpr",
    "LogicalExpr",
    "ArithmeticExpr",
    "FunctionExpr",
    # Column/Table definitions
    "ColumnDef",
    "SelectItem",
    "OrderByItem",
    # Logical Plans
    "LogicalPlan",
    "TableScan",
    "SingleRow",
    "Filter",
    "Sort",
    "Project",
    "Distinct",
    "Limit",
    "InsertPlan",
    "UpdatePlan",
    "DeletePlan",
    "CreateTablePlan",
    "DropTablePlan",
    "DescribePlan",
    "CreateDatabasePlan",
    "DropDatabasePlan",
    "UseDatabasePlan",
    "ShowPlan",
]
