"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: APIs offered to the executor (Catalog, StorageEngine)

Domain services implement these ports with concrete functionality.
"""

from minisql.ports.inbound import (
    Catalog,
    CatalogStats,
    InsertOutcome,
    RowExpression,
    RowPredicate,
    StorageEngine,
    StorageStats,
)

__all__ = [
    "Catalog",
    "CatalogStats",
    "InsertOutcome",
    "RowExpression",
    "RowPredicate",
    "StorageEngine",
    "StorageStats",
]
