"""Inbound ports - API contracts for the query engine.

Inbound ports define the interfaces that the executor uses to reach
schema metadata and row data.
"""

from minisql.ports.inbound.catalog import Catalog, CatalogStats
from minisql.ports.inbound.storage_engine import (
    InsertOutcome,
    RowExpression,
    RowPredicate,
    StorageEngine,
    StorageStats,
)

__all__ = [
    # Catalog
    "Catalog",
    "CatalogStats",
    # Storage Engine
    "InsertOutcome",
    "RowExpression",
    "RowPredicate",
    "StorageEngine",
    "StorageStats",
]
