"""Domain entities for the query engine.

Entities are objects with identity that have a lifecycle. Unlike value objects,
two entities with the same attributes may not be equal if they have different
identities.

Exports:
    - Column: Column definition (type, nullability, default, key flags)
    - Table: Ordered columns, row arena, primary-key index
    - AutoIncrementCounter: Per-table id generator
    - Database: Named namespace of tables
"""

from minisql.domain.entities.table import (
    AutoIncrementCounter,
    Column,
    Database,
    Table,
)

__all__ = [
    "AutoIncrementCounter",
    "Column",
    "Database",
    "Table",
]
