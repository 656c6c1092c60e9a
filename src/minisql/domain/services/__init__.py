"""Domain services for business logic.

Services implement the logic that doesn't naturally fit within a single
entity: the schema catalog, the row store, statement locking and the
expression helpers (LIKE patterns and the string function library).
"""

from minisql.domain.services import patterns, string_functions
from minisql.domain.services.catalog import InMemoryCatalog
from minisql.domain.services.lock_manager import LockManager, LockTimeoutError
from minisql.domain.services.row_store import RowStore

__all__ = [
    "InMemoryCatalog",
    "LockManager",
    "LockTimeoutError",
    "RowStore",
    "patterns",
    "string_functions",
]
