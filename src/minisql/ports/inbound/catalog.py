"""Catalog port for schema metadata.

This inbound port defines the contract for the registry of databases,
tables and column definitions. Row data lives in the storage engine.

Key responsibilities:
- Create, look up and drop databases (drop cascades to tables)
- Create, look up and drop tables within a database
- Validate table definitions before registering them
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import Protocol, Sequence

from minisql.domain.entities import Column, Database, Table


@dataclass
class CatalogStats:
    """Statistics for catalog monitoring."""

    databases: int
    tables: int


class Catalog(Protocol):
    """Protocol for the schema catalog."""

    @abstractmethod
    def create_database(self, name: str, if_not_exists: bool = False) -> bool:
        """Register a database.

        Returns:
            True if created, False if it existed and ``if_not_exists`` is set.

        Raises:
            DuplicateDatabaseError: If the database exists.
        """
        ...

    @abstractmethod
    def drop_database(self, name: str, if_exists: bool = False) -> bool:
        """Remove a database and all of its tables.

        Raises:
            NoSuchDatabaseError: If absent and ``if_exists`` is not set.
        """
        ...

    @abstractmethod
    def get_database(self, name: str) -> Database:
        """Look up a database.

        Raises:
            NoSuchDatabaseError: If absent.
        """
        ...

    @abstractmethod
    def database_exists(self, name: str) -> bool:
        ...

    @abstractmethod
    def list_databases(self) -> list[str]:
        ...

    @abstractmethod
    def create_table(
        self,
        database: str,
        name: str,
        columns: Sequence[Column],
        primary_key: Sequence[str] = (),
        auto_increment_start: int = 1,
        if_not_exists: bool = False,
    ) -> bool:
        """Validate and register a table.

        Raises:
            NoSuchDatabaseError: If the database is absent.
            DuplicateTableError: If the table exists.
            InvalidSchemaError: If the definition is inconsistent.
        """
        ...

    @abstractmethod
    def drop_table(self, database: str, name: str, if_exists: bool = False) -> bool:
        """Remove a table and its rows.

        Raises:
            NoSuchTableError: If absent and ``if_exists`` is not set.
        """
        ...

    @abstractmethod
    def get_table(self, database: str, name: str) -> Table:
        """Look up a table.

        Raises:
            NoSuchDatabaseError, NoSuchTableError
        """
        ...

    @abstractmethod
    def list_tables(self, database: str) -> list[str]:
        ...

    @abstractmethod
    def stats(self) -> CatalogStats:
        ...
