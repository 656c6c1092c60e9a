"""In-memory schema catalog.

Holds every database and its tables. Table definitions are validated here
before registration:

    - column names are unique within the table
    - at most one PRIMARY KEY declaration (inline or table-level)
    - primary-key columns exist and are implicitly NOT NULL
    - at most one AUTO_INCREMENT column, of INT type, part of the key
    - declared defaults are valid values of their column's type

Dropping a database drops its tables with it.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Sequence

from minisql.domain.entities import AutoIncrementCounter, Column, Database, Table
from minisql.domain.errors import (
    DuplicateDatabaseError,
    DuplicateTableError,
    EngineError,
    InvalidSchemaError,
    NoSuchDatabaseError,
    NoSuchTableError,
)
from minisql.domain.value_objects import CURRENT_TIMESTAMP, SqlType, coerce
from minisql.ports.inbound.catalog import CatalogStats

logger = logging.getLogger(__name__)


class InMemoryCatalog:
    """Catalog of databases and tables held in process memory."""

    def __init__(self) -> None:
        self._databases: dict[str, Database] = {}

    # Databases

    def create_database(self, name: str, if_not_exists: bool = False) -> bool:
        key = name.lower()
        if key in self._databases:
            if if_not_exists:
                return False
            raise DuplicateDatabaseError(
                f"Can't create database '{name}'; database exists"
            )
        self._databases[key] = Database(name=name)
        logger.info("Created database %s", name)
        return True

    def drop_database(self, name: str, if_exists: bool = False) -> bool:
        database = self._databases.pop(name.lower(), None)
        if database is None:
            if if_exists:
                return False
            raise NoSuchDatabaseError(
                f"Can't drop database '{name}'; database doesn't exist"
            )
        logger.info("Dropped database %s with %d table(s)", name, len(database.tables))
        return True

    def get_database(self, name: str) -> Database:
        database = self._databases.get(name.lower())
        if database is None:
            raise NoSuchDatabaseError(f"Unknown database '{name}'")
        return database

    def database_exists(self, name: str) -> bool:
        return name.lower() in self._databases

    def list_databases(self) -> list[str]:
        return sorted((db.name for db in self._databases.values()), key=str.lower)

    # Tables

    def create_table(
        self,
        database: str,
        name: str,
        columns: Sequence[Column],
        primary_key: Sequence[str] = (),
        auto_increment_start: int = 1,
        if_not_exists: bool = False,
    ) -> bool:
        db = self.get_database(database)
        if db.get_table(name) is not None:
            if if_not_exists:
                return False
            raise DuplicateTableError(f"Table '{name}' already exists")

        table = self._build_table(name, columns, primary_key, auto_increment_start)
        db.add_table(table)
        logger.info("Created table %s.%s", db.name, name)
        return True

    def drop_table(self, database: str, name: str, if_exists: bool = False) -> bool:
        db = self.get_database(database)
        if db.remove_table(name) is None:
            if if_exists:
                return False
            raise NoSuchTableError(f"Unknown table '{db.name}.{name}'")
        logger.info("Dropped table %s.%s", db.name, name)
        return True

    def get_table(self, database: str, name: str) -> Table:
        db = self.get_database(database)
        table = db.get_table(name)
        if table is None:
            raise NoSuchTableError(f"Table '{db.name}.{name}' doesn't exist")
        return table

    def list_tables(self, database: str) -> list[str]:
        return sorted(self.get_database(database).table_names(), key=str.lower)

    def stats(self) -> CatalogStats:
        return CatalogStats(
            databases=len(self._databases),
            tables=sum(len(db.tables) for db in self._databases.values()),
        )

    # Validation

    def _build_table(
        self,
        name: str,
        columns: Sequence[Column],
        primary_key: Sequence[str],
        auto_increment_start: int,
    ) -> Table:
        if not columns:
            raise InvalidSchemaError("A table must have at least one column")

        seen: set[str] = set()
        for col in columns:
            if col.name.lower() in seen:
                raise InvalidSchemaError(f"Duplicate column name '{col.name}'")
            seen.add(col.name.lower())

        inline_keys = [col.name for col in columns if col.primary_key]
        if inline_keys and primary_key or len(inline_keys) > 1:
            raise InvalidSchemaError("Multiple primary key defined")
        key_names = list(primary_key) or inline_keys
        if len({k.lower() for k in key_names}) != len(key_names):
            raise InvalidSchemaError("Duplicate column in primary key")
        for key in key_names:
            if key.lower() not in seen:
                raise InvalidSchemaError(f"Key column '{key}' doesn't exist in table")
        key_set = {k.lower() for k in key_names}

        auto_columns = [col for col in columns if col.auto_increment]
        if len(auto_columns) > 1:
            raise InvalidSchemaError(
                "Incorrect table definition; there can be only one auto column"
            )
        for col in auto_columns:
            if col.name.lower() not in key_set:
                raise InvalidSchemaError(
                    "Incorrect table definition; auto column must be defined as a key"
                )
            if col.column_type.base is not SqlType.INT:
                raise InvalidSchemaError(
                    f"Incorrect column specifier for column '{col.name}'"
                )
        if auto_increment_start < 1:
            raise InvalidSchemaError("AUTO_INCREMENT start must be positive")

        built = []
        for col in columns:
            in_key = col.name.lower() in key_set
            col = replace(
                col,
                primary_key=in_key,
                nullable=col.nullable and not in_key,
            )
            built.append(self._validate_default(col))

        # Keep the spelling used in the column definitions.
        key_spelling = tuple(
            next(col.name for col in built if col.name.lower() == key.lower())
            for key in key_names
        )
        return Table(
            name=name,
            columns=built,
            primary_key=key_spelling,
            auto_increment=AutoIncrementCounter(auto_increment_start),
        )

    def _validate_default(self, col: Column) -> Column:
        if not col.has_default:
            return col
        if col.auto_increment:
            raise InvalidSchemaError(f"Invalid default value for '{col.name}'")
        if col.default is None:
            if not col.nullable:
                raise InvalidSchemaError(f"Invalid default value for '{col.name}'")
            return col
        if col.default is CURRENT_TIMESTAMP:
            if col.column_type.base is not SqlType.DATETIME:
                raise InvalidSchemaError(f"Invalid default value for '{col.name}'")
            return col
        try:
            value = coerce(col.default, col.column_type, column=col.name)
        except EngineError as e:
            raise InvalidSchemaError(f"Invalid default value for '{col.name}'") from e
        return replace(col, default=value)
