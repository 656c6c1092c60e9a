"""Integration tests for DatabaseEngine."""

from __future__ import annotations

import threading
from datetime import datetime
from decimal import Decimal

import pytest

from minisql.application import DatabaseEngine, ResultFormatter
from minisql.domain.errors import ErrorKind
from minisql.domain.value_objects import LockMode
from minisql.infrastructure.config import Config, EngineConfig
from minisql.infrastructure.metrics import MetricsRegistry


def _sample(metrics: MetricsRegistry, name: str, labels: dict[str, str] | None = None) -> float:
    value = metrics._registry.get_sample_value(name, labels or {})
    return value or 0.0


@pytest.mark.integration
class TestDatabaseEngine:
    """Test cases for DatabaseEngine lifecycle and sessions."""

    def test_create_and_start(self, metrics_registry: MetricsRegistry) -> None:
        """Test creating and starting the engine."""
        with DatabaseEngine(metrics=metrics_registry) as db:
            assert db.is_started
            stats = db.get_stats()
            assert stats["started"] is True
            assert stats["sessions"] == 1
            assert stats["catalog"] == {"databases": 0, "tables": 0}

    def test_start_twice_fails(self, engine: DatabaseEngine) -> None:
        with pytest.raises(RuntimeError):
            engine.start()

    def test_execute_before_start(self, metrics_registry: MetricsRegistry) -> None:
        db = DatabaseEngine(metrics=metrics_registry)
        with pytest.raises(RuntimeError):
            db.execute("SELECT 1")

    def test_default_database(self, metrics_registry: MetricsRegistry) -> None:
        config = Config(engine=EngineConfig(default_database="library"))
        with DatabaseEngine(config=config, metrics=metrics_registry) as db:
            assert db.current_database() == "library"
            result = db.execute("CREATE TABLE books (title VARCHAR(100))")
            assert result.success

    def test_use_switches_database(self, engine: DatabaseEngine) -> None:
        engine.execute("CREATE DATABASE library")

        result = engine.execute("USE library")

        assert result.success
        assert result.message == "Database changed"
        assert engine.current_database() == "library"

    def test_use_unknown_database(self, engine: DatabaseEngine) -> None:
        result = engine.execute("USE nowhere")

        assert result.error_kind is ErrorKind.NO_SUCH_DATABASE
        assert engine.current_database() == "shop"

    def test_drop_current_database_clears_selection(self, engine: DatabaseEngine) -> None:
        other = engine.create_session(database="shop")

        assert engine.execute("DROP DATABASE shop").success

        assert engine.current_database() is None
        assert engine.current_database(other) == "shop"
        result = engine.execute("SELECT * FROM cats")
        assert result.error_kind is ErrorKind.NO_DATABASE_SELECTED

    def test_sessions_are_independent(self, engine: DatabaseEngine) -> None:
        engine.execute("CREATE DATABASE library")
        session = engine.create_session()

        engine.execute("USE library", session_id=session)

        assert engine.current_database(session) == "library"
        assert engine.current_database() == "shop"

    def test_close_session(self, engine: DatabaseEngine) -> None:
        session = engine.create_session()
        engine.close_session(session)

        with pytest.raises(KeyError):
            engine.execute("SELECT 1", session_id=session)

    def test_parse_error_is_a_result(self, engine: DatabaseEngine) -> None:
        result = engine.execute("SELEC nonsense")

        assert not result.success
        assert result.error_kind in (ErrorKind.PARSE_ERROR, ErrorKind.UNSUPPORTED)

    def test_execute_script(self, engine: DatabaseEngine) -> None:
        results = engine.execute_script(
            """
            CREATE TABLE cats (name VARCHAR(50), age INT);
            INSERT INTO cats VALUES ('Ringo', 4), ('Cindy', 10);
            SELECT name FROM cats WHERE age > 5;
            """
        )

        assert [r.success for r in results] == [True, True, True]
        assert results[2].tuples() == [("Cindy",)]

    def test_execute_many_continues_after_error(self, engine: DatabaseEngine) -> None:
        results = engine.execute_many(
            ["CREATE TABLE t (a INT)", "INSERT INTO t VALUES ('x')", "INSERT INTO t VALUES (1)"]
        )

        assert [r.success for r in results] == [True, False, True]
        assert results[1].error_kind is ErrorKind.TYPE_MISMATCH

    def test_stop_discards_data(self, engine: DatabaseEngine) -> None:
        engine.execute("CREATE TABLE t (a INT)")
        engine.stop()
        engine.start()

        assert engine.execute("SHOW DATABASES").rows == []


@pytest.mark.integration
class TestDatabaseEngineSQL:
    """End-to-end statement behaviour."""

    @pytest.fixture
    def books(self, engine: DatabaseEngine) -> DatabaseEngine:
        engine.execute(
            "CREATE TABLE books ("
            "book_id INT AUTO_INCREMENT PRIMARY KEY, "
            "title VARCHAR(100), "
            "author_fname VARCHAR(100), "
            "author_lname VARCHAR(100), "
            "pages INT)"
        )
        engine.execute(
            "INSERT INTO books (title, author_fname, author_lname, pages) VALUES "
            "('The Namesake', 'Jhumpa', 'Lahiri', 291), "
            "('Norse Mythology', 'Neil', 'Gaiman', 304), "
            "('American Gods', 'Neil', 'Gaiman', 634)"
        )
        return engine

    def test_auto_increment_ids_never_reused(self, engine: DatabaseEngine) -> None:
        engine.execute(
            "CREATE TABLE people (id INT AUTO_INCREMENT PRIMARY KEY, name VARCHAR(50))"
        )
        engine.execute("INSERT INTO people (name) VALUES ('a'), ('b'), ('c')")
        engine.execute("DELETE FROM people WHERE id = 3")

        result = engine.execute("INSERT INTO people (name) VALUES ('d')")

        assert result.last_insert_id == 4
        ids = engine.execute("SELECT id FROM people").tuples()
        assert ids == [(1,), (2,), (4,)]

    def test_distinct_pairs(self, engine: DatabaseEngine) -> None:
        engine.execute("CREATE TABLE authors (fname VARCHAR(50), lname VARCHAR(50))")
        engine.execute(
            "INSERT INTO authors VALUES ('Dan', 'Harris'), ('Freida', 'Harris'), ('Dan', 'Harris')"
        )

        result = engine.execute("SELECT DISTINCT fname, lname FROM authors")

        assert result.tuples() == [("Dan", "Harris"), ("Freida", "Harris")]

    def test_order_by_desc_limit_one(self, books: DatabaseEngine) -> None:
        result = books.execute("SELECT pages FROM books ORDER BY pages DESC LIMIT 1")

        assert result.tuples() == [(634,)]

    def test_like_patterns(self, engine: DatabaseEngine) -> None:
        engine.execute("CREATE TABLE names (name VARCHAR(50))")
        engine.execute(
            "INSERT INTO names VALUES ('Dan'), ('David'), ('Linda'), ('100% Dan')"
        )

        prefix = engine.execute("SELECT name FROM names WHERE name LIKE 'da%'")
        contains = engine.execute("SELECT name FROM names WHERE name LIKE '%da%'")
        percent = engine.execute("SELECT name FROM names WHERE name LIKE '%\\%%'")

        assert prefix.tuples() == [("Dan",), ("David",)]
        assert {row[0] for row in contains.rows} >= {"Dan", "David", "Linda"}
        assert percent.tuples() == [("100% Dan",)]

    def test_negated_predicates(self, engine: DatabaseEngine) -> None:
        engine.execute("CREATE TABLE people (name VARCHAR(20), age INT)")
        engine.execute(
            "INSERT INTO people VALUES ('Dan', 20), ('Linda', 30), ('David', NULL)"
        )

        def names(where: str) -> list[tuple]:
            return engine.execute(f"SELECT name FROM people WHERE {where}").tuples()

        assert names("name NOT LIKE 'da%'") == [("Linda",)]
        assert names("name NOT LIKE 'd!%' ESCAPE '!'") == [
            ("Dan",), ("Linda",), ("David",)
        ]
        assert names("age NOT IN (20)") == [("Linda",)]
        assert names("age NOT BETWEEN 25 AND 35") == [("Dan",)]
        assert names("age IS NOT NULL") == [("Dan",), ("Linda",)]

    def test_update_shifting_primary_keys(self, engine: DatabaseEngine) -> None:
        engine.execute("CREATE TABLE t (id INT PRIMARY KEY, v VARCHAR(5))")
        engine.execute("INSERT INTO t VALUES (1, 'a'), (2, 'b')")

        assert engine.execute("UPDATE t SET id = id + 1").affected_rows == 2

        duplicate = engine.execute("INSERT INTO t VALUES (2, 'dup')")
        assert duplicate.error_kind is ErrorKind.DUPLICATE_KEY
        assert engine.execute("SELECT id, v FROM t ORDER BY id").tuples() == [
            (2, "a"),
            (3, "b"),
        ]

    def test_limit_past_end(self, books: DatabaseEngine) -> None:
        assert len(books.execute("SELECT * FROM books LIMIT 50").rows) == 3
        result = books.execute("SELECT * FROM books LIMIT 10 OFFSET 3")
        assert result.success
        assert result.rows == []

    def test_delete_all_keeps_table(self, books: DatabaseEngine) -> None:
        result = books.execute("DELETE FROM books")

        assert result.affected_rows == 3
        assert books.execute("SELECT * FROM books").rows == []
        assert books.execute("INSERT INTO books (title) VALUES ('Coraline')").success

    def test_drop_table(self, books: DatabaseEngine) -> None:
        assert books.execute("DROP TABLE books").success

        for sql in ("SELECT * FROM books", "INSERT INTO books (title) VALUES ('x')"):
            assert books.execute(sql).error_kind is ErrorKind.NO_SUCH_TABLE

    def test_round_trip(self, engine: DatabaseEngine) -> None:
        engine.execute(
            "CREATE TABLE items ("
            "id INT PRIMARY KEY, name VARCHAR(20), price DECIMAL(8, 2), "
            "note TEXT, added DATETIME)"
        )
        engine.execute(
            "INSERT INTO items VALUES "
            "(1, 'Widget', 9.99, 'it''s small', '2017-04-21 10:30:00'), "
            "(2, NULL, NULL, '', NULL)"
        )

        result = engine.execute("SELECT * FROM items")

        assert result.tuples() == [
            (1, "Widget", Decimal("9.99"), "it's small", datetime(2017, 4, 21, 10, 30)),
            (2, None, None, "", None),
        ]

    def test_defaults_and_not_null(self, engine: DatabaseEngine) -> None:
        engine.execute(
            "CREATE TABLE cats ("
            "name VARCHAR(50) NOT NULL, "
            "breed VARCHAR(50) DEFAULT 'unknown', "
            "created DATETIME DEFAULT NOW())"
        )

        missing = engine.execute("INSERT INTO cats (breed) VALUES ('Tabby')")
        explicit_null = engine.execute("INSERT INTO cats (name) VALUES (NULL)")
        ok = engine.execute("INSERT INTO cats (name) VALUES ('Ringo')")

        assert missing.error_kind is ErrorKind.MISSING_REQUIRED_COLUMN
        assert explicit_null.error_kind is ErrorKind.NULL_NOT_ALLOWED
        assert ok.success
        row = engine.execute("SELECT * FROM cats").rows[0]
        assert row["breed"] == "unknown"
        assert isinstance(row["created"], datetime)

    def test_value_too_long(self, engine: DatabaseEngine) -> None:
        engine.execute("CREATE TABLE codes (code VARCHAR(3))")

        result = engine.execute("INSERT INTO codes VALUES ('abcd')")

        assert result.error_kind is ErrorKind.VALUE_TOO_LONG

    def test_duplicate_key_is_atomic(self, engine: DatabaseEngine) -> None:
        engine.execute("CREATE TABLE t (id INT PRIMARY KEY)")
        engine.execute("INSERT INTO t VALUES (1)")

        result = engine.execute("INSERT INTO t VALUES (2), (1)")

        assert result.error_kind is ErrorKind.DUPLICATE_KEY
        assert engine.execute("SELECT id FROM t").tuples() == [(1,)]

    def test_invalid_schema(self, engine: DatabaseEngine) -> None:
        result = engine.execute("CREATE TABLE t (a INT, a INT)")

        assert result.error_kind is ErrorKind.INVALID_SCHEMA

    def test_duplicate_database(self, engine: DatabaseEngine) -> None:
        assert engine.execute("CREATE DATABASE shop").error_kind is ErrorKind.DUPLICATE_DATABASE

    def test_drop_unknown_database(self, engine: DatabaseEngine) -> None:
        result = engine.execute("DROP DATABASE nowhere")

        assert result.error_kind is ErrorKind.NO_SUCH_DATABASE

    def test_update_with_expression(self, books: DatabaseEngine) -> None:
        result = books.execute(
            "UPDATE books SET title = CONCAT(title, '!') WHERE author_lname = 'gaiman'"
        )

        assert result.affected_rows == 2
        titles = books.execute("SELECT title FROM books WHERE book_id > 1").tuples()
        assert titles == [("Norse Mythology!",), ("American Gods!",)]

    def test_formatted_output(self, books: DatabaseEngine) -> None:
        formatter = ResultFormatter(books.config.formatter)

        text = formatter.render(books.execute("SELECT title FROM books WHERE pages < 300"))

        assert "The Namesake" in text
        assert text.endswith("1 row in set")


@pytest.mark.integration
class TestDatabaseEngineObservability:
    """Metrics and locking."""

    def test_statement_metrics(
        self, engine: DatabaseEngine, metrics_registry: MetricsRegistry
    ) -> None:
        engine.execute("CREATE TABLE t (a INT)")
        engine.execute("INSERT INTO t VALUES (1), (2)")
        engine.execute("SELECT * FROM missing")

        assert _sample(
            metrics_registry,
            "minisql_statements_total",
            {"statement": "insert", "status": "success"},
        ) == 1.0
        assert _sample(
            metrics_registry, "minisql_rows_affected_total", {"statement": "insert"}
        ) == 2.0
        assert _sample(
            metrics_registry, "minisql_errors_total", {"kind": "NoSuchTable"}
        ) == 1.0
        assert _sample(metrics_registry, "minisql_tables") == 1.0
        assert _sample(metrics_registry, "minisql_databases") == 1.0

    def test_session_gauge(
        self, engine: DatabaseEngine, metrics_registry: MetricsRegistry
    ) -> None:
        session = engine.create_session()
        assert _sample(metrics_registry, "minisql_sessions_active") == 2.0

        engine.close_session(session)
        assert _sample(metrics_registry, "minisql_sessions_active") == 1.0

    def test_locks_released_after_statement(self, engine: DatabaseEngine) -> None:
        engine.execute("CREATE TABLE t (a INT)")
        engine.execute("INSERT INTO t VALUES ('bad')")

        assert engine._lock_manager.get_locks_held(1) == []

    def test_writer_waits_for_lock(self, metrics_registry: MetricsRegistry) -> None:
        config = Config(engine=EngineConfig(default_database="shop", lock_timeout_seconds=0.05))
        with DatabaseEngine(config=config, metrics=metrics_registry) as db:
            db.execute("CREATE TABLE t (a INT)")
            # Another owner holds the database for writing.
            db._lock_manager.acquire("other", ("database", "shop"), LockMode.EXCLUSIVE)

            result = db.execute("INSERT INTO t VALUES (1)")

            assert result.error_kind is ErrorKind.LOCK_TIMEOUT
            db._lock_manager.release("other", ("database", "shop"))
            assert db.execute("INSERT INTO t VALUES (1)").success

    def test_concurrent_inserts(self, engine: DatabaseEngine) -> None:
        engine.execute("CREATE TABLE t (id INT AUTO_INCREMENT PRIMARY KEY, n INT)")
        sessions = [engine.create_session(database="shop") for _ in range(4)]

        def worker(session_id: int) -> None:
            for i in range(25):
                engine.execute(f"INSERT INTO t (n) VALUES ({i})", session_id=session_id)

        threads = [threading.Thread(target=worker, args=(s,)) for s in sessions]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        ids = [row[0] for row in engine.execute("SELECT id FROM t").rows]
        assert sorted(ids) == list(range(1, 101))
