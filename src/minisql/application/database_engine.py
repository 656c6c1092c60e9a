"""Database Engine - Unified entry point for the query engine.

This module provides the main DatabaseEngine class that orchestrates
all components: catalog, row store, SQL parsing, execution, locking
and observability.

Usage:
    from minisql.application import DatabaseEngine

    # Create and start the engine
    db = DatabaseEngine()
    db.start()

    # Execute SQL
    db.execute("CREATE DATABASE shop")
    db.execute("USE shop")
    db.execute("CREATE TABLE cats (cat_id INT AUTO_INCREMENT PRIMARY KEY, name VARCHAR(100))")
    db.execute("INSERT INTO cats (name) VALUES ('Boingo')")
    result = db.execute("SELECT * FROM cats")

    # Clean shutdown
    db.stop()
"""

from __future__ import annotations

import threading
import time
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Dict, Iterable

from sqlglot import exp

from minisql.adapters.inbound.sql_parser import (
    CreateDatabasePlan,
    CreateTablePlan,
    DeletePlan,
    DescribePlan,
    DropDatabasePlan,
    DropTablePlan,
    InsertPlan,
    LogicalPlan,
    ShowKind,
    ShowPlan,
    SQLParser,
    TableScan,
    UpdatePlan,
    UseDatabasePlan,
)
from minisql.application.executor import ExecutionResult, QueryExecutor
from minisql.domain.errors import EngineError
from minisql.domain.services import InMemoryCatalog, LockManager, RowStore
from minisql.domain.value_objects import LockMode, SessionId
from minisql.infrastructure.config import Config, get_config
from minisql.infrastructure.logging import get_logger, setup_logging, statement_context
from minisql.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from minisql.infrastructure.tracing import setup_tracing, trace_span

logger = get_logger(__name__)

Statement = str | LogicalPlan | exp.Expression

CATALOG_RESOURCE = ("catalog",)

_MUTATIONS = (InsertPlan, UpdatePlan, DeletePlan)


@dataclass
class SessionState:
    """State for an engine session (connection)."""

    session_id: SessionId
    current_database: str | None = None


class DatabaseEngine:
    """Main engine that orchestrates all components.

    The DatabaseEngine is the unified entry point for the query engine.
    It wires the catalog, row store, parser and executor, and provides a
    simple execute() interface for SQL statements.

    Features:
        - Sessions, each with its own current database (USE)
        - Readers-writer locking per database
        - Metrics, tracing and structured logs per statement

    Thread Safety:
        Multiple threads can share a DatabaseEngine instance. Each thread
        should use its own session; statements on the same database are
        serialized against writers.
    """

    def __init__(
        self,
        config: Config | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Engine configuration. Uses the global config if None.
            metrics: Metrics registry. Uses the global registry if None.
        """
        self._config = config or get_config()
        self._metrics = metrics or get_metrics()

        # Components (initialized on start)
        self._catalog: InMemoryCatalog | None = None
        self._storage: RowStore | None = None
        self._lock_manager: LockManager | None = None
        self._parser: SQLParser | None = None
        self._executor: QueryExecutor | None = None

        # Session management
        self._sessions_lock = threading.Lock()
        self._next_session_id = 1
        self._sessions: Dict[SessionId, SessionState] = {}
        self._default_session: SessionState | None = None

        # State
        self._started = False

    @classmethod
    def from_config(
        cls,
        config: Config | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> DatabaseEngine:
        """Build an engine and set up logging, tracing and metrics export."""
        config = config or get_config()
        obs = config.observability

        setup_logging(obs.log_level, obs.log_format)
        if obs.otel_endpoint:
            setup_tracing(obs.otel_service_name, obs.otel_endpoint)
        if metrics is None and obs.metrics_enabled:
            metrics = setup_metrics(obs.metrics_port)

        return cls(config=config, metrics=metrics)

    @property
    def config(self) -> Config:
        return self._config

    @property
    def is_started(self) -> bool:
        """Check if the engine is started."""
        return self._started

    @property
    def catalog(self) -> InMemoryCatalog:
        self._require_started()
        return self._catalog  # type: ignore[return-value]

    def start(self) -> None:
        """Start the engine.

        Must be called before executing any SQL. When a default database
        is configured, it is created if missing and selected for every
        new session.

        Raises:
            RuntimeError: If already started.
        """
        if self._started:
            raise RuntimeError("Database engine already started")

        engine_config = self._config.engine
        self._catalog = InMemoryCatalog()
        self._storage = RowStore(overflow=engine_config.varchar_overflow)
        self._lock_manager = LockManager(default_timeout=engine_config.lock_timeout_seconds)
        self._parser = SQLParser(dialect=engine_config.sql_dialect)
        self._executor = QueryExecutor(self._catalog, self._storage, engine_config)

        if engine_config.default_database:
            self._catalog.create_database(engine_config.default_database, if_not_exists=True)

        self._started = True
        self._default_session = self._create_session()
        self._update_catalog_gauges()

        logger.info(
            "engine_started",
            dialect=engine_config.sql_dialect,
            default_database=engine_config.default_database,
        )

    def stop(self) -> None:
        """Stop the engine and discard every database.

        Raises:
            RuntimeError: If not started.
        """
        self._require_started()

        with self._sessions_lock:
            for session_id in list(self._sessions):
                self._lock_manager.release_all(session_id)  # type: ignore[union-attr]
            self._sessions.clear()
        self._metrics.sessions_active.set(0)

        self._default_session = None
        self._catalog = None
        self._storage = None
        self._lock_manager = None
        self._parser = None
        self._executor = None
        self._started = False

        logger.info("engine_stopped")

    def execute(self, statement: Statement, session_id: int | None = None) -> ExecutionResult:
        """Execute one SQL statement.

        Args:
            statement: SQL text, a parsed plan, or a statement returned
                by the parser's ``split``.
            session_id: Optional session ID. Uses default session if None.

        Returns:
            ExecutionResult with rows, a mutation count or an error.

        Raises:
            RuntimeError: If the engine is not started.
            KeyError: If the session does not exist.
        """
        self._require_started()
        session = self._get_session(session_id)

        started = time.perf_counter()
        kind = "unknown"
        with statement_context(session_id=session.session_id):
            try:
                plan = (
                    statement
                    if isinstance(statement, LogicalPlan)
                    else self._parser.parse(statement)  # type: ignore[union-attr]
                )
                kind = statement_kind(plan)
                with trace_span(
                    "minisql.execute",
                    {
                        "db.system": "minisql",
                        "db.operation": kind,
                        "db.name": session.current_database,
                        "minisql.session_id": session.session_id,
                    },
                ) as span:
                    result = self._execute_plan(plan, session)
                    span.set_attribute("minisql.success", result.success)
            except EngineError as e:
                result = ExecutionResult.from_error(e)

            self._observe(kind, result, time.perf_counter() - started)
        return result

    def execute_many(
        self, statements: Iterable[Statement], session_id: int | None = None
    ) -> list[ExecutionResult]:
        """Execute multiple SQL statements in order.

        A failing statement does not stop the ones after it.
        """
        return [self.execute(sql, session_id) for sql in statements]

    def execute_script(self, script: str, session_id: int | None = None) -> list[ExecutionResult]:
        """Split a script into statements and execute each in order.

        A script that cannot be split returns a single error result.
        """
        self._require_started()
        try:
            statements = self._parser.split(script)  # type: ignore[union-attr]
        except EngineError as e:
            return [ExecutionResult.from_error(e)]
        return self.execute_many(statements, session_id)

    def create_session(self, database: str | None = None) -> int:
        """Create a new session.

        Args:
            database: Database to select initially; defaults to the
                configured default database.

        Returns:
            The session ID for the new session.
        """
        self._require_started()
        session = self._create_session()
        if database is not None:
            session.current_database = self._catalog.get_database(database).name  # type: ignore[union-attr]
        return session.session_id

    def close_session(self, session_id: int) -> None:
        """Close a session and release any locks it still holds."""
        with self._sessions_lock:
            session = self._sessions.pop(SessionId(session_id), None)
            if session is None:
                return
            if self._lock_manager is not None:
                self._lock_manager.release_all(session.session_id)
            self._metrics.sessions_active.set(len(self._sessions))
        logger.debug("session_closed", session_id=session_id)

    def current_database(self, session_id: int | None = None) -> str | None:
        """The database selected by USE in a session."""
        return self._get_session(session_id).current_database

    def get_stats(self) -> dict:
        """Get engine statistics.

        Returns:
            Dictionary with various statistics.
        """
        stats: dict = {
            "started": self._started,
            "sessions": len(self._sessions),
        }

        if self._catalog is not None:
            catalog_stats = self._catalog.stats()
            stats["catalog"] = {
                "databases": catalog_stats.databases,
                "tables": catalog_stats.tables,
            }

        if self._storage is not None:
            storage_stats = self._storage.stats()
            stats["storage"] = {
                "rows_inserted": storage_stats.rows_inserted,
                "rows_updated": storage_stats.rows_updated,
                "rows_deleted": storage_stats.rows_deleted,
            }

        return stats

    # Internals

    def _execute_plan(self, plan: LogicalPlan, session: SessionState) -> ExecutionResult:
        with ExitStack() as locks:
            for resource, mode in self._lock_requests(plan, session):
                waited = locks.enter_context(
                    self._lock_manager.hold(session.session_id, resource, mode)  # type: ignore[union-attr]
                )
                self._metrics.lock_wait_seconds.observe(waited)
            result = self._executor.execute(plan, session.current_database)  # type: ignore[union-attr]

        if result.success:
            if isinstance(plan, UseDatabasePlan):
                session.current_database = result.database
            elif isinstance(plan, DropDatabasePlan) and _same_name(
                plan.name, session.current_database
            ):
                session.current_database = None
        return result

    def _lock_requests(
        self, plan: LogicalPlan, session: SessionState
    ) -> list[tuple[tuple[str, ...], LockMode]]:
        """Locks a statement holds while it runs, in acquisition order."""
        if isinstance(plan, (CreateDatabasePlan, DropDatabasePlan)):
            return [(CATALOG_RESOURCE, LockMode.EXCLUSIVE)]

        requests = [(CATALOG_RESOURCE, LockMode.SHARED)]
        if isinstance(plan, UseDatabasePlan) or (
            isinstance(plan, ShowPlan) and plan.kind is ShowKind.DATABASES
        ):
            return requests

        database = getattr(plan, "database", None)
        if database is None:
            scan = _find_scan(plan)
            database = scan.database if scan is not None else None
        database = database or session.current_database
        if database is None:
            return requests

        writes = isinstance(plan, _MUTATIONS + (CreateTablePlan, DropTablePlan))
        mode = LockMode.EXCLUSIVE if writes else LockMode.SHARED
        requests.append((("database", database.lower()), mode))
        return requests

    def _observe(self, kind: str, result: ExecutionResult, elapsed: float) -> None:
        status = "success" if result.success else "error"
        self._metrics.statements_total.labels(statement=kind, status=status).inc()
        self._metrics.statement_latency_seconds.labels(statement=kind).observe(elapsed)

        if not result.success:
            kind_name = result.error_kind.value if result.error_kind else "Unknown"
            self._metrics.errors_total.labels(kind=kind_name).inc()
            logger.warning(
                "statement_failed",
                statement=kind,
                error_kind=kind_name,
                error=result.message,
            )
            return

        if kind in ("insert", "update", "delete"):
            self._metrics.rows_affected_total.labels(statement=kind).inc(result.affected_rows)
        if kind in ("create_database", "drop_database", "create_table", "drop_table"):
            self._update_catalog_gauges()
        logger.debug(
            "statement_executed",
            statement=kind,
            rows=len(result.rows),
            affected_rows=result.affected_rows,
            duration_ms=round(elapsed * 1000, 3),
        )

    def _update_catalog_gauges(self) -> None:
        if self._catalog is None:
            return
        stats = self._catalog.stats()
        self._metrics.databases.set(stats.databases)
        self._metrics.tables.set(stats.tables)

    def _create_session(self) -> SessionState:
        """Create a new session internally."""
        with self._sessions_lock:
            session = SessionState(
                session_id=SessionId(self._next_session_id),
                current_database=self._config.engine.default_database,
            )
            self._sessions[session.session_id] = session
            self._next_session_id += 1
            self._metrics.sessions_active.set(len(self._sessions))
        return session

    def _get_session(self, session_id: int | None) -> SessionState:
        """Get a session by ID or return default."""
        if session_id is None:
            if self._default_session is None:
                raise RuntimeError("Database engine not started")
            return self._default_session

        session = self._sessions.get(SessionId(session_id))
        if session is None:
            raise KeyError(f"Session {session_id} not found")
        return session

    def _require_started(self) -> None:
        if not self._started:
            raise RuntimeError("Database engine not started")

    def __enter__(self) -> "DatabaseEngine":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.stop()


def statement_kind(plan: LogicalPlan) -> str:
    """Metric and log label of a statement, e.g. ``select`` or ``create_table``."""
    if isinstance(plan, InsertPlan):
        return "insert"
    if isinstance(plan, UpdatePlan):
        return "update"
    if isinstance(plan, DeletePlan):
        return "delete"
    if isinstance(plan, CreateTablePlan):
        return "create_table"
    if isinstance(plan, DropTablePlan):
        return "drop_table"
    if isinstance(plan, CreateDatabasePlan):
        return "create_database"
    if isinstance(plan, DropDatabasePlan):
        return "drop_database"
    if isinstance(plan, UseDatabasePlan):
        return "use"
    if isinstance(plan, ShowPlan):
        return "show"
    if isinstance(plan, DescribePlan):
        return "describe"
    return "select"


def _find_scan(plan: LogicalPlan) -> TableScan | None:
    node: LogicalPlan | None = plan
    while node is not None:
        if isinstance(node, TableScan):
            return node
        node = getattr(node, "input", None)
    return None


def _same_name(a: str, b: str | None) -> bool:
    return b is not None and a.lower() == b.lower()
