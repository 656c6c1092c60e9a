"""Prometheus metrics for the query engine."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all query engine metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Statement metrics
        self.statements_total = Counter(
            "minisql_statements_total",
            "Total number of statements executed",
            ["statement", "status"],  # status: success, error
            registry=self._registry,
        )

        self.statement_latency_seconds = Histogram(
            "minisql_statement_latency_seconds",
            "Statement latency in seconds",
            ["statement"],  # select, insert, update, delete, create_table, ...
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
            registry=self._registry,
        )

        self.rows_affected_total = Counter(
            "minisql_rows_affected_total",
            "Total rows inserted, updated or deleted",
            ["statement"],
            registry=self._registry,
        )

        self.errors_total = Counter(
            "minisql_errors_total",
            "Total statement errors by kind",
            ["kind"],
            registry=self._registry,
        )

        # Catalog metrics
        self.databases = Gauge(
            "minisql_databases",
            "Number of databases in the catalog",
            registry=self._registry,
        )

        self.tables = Gauge(
            "minisql_tables",
            "Number of tables across all databases",
            registry=self._registry,
        )

        # Session metrics
        self.sessions_active = Gauge(
            "minisql_sessions_active",
            "Number of open sessions",
            registry=self._registry,
        )

        # Lock metrics
        self.lock_wait_seconds = Histogram(
            "minisql_lock_wait_seconds",
            "Time spent waiting for database locks",
            buckets=(0.0001, 0.001, 0.01, 0.1, 0.5, 1.0, 5.0),
            registry=self._registry,
        )

        # Engine info
        self.info = Info(
            "minisql_engine",
            "Query engine information",
            registry=self._registry,
        )


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up the Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from minisql import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
