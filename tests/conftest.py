"""Pytest configuration and fixtures for minisql tests."""

from __future__ import annotations

from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from minisql.adapters.inbound import SQLParser
from minisql.application import DatabaseEngine
from minisql.infrastructure.config import Config, EngineConfig
from minisql.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def test_config() -> Config:
    """Provide a test configuration with a short lock timeout."""
    return Config(engine=EngineConfig(lock_timeout_seconds=2.0))


@pytest.fixture
def parser() -> SQLParser:
    """Create a SQL parser for testing."""
    return SQLParser()


@pytest.fixture
def engine(
    test_config: Config, metrics_registry: MetricsRegistry
) -> Generator[DatabaseEngine, None, None]:
    """Provide a started engine with database ``shop`` selected."""
    db = DatabaseEngine(config=test_config, metrics=metrics_registry)
    db.start()
    db.execute("CREATE DATABASE shop")
    db.execute("USE shop")
    yield db
    db.stop()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
