"""Unit tests for configuration module."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from minisql.infrastructure.config import (
    Config,
    EngineConfig,
    FormatterConfig,
    ObservabilityConfig,
)


@pytest.mark.unit
class TestConfig:
    """Tests for Config class."""

    def test_default_config(self) -> None:
        """Test default configuration values."""
        config = Config()

        assert config.engine.default_database is None
        assert config.engine.sql_dialect == "mysql"
        assert config.engine.null_ordering == "first"
        assert config.engine.varchar_overflow == "error"
        assert config.formatter.table_format == "psql"
        assert config.formatter.null_text == "NULL"
        assert config.observability.metrics_enabled is False

    def test_custom_engine_config(self) -> None:
        config = Config(engine=EngineConfig(default_database="shop", null_ordering="last"))

        assert config.engine.default_database == "shop"
        assert config.engine.null_ordering == "last"

    def test_invalid_null_ordering(self) -> None:
        with pytest.raises(ValidationError):
            EngineConfig(null_ordering="middle")

    def test_invalid_overflow_policy(self) -> None:
        with pytest.raises(ValidationError):
            EngineConfig(varchar_overflow="ignore")

    def test_invalid_lock_timeout(self) -> None:
        with pytest.raises(ValidationError):
            EngineConfig(lock_timeout_seconds=0)

    def test_invalid_metrics_port(self) -> None:
        with pytest.raises(ValidationError):
            ObservabilityConfig(metrics_port=70000)

    def test_formatter_config(self) -> None:
        assert FormatterConfig(table_format="grid").table_format == "grid"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested settings load from MINISQL_ variables."""
        monkeypatch.setenv("MINISQL_ENGINE__DEFAULT_DATABASE", "library")
        monkeypatch.setenv("MINISQL_OBSERVABILITY__LOG_LEVEL", "DEBUG")

        config = Config()

        assert config.engine.default_database == "library"
        assert config.observability.log_level == "DEBUG"
