"""Configuration management for the query engine."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineConfig(BaseModel):
    """Statement execution configuration."""

    default_database: str | None = Field(
        default=None, description="Database selected for new sessions"
    )
    sql_dialect: str = Field(default="mysql", description="sqlglot dialect used for parsing")
    null_ordering: Literal["first", "last"] = Field(
        default="first", description="Whether NULL sorts as the lowest or highest value"
    )
    varchar_overflow: Literal["error", "truncate"] = Field(
        default="error", description="Policy for text longer than VARCHAR(n)"
    )
    lock_timeout_seconds: float | None = Field(
        default=30.0, gt=0, description="Max wait for a database lock (None waits forever)"
    )


class FormatterConfig(BaseModel):
    """Result rendering configuration."""

    table_format: str = Field(default="psql", description="tabulate table format")
    null_text: str = Field(default="NULL", description="Rendering of NULL cells")


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    metrics_enabled: bool = Field(default=False, description="Expose Prometheus metrics")
    metrics_port: int = Field(default=8001, ge=1, le=65535, description="Prometheus metrics port")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="minisql", description="Service name for tracing")


class Config(BaseSettings):
    """Main configuration for the query engine."""

    model_config = SettingsConfigDict(
        env_prefix="MINISQL_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    engine: EngineConfig = Field(default_factory=EngineConfig)
    formatter: FormatterConfig = Field(default_factory=FormatterConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
