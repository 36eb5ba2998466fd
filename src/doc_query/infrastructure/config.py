"""Configuration management for the query engine."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreConfig(BaseModel):
    """Record store configuration."""

    id_field: str = Field(default="_id", min_length=1, description="Primary key field name")
    created_at_field: str = Field(
        default="createdAt", min_length=1, description="Creation timestamp field name"
    )
    updated_at_field: str = Field(
        default="updatedAt", min_length=1, description="Modification timestamp field name"
    )


class QueryConfig(BaseModel):
    """Query evaluation configuration."""

    max_take: int | None = Field(
        default=None, ge=1, description="Upper bound applied to every page size"
    )
    slow_query_threshold_ms: float = Field(
        default=100.0, ge=0, description="Queries slower than this are logged as slow"
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    metrics_enabled: bool = Field(default=True, description="Record Prometheus metrics")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="doc_query", description="Service name for tracing")


class Config(BaseSettings):
    """Main configuration for the query engine."""

    model_config = SettingsConfigDict(
        env_prefix="DOC_QUERY_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    store: StoreConfig = Field(default_factory=StoreConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
