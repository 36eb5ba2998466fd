"""Unit tests for configuration management."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from doc_query.infrastructure.config import (
    Config,
    ObservabilityConfig,
    QueryConfig,
    StoreConfig,
    get_config,
)


@pytest.mark.unit
class TestStoreConfig:
    """Tests for StoreConfig."""

    def test_defaults(self) -> None:
        config = StoreConfig()
        assert config.id_field == "_id"
        assert config.created_at_field == "createdAt"
        assert config.updated_at_field == "updatedAt"

    def test_empty_field_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            StoreConfig(id_field="")


@pytest.mark.unit
class TestQueryConfig:
    """Tests for QueryConfig."""

    def test_defaults(self) -> None:
        config = QueryConfig()
        assert config.max_take is None
        assert config.slow_query_threshold_ms == 100.0

    def test_max_take_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            QueryConfig(max_take=0)


@pytest.mark.unit
class TestObservabilityConfig:
    """Tests for ObservabilityConfig."""

    def test_defaults(self) -> None:
        config = ObservabilityConfig()
        assert config.log_level == "INFO"
        assert config.log_format == "json"
        assert config.metrics_enabled is True
        assert config.otel_endpoint is None

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            ObservabilityConfig(log_level="VERBOSE")


@pytest.mark.unit
class TestConfig:
    """Tests for the top-level Config."""

    def test_defaults(self) -> None:
        config = Config()
        assert isinstance(config.store, StoreConfig)
        assert isinstance(config.query, QueryConfig)
        assert isinstance(config.observability, ObservabilityConfig)

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test nested values are read from prefixed environment variables."""
        monkeypatch.setenv("DOC_QUERY_QUERY__MAX_TAKE", "25")
        monkeypatch.setenv("DOC_QUERY_STORE__ID_FIELD", "uid")
        monkeypatch.setenv("DOC_QUERY_OBSERVABILITY__LOG_FORMAT", "console")

        config = Config()

        assert config.query.max_take == 25
        assert config.store.id_field == "uid"
        assert config.observability.log_format == "console"

    def test_get_config_is_cached(self) -> None:
        get_config.cache_clear()
        try:
            assert get_config() is get_config()
        finally:
            get_config.cache_clear()
