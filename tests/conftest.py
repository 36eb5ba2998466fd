"""Pytest configuration and fixtures for doc_query tests."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Generator

import pytest
from prometheus_client import CollectorRegistry

from doc_query.adapters import InMemoryRecordStore
from doc_query.application import DocumentService, MutationEngine, QueryEngine
from doc_query.infrastructure.metrics import MetricsRegistry


class FixedClock:
    """Deterministic clock; only tick() moves it forward."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.reads = 0

    def __call__(self) -> datetime:
        self.reads += 1
        return self.now

    def tick(self, seconds: int = 1) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


class DataFactory:
    """Builds user, folder and document bodies shaped like the ODM suites' data."""

    @staticmethod
    def name(prefix: str = "Test") -> str:
        return f"{prefix}-{uuid.uuid4()}"

    def user(self, **overrides: Any) -> dict[str, Any]:
        user = {
            "name": self.name("User"),
            "email": f"user-{uuid.uuid4()}@example.com",
            "age": 30,
            "active": True,
            "tags": [],
        }
        user.update(overrides)
        return user

    def folder(self, owner_id: str, **overrides: Any) -> dict[str, Any]:
        name = self.name("Folder")
        folder = {"name": name, "ownerId": owner_id, "path": f"/{name}"}
        folder.update(overrides)
        return folder

    def document(self, owner_id: str, folder_id: str, **overrides: Any) -> dict[str, Any]:
        document = {
            "name": self.name("Document"),
            "content": "This is a test document content",
            "ownerId": owner_id,
            "folderId": folder_id,
            "tags": ["test"],
            "metadata": {
                "fileSize": 1024,
                "fileType": "txt",
                "version": "1.0",
                "status": "draft",
            },
            "location": {"type": "Point", "coordinates": [12.5, 41.9]},
        }
        document.update(overrides)
        return document


@pytest.fixture
def clock() -> FixedClock:
    """Provide a deterministic clock."""
    return FixedClock()


@pytest.fixture
def store(clock: FixedClock) -> Generator[InMemoryRecordStore, None, None]:
    """Provide an opened in-memory record store."""
    with InMemoryRecordStore(clock=clock) as s:
        yield s


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def query_engine(
    store: InMemoryRecordStore, metrics_registry: MetricsRegistry
) -> QueryEngine:
    return QueryEngine(store, metrics=metrics_registry)


@pytest.fixture
def mutation_engine(
    query_engine: QueryEngine, clock: FixedClock, metrics_registry: MetricsRegistry
) -> MutationEngine:
    return MutationEngine(query_engine, clock=clock, metrics=metrics_registry)


@pytest.fixture
def service(
    store: InMemoryRecordStore,
    query_engine: QueryEngine,
    mutation_engine: MutationEngine,
) -> DocumentService:
    return DocumentService(
        store, query_engine=query_engine, mutation_engine=mutation_engine
    )


@pytest.fixture
def factory() -> DataFactory:
    return DataFactory()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "property: Property-style invariant checks")
