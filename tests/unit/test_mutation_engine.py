"""Unit tests for the mutation engine."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from doc_query.adapters import InMemoryRecordStore
from doc_query.application import MutationEngine, QueryEngine
from doc_query.domain import InvalidExpression
from doc_query.domain.entities import Record
from doc_query.infrastructure.config import QueryConfig
from doc_query.infrastructure.metrics import MetricsRegistry
from doc_query.ports.outbound import StoreUnavailable


@pytest.fixture
def documents(store: InMemoryRecordStore) -> list[Record]:
    return [
        store.create("Document", {"name": "a", "metadata": {"status": "draft", "version": "1.0"}}),
        store.create("Document", {"name": "b", "metadata": {"status": "draft", "version": "1.1"}}),
        store.create("Document", {"name": "c", "metadata": {"status": "published"}}),
    ]


@pytest.mark.unit
class TestUpdateMany:
    """Tests for MutationEngine.update_many."""

    def test_returns_target_count_and_merges(
        self, mutation_engine: MutationEngine, documents: list[Record]
    ) -> None:
        count = mutation_engine.update_many(
            "Document", {"metadata.status": "draft"}, {"metadata.status": "review"}
        )
        assert count == 2
        assert documents[0].data["metadata"] == {"status": "review", "version": "1.0"}
        assert documents[1].data["metadata"] == {"status": "review", "version": "1.1"}
        assert documents[2]["metadata.status"] == "published"

    def test_count_includes_unchanged_values(
        self, mutation_engine: MutationEngine, documents: list[Record]
    ) -> None:
        assert mutation_engine.update_many("Document", {}, {"metadata.status": "published"}) == 3

    def test_no_match_returns_zero(
        self, mutation_engine: MutationEngine, documents: list[Record]
    ) -> None:
        assert mutation_engine.update_many("Document", {"name": "zzz"}, {"name": "y"}) == 0

    def test_shared_updated_at(
        self, mutation_engine: MutationEngine, documents: list[Record], clock
    ) -> None:
        clock.tick(60)
        reads_before = clock.reads
        mutation_engine.update_many("Document", {}, {"touched": True})
        assert clock.reads == reads_before + 1
        assert {d.updated_at for d in documents} == {clock.now}
        assert all(d.created_at < d.updated_at for d in documents)

    def test_untargeted_records_not_touched(
        self, mutation_engine: MutationEngine, documents: list[Record], clock
    ) -> None:
        original = documents[2].updated_at
        clock.tick()
        mutation_engine.update_many("Document", {"name": "a"}, {"x": 1})
        assert documents[2].updated_at == original
        assert "x" not in documents[2]

    def test_idempotent(
        self, mutation_engine: MutationEngine, store: InMemoryRecordStore, documents: list[Record]
    ) -> None:
        update = {"metadata.status": "review", "tags": ["x"]}
        mutation_engine.update_many("Document", {"name": "a"}, update)
        once = {k: v for k, v in documents[0].data.items() if k != "updatedAt"}
        mutation_engine.update_many("Document", {"name": "a"}, update)
        twice = {k: v for k, v in documents[0].data.items() if k != "updatedAt"}
        assert once == twice

    def test_invalid_update_changes_nothing(
        self, mutation_engine: MutationEngine, documents: list[Record], store
    ) -> None:
        before = [d.to_dict() for d in documents]
        with patch.object(store, "write_scope", wraps=store.write_scope) as scope:
            with pytest.raises(InvalidExpression):
                mutation_engine.update_many("Document", {}, {"$set": {"name": "x"}})
            with pytest.raises(InvalidExpression):
                mutation_engine.update_many("Document", {"a": {"$nope": 1}}, {"name": "x"})
        scope.assert_not_called()
        assert [d.to_dict() for d in documents] == before

    def test_failure_mid_scope_rolls_back(
        self, mutation_engine: MutationEngine, documents: list[Record], metrics_registry
    ) -> None:
        before = [d.to_dict() for d in documents]
        calls = {"n": 0}
        original_touch = Record.touch

        def failing_touch(record: Record, timestamp) -> None:
            calls["n"] += 1
            if calls["n"] == 2:
                raise RuntimeError("disk on fire")
            original_touch(record, timestamp)

        with patch.object(Record, "touch", failing_touch):
            with pytest.raises(RuntimeError):
                mutation_engine.update_many("Document", {}, {"name": "renamed"})

        assert [d.to_dict() for d in documents] == before
        assert metrics_registry.registry.get_sample_value(
            "docq_write_scopes_total", {"status": "rolled_back"}
        ) == 1.0

    def test_closed_store(self, clock) -> None:
        engine = MutationEngine(QueryEngine(InMemoryRecordStore()), clock=clock)
        with pytest.raises(StoreUnavailable):
            engine.update_many("Document", {}, {"name": "x"})


@pytest.mark.unit
class TestDeleteMany:
    """Tests for MutationEngine.delete_many."""

    def test_removes_matches(
        self,
        mutation_engine: MutationEngine,
        query_engine: QueryEngine,
        documents: list[Record],
        metrics_registry: MetricsRegistry,
    ) -> None:
        removed = mutation_engine.delete_many("Document", {"metadata.status": "draft"})
        assert removed == 2
        assert query_engine.evaluate("Document", {"metadata.status": "draft"}) == []
        assert [r["name"] for r in query_engine.evaluate("Document")] == ["c"]
        registry = metrics_registry.registry
        assert registry.get_sample_value(
            "docq_records_affected_total", {"operation": "delete"}
        ) == 2.0
        assert registry.get_sample_value(
            "docq_write_scopes_total", {"status": "committed"}
        ) == 1.0

    def test_empty_filter_deletes_all(
        self, mutation_engine: MutationEngine, documents: list[Record], store
    ) -> None:
        assert mutation_engine.delete_many("Document", None) == 3
        assert store.all_of("Document") == []

    def test_unknown_collection(self, mutation_engine: MutationEngine) -> None:
        assert mutation_engine.delete_many("Nothing", {}) == 0

    def test_invalid_filter(
        self, mutation_engine: MutationEngine, documents: list[Record], store
    ) -> None:
        with pytest.raises(InvalidExpression):
            mutation_engine.delete_many("Document", {"name": {"$in": "a"}})
        assert len(store.all_of("Document")) == 3

    def test_failure_mid_scope_restores_deleted_records(
        self,
        mutation_engine: MutationEngine,
        documents: list[Record],
        store: InMemoryRecordStore,
        metrics_registry: MetricsRegistry,
    ) -> None:
        original_delete = store.delete

        def failing_delete(records) -> int:
            records = list(records)
            original_delete(records[:1])
            raise RuntimeError("disk on fire")

        with patch.object(store, "delete", failing_delete):
            with pytest.raises(RuntimeError):
                mutation_engine.delete_many("Document", {})

        assert store.all_of("Document") == documents
        assert metrics_registry.registry.get_sample_value(
            "docq_write_scopes_total", {"status": "rolled_back"}
        ) == 1.0


@pytest.mark.unit
class TestMutationsIgnoreMaxTake:
    """Mutations reach every match even when pages are bounded."""

    @pytest.fixture
    def bounded(
        self, store: InMemoryRecordStore, clock
    ) -> tuple[QueryEngine, MutationEngine]:
        engine = QueryEngine(store, config=QueryConfig(max_take=2))
        return engine, MutationEngine(engine, clock=clock)

    @pytest.fixture
    def drafts(self, store: InMemoryRecordStore) -> list[Record]:
        return [
            store.create("Document", {"name": f"d{i}", "status": "draft"})
            for i in range(5)
        ]

    def test_page_is_still_bounded(
        self, bounded: tuple[QueryEngine, MutationEngine], drafts: list[Record]
    ) -> None:
        engine, _ = bounded
        assert len(engine.evaluate("Document", {"status": "draft"})) == 2

    def test_update_reaches_every_match(
        self, bounded: tuple[QueryEngine, MutationEngine], drafts: list[Record]
    ) -> None:
        _, mutations = bounded
        assert mutations.update_many(
            "Document", {"status": "draft"}, {"status": "review"}
        ) == 5
        assert [d["status"] for d in drafts] == ["review"] * 5

    def test_delete_reaches_every_match(
        self,
        bounded: tuple[QueryEngine, MutationEngine],
        drafts: list[Record],
        store: InMemoryRecordStore,
    ) -> None:
        engine, mutations = bounded
        assert mutations.delete_many("Document", {"status": "draft"}) == 5
        assert engine.evaluate("Document", {"status": "draft"}) == []
        assert store.all_of("Document") == []
