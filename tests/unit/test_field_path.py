"""Unit tests for field paths and path assignment."""

from __future__ import annotations

import copy

import pytest

from doc_query.domain import InvalidExpression
from doc_query.domain.services import assign_path
from doc_query.domain.services.paths import MAX_LIST_PADDING
from doc_query.domain.value_objects import ABSENT, FieldPath, is_absent


@pytest.mark.unit
class TestFieldPathParse:
    """Tests for FieldPath.parse."""

    def test_single_segment(self) -> None:
        path = FieldPath.parse("name")
        assert path.segments == ("name",)
        assert not path.is_compound

    def test_compound(self) -> None:
        path = FieldPath.parse("metadata.status")
        assert path.segments == ("metadata", "status")
        assert path.is_compound
        assert path.head == "metadata"
        assert str(path) == "metadata.status"

    @pytest.mark.parametrize("raw", [1, None, ("a",), b"name"])
    def test_non_string_rejected(self, raw: object) -> None:
        with pytest.raises(InvalidExpression) as exc_info:
            FieldPath.parse(raw)
        assert exc_info.value.path == raw

    @pytest.mark.parametrize("raw", ["", ".a", "a.", "a..b"])
    def test_empty_segments_rejected(self, raw: str) -> None:
        with pytest.raises(InvalidExpression):
            FieldPath.parse(raw)


@pytest.mark.unit
class TestFieldPathResolve:
    """Tests for FieldPath.resolve."""

    @pytest.fixture
    def document(self) -> dict:
        return {
            "name": "report",
            "owner": None,
            "metadata": {"status": "draft", "audit": {"by": "alice"}},
            "location": {"coordinates": [12.5, 41.9]},
        }

    def test_top_level(self, document: dict) -> None:
        assert FieldPath.parse("name").resolve(document) == "report"

    def test_nested(self, document: dict) -> None:
        assert FieldPath.parse("metadata.audit.by").resolve(document) == "alice"

    def test_missing_key_is_absent(self, document: dict) -> None:
        assert FieldPath.parse("metadata.priority").resolve(document) is ABSENT

    def test_missing_intermediate_is_absent(self, document: dict) -> None:
        assert FieldPath.parse("settings.theme").resolve(document) is ABSENT

    def test_explicit_null_is_not_absent(self, document: dict) -> None:
        value = FieldPath.parse("owner").resolve(document)
        assert value is None
        assert not is_absent(value)

    def test_descending_through_scalar_is_absent(self, document: dict) -> None:
        assert FieldPath.parse("name.first").resolve(document) is ABSENT

    def test_array_index(self, document: dict) -> None:
        assert FieldPath.parse("location.coordinates.1").resolve(document) == 41.9

    def test_array_index_out_of_range(self, document: dict) -> None:
        assert FieldPath.parse("location.coordinates.5").resolve(document) is ABSENT

    def test_absent_is_singleton_and_falsy(self) -> None:
        assert copy.deepcopy(ABSENT) is ABSENT
        assert not ABSENT
        assert repr(ABSENT) == "ABSENT"


@pytest.mark.unit
class TestAssignPath:
    """Tests for merge-style assignment."""

    def test_replaces_top_level_wholesale(self) -> None:
        doc = {"metadata": {"status": "draft", "version": "1.0"}}
        assign_path(doc, FieldPath.parse("metadata"), {"status": "review"})
        assert doc["metadata"] == {"status": "review"}

    def test_compound_path_keeps_siblings(self) -> None:
        doc = {"metadata": {"status": "draft", "version": "1.0"}}
        assign_path(doc, FieldPath.parse("metadata.status"), "review")
        assert doc["metadata"] == {"status": "review", "version": "1.0"}

    def test_creates_missing_intermediates(self) -> None:
        doc: dict = {}
        assign_path(doc, FieldPath.parse("a.b.c"), 1)
        assert doc == {"a": {"b": {"c": 1}}}

    def test_replaces_scalar_intermediate(self) -> None:
        doc = {"metadata": "legacy"}
        assign_path(doc, FieldPath.parse("metadata.status"), "review")
        assert doc == {"metadata": {"status": "review"}}

    def test_array_element(self) -> None:
        doc = {"location": {"coordinates": [1.0, 2.0]}}
        assign_path(doc, FieldPath.parse("location.coordinates.0"), 9.0)
        assert doc["location"]["coordinates"] == [9.0, 2.0]

    def test_array_past_end_pads_with_none(self) -> None:
        doc = {"tags": ["a"]}
        assign_path(doc, FieldPath.parse("tags.3"), "d")
        assert doc["tags"] == ["a", None, None, "d"]

    def test_padding_up_to_limit(self) -> None:
        doc = {"tags": ["a"]}
        assign_path(doc, FieldPath.parse(f"tags.{1 + MAX_LIST_PADDING}"), "z")
        assert len(doc["tags"]) == MAX_LIST_PADDING + 2
        assert doc["tags"][-1] == "z"

    def test_padding_past_limit_rejected(self) -> None:
        doc = {"tags": ["a"]}
        with pytest.raises(InvalidExpression) as exc_info:
            assign_path(doc, FieldPath.parse("tags.100000000"), "z")
        assert exc_info.value.path == "tags.100000000"
        assert doc == {"tags": ["a"]}

    def test_value_is_copied(self) -> None:
        doc: dict = {}
        tags = ["a", "b"]
        assign_path(doc, FieldPath.parse("tags"), tags)
        tags.append("c")
        assert doc["tags"] == ["a", "b"]
