"""Dot-separated field paths and the ABSENT resolution sentinel.

A field path such as ``"metadata.status"`` addresses a value nested inside a
schema-less document. Resolution descends into mappings by key and into
arrays by decimal index (``"location.coordinates.0"``). Any miss along the
way resolves to ``ABSENT``, which is distinct from an explicit ``None``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final

from doc_query.domain.exceptions import InvalidExpression


class _Absent:
    """Marker for a path that does not resolve to any value."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Absent:
        return self

    def __deepcopy__(self, memo: dict) -> _Absent:
        return self


ABSENT: Final = _Absent()
"""Resolution result for a missing key at any level of nesting."""

PATH_SEPARATOR: Final = "."


def is_absent(value: Any) -> bool:
    """Return True if value is the ABSENT sentinel."""
    return value is ABSENT


@dataclass(frozen=True, slots=True)
class FieldPath:
    """Parsed dot-path into a document.

    Attributes:
        raw: The path exactly as supplied by the caller.
        segments: The non-empty path segments, outermost first.

    Example:
        >>> path = FieldPath.parse("metadata.status")
        >>> path.segments
        ('metadata', 'status')
        >>> path.resolve({"metadata": {"status": "draft"}})
        'draft'
        >>> path.resolve({"metadata": {}})
        ABSENT
    """

    raw: str
    segments: tuple[str, ...]

    @classmethod
    def parse(cls, raw: object) -> FieldPath:
        """Validate and split a field path.

        Raises:
            InvalidExpression: If raw is not a string, is empty, or contains
                an empty segment (``"a..b"``, ``".a"``).
        """
        if not isinstance(raw, str):
            raise InvalidExpression(
                f"Field path must be a string, got {type(raw).__name__}", path=raw
            )
        if not raw:
            raise InvalidExpression("Field path must not be empty", path=raw)
        segments = tuple(raw.split(PATH_SEPARATOR))
        if any(segment == "" for segment in segments):
            raise InvalidExpression(f"Field path '{raw}' has an empty segment", path=raw)
        return cls(raw=raw, segments=segments)

    @property
    def is_compound(self) -> bool:
        return len(self.segments) > 1

    @property
    def head(self) -> str:
        return self.segments[0]

    def resolve(self, document: Any) -> Any:
        """Resolve this path against a document, returning ABSENT on a miss."""
        current = document
        for segment in self.segments:
            current = _step(current, segment)
            if current is ABSENT:
                return ABSENT
        return current

    def __str__(self) -> str:
        return self.raw


def _step(container: Any, segment: str) -> Any:
    """Descend one level, by key for mappings and by index for arrays."""
    if isinstance(container, Mapping):
        return container.get(segment, ABSENT)
    if isinstance(container, Sequence) and not isinstance(container, (str, bytes)):
        if segment.isdigit():
            index = int(segment)
            if index < len(container):
                return container[index]
    return ABSENT
