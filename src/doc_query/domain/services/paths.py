"""In-place assignment at a field path.

Compound paths merge into the existing nested document: sibling keys under
the parent are kept, missing intermediate documents are created, and an
intermediate that is not a document is replaced by a fresh one. Numeric
segments address array elements; assigning past the end pads with None,
but never by more than MAX_LIST_PADDING slots.
"""

from __future__ import annotations

import copy
from collections.abc import MutableMapping, MutableSequence
from typing import Any

from doc_query.domain.exceptions import InvalidExpression
from doc_query.domain.value_objects import FieldPath

MAX_LIST_PADDING = 1024
"""Most None slots one assignment may add in front of a list index."""


def assign_path(document: MutableMapping[str, Any], path: FieldPath, value: Any) -> None:
    """Set the value at path inside document, merging into nested documents.

    The value is deep-copied so the caller's object is never aliased into
    the stored document.

    Raises:
        InvalidExpression: If a list index lies more than MAX_LIST_PADDING
            slots past the end of its list.
    """
    container: Any = document
    for segment, next_segment in zip(path.segments, path.segments[1:]):
        child = _child(container, segment)
        if not _can_descend(child, next_segment):
            child = {}
            _put(container, segment, child, path)
        container = child
    _put(container, path.segments[-1], copy.deepcopy(value), path)


def _child(container: Any, segment: str) -> Any:
    if isinstance(container, MutableMapping):
        return container.get(segment)
    index = int(segment)
    return container[index] if index < len(container) else None


def _can_descend(child: Any, next_segment: str) -> bool:
    if isinstance(child, MutableMapping):
        return True
    return isinstance(child, MutableSequence) and next_segment.isdigit()


def _put(container: Any, segment: str, value: Any, path: FieldPath) -> None:
    if isinstance(container, MutableMapping):
        container[segment] = value
        return
    index = int(segment)
    if index - len(container) > MAX_LIST_PADDING:
        raise InvalidExpression(
            f"Index {index} in '{path}' is too far past the end of a "
            f"{len(container)}-element list",
            path=path.raw,
        )
    if index >= len(container):
        container.extend([None] * (index + 1 - len(container)))
    container[index] = value
