"""Equality and ordering over schema-less document values.

Documents hold scalars, arrays and nested mappings of arbitrary depth.
Python's built-in ``==`` and ``<`` are close to what the filter language
needs but not quite: ``True == 1`` holds, tuples never equal lists, and
mixed types refuse to order. The helpers here pin those cases down.

Sorting uses a total order across types so that heterogeneous collections
still sort deterministically:

    ABSENT < None < numbers < strings < documents < arrays < booleans < dates

References:
    - MongoDB BSON comparison order (simplified)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, datetime, timezone
from enum import IntEnum
from functools import cmp_to_key
from typing import Any, Callable

from doc_query.domain.value_objects import ABSENT


class TypeRank(IntEnum):
    """Cross-type sort bracket."""

    ABSENT = 0
    NULL = 1
    NUMBER = 2
    STRING = 3
    DOCUMENT = 4
    ARRAY = 5
    BOOLEAN = 6
    DATE = 7
    OTHER = 8


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_array(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def type_rank(value: Any) -> TypeRank:
    if value is ABSENT:
        return TypeRank.ABSENT
    if value is None:
        return TypeRank.NULL
    if isinstance(value, bool):
        return TypeRank.BOOLEAN
    if _is_number(value):
        return TypeRank.NUMBER
    if isinstance(value, str):
        return TypeRank.STRING
    if isinstance(value, Mapping):
        return TypeRank.DOCUMENT
    if _is_array(value):
        return TypeRank.ARRAY
    if isinstance(value, date):
        return TypeRank.DATE
    return TypeRank.OTHER


def deep_equal(left: Any, right: Any) -> bool:
    """Structural equality that keeps booleans apart from numbers.

    ABSENT equals only itself. Lists and tuples compare element-wise;
    mappings compare key sets and values, ignoring key order.
    """
    if left is ABSENT or right is ABSENT:
        return left is right
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, Mapping):
        if not isinstance(right, Mapping) or left.keys() != right.keys():
            return False
        return all(deep_equal(left[key], right[key]) for key in left)
    if _is_array(left):
        if not _is_array(right) or len(left) != len(right):
            return False
        return all(deep_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, datetime) and isinstance(right, datetime):
        return _as_utc(left) == _as_utc(right)
    return left == right


def contains(candidates: Sequence[Any], value: Any) -> bool:
    """Return True if value is deep-equal to any candidate."""
    return any(deep_equal(value, candidate) for candidate in candidates)


def ordered_compare(left: Any, right: Any) -> int | None:
    """Three-way compare for range operators.

    Only numbers against numbers, strings against strings and dates against
    dates are ordered. Returns None when the pair is not comparable, which
    range operators treat as "no match".
    """
    if left is ABSENT or left is None or right is None:
        return None
    if _is_number(left) and _is_number(right):
        return _sign(left, right)
    if isinstance(left, str) and isinstance(right, str):
        return _sign(left, right)
    if isinstance(left, date) and isinstance(right, date):
        return _sign(_as_utc(left), _as_utc(right))
    return None


def compare_values(left: Any, right: Any) -> int:
    """Total three-way comparison used for sorting."""
    left_rank, right_rank = type_rank(left), type_rank(right)
    if left_rank != right_rank:
        return -1 if left_rank < right_rank else 1

    if left_rank in (TypeRank.ABSENT, TypeRank.NULL):
        return 0
    if left_rank in (TypeRank.NUMBER, TypeRank.STRING, TypeRank.BOOLEAN):
        return _sign(left, right)
    if left_rank == TypeRank.DATE:
        return _sign(_as_utc(left), _as_utc(right))
    if left_rank == TypeRank.DOCUMENT:
        return _compare_sequences(list(left.items()), list(right.items()), _compare_item)
    if left_rank == TypeRank.ARRAY:
        return _compare_sequences(left, right, compare_values)
    return _sign(repr(left), repr(right))


sort_key: Callable[[Any], Any] = cmp_to_key(compare_values)
"""Key function adapter for ``sorted``."""


def _compare_item(left: tuple[Any, Any], right: tuple[Any, Any]) -> int:
    # Keys of mixed types (e.g. 1 and "a") order by type rank like values.
    return compare_values(left[0], right[0]) or compare_values(left[1], right[1])


def _compare_sequences(
    left: Sequence[Any], right: Sequence[Any], compare: Callable[[Any, Any], int]
) -> int:
    for a, b in zip(left, right):
        result = compare(a, b)
        if result:
            return result
    return _sign(len(left), len(right))


def _sign(left: Any, right: Any) -> int:
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def _as_utc(value: date) -> datetime:
    """Normalize dates so naive and aware values order consistently.

    Naive datetimes are taken to be UTC; bare dates become UTC midnight.
    """
    if not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
