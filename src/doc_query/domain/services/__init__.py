"""Domain services: value semantics and path assignment."""

from doc_query.domain.services.clock import Clock, utc_now
from doc_query.domain.services.paths import assign_path
from doc_query.domain.services.values import (
    TypeRank,
    compare_values,
    contains,
    deep_equal,
    ordered_compare,
    sort_key,
    type_rank,
)

__all__ = [
    "Clock",
    "utc_now",
    "assign_path",
    "TypeRank",
    "compare_values",
    "contains",
    "deep_equal",
    "ordered_compare",
    "sort_key",
    "type_rank",
]
