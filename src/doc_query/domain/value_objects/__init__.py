"""Value objects for the query engine domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Field paths:
        - FieldPath: Parsed dot-separated path into a document
        - ABSENT: Resolution result for a missing key
        - is_absent: Sentinel test

    Operators:
        - ComparisonKind: Closed set of filter operators ($gt, $in, ...)
        - SortDirection: ASC / DESC

    Pagination:
        - PageDirective: skip/take applied after sorting
"""

from doc_query.domain.value_objects.field_path import (
    ABSENT,
    PATH_SEPARATOR,
    FieldPath,
    is_absent,
)
from doc_query.domain.value_objects.operators import (
    OPERATOR_PREFIX,
    ComparisonKind,
    SortDirection,
)
from doc_query.domain.value_objects.page import PageDirective

__all__ = [
    # Field paths
    "ABSENT",
    "PATH_SEPARATOR",
    "FieldPath",
    "is_absent",
    # Operators
    "OPERATOR_PREFIX",
    "ComparisonKind",
    "SortDirection",
    # Pagination
    "PageDirective",
]
