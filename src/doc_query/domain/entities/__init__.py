"""Domain entities for the query engine.

Exports:
    Record:
        - Record: A stored schema-less document
        - RecordKeys: Names of the reserved id/timestamp fields

    Expressions:
        - FilterExpression, FieldClause, Condition: Parsed filters
        - UpdateExpression, Assignment: Parsed updates
        - SortDirective, SortKey: Parsed sort directives
"""

from doc_query.domain.entities.record import DEFAULT_KEYS, Record, RecordKeys
from doc_query.domain.entities.expressions import (
    Assignment,
    Condition,
    FieldClause,
    FilterExpression,
    SortDirective,
    SortKey,
    UpdateExpression,
)

__all__ = [
    # Record
    "DEFAULT_KEYS",
    "Record",
    "RecordKeys",
    # Expressions
    "Assignment",
    "Condition",
    "FieldClause",
    "FilterExpression",
    "SortDirective",
    "SortKey",
    "UpdateExpression",
]
