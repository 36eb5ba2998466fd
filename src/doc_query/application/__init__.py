"""Application layer for the query engine.

The application layer orchestrates domain logic to fulfill use cases.

Exports:
    Query:
        - QueryEngine: Evaluates filter/sort/page against a record store
        - Operator: Base class for pipeline operators (Volcano model)
    Mutation:
        - MutationEngine: Filtered updates and deletes under a write scope
    Façade:
        - DocumentService: CRUD entry point with ODM-style query options
    Wiring:
        - build_container: Builds every component from configuration
"""

from doc_query.application.bootstrap import build_container, configure_observability
from doc_query.application.document_service import DocumentService
from doc_query.application.mutation_engine import MutationEngine
from doc_query.application.query_engine import (
    FilterOperator,
    LimitOperator,
    Operator,
    QueryEngine,
    ScanOperator,
    SortOperator,
)

__all__ = [
    "build_container",
    "configure_observability",
    "DocumentService",
    "MutationEngine",
    "QueryEngine",
    "Operator",
    "ScanOperator",
    "FilterOperator",
    "SortOperator",
    "LimitOperator",
]
