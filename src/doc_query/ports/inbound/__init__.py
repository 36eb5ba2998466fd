"""Inbound ports - APIs offered to clients."""

from doc_query.ports.inbound.document_repository import DocumentRepository, QueryOptions

__all__ = [
    "DocumentRepository",
    "QueryOptions",
]
