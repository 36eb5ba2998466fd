"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: APIs offered to clients (DocumentRepository)
- Outbound ports: Dependencies on external systems (RecordStore)

Adapters implement these ports with concrete functionality.
"""

from doc_query.ports.inbound import DocumentRepository, QueryOptions
from doc_query.ports.outbound import DuplicateRecordError, RecordStore, StoreUnavailable

__all__ = [
    # Inbound ports
    "DocumentRepository",
    "QueryOptions",
    # Outbound ports
    "RecordStore",
    "StoreUnavailable",
    "DuplicateRecordError",
]
