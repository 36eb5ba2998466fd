"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for external systems that the
query engine depends on, namely the record store.
"""

from doc_query.ports.outbound.record_store import (
    DuplicateRecordError,
    RecordStore,
    StoreUnavailable,
)

__all__ = [
    "RecordStore",
    "StoreUnavailable",
    "DuplicateRecordError",
]
