"""Outbound adapters - concrete implementations of outbound ports."""

from doc_query.adapters.outbound.memory_record_store import InMemoryRecordStore

__all__ = [
    "InMemoryRecordStore",
]
