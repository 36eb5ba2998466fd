"""Adapters layer - concrete implementations of ports.

Outbound adapters:
    - InMemoryRecordStore: RecordStore backed by process memory
"""

from doc_query.adapters.outbound import InMemoryRecordStore

__all__ = [
    "InMemoryRecordStore",
]
