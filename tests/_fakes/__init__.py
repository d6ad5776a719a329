from .record_store import InMemoryRecordStore

__all__ = ["InMemoryRecordStore"]
