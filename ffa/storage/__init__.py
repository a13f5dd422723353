from .base import ALL_SEASONS, ReplaceScope, RecordStore
from .memory import MemoryStore
from .sqlite import SqliteStore

__all__ = ["ALL_SEASONS", "ReplaceScope", "RecordStore", "MemoryStore", "SqliteStore"]
