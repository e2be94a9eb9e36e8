"""
Save module - quest state persistence.

Provides:
- Save/load of progress records and the refresh clock
- Per-record corruption tolerance
- Atomic JSON file storage with checksum validation
- In-memory storage for tests
"""

from questengine.save.manager import QuestSaveManager, LoadResult, decode_record
from questengine.save.storage import (
    Storage,
    StorageError,
    MemoryStorage,
    JsonFileStorage,
)

__all__ = [
    "QuestSaveManager",
    "LoadResult",
    "decode_record",
    "Storage",
    "StorageError",
    "MemoryStorage",
    "JsonFileStorage",
]
