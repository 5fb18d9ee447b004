"""
Local cache layer.

Durable key/value storage plus the OfflineCache that the record store
and session manager share.
"""

from .keys import RecordKey
from .offline import RECORD_PREFIX, OfflineCache
from .storage import FileKeyValueStorage, KeyValueStorage, MemoryKeyValueStorage

__all__ = [
    "RecordKey",
    "OfflineCache",
    "RECORD_PREFIX",
    "KeyValueStorage",
    "MemoryKeyValueStorage",
    "FileKeyValueStorage",
]
