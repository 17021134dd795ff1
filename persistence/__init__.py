from __future__ import annotations

from .disk_store import DiskBlobStore
from .interfaces import BlobStore
from .locks import GLOBAL_PATH_LOCKS, LockRegistry
from .memory_store import MemoryBlobStore

__all__ = [
    "BlobStore",
    "DiskBlobStore",
    "MemoryBlobStore",
    "LockRegistry",
    "GLOBAL_PATH_LOCKS",
]
