from __future__ import annotations

import threading

from .interfaces import BlobStore


class MemoryBlobStore(BlobStore):
    """
    Process-local BlobStore backed by a dict. Used by tests and for embedding.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._blobs: dict[tuple[str, str], bytes] = {}

    def get(self, token: str, space: str) -> bytes | None:
        with self._lock:
            return self._blobs.get((token, space))

    def set(self, token: str, space: str, data: bytes) -> None:
        with self._lock:
            self._blobs[(token, space)] = bytes(data)
