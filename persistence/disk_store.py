from __future__ import annotations

import logging
from pathlib import Path

from blob_files import atomic_write_bytes, read_bytes
from datum.errors import InvalidStoreKey, PersistenceError

from .interfaces import BlobStore
from .locks import GLOBAL_PATH_LOCKS

logger = logging.getLogger(__name__)

_FORBIDDEN_CHARS = ("/", "\\", "\x00")


def _check_name(kind: str, name: str) -> str:
    if not name or name in (".", "..") or any(c in name for c in _FORBIDDEN_CHARS):
        raise InvalidStoreKey(f"invalid {kind} name {name!r}")
    return name


class DiskBlobStore(BlobStore):
    """
    Stores each (token, space) blob as a file:

    - <root>/<token>/<space>

    - Missing files read as None, empty files as b"".
    - Writes atomically.
    """

    def __init__(self, root: Path):
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, token: str, space: str) -> Path:
        if space.endswith(".tmp"):
            raise InvalidStoreKey(f"space name {space!r} collides with temp files")
        return self._root / _check_name("token", token) / _check_name("space", space)

    def get(self, token: str, space: str) -> bytes | None:
        path = self.path_for(token, space)
        lock = GLOBAL_PATH_LOCKS.lock_for(str(path.resolve()))
        with lock:
            try:
                return read_bytes(path)
            except OSError as e:
                logger.warning("BLOB READ: failed to read %s: %r", path, e)
                raise PersistenceError(f"failed to read blob for space {space!r}") from e

    def set(self, token: str, space: str, data: bytes) -> None:
        path = self.path_for(token, space)
        lock = GLOBAL_PATH_LOCKS.lock_for(str(path.resolve()))
        with lock:
            try:
                atomic_write_bytes(path, data)
            except OSError as e:
                logger.warning("BLOB WRITE: failed to write %s: %r", path, e)
                raise PersistenceError(f"failed to write blob for space {space!r}") from e
