from __future__ import annotations

import logging
from typing import Callable

from persistence.interfaces import BlobStore
from persistence.locks import LockRegistry

from .codec import decode, encode
from .document import get_path, set_path
from .values import Document, Value

logger = logging.getLogger(__name__)


class DatumBackend:
    """
    Path-addressed reads and writes over one msgpack document per (token, space).

    Every write is a load / decode / mutate / encode / store cycle. The cycle runs
    under a per-(token, space) lock, so concurrent writers in this process never
    lose each other's updates. Reads are lock-free: the store replaces blobs whole.
    """

    def __init__(self, store: BlobStore, *, locks: LockRegistry | None = None) -> None:
        self._store = store
        self._locks = locks if locks is not None else LockRegistry()

    @property
    def store(self) -> BlobStore:
        return self._store

    def _load(self, token: str, space: str) -> Document:
        return decode(self._store.get(token, space))

    def _save(self, token: str, space: str, doc: Document) -> None:
        self._store.set(token, space, encode(doc))

    def get(self, token: str, space: str, path: str) -> Value | None:
        """Return the value at `path`, the whole document for "", or None if absent."""
        logger.debug("get space=%s path=%s", space, path)
        value, found = get_path(self._load(token, space), path)
        return value if found else None

    def set(self, token: str, space: str, path: str, value: Value | None) -> None:
        """Write `value` at `path`; None deletes the key and prunes empty maps."""
        logger.debug("set space=%s path=%s delete=%s", space, path, value is None)
        with self._locks.lock_for((token, space)):
            doc = self._load(token, space)
            set_path(doc, path, value)
            self._save(token, space, doc)

    def delete(self, token: str, space: str, path: str) -> None:
        self.set(token, space, path, None)

    def take(
        self,
        token: str,
        space: str,
        path: str,
        *,
        accept: Callable[[Value], bool] | None = None,
    ) -> Value | None:
        """
        Atomically read and delete the value at `path`.

        Of several concurrent callers at most one gets the value; the rest get None.
        When `accept` is given, a value it rejects is returned but left in place.
        """
        with self._locks.lock_for((token, space)):
            doc = self._load(token, space)
            value, found = get_path(doc, path)
            if not found:
                return None
            if accept is not None and not accept(value):
                return value
            set_path(doc, path, None)
            self._save(token, space, doc)
        logger.debug("took space=%s path=%s", space, path)
        return value
