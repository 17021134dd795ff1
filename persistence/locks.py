from __future__ import annotations

import threading
import weakref
from typing import Hashable


class LockRegistry:
    """
    Provides a stable lock per key (a resolved file path, a (token, space) pair, ...)
    to avoid global contention.

    Locks are held weakly: once no caller references a key's lock it is dropped,
    and the next lock_for() hands out a fresh one.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: weakref.WeakValueDictionary[Hashable, threading.Lock] = weakref.WeakValueDictionary()

    def lock_for(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


GLOBAL_PATH_LOCKS = LockRegistry()
