from __future__ import annotations

from typing import Protocol


class BlobStore(Protocol):
    """
    Minimal byte store: one opaque blob per (token, space).
    """

    def get(self, token: str, space: str) -> bytes | None:
        """Return the stored blob, or None when nothing was ever stored."""
        ...

    def set(self, token: str, space: str, data: bytes) -> None:
        """Persist the full blob, replacing any previous one."""
        ...
