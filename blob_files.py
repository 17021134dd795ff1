from __future__ import annotations

from pathlib import Path


def read_bytes(path: Path) -> bytes | None:
    """
    Read a blob from disk.

    Returns None for a missing file and b"" for an empty one. Other I/O errors propagate.
    """
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None


def atomic_write_bytes(path: Path, payload: bytes) -> None:
    """
    Atomically write bytes to disk by writing to a temp file then replacing.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    with tmp_path.open("wb") as f:
        f.write(payload)
    tmp_path.replace(path)
