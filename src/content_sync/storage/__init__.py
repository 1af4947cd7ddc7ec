"""Durable store backends and factory."""

from pathlib import Path

from .base import DurableStore
from .files import FileDirectoryStore
from .sqlite import DB_FILENAME, SqliteStore


def create_store(backend: str, path: Path) -> DurableStore:
    """Build the store named by *backend* rooted at *path*.

    Raises:
        ValueError: *backend* is not ``"sqlite"`` or ``"files"``.
    """
    path = Path(path)
    if backend == "sqlite":
        return SqliteStore(path / DB_FILENAME)
    if backend == "files":
        return FileDirectoryStore(path)
    raise ValueError(f"Unknown storage backend: {backend!r}")


__all__ = [
    "DurableStore",
    "FileDirectoryStore",
    "SqliteStore",
    "create_store",
]
