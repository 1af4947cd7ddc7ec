"""Flat-file durable store: one file per key in a cache directory.

Each write is atomic on its own (temp file + ``os.replace()``), but
``set_multiple`` writes keys one after another.  A crash between two writes
can leave the set partially updated; readers cope with that because the raw
document, the version and the timestamp map are each validated on read.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from pathlib import Path

from ..core.async_utils import run_sync
from ..errors import StorageFailure
from ..file_handler import read_file_with_encoding, remove_file, write_file_atomic
from .base import DurableStore

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileDirectoryStore(DurableStore):
    """Durable store keeping each value in ``<directory>/<key>``.

    Args:
        directory: Cache directory.  Created on first write.
    """

    name = "files"

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        return self.directory / _UNSAFE_CHARS.sub("_", key)

    def _read(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        content, _encoding = read_file_with_encoding(path)
        return content

    def _write(self, key: str, value: str) -> None:
        write_file_atomic(self._path_for(key), value)

    def _delete(self, key: str) -> None:
        remove_file(self._path_for(key))

    async def get(self, key: str) -> str | None:
        try:
            return await run_sync(self._read, key)
        except OSError as exc:
            raise StorageFailure(f"cannot read {key}: {exc}") from exc

    async def set(self, key: str, value: str) -> None:
        try:
            await run_sync(self._write, key, value)
        except OSError as exc:
            raise StorageFailure(f"cannot write {key}: {exc}") from exc

    async def remove(self, key: str) -> None:
        try:
            await run_sync(self._delete, key)
        except OSError as exc:
            raise StorageFailure(f"cannot remove {key}: {exc}") from exc

    async def set_multiple(self, items: Mapping[str, str]) -> None:
        for key, value in items.items():
            await self.set(key, value)
        logger.debug("File store wrote %d keys to %s", len(items), self.directory)

    async def remove_multiple(self, keys: Iterable[str]) -> None:
        for key in keys:
            await self.remove(key)
