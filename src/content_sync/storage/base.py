"""Durable string key/value store interface.

Two backends implement it: ``SqliteStore`` (large quota, transactional
batches) and ``FileDirectoryStore`` (one file per key, small footprint).
Callers never depend on which one is active.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping


class DurableStore(ABC):
    """Async string key/value store that survives process restarts.

    Implementations raise ``StorageFailure`` when the backing medium fails.
    Reading a missing key is not a failure: it returns ``None``.
    """

    #: Short backend name, surfaced in status output.
    name: str = "abstract"

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under *key*, or ``None``."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete *key*.  Missing keys are ignored."""

    @abstractmethod
    async def set_multiple(self, items: Mapping[str, str]) -> None:
        """Store every pair in *items*.

        Atomicity across keys depends on the backend.
        """

    @abstractmethod
    async def remove_multiple(self, keys: Iterable[str]) -> None:
        """Delete every key in *keys*."""

    async def close(self) -> None:
        """Release backend resources.  Default is a no-op."""
