"""Cache record persistence layer.

Keeps four logical records in a ``DurableStore`` under a fixed namespace:

* ``<ns>.config.ini`` -- the served raw document (possibly a merge result).
* ``<ns>.config_updated`` -- the remote global version.
* ``<ns>.section_timestamps`` -- the *remote* per-section timestamps,
  serialised as a single-section key/value document with percent-encoded
  section names.
* ``<ns>.saved_at`` -- ISO 8601 UTC instant of the last save.

Key design choices:

* **One unit of update** -- ``save()`` hands all four records to
  ``set_multiple`` in a single call.
* **Validity on read** -- a stored raw document without the ``[config]``
  marker is reported as absent.
* **Storage failures are soft** -- read failures become "no cache" and write
  failures are logged; neither propagates to the sync cycle.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from urllib.parse import quote, unquote

from ..core.client import is_valid_document
from ..errors import StorageFailure
from ..storage.base import DurableStore
from .codec import parse, serialize
from .models import CacheStatus

logger = logging.getLogger(__name__)

_TIMESTAMPS_SECTION = "timestamps"


def _encode_name(section: str) -> str:
    # "=", a leading ";" and edge whitespace would not survive the codec.
    return quote(section, safe="")


class ConfigCache:
    """Read and write the four cache records for one namespace.

    Args:
        store: Durable store backend.
        namespace: Prefix applied to every record key.
    """

    def __init__(self, store: DurableStore, namespace: str) -> None:
        self._store = store
        self.namespace = namespace
        self.raw_key = f"{namespace}.config.ini"
        self.version_key = f"{namespace}.config_updated"
        self.timestamps_key = f"{namespace}.section_timestamps"
        self.saved_at_key = f"{namespace}.saved_at"

    @property
    def keys(self) -> tuple[str, str, str, str]:
        return (
            self.raw_key,
            self.version_key,
            self.timestamps_key,
            self.saved_at_key,
        )

    @property
    def storage_type(self) -> str:
        return self._store.name

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _read(self, key: str) -> str | None:
        try:
            return await self._store.get(key)
        except StorageFailure as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None

    async def get_cached_raw(self) -> str | None:
        """Return the stored raw document if it passes the validity check."""
        raw = await self._read(self.raw_key)
        if raw is None:
            return None
        if not is_valid_document(raw):
            logger.warning(
                "Cached document (%d chars) failed validity check, ignoring",
                len(raw),
            )
            return None
        return raw

    async def get_global_timestamp(self) -> str | None:
        value = await self._read(self.version_key)
        return value or None

    async def get_section_timestamps(self) -> dict[str, str]:
        """Return the persisted remote timestamps, or ``{}``."""
        text = await self._read(self.timestamps_key)
        if not text:
            return {}
        stored = parse(text).get(_TIMESTAMPS_SECTION, {})
        return {unquote(name): ts for name, ts in stored.items()}

    async def get_saved_at(self) -> str | None:
        value = await self._read(self.saved_at_key)
        return value or None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def save(
        self,
        raw: str,
        global_timestamp: str | None,
        section_timestamps: Mapping[str, str],
    ) -> bool:
        """Persist a cache record as one unit.

        Args:
            raw: Document text to serve next time (merged or remote).
            global_timestamp: The remote global version.
            section_timestamps: The remote per-section timestamps.

        Returns:
            ``True`` if the write succeeded.
        """
        records = {
            self.raw_key: raw,
            self.version_key: global_timestamp or "",
            self.timestamps_key: serialize(
                {
                    _TIMESTAMPS_SECTION: {
                        _encode_name(name): ts
                        for name, ts in section_timestamps.items()
                    }
                }
            ),
            self.saved_at_key: datetime.now(timezone.utc).isoformat(),
        }
        try:
            await self._store.set_multiple(records)
        except StorageFailure as exc:
            logger.error("Cache write failed: %s", exc)
            return False
        logger.info(
            "Cache saved: %d chars, %d section timestamps (%s)",
            len(raw),
            len(section_timestamps),
            self.storage_type,
        )
        return True

    async def clear(self) -> bool:
        """Delete all four records.  Returns ``True`` on success."""
        try:
            await self._store.remove_multiple(self.keys)
        except StorageFailure as exc:
            logger.error("Cache clear failed: %s", exc)
            return False
        logger.info("Cache cleared (%s)", self.storage_type)
        return True

    async def close(self) -> None:
        await self._store.close()

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    async def status(self) -> CacheStatus:
        """Snapshot of what is currently persisted."""
        raw = await self.get_cached_raw()
        return CacheStatus(
            has_cached_raw=raw is not None,
            global_timestamp=await self.get_global_timestamp(),
            section_timestamps=await self.get_section_timestamps(),
            saved_at=await self.get_saved_at(),
            cached_raw_length=len(raw) if raw else 0,
            storage_type=self.storage_type,
        )
