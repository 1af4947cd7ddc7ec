"""Pydantic models for the content sync engine.

Defines the data contracts shared across sync modules:

- ``SyncPhase``: States of the sync state machine.
- ``SyncOutcome``: How a cycle ended.
- ``TimestampComparison``: Result of comparing remote and cached timestamps.
- ``CacheStatus``: Snapshot of the durable cache.
- ``SyncResult``: Outcome of one sync cycle, including the served config.
- ``DebugInfo`` / ``TimestampInfo``: Read-only introspection views.

All models are frozen (immutable) for safety.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from ..projection import AppConfig


class SyncPhase(str, Enum):
    """States of the sync state machine."""

    IDLE = "idle"
    FETCHING = "fetching"
    OFFLINE = "offline"
    COMPARING = "comparing"
    UP_TO_DATE = "up_to_date"
    MERGING = "merging"
    FIRST_LOAD = "first_load"
    PERSISTED = "persisted"


class SyncOutcome(str, Enum):
    """How a sync cycle ended."""

    UP_TO_DATE = "up_to_date"
    MERGED = "merged"
    FIRST_LOAD = "first_load"
    OFFLINE = "offline"
    FAILED = "failed"


class TimestampComparison(BaseModel):
    """Sections whose remote ``_updated`` marker is new or newer.

    Attributes:
        changed_sections: Changed section names, in remote document order.
        needs_update: ``True`` iff ``changed_sections`` is non-empty.
    """

    changed_sections: list[str] = []
    needs_update: bool = False

    model_config = {"frozen": True}

    @property
    def changed(self) -> frozenset[str]:
        return frozenset(self.changed_sections)


class CacheStatus(BaseModel):
    """Snapshot of the four persisted cache records.

    Attributes:
        has_cached_raw: A valid raw document is stored.
        global_timestamp: Stored global version, if any.
        section_timestamps: Stored remote per-section timestamps.
        saved_at: ISO 8601 instant of the last save.
        cached_raw_length: Length of the stored raw document.
        storage_type: Name of the durable store backend.
    """

    has_cached_raw: bool = False
    global_timestamp: str | None = None
    section_timestamps: dict[str, str] = {}
    saved_at: str | None = None
    cached_raw_length: int = 0
    storage_type: str

    model_config = {"frozen": True}


class SyncResult(BaseModel):
    """Result of one sync cycle.

    Attributes:
        config: The served typed config, or ``None`` on failure.
        changed_sections: Sections taken from the remote in this cycle.
        from_cache: The served content came from the durable/memory cache.
        version: Global version of the served document.
        error: Error message; empty on success.
        verification: Checklist of well-known sections found.
        outcome: Which path the cycle took.
    """

    config: AppConfig | None = None
    changed_sections: list[str] = []
    from_cache: bool = False
    version: str = ""
    error: str = ""
    verification: list[str] = []
    outcome: SyncOutcome

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        """``True`` when content was served."""
        return self.config is not None


class DebugInfo(BaseModel):
    """Side-effect-free view of the context's in-memory state."""

    version: str
    raw_length: int
    raw_head: str
    error: str
    url: str
    section_timestamps: dict[str, str]
    phase: SyncPhase

    model_config = {"frozen": True}


class TimestampInfo(BaseModel):
    """Served versus persisted timestamps."""

    last_fetch: str
    config_version: str
    section_timestamps: dict[str, str]
    cached_section_timestamps: dict[str, str]
    storage_type: str

    model_config = {"frozen": True}
