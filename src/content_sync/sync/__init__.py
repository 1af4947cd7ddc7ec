"""Selective content sync engine.

Keeps a local copy of a remote section-structured document current while
re-accepting only the sections whose ``_updated`` timestamp moved.

Architecture
------------
Each section of the remote document carries its own ``_updated`` marker.
A cycle compares those markers with the ones persisted after the previous
cycle and merges only the changed sections into the cached document.  The
persisted markers are always the *remote* ones, even for sections whose
body was kept from cache, so the next cycle compares against the current
remote state.

Modules:

- ``codec``      -- ``parse`` / ``serialize`` for the text format.
- ``timestamps`` -- extraction and comparison of section timestamps.
- ``merger``     -- selective section merge.
- ``state``      -- ``ConfigCache``: the four persisted cache records.
- ``engine``     -- ``SyncContext``: orchestrates a sync cycle.
- ``models``     -- ``SyncResult``, ``CacheStatus`` and friends.
- ``reporter``   -- Human-readable and JSON report formatting.

Usage example
-------------
::

    from content_sync.core import RemoteSource
    from content_sync.storage import create_store
    from content_sync.sync import ConfigCache, SyncContext, format_sync_result

    store = create_store("sqlite", Path("~/.cache/content_sync").expanduser())
    async with SyncContext(
        RemoteSource("https://example.org/config.ini"),
        ConfigCache(store, "content_sync"),
    ) as ctx:
        result = await ctx.load()
        print(format_sync_result(result))
"""

from .codec import ParsedDocument, parse, serialize
from .engine import SyncContext, verify_document
from .merger import ALWAYS_FRESH_SECTIONS, merge
from .models import (
    CacheStatus,
    DebugInfo,
    SyncOutcome,
    SyncPhase,
    SyncResult,
    TimestampComparison,
    TimestampInfo,
)
from .reporter import (
    format_cache_status,
    format_debug_info,
    format_sync_result,
    result_to_json,
)
from .state import ConfigCache
from .timestamps import (
    compare,
    extract_global,
    extract_per_section,
    extract_timestamps,
    extract_version,
)

__all__ = [
    "ALWAYS_FRESH_SECTIONS",
    "CacheStatus",
    "ConfigCache",
    "DebugInfo",
    "ParsedDocument",
    "SyncContext",
    "SyncOutcome",
    "SyncPhase",
    "SyncResult",
    "TimestampComparison",
    "TimestampInfo",
    "compare",
    "extract_global",
    "extract_per_section",
    "extract_timestamps",
    "extract_version",
    "format_cache_status",
    "format_debug_info",
    "format_sync_result",
    "merge",
    "parse",
    "result_to_json",
    "serialize",
    "verify_document",
]
