"""Sync orchestrator: one fetch-compare-merge-persist cycle per ``load()``.

The ``SyncContext`` ties together the remote source, the cache records, the
codec, the timestamp comparator and the merger.  A cycle:

1. Fetches the remote document (primary transport, then secondary).
2. On transport failure, serves the durable cache if it holds a valid
   document, otherwise reports a terminal error.  No placeholder content is
   ever synthesised.
3. Compares remote per-section timestamps with the persisted ones.
4. Up to date: serves the cached parse without writing anything.
5. Changed: merges changed sections into the cached document, persists
   the merged text together with the *remote* timestamps, serves the merge.
6. No cache: accepts the remote document as-is, persists it, serves it.

A projection failure during steps 4-6 is fatal for the cycle: nothing is
persisted and the previously served config stays in memory.

Concurrent ``load()`` calls share one in-flight cycle.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping

from ..constants import CONFIG_MARKER
from ..core.client import RemoteSource
from ..errors import ParseFailure, TransportFailure
from ..projection import AppConfig, build_app_config
from .codec import ParsedDocument, parse, serialize
from .merger import merge
from .models import DebugInfo, SyncOutcome, SyncPhase, SyncResult, TimestampInfo
from .state import ConfigCache
from .timestamps import (
    compare,
    extract_global,
    extract_per_section,
    extract_timestamps,
    extract_version,
)

logger = logging.getLogger(__name__)

WELL_KNOWN_SECTIONS = ("strings_en", "strings_es", "footer", "hero")
RAW_HEAD_LENGTH = 200

Projector = Callable[[Mapping[str, Mapping[str, str]]], AppConfig]


def verify_document(raw: str) -> tuple[bool, list[str]]:
    """Check a raw document for the well-known sections.

    Returns:
        ``(valid, checks)`` where *valid* is ``True`` iff ``[config]`` is
        present and *checks* describes each section found.
    """
    checks: list[str] = []
    valid = CONFIG_MARKER in raw
    if valid:
        checks.append(f"{CONFIG_MARKER} section found")
    else:
        checks.append(f"{CONFIG_MARKER} section MISSING")
    for name in WELL_KNOWN_SECTIONS:
        if f"[{name}]" in raw:
            checks.append(f"[{name}] found")
    return valid, checks


class SyncContext:
    """Owns the served config and runs sync cycles against one source.

    Lifecycle: construct, ``load()``, ``refresh(hard=...)`` as needed, then
    ``dispose()``.  Also usable as ``async with SyncContext(...) as ctx``.

    Args:
        source: Remote document source.
        cache: Persisted cache records.
        projector: Builds the typed config from a parsed document.  Any
            exception it raises is reported as a ``ParseFailure``.
    """

    def __init__(
        self,
        source: RemoteSource,
        cache: ConfigCache,
        projector: Projector = build_app_config,
    ) -> None:
        self.source = source
        self.cache = cache
        self._projector = projector

        self._config: AppConfig | None = None
        self._parsed: ParsedDocument | None = None
        self._raw = ""
        self._version = ""
        self._timestamps: dict[str, str] = {}
        self._last_error = ""
        self._stale = False
        self._phase = SyncPhase.IDLE

        self._lock = asyncio.Lock()
        self._inflight: asyncio.Task[SyncResult] | None = None

    async def __aenter__(self) -> SyncContext:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.dispose()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def current_config(self) -> AppConfig | None:
        return self._config

    @property
    def version(self) -> str:
        return self._version if self._config is not None else "not loaded"

    @property
    def last_error(self) -> str:
        return self._last_error

    @property
    def raw_text(self) -> str:
        return self._raw

    @property
    def is_stale(self) -> bool:
        """``True`` when the served config came from the offline fallback."""
        return self._stale

    @property
    def phase(self) -> SyncPhase:
        return self._phase

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> SyncResult:
        """Run a sync cycle, or join the one already in flight."""
        async with self._lock:
            task = self._inflight
            if task is None:
                task = asyncio.create_task(self._guarded_cycle())
                self._inflight = task
            else:
                logger.info("Sync already in progress, awaiting it")
        return await asyncio.shield(task)

    async def refresh(self, hard: bool = False) -> SyncResult:
        """Clear state and run a new cycle.

        A soft refresh clears memory only, so the next comparison still runs
        against the persisted timestamps.  A hard refresh also wipes the
        durable cache, making every section look new.
        """
        if hard:
            await self.reset()
        else:
            self.invalidate()
        return await self.load()

    def invalidate(self) -> None:
        """Soft clear: forget the in-memory config.  The store is untouched."""
        self._config = None
        self._parsed = None
        self._raw = ""
        self._version = ""
        self._timestamps = {}
        self._last_error = ""
        self._stale = False
        logger.debug("In-memory config cleared")

    async def reset(self) -> None:
        """Hard clear: forget the in-memory config and wipe the store."""
        self.invalidate()
        await self.cache.clear()

    async def dispose(self) -> None:
        """Release transports and the store."""
        if self._inflight is not None:
            await asyncio.shield(self._inflight)
        self.invalidate()
        await self.source.close()
        await self.cache.close()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def debug_info(self) -> DebugInfo:
        return DebugInfo(
            version=self.version,
            raw_length=len(self._raw),
            raw_head=self._raw[:RAW_HEAD_LENGTH],
            error=self._last_error,
            url=self.source.url,
            section_timestamps=dict(self._timestamps),
            phase=self._phase,
        )

    async def timestamp_info(self) -> TimestampInfo:
        return TimestampInfo(
            last_fetch=await self.cache.get_saved_at() or "N/A",
            config_version=self.version,
            section_timestamps=dict(self._timestamps),
            cached_section_timestamps=await self.cache.get_section_timestamps(),
            storage_type=self.cache.storage_type,
        )

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    async def _guarded_cycle(self) -> SyncResult:
        try:
            return await self._run_cycle()
        finally:
            self._phase = SyncPhase.IDLE
            self._inflight = None

    async def _run_cycle(self) -> SyncResult:
        self._phase = SyncPhase.FETCHING
        status = await self.cache.status()
        logger.info(
            "Sync: url=%s cache=%s storage=%s",
            self.source.url,
            (
                f"{status.cached_raw_length} chars, "
                f"{len(status.section_timestamps)} sections"
                if status.has_cached_raw
                else "empty"
            ),
            status.storage_type,
        )

        try:
            remote_raw = await self.source.fetch()
        except TransportFailure as exc:
            return await self._serve_offline(exc)

        self._phase = SyncPhase.COMPARING
        remote_global = extract_global(remote_raw)
        remote_sections = extract_per_section(remote_raw)
        cached_raw = await self.cache.get_cached_raw()
        logger.info(
            "Remote version %s, %d sections with timestamps",
            remote_global,
            len(remote_sections),
        )

        if cached_raw is not None:
            cached_sections = await self.cache.get_section_timestamps()
            comparison = compare(remote_sections, cached_sections)

            if not comparison.needs_update:
                result = self._serve_up_to_date(cached_raw)
                if result is not None:
                    return result
            else:
                return await self._merge(
                    cached_raw,
                    remote_raw,
                    remote_global,
                    remote_sections,
                    comparison.changed_sections,
                )

        return await self._first_load(
            remote_raw, remote_global, remote_sections
        )

    def _serve_up_to_date(self, cached_raw: str) -> SyncResult | None:
        """Serve the cached document, or ``None`` if it cannot be projected."""
        self._phase = SyncPhase.UP_TO_DATE
        logger.info("All sections up to date, serving cache")

        if self._config is not None and self._raw == cached_raw:
            logger.debug("Using in-memory parsed config")
            self._stale = False
            return self._result(
                self._config, self._raw, SyncOutcome.UP_TO_DATE, from_cache=True
            )

        try:
            parsed = parse(cached_raw)
            config = self._project(parsed)
        except ParseFailure as exc:
            logger.warning("Cached copy failed to build (%s), reloading remote", exc)
            return None

        self._commit(cached_raw, parsed, config, stale=False)
        return self._result(
            config, cached_raw, SyncOutcome.UP_TO_DATE, from_cache=True
        )

    async def _merge(
        self,
        cached_raw: str,
        remote_raw: str,
        remote_global: str | None,
        remote_sections: dict[str, str],
        changed: list[str],
    ) -> SyncResult:
        self._phase = SyncPhase.MERGING
        logger.info("Changed sections: %s", ", ".join(changed))

        try:
            old = parse(cached_raw)
            merged = merge(old, parse(remote_raw), changed)
            config = self._project(merged)
        except ParseFailure as exc:
            return self._parse_failed(exc, remote_raw)

        merged_raw = serialize(merged)
        # Timestamps are the remote ones, not those inside merged_raw.
        await self.cache.save(merged_raw, remote_global, remote_sections)
        self._phase = SyncPhase.PERSISTED
        logger.info(
            "Merged: %d sections updated, %d kept from cache",
            len(changed),
            len(set(merged) - set(changed)),
        )

        self._commit(merged_raw, merged, config, stale=False)
        return self._result(
            config, merged_raw, SyncOutcome.MERGED, changed_sections=changed
        )

    async def _first_load(
        self,
        remote_raw: str,
        remote_global: str | None,
        remote_sections: dict[str, str],
    ) -> SyncResult:
        self._phase = SyncPhase.FIRST_LOAD
        logger.info("No usable cache, accepting full remote document")

        try:
            parsed = parse(remote_raw)
            config = self._project(parsed)
        except ParseFailure as exc:
            return self._parse_failed(exc, remote_raw)

        await self.cache.save(remote_raw, remote_global, remote_sections)
        self._phase = SyncPhase.PERSISTED

        self._commit(remote_raw, parsed, config, stale=False)
        return self._result(
            config,
            remote_raw,
            SyncOutcome.FIRST_LOAD,
            changed_sections=list(parsed),
        )

    async def _serve_offline(self, failure: TransportFailure) -> SyncResult:
        self._phase = SyncPhase.OFFLINE
        cached_raw = await self.cache.get_cached_raw()

        if cached_raw is None:
            error = f"{failure} (no cached copy available)"
            self._last_error = error
            logger.error("All fetches failed and no cache: %s", error)
            return SyncResult(error=error, outcome=SyncOutcome.FAILED)

        logger.warning(
            "Fetch failed (%s), serving cached copy (%d chars)",
            failure,
            len(cached_raw),
        )
        if self._config is not None and self._raw == cached_raw:
            self._stale = True
            return self._result(
                self._config, cached_raw, SyncOutcome.OFFLINE, from_cache=True
            )

        try:
            parsed = parse(cached_raw)
            config = self._project(parsed)
        except ParseFailure as exc:
            error = f"Cache parse error: {exc}"
            self._last_error = error
            logger.error("Cached copy is corrupt, clearing it: %s", exc)
            await self.cache.clear()
            return SyncResult(
                error=error,
                verification=verify_document(cached_raw)[1],
                outcome=SyncOutcome.FAILED,
            )

        self._commit(cached_raw, parsed, config, stale=True)
        return self._result(
            config, cached_raw, SyncOutcome.OFFLINE, from_cache=True
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _project(self, parsed: ParsedDocument) -> AppConfig:
        try:
            return self._projector(parsed)
        except ParseFailure:
            raise
        except Exception as exc:
            raise ParseFailure(f"{type(exc).__name__}: {exc}") from exc

    def _parse_failed(self, exc: ParseFailure, raw: str) -> SyncResult:
        error = f"Parse error: {exc}"
        self._last_error = error
        logger.error("Build failed, nothing persisted: %s", exc)
        return SyncResult(
            error=error,
            verification=verify_document(raw)[1],
            outcome=SyncOutcome.FAILED,
        )

    def _commit(
        self,
        raw: str,
        parsed: ParsedDocument,
        config: AppConfig,
        stale: bool,
    ) -> None:
        self._raw = raw
        self._parsed = parsed
        self._config = config
        self._version = extract_version(parsed) or "unknown"
        self._timestamps = extract_timestamps(parsed)
        self._last_error = ""
        self._stale = stale

    def _result(
        self,
        config: AppConfig,
        raw: str,
        outcome: SyncOutcome,
        from_cache: bool = False,
        changed_sections: list[str] | None = None,
    ) -> SyncResult:
        logger.info(
            "Sync %s: version=%s, %d chars%s",
            outcome.value,
            self._version,
            len(raw),
            " (from cache)" if from_cache else "",
        )
        return SyncResult(
            config=config,
            changed_sections=changed_sections or [],
            from_cache=from_cache,
            version=self._version,
            verification=verify_document(raw)[1],
            outcome=outcome,
        )
