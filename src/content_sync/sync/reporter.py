"""Sync report formatting functions.

Provides human-readable and machine-readable output for sync operations:

- ``format_sync_result`` -- post-cycle summary.
- ``format_cache_status`` -- what the durable store currently holds.
- ``format_debug_info`` -- in-memory state of a ``SyncContext``.
- ``result_to_json`` -- structured dict for ``--json`` output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import CacheStatus, DebugInfo, SyncResult, TimestampInfo

from .models import SyncOutcome

_OUTCOME_LABELS = {
    SyncOutcome.UP_TO_DATE: "Up to date (served from cache)",
    SyncOutcome.MERGED: "Merged changed sections from remote",
    SyncOutcome.FIRST_LOAD: "First load (full remote document)",
    SyncOutcome.OFFLINE: "OFFLINE -- served cached copy",
    SyncOutcome.FAILED: "FAILED -- no content served",
}

# ------------------------------------------------------------------
# Human-readable report
# ------------------------------------------------------------------


def format_sync_result(result: SyncResult) -> str:
    """Format one sync cycle as human-readable text.

    Args:
        result: The cycle result.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []
    lines.append(f"Sync: {_OUTCOME_LABELS[result.outcome]}")
    if result.version:
        lines.append(f"Version: {result.version}")
    lines.append(f"From cache: {'yes' if result.from_cache else 'no'}")
    lines.append("")

    if result.changed_sections:
        lines.append(f"Changed sections ({len(result.changed_sections)}):")
        for name in result.changed_sections:
            lines.append(f"  {name}")
        lines.append("")

    if result.verification:
        lines.append("Verification:")
        for check in result.verification:
            lines.append(f"  {check}")
        lines.append("")

    if result.error:
        lines.append(f"Error: {result.error}")
        lines.append("")

    return "\n".join(lines).rstrip()


def format_cache_status(
    status: CacheStatus, timestamps: TimestampInfo | None = None
) -> str:
    """Format a cache status snapshot.

    Args:
        status: Snapshot from ``ConfigCache.status()``.
        timestamps: Optional served-versus-persisted timestamp view.
    """
    lines: list[str] = []
    lines.append(f"Storage: {status.storage_type}")
    if status.has_cached_raw:
        lines.append(f"Cached document: {status.cached_raw_length} chars")
    else:
        lines.append("Cached document: none")
    lines.append(f"Global version: {status.global_timestamp or 'N/A'}")
    lines.append(f"Saved at: {status.saved_at or 'N/A'}")
    lines.append("")

    if status.section_timestamps:
        lines.append(
            f"Section timestamps ({len(status.section_timestamps)}):"
        )
        width = max(len(name) for name in status.section_timestamps)
        for name, ts in sorted(status.section_timestamps.items()):
            served = ""
            if timestamps is not None:
                current = timestamps.section_timestamps.get(name)
                if current and current != ts:
                    served = f"  (served: {current})"
            lines.append(f"  {name:<{width}}  {ts}{served}")
        lines.append("")

    return "\n".join(lines).rstrip()


def format_debug_info(info: DebugInfo) -> str:
    """Format debug introspection output."""
    lines: list[str] = []
    lines.append(f"URL: {info.url}")
    lines.append(f"Phase: {info.phase.value}")
    lines.append(f"Version: {info.version}")
    lines.append(f"Raw length: {info.raw_length}")
    lines.append(f"Last error: {info.error or '(none)'}")
    lines.append(f"Sections with timestamps: {len(info.section_timestamps)}")
    lines.append("")
    if info.raw_head:
        lines.append("--- Raw head ---")
        for line in info.raw_head.splitlines():
            lines.append(f"  {line}")
    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def result_to_json(result: SyncResult) -> dict:
    """Convert a sync result to a structured dict for JSON serialisation.

    The typed config itself is omitted; only its presence is reported.

    Args:
        result: The cycle result.

    Returns:
        Dict with outcome, version and per-cycle details.
    """
    data: dict = {
        "outcome": result.outcome.value,
        "ok": result.ok,
        "version": result.version,
        "from_cache": result.from_cache,
        "changed_sections": list(result.changed_sections),
        "verification": list(result.verification),
    }
    if result.error:
        data["error"] = result.error
    return data
