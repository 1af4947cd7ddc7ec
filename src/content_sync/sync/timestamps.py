"""Per-section timestamp extraction and comparison.

Timestamps use the ``YYYY-MM-DD-HH-mm`` format, so plain string comparison
equals chronological order.  No date parsing happens anywhere here.

The raw-text extractors work without a full parse so they can run on the
remote body before anything is accepted.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping

from ..constants import (
    COMMENT_PREFIX,
    CONFIG_SECTION,
    GLOBAL_VERSION_KEY,
    SECTION_TIMESTAMP_KEY,
)
from ..document import extract_timestamps
from .codec import ParsedDocument
from .models import TimestampComparison

__all__ = [
    "compare",
    "extract_global",
    "extract_per_section",
    "extract_timestamps",
    "extract_version",
]

logger = logging.getLogger(__name__)

_GLOBAL_PATTERN = re.compile(
    rf"{re.escape(GLOBAL_VERSION_KEY)}\s*=\s*(\S+)"
)
_HEADER_PATTERN = re.compile(r"^\[(.+)\]$")
_SECTION_PREFIX = f"{SECTION_TIMESTAMP_KEY}="


def extract_global(raw: str) -> str | None:
    """Return the first ``config_updated`` value in *raw*, or ``None``."""
    match = _GLOBAL_PATTERN.search(raw)
    if match is None:
        return None
    return match.group(1).strip() or None


def extract_per_section(raw: str) -> dict[str, str]:
    """Return ``{section: _updated value}`` for every section that has one.

    Sections without the key are absent from the result.
    """
    timestamps: dict[str, str] = {}
    current = ""

    for raw_line in raw.split("\n"):
        line = raw_line.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue

        header = _HEADER_PATTERN.match(line)
        if header:
            current = header.group(1)
            continue

        if current and line.startswith(_SECTION_PREFIX):
            value = line[len(_SECTION_PREFIX):].strip()
            if value:
                timestamps[current] = value

    return timestamps


def compare(
    remote: Mapping[str, str], cached: Mapping[str, str]
) -> TimestampComparison:
    """Find the sections whose remote timestamp is new or newer than cached.

    Sections present only in *cached* are never reported: removals are the
    merger's concern.
    """
    changed: list[str] = []

    for section, remote_ts in remote.items():
        cached_ts = cached.get(section)
        if not cached_ts:
            logger.debug("Section %r: not cached, needs update", section)
            changed.append(section)
        elif remote_ts.strip() > cached_ts.strip():
            logger.debug(
                "Section %r: remote=%s > cached=%s, needs update",
                section,
                remote_ts,
                cached_ts,
            )
            changed.append(section)

    return TimestampComparison(
        changed_sections=changed, needs_update=bool(changed)
    )


def extract_version(document: ParsedDocument) -> str:
    """Return ``config_updated`` from the ``[config]`` section, or ``""``."""
    return document.get(CONFIG_SECTION, {}).get(GLOBAL_VERSION_KEY, "")
