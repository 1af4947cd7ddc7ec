"""Read-only views of a parsed document shared by the sync core and projection.

Kept free of package-internal imports beyond ``constants`` so that both
``sync`` and ``projection`` can depend on it.
"""

from __future__ import annotations

from collections.abc import Mapping

from .constants import SECTION_TIMESTAMP_KEY

Section = Mapping[str, str]
Document = Mapping[str, Section]


def extract_timestamps(document: Document) -> dict[str, str]:
    """Return the ``_updated`` value of every parsed section that has one."""
    return {
        name: section[SECTION_TIMESTAMP_KEY]
        for name, section in document.items()
        if section.get(SECTION_TIMESTAMP_KEY)
    }
