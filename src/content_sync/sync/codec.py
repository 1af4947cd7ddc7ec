"""Text format codec: section-structured text <-> two-level mapping.

Grammar (informal)::

    ; comment
    [section name]
    key=value

Parsing is permissive and total: blank lines, comments, lines before the
first header and lines without a usable ``=`` are skipped, never raised on.
A partially corrupt document degrades to partial data.

Serialisation is lossy: comments, source key order and blank-line layout are
not preserved.  Only key/value content survives ``parse(serialize(doc))``.
"""

from __future__ import annotations

import re

from ..constants import COMMENT_PREFIX

Section = dict[str, str]
ParsedDocument = dict[str, Section]

_HEADER_PATTERN = re.compile(r"^\[(.+)\]$")


def parse(raw: str) -> ParsedDocument:
    """Parse raw text into ``{section: {key: value}}``.

    Re-opening a section merges into it; a repeated key overwrites the
    earlier value.  Every header yields a section, even an empty one.
    """
    document: ParsedDocument = {}
    current: Section | None = None

    for raw_line in raw.split("\n"):
        line = raw_line.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue

        header = _HEADER_PATTERN.match(line)
        if header:
            current = document.setdefault(header.group(1), {})
            continue

        if current is None:
            continue

        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        current[key] = value.strip()

    return document


def serialize(document: ParsedDocument) -> str:
    """Render *document* as text, one blank line after each section."""
    lines: list[str] = []
    for name, section in document.items():
        lines.append(f"[{name}]")
        for key, value in section.items():
            lines.append(f"{key}={value}")
        lines.append("")
    return "\n".join(lines)
