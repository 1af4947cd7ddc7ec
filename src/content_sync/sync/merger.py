"""Selective merge of a cached document with a freshly fetched one.

Rules, per section name over the union of both documents, first match wins:

1. Absent from *new*: dropped.  The remote decides which sections exist.
2. Absent from *old*: taken from *new*.
3. In ``ALWAYS_FRESH_SECTIONS``: taken from *new*.  These carry no
   reliable ``_updated`` marker.
4. In *changed*: taken from *new*.
5. Otherwise: taken from *old* verbatim, including its own ``_updated``.

The merged body of an unchanged section lags the remote while the timestamp
map persisted next to it (see ``ConfigCache.save``) holds the remote values.
The next cycle therefore compares against the current remote markers.
"""

from __future__ import annotations

import logging
from collections.abc import Collection

from ..constants import CONFIG_SECTION
from .codec import ParsedDocument

logger = logging.getLogger(__name__)

ALWAYS_FRESH_SECTIONS: frozenset[str] = frozenset(
    {CONFIG_SECTION, "strings_en", "strings_es"}
)


def merge(
    old: ParsedDocument,
    new: ParsedDocument,
    changed: Collection[str],
) -> ParsedDocument:
    """Merge *old* and *new* section by section.

    Args:
        old: Document parsed from the cache.
        new: Document parsed from the remote.
        changed: Sections whose remote timestamp is new or newer.

    Returns:
        A new document; neither input is mutated.  Sections follow *new*'s
        order, since every kept section exists there.
    """
    changed_set = set(changed)
    merged: ParsedDocument = {}

    for name in old:
        if name not in new:
            logger.debug("Section %r: removed in remote, dropping", name)

    for name, new_body in new.items():
        if name not in old:
            logger.debug("Section %r: new, using remote", name)
            merged[name] = dict(new_body)
        elif name in ALWAYS_FRESH_SECTIONS:
            merged[name] = dict(new_body)
        elif name in changed_set:
            logger.debug("Section %r: changed, using remote", name)
            merged[name] = dict(new_body)
        else:
            logger.debug("Section %r: unchanged, keeping cached", name)
            merged[name] = dict(old[name])

    return merged
