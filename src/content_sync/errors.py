"""Error taxonomy for the content sync engine.

``TransportFailure`` and ``InvalidPayload`` are recovered by falling back to
the durable store.  ``ParseFailure`` is surfaced for the cycle in which it
happens.  ``StorageFailure`` is logged and treated as "no cache".
"""

from __future__ import annotations


class ContentSyncError(Exception):
    """Base class for all content sync errors."""


class TransportFailure(ContentSyncError):
    """Every transport attempt failed, timed out, or returned an unusable body.

    Args:
        attempts: One short error string per failed attempt, in the order
            the attempts were made.
    """

    def __init__(self, attempts: list[str] | None = None) -> None:
        self.attempts = list(attempts or [])
        super().__init__(
            " → ".join(self.attempts) or "remote fetch failed"
        )


class InvalidPayload(TransportFailure):
    """The fetched body lacks the ``[config]`` marker or looks like markup."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__([reason])


class ParseFailure(ContentSyncError):
    """Building the typed projection from a document raised."""


class StorageFailure(ContentSyncError):
    """The durable store could not read or write a record."""
