"""Content-delivery client with a durable, section-aware local cache.

A single remotely-hosted, hand-edited, section-structured text file is the
source of truth for the application's content model.  ``content_sync``
fetches it, detects which sections changed via embedded ``_updated``
timestamps, selectively merges the changed sections into the cached copy,
and exposes the result as a typed ``AppConfig``.
"""

__version__ = "1.0.0"

from .errors import (
    ContentSyncError,
    InvalidPayload,
    ParseFailure,
    StorageFailure,
    TransportFailure,
)
from .projection import AppConfig, build_app_config
from .sync import SyncContext, SyncResult

__all__ = [
    "AppConfig",
    "ContentSyncError",
    "InvalidPayload",
    "ParseFailure",
    "StorageFailure",
    "SyncContext",
    "SyncResult",
    "TransportFailure",
    "__version__",
    "build_app_config",
]
