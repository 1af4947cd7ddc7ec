"""Network access and async helpers shared by the sync engine and CLI."""

from .async_utils import run_sync
from .client import RemoteSource, cache_buster, is_valid_document

__all__ = ["RemoteSource", "cache_buster", "is_valid_document", "run_sync"]
