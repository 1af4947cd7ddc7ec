"""Unified configuration schema for content_sync.

Defines Pydantic models for the YAML config structure with dedicated
sections for the remote source, the durable store and logging, plus the
adapter that flattens it into ``load_config()`` fallbacks.

Usage:
    from content_sync.config_schema import build_config, to_fallbacks

    raw = load_hierarchical_config()
    unified = build_config(raw)
    config = load_config(yaml_fallbacks=to_fallbacks(unified))
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class SourceConfig(BaseModel):
    """Remote document settings.

    ``url`` is optional so env vars and CLI args can supply it instead.
    """

    url: str | None = Field(
        default=None, description="URL of the remote content document"
    )
    timeout: float = Field(
        default=20.0,
        gt=0,
        le=300,
        description="Seconds allowed per transport attempt",
    )

    model_config = {"frozen": True}


class StorageConfig(BaseModel):
    """Durable store settings."""

    backend: Literal["sqlite", "files"] = Field(
        default="sqlite", description="Durable store implementation"
    )
    path: str | None = Field(
        default=None, description="Directory holding the store"
    )
    namespace: str = Field(
        default="content_sync",
        min_length=1,
        description="Prefix for persisted record names",
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
        format: "text" or "json".
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")
    format: Literal["text", "json"] = Field(
        default="text", description="Log record format"
    )

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has defaults, so ``UnifiedConfig()`` is always valid.
    """

    source: SourceConfig = Field(default_factory=SourceConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Missing sections get defaults.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)


def to_fallbacks(unified: UnifiedConfig) -> dict[str, Any]:
    """Flatten the YAML-derived values into ``load_config`` fallbacks.

    ``None`` values are dropped so they never shadow built-in defaults.
    """
    flat: dict[str, Any] = {
        "url": unified.source.url,
        "timeout": unified.source.timeout,
        "backend": unified.storage.backend,
        "path": unified.storage.path,
        "namespace": unified.storage.namespace,
        "debug": unified.debug,
    }
    return {k: v for k, v in flat.items() if v is not None}
