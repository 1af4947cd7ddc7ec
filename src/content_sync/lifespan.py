"""Lifespan management for a ``SyncContext``: startup wiring and shutdown."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .config import load_config
from .config_loader import discover_config_files, load_hierarchical_config
from .config_schema import UnifiedConfig, build_config, to_fallbacks
from .core.client import RemoteSource
from .logger import setup_logging
from .storage import create_store
from .sync import ConfigCache, SyncContext

logger = logging.getLogger(__name__)


def _stderr_print(msg: str) -> None:
    """Print message to stderr; stdout is reserved for command output."""
    print(msg, file=sys.stderr, flush=True)


@asynccontextmanager
async def sync_lifespan(
    config_overrides: dict[str, Any] | None = None,
    log_mode: str = "cli",
) -> AsyncIterator[SyncContext]:
    """
    Build a ready-to-use ``SyncContext`` and dispose of it on exit.

    On startup:
    - Load .env file (so values are available for env var lookups and YAML interpolation)
    - Load YAML config file if present (as fallback values)
    - Configure logging from the YAML ``logging`` section and CLI overrides
    - Merge all sources via load_config(): CLI > env vars > .env > YAML > defaults
    - Create the durable store, the remote source and the context

    On shutdown:
    - Dispose the context (closes transports and the store)

    Args:
        config_overrides: Optional dict with config values from CLI (url,
            storage, cache_dir, namespace, timeout, debug, log_file,
            log_format).
        log_mode: ``"cli"`` or ``"service"``, passed to ``setup_logging``.

    Yields:
        The initialised ``SyncContext``.  No sync cycle has run yet.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    overrides = config_overrides or {}

    try:
        # 1. Load .env early (before YAML, so ${VAR} interpolation can use .env values)
        load_dotenv()

        # 2. Load YAML config if present
        unified = UnifiedConfig()
        yaml_fallbacks: dict[str, Any] | None = None
        config_files = discover_config_files()
        sources = []

        if config_files:
            unified = build_config(load_hierarchical_config())
            yaml_fallbacks = to_fallbacks(unified)
            sources.append(f"config file: {config_files[0]}")

        setup_logging(
            mode=log_mode,
            debug=bool(overrides.get("debug") or unified.debug),
            log_file=overrides.get("log_file") or unified.logging.file,
            debug_format=overrides.get("log_format") or unified.logging.format,
            level=unified.logging.level,
        )

        # 3. Single call to load_config with all sources merged
        config = load_config(
            url=overrides.get("url"),
            storage_backend=overrides.get("storage"),
            cache_dir=overrides.get("cache_dir"),
            namespace=overrides.get("namespace"),
            timeout=overrides.get("timeout"),
            debug=overrides.get("debug", False),
            yaml_fallbacks=yaml_fallbacks,
        )

        if overrides:
            sources.append("CLI arguments")
        sources.append("environment variables")
        logger.info("Configuration loaded from: %s", ", ".join(sources))
        logger.info(
            "Source %s, %s store at %s",
            config.source_url,
            config.storage_backend,
            config.cache_dir,
        )
    except (ValueError, yaml.YAMLError) as e:
        # pydantic's ValidationError is a ValueError
        logger.error("Configuration error: %s", e)
        _stderr_print(f"ERROR: Configuration error: {e}")
        _stderr_print("  Ensure CONTENT_SYNC_URL is set or pass --url.")
        raise RuntimeError(f"Configuration error: {e}") from e

    store = create_store(config.storage_backend, Path(config.cache_dir))
    ctx = SyncContext(
        RemoteSource(config.source_url, timeout=config.timeout),
        ConfigCache(store, config.namespace),
    )

    try:
        yield ctx
    finally:
        await ctx.dispose()
        logger.debug("Sync context disposed")
