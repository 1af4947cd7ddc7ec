"""Runtime configuration for the content sync client.

Reads settings from CLI args, environment variables, .env files, and YAML
config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    CONTENT_SYNC_URL: URL of the remote content document (required)
    CONTENT_SYNC_STORAGE: Durable store backend, "sqlite" or "files" (default: sqlite)
    CONTENT_SYNC_CACHE_DIR: Directory holding the durable store (default: ~/.cache/content_sync)
    CONTENT_SYNC_NAMESPACE: Prefix for the persisted record names (default: content_sync)
    CONTENT_SYNC_TIMEOUT: Seconds allowed per transport attempt (default: 20)
    CONTENT_SYNC_DEBUG: Enable debug logging (default: false)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ("sqlite", "files")
DEFAULT_CACHE_DIR = str(Path.home() / ".cache" / "content_sync")
DEFAULT_NAMESPACE = "content_sync"
DEFAULT_TIMEOUT = 20.0


@dataclass
class Config:
    source_url: str
    storage_backend: str = "sqlite"
    cache_dir: str = DEFAULT_CACHE_DIR
    namespace: str = DEFAULT_NAMESPACE
    timeout: float = DEFAULT_TIMEOUT
    debug: bool = False


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If the URL, backend, namespace or timeout is invalid.
    """
    config.source_url = config.source_url.strip()

    if not config.source_url.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid source URL '{config.source_url}': must start with http:// or https://"
        )

    parsed = urlparse(config.source_url)
    if not parsed.hostname:
        raise ValueError(
            f"Invalid source URL '{config.source_url}': URL must include a hostname"
        )

    if config.storage_backend not in STORAGE_BACKENDS:
        raise ValueError(
            f"Invalid storage backend '{config.storage_backend}': "
            f"must be one of {', '.join(STORAGE_BACKENDS)}"
        )

    if not config.namespace.strip():
        raise ValueError("Cache namespace cannot be empty.")

    if not (0 < config.timeout <= 300):
        raise ValueError(
            f"Invalid timeout {config.timeout}: must be between 0 and 300 seconds"
        )

    if parsed.scheme == "http":
        logger.warning(
            "Source URL uses plain http; content is fetched without TLS."
        )


def _get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def load_config(
    url: str | None = None,
    storage_backend: str | None = None,
    cache_dir: str | None = None,
    namespace: str | None = None,
    timeout: float | None = None,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        url: Override the source URL.
        storage_backend: Override the durable store backend.
        cache_dir: Override the durable store directory.
        namespace: Override the persisted record prefix.
        timeout: Override the per-attempt transport timeout.
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Flat dict of values from the YAML config file.
            Used as fallback when CLI arg and env var are both unset.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If the source URL is missing or any value is invalid.
    """
    fb = yaml_fallbacks or {}

    source_url = url or os.getenv("CONTENT_SYNC_URL") or fb.get("url")
    if not source_url:
        raise ValueError(
            "Source URL not found. Set CONTENT_SYNC_URL environment variable, "
            "pass --url CLI argument, or add 'source.url' to config.yml."
        )

    final_backend = (
        storage_backend
        or os.getenv("CONTENT_SYNC_STORAGE")
        or fb.get("backend")
        or "sqlite"
    ).strip().lower()

    final_cache_dir = (
        cache_dir
        or os.getenv("CONTENT_SYNC_CACHE_DIR")
        or fb.get("path")
        or DEFAULT_CACHE_DIR
    )
    final_cache_dir = str(Path(final_cache_dir).expanduser())

    final_namespace = (
        namespace
        or os.getenv("CONTENT_SYNC_NAMESPACE")
        or fb.get("namespace")
        or DEFAULT_NAMESPACE
    )

    if timeout is not None:
        final_timeout = float(timeout)
    else:
        timeout_raw = os.getenv("CONTENT_SYNC_TIMEOUT")
        if timeout_raw is not None:
            try:
                final_timeout = float(timeout_raw)
            except ValueError:
                raise ValueError(
                    f"Invalid CONTENT_SYNC_TIMEOUT '{timeout_raw}': must be a number of seconds"
                ) from None
        elif "timeout" in fb:
            final_timeout = float(fb["timeout"])
        else:
            final_timeout = DEFAULT_TIMEOUT

    if debug:
        final_debug = True
    else:
        env_debug = _get_bool_env("CONTENT_SYNC_DEBUG")
        if env_debug is not None:
            final_debug = env_debug
        else:
            final_debug = bool(fb.get("debug", False))

    config = Config(
        source_url=source_url,
        storage_backend=final_backend,
        cache_dir=final_cache_dir,
        namespace=final_namespace.strip(),
        timeout=final_timeout,
        debug=final_debug,
    )

    validate_config(config)

    return config
