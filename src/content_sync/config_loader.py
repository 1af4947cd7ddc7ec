"""
Hierarchical YAML configuration loader for content_sync.

Discovers config files by convention, merges them with "project wins"
semantics and interpolates ``${VAR}`` references from the environment.

Usage:
    from content_sync.config_loader import load_hierarchical_config

    raw = load_hierarchical_config()
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "CONTENT_SYNC_CONFIG"
PROJECT_CONFIG = Path(".content_sync") / "config.yml"
GLOBAL_CONFIG = Path(".config") / "content_sync" / "config.yml"

# ${VAR} and ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+?)(?::-(.*?))?\}")


def interpolate_env_vars(value: str) -> str:
    """Replace ``${VAR}`` and ``${VAR:-default}`` with environment values.

    An unset or empty variable becomes *default* when one is given, and the
    empty string otherwise.
    """

    def _replace(match: re.Match) -> str:
        env_val = os.environ.get(match.group(1))
        if env_val:
            return env_val
        default = match.group(2)
        return default if default is not None else ""

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _interpolate_recursive(obj: Any) -> Any:
    """Walk a nested dict/list and interpolate env vars in all strings."""
    if isinstance(obj, str):
        return interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _interpolate_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_interpolate_recursive(item) for item in obj]
    return obj


def discover_config_files() -> list[Path]:
    """Return existing config file paths, highest precedence first.

    Search order:
        1. ``CONTENT_SYNC_CONFIG`` env var (explicit single path)
        2. ``.content_sync/config.yml`` in CWD (project-level)
        3. ``~/.config/content_sync/config.yml`` (user-level)
    """
    candidates: list[Path] = []

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        candidates.append(Path(env_path).expanduser().resolve())

    candidates.append(Path.cwd() / PROJECT_CONFIG)
    candidates.append(Path.home() / GLOBAL_CONFIG)

    return [p for p in candidates if p.exists()]


_STARTER_CONFIG = """\
# content-sync configuration
#
# Every value can also be set via environment variables:
#   CONTENT_SYNC_URL, CONTENT_SYNC_STORAGE, CONTENT_SYNC_CACHE_DIR,
#   CONTENT_SYNC_NAMESPACE, CONTENT_SYNC_TIMEOUT, CONTENT_SYNC_DEBUG
#
# source:
#   url: https://raw.githubusercontent.com/example/configs/main/app-config.ini
#   timeout: 20
#
# storage:
#   backend: sqlite        # or "files"
#   path: ~/.cache/content_sync
#   namespace: content_sync
#
# logging:
#   level: INFO
#   file: null
#   format: text
"""


def ensure_config(target: Path | None = None) -> Path:
    """Return the active config file, writing a starter file if none exists.

    Args:
        target: Explicit path to create.  Defaults to the project-level
            ``.content_sync/config.yml`` under CWD.
    """
    existing = discover_config_files()
    if existing:
        logger.debug("Config file already exists: %s", existing[0])
        return existing[0]

    config_path = target or (Path.cwd() / PROJECT_CONFIG)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(_STARTER_CONFIG, encoding="utf-8")
    logger.info("Created starter config: %s", config_path)
    return config_path


def _load_yaml(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh)


def load_hierarchical_config() -> dict[str, Any]:
    """Load and merge all discovered config files.

    Files are applied from lowest precedence to highest; each file's
    top-level keys replace those from earlier files.  Env var interpolation
    runs after the merge.  Returns ``{}`` when no config file exists.
    """
    paths = discover_config_files()

    if not paths:
        logger.debug("No config files found, using defaults")
        return {}

    merged: dict[str, Any] = {}
    for path in reversed(paths):
        logger.debug("Loading config: %s", path)
        try:
            data = _load_yaml(path)
        except Exception:
            logger.exception("Failed to load config file %s", path)
            raise

        if isinstance(data, dict):
            merged.update(data)
        elif data is not None:
            logger.warning(
                "Config file %s has non-dict root (%s), skipping",
                path,
                type(data).__name__,
            )

    return _interpolate_recursive(merged)
