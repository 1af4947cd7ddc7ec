"""Tests for the unified config schema and its adapter functions.

Covers the Pydantic models in config_schema.py (UnifiedConfig,
SourceConfig, StorageConfig, LoggingConfig), the build_config() factory,
and to_fallbacks() feeding load_config().
"""

import pytest
from pydantic import ValidationError

from content_sync.config import DEFAULT_CACHE_DIR, load_config
from content_sync.config_schema import (
    LoggingConfig,
    SourceConfig,
    StorageConfig,
    UnifiedConfig,
    build_config,
    to_fallbacks,
)

# ---------------------------------------------------------------------------
# UnifiedConfig tests
# ---------------------------------------------------------------------------


class TestUnifiedConfig:
    """Tests for the top-level UnifiedConfig model."""

    def test_empty_produces_valid_defaults(self):
        config = UnifiedConfig()
        assert config.source.url is None
        assert config.source.timeout == 20.0
        assert config.storage.backend == "sqlite"
        assert config.storage.namespace == "content_sync"
        assert config.logging.level == "INFO"
        assert config.logging.format == "text"
        assert config.debug is False

    def test_full_config(self):
        config = UnifiedConfig(
            source=SourceConfig(url="https://example.org/c.ini", timeout=5),
            storage=StorageConfig(
                backend="files", path="/tmp/cs", namespace="app"
            ),
            logging=LoggingConfig(level="DEBUG", file="/tmp/cs.log"),
            debug=True,
        )
        assert config.source.url == "https://example.org/c.ini"
        assert config.storage.backend == "files"
        assert config.logging.file == "/tmp/cs.log"

    def test_frozen(self):
        config = UnifiedConfig()
        with pytest.raises(ValidationError):
            config.debug = True


# ---------------------------------------------------------------------------
# Section validation
# ---------------------------------------------------------------------------


class TestSectionValidation:
    """Field constraints on the section models."""

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            StorageConfig(backend="redis")

    def test_empty_namespace_rejected(self):
        with pytest.raises(ValidationError):
            StorageConfig(namespace="")

    @pytest.mark.parametrize("timeout", [0, -5, 301])
    def test_timeout_bounds(self, timeout):
        with pytest.raises(ValidationError):
            SourceConfig(timeout=timeout)

    def test_log_format_rejected(self):
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")


# ---------------------------------------------------------------------------
# build_config()
# ---------------------------------------------------------------------------


class TestBuildConfig:
    """Tests for build_config() from raw YAML dicts."""

    def test_empty_dict(self):
        assert build_config({}) == UnifiedConfig()

    def test_nested_dicts(self):
        config = build_config(
            {
                "source": {"url": "https://example.org/c.ini"},
                "storage": {"backend": "files"},
                "logging": {"level": "WARNING"},
            }
        )
        assert config.source.url == "https://example.org/c.ini"
        assert config.storage.backend == "files"
        assert config.storage.namespace == "content_sync"
        assert config.logging.level == "WARNING"

    def test_invalid_section_raises(self):
        # ValidationError is a ValueError; the lifespan relies on that
        with pytest.raises(ValueError):
            build_config({"storage": {"backend": "memory"}})


# ---------------------------------------------------------------------------
# to_fallbacks()
# ---------------------------------------------------------------------------


class TestToFallbacks:
    """Tests for flattening into load_config() fallbacks."""

    def test_none_values_dropped(self):
        flat = to_fallbacks(UnifiedConfig())
        assert "url" not in flat
        assert "path" not in flat
        assert flat["backend"] == "sqlite"
        assert flat["timeout"] == 20.0
        assert flat["debug"] is False

    def test_all_values(self):
        flat = to_fallbacks(
            build_config(
                {
                    "source": {"url": "https://example.org/c.ini", "timeout": 3},
                    "storage": {"path": "/data", "namespace": "ns"},
                    "debug": True,
                }
            )
        )
        assert flat == {
            "url": "https://example.org/c.ini",
            "timeout": 3.0,
            "backend": "sqlite",
            "path": "/data",
            "namespace": "ns",
            "debug": True,
        }


# ---------------------------------------------------------------------------
# load_config() with YAML fallbacks
# ---------------------------------------------------------------------------


class TestFallbacksIntoLoadConfig:
    """The YAML path product code takes: build_config -> to_fallbacks -> load_config."""

    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        for var in (
            "CONTENT_SYNC_URL",
            "CONTENT_SYNC_STORAGE",
            "CONTENT_SYNC_CACHE_DIR",
            "CONTENT_SYNC_NAMESPACE",
            "CONTENT_SYNC_TIMEOUT",
            "CONTENT_SYNC_DEBUG",
        ):
            monkeypatch.delenv(var, raising=False)

    def test_yaml_values_applied(self):
        unified = build_config(
            {
                "source": {"url": "https://yaml.example.org/c.ini", "timeout": 4},
                "storage": {"backend": "files", "namespace": "yaml"},
            }
        )
        config = load_config(yaml_fallbacks=to_fallbacks(unified))
        assert config.source_url == "https://yaml.example.org/c.ini"
        assert config.storage_backend == "files"
        assert config.namespace == "yaml"
        assert config.timeout == 4.0
        assert config.cache_dir == DEFAULT_CACHE_DIR

    def test_env_and_cli_beat_yaml(self, monkeypatch):
        monkeypatch.setenv("CONTENT_SYNC_NAMESPACE", "env")
        unified = build_config(
            {
                "source": {"url": "https://yaml.example.org/c.ini"},
                "storage": {"namespace": "yaml"},
            }
        )
        config = load_config(
            url="https://cli.example.org/c.ini",
            yaml_fallbacks=to_fallbacks(unified),
        )
        assert config.source_url == "https://cli.example.org/c.ini"
        assert config.namespace == "env"
