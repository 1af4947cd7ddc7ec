"""Tests for content_sync.config_loader — hierarchical config loading."""

import textwrap

import pytest
import yaml

from content_sync.config_loader import (
    CONFIG_ENV_VAR,
    _interpolate_recursive,
    discover_config_files,
    ensure_config,
    interpolate_env_vars,
    load_hierarchical_config,
)


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """CWD and HOME inside tmp_path, no explicit config path."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return tmp_path


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text))
    return path


# -------------------------------------------------------------------------
# Env var interpolation
# -------------------------------------------------------------------------


class TestInterpolateEnvVars:
    """Tests for ${VAR} and ${VAR:-default} substitution."""

    def test_replaces_set_var(self, monkeypatch):
        monkeypatch.setenv("CS_HOST", "cdn.local")
        assert interpolate_env_vars("${CS_HOST}") == "cdn.local"

    def test_unset_var_replaced_with_empty(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR_XYZ", raising=False)
        assert interpolate_env_vars("${UNSET_VAR_XYZ}") == ""

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR_XYZ", raising=False)
        assert (
            interpolate_env_vars("${UNSET_VAR_XYZ:-fallback}")
            == "fallback"
        )

    def test_default_ignored_when_set(self, monkeypatch):
        monkeypatch.setenv("CS_PORT", "8080")
        assert interpolate_env_vars("${CS_PORT:-3000}") == "8080"

    def test_empty_env_var_uses_default(self, monkeypatch):
        monkeypatch.setenv("EMPTY_VAR", "")
        assert (
            interpolate_env_vars("${EMPTY_VAR:-fallback}") == "fallback"
        )

    def test_multiple_vars_in_one_string(self, monkeypatch):
        monkeypatch.setenv("CS_A", "example.org")
        monkeypatch.setenv("CS_B", "app.ini")
        assert (
            interpolate_env_vars("https://${CS_A}/${CS_B}")
            == "https://example.org/app.ini"
        )

    def test_literal_dollar_brace_no_closing(self):
        assert interpolate_env_vars("${NO_CLOSE") == "${NO_CLOSE"

    def test_nested_structures(self, monkeypatch):
        monkeypatch.setenv("CS_URL", "https://example.org/c.ini")
        data = {"source": {"url": "${CS_URL}", "timeout": 5}, "x": ["${CS_URL}", 1]}
        assert _interpolate_recursive(data) == {
            "source": {"url": "https://example.org/c.ini", "timeout": 5},
            "x": ["https://example.org/c.ini", 1],
        }

    def test_non_string_values_untouched(self):
        data = {"count": 42, "enabled": True, "items": [1, 2, 3]}
        assert _interpolate_recursive(data) == data


# -------------------------------------------------------------------------
# Convention-based file discovery
# -------------------------------------------------------------------------


class TestDiscoverConfigFiles:
    """Tests for discover_config_files() precedence and filtering."""

    def test_nothing_found(self, isolated):
        assert discover_config_files() == []

    def test_env_var_takes_highest_precedence(self, isolated, monkeypatch):
        custom = _write(isolated / "custom.yml", "debug: true\n")
        _write(isolated / ".content_sync" / "config.yml", "debug: false\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(custom))

        result = discover_config_files()
        assert result[0] == custom.resolve()
        assert len(result) == 2

    def test_project_before_global(self, isolated):
        proj = _write(isolated / ".content_sync" / "config.yml", "a: 1\n")
        glob = _write(
            isolated / "home" / ".config" / "content_sync" / "config.yml",
            "b: 2\n",
        )

        result = [p.resolve() for p in discover_config_files()]
        assert result == [proj.resolve(), glob.resolve()]

    def test_missing_env_path_excluded(self, isolated, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(isolated / "missing.yml"))
        assert discover_config_files() == []


# -------------------------------------------------------------------------
# Hierarchical merge
# -------------------------------------------------------------------------


class TestLoadHierarchicalConfig:
    """Tests for load_hierarchical_config() merge and interpolation."""

    def test_zero_config_returns_empty_dict(self, isolated):
        assert load_hierarchical_config() == {}

    def test_global_only_loaded(self, isolated):
        _write(
            isolated / "home" / ".config" / "content_sync" / "config.yml",
            """\
            source:
              url: https://global.example.org/c.ini
            """,
        )
        result = load_hierarchical_config()
        assert result["source"]["url"] == "https://global.example.org/c.ini"

    def test_project_overrides_global_at_section_level(self, isolated):
        _write(
            isolated / "home" / ".config" / "content_sync" / "config.yml",
            """\
            source:
              url: https://global.example.org/c.ini
              timeout: 9
            storage:
              backend: files
            """,
        )
        _write(
            isolated / ".content_sync" / "config.yml",
            """\
            source:
              url: https://project.example.org/c.ini
            """,
        )

        result = load_hierarchical_config()
        # shallow merge: the project source section replaces the global one
        assert result["source"] == {"url": "https://project.example.org/c.ini"}
        assert result["storage"] == {"backend": "files"}

    def test_env_var_interpolation_after_merge(self, isolated, monkeypatch):
        monkeypatch.setenv("CS_SOURCE", "https://env.example.org/c.ini")
        _write(
            isolated / ".content_sync" / "config.yml",
            """\
            source:
              url: "${CS_SOURCE}"
            """,
        )
        result = load_hierarchical_config()
        assert result["source"]["url"] == "https://env.example.org/c.ini"

    def test_non_dict_root_skipped(self, isolated):
        _write(isolated / ".content_sync" / "config.yml", "- a\n- b\n")
        assert load_hierarchical_config() == {}

    def test_invalid_yaml_propagates(self, isolated):
        _write(isolated / ".content_sync" / "config.yml", "source: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            load_hierarchical_config()

    def test_unknown_tag_rejected(self, isolated):
        _write(isolated / ".content_sync" / "config.yml", "x: !include y.yml\n")
        with pytest.raises(yaml.constructor.ConstructorError):
            load_hierarchical_config()


# -------------------------------------------------------------------------
# Starter config
# -------------------------------------------------------------------------


class TestEnsureConfig:
    """Tests for ensure_config() starter file creation."""

    def test_creates_project_config(self, isolated):
        path = ensure_config()
        assert path.resolve() == (
            isolated / ".content_sync" / "config.yml"
        ).resolve()
        assert "CONTENT_SYNC_URL" in path.read_text()
        # Everything in the starter is commented out
        assert yaml.safe_load(path.read_text()) is None

    def test_explicit_target(self, isolated):
        target = isolated / "nested" / "cs.yml"
        assert ensure_config(target) == target
        assert target.exists()

    def test_existing_config_untouched(self, isolated):
        proj = _write(isolated / ".content_sync" / "config.yml", "debug: true\n")
        path = ensure_config()
        assert path.resolve() == proj.resolve()
        assert proj.read_text() == "debug: true\n"
