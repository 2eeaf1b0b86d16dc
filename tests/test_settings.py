"""
Tests for settings module.

Tests settings validation and environment variable loading.
"""
from __future__ import annotations

from pathlib import Path

import pytest

from charthost.settings import Settings, create_settings_from_env, default_settings


class TestSettings:
    """Test Settings dataclass validation."""

    def test_minimal_valid_settings(self, tmp_path):
        """Test creating settings with only the required paths."""
        settings = Settings(
            repository_config=tmp_path / "repositories.yaml",
            repository_cache=tmp_path / "cache",
            registry_config=tmp_path / "config.json",
        )
        assert settings.http_timeout_s == 30.0
        assert settings.http_retry == 0
        assert settings.registry_insecure is False

    def test_non_positive_timeout_raises(self, tmp_path):
        with pytest.raises(ValueError, match="http_timeout_s must be positive"):
            Settings(
                repository_config=tmp_path / "r.yaml",
                repository_cache=tmp_path,
                registry_config=tmp_path / "c.json",
                http_timeout_s=0,
            )

    def test_negative_retry_raises(self, tmp_path):
        with pytest.raises(ValueError, match="http_retry must be non-negative"):
            Settings(
                repository_config=tmp_path / "r.yaml",
                repository_cache=tmp_path,
                registry_config=tmp_path / "c.json",
                http_retry=-1,
            )

    def test_missing_path_raises(self, tmp_path):
        with pytest.raises(ValueError, match="repository_config is required"):
            Settings(repository_config="", repository_cache=tmp_path, registry_config=tmp_path / "c.json")

    def test_index_path(self, tmp_path):
        """Cached index documents are named <mirror>-index.yaml."""
        settings = default_settings(tmp_path)
        assert settings.index_path("stable") == tmp_path / "cache" / "stable-index.yaml"

    def test_settings_are_frozen(self, settings):
        with pytest.raises(Exception):
            settings.http_retry = 5


class TestDefaultSettings:
    """Test settings rooted at one directory."""

    def test_layout(self, tmp_path):
        settings = default_settings(tmp_path)
        assert settings.repository_config == tmp_path / "repositories.yaml"
        assert settings.repository_cache == tmp_path / "cache"
        assert settings.registry_config == tmp_path / "registry" / "config.json"


class TestCreateSettingsFromEnv:
    """Test environment variable loading."""

    def test_helm_locations_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HELM_REPOSITORY_CONFIG", str(tmp_path / "repos.yaml"))
        monkeypatch.setenv("HELM_REPOSITORY_CACHE", str(tmp_path / "repo-cache"))
        monkeypatch.setenv("HELM_REGISTRY_CONFIG", str(tmp_path / "reg.json"))

        settings = create_settings_from_env()

        assert settings.repository_config == tmp_path / "repos.yaml"
        assert settings.repository_cache == tmp_path / "repo-cache"
        assert settings.registry_config == tmp_path / "reg.json"

    def test_xdg_fallbacks(self, monkeypatch, tmp_path):
        """Without HELM_* variables the helm CLI's XDG locations are used."""
        for var in ("HELM_REPOSITORY_CONFIG", "HELM_REPOSITORY_CACHE", "HELM_REGISTRY_CONFIG"):
            monkeypatch.delenv(var, raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))

        settings = create_settings_from_env()

        assert settings.repository_config == tmp_path / "config" / "helm" / "repositories.yaml"
        assert settings.repository_cache == tmp_path / "cache" / "helm" / "repository"
        assert settings.registry_config == tmp_path / "config" / "helm" / "registry" / "config.json"

    def test_network_knobs_from_env(self, monkeypatch):
        monkeypatch.setenv("CHARTHOST_HTTP_TIMEOUT", "5.5")
        monkeypatch.setenv("CHARTHOST_HTTP_RETRY", "2")
        monkeypatch.setenv("CHARTHOST_REGISTRY_INSECURE", "yes")

        settings = create_settings_from_env()

        assert settings.http_timeout_s == 5.5
        assert settings.http_retry == 2
        assert settings.registry_insecure is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "off", "anything"])
    def test_insecure_falsy_values(self, monkeypatch, value):
        monkeypatch.setenv("CHARTHOST_REGISTRY_INSECURE", value)
        assert create_settings_from_env().registry_insecure is False

    def test_malformed_number_raises(self, monkeypatch):
        monkeypatch.setenv("CHARTHOST_HTTP_RETRY", "many")
        with pytest.raises(ValueError):
            create_settings_from_env()

    def test_fresh_instance_each_call(self):
        assert create_settings_from_env() is not create_settings_from_env()
        assert isinstance(create_settings_from_env().repository_config, Path)
