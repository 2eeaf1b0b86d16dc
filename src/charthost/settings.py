"""
Settings and configuration for charthost.

Centralizes the on-disk locations and network knobs shared by the registry
session, the legacy index cache and the fetcher. Loads settings from
environment variables, falling back to the same locations the helm CLI uses.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

__all__ = ["Settings", "create_settings_from_env", "default_settings"]


def _xdg_dir(env_var: str, fallback: str) -> Path:
    value = os.getenv(env_var)
    return Path(value) if value else Path.home() / fallback


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for charthost.

    Repository Settings:
        repository_config: Path of the repository-list file (helm repositories.yaml)
        repository_cache: Directory holding cached <name>-index.yaml files
        registry_config: Credentials file the OCI client persists logins to

    Network Settings:
        http_timeout_s: Timeout for every legacy HTTP request in seconds
        http_retry: Number of retries for timed out requests (0=no retry)
        registry_insecure: Allow plain HTTP connections to OCI registries
    """
    repository_config: Path
    repository_cache: Path
    registry_config: Path
    http_timeout_s: float = 30.0
    http_retry: int = 0
    registry_insecure: bool = False

    def __post_init__(self):
        """Validate settings on construction."""
        for name in ("repository_config", "repository_cache", "registry_config"):
            if not getattr(self, name):
                raise ValueError(f"{name} is required")

        if self.http_timeout_s <= 0:
            raise ValueError(f"http_timeout_s must be positive, got {self.http_timeout_s}")

        if self.http_retry < 0:
            raise ValueError(f"http_retry must be non-negative, got {self.http_retry}")

    def index_path(self, mirror_name: str) -> Path:
        """Location of the cached index document for a mirror."""
        return Path(self.repository_cache) / f"{mirror_name}-index.yaml"


def default_settings(root: Optional[Path] = None) -> Settings:
    """
    Build settings rooted at a single directory.

    Handy for tests and for callers that want an isolated cache instead of
    sharing the user's helm configuration.
    """
    if root is None:
        return create_settings_from_env()
    root = Path(root)
    return Settings(
        repository_config=root / "repositories.yaml",
        repository_cache=root / "cache",
        registry_config=root / "registry" / "config.json",
    )


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        - HELM_REPOSITORY_CONFIG (default: $XDG_CONFIG_HOME/helm/repositories.yaml)
        - HELM_REPOSITORY_CACHE (default: $XDG_CACHE_HOME/helm/repository)
        - HELM_REGISTRY_CONFIG (default: $XDG_CONFIG_HOME/helm/registry/config.json)
        - CHARTHOST_HTTP_TIMEOUT (default: 30.0)
        - CHARTHOST_HTTP_RETRY (default: 0)
        - CHARTHOST_REGISTRY_INSECURE (default: false)

    Returns:
        Settings object with validated configuration

    Raises:
        ValueError: If a value is malformed or out of range

    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def str_to_bool(value: str) -> bool:
        return value.lower() in ('true', '1', 'yes', 'on')

    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        return float(value) if value else default

    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        return int(value) if value else default

    config_home = _xdg_dir("XDG_CONFIG_HOME", ".config")
    cache_home = _xdg_dir("XDG_CACHE_HOME", ".cache")

    repository_config = os.getenv("HELM_REPOSITORY_CONFIG") or str(config_home / "helm" / "repositories.yaml")
    repository_cache = os.getenv("HELM_REPOSITORY_CACHE") or str(cache_home / "helm" / "repository")
    registry_config = os.getenv("HELM_REGISTRY_CONFIG") or str(config_home / "helm" / "registry" / "config.json")

    return Settings(
        repository_config=Path(repository_config),
        repository_cache=Path(repository_cache),
        registry_config=Path(registry_config),
        http_timeout_s=get_float("CHARTHOST_HTTP_TIMEOUT", 30.0),
        http_retry=get_int("CHARTHOST_HTTP_RETRY", 0),
        registry_insecure=str_to_bool(os.getenv("CHARTHOST_REGISTRY_INSECURE", "false")),
    )
