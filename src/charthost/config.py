"""
Run configuration models.

These Pydantic models describe the registries to mirror and the charts to
pull from each of them. Credentials never appear in the file: a registry
names the environment variables that hold them and they are read at run time.
"""
from __future__ import annotations

import json
import os
import re
from enum import Enum
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError

__all__ = ["RegistryKind", "ChartRequest", "RegistryEntry", "ChartHostConfig", "Credentials"]

# Anything that looks like a constraint rather than a single version
_RANGE_RE = re.compile(r"[\s<>=~^*,|]|(^|\.)[xX](\.|$)")


class _ConfigLoader(yaml.SafeLoader):
    """SafeLoader that keeps numeric-looking scalars such as 1.10 as strings."""


_NUMERIC_TAGS = ("tag:yaml.org,2002:int", "tag:yaml.org,2002:float")
_ConfigLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _NUMERIC_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class RegistryKind(str, Enum):
    """How charts are addressed in a registry."""
    OCI = "oci"
    LEGACY = "legacy"


class Credentials(BaseModel):
    """Basic-auth credentials resolved from the environment."""
    username: str = ""
    password: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.username and self.password)

    def as_auth(self) -> Optional[Tuple[str, str]]:
        """Return (username, password) for httpx, or None when incomplete."""
        if self.complete:
            return (self.username, self.password)
        return None

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"

    __str__ = __repr__


class ChartRequest(BaseModel):
    """A single chart to pull: name plus an exact version."""
    name: str = Field(..., min_length=1, description="Chart name")
    version: str = Field(default="", description="Exact chart version (no ranges, no 'latest')")

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, v):
        """
        Accept a missing or numeric version; it is judged per request later.

        Surrounding whitespace is dropped so the value matches index entries.
        """
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else str(v)

    def version_problem(self) -> Optional[str]:
        """
        Explain why the version cannot identify a single artifact.

        Returns None for an exact version. Checked per request by the
        orchestrator so one bad entry does not fail the whole configuration.
        """
        version = self.version
        if not version:
            return "is empty"
        if version.lower() == "latest":
            return "must be exact, 'latest' is not supported"
        if _RANGE_RE.search(version):
            return "must be exact, ranges are not supported"
        return None

    def __str__(self) -> str:
        return f"{self.name}:{self.version}"


class RegistryEntry(BaseModel):
    """One registry from the configuration file."""
    url: str = Field(..., min_length=1, description="Registry or repository URL")
    is_oci: Optional[bool] = Field(default=None, description="True for OCI registries")
    username_env: Optional[str] = Field(default=None, description="Env var holding the username")
    password_env: Optional[str] = Field(default=None, description="Env var holding the password")
    charts: List[ChartRequest] = Field(default_factory=list, description="Charts to pull")

    @property
    def kind(self) -> RegistryKind:
        """
        Registry kind.

        The explicit is_oci flag always wins; the URL scheme is only consulted
        when the flag was omitted.
        """
        if self.is_oci is not None:
            return RegistryKind.OCI if self.is_oci else RegistryKind.LEGACY
        if self.url.lower().startswith("oci://"):
            return RegistryKind.OCI
        return RegistryKind.LEGACY

    def credentials(self, environ: Optional[Mapping[str, str]] = None) -> Credentials:
        """Read credentials from the environment variables named by this entry."""
        env = os.environ if environ is None else environ
        username = env.get(self.username_env, "") if self.username_env else ""
        password = env.get(self.password_env, "") if self.password_env else ""
        return Credentials(username=username, password=password)


class ChartHostConfig(BaseModel):
    """Top-level configuration document."""
    registries: List[RegistryEntry] = Field(default_factory=list)

    @classmethod
    def from_file(cls, path: Path | str) -> ChartHostConfig:
        """
        Load configuration from a YAML or JSON file.

        The format is chosen from the file extension.

        Raises:
            ConfigError: If the file is missing, unreadable, has an unsupported
                extension or does not match the schema
        """
        path = Path(path)
        suffix = path.suffix.lower()
        if suffix not in (".yaml", ".yml", ".json"):
            raise ConfigError(f"Unsupported configuration file format: {path}")

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r') as f:
                if suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.load(f, Loader=_ConfigLoader)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to parse configuration file {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {path} must contain a mapping at the top level")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration file {path}: {e}") from e
