"""
Data models for chart resolution and fetching.

Covers the legacy repository index document and the resolved plan and
artifact passed between the resolver, the fetcher and the orchestrator.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .config import Credentials, RegistryKind
from .errors import ChartIOError, ChartNotFound
from .storage.uri import OciReference, validate_http_url

__all__ = ["ChartVersion", "IndexFile", "FetchPlan", "ChartArtifact", "OutcomeStatus", "ChartOutcome"]


class ChartVersion(BaseModel):
    """One version entry of a chart in an index document."""
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., description="Chart name")
    version: str = Field(..., description="Chart version")
    urls: List[str] = Field(default_factory=list, description="Download URLs, first entry wins")
    digest: Optional[str] = Field(default=None, description="Chart tarball digest")

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, v):
        """YAML may load unquoted versions such as 1.0 as numbers."""
        return v if isinstance(v, str) else str(v)


class IndexFile(BaseModel):
    """Legacy repository index document (index.yaml)."""
    model_config = ConfigDict(extra="ignore")

    api_version: Optional[str] = Field(default=None, alias="apiVersion")
    entries: Dict[str, List[ChartVersion]] = Field(default_factory=dict)

    @field_validator("entries", mode="before")
    @classmethod
    def fill_entry_names(cls, v):
        """Entries may omit the chart name; it is implied by the key."""
        if not isinstance(v, dict):
            return v
        filled = {}
        for chart, versions in v.items():
            if not isinstance(versions, list):
                filled[chart] = [] if versions is None else versions
                continue
            filled[chart] = [
                {"name": chart, **item} if isinstance(item, dict) and "name" not in item else item
                for item in versions
            ]
        return filled

    @classmethod
    def load(cls, path: Path) -> IndexFile:
        """
        Load an index document from the cache.

        Raises:
            ChartIOError: If the file is missing, unreadable or malformed
        """
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ChartIOError(f"Failed to load repository index {path}: {e}") from e
        try:
            return cls.model_validate(data or {})
        except ValidationError as e:
            raise ChartIOError(f"Malformed repository index {path}: {e}") from e

    def get(self, chart: str, version: str) -> ChartVersion:
        """
        Look up an exact chart version.

        Raises:
            ChartNotFound: If the chart or the exact version is absent
        """
        for entry in self.entries.get(chart, []):
            if entry.version == version:
                return entry
        raise ChartNotFound(chart, version)


@dataclass(frozen=True)
class FetchPlan:
    """
    A resolved, ready-to-execute download.

    Exactly one of ``url`` (legacy) or ``oci_ref`` (OCI) is set.
    """
    kind: RegistryKind
    chart: str
    version: str
    url: Optional[str] = None
    oci_ref: Optional[OciReference] = None
    credentials: Optional[Credentials] = None

    @classmethod
    def for_url(cls, chart: str, version: str, url: str,
                credentials: Optional[Credentials] = None) -> FetchPlan:
        """Plan an HTTP download; the URL is validated here, before any fetch."""
        validate_http_url(url)
        return cls(kind=RegistryKind.LEGACY, chart=chart, version=version,
                   url=url, credentials=credentials)

    @classmethod
    def for_oci(cls, chart: str, version: str, oci_ref: OciReference) -> FetchPlan:
        """Plan a registry-native pull."""
        return cls(kind=RegistryKind.OCI, chart=chart, version=version, oci_ref=oci_ref)

    @property
    def source(self) -> str:
        """Human readable source of the download."""
        return self.url if self.url is not None else str(self.oci_ref)


@dataclass(frozen=True)
class ChartArtifact:
    """A chart written to the output directory."""
    chart: str
    version: str
    path: Path
    size: int


class OutcomeStatus(str, Enum):
    """Result of one chart request."""
    PULLED = "pulled"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ChartOutcome:
    """Per-chart record kept by the orchestrator."""
    registry_url: str
    chart: str
    version: str
    status: OutcomeStatus
    path: Optional[Path] = None
    error: Optional[str] = None
