"""
Chart acquisition error classes.

Provides a clear taxonomy of errors that can occur while registering
repositories, resolving charts and fetching artifacts. Errors from httpx,
oras-py and the filesystem are mapped onto this hierarchy at the component
boundary so callers only ever handle one family of exceptions.
"""
from __future__ import annotations

from typing import Optional


class ChartHostError(Exception):
    """Base class for all charthost errors."""
    pass


class ConfigError(ChartHostError):
    """
    The run configuration could not be loaded.

    Raised when:
    - The configuration file does not exist or cannot be read
    - The file extension is not .yaml, .yml or .json
    - The document does not match the expected schema

    This is fatal to the whole run.
    """
    pass


class AuthError(ChartHostError):
    """
    Login to an OCI registry was rejected.

    The orchestrator skips every chart of the affected registry.
    """

    def __init__(self, registry_url: str, message: str):
        super().__init__(f"Login to {registry_url} failed: {message}")
        self.registry_url = registry_url


class RegistrationError(ChartHostError):
    """The repository-list file could not be read or written."""
    pass


class InvalidURL(ChartHostError):
    """
    A URL is unparseable or uses a scheme other than http/https.

    Always raised before any network call is attempted.
    """

    def __init__(self, url: str, reason: str = "scheme must be http or https"):
        super().__init__(f"Invalid URL {url!r}: {reason}")
        self.url = url


class FetchError(ChartHostError):
    """
    Download failed.

    Raised when:
    - An HTTP request returns a non-200 status (status_code is set)
    - The connection fails or times out
    - The OCI pull primitive fails
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ChartNotFound(ChartHostError):
    """The exact chart name and version is absent from the repository index."""

    def __init__(self, chart: str, version: str, reason: str = "not found in index"):
        super().__init__(f"Chart {chart} version {version!r} {reason}")
        self.chart = chart
        self.version = version


class RepositoryNotRegistered(ChartHostError):
    """A legacy chart was resolved before its repository was registered."""

    def __init__(self, repo_url: str):
        super().__init__(f"Repository not registered: {repo_url}")
        self.repo_url = repo_url


class ChartIOError(ChartHostError):
    """Creating a directory or writing a file failed."""
    pass


__all__ = [
    "ChartHostError",
    "ConfigError",
    "AuthError",
    "RegistrationError",
    "InvalidURL",
    "FetchError",
    "ChartNotFound",
    "RepositoryNotRegistered",
    "ChartIOError",
]
