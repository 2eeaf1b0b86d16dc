"""
URL utilities for chart repositories and registries.

Provides consistent derivation of mirror names, validation of download URLs
and construction of OCI references across the index cache, the resolver and
the fetcher.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from urllib.parse import urlsplit, unquote

from ..errors import InvalidURL

__all__ = [
    "ALLOWED_SCHEMES",
    "OciReference",
    "mirror_name_for",
    "validate_http_url",
    "join_repo_url",
    "is_absolute_url",
    "url_basename",
    "oci_reference",
    "registry_hostname",
]

ALLOWED_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class OciReference:
    """
    Parsed components of an OCI chart reference.

    Attributes:
        hostname: Registry host[:port]
        repository: Repository path within the registry (chart name last)
        tag: Chart version used as the tag
    """
    hostname: str
    repository: str
    tag: str

    @property
    def target(self) -> str:
        """Reference string understood by the pull primitive."""
        return f"{self.hostname}/{self.repository}:{self.tag}"

    def __str__(self) -> str:
        return self.target


def mirror_name_for(repo_url: str) -> str:
    """
    Derive the local mirror name for a repository URL.

    The name is the last non-empty path segment; a URL without a path falls
    back to its host name so that every repository gets a usable name.

    Examples:
        >>> mirror_name_for("https://charts.example.com/stable/")
        'stable'
        >>> mirror_name_for("https://charts.example.com")
        'charts.example.com'
    """
    parts = urlsplit(repo_url)
    segments = [s for s in parts.path.split("/") if s]
    if segments:
        name = unquote(segments[-1])
    else:
        name = parts.hostname or ""
    if not name or name in (".", "..") or "\\" in name:
        raise InvalidURL(repo_url, "cannot derive a repository name")
    return name


def is_absolute_url(url: str) -> bool:
    """
    True when the URL carries its own scheme, whatever that scheme is.

    A file name containing a colon such as ``chart:1.0.tgz`` stays relative.
    """
    parts = urlsplit(url)
    return bool(parts.scheme) and (bool(parts.netloc) or parts.path.startswith("/"))


def validate_http_url(url: str) -> str:
    """
    Check that a URL is an absolute http(s) request URI.

    Raises:
        InvalidURL: If the URL cannot be parsed, has no host or uses
            any scheme other than http or https
    """
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError as e:
        raise InvalidURL(url, f"unparseable: {e}") from e
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidURL(url)
    if not host:
        raise InvalidURL(url, "missing host")
    return url


def join_repo_url(repo_url: str, path: str) -> str:
    """Join a relative chart path onto a repository URL with exactly one slash."""
    return f"{repo_url.rstrip('/')}/{path.lstrip('/')}"


def url_basename(url: str) -> str:
    """
    File name for a downloaded chart: the last segment of the URL path.

    Query strings and fragments are ignored.
    """
    name = unquote(PurePosixPath(urlsplit(url).path).name)
    if not name or name in (".", "..") or "\\" in name:
        raise InvalidURL(url, "URL path has no file name")
    return name


def oci_reference(repo_url: str, chart: str, version: str) -> OciReference:
    """
    Build the OCI reference for a chart.

    The oci:// scheme (or http(s)://, for insecure registries) is stripped;
    the registry path and chart name form the repository.
    """
    remainder = repo_url.split("://", 1)[1] if "://" in repo_url else repo_url
    remainder = remainder.strip("/")
    if not remainder:
        raise InvalidURL(repo_url, "missing registry host")
    hostname, _, path = remainder.partition("/")
    repository = f"{path}/{chart}" if path else chart
    return OciReference(hostname=hostname, repository=repository, tag=version)


def registry_hostname(registry_url: str) -> str:
    """Host[:port] portion of a registry URL, as used for login."""
    remainder = registry_url.split("://", 1)[1] if "://" in registry_url else registry_url
    hostname = remainder.strip("/").partition("/")[0]
    if not hostname:
        raise InvalidURL(registry_url, "missing registry host")
    return hostname
