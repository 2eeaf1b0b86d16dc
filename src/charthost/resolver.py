"""
Chart resolver.

Turns a chart request into a FetchPlan. Legacy repositories are resolved
through their cached index document; OCI registries are self-describing, so
the plan is built directly from the registry URL.
"""
from __future__ import annotations

import logging
from typing import Optional

from .config import Credentials
from .errors import ChartNotFound
from .index_cache import LegacyIndexCache
from .models import FetchPlan, IndexFile
from .storage.uri import is_absolute_url, join_repo_url, oci_reference

__all__ = ["ChartResolver"]

logger = logging.getLogger(__name__)


class ChartResolver:
    """Resolves (repository, chart, version) to a concrete download plan."""

    def __init__(self, index_cache: LegacyIndexCache):
        self.index_cache = index_cache

    def resolve(self, repo_url: str, mirror_name: str, chart: str, version: str,
                credentials: Optional[Credentials] = None) -> FetchPlan:
        """
        Resolve a chart from a legacy repository's cached index.

        The version must match exactly. When the index lists several URLs for
        a version, the first one is used. Relative URLs are joined onto
        ``repo_url``; absolute URLs are used as they are, whatever their scheme,
        and then have to pass http(s) validation.

        Raises:
            ChartIOError: If the cached index cannot be loaded
            ChartNotFound: If the exact version is absent or has no URL
            InvalidURL: If the resulting URL is not http(s); nothing is fetched
        """
        index_file = self.index_cache.index_path(mirror_name)
        index = IndexFile.load(index_file)

        entry = index.get(chart, version)
        if not entry.urls:
            raise ChartNotFound(chart, version, "has no download URL in index")

        chart_url = entry.urls[0]
        if len(entry.urls) > 1:
            logger.debug(f"{chart} {version} lists {len(entry.urls)} URLs, using {chart_url}")
        if not is_absolute_url(chart_url):
            chart_url = join_repo_url(repo_url, chart_url)

        logger.info(f"Resolved {chart} {version} to {chart_url}")
        return FetchPlan.for_url(chart, version, chart_url, credentials=credentials)

    def resolve_oci(self, repo_url: str, chart: str, version: str) -> FetchPlan:
        """Build the pull plan for a chart in an OCI registry; no lookup occurs."""
        ref = oci_reference(repo_url, chart, version)
        logger.info(f"Resolved {chart} {version} to oci://{ref}")
        return FetchPlan.for_oci(chart, version, ref)
