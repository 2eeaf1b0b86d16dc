"""
Fetcher.

Executes a FetchPlan and writes the chart into the output directory. Legacy
charts are streamed over HTTP; OCI charts are pulled through the registry
session and held in memory before the write.
"""
from __future__ import annotations

import logging
from pathlib import Path

from .config import RegistryKind
from .errors import ChartIOError
from .models import ChartArtifact, FetchPlan
from .path_safety import safe_filename, write_bytes_atomically
from .session import RegistrySession
from .storage.http import ChartHTTP
from .storage.uri import url_basename

__all__ = ["Fetcher", "oci_chart_filename"]

logger = logging.getLogger(__name__)

DIR_MODE = 0o750
FILE_MODE = 0o600


def oci_chart_filename(chart: str, version: str) -> str:
    """Output file name for a chart pulled from an OCI registry."""
    return f"{chart}-{version}.tgz"


def _ensure_output_dir(output_dir: Path) -> None:
    try:
        output_dir.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
    except OSError as e:
        raise ChartIOError(f"Failed to create output directory {output_dir}: {e}") from e


def _output_path(output_dir: Path, name: str) -> Path:
    try:
        return output_dir / safe_filename(name)
    except ValueError as e:
        raise ChartIOError(str(e)) from e


class Fetcher:
    """
    Downloads planned charts.

    Existing files are overwritten without any checksum comparison.
    """

    def __init__(self, http: ChartHTTP, session: RegistrySession):
        """
        Args:
            http: HTTP client for legacy downloads
            session: Registry session shared with the orchestrator for OCI pulls
        """
        self.http = http
        self.session = session

    def fetch(self, plan: FetchPlan, output_dir: Path | str) -> ChartArtifact:
        """
        Execute a plan and persist the chart.

        Raises:
            InvalidURL: If a legacy URL is not http(s); nothing is fetched
            FetchError: On non-200 status, network failure or pull failure
            ChartIOError: If the directory or file cannot be written
        """
        output_dir = Path(output_dir)
        if plan.kind is RegistryKind.OCI:
            return self._fetch_oci(plan, output_dir)
        return self._fetch_legacy(plan, output_dir)

    def _fetch_legacy(self, plan: FetchPlan, output_dir: Path) -> ChartArtifact:
        url = plan.url
        chart_file = _output_path(output_dir, url_basename(url))
        _ensure_output_dir(output_dir)

        auth = plan.credentials.as_auth() if plan.credentials else None
        logger.info(f"Downloading {plan.chart} {plan.version} from {url}")
        size = self.http.download(url, chart_file, auth=auth)

        logger.info(f"Saved {plan.chart} {plan.version} to {chart_file} ({size} bytes)")
        return ChartArtifact(chart=plan.chart, version=plan.version, path=chart_file, size=size)

    def _fetch_oci(self, plan: FetchPlan, output_dir: Path) -> ChartArtifact:
        chart_file = _output_path(output_dir, oci_chart_filename(plan.chart, plan.version))

        logger.info(f"Pulling {plan.chart} {plan.version} from {plan.oci_ref}")
        data = self.session.pull(plan.oci_ref)

        _ensure_output_dir(output_dir)
        try:
            write_bytes_atomically(chart_file, data, mode=FILE_MODE)
        except OSError as e:
            raise ChartIOError(f"Failed to write {chart_file}: {e}") from e

        logger.info(f"Saved {plan.chart} {plan.version} to {chart_file} ({len(data)} bytes)")
        return ChartArtifact(chart=plan.chart, version=plan.version, path=chart_file, size=len(data))
