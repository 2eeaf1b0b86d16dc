"""
ORAS chart registry - OCI login and chart pulls.

Uses oras-py for authentication and for fetching the chart content layer of
a Helm chart artifact.
"""
from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Any, Dict

import oras.client

from ..errors import AuthError, FetchError
from ..settings import Settings
from .uri import OciReference

__all__ = ["OrasChartRegistry", "HELM_CHART_CONTENT", "HELM_CONFIG"]

logger = logging.getLogger(__name__)

HELM_CONFIG = "application/vnd.cncf.helm.config.v1+json"
HELM_CHART_CONTENT = "application/vnd.cncf.helm.chart.content.v1.tar+gzip"
HELM_CHART_CONTENT_LEGACY = "application/tar+gzip"


def _select_chart_layer(manifest: Dict[str, Any], target: str) -> Dict[str, Any]:
    """Pick the chart tarball layer; the provenance layer is never selected."""
    layers = manifest.get("layers") or []
    for media_type in (HELM_CHART_CONTENT, HELM_CHART_CONTENT_LEGACY):
        for layer in layers:
            if layer.get("mediaType") == media_type:
                return layer
    if layers:
        logger.debug(f"No Helm chart layer in {target}, using first layer")
        return layers[0]
    raise FetchError(f"Manifest for {target} has no layers")


class OrasChartRegistry:
    """
    OCI registry operations for Helm charts using ORAS.

    oras-py keeps a single set of basic-auth credentials per client, so one
    client is held per registry host. A login replaces the client for its host
    and every later pull from that host reuses it; hosts that were never
    logged in to get an anonymous client.
    """

    def __init__(self, settings: Settings):
        """Initialize with settings."""
        self.settings = settings
        self._clients: Dict[str, oras.client.OrasClient] = {}

    def create_client(self) -> oras.client.OrasClient:
        """Build an ORAS client with the configured transport security."""
        insecure = self.settings.registry_insecure
        return oras.client.OrasClient(insecure=insecure, tls_verify=not insecure)

    def client_for(self, hostname: str) -> oras.client.OrasClient:
        """Client for a registry host, anonymous unless a login succeeded."""
        if hostname not in self._clients:
            self._clients[hostname] = self.create_client()
        return self._clients[hostname]

    def login(self, hostname: str, username: str, password: str) -> None:
        """
        Log in to a registry with basic credentials and check them.

        oras-py only records the credentials, so they are verified against the
        registry's /v2/ endpoint before the login counts. Credentials are also
        persisted to ``settings.registry_config``.

        Raises:
            AuthError: If the registry rejects the credentials or is unreachable
        """
        if not username or not password:
            # oras-py prompts on stdin for a missing value
            raise AuthError(hostname, "username and password are both required")

        config_path = Path(self.settings.registry_config)
        client = self.create_client()
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            client.login(
                username=username,
                password=password,
                tls_verify=not self.settings.registry_insecure,
                hostname=hostname,
                config_path=str(config_path),
            )
            self._verify_login(client, hostname, username, password)
        except AuthError:
            raise
        # oras-py exits the interpreter on some login failures
        except (Exception, SystemExit) as e:
            raise AuthError(hostname, str(e) or type(e).__name__) from e

        self._clients[hostname] = client
        logger.debug(f"Verified credentials for {hostname}")

    def _verify_login(self, client: oras.client.OrasClient, hostname: str,
                      username: str, password: str) -> None:
        """Answer the registry's /v2/ challenge with the new credentials."""
        url = f"{client.prefix}://{hostname}/v2/"
        verify = not self.settings.registry_insecure
        timeout = self.settings.http_timeout_s

        response = client.session.get(url, verify=verify, timeout=timeout)
        if response.status_code in (401, 403):
            challenge = response.headers.get("Www-Authenticate", "")
            if challenge.lower().startswith("basic"):
                response = client.session.get(
                    url, auth=(username, password), verify=verify, timeout=timeout
                )
            else:
                headers, changed = client.auth.authenticate_request(response, {})
                if not changed:
                    raise AuthError(hostname, f"credentials rejected ({response.status_code})")
                response = client.session.get(url, headers=headers, verify=verify, timeout=timeout)
                # The verification token is only scoped to /v2/; pulls request their own
                client.auth.token = None

        if response.status_code in (401, 403):
            raise AuthError(hostname, f"credentials rejected ({response.status_code})")
        if response.status_code != 200:
            raise AuthError(hostname, f"unexpected status {response.status_code} from {url}")

    def pull_chart(self, ref: OciReference) -> bytes:
        """
        Pull a chart and return the tarball bytes.

        Raises:
            FetchError: If the manifest or chart layer cannot be fetched
        """
        target = ref.target
        client = self.client_for(ref.hostname)
        try:
            manifest = client.get_manifest(target)
        except Exception as e:
            raise FetchError(f"Failed to fetch manifest for {target}: {e}") from e

        layer = _select_chart_layer(manifest, target)
        with tempfile.TemporaryDirectory() as tmpdir:
            outfile = Path(tmpdir) / "chart.tgz"
            try:
                client.download_blob(target, layer["digest"], str(outfile))
                return outfile.read_bytes()
            except Exception as e:
                raise FetchError(f"Failed to download chart layer for {target}: {e}") from e
