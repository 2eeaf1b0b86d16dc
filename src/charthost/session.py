"""
Registry session.

Holds the authenticated state for OCI registries for the lifetime of a run.
The session is created once, passed by reference to the fetcher, and reused
for every pull.
"""
from __future__ import annotations

import logging
from typing import Dict, Protocol, Tuple

from .errors import AuthError
from .storage.uri import OciReference, registry_hostname

__all__ = ["RegistryClient", "RegistrySession"]

logger = logging.getLogger(__name__)


class RegistryClient(Protocol):
    """Registry collaborator used by the session (OrasChartRegistry in production)."""

    def login(self, hostname: str, username: str, password: str) -> None: ...

    def pull_chart(self, ref: OciReference) -> bytes: ...


class RegistrySession:
    """Authenticated OCI registry state shared across pulls."""

    def __init__(self, client: RegistryClient):
        self.client = client
        self._logged_in: Dict[str, Tuple[str, str]] = {}  # host -> (username, password)

    def login(self, registry_url: str, username: str, password: str) -> None:
        """
        Authenticate against a registry once per run.

        Repeating a login that already succeeded for the same host with the
        same credentials is a no-op; different credentials log in again.

        Raises:
            AuthError: If either credential is missing or the registry
                rejects them
            InvalidURL: If no host can be derived from the URL
        """
        hostname = registry_hostname(registry_url)
        if not username or not password:
            raise AuthError(hostname, "username and password are both required")
        if self._logged_in.get(hostname) == (username, password):
            logger.debug(f"Already logged in to {hostname} as {username}")
            return

        logger.info(f"Logging in to registry {hostname} as {username}")
        self.client.login(hostname, username, password)
        self._logged_in[hostname] = (username, password)
        logger.info(f"Logged in to registry {hostname}")

    def is_logged_in(self, registry_url: str) -> bool:
        return registry_hostname(registry_url) in self._logged_in

    def pull(self, ref: OciReference) -> bytes:
        """Pull a chart through the client holding the host's credentials."""
        return self.client.pull_chart(ref)
