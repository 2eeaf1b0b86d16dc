"""
CLI Context for managing application dependencies.

Builds the settings, HTTP client, registry session and orchestrator once per
CLI invocation and hands them to the command, avoiding global state.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .errors import ChartHostError
from .orchestrator import Orchestrator
from .session import RegistrySession
from .settings import Settings, create_settings_from_env
from .storage.http import ChartHTTP
from .storage.oras_registry import OrasChartRegistry

logger = logging.getLogger(__name__)


class HandlerInitError(ChartHostError):
    """The registry client or HTTP client could not be created."""
    pass


@dataclass
class CLIContext:
    """
    Shared context for CLI commands.

    The HTTP client and registry session are created on first access and
    reused for the rest of the command.
    """
    settings: Settings
    _http: Optional[ChartHTTP] = None
    _session: Optional[RegistrySession] = None

    @classmethod
    def from_env(cls) -> CLIContext:
        """Create CLI context from environment variables."""
        return cls(settings=create_settings_from_env())

    @property
    def http(self) -> ChartHTTP:
        if self._http is None:
            self._http = ChartHTTP(self.settings)
        return self._http

    @property
    def session(self) -> RegistrySession:
        if self._session is None:
            registry = OrasChartRegistry(self.settings)
            # Build one ORAS client now so construction problems surface early
            registry.create_client()
            self._session = RegistrySession(registry)
        return self._session

    def orchestrator(self) -> Orchestrator:
        """
        Build the orchestrator, initializing every client eagerly.

        Raises:
            HandlerInitError: If a client cannot be created; fatal to the run
        """
        try:
            orchestrator = Orchestrator(self.settings, self.http, self.session)
        except Exception as e:
            logger.error(f"Failed to initialize chart handler: {e}")
            raise HandlerInitError(f"Failed to initialize chart handler: {e}") from e
        logger.info("Chart handler initialized successfully")
        return orchestrator

    def close(self) -> None:
        if self._http is not None:
            self._http.close()
