"""
Orchestrator.

Walks the configured registries one at a time and drives the registry
session, the legacy index cache, the resolver and the fetcher for each chart.
A failure is logged and recorded, then processing moves on: a bad registry
skips only its own charts and a bad chart skips only itself.

Per registry the states are::

    PENDING -> AUTHENTICATING (OCI with credentials) -> REGISTERING (legacy)
            -> PULLING_CHARTS -> DONE
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Mapping, Optional

from .config import ChartHostConfig, ChartRequest, Credentials, RegistryEntry, RegistryKind
from .errors import ChartHostError, ChartNotFound
from .fetcher import Fetcher
from .index_cache import LegacyIndexCache, RepoNameIndex
from .models import ChartOutcome, OutcomeStatus
from .resolver import ChartResolver
from .session import RegistrySession
from .settings import Settings
from .storage.http import ChartHTTP

__all__ = ["RegistryState", "RunReport", "Orchestrator"]

logger = logging.getLogger(__name__)


class RegistryState(str, Enum):
    PENDING = "pending"
    AUTHENTICATING = "authenticating"
    REGISTERING = "registering"
    PULLING_CHARTS = "pulling_charts"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunReport:
    """Outcome of every chart request in a run."""
    outcomes: List[ChartOutcome] = field(default_factory=list)

    def add(self, outcome: ChartOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def pulled(self) -> List[ChartOutcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.PULLED]

    @property
    def failed(self) -> List[ChartOutcome]:
        return [o for o in self.outcomes if o.status is not OutcomeStatus.PULLED]

    @property
    def ok(self) -> bool:
        return not self.failed


class Orchestrator:
    """Sequential driver for a whole run."""

    def __init__(self, settings: Settings, http: ChartHTTP, session: RegistrySession,
                 environ: Optional[Mapping[str, str]] = None):
        """
        Args:
            settings: Settings shared by all components
            http: HTTP client for legacy index and chart downloads
            session: Registry session for OCI logins and pulls
            environ: Environment credentials are read from (defaults to os.environ)
        """
        self.settings = settings
        self.environ = environ
        self.session = session
        self.repo_names = RepoNameIndex()
        self.index_cache = LegacyIndexCache(settings, http, self.repo_names)
        self.resolver = ChartResolver(self.index_cache)
        self.fetcher = Fetcher(http, session)

    def run(self, config: ChartHostConfig, output_dir: Path | str) -> RunReport:
        """Process every registry and return the per-chart report."""
        output_dir = Path(output_dir)
        report = RunReport()
        for entry in config.registries:
            self.process_registry(entry, output_dir, report)
        logger.info(
            f"Processing completed: {len(report.pulled)} pulled, {len(report.failed)} failed"
        )
        return report

    def process_registry(self, entry: RegistryEntry, output_dir: Path, report: RunReport) -> RegistryState:
        """Run one registry through its state machine, recording chart outcomes."""
        state = RegistryState.PENDING
        logger.info(f"Processing registry {entry.url} ({entry.kind.value})")
        credentials = entry.credentials(self.environ)
        if entry.username_env and credentials.username:
            logger.info(f"Using username {credentials.username} from {entry.username_env}")

        try:
            if entry.kind is RegistryKind.OCI and (credentials.username or credentials.password):
                state = self._transition(entry, state, RegistryState.AUTHENTICATING)
                self.session.login(entry.url, credentials.username, credentials.password)

            if entry.kind is RegistryKind.LEGACY:
                state = self._transition(entry, state, RegistryState.REGISTERING)
                self.index_cache.register_and_fetch_index(
                    entry.url, credentials.username, credentials.password
                )
        except ChartHostError as e:
            logger.error(f"Registry {entry.url} failed while {state.value}: {e}")
            for chart in entry.charts:
                report.add(ChartOutcome(
                    registry_url=entry.url, chart=chart.name, version=chart.version,
                    status=OutcomeStatus.SKIPPED, error=f"{state.value}: {e}",
                ))
            return self._transition(entry, state, RegistryState.FAILED)

        state = self._transition(entry, state, RegistryState.PULLING_CHARTS)
        for chart in entry.charts:
            report.add(self.pull_chart(entry, chart, credentials, output_dir))
        return self._transition(entry, state, RegistryState.DONE)

    def pull_chart(self, entry: RegistryEntry, chart: ChartRequest,
                   credentials: Credentials, output_dir: Path) -> ChartOutcome:
        """Resolve and fetch one chart; failures become a FAILED outcome."""
        logger.info(f"Pulling chart {chart.name} {chart.version} from {entry.url}")
        try:
            problem = chart.version_problem()
            if problem:
                raise ChartNotFound(chart.name, chart.version, f"version {problem}")

            if entry.kind is RegistryKind.OCI:
                plan = self.resolver.resolve_oci(entry.url, chart.name, chart.version)
            else:
                mirror_name = self.repo_names.lookup(entry.url)
                plan = self.resolver.resolve(
                    entry.url, mirror_name, chart.name, chart.version, credentials=credentials
                )
            artifact = self.fetcher.fetch(plan, output_dir)
        except ChartHostError as e:
            logger.error(f"Failed to pull chart {chart.name} {chart.version} from {entry.url}: {e}")
            return ChartOutcome(
                registry_url=entry.url, chart=chart.name, version=chart.version,
                status=OutcomeStatus.FAILED, error=str(e),
            )

        logger.info(f"Pulled chart {chart.name} {chart.version} to {artifact.path}")
        return ChartOutcome(
            registry_url=entry.url, chart=chart.name, version=chart.version,
            status=OutcomeStatus.PULLED, path=artifact.path,
        )

    def _transition(self, entry: RegistryEntry, current: RegistryState,
                    new: RegistryState) -> RegistryState:
        logger.debug(f"Registry {entry.url}: {current.value} -> {new.value}")
        return new
