"""
Legacy index cache.

Maintains the repository-list file and a local mirror of each legacy
repository's index document. Mirrors are keyed by a name derived from the
repository URL and are refreshed every time a repository is registered;
they never expire on their own.
"""
from __future__ import annotations

import datetime
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List

import yaml

from .config import Credentials
from .errors import ChartIOError, RegistrationError, RepositoryNotRegistered
from .path_safety import write_bytes_atomically
from .settings import Settings
from .storage.http import ChartHTTP
from .storage.uri import mirror_name_for, validate_http_url

__all__ = ["RepoNameIndex", "LegacyIndexCache", "INDEX_FILE_NAME"]

logger = logging.getLogger(__name__)

INDEX_FILE_NAME = "index.yaml"
DIR_MODE = 0o750
FILE_MODE = 0o600


class RepoNameIndex:
    """
    Mapping from repository URL to its local mirror name.

    Owned by the orchestrator for the lifetime of a run and populated by the
    index cache when a repository is registered.
    """

    def __init__(self) -> None:
        self._names: Dict[str, str] = {}

    def register(self, repo_url: str, mirror_name: str) -> None:
        self._names[repo_url] = mirror_name

    def lookup(self, repo_url: str) -> str:
        """
        Raises:
            RepositoryNotRegistered: If the URL was never registered
        """
        try:
            return self._names[repo_url]
        except KeyError:
            raise RepositoryNotRegistered(repo_url) from None

    def __contains__(self, repo_url: object) -> bool:
        return repo_url in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)


def _empty_repository_file() -> Dict[str, Any]:
    now = datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)
    return {
        "apiVersion": "",
        "generated": now.isoformat(),
        "repositories": [],
    }


class LegacyIndexCache:
    """Repository-list file plus cached index documents for legacy repositories."""

    def __init__(self, settings: Settings, http: ChartHTTP, repo_names: RepoNameIndex):
        """
        Args:
            settings: Settings locating the repository-list file and cache dir
            http: HTTP client used to download index documents
            repo_names: Name table shared with the orchestrator
        """
        self.settings = settings
        self.http = http
        self.repo_names = repo_names

    @property
    def repository_file(self) -> Path:
        return Path(self.settings.repository_config)

    def index_path(self, mirror_name: str) -> Path:
        return self.settings.index_path(mirror_name)

    def ensure_store_exists(self) -> None:
        """
        Create an empty repository-list file if there is none.

        Calling this again once the file exists is a no-op.

        Raises:
            ChartIOError: If the directory or file cannot be created
        """
        repo_file = self.repository_file
        if repo_file.exists():
            return
        try:
            repo_file.parent.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
            content = yaml.dump(_empty_repository_file(), sort_keys=False).encode()
            write_bytes_atomically(repo_file, content, mode=FILE_MODE)
        except OSError as e:
            logger.error(f"Failed to create repository file {repo_file}: {e}")
            raise ChartIOError(f"Failed to create repository file {repo_file}: {e}") from e
        logger.info(f"Initialized new repository file {repo_file}")

    def load_repositories(self) -> List[Dict[str, Any]]:
        """
        Entries of the repository-list file.

        Raises:
            RegistrationError: If the file cannot be read or parsed
        """
        return self._load_repository_file().get("repositories") or []

    def register_and_fetch_index(self, repo_url: str, username: str = "", password: str = "") -> str:
        """
        Register a legacy repository and mirror its index document.

        Steps: derive the mirror name, upsert the repository-list entry,
        validate the index URL, download it and write it to the cache. On any
        failure the previously cached index is left untouched.

        Returns:
            The mirror name for the repository

        Raises:
            InvalidURL: If the index URL is not http(s); no request is made
            RegistrationError: If the repository-list file cannot be updated
            FetchError: If the index download fails or returns non-200
            ChartIOError: If the cache file cannot be written
        """
        self.ensure_store_exists()

        mirror_name = mirror_name_for(repo_url)
        credentials = Credentials(username=username, password=password)
        logger.info(f"Adding repository {mirror_name} ({repo_url})")
        self._upsert_repository(mirror_name, repo_url, credentials)

        index_url = validate_http_url(f"{repo_url.rstrip('/')}/{INDEX_FILE_NAME}")
        logger.info(f"Fetching repository index {index_url}")
        data = self.http.get_bytes(index_url, auth=credentials.as_auth())

        index_file = self.index_path(mirror_name)
        try:
            index_file.parent.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
            write_bytes_atomically(index_file, data, mode=FILE_MODE)
        except OSError as e:
            logger.error(f"Failed to write repository index {index_file}: {e}")
            raise ChartIOError(f"Failed to write repository index {index_file}: {e}") from e

        self.repo_names.register(repo_url, mirror_name)
        logger.info(f"Cached repository index for {repo_url} at {index_file}")
        return mirror_name

    def _load_repository_file(self) -> Dict[str, Any]:
        repo_file = self.repository_file
        try:
            with open(repo_file, 'r') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise RegistrationError(f"Failed to load repository file {repo_file}: {e}") from e
        if data is None:
            return _empty_repository_file()
        if not isinstance(data, dict):
            raise RegistrationError(f"Repository file {repo_file} is not a mapping")
        return data

    def _upsert_repository(self, name: str, url: str, credentials: Credentials) -> None:
        """Replace any entry with the same name or URL; last write wins."""
        data = self._load_repository_file()
        entry: Dict[str, Any] = {"name": name, "url": url}
        if credentials.username:
            entry["username"] = credentials.username
        if credentials.password:
            entry["password"] = credentials.password

        repositories = [
            repo for repo in (data.get("repositories") or [])
            if isinstance(repo, dict) and repo.get("name") != name and repo.get("url") != url
        ]
        repositories.append(entry)
        data["repositories"] = repositories

        repo_file = self.repository_file
        try:
            write_bytes_atomically(repo_file, yaml.dump(data, sort_keys=False).encode(), mode=FILE_MODE)
        except OSError as e:
            logger.error(f"Failed to write repository file {repo_file}: {e}")
            raise RegistrationError(f"Failed to write repository file {repo_file}: {e}") from e
