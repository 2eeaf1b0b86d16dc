"""
HTTP client for legacy chart repositories.

Wraps httpx with the bounded timeout, optional basic auth and timeout retry
policy shared by index downloads and chart downloads.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional, Tuple

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .. import __version__
from ..errors import ChartIOError, FetchError
from ..settings import Settings
from .uri import validate_http_url

__all__ = ["ChartHTTP"]

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1 MiB


class ChartHTTP:
    """
    HTTP client for index and chart downloads.

    Every request is validated to be http(s) before it is sent. Timeouts are
    retried ``settings.http_retry`` times with exponential backoff; HTTP status
    errors are never retried.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize the HTTP client.

        Args:
            settings: Settings supplying timeout and retry policy
            transport: Optional httpx transport (tests inject httpx.MockTransport)
        """
        self.settings = settings
        self.client = httpx.Client(
            timeout=httpx.Timeout(settings.http_timeout_s),
            follow_redirects=True,
            transport=transport,
            headers={"User-Agent": f"charthost/{__version__}"},
        )

    def get_bytes(self, url: str, auth: Optional[Tuple[str, str]] = None) -> bytes:
        """
        GET a URL and return the whole body.

        Raises:
            InvalidURL: If the URL is not http(s)
            FetchError: On non-200 status or network failure
        """
        return b"".join(self._iter_body(url, auth))

    def download(self, url: str, dest: Path, auth: Optional[Tuple[str, str]] = None) -> int:
        """
        Stream a URL into a file, returning the number of bytes written.

        The file is opened only once the server has answered 200. A failure
        half way through leaves the partial file in place.

        Raises:
            InvalidURL: If the URL is not http(s)
            FetchError: On non-200 status or network failure
            ChartIOError: If the file cannot be created or written
        """
        body = self._iter_body(url, auth)
        # Prime the generator so status errors surface before the file exists
        try:
            first = next(body)
        except StopIteration:
            first = b""

        written = 0
        try:
            with open(dest, "wb") as out:
                out.write(first)
                written += len(first)
                for chunk in body:
                    out.write(chunk)
                    written += len(chunk)
        except OSError as e:
            body.close()
            raise ChartIOError(f"Failed to write {dest}: {e}") from e
        return written

    def _iter_body(self, url: str, auth: Optional[Tuple[str, str]]) -> Iterator[bytes]:
        validate_http_url(url)
        try:
            response = self._send(url, auth)
        except httpx.HTTPError as e:
            raise FetchError(f"Network error fetching {url}: {e}") from e

        try:
            if response.status_code != httpx.codes.OK:
                raise FetchError(
                    f"Unexpected status {response.status_code} fetching {url}",
                    status_code=response.status_code,
                )
            try:
                yield from response.iter_bytes(chunk_size=CHUNK_SIZE)
            except httpx.HTTPError as e:
                raise FetchError(f"Network error reading {url}: {e}") from e
        finally:
            response.close()

    def _send(self, url: str, auth: Optional[Tuple[str, str]]) -> httpx.Response:
        """Send a streamed GET, retrying timeouts per settings."""
        retrying = Retrying(
            stop=stop_after_attempt(self.settings.http_retry + 1),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(httpx.TimeoutException),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                request = self.client.build_request("GET", url)
                logger.debug(f"GET {url} (attempt {attempt.retry_state.attempt_number})")
                return self.client.send(request, auth=auth, stream=True)
        raise FetchError(f"No attempt made to fetch {url}")  # pragma: no cover

    def close(self):
        """Close HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
