"""HTTP client for probing and downloading page images."""

import logging
from pathlib import Path

import httpx

from schemas.book import ProbeOutcome
from schemas.settings import DEFAULT_USER_AGENT

from .exceptions import (
    APIError,
    ConnectionError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


class BookClient:
    """Client for the servers hosting book page images.

    Provides a lazy-initialized httpx.Client with context manager support.
    Requests go to absolute URLs; every request carries a browser-like
    User-Agent, and downloads optionally carry the book's Referer.
    No request is ever retried.

    Config keys:
        user_agent: User-Agent header (default: a desktop Chrome string)
        probe_timeout: Timeout for existence probes in seconds (default: 5)
        fetch_timeout: Timeout for downloads in seconds (default: 30)
        headers: Additional headers to include in requests
        chunk_size: Chunk size in bytes when streaming downloads (default: 65536)

    Example:
        with BookClient({"fetch_timeout": 60}) as client:
            if client.exists("https://example.org/book/files/mobile/1.jpg"):
                client.download(url, Path("images/book/1.jpg"))
    """

    def __init__(self, config: dict | None = None, http_client: httpx.Client | None = None):
        """Initialize the client.

        Args:
            config: Client configuration (see class docstring)
            http_client: Optional pre-built httpx client, mainly for tests.
                         If not provided, one will be created on first use.
        """
        self._config = config or {}
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def user_agent(self) -> str:
        return str(self._config.get("user_agent", DEFAULT_USER_AGENT))

    @property
    def probe_timeout(self) -> float:
        return float(self._config.get("probe_timeout", 5))

    @property
    def fetch_timeout(self) -> float:
        return float(self._config.get("fetch_timeout", 30))

    @property
    def chunk_size(self) -> int:
        return int(self._config.get("chunk_size", 65536))

    @property
    def headers(self) -> dict[str, str]:
        headers = dict(self._config.get("headers", {}))
        headers["User-Agent"] = self.user_agent
        return headers

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialized httpx client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.fetch_timeout,
                headers=self.headers,
                follow_redirects=True,
            )
        return self._client

    def __enter__(self) -> "BookClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        """Close the underlying HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def probe(self, url: str) -> ProbeOutcome:
        """Check whether a URL exists with a HEAD request.

        Never raises for network conditions: any request error (transport
        failure, timeout, redirect loop, undecodable body) is reported as
        TRANSIENT_ERROR, and any non-2xx status as NOT_FOUND.

        Args:
            url: Absolute URL to check

        Returns:
            The probe outcome
        """
        try:
            response = self.client.head(
                url,
                headers=self.headers,
                timeout=self.probe_timeout,
            )
        except httpx.TimeoutException as e:
            logger.debug(f"Probe timed out for {url}: {e}")
            return ProbeOutcome.TRANSIENT_ERROR
        except httpx.RequestError as e:
            logger.debug(f"Probe failed for {url}: {e}")
            return ProbeOutcome.TRANSIENT_ERROR

        if response.is_success:
            logger.debug(f"Probe hit: {url}")
            return ProbeOutcome.EXISTS

        logger.debug(f"Probe miss ({response.status_code}): {url}")
        return ProbeOutcome.NOT_FOUND

    def exists(self, url: str) -> bool:
        """Return True if a probe against the URL succeeds."""
        return self.probe(url) is ProbeOutcome.EXISTS

    def download(self, url: str, destination: Path, referer: str | None = None) -> int:
        """Stream a URL to a local file.

        The destination is created fresh (truncated if it exists). If the
        transfer fails part-way, the partial file is removed so that a file
        on disk always means a complete download.

        Args:
            url: Absolute URL to download
            destination: Local file path to write to
            referer: Optional Referer header value

        Returns:
            Number of bytes written

        Raises:
            NotFoundError: For 404 responses
            APIError: For other non-2xx responses
            ConnectionError: For transport errors, timeouts, redirect loops and
                undecodable bodies
        """
        headers = self.headers
        if referer:
            headers["Referer"] = referer

        try:
            with self.client.stream(
                "GET", url, headers=headers, timeout=self.fetch_timeout
            ) as response:
                self._handle_response(response)
                return self._write_stream(response, destination)
        except httpx.TimeoutException as e:
            raise ConnectionError(f"Timeout fetching {url}: {e}", url=url) from e
        except httpx.RequestError as e:
            raise ConnectionError(f"Request error fetching {url}: {e}", url=url) from e

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Map HTTP errors to exceptions.

        Args:
            response: The HTTP response to check

        Returns:
            The response if successful

        Raises:
            NotFoundError: For 404 responses
            APIError: For other non-2xx responses
        """
        if response.is_success:
            return response

        url = str(response.url)
        if response.status_code == 404:
            raise NotFoundError(f"Resource not found: {url}", url=url)
        raise APIError(
            f"Unexpected status code {response.status_code}: {url}",
            status_code=response.status_code,
            url=url,
        )

    def _write_stream(self, response: httpx.Response, destination: Path) -> int:
        written = 0
        try:
            with open(destination, "wb") as f:
                for chunk in response.iter_bytes(chunk_size=self.chunk_size):
                    f.write(chunk)
                    written += len(chunk)
        except BaseException:
            destination.unlink(missing_ok=True)
            raise

        logger.debug(f"Wrote {written} bytes to {destination}")
        return written
