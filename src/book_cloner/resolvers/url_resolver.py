"""Resolve an arbitrary book URL into the URL structure of its page images."""

import logging
from urllib.parse import quote, unquote, urlsplit

from schemas.book import ProbeOutcome, ResolvedURL, page_filename

from book_cloner.clients import BookClient
from book_cloner.exceptions import InvalidURLError

logger = logging.getLogger(__name__)

DEFAULT_BOOK_ID = "book"

# Characters left as-is when percent-encoding a path; "%" keeps existing escapes.
PATH_SAFE_CHARS = "/%:@!$&'()*+,;=~"

# Ordered by likelihood; the first suffix whose page 1 exists wins.
IMAGE_PATH_SUFFIXES = (
    "/files/mobile",
    "/files",
    "/pages",
    "/images",
    "/mobile",
    "/page",
)


def normalize_url(url: str) -> tuple[str, str]:
    """Split a book URL into its normalized base URL and book id.

    The fragment (e.g. ``#p=1``) and query string are dropped, as is any
    trailing slash. The returned base URL is pure ASCII: non-ASCII path
    characters are percent-encoded and non-ASCII hosts IDNA-encoded, so it
    can be sent in headers. The book id is the last non-empty path segment,
    percent-decoded; dot segments and segments decoding to a path separator
    fall back to the default id so the image directory stays inside the
    storage root.

    Args:
        url: Absolute http(s) URL

    Returns:
        Tuple of (base_url, book_id)

    Raises:
        InvalidURLError: If the URL is not an absolute http(s) URL
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidURLError(url, "empty URL")

    try:
        parts = urlsplit(url.strip())
        parts.port  # raises ValueError on a malformed port
        host = parts.netloc
    except ValueError as e:
        raise InvalidURLError(url, str(e)) from e

    if parts.scheme not in ("http", "https"):
        raise InvalidURLError(url, "URL must use http or https")
    if not host:
        raise InvalidURLError(url, "URL has no host")
    if not host.isascii():
        try:
            host = parts.hostname.encode("idna").decode("ascii")
        except UnicodeError as e:
            raise InvalidURLError(url, f"invalid host: {e}") from e
        if parts.port is not None:
            host = f"{host}:{parts.port}"

    path = quote(parts.path.rstrip("/"), safe=PATH_SAFE_CHARS)
    segments = [s for s in path.split("/") if s]
    book_id = unquote(segments[-1]) if segments else DEFAULT_BOOK_ID
    if book_id in (".", "..") or "/" in book_id or "\\" in book_id:
        book_id = DEFAULT_BOOK_ID

    return f"{parts.scheme}://{host}{path}", book_id


class URLResolver:
    """Detect where a book's page images are served from.

    Probes a fixed list of path suffixes under the book URL, looking for
    ``{base}{suffix}/1.jpg``. Unreachable probes mean "pattern not present"
    and are never errors.

    Example:
        with BookClient() as client:
            resolved = URLResolver(client).resolve(
                "https://www.example.org/ebooks/2019/06/my-book/#p=1"
            )
    """

    def __init__(self, client: BookClient, suffixes: tuple[str, ...] = IMAGE_PATH_SUFFIXES):
        self.client = client
        self.suffixes = suffixes

    def resolve(self, url: str) -> ResolvedURL:
        """Resolve a book URL.

        Args:
            url: Any URL of the book, possibly with a navigation fragment

        Returns:
            ResolvedURL with the detected image URL template

        Raises:
            InvalidURLError: If the URL is malformed
        """
        base_url, book_id = normalize_url(url)
        logger.debug(f"Normalized {url} to {base_url} (book id {book_id})")

        template = self.detect_image_url_template(base_url)
        verified = True
        if template is None:
            template, verified = self._fallback_template(base_url)

        return ResolvedURL(
            base_url=base_url,
            image_url_template=template,
            referer=base_url + "/",
            book_id=book_id,
            verified=verified,
        )

    def detect_image_url_template(self, base_url: str) -> str | None:
        """Return the first candidate template whose first page exists.

        Args:
            base_url: Normalized book URL

        Returns:
            The image URL template, or None if no candidate matched
        """
        for suffix in self.suffixes:
            candidate = base_url + suffix
            if self._probe_first_page(candidate):
                logger.info(f"Detected image pattern: {suffix}")
                return candidate
        return None

    def _fallback_template(self, base_url: str) -> tuple[str, bool]:
        """Fall back to serving pages directly under the book URL.

        The ``/files/mobile`` and ``/files`` fallbacks were already probed as
        candidates, so only the bare base URL is left to check.
        """
        if self._probe_first_page(base_url):
            logger.info("Detected image pattern: pages directly under book URL")
            return base_url, True

        logger.warning(
            f"Could not detect image pattern for {base_url}; "
            f"falling back to {base_url}/{{page}}.jpg"
        )
        return base_url, False

    def _probe_first_page(self, template: str) -> bool:
        outcome = self.client.probe(f"{template}/{page_filename(1)}")
        if outcome is ProbeOutcome.TRANSIENT_ERROR:
            logger.warning(f"Network error probing {template}; treating as absent")
        return outcome is ProbeOutcome.EXISTS
