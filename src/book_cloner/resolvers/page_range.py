"""Detect the page range of a book by probing page URLs."""

import logging

from schemas.book import ProbeOutcome, page_filename

from book_cloner.clients import BookClient
from book_cloner.exceptions import NoPagesFoundError, RangeDetectionError

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGE = 10000


class PageRangeDetector:
    """Find the contiguous page range ``[1, N]`` under an image URL template.

    Doubles the page number until a probe fails to get an upper bound, then
    binary-searches below it for the last page that exists. Both phases take
    O(log N) probes. Probes are never retried, and a network error counts
    the same as a missing page.

    Attributes:
        client: Client used for existence probes
        max_page: Upper bound for the doubling phase
        probe_count: Number of probes made by the last call to detect()
    """

    def __init__(self, client: BookClient, max_page: int = DEFAULT_MAX_PAGE):
        self.client = client
        self.max_page = max_page
        self.probe_count = 0

    def detect(self, image_url_template: str) -> tuple[int, int]:
        """Detect the page range under a template.

        Args:
            image_url_template: URL prefix that ``/{page}.jpg`` is appended to

        Returns:
            Tuple of (start_page, end_page)

        Raises:
            NoPagesFoundError: If page 1 does not exist
            RangeDetectionError: If the doubling phase passes max_page
        """
        logger.info("Auto-detecting page range...")
        self.probe_count = 0

        upper_bound = self._find_upper_bound(image_url_template)
        if upper_bound == 1:
            raise NoPagesFoundError(image_url_template)

        last_page = self._binary_search(image_url_template, upper_bound)

        logger.info(f"Detected pages: 1 to {last_page}")
        return 1, last_page

    def _find_upper_bound(self, image_url_template: str) -> int:
        """Return the first power of two whose page does not exist."""
        page = 1
        while self._exists(image_url_template, page):
            page *= 2
            if page > self.max_page:
                raise RangeDetectionError(
                    f"Page range too large or detection failed: "
                    f"more than {self.max_page} pages under {image_url_template}"
                )
        return page

    def _binary_search(self, image_url_template: str, upper_bound: int) -> int:
        low, high = 1, upper_bound
        last_page = 1

        while low <= high:
            mid = (low + high) // 2
            if self._exists(image_url_template, mid):
                last_page = mid
                low = mid + 1
            else:
                high = mid - 1

        return last_page

    def _exists(self, image_url_template: str, page_number: int) -> bool:
        self.probe_count += 1
        outcome = self.client.probe(f"{image_url_template}/{page_filename(page_number)}")
        if outcome is ProbeOutcome.TRANSIENT_ERROR:
            logger.warning(
                f"Network error probing page {page_number}; treating as absent"
            )
        return outcome is ProbeOutcome.EXISTS
