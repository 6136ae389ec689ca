"""Pipeline orchestrator for end-to-end URL → PDF processing.

Wires the resolver, page range detector, fetcher and compositor together
and runs a single book through them.
"""

import logging

from schemas.book import BookDescriptor
from schemas.reports import CloneResult
from schemas.settings import CloneSettings

from book_cloner.aggregators import PageFetcher
from book_cloner.clients import BookClient
from book_cloner.resolvers import PageRangeDetector, URLResolver
from book_cloner.transformers import PDFCompositor

logger = logging.getLogger(__name__)


class Orchestrator:
    """End-to-end book cloning orchestrator.

    All stages share one HTTP client. Settings are fixed at construction;
    book-specific state only ever lives in the BookDescriptor returned by
    resolve(), so one orchestrator can clone several books.

    Attributes:
        settings: Run configuration
        client: HTTP client shared by all stages
        resolver: Detects the image URL template
        detector: Detects the page range
        fetcher: Downloads missing pages
        compositor: Assembles the PDF
    """

    def __init__(self, settings: CloneSettings | None = None, client: BookClient | None = None):
        self.settings = settings or CloneSettings()
        self._owns_client = client is None
        self.client = client or BookClient(self.settings.client_config())

        self.resolver = URLResolver(self.client)
        self.detector = PageRangeDetector(self.client, max_page=self.settings.max_probe_page)
        self.fetcher = PageFetcher(
            self.client,
            max_workers=self.settings.max_workers,
            progress_interval=self.settings.progress_interval,
        )
        self.compositor = PDFCompositor(page_size_mm=self.settings.page_size_mm)

    def __enter__(self) -> "Orchestrator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        """Close the HTTP client if this orchestrator created it."""
        if self._owns_client:
            self.client.close()

    def resolve(self, url: str) -> BookDescriptor:
        """Resolve a book URL into a BookDescriptor.

        Raises:
            InvalidURLError: If the URL is malformed
            RangeDetectionError: If the page range cannot be determined
        """
        logger.info(f"Parsing URL: {url}")
        resolved = self.resolver.resolve(url)
        start_page, end_page = self.detector.detect(resolved.image_url_template)
        descriptor = resolved.with_range(start_page, end_page)

        logger.info("Book Information:")
        logger.info(f"  Book Name: {descriptor.book_id}")
        logger.info(f"  Base URL: {descriptor.base_url}")
        logger.info(f"  Image URL: {descriptor.image_url_template}")
        logger.info(f"  Pages: {descriptor.start_page} to {descriptor.end_page}")
        return descriptor

    def run(self, url: str) -> CloneResult:
        """Clone a book: resolve, download missing pages, compose the PDF.

        Args:
            url: Any URL of the book

        Returns:
            CloneResult with the descriptor and both stage reports

        Raises:
            InvalidURLError: If the URL is malformed
            RangeDetectionError: If the page range cannot be determined
            FetchError: If settings.strict is set and a page failed
            OutputWriteError: If the PDF cannot be written
            OSError: If the image directory cannot be created
        """
        descriptor = self.resolve(url)
        storage_root = self.settings.storage_root

        logger.info("STEP 1: Downloading Images")
        fetch_report = self.fetcher.fetch_all(
            descriptor, storage_root, strict=self.settings.strict
        )

        logger.info("STEP 2: Creating PDF")
        output_path = self.settings.output_dir / descriptor.output_filename
        composition_report = self.compositor.compose(descriptor, storage_root, output_path)

        return CloneResult(
            descriptor=descriptor,
            image_dir=descriptor.image_dir(storage_root),
            fetch_report=fetch_report,
            composition_report=composition_report,
        )
