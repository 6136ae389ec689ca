"""Concurrent downloader for book page images."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from schemas.book import BookDescriptor
from schemas.reports import FetchReport, PageFailure

from book_cloner.clients import BookClient, ClientError
from book_cloner.exceptions import FetchError

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 10
DEFAULT_PROGRESS_INTERVAL = 10


class PageFetcher:
    """Downloads the pages of a book that are not yet stored locally.

    Pages already on disk are skipped, so a run that was interrupted can
    simply be repeated. Missing pages are fetched on a thread pool of
    ``max_workers`` threads; a failed page is recorded in the report and
    does not stop the others.

    Example:
        with BookClient() as client:
            fetcher = PageFetcher(client, max_workers=10)
            report = fetcher.fetch_all(descriptor, Path("images"))
    """

    def __init__(
        self,
        client: BookClient,
        max_workers: int = DEFAULT_MAX_WORKERS,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    ):
        """Initialize the page fetcher.

        Args:
            client: Client used for page downloads (shared across threads)
            max_workers: Maximum number of concurrent downloads
            progress_interval: Log progress every N completed pages
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.client = client
        self.max_workers = max_workers
        self.progress_interval = progress_interval

    def missing_pages(self, descriptor: BookDescriptor, storage_root: Path) -> list[int]:
        """List pages in range whose image file is absent, in ascending order."""
        return [
            page
            for page in descriptor.page_numbers
            if not descriptor.asset(storage_root, page).exists
        ]

    def fetch_all(
        self,
        descriptor: BookDescriptor,
        storage_root: Path,
        strict: bool = False,
    ) -> FetchReport:
        """Download every missing page of a book.

        Args:
            descriptor: The resolved book
            storage_root: Directory holding one image directory per book
            strict: Raise FetchError after the batch if any page failed

        Returns:
            FetchReport describing the batch

        Raises:
            FetchError: If strict is set and at least one page failed
            OSError: If the image directory cannot be created
        """
        image_dir = descriptor.image_dir(storage_root)
        image_dir.mkdir(parents=True, exist_ok=True)

        missing = self.missing_pages(descriptor, storage_root)
        report = FetchReport(
            book_id=descriptor.book_id,
            total_pages=descriptor.page_count,
            missing=len(missing),
        )

        if not missing:
            logger.info("All images already exist. Skipping download.")
            return report

        logger.info(f"Found {len(missing)} missing images. Downloading...")
        logger.info(
            f"Total pages: {descriptor.page_count} "
            f"(from {descriptor.start_page} to {descriptor.end_page})"
        )

        failures = self._run_batch(descriptor, storage_root, missing)

        report.failures = sorted(failures, key=lambda f: f.page_number)
        report.downloaded = report.missing - report.failed

        for failure in report.failures:
            logger.error(f"Failed to download page {failure.page_number}: {failure.reason}")

        if report.failures:
            logger.warning(f"{report.failed} images failed to download")
            if strict:
                raise FetchError(
                    f"{report.failed} of {report.missing} images failed to download",
                    report=report,
                )
        else:
            logger.info(
                f"Download complete! All {report.downloaded} images downloaded successfully."
            )

        return report

    def _run_batch(
        self,
        descriptor: BookDescriptor,
        storage_root: Path,
        pages: list[int],
    ) -> list[PageFailure]:
        """Fetch pages on the thread pool and wait for all of them."""
        total = len(pages)
        completed = 0
        lock = threading.Lock()

        def fetch_and_count(page_number: int) -> PageFailure | None:
            nonlocal completed
            failure = self.fetch_page(descriptor, storage_root, page_number)

            with lock:
                completed += 1
                if completed % self.progress_interval == 0 or completed == total:
                    logger.info(
                        f"Progress: {completed}/{total} images processed "
                        f"({completed / total * 100:.1f}%)"
                    )
            return failure

        failures: list[PageFailure] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(fetch_and_count, page) for page in pages]
            for future in as_completed(futures):
                failure = future.result()
                if failure is not None:
                    failures.append(failure)

        return failures

    def fetch_page(
        self,
        descriptor: BookDescriptor,
        storage_root: Path,
        page_number: int,
    ) -> PageFailure | None:
        """Download a single page.

        Args:
            descriptor: The resolved book
            storage_root: Directory holding one image directory per book
            page_number: Page to download

        Returns:
            None on success, or a PageFailure describing the error
        """
        url = descriptor.page_url(page_number)
        destination = descriptor.asset_path(storage_root, page_number)

        try:
            self.client.download(url, destination, referer=descriptor.referer)
        except ClientError as e:
            return PageFailure(page_number=page_number, url=url, reason=e.message)
        except OSError as e:
            return PageFailure(page_number=page_number, url=url, reason=str(e))

        logger.debug(f"Downloaded page {page_number} to {destination}")
        return None
