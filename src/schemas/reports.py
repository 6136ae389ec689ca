"""Result schemas for the fetch and composition stages."""

from pathlib import Path

from pydantic import BaseModel

from .book import BookDescriptor


class PageFailure(BaseModel):
    """A page that could not be downloaded.

    Attributes:
        page_number: Page that failed
        url: URL that was requested
        reason: Human-readable error description
    """

    page_number: int
    url: str
    reason: str


class FetchReport(BaseModel):
    """Outcome of a fetch batch.

    Attributes:
        book_id: Book the batch belongs to
        total_pages: Number of pages in the book's range
        missing: Number of pages that were absent locally and scheduled
        downloaded: Number of scheduled pages fetched successfully
        failures: Pages that failed, in ascending page order
    """

    book_id: str
    total_pages: int
    missing: int = 0
    downloaded: int = 0
    failures: list[PageFailure] = []

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def skipped(self) -> int:
        return self.total_pages - self.missing

    @property
    def is_complete(self) -> bool:
        return not self.failures


class PageSkip(BaseModel):
    """A page left out of the composed document."""

    page_number: int
    reason: str


class CompositionReport(BaseModel):
    """Outcome of composing page images into a PDF.

    Attributes:
        book_id: Book the document belongs to
        output_path: Where the PDF was written
        page_numbers: Source pages written, in document order
        skipped: Pages left out because they were missing or undecodable
    """

    book_id: str
    output_path: Path
    page_numbers: list[int] = []
    skipped: list[PageSkip] = []

    @property
    def page_count(self) -> int:
        return len(self.page_numbers)


class CloneResult(BaseModel):
    """Everything produced by one end-to-end clone run."""

    descriptor: BookDescriptor
    image_dir: Path
    fetch_report: FetchReport
    composition_report: CompositionReport
