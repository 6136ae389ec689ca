"""Book structure schemas.

A book is resolved in two steps. The URL resolver produces a ResolvedURL
(where the page images live), and the page range detector turns it into a
BookDescriptor (which pages exist). The descriptor is immutable and is
passed explicitly to every downstream stage.

Local layout:
    {storage_root}/
    └── {book_id}/
        ├── 1.jpg
        ├── 2.jpg
        └── ...
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, model_validator

PAGE_SUFFIX = ".jpg"


class ProbeOutcome(str, Enum):
    """Result of a page probe.

    Only EXISTS counts as a hit. NOT_FOUND and TRANSIENT_ERROR are both
    treated as misses, but are kept apart so flaky probes can be logged.
    """

    EXISTS = "exists"
    NOT_FOUND = "not_found"
    TRANSIENT_ERROR = "transient_error"


def page_filename(page_number: int) -> str:
    return f"{page_number}{PAGE_SUFFIX}"


class ResolvedURL(BaseModel):
    """URL structure of a book before its page range is known.

    Attributes:
        base_url: Normalized book URL without fragment or trailing slash
        image_url_template: URL prefix that page filenames are appended to
        referer: Referer header value for page requests
        book_id: Local namespace and output filename stem
        verified: Whether page 1 was confirmed to exist under the template
    """

    base_url: str
    image_url_template: str
    referer: str
    book_id: str
    verified: bool = True

    model_config = {"frozen": True}

    def with_range(self, start_page: int, end_page: int) -> "BookDescriptor":
        return BookDescriptor(
            base_url=self.base_url,
            image_url_template=self.image_url_template,
            referer=self.referer,
            book_id=self.book_id,
            start_page=start_page,
            end_page=end_page,
        )


class BookDescriptor(BaseModel):
    """Resolved, immutable description of a book's fetchable structure.

    Attributes:
        base_url: Normalized book URL without fragment or trailing slash
        image_url_template: URL prefix that page filenames are appended to
        start_page: First page number (inclusive)
        end_page: Last page number (inclusive)
        referer: Referer header value for page requests
        book_id: Local namespace and output filename stem
    """

    base_url: str
    image_url_template: str
    start_page: int
    end_page: int
    referer: str
    book_id: str

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_range(self) -> "BookDescriptor":
        if self.start_page < 1:
            raise ValueError(f"start_page must be >= 1, got {self.start_page}")
        if self.start_page > self.end_page:
            raise ValueError(
                f"start_page ({self.start_page}) must not exceed end_page ({self.end_page})"
            )
        return self

    @property
    def page_numbers(self) -> range:
        return range(self.start_page, self.end_page + 1)

    @property
    def page_count(self) -> int:
        return self.end_page - self.start_page + 1

    @property
    def output_filename(self) -> str:
        return f"{self.book_id}.pdf"

    def page_url(self, page_number: int) -> str:
        return f"{self.image_url_template}/{page_filename(page_number)}"

    def image_dir(self, storage_root: Path) -> Path:
        return Path(storage_root) / self.book_id

    def asset_path(self, storage_root: Path, page_number: int) -> Path:
        return self.image_dir(storage_root) / page_filename(page_number)

    def asset(self, storage_root: Path, page_number: int) -> "PageAsset":
        return PageAsset(
            book_id=self.book_id,
            page_number=page_number,
            path=self.asset_path(storage_root, page_number),
        )


class PageAsset(BaseModel):
    """The locally stored image for one page.

    The file at ``path`` is the only record that a page was downloaded;
    there is no manifest or checksum.
    """

    book_id: str
    page_number: int
    path: Path

    model_config = {"frozen": True}

    @property
    def exists(self) -> bool:
        return self.path.is_file()


class LayoutResult(BaseModel):
    """Placement of an image on a canvas, in canvas units."""

    x: float
    y: float
    width: float
    height: float

    model_config = {"frozen": True}
