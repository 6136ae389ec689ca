"""Exceptions raised while cloning a book.

Only InvalidURLError, RangeDetectionError and OutputWriteError abort a run.
FetchError, DecodeError and MissingAssetError describe a single page and are
collected into reports; FetchError is raised at batch level only in strict
mode.
"""

from pathlib import Path


class BookClonerError(Exception):
    """Base exception for all book cloning errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class InvalidURLError(BookClonerError):
    """Raised when a book URL cannot be parsed into scheme, host and path."""

    def __init__(self, url: object, reason: str = "invalid URL"):
        self.url = url
        super().__init__(f"{reason}: {url!r}")


class RangeDetectionError(BookClonerError):
    """Raised when the page range of a book cannot be determined."""

    pass


class NoPagesFoundError(RangeDetectionError):
    """Raised when not even the first page of a book exists."""

    def __init__(self, image_url_template: str):
        self.image_url_template = image_url_template
        super().__init__(f"No pages found under {image_url_template}")


class FetchError(BookClonerError):
    """Raised when page downloads fail and failures are configured as fatal."""

    def __init__(self, message: str, report=None):
        self.report = report
        super().__init__(message)


class DecodeError(BookClonerError):
    """Raised when a page image cannot be decoded."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Cannot decode {path}: {reason}")


class MissingAssetError(BookClonerError):
    """Raised when a page image is not present in local storage."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Image not found: {path}")


class OutputWriteError(BookClonerError):
    """Raised when the assembled document cannot be written."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Failed to write {path}: {reason}")
