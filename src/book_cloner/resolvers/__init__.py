"""Resolvers that discover a book's structure from its URL."""

from .page_range import PageRangeDetector
from .url_resolver import URLResolver, normalize_url

__all__ = ["PageRangeDetector", "URLResolver", "normalize_url"]
