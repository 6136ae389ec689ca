"""Schema definitions for book-cloner."""

from .book import BookDescriptor, LayoutResult, PageAsset, ProbeOutcome, ResolvedURL
from .reports import CloneResult, CompositionReport, FetchReport, PageFailure, PageSkip
from .settings import CloneSettings

__all__ = [
    "BookDescriptor",
    "CloneResult",
    "CloneSettings",
    "CompositionReport",
    "FetchReport",
    "LayoutResult",
    "PageAsset",
    "PageFailure",
    "PageSkip",
    "ProbeOutcome",
    "ResolvedURL",
]
