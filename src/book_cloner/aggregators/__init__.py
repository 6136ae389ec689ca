"""Aggregators for gathering page images from remote servers."""

from .page_fetcher import PageFetcher

__all__ = ["PageFetcher"]
