"""Clone paginated online books into a local image set and a PDF."""

__version__ = "0.1.0"
