"""Transformers that turn downloaded page images into documents."""

from .pdf_compositor import PDFCompositor, compute_layout

__all__ = ["PDFCompositor", "compute_layout"]
