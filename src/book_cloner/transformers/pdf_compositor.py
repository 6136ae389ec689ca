"""PDF Compositor for assembling page images into a single document.

Each page image is scaled to fit a fixed-size canvas (A4 portrait by
default), centered, and written as one PDF page using PyMuPDF.
"""

import logging
from pathlib import Path

import fitz  # PyMuPDF

from schemas.book import BookDescriptor, LayoutResult
from schemas.reports import CompositionReport, PageSkip
from schemas.settings import A4_PORTRAIT_MM

from book_cloner.exceptions import DecodeError, MissingAssetError, OutputWriteError

logger = logging.getLogger(__name__)

POINTS_PER_MM = 72 / 25.4
PROGRESS_INTERVAL = 50


def compute_layout(
    image_width: float,
    image_height: float,
    canvas_width: float = A4_PORTRAIT_MM[0],
    canvas_height: float = A4_PORTRAIT_MM[1],
) -> LayoutResult:
    """Fit an image inside a canvas, preserving aspect ratio, centered.

    The result is in the canvas's units. Either the width or the height
    fills the canvas exactly; the other dimension is centered.

    Args:
        image_width: Image width in pixels
        image_height: Image height in pixels
        canvas_width: Canvas width
        canvas_height: Canvas height

    Returns:
        LayoutResult with the image's position and display size

    Raises:
        ValueError: If any dimension is not positive
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {image_width}x{image_height}")
    if canvas_width <= 0 or canvas_height <= 0:
        raise ValueError(f"Canvas dimensions must be positive, got {canvas_width}x{canvas_height}")

    ratio = min(canvas_width / image_width, canvas_height / image_height)
    width = image_width * ratio
    height = image_height * ratio

    return LayoutResult(
        x=(canvas_width - width) / 2,
        y=(canvas_height - height) / 2,
        width=width,
        height=height,
    )


class PDFCompositor:
    """Assemble a book's page images into one PDF.

    The PDFCompositor:
    1. Walks the book's page range in ascending order
    2. For each page:
       a. Skips it if the image is missing or cannot be decoded
       b. Computes a centered, aspect-preserving layout on the canvas
       c. Adds a new canvas-sized page with the image placed on it
    3. Saves the document

    Attributes:
        page_size_mm: Canvas (width, height) in millimetres
    """

    def __init__(self, page_size_mm: tuple[float, float] = A4_PORTRAIT_MM):
        self.page_size_mm = page_size_mm

    def compose(
        self,
        descriptor: BookDescriptor,
        storage_root: Path,
        output_path: Path,
    ) -> CompositionReport:
        """Compose the locally stored pages of a book into a PDF.

        Args:
            descriptor: The resolved book
            storage_root: Directory holding one image directory per book
            output_path: Where to write the PDF

        Returns:
            CompositionReport listing written and skipped pages

        Raises:
            OutputWriteError: If the document cannot be saved
        """
        report = CompositionReport(book_id=descriptor.book_id, output_path=output_path)
        logger.info(
            f"Composing {descriptor.page_count} pages of {descriptor.book_id} into {output_path}"
        )

        doc = fitz.open()
        try:
            for page_number in descriptor.page_numbers:
                image_path = descriptor.asset_path(storage_root, page_number)
                try:
                    self._add_page(doc, image_path)
                except (MissingAssetError, DecodeError) as e:
                    logger.warning(f"Skipping page {page_number}: {e.message}")
                    report.skipped.append(PageSkip(page_number=page_number, reason=e.message))
                    continue

                report.page_numbers.append(page_number)
                if report.page_count % PROGRESS_INTERVAL == 0:
                    logger.info(
                        f"Added {report.page_count}/{descriptor.page_count} pages to PDF..."
                    )

            self._save(doc, output_path)
        finally:
            doc.close()

        logger.info(
            f"Wrote {report.page_count} pages to {output_path} "
            f"({len(report.skipped)} skipped)"
        )
        return report

    def _add_page(self, doc: fitz.Document, image_path: Path) -> None:
        """Append one canvas page holding the image at image_path.

        Raises:
            MissingAssetError: If the image file does not exist
            DecodeError: If the image cannot be decoded or placed
        """
        if not image_path.is_file():
            raise MissingAssetError(image_path)

        width, height = self._read_dimensions(image_path)
        canvas_width, canvas_height = self.page_size_mm
        layout = compute_layout(width, height, canvas_width, canvas_height)

        page = doc.new_page(
            width=canvas_width * POINTS_PER_MM,
            height=canvas_height * POINTS_PER_MM,
        )
        rect = fitz.Rect(
            layout.x * POINTS_PER_MM,
            layout.y * POINTS_PER_MM,
            (layout.x + layout.width) * POINTS_PER_MM,
            (layout.y + layout.height) * POINTS_PER_MM,
        )
        try:
            page.insert_image(rect, filename=str(image_path), keep_proportion=False)
        except Exception as e:
            doc.delete_page(-1)
            raise DecodeError(image_path, str(e)) from e

    def _read_dimensions(self, image_path: Path) -> tuple[int, int]:
        """Decode an image and return its pixel (width, height).

        Raises:
            DecodeError: If the image cannot be decoded
        """
        try:
            pix = fitz.Pixmap(str(image_path))
        except Exception as e:
            raise DecodeError(image_path, str(e)) from e

        if pix.width <= 0 or pix.height <= 0:
            raise DecodeError(image_path, f"empty image ({pix.width}x{pix.height})")
        return pix.width, pix.height

    def _save(self, doc: fitz.Document, output_path: Path) -> None:
        """Write the document, mapping every failure to OutputWriteError."""
        if doc.page_count == 0:
            raise OutputWriteError(output_path, "no pages could be composed")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            doc.save(str(output_path))
        except Exception as e:
            raise OutputWriteError(output_path, str(e)) from e

        logger.debug(f"Saved PDF to {output_path}")
