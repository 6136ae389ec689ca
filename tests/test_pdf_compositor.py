"""Tests for the PDFCompositor and compute_layout."""

import math

import fitz
import pytest

from book_cloner.exceptions import OutputWriteError
from book_cloner.transformers import PDFCompositor, compute_layout
from book_cloner.transformers.pdf_compositor import POINTS_PER_MM

A4_WIDTH_PT = 210 * POINTS_PER_MM
A4_HEIGHT_PT = 297 * POINTS_PER_MM


class TestComputeLayout:
    """Tests for compute_layout()."""

    def test_portrait_image_fills_height(self):
        """A tall image fills the canvas height and is centered horizontally."""
        layout = compute_layout(1000, 2000)

        assert layout.height == pytest.approx(297)
        assert layout.width == pytest.approx(148.5)
        assert layout.x == pytest.approx((210 - 148.5) / 2)
        assert layout.y == pytest.approx(0)

    def test_landscape_image_fills_width(self):
        """A wide image fills the canvas width and is centered vertically."""
        layout = compute_layout(2000, 1000)

        assert layout.width == pytest.approx(210)
        assert layout.height == pytest.approx(105)
        assert layout.x == pytest.approx(0)
        assert layout.y == pytest.approx((297 - 105) / 2)

    def test_exact_a4_ratio_fills_canvas(self):
        """An image with the canvas's aspect ratio fills it exactly."""
        layout = compute_layout(2100, 2970)

        assert (layout.x, layout.y) == (pytest.approx(0), pytest.approx(0))
        assert (layout.width, layout.height) == (pytest.approx(210), pytest.approx(297))

    def test_small_images_are_scaled_up(self):
        """Images smaller than the canvas are enlarged to fit."""
        layout = compute_layout(21, 10)

        assert layout.width == pytest.approx(210)

    @pytest.mark.parametrize(
        "width,height",
        [(1, 1), (1, 5000), (5000, 1), (640, 480), (1240, 1754), (333, 777), (7, 3)],
    )
    def test_fits_preserves_ratio_and_centers(self, width, height):
        """Layout stays inside the canvas, keeps aspect ratio and is centered."""
        layout = compute_layout(width, height)

        assert layout.width <= 210 + 1e-9
        assert layout.height <= 297 + 1e-9
        assert layout.x >= 0
        assert layout.y >= 0
        assert math.isclose(layout.width / layout.height, width / height, rel_tol=1e-9)
        assert layout.x + layout.width / 2 == pytest.approx(105)
        assert layout.y + layout.height / 2 == pytest.approx(148.5)

    def test_custom_canvas(self):
        """Canvas size can be changed."""
        layout = compute_layout(100, 100, canvas_width=50, canvas_height=80)

        assert (layout.width, layout.height) == (50, 50)
        assert layout.y == 15

    @pytest.mark.parametrize("width,height", [(0, 100), (100, 0), (-5, 10)])
    def test_rejects_non_positive_dimensions(self, width, height):
        """Zero or negative dimensions are invalid."""
        with pytest.raises(ValueError):
            compute_layout(width, height)


class TestPDFCompositor:
    """Tests for PDFCompositor.compose()."""

    def test_one_page_per_image_in_order(self, tmp_path, descriptor, jpeg_factory):
        """Each image becomes one page, in ascending page-number order."""
        storage_root = tmp_path / "images"
        # Create files out of order with a width that encodes the page number.
        for page in (10, 3, 7, 1, 5, 2, 9, 4, 8, 6):
            jpeg_factory(storage_root, "sample-book", page, width=20 + page, height=50)
        output_path = tmp_path / "sample-book.pdf"

        report = PDFCompositor().compose(descriptor, storage_root, output_path)

        assert report.page_numbers == list(range(1, 11))
        assert report.skipped == []
        with fitz.open(str(output_path)) as doc:
            assert doc.page_count == 10
            widths = [page.get_image_info()[0]["width"] for page in doc]
        assert widths == [20 + page for page in range(1, 11)]

    def test_pages_are_a4(self, tmp_path, descriptor, jpeg_factory):
        """Output pages are A4 portrait."""
        storage_root = tmp_path / "images"
        jpeg_factory(storage_root, "sample-book", 1)
        output_path = tmp_path / "out.pdf"

        PDFCompositor().compose(descriptor, storage_root, output_path)

        with fitz.open(str(output_path)) as doc:
            rect = doc[0].rect
        assert rect.width == pytest.approx(A4_WIDTH_PT, abs=0.01)
        assert rect.height == pytest.approx(A4_HEIGHT_PT, abs=0.01)

    def test_image_placed_at_layout(self, tmp_path, descriptor, jpeg_factory):
        """The image is drawn at the computed, centered rectangle."""
        storage_root = tmp_path / "images"
        jpeg_factory(storage_root, "sample-book", 1, width=100, height=100)
        output_path = tmp_path / "out.pdf"

        PDFCompositor().compose(descriptor, storage_root, output_path)

        expected = compute_layout(100, 100)
        with fitz.open(str(output_path)) as doc:
            bbox = fitz.Rect(doc[0].get_image_info()[0]["bbox"])
        assert bbox.x0 == pytest.approx(expected.x * POINTS_PER_MM, abs=0.01)
        assert bbox.y0 == pytest.approx(expected.y * POINTS_PER_MM, abs=0.01)
        assert bbox.width == pytest.approx(expected.width * POINTS_PER_MM, abs=0.01)

    def test_missing_pages_are_skipped(self, tmp_path, descriptor, jpeg_factory, caplog):
        """Absent images are skipped and recorded, not fatal."""
        storage_root = tmp_path / "images"
        for page in (1, 2, 4, 10):
            jpeg_factory(storage_root, "sample-book", page)
        output_path = tmp_path / "out.pdf"

        report = PDFCompositor().compose(descriptor, storage_root, output_path)

        assert report.page_numbers == [1, 2, 4, 10]
        assert [s.page_number for s in report.skipped] == [3, 5, 6, 7, 8, 9]
        assert "Image not found" in report.skipped[0].reason
        assert "Skipping page 3" in caplog.text
        with fitz.open(str(output_path)) as doc:
            assert doc.page_count == 4

    def test_undecodable_pages_are_skipped(self, tmp_path, descriptor, jpeg_factory):
        """Corrupt images are treated like missing ones."""
        storage_root = tmp_path / "images"
        jpeg_factory(storage_root, "sample-book", 1)
        jpeg_factory(storage_root, "sample-book", 3)
        (storage_root / "sample-book" / "2.jpg").write_bytes(b"<html>not an image</html>")
        output_path = tmp_path / "out.pdf"

        report = PDFCompositor().compose(descriptor, storage_root, output_path)

        assert report.page_numbers == [1, 3]
        skipped = {s.page_number: s.reason for s in report.skipped}
        assert skipped[2].startswith("Cannot decode")
        with fitz.open(str(output_path)) as doc:
            assert doc.page_count == 2

    def test_creates_output_directory(self, tmp_path, descriptor, jpeg_factory):
        """The output directory is created if needed."""
        storage_root = tmp_path / "images"
        jpeg_factory(storage_root, "sample-book", 1)
        output_path = tmp_path / "pdfs" / "nested" / "out.pdf"

        report = PDFCompositor().compose(descriptor, storage_root, output_path)

        assert output_path.exists()
        assert report.output_path == output_path

    def test_no_pages_raises_output_write_error(self, tmp_path, descriptor):
        """A document with no pages cannot be written."""
        output_path = tmp_path / "out.pdf"

        with pytest.raises(OutputWriteError, match="no pages"):
            PDFCompositor().compose(descriptor, tmp_path / "images", output_path)

        assert not output_path.exists()

    def test_unwritable_output_raises_output_write_error(self, tmp_path, descriptor, jpeg_factory):
        """Failure to save is reported as OutputWriteError."""
        storage_root = tmp_path / "images"
        jpeg_factory(storage_root, "sample-book", 1)
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")

        with pytest.raises(OutputWriteError) as exc_info:
            PDFCompositor().compose(descriptor, storage_root, blocker / "out.pdf")

        assert exc_info.value.path == blocker / "out.pdf"

    def test_custom_page_size(self, tmp_path, descriptor, jpeg_factory):
        """Page size follows page_size_mm."""
        storage_root = tmp_path / "images"
        jpeg_factory(storage_root, "sample-book", 1)
        output_path = tmp_path / "out.pdf"

        PDFCompositor(page_size_mm=(297.0, 210.0)).compose(descriptor, storage_root, output_path)

        with fitz.open(str(output_path)) as doc:
            assert doc[0].rect.width == pytest.approx(A4_HEIGHT_PT, abs=0.01)
