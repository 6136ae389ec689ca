"""Command-line interface for book-cloner."""

import argparse
import logging
import sys
from pathlib import Path

from schemas.settings import CloneSettings

from book_cloner.exceptions import (
    FetchError,
    InvalidURLError,
    OutputWriteError,
    RangeDetectionError,
)
from book_cloner.pipeline import Orchestrator

DEFAULT_IMAGES_DIR = Path("images")
DEFAULT_OUTPUT_DIR = Path(".")
DEFAULT_WORKERS = 10

SEPARATOR = "=" * 60


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def prompt_url() -> str:
    """Ask for a book URL on stdin; returns an empty string on EOF."""
    try:
        return input("Enter book URL: ").strip()
    except EOFError:
        return ""


def build_settings(args: argparse.Namespace) -> CloneSettings:
    return CloneSettings(
        storage_root=args.images_dir,
        output_dir=args.output_dir,
        max_workers=args.workers,
        strict=args.strict,
    )


def inspect_book(args: argparse.Namespace, url: str) -> int:
    """Resolve a book and print its descriptor as JSON without downloading.

    Args:
        args: Parsed command-line arguments
        url: Book URL

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    logger = logging.getLogger(__name__)

    try:
        with Orchestrator(build_settings(args)) as orchestrator:
            descriptor = orchestrator.resolve(url)
    except (InvalidURLError, RangeDetectionError) as e:
        logger.error(f"Failed to parse URL: {e.message}")
        return 1

    print(descriptor.model_dump_json(indent=2))
    return 0


def clone_book(args: argparse.Namespace, url: str) -> int:
    """Clone a book into local images and a PDF.

    Args:
        args: Parsed command-line arguments
        url: Book URL

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    logger = logging.getLogger(__name__)
    logger.info("Starting book cloning process...")

    try:
        with Orchestrator(build_settings(args)) as orchestrator:
            result = orchestrator.run(url)
    except (InvalidURLError, RangeDetectionError) as e:
        logger.error(f"Failed to parse URL: {e.message}")
        return 1
    except FetchError as e:
        logger.error(f"Failed to download images: {e.message}")
        return 1
    except OutputWriteError as e:
        logger.error(f"Failed to create PDF: {e.message}")
        return 1
    except OSError as e:
        logger.error(f"Failed to prepare image directory: {e}")
        return 1

    descriptor = result.descriptor
    fetch_report = result.fetch_report
    composition_report = result.composition_report

    logger.info(SEPARATOR)
    logger.info("PROCESS COMPLETE!")
    logger.info(SEPARATOR)
    logger.info(f"Book Name: {descriptor.book_id}")
    logger.info(f"PDF file created: {composition_report.output_path}")
    logger.info(f"Images stored in: {result.image_dir}/")
    logger.info(f"Total pages: {descriptor.page_count}")

    if fetch_report.failed:
        logger.warning(f"  Failed downloads: {fetch_report.failed}")
    if composition_report.skipped:
        logger.warning(f"  Pages left out of PDF: {len(composition_report.skipped)}")
        for skip in composition_report.skipped:
            logger.warning(f"    - page {skip.page_number}: {skip.reason}")

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="book-cloner",
        description="Download the page images of an online book and assemble them into a PDF",
    )
    parser.add_argument(
        "url",
        nargs="?",
        help="URL of the book (prompted for if omitted)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--images-dir",
        type=Path,
        default=DEFAULT_IMAGES_DIR,
        help=f"Directory for downloaded page images (default: {DEFAULT_IMAGES_DIR})",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Directory for the generated PDF (default: {DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_WORKERS,
        help=f"Number of concurrent downloads (default: {DEFAULT_WORKERS})",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail if any page image cannot be downloaded",
    )
    parser.add_argument(
        "--inspect",
        action="store_true",
        help="Only detect the book structure and print it as JSON",
    )

    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if args.workers < 1:
        logger.error("--workers must be at least 1")
        return 1

    url = args.url or prompt_url()
    if not url:
        logger.error("No URL provided")
        return 1

    if args.inspect:
        return inspect_book(args, url)
    return clone_book(args, url)


if __name__ == "__main__":
    sys.exit(main())
