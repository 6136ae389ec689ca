"""Pytest fixtures for book-cloner tests."""

import threading
from pathlib import Path
from unittest.mock import MagicMock

import fitz
import httpx
import pytest

from book_cloner.clients import BookClient
from schemas.book import BookDescriptor, ProbeOutcome

BOOK_URL = "https://books.example.org/ebooks/2019/06/sample-book"
TEMPLATE = f"{BOOK_URL}/files/mobile"


def write_jpeg(path: Path, width: int, height: int) -> Path:
    """Write a solid-colour JPEG of the given pixel size."""
    path.parent.mkdir(parents=True, exist_ok=True)
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pix.clear_with(180)
    pix.save(str(path))
    return path


def page_number_from_url(url: httpx.URL) -> int:
    return int(url.path.rsplit("/", 1)[-1].removesuffix(".jpg"))


@pytest.fixture
def descriptor():
    """A resolved ten-page book."""
    return BookDescriptor(
        base_url=BOOK_URL,
        image_url_template=TEMPLATE,
        start_page=1,
        end_page=10,
        referer=BOOK_URL + "/",
        book_id="sample-book",
    )


@pytest.fixture
def jpeg_factory():
    """Create JPEG files for pages of a book under a storage root."""

    def _make(storage_root: Path, book_id: str, page: int, width: int = 40, height: int = 60):
        return write_jpeg(storage_root / book_id / f"{page}.jpg", width, height)

    return _make


@pytest.fixture
def probe_client():
    """Build a mock BookClient whose probes hit only the given URLs.

    The returned mock records every probed URL in ``probed``.
    """

    def _make(existing: set[str], transient: set[str] = frozenset()):
        client = MagicMock(spec=BookClient)
        client.probed = []

        def probe(url):
            client.probed.append(url)
            if url in transient:
                return ProbeOutcome.TRANSIENT_ERROR
            if url in existing:
                return ProbeOutcome.EXISTS
            return ProbeOutcome.NOT_FOUND

        client.probe.side_effect = probe
        client.exists.side_effect = lambda url: probe(url) is ProbeOutcome.EXISTS
        return client

    return _make


class PageServer:
    """In-memory page image server for httpx.MockTransport.

    Serves ``{template}/{n}.jpg`` for n in ``pages``. Pages listed in
    ``broken`` raise a transport error instead of responding, and pages in
    ``looping`` redirect to themselves forever.
    """

    def __init__(
        self, template: str, pages: range, content=b"jpeg-bytes", broken=(), looping=()
    ):
        self.template = template
        self.pages = set(pages)
        self.content = content
        self.broken = set(broken)
        self.looping = set(looping)
        self.requests: list[httpx.Request] = []
        self._lock = threading.Lock()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)

        url = str(request.url)
        if not url.startswith(self.template + "/"):
            return httpx.Response(404)

        page = page_number_from_url(request.url)
        if page in self.broken:
            raise httpx.ConnectError("connection reset", request=request)
        if page in self.looping:
            return httpx.Response(302, headers={"Location": url})
        if page not in self.pages:
            return httpx.Response(404)

        content = self.content(page) if callable(self.content) else self.content
        if request.method == "HEAD":
            return httpx.Response(200)
        return httpx.Response(200, content=content)

    def requests_for(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]


@pytest.fixture
def page_server():
    """Factory for a PageServer and a BookClient wired to it."""
    clients = []

    def _make(template: str = TEMPLATE, pages: range = range(1, 11), **kwargs):
        server = PageServer(template, pages, **kwargs)
        http_client = httpx.Client(
            transport=httpx.MockTransport(server), follow_redirects=True
        )
        client = BookClient(http_client=http_client)
        clients.append(http_client)
        return server, client

    yield _make

    for http_client in clients:
        http_client.close()
