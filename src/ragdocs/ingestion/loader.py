"""Content acquisition: classify a URL, fetch it, and extract text.

Two paths:

* **PDF**: streamed with ``requests`` under a total deadline and a hard size
  ceiling, parsed with ``pypdf`` and emitted as one chunk per page.
* **HTML**: rendered in the shared headless browser (see
  :mod:`ragdocs.ingestion.browser`), cleaned with BeautifulSoup, and
  split by :func:`~ragdocs.ingestion.chunker.chunk_text`.
"""

from __future__ import annotations

import io
import logging
import re
import socket
import threading
import time
import unicodedata
from datetime import datetime, timezone
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError
from pypdf import PdfReader

from ragdocs.config import settings
from ragdocs.errors import FetchError, ParseError, SizeLimitError
from ragdocs.ingestion.browser import BrowserManager
from ragdocs.ingestion.chunker import chunk_text
from ragdocs.ingestion.models import AcquiredDocument, DocumentChunk, PdfMetadata

logger = logging.getLogger(__name__)

MAIN_CONTENT_SELECTORS: tuple[str, ...] = ("main", "article", ".content", ".documentation", "body")
"""Containers tried in order; the first one with any text wins."""

_PAGE_BREAK = re.compile(r"\f|\n\s*\n")

DOWNLOAD_BLOCK_SIZE = 16 * 1024


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def normalise_text(text: str) -> str:
    """Unicode NFC, strip control chars, collapse whitespace (keeps newlines)."""
    text = unicodedata.normalize("NFC", text)
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f]", "", text)
    text = re.sub(r"[^\S\n]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _shutdown_stream(resp: requests.Response) -> None:
    """Shut down the socket under *resp* so a blocked read returns."""
    conn = getattr(resp.raw, "connection", None)
    sock = getattr(conn, "sock", None)
    if sock is None:
        return
    logger.debug("PDF download deadline passed for %s, closing connection", resp.url)
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as exc:
        logger.debug("Socket already closed: %s", exc)


def split_pages(text: str) -> list[str]:
    """Split extracted PDF text on form feeds or blank-line runs.

    Each page is trimmed; empty pages are dropped.
    """
    pages = (normalise_text(part) for part in _PAGE_BREAK.split(text))
    return [page for page in pages if page]


def parse_pdf(data: bytes) -> tuple[str, PdfMetadata, list[str]]:
    """Parse *data* into ``(full_text, metadata, pages)``.

    Raises
    ------
    ParseError
        If ``pypdf`` cannot read the document.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        page_texts = [page.extract_text() or "" for page in reader.pages]
        info = reader.metadata
        title = (info.title if info else None) or ""
        author = (info.author if info else None) or ""
    except Exception as exc:
        raise ParseError(f"Failed to parse PDF: {exc}") from exc

    text = "\f".join(page_texts)
    pages = split_pages(text)
    meta = PdfMetadata(
        title=str(title).strip(),
        author=str(author).strip(),
        page_count=len(page_texts) or len(pages),
    )
    return text, meta, pages


def extract_main_content(
    html: str,
    selectors: tuple[str, ...] = MAIN_CONTENT_SELECTORS,
) -> tuple[str, str]:
    """Return ``(title, text)`` for a rendered HTML page.

    ``script``, ``style`` and ``noscript`` elements are removed first.
    The text comes from the first selector in *selectors* that matches an
    element containing any text; if none does, the whole document is used.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    title = soup.title.get_text(strip=True) if soup.title else ""

    for selector in selectors:
        node = soup.select_one(selector)
        if node is None:
            continue
        text = node.get_text(separator=" ", strip=True)
        if text:
            return title, normalise_text(text)
    return title, normalise_text(soup.get_text(separator=" ", strip=True))


# ---------------------------------------------------------------------------
# Acquirer
# ---------------------------------------------------------------------------


class ContentAcquirer:
    """Turns a URL into an :class:`AcquiredDocument` with ordered chunks.

    Parameters
    ----------
    browser:
        Shared browser used for HTML pages.
    chunk_size:
        Target chunk length for HTML text.
    max_pdf_bytes:
        PDFs larger than this are rejected before parsing.
    head_timeout / download_timeout:
        Seconds allowed for the classification probe and the PDF download.
    page_timeout_ms:
        Navigation timeout for the browser.
    """

    def __init__(
        self,
        browser: BrowserManager,
        *,
        chunk_size: int = settings.chunk_size,
        max_pdf_bytes: int = settings.max_pdf_bytes,
        head_timeout: float = settings.head_timeout,
        download_timeout: float = settings.download_timeout,
        page_timeout_ms: int = settings.page_timeout_ms,
    ) -> None:
        self._browser = browser
        self.chunk_size = chunk_size
        self.max_pdf_bytes = max_pdf_bytes
        self.head_timeout = head_timeout
        self.download_timeout = download_timeout
        self.page_timeout_ms = page_timeout_ms

    # -- public API -----------------------------------------------------------

    def acquire(self, url: str) -> AcquiredDocument:
        """Fetch *url* and return the document with its chunks in order."""
        if self.is_pdf(url):
            logger.info("PDF detected: %s", url)
            return self.fetch_pdf(url)
        return self.fetch_html(url)

    def is_pdf(self, url: str) -> bool:
        """Classify *url* by its path extension, then by a HEAD probe."""
        if urlparse(url).path.lower().endswith(".pdf"):
            return True
        try:
            resp = requests.head(url, timeout=self.head_timeout, allow_redirects=True)
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.debug("HEAD probe failed for %s, using extension only: %s", url, exc)
            return False
        return "application/pdf" in resp.headers.get("content-type", "").lower()

    def download_pdf(self, url: str) -> bytes:
        """Download the PDF body within a total deadline, enforcing the size ceiling.

        The body is streamed.  Bytes past ``max_pdf_bytes`` are counted but
        not kept, so :class:`SizeLimitError` reports the real size.  When
        ``download_timeout`` elapses a watchdog shuts the socket down, which
        unblocks a read stuck on a slow sender.

        Raises
        ------
        FetchError
            On any transport failure, or when the deadline passes.
        SizeLimitError
            If the body is larger than ``max_pdf_bytes``.
        """
        deadline = time.monotonic() + self.download_timeout
        body = bytearray()
        size = 0
        try:
            with requests.get(url, timeout=self.download_timeout, stream=True) as resp:
                resp.raise_for_status()
                watchdog = threading.Timer(max(deadline - time.monotonic(), 0.0), _shutdown_stream, args=(resp,))
                watchdog.daemon = True
                watchdog.start()
                try:
                    for block in resp.iter_content(chunk_size=DOWNLOAD_BLOCK_SIZE):
                        if time.monotonic() >= deadline:
                            break
                        size += len(block)
                        if size <= self.max_pdf_bytes:
                            body += block
                finally:
                    watchdog.cancel()
        except (requests.RequestException, OSError) as exc:
            if time.monotonic() >= deadline:
                raise FetchError(url, f"download exceeded {self.download_timeout}s") from exc
            raise FetchError(url, str(exc)) from exc

        if time.monotonic() >= deadline:
            raise FetchError(url, f"download exceeded {self.download_timeout}s")
        if size > self.max_pdf_bytes:
            raise SizeLimitError(url, size, self.max_pdf_bytes)
        return bytes(body)

    def fetch_pdf(self, url: str) -> AcquiredDocument:
        data = self.download_pdf(url)
        _, meta, pages = parse_pdf(data)
        title = meta.title or url
        author = meta.author or None
        timestamp = datetime.now(timezone.utc)
        if not pages:
            logger.warning("No extractable text in PDF %s (%d pages)", url, meta.page_count)
        chunks = [
            DocumentChunk(
                text=page,
                url=url,
                title=title,
                timestamp=timestamp,
                page=number,
                page_count=meta.page_count,
                author=author,
                is_pdf=True,
            )
            for number, page in enumerate(pages, 1)
        ]
        return AcquiredDocument(
            url=url,
            title=title,
            chunks=chunks,
            is_pdf=True,
            author=author,
            page_count=meta.page_count,
        )

    def fetch_html(self, url: str) -> AcquiredDocument:
        try:
            with self._browser.page() as tab:
                tab.goto(url, wait_until="networkidle", timeout=self.page_timeout_ms)
                html = tab.content()
        except PlaywrightError as exc:
            raise FetchError(url, str(exc)) from exc

        title, text = extract_main_content(html)
        title = title or url
        chunks = [
            DocumentChunk(text=chunk, url=url, title=title)
            for chunk in chunk_text(text, self.chunk_size)
        ]
        return AcquiredDocument(url=url, title=title, chunks=chunks)
