"""PDF text extractor backed by PyMuPDF."""

from __future__ import annotations

import asyncio
import logging
from typing import NamedTuple

import fitz  # pymupdf
import httpx

from docstudio.core.document import DocumentMetadata, ParsedDocument, ParsedPage, TextRun
from docstudio.core.errors import DocumentParseError, FetchError
from docstudio.core.registry import ExtractorRegistry
from docstudio.extraction.base import BaseExtractor, ProgressReporter
from docstudio.extraction.layout import build_page_text, group_lines, join_pages
from docstudio.utils.io import is_url, resolve_path

logger = logging.getLogger(__name__)

# Share of the progress bar spent on fetching; parsing gets the rest
FETCH_WEIGHT = 30.0


class RawTextRun(NamedTuple):
    """A text run as read from the page, before style hints are derived."""

    text: str
    transform: tuple[float, float, float, float, float, float]
    width: float
    height: float
    font_name: str


def page_raw_runs(page: fitz.Page) -> list[RawTextRun]:
    """Collect the positioned spans of a page in content-stream order.

    PyMuPDF reports coordinates with y growing downward; transforms are
    flipped into PDF space so that y grows upward from the bottom edge.
    """
    page_height = page.rect.height
    runs: list[RawTextRun] = []
    for block in page.get_text("dict")["blocks"]:
        if block.get("type", 0) != 0:
            continue  # image block
        for line in block.get("lines", []):
            cos, sin = line.get("dir", (1.0, 0.0))
            for span in line.get("spans", []):
                size = span["size"]
                origin_x, origin_y = span["origin"]
                x0, y0, x1, y1 = span["bbox"]
                runs.append(
                    RawTextRun(
                        text=span["text"],
                        transform=(
                            size * cos,
                            -size * sin,
                            size * sin,
                            size * cos,
                            origin_x,
                            page_height - origin_y,
                        ),
                        width=x1 - x0,
                        height=y1 - y0,
                        font_name=span.get("font", ""),
                    )
                )
    return runs


def to_text_runs(raw_runs: list[RawTextRun]) -> list[TextRun]:
    """Drop whitespace-only runs and derive style hints for the rest."""
    return [
        TextRun.from_transform(raw.text, raw.transform, raw.width, raw.height, raw.font_name)
        for raw in raw_runs
        if raw.text.strip()
    ]


def parse_page(page: fitz.Page, page_number: int) -> ParsedPage:
    runs = to_text_runs(page_raw_runs(page))
    text = build_page_text(group_lines(runs))
    return ParsedPage(page_number=page_number, text=text, text_items=runs)


class PyMuPDFExtractor(BaseExtractor):
    """Extract reading-order text from PDFs with PyMuPDF.

    Sources may be http(s) URLs, ``file://`` URLs or local paths. Pages are
    parsed one at a time in source order.

    Usage:
        extractor = PyMuPDFExtractor()
        document = await extractor.aextract("https://example.com/paper.pdf")
    """

    name = "pymupdf"

    def __init__(
        self,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
        require_text: bool = True,
        follow_redirects: bool = True,
    ) -> None:
        self.timeout = timeout
        self.transport = transport
        self.require_text = require_text
        self.follow_redirects = follow_redirects

    # ── Fetch ───────────────────────────────────────────────────────────

    async def fetch(self, source: str, progress: ProgressReporter) -> bytes:
        if is_url(source):
            data = await self._download(source, progress)
        else:
            try:
                path = resolve_path(source)
                data = await asyncio.to_thread(path.read_bytes)
            except OSError as exc:
                raise FetchError(f"Failed to read PDF: {exc}") from exc
        progress.report(FETCH_WEIGHT)
        logger.info("Fetched %d bytes from %s", len(data), source)
        return data

    async def _download(self, url: str, progress: ProgressReporter) -> bytes:
        chunks: list[bytes] = []
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
                follow_redirects=self.follow_redirects,
            ) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    total = int(response.headers.get("content-length") or 0)
                    loaded = 0
                    async for chunk in response.aiter_bytes():
                        chunks.append(chunk)
                        loaded += len(chunk)
                        if total:
                            progress.report(FETCH_WEIGHT * min(loaded / total, 1.0))
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"Failed to fetch PDF: HTTP {exc.response.status_code} for {url}"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(f"Failed to fetch PDF: {exc}") from exc
        return b"".join(chunks)

    # ── Parse ───────────────────────────────────────────────────────────

    async def parse_bytes(
        self,
        data: bytes,
        source: str = "",
        progress: ProgressReporter | None = None,
    ) -> ParsedDocument:
        progress = progress or ProgressReporter()
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            raise DocumentParseError(f"Failed to parse PDF: {exc}") from exc

        try:
            if doc.needs_pass:
                raise DocumentParseError("Failed to parse PDF: document is encrypted")
            total = doc.page_count
            logger.info("Opened PDF with %d pages", total)
            metadata = self._read_metadata(doc)

            pages: list[ParsedPage] = []
            for index in range(total):
                pages.append(parse_page(doc.load_page(index), index + 1))
                progress.report(FETCH_WEIGHT + (100.0 - FETCH_WEIGHT) * (index + 1) / total)
                logger.debug("Parsed page %d/%d", index + 1, total)
                await asyncio.sleep(0)
        except DocumentParseError:
            raise
        except Exception as exc:
            raise DocumentParseError(f"Failed to parse PDF: {exc}") from exc
        finally:
            doc.close()

        if self.require_text and not any(page.text_items for page in pages):
            raise DocumentParseError("Failed to parse PDF: no extractable text")

        return ParsedDocument(
            source=source,
            full_text=join_pages(page.text for page in pages),
            pages=pages,
            metadata=metadata,
        )

    def _read_metadata(self, doc: fitz.Document) -> DocumentMetadata:
        try:
            return DocumentMetadata.from_info(doc.metadata)
        except Exception as exc:
            logger.warning("Could not read PDF metadata: %s", exc)
            return DocumentMetadata()


ExtractorRegistry.register("pymupdf", PyMuPDFExtractor)
