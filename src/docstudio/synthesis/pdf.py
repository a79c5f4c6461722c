"""Regenerate a paginated PDF from edited HTML."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

import fitz  # pymupdf
from pydantic import BaseModel, Field

from docstudio.core.config import MM_PER_POINT, PAGE_SIZES, FormattingConfig
from docstudio.core.errors import DocumentSynthesisError
from docstudio.synthesis.fonts import font_segments, resolve_font, wrap_text
from docstudio.synthesis.structure import ElementKind, StructuredElement, html_to_elements
from docstudio.utils.io import edited_filename

logger = logging.getLogger(__name__)

HEADING_SCALES = {1: 1.5, 2: 1.3}
DEFAULT_HEADING_SCALE = 1.15
# Extra space around blocks, as a fraction of one base line
BLOCK_SPACING = 0.5


class PlacedLine(BaseModel):
    """A wrapped line at its final position. Lengths in mm from the top-left corner."""

    text: str
    x: float
    baseline: float
    font_size: float  # pt
    font_name: str
    bold: bool = False
    kind: ElementKind = "paragraph"


class PageLayout(BaseModel):
    number: int
    lines: list[PlacedLine] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(line.text for line in self.lines)


class SynthesisResult(BaseModel):
    """A generated PDF ready for download."""

    content: bytes
    filename: str
    page_count: int
    media_type: str = "application/pdf"


def heading_scale(level: int) -> float:
    return HEADING_SCALES.get(level, DEFAULT_HEADING_SCALE)


def layout_elements(
    elements: Iterable[StructuredElement],
    formatting: FormattingConfig,
    page_size: tuple[float, float] = PAGE_SIZES["a4"],
) -> list[PageLayout]:
    """Place every element on pages, breaking pages at the bottom margin.

    Element order is kept across page boundaries. Always returns at least
    one page.
    """
    page_width, page_height = page_size
    margins = formatting.margins
    content_width = page_width - margins.left - margins.right
    bottom = page_height - margins.bottom
    if content_width <= 0 or bottom <= margins.top:
        raise DocumentSynthesisError("PDF export failed: margins leave no room for content")

    face = resolve_font(formatting.font_family)
    base_line = formatting.line_height
    pages = [PageLayout(number=1)]
    cursor = margins.top

    def fits(height: float) -> bool:
        # An empty page takes anything, so oversized lines cannot loop
        return cursor == margins.top or cursor + height <= bottom

    for element in elements:
        is_heading = element.kind == "heading"
        size = formatting.font_size * (heading_scale(element.level) if is_heading else 1.0)
        font_name = face.bold if is_heading else face.regular
        line_height = size * formatting.line_spacing * MM_PER_POINT

        lines = wrap_text(element.text, content_width / MM_PER_POINT, font_name, size)
        if not lines:
            continue

        before = base_line * BLOCK_SPACING if is_heading and cursor > margins.top else 0.0
        if not fits(before + line_height):
            pages.append(PageLayout(number=len(pages) + 1))
            cursor = margins.top
            before = 0.0
        cursor += before

        for text in lines:
            if not fits(line_height):
                pages.append(PageLayout(number=len(pages) + 1))
                cursor = margins.top
            pages[-1].lines.append(
                PlacedLine(
                    text=text,
                    x=margins.left,
                    baseline=cursor + size * MM_PER_POINT,
                    font_size=size,
                    font_name=font_name,
                    bold=is_heading,
                    kind=element.kind,
                )
            )
            cursor += line_height

        cursor += base_line * BLOCK_SPACING

    return pages


def render_pdf(
    pages: list[PageLayout],
    page_size: tuple[float, float] = PAGE_SIZES["a4"],
    title: str | None = None,
) -> bytes:
    """Draw laid-out pages into a new PDF and return its bytes.

    Fonts are embedded, so any character the fallback font covers survives.
    """
    width, height = (length / MM_PER_POINT for length in page_size)
    doc = fitz.open()
    try:
        for layout in pages:
            page = doc.new_page(width=width, height=height)
            if not layout.lines:
                continue
            writer = fitz.TextWriter(page.rect)
            for line in layout.lines:
                point = fitz.Point(line.x / MM_PER_POINT, line.baseline / MM_PER_POINT)
                for segment, font in font_segments(line.text, line.font_name):
                    _, point = writer.append(point, segment, font=font, fontsize=line.font_size)
            writer.write_text(page)
        doc.set_metadata({"title": title or "", "creator": "docstudio", "producer": "docstudio"})
        return doc.tobytes(garbage=3, deflate=True)
    finally:
        doc.close()


class PdfSynthesizer:
    """Lay out edited HTML as a new paginated PDF.

    The operation is all-or-nothing: any failure raises
    DocumentSynthesisError and no partial document is returned.

    Usage:
        synthesizer = PdfSynthesizer()
        result = synthesizer.synthesize(html, "report.pdf", {"fontSize": 11})
        Path(result.filename).write_bytes(result.content)
    """

    def __init__(
        self,
        formatting: FormattingConfig | dict | None = None,
        page_size: tuple[float, float] = PAGE_SIZES["a4"],
    ) -> None:
        self.formatting = FormattingConfig.merge(formatting)
        self.page_size = page_size

    def _formatting(self, overrides: FormattingConfig | dict | None) -> FormattingConfig:
        return self.formatting if overrides is None else FormattingConfig.merge(overrides)

    def layout(self, html: str, formatting: FormattingConfig | dict | None = None) -> list[PageLayout]:
        return layout_elements(html_to_elements(html), self._formatting(formatting), self.page_size)

    def synthesize(
        self,
        html: str,
        source_name: str | None = None,
        formatting: FormattingConfig | dict | None = None,
    ) -> SynthesisResult:
        """Render ``html`` and name the result ``<source base>_edited.pdf``."""
        try:
            elements = html_to_elements(html)
            pages = layout_elements(elements, self._formatting(formatting), self.page_size)
            title = next((el.text for el in elements if el.kind == "heading"), None)
            content = render_pdf(pages, self.page_size, title=title)
        except DocumentSynthesisError:
            raise
        except Exception as exc:
            raise DocumentSynthesisError(f"PDF export failed: {exc}") from exc

        result = SynthesisResult(
            content=content,
            filename=edited_filename(source_name),
            page_count=len(pages),
        )
        logger.info("Synthesized %s with %d pages", result.filename, result.page_count)
        return result

    async def asynthesize(
        self,
        html: str,
        source_name: str | None = None,
        formatting: FormattingConfig | dict | None = None,
    ) -> SynthesisResult:
        """Async variant; rendering runs in a worker thread."""
        return await asyncio.to_thread(self.synthesize, html, source_name, formatting)
