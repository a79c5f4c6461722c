"""Document model for text extracted from a PDF."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field

from docstudio.extraction.heuristics import detect_bold, detect_heading, detect_italic

# D:YYYYMMDDHHmmSS followed by Z, or +HH'mm', or -HH'mm'
_PDF_DATE_RE = re.compile(
    r"^(?:D:)?(\d{4})(\d{2})?(\d{2})?(\d{2})?(\d{2})?(\d{2})?"
    r"(?:(Z)|([+-])(\d{2})'?(\d{2})?'?)?"
)


def parse_pdf_date(value: str | None) -> datetime | None:
    """Parse a PDF date string. Returns None when the value is missing or malformed."""
    if not value:
        return None
    match = _PDF_DATE_RE.match(value.strip())
    if not match:
        return None
    year, month, day, hour, minute, second, zulu, sign, tz_h, tz_m = match.groups()
    tzinfo = None
    if zulu:
        tzinfo = timezone.utc
    elif sign:
        offset = timedelta(hours=int(tz_h), minutes=int(tz_m or 0))
        tzinfo = timezone(offset if sign == "+" else -offset)
    try:
        return datetime(
            int(year),
            int(month or 1),
            int(day or 1),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
            tzinfo=tzinfo,
        )
    except ValueError:
        return None


class TextRun(BaseModel):
    """A positioned run of glyphs on a page.

    Coordinates are in PDF space: origin bottom-left, y grows upward.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    x: float
    y: float
    width: float
    height: float
    font_size: float
    font_name: str
    is_heading: bool = False
    is_bold: bool = False
    is_italic: bool = False

    @classmethod
    def from_transform(
        cls,
        text: str,
        transform: Sequence[float],
        width: float,
        height: float,
        font_name: str,
    ) -> TextRun:
        """Build a run from a 2D affine transform ``[a, b, c, d, e, f]``."""
        font_size = abs(transform[0])
        return cls(
            text=text,
            x=transform[4],
            y=transform[5],
            width=width,
            height=height,
            font_size=font_size,
            font_name=font_name,
            is_heading=detect_heading(font_size, font_name),
            is_bold=detect_bold(font_name),
            is_italic=detect_italic(font_name),
        )


class ParsedPage(BaseModel):
    """A single page of a parsed PDF."""

    model_config = ConfigDict(frozen=True)

    page_number: int = Field(ge=1)
    text: str = ""
    text_items: list[TextRun] = Field(default_factory=list)


class DocumentMetadata(BaseModel):
    """Best-effort document information. Absent fields stay None."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    author: str | None = None
    subject: str | None = None
    creator: str | None = None
    producer: str | None = None
    creation_date: datetime | None = None
    modification_date: datetime | None = None

    @classmethod
    def from_info(cls, info: dict | None) -> DocumentMetadata:
        """Build from a PyMuPDF ``Document.metadata`` dictionary."""
        info = info or {}

        def _clean(key: str) -> str | None:
            value = info.get(key)
            if isinstance(value, str):
                value = value.strip()
            return value or None

        return cls(
            title=_clean("title"),
            author=_clean("author"),
            subject=_clean("subject"),
            creator=_clean("creator"),
            producer=_clean("producer"),
            creation_date=parse_pdf_date(_clean("creationDate")),
            modification_date=parse_pdf_date(_clean("modDate")),
        )


class ParsedDocument(BaseModel):
    """Text and structure hints extracted from a whole PDF."""

    model_config = ConfigDict(frozen=True)

    source: str = ""
    full_text: str = ""
    pages: list[ParsedPage] = Field(default_factory=list)
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)

    @property
    def num_pages(self) -> int:
        return len(self.pages)

    @property
    def num_runs(self) -> int:
        return sum(len(page.text_items) for page in self.pages)
