"""Font family mapping and text metrics for the PDF writer.

The requested family is advisory: it is mapped to the closest built-in
Base-14 face. Characters that face has no glyph for (CJK, and anything else
outside its coverage) are drawn with MuPDF's built-in Droid Sans Fallback.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import fitz  # pymupdf
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class FontFace(BaseModel):
    """Regular and bold Base-14 font codes understood by PyMuPDF."""

    model_config = ConfigDict(frozen=True)

    regular: str
    bold: str


TIMES = FontFace(regular="tiro", bold="tibo")
HELVETICA = FontFace(regular="helv", bold="hebo")
COURIER = FontFace(regular="cour", bold="cobo")

# Droid Sans Fallback, bundled with MuPDF
FALLBACK_FONT = "cjk"

FONT_FAMILIES: dict[str, FontFace] = {
    "times new roman": TIMES,
    "times": TIMES,
    "times-roman": TIMES,
    "serif": TIMES,
    "helvetica": HELVETICA,
    "arial": HELVETICA,
    "sans-serif": HELVETICA,
    "courier": COURIER,
    "courier new": COURIER,
    "monospace": COURIER,
}


@lru_cache(maxsize=32)
def resolve_font(family: str) -> FontFace:
    """Map a CSS-ish family name to a Base-14 face, falling back to Times."""
    face = FONT_FAMILIES.get(family.strip().strip("'\"").lower())
    if face is None:
        logger.warning("Font family %r is not available, using Times", family)
        return TIMES
    return face


@lru_cache(maxsize=None)
def load_font(code: str) -> fitz.Font:
    return fitz.Font(code)


@lru_cache(maxsize=4096)
def _font_code_for(fontname: str, char: str) -> str:
    if char.isspace() or load_font(fontname).has_glyph(ord(char)):
        return fontname
    if load_font(FALLBACK_FONT).has_glyph(ord(char)):
        return FALLBACK_FONT
    logger.warning("No glyph for %r in %s or the fallback font", char, fontname)
    return fontname


def font_segments(text: str, fontname: str) -> list[tuple[str, fitz.Font]]:
    """Split ``text`` into runs that share a font able to draw them."""
    segments: list[tuple[str, str]] = []
    for char in text:
        code = _font_code_for(fontname, char)
        if segments and segments[-1][1] == code:
            segments[-1] = (segments[-1][0] + char, code)
        else:
            segments.append((char, code))
    return [(segment, load_font(code)) for segment, code in segments]


def text_width(text: str, fontname: str, fontsize: float) -> float:
    """Rendered width of ``text`` in points."""
    return sum(font.text_length(segment, fontsize=fontsize) for segment, font in font_segments(text, fontname))


def wrap_text(text: str, max_width: float, fontname: str, fontsize: float) -> list[str]:
    """Greedy word wrap to ``max_width`` points.

    Words wider than a whole line are broken between characters.
    """
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if text_width(candidate, fontname, fontsize) <= max_width:
            current = candidate
            continue
        if current:
            lines.append(current)
            current = ""
        if text_width(word, fontname, fontsize) <= max_width:
            current = word
            continue
        for char in word:
            if current and text_width(current + char, fontname, fontsize) > max_width:
                lines.append(current)
                current = char
            else:
                current += char
    if current:
        lines.append(current)
    return lines
