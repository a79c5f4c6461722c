"""Plain-text views and rough statistics of editor HTML."""

from __future__ import annotations

import math
from html import escape

from bs4 import BeautifulSoup
from pydantic import BaseModel

# Rough page capacity used for the editor's page counter
CHARS_PER_PAGE = 2500


class DocumentStats(BaseModel):
    word_count: int = 0
    char_count: int = 0
    page_estimate: int = 1


def extract_text_content(html: str) -> str:
    """Strip tags, keeping ``<br>`` as a newline and paragraph ends as a blank line."""
    soup = BeautifulSoup(html or "", "html.parser")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for paragraph in soup.find_all("p"):
        paragraph.append("\n\n")
    return soup.get_text().strip()


def convert_text_to_rich_content(text: str) -> str:
    """Blank-line separated paragraphs become ``<p>``, inner newlines ``<br>``."""
    paragraphs = (chunk.strip() for chunk in text.split("\n\n"))
    return "".join(
        "<p>" + "<br>".join(escape(line) for line in paragraph.split("\n")) + "</p>"
        for paragraph in paragraphs
        if paragraph
    )


def compute_stats(html: str) -> DocumentStats:
    """Word and character counts plus a heuristic page count."""
    text = BeautifulSoup(html or "", "html.parser").get_text(" ")
    chars = len(text.strip())
    return DocumentStats(
        word_count=len(text.split()),
        char_count=chars,
        page_estimate=max(1, math.ceil(chars / CHARS_PER_PAGE)),
    )
