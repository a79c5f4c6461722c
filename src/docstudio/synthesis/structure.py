"""Flatten editor HTML into a sequence of typed text blocks."""

from __future__ import annotations

import re
from typing import Literal

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from pydantic import BaseModel, ConfigDict

ElementKind = Literal["heading", "paragraph", "list-item"]

BULLET = "• "
_HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
_WHITESPACE_RE = re.compile(r"\s+")


class StructuredElement(BaseModel):
    """One block of the layout input."""

    model_config = ConfigDict(frozen=True)

    kind: ElementKind
    text: str
    level: int = 0  # heading level, 0 for body blocks


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def _flatten(node: Tag) -> str:
    """Text content of an element with whitespace collapsed."""
    return _WHITESPACE_RE.sub(" ", node.get_text(" ")).strip()


def _walk(node: Tag) -> list[StructuredElement]:
    elements: list[StructuredElement] = []
    for child in node.children:
        if not isinstance(child, Tag):
            continue
        name = child.name.lower()
        if name in _HEADING_TAGS:
            text = _flatten(child)
            if text:
                elements.append(StructuredElement(kind="heading", text=text, level=int(name[1])))
        elif name == "p":
            text = _flatten(child)
            if text:
                elements.append(StructuredElement(kind="paragraph", text=text))
        elif name == "li":
            text = _flatten(child)
            if text:
                elements.append(StructuredElement(kind="list-item", text=BULLET + text))
        elif name == "br":
            continue  # only matters for html_to_plain_text
        else:
            # ul/ol and any other container
            elements.extend(_walk(child))
    return elements


def html_to_elements(html: str) -> list[StructuredElement]:
    """Headings, paragraphs and list items of ``html`` in document order.

    Other elements (div, table, span, ...) emit nothing themselves; their
    children are walked. Blocks with no text are skipped.
    """
    return _walk(_soup(html))


def _plain_text(node: Tag) -> str:
    parts: list[str] = []
    for child in node.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            parts.append(str(child))
        elif isinstance(child, Tag):
            if child.name.lower() == "br":
                parts.append("\n")
            else:
                parts.append(_plain_text(child))
    return "".join(parts)


def html_to_plain_text(html: str) -> str:
    """Concatenated text of ``html`` with ``<br>`` kept as newlines."""
    return _plain_text(_soup(html)).strip()
