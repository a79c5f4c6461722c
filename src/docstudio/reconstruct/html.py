"""Rebuild editor HTML from extracted page text.

Structure is re-derived from plain text, since the extractor's style flags
only survive as ``# `` heading markers. The rules are deliberately simple and
lossy on adversarial input: a short capitalised sentence without a period is
a heading, a line containing a pipe is a table row.
"""

from __future__ import annotations

import logging
import re
from html import escape

from docstudio.core.document import ParsedDocument

logger = logging.getLogger(__name__)

PAGE_BREAK = '<div class="page-break" style="page-break-after: always;"></div>'
MAX_HEADING_LEVEL = 6

_HASH_HEADING_RE = re.compile(r"^(#+)\s*(.*)$")
_LIST_ITEM_RE = re.compile(r"^(?:•\s*|[-*]\s+|\d+\.\s+)(.*)$")
_TABLE_CELL_SPLIT_RE = re.compile(r"[|\t]")

# Order matters: double markers before single ones
_EMPHASIS_RULES = [
    (re.compile(r"\*\*(.+?)\*\*"), r"<strong>\1</strong>"),
    (re.compile(r"__(.+?)__"), r"<strong>\1</strong>"),
    (re.compile(r"\*(.+?)\*"), r"<em>\1</em>"),
    (re.compile(r"_(.+?)_"), r"<em>\1</em>"),
]

_TABLE_OPEN = '<table style="border-collapse: collapse; width: 100%; margin: 1em 0;">'
_CELL_STYLE = "border: 1px solid #ccc; padding: 4px 8px;"


# ── Line classification ─────────────────────────────────────────────────


def is_table_row(line: str) -> bool:
    return "|" in line or "\t" in line


def table_cells(line: str) -> list[str]:
    return [cell.strip() for cell in _TABLE_CELL_SPLIT_RE.split(line) if cell.strip()]


def list_item_text(line: str) -> str | None:
    """Item text with the bullet or number stripped, or None for a non-list line."""
    match = _LIST_ITEM_RE.match(line)
    return match.group(1).strip() if match else None


def _is_mostly_uppercase(line: str) -> bool:
    return any(ch.isalpha() for ch in line) and not any(ch.islower() for ch in line)


def heading_level(line: str) -> int | None:
    """Heading level of a stripped line, or None for body text."""
    match = _HASH_HEADING_RE.match(line)
    if match:
        return min(len(match.group(1)), MAX_HEADING_LEVEL)
    if len(line) >= 4 and _is_mostly_uppercase(line):
        return 2
    if len(line) < 50 and line[0].isupper() and "." not in line:
        return 3
    return None


def strip_heading_marker(line: str) -> str:
    return line.lstrip("#").strip()


def apply_inline_formatting(text: str) -> str:
    """Markdown-style emphasis on already-escaped text."""
    for pattern, replacement in _EMPHASIS_RULES:
        text = pattern.sub(replacement, text)
    return text


# ── Rendering ───────────────────────────────────────────────────────────


def _render_table(rows: list[list[str]]) -> str | None:
    rows = [row for row in rows if row]
    if not rows:
        return None
    body = "".join(
        "<tr>"
        + "".join(f'<td style="{_CELL_STYLE}">{escape(cell)}</td>' for cell in row)
        + "</tr>"
        for row in rows
    )
    return f"{_TABLE_OPEN}{body}</table>"


def _next_content_line(lines: list[str], index: int) -> str | None:
    for candidate in lines[index + 1 :]:
        if candidate.strip():
            return candidate.strip()
    return None


def page_to_html(text: str) -> str:
    """Convert the text of one page into HTML blocks.

    Lists and tables left open at the end of the page are closed there.
    """
    lines = text.split("\n")
    out: list[str] = []
    in_list = False
    table_rows: list[list[str]] | None = None

    for index, raw in enumerate(lines):
        line = raw.strip()

        if not line:
            if in_list or table_rows is not None:
                continue
            out.append("<br>")
            continue

        if is_table_row(line):
            if in_list:
                out.append("</ul>")
                in_list = False
            if table_rows is None:
                table_rows = []
            table_rows.append(table_cells(line))
            following = _next_content_line(lines, index)
            if following is None or not is_table_row(following):
                table = _render_table(table_rows)
                if table:
                    out.append(table)
                table_rows = None
            continue

        item = list_item_text(line)
        if item is not None:
            if not in_list:
                out.append("<ul>")
                in_list = True
            out.append(f"<li>{escape(item)}</li>")
            continue

        if in_list:
            out.append("</ul>")
            in_list = False

        level = heading_level(line)
        if level is not None:
            heading = strip_heading_marker(line)
            if heading:
                out.append(f"<h{level}>{escape(heading)}</h{level}>")
            continue

        out.append(f'<p style="text-align: justify;">{apply_inline_formatting(escape(line))}</p>')

    if in_list:
        out.append("</ul>")
    if table_rows:
        table = _render_table(table_rows)
        if table:
            out.append(table)

    return "\n".join(out)


class HtmlReconstructor:
    """Turns a ParsedDocument into HTML for the rich-text editor."""

    def __init__(self, include_title: bool = True, page_breaks: bool = True) -> None:
        self.include_title = include_title
        self.page_breaks = page_breaks

    def to_html(self, document: ParsedDocument) -> str:
        parts: list[str] = []
        title = document.metadata.title
        if self.include_title and title:
            parts.append(f'<h1 style="text-align: center;">{escape(title)}</h1>')

        for index, page in enumerate(document.pages):
            if index and self.page_breaks:
                parts.append(PAGE_BREAK)
            page_html = page_to_html(page.text)
            if page_html:
                parts.append(page_html)

        html = "\n".join(parts)
        logger.debug("Reconstructed %d pages into %d characters of HTML", document.num_pages, len(html))
        return html
