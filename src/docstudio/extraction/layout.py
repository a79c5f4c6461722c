"""Reading-order reconstruction from positioned text runs.

PDF text runs come in content-stream order, not reading order. Runs are
bucketed into lines (top of page first, PDF y grows upward), each line is
ordered left to right, and the lines are flattened into markdown-flavoured
text with ``# `` heading markers.
"""

from __future__ import annotations

from typing import Iterable

from docstudio.core.document import TextRun

LINE_TOLERANCE = 5.0


def group_lines(runs: Iterable[TextRun], tolerance: float = LINE_TOLERANCE) -> list[list[TextRun]]:
    """Bucket runs into visual lines, top to bottom, each sorted left to right.

    A run joins the current line while its y stays within ``tolerance`` of the
    y of the run that opened the line.
    """
    ordered = sorted(runs, key=lambda run: -run.y)
    lines: list[list[TextRun]] = []
    current: list[TextRun] = []
    line_y = 0.0

    for run in ordered:
        if current and abs(run.y - line_y) > tolerance:
            lines.append(current)
            current = []
        if not current:
            line_y = run.y
        current.append(run)
    if current:
        lines.append(current)

    return [sorted(line, key=lambda run: run.x) for line in lines]


def sort_reading_order(runs: Iterable[TextRun], tolerance: float = LINE_TOLERANCE) -> list[TextRun]:
    """Flatten :func:`group_lines` into a single reading-order sequence."""
    return [run for line in group_lines(runs, tolerance) for run in line]


def line_text(line: list[TextRun]) -> str:
    return " ".join(run.text for run in line).strip()


def build_page_text(lines: list[list[TextRun]]) -> str:
    """Join lines into page text, one blank line after each.

    A line whose last run is flagged as a heading is emitted with a ``# ``
    prefix, except the last line of the page, which is always plain.
    """
    parts: list[str] = []
    for index, line in enumerate(lines):
        text = line_text(line)
        if not text:
            continue
        if line[-1].is_heading and index < len(lines) - 1:
            parts.append(f"# {text}\n\n")
        else:
            parts.append(f"{text}\n\n")
    return "".join(parts).rstrip()


def join_pages(page_texts: Iterable[str]) -> str:
    """Document text: page texts separated by a blank line."""
    return "\n\n".join(page_texts).strip()
