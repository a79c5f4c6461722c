"""Font-based style hints for text runs.

The thresholds are fixed module constants, not configuration.
"""

from __future__ import annotations

HEADING_FONT_SIZE = 14.0

_HEADING_NAME_HINTS = ("bold", "heading", "title")
_ITALIC_NAME_HINTS = ("italic", "oblique")


def detect_heading(font_size: float, font_name: str) -> bool:
    """Large text, or a font whose name suggests a heading face."""
    name = font_name.lower()
    return font_size > HEADING_FONT_SIZE or any(hint in name for hint in _HEADING_NAME_HINTS)


def detect_bold(font_name: str) -> bool:
    return "bold" in font_name.lower()


def detect_italic(font_name: str) -> bool:
    name = font_name.lower()
    return any(hint in name for hint in _ITALIC_NAME_HINTS)
