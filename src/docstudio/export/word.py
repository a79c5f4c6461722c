"""Word-like exports.

None of these write real OOXML. The ``docx`` and ``doc`` exports are the
editor HTML under a Word media type, which Word and LibreOffice open as an
HTML document; consumers must not expect a zip package. The ``html`` export
is a standalone page with a print stylesheet.
"""

from __future__ import annotations

from html import escape

from docstudio.core.registry import ExporterRegistry
from docstudio.export.base import BaseExporter

PRINT_STYLESHEET = """\
@page { size: A4; margin: 20mm; }
body { font-family: "Times New Roman", Times, serif; font-size: 12pt; line-height: 1.6; }
h1, h2, h3, h4, h5, h6 { page-break-after: avoid; }
table { border-collapse: collapse; width: 100%; }
td { border: 1px solid #ccc; padding: 4px 8px; }
.page-break { page-break-after: always; }
@media print { .page-break { height: 0; } }
"""


class DocxHtmlExporter(BaseExporter):
    """Editor HTML typed as a .docx download (placeholder, not OOXML)."""

    name = "docx"
    media_type = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    extension = ".docx"

    def render(self, html: str, title: str) -> bytes:
        return html.encode("utf-8")


class DocHtmlExporter(DocxHtmlExporter):
    """Editor HTML typed as a legacy .doc download."""

    name = "doc"
    media_type = "application/msword"
    extension = ".doc"


class HtmlDocumentExporter(BaseExporter):
    """A standalone, printable HTML document."""

    name = "html"
    media_type = "text/html"
    extension = ".html"

    def render(self, html: str, title: str) -> bytes:
        page = (
            "<!DOCTYPE html>\n"
            '<html lang="en">\n'
            "<head>\n"
            '<meta charset="utf-8">\n'
            f"<title>{escape(title)}</title>\n"
            f"<style>\n{PRINT_STYLESHEET}</style>\n"
            "</head>\n"
            f"<body>\n{html}\n</body>\n"
            "</html>\n"
        )
        return page.encode("utf-8")


ExporterRegistry.register("docx", DocxHtmlExporter)
ExporterRegistry.register("doc", DocHtmlExporter)
ExporterRegistry.register("html", HtmlDocumentExporter)
