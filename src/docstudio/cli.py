"""
Command-line conversions.

Usage:
    docstudio to-html report.pdf -o report.html
    docstudio to-html https://example.com/paper.pdf
    docstudio to-pdf report.html -o report_edited.pdf --font-size 11 --margin 25
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from docstudio.core.config import FormattingConfig
from docstudio.core.errors import ConversionError
from docstudio.extraction.mupdf import PyMuPDFExtractor
from docstudio.reconstruct.html import HtmlReconstructor
from docstudio.synthesis.pdf import PdfSynthesizer
from docstudio.utils.io import base_name

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="docstudio", description="PDF <-> editable HTML conversion")
    p.add_argument("--log-level", default="warning", help="Logging level")
    sub = p.add_subparsers(dest="command", required=True)

    to_html = sub.add_parser("to-html", help="Extract a PDF into editor HTML")
    to_html.add_argument("source", help="PDF path or URL")
    to_html.add_argument("-o", "--output", help="Output HTML file (default: <name>.html)")

    to_pdf = sub.add_parser("to-pdf", help="Render editor HTML into a PDF")
    to_pdf.add_argument("input", help="HTML file")
    to_pdf.add_argument("-o", "--output", help="Output PDF file (default: <name>_edited.pdf)")
    to_pdf.add_argument("--font-size", type=float, default=12.0, help="Base font size in pt")
    to_pdf.add_argument("--font-family", default="Times New Roman", help="Font family")
    to_pdf.add_argument("--line-spacing", type=float, default=1.6, help="Line spacing multiplier")
    to_pdf.add_argument("--margin", type=float, default=20.0, help="Margin on all sides, in mm")
    return p.parse_args(argv)


def _to_html(args: argparse.Namespace) -> Path:
    document = PyMuPDFExtractor().extract(args.source)
    html = HtmlReconstructor().to_html(document)
    output = Path(args.output or f"{base_name(args.source)}.html")
    output.write_text(html, encoding="utf-8")
    return output


def _to_pdf(args: argparse.Namespace) -> Path:
    source = Path(args.input)
    formatting = FormattingConfig(
        font_size=args.font_size,
        font_family=args.font_family,
        line_spacing=args.line_spacing,
        margins={"top": args.margin, "bottom": args.margin, "left": args.margin, "right": args.margin},
    )
    result = PdfSynthesizer(formatting).synthesize(source.read_text(encoding="utf-8"), source.name)
    output = Path(args.output) if args.output else source.with_name(result.filename)
    output.write_bytes(result.content)
    return output


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    handler = _to_html if args.command == "to-html" else _to_pdf
    try:
        output = handler(args)
    except ConversionError as exc:
        print(f"[ERROR] {exc.message}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    print(f"Wrote {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
