"""Shared fixtures: PDFs are generated on the fly with PyMuPDF."""

from __future__ import annotations

from pathlib import Path

import fitz
import pytest

# (x, y, text, fontsize, fontname) with y measured from the top of the page
SAMPLE_PAGES = [
    [
        (72, 72, "Quarterly Report", 20, "hebo"),
        (72, 110, "revenue grew by ten percent this quarter.", 11, "helv"),
        (72, 140, "- Alpha", 11, "helv"),
        (72, 160, "- Beta", 11, "helv"),
    ],
    [
        (72, 72, "closing remarks are on this page.", 11, "helv"),
    ],
]

SAMPLE_METADATA = {"title": "Annual Review", "author": "Finance Team"}


def make_pdf(pages: list[list[tuple]], metadata: dict | None = None) -> bytes:
    doc = fitz.open()
    for items in pages:
        page = doc.new_page()
        for x, y, text, size, font in items:
            page.insert_text((x, y), text, fontsize=size, fontname=font)
    if metadata:
        doc.set_metadata(metadata)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    return make_pdf(SAMPLE_PAGES, SAMPLE_METADATA)


@pytest.fixture
def sample_pdf(tmp_path: Path, sample_pdf_bytes: bytes) -> Path:
    path = tmp_path / "report.pdf"
    path.write_bytes(sample_pdf_bytes)
    return path


@pytest.fixture
def blank_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "blank.pdf"
    path.write_bytes(make_pdf([[]]))
    return path


@pytest.fixture
def corrupt_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "corrupt.pdf"
    path.write_bytes(b"this is not a pdf file at all")
    return path
