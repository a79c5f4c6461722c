"""Tests for the document model."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from docstudio.core.document import (
    DocumentMetadata,
    ParsedDocument,
    ParsedPage,
    TextRun,
    parse_pdf_date,
)


def _run(font_size: float, font_name: str) -> TextRun:
    return TextRun.from_transform("text", [font_size, 0, 0, font_size, 10, 20], 30, font_size, font_name)


def test_heading_flag_from_font_size():
    assert _run(16, "Arial").is_heading is True
    assert _run(10, "Arial").is_heading is False


def test_heading_flag_from_font_name():
    run = _run(10, "Arial-Bold")
    assert run.is_heading is True
    assert run.is_bold is True
    assert _run(10, "DocTitleFace").is_heading is True


def test_italic_flag():
    assert _run(10, "Helvetica-Oblique").is_italic is True
    assert _run(10, "Times-Italic").is_italic is True
    assert _run(10, "Times-Roman").is_italic is False


def test_from_transform_uses_scale_and_translation():
    run = TextRun.from_transform("Hi", [-12, 0, 0, 12, 55.5, 700.25], 14, 12, "F1")
    assert run.font_size == 12
    assert run.x == 55.5
    assert run.y == 700.25


def test_parse_pdf_date_with_offset():
    parsed = parse_pdf_date("D:20240315143000+02'00'")
    assert parsed == datetime(2024, 3, 15, 14, 30, tzinfo=timezone(timedelta(hours=2)))


def test_parse_pdf_date_partial_and_invalid():
    assert parse_pdf_date("D:2023") == datetime(2023, 1, 1)
    assert parse_pdf_date("D:20231399") is None
    assert parse_pdf_date("yesterday") is None
    assert parse_pdf_date(None) is None


def test_metadata_absent_fields_stay_none():
    meta = DocumentMetadata.from_info({"title": "Report", "author": "", "creationDate": "D:20200101000000Z"})
    assert meta.title == "Report"
    assert meta.author is None
    assert meta.subject is None
    assert meta.creation_date == datetime(2020, 1, 1, tzinfo=timezone.utc)
    assert meta.modification_date is None


def test_document_properties():
    run = _run(10, "Arial")
    doc = ParsedDocument(
        source="test.pdf",
        full_text="a\n\nb",
        pages=[
            ParsedPage(page_number=1, text="a", text_items=[run, run]),
            ParsedPage(page_number=2, text="b", text_items=[run]),
        ],
    )
    assert doc.num_pages == 2
    assert doc.num_runs == 3


def test_parsed_page_is_frozen_and_one_based():
    page = ParsedPage(page_number=1, text="x")
    with pytest.raises(ValidationError):
        page.text = "changed"
    with pytest.raises(ValidationError):
        ParsedPage(page_number=0)
