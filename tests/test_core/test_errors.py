"""Tests for the error taxonomy."""

from docstudio.core.errors import (
    ConversionError,
    DocumentParseError,
    DocumentSynthesisError,
    FetchError,
    UnknownConversionError,
)


def test_fetch_error_is_a_parse_error():
    err = FetchError("Failed to fetch PDF: HTTP 404")
    assert isinstance(err, DocumentParseError)
    assert isinstance(err, ConversionError)
    assert err.message == "Failed to fetch PDF: HTTP 404"


def test_synthesis_error_is_not_a_parse_error():
    assert not isinstance(DocumentSynthesisError("x"), DocumentParseError)


def test_unknown_error_keeps_message():
    assert UnknownConversionError.wrap(RuntimeError("boom")).message == "boom"
    assert UnknownConversionError.wrap(KeyError("missing key")).message == "missing key"
    assert UnknownConversionError.wrap(ValueError()).message == "ValueError"
