"""PDF ingestion, editable HTML reconstruction and PDF regeneration."""

from docstudio.core.config import FormattingConfig, Margins, Settings
from docstudio.core.document import DocumentMetadata, ParsedDocument, ParsedPage, TextRun
from docstudio.core.errors import (
    ConversionError,
    ConversionStateError,
    DocumentParseError,
    DocumentSynthesisError,
    FetchError,
    SourceNotAllowedError,
    UnknownConversionError,
)
from docstudio.core.registry import ExporterRegistry, ExtractorRegistry
from docstudio.session import ConversionSession, ConversionState, ConversionStatus, Notification

__all__ = [
    "ConversionError",
    "ConversionSession",
    "ConversionState",
    "ConversionStateError",
    "ConversionStatus",
    "DocumentMetadata",
    "DocumentParseError",
    "DocumentSynthesisError",
    "ExporterRegistry",
    "ExtractorRegistry",
    "FetchError",
    "FormattingConfig",
    "Margins",
    "Notification",
    "ParsedDocument",
    "ParsedPage",
    "Settings",
    "SourceNotAllowedError",
    "TextRun",
    "UnknownConversionError",
]
