"""Error taxonomy for the conversion pipeline."""

from __future__ import annotations


class ConversionError(Exception):
    """Base for every failure raised by docstudio."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DocumentParseError(ConversionError):
    """The source PDF could not be turned into a ParsedDocument."""


class FetchError(DocumentParseError):
    """The source PDF could not be retrieved (network, HTTP status, missing file)."""


class DocumentSynthesisError(ConversionError):
    """Walking the HTML or laying out the PDF failed."""


class ConversionStateError(ConversionError):
    """The operation is not valid in the current session state."""


class SourceNotAllowedError(ConversionError):
    """The server refuses to read a source outside its upload directory or allowed hosts."""


class UnknownConversionError(ConversionError):
    """Wraps an unexpected exception, keeping its message."""

    @classmethod
    def wrap(cls, exc: BaseException) -> UnknownConversionError:
        # KeyError and friends quote their message in str()
        if len(exc.args) == 1 and isinstance(exc.args[0], str):
            message = exc.args[0]
        else:
            message = str(exc)
        return cls(message or exc.__class__.__name__)
