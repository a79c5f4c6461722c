"""Editing session: PDF -> editable HTML -> regenerated PDF.

A ConversionSession owns one ConversionState and is its only writer. The
state is a flat record of flags; ``ConversionState.status`` folds them into
a single ConversionStatus for callers that want a state-machine view.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, Literal

from pydantic import BaseModel

import docstudio.export.word  # noqa: F401  registers the Word exporters
import docstudio.extraction.mupdf  # noqa: F401  registers the PyMuPDF extractor
from docstudio.core.config import FormattingConfig, Settings
from docstudio.core.errors import ConversionError, ConversionStateError, UnknownConversionError
from docstudio.core.registry import ExporterRegistry, ExtractorRegistry
from docstudio.export.base import ExportArtifact
from docstudio.extraction.base import BaseExtractor
from docstudio.reconstruct.html import HtmlReconstructor
from docstudio.synthesis.pdf import PdfSynthesizer, SynthesisResult
from docstudio.utils.text import DocumentStats, compute_stats

logger = logging.getLogger(__name__)


class ConversionStatus(str, Enum):
    EMPTY = "empty"
    CONVERTING = "converting"
    CONVERTED_CLEAN = "converted-clean"
    CONVERTED_DIRTY = "converted-dirty"
    SAVING = "saving"
    EXPORTING = "exporting"
    ERROR = "error"


class ConversionState(BaseModel):
    """Everything the editor view binds to."""

    is_converting: bool = False
    is_converted: bool = False
    is_exporting: bool = False
    is_saving: bool = False
    has_unsaved_changes: bool = False
    word_content: str = ""  # last converted or saved HTML
    edited_content: str = ""  # live editor buffer
    original_pdf_url: str = ""
    conversion_progress: float = 0.0
    error: str | None = None

    @property
    def status(self) -> ConversionStatus:
        if self.is_converting:
            return ConversionStatus.CONVERTING
        if self.is_saving:
            return ConversionStatus.SAVING
        if self.is_exporting:
            return ConversionStatus.EXPORTING
        if self.is_converted:
            if self.has_unsaved_changes:
                return ConversionStatus.CONVERTED_DIRTY
            return ConversionStatus.CONVERTED_CLEAN
        if self.error:
            return ConversionStatus.ERROR
        return ConversionStatus.EMPTY


class Notification(BaseModel):
    """A dismissable message for the user."""

    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


def _as_conversion_error(exc: Exception) -> ConversionError:
    if isinstance(exc, ConversionError):
        return exc
    return UnknownConversionError.wrap(exc)


class ConversionSession:
    """Coordinates extraction, HTML reconstruction and PDF regeneration.

    Operations never retry. A failure is recorded in ``state.error``, only
    the in-flight flag is reset, a destructive notification is emitted and
    the error is re-raised as a ConversionError.

    Starting a conversion (or resetting) makes any conversion already in
    flight stale: it still returns its HTML to its own caller, but it no
    longer touches the state.

    Usage:
        session = ConversionSession(notify=print)
        await session.convert_pdf_to_word("https://example.com/paper.pdf")
        session.update_content(session.state.edited_content + "<p>More</p>")
        result = await session.save_changes()
    """

    def __init__(
        self,
        extractor: BaseExtractor | None = None,
        reconstructor: HtmlReconstructor | None = None,
        synthesizer: PdfSynthesizer | None = None,
        formatting: FormattingConfig | dict | None = None,
        notify: Callable[[Notification], None] | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or Settings.from_env()
        self.extractor = extractor or ExtractorRegistry.create(
            settings.extractor, timeout=settings.fetch_timeout
        )
        self.reconstructor = reconstructor or HtmlReconstructor()
        self.synthesizer = synthesizer or PdfSynthesizer(
            formatting, page_size=settings.page_dimensions
        )
        self.word_format = settings.word_format
        self.notify = notify
        self.state = ConversionState()
        self._generation = 0

    # ── Helpers ─────────────────────────────────────────────────────────

    def _notify(self, title: str, description: str, destructive: bool = False) -> None:
        notification = Notification(
            title=title,
            description=description,
            variant="destructive" if destructive else "default",
        )
        if self.notify is not None:
            self.notify(notification)
        elif destructive:
            logger.warning("%s: %s", title, description)
        else:
            logger.info("%s: %s", title, description)

    def _fail(self, title: str, error: ConversionError) -> None:
        self.state.error = error.message
        logger.error("%s: %s", title, error.message)
        self._notify(title, error.message, destructive=True)

    def _require_converted(self, action: str) -> None:
        if not self.state.is_converted:
            raise ConversionStateError(f"Cannot {action}: no document has been converted")

    # ── Operations ──────────────────────────────────────────────────────

    async def convert_pdf_to_word(self, pdf_url: str) -> str:
        """Extract ``pdf_url`` and load the reconstructed HTML into the editor."""
        self._generation += 1
        generation = self._generation
        self.state.is_converting = True
        self.state.error = None
        self.state.original_pdf_url = pdf_url
        self.state.conversion_progress = 0.0

        def on_progress(value: float) -> None:
            if generation == self._generation:
                self.state.conversion_progress = value

        try:
            document = await self.extractor.aextract(pdf_url, on_progress)
            html = self.reconstructor.to_html(document)
        except Exception as exc:
            error = _as_conversion_error(exc)
            if generation == self._generation:
                self.state.is_converting = False
                self.state.conversion_progress = 0.0
                self._fail("Conversion failed", error)
            if error is exc:
                raise
            raise error from exc

        if generation != self._generation:
            logger.info("Discarding stale conversion of %s", pdf_url)
            return html

        self.state.is_converting = False
        self.state.is_converted = True
        self.state.word_content = html
        self.state.edited_content = html
        self.state.has_unsaved_changes = False
        self.state.conversion_progress = 100.0
        self._notify(
            "Conversion successful",
            "PDF has been converted to editable format.",
        )
        return html

    def update_content(self, content: str) -> None:
        """Replace the editor buffer and recompute dirtiness."""
        self._require_converted("edit")
        self.state.edited_content = content
        self.state.has_unsaved_changes = content != self.state.word_content

    async def save_changes(self, filename: str | None = None) -> SynthesisResult:
        """Regenerate the PDF from the editor buffer and mark it saved."""
        self._require_converted("save")
        generation = self._generation
        snapshot = self.state.edited_content
        self.state.is_saving = True
        self.state.error = None

        try:
            result = await self.synthesizer.asynthesize(
                snapshot, filename or self.state.original_pdf_url
            )
        except Exception as exc:
            error = _as_conversion_error(exc)
            self.state.is_saving = False
            if generation == self._generation:
                self._fail("Save failed", error)
            if error is exc:
                raise
            raise error from exc

        self.state.is_saving = False
        if generation == self._generation:
            self.state.word_content = snapshot
            self.state.has_unsaved_changes = self.state.edited_content != snapshot
            self._notify("Changes saved", "Your edits have been saved.")
        return result

    async def export_to_pdf(self, filename: str | None = None) -> SynthesisResult:
        """Render the live editor buffer, saved or not, without marking it saved."""
        self.state.is_exporting = True
        self.state.error = None
        try:
            result = await self.synthesizer.asynthesize(
                self.state.edited_content, filename or self.state.original_pdf_url
            )
        except Exception as exc:
            error = _as_conversion_error(exc)
            self._fail("Export failed", error)
            if error is exc:
                raise
            raise error from exc
        finally:
            self.state.is_exporting = False

        self._notify("PDF exported", "Your edited document is ready to download as PDF.")
        return result

    async def export_to_word(
        self, filename: str | None = None, fmt: str | None = None
    ) -> ExportArtifact:
        """Package the live editor buffer as a Word-like download."""
        self.state.is_exporting = True
        self.state.error = None
        try:
            exporter = ExporterRegistry.create(fmt or self.word_format)
            artifact = await asyncio.to_thread(
                exporter.export,
                self.state.edited_content,
                filename or self.state.original_pdf_url,
            )
        except Exception as exc:
            error = _as_conversion_error(exc)
            self._fail("Download failed", error)
            if error is exc:
                raise
            raise error from exc
        finally:
            self.state.is_exporting = False

        self._notify("Word document downloaded", f"Saved as {artifact.filename}.")
        return artifact

    def reset_conversion(self) -> None:
        """Back to the empty state; in-flight conversions become stale."""
        self._generation += 1
        self.state = ConversionState()

    def stats(self) -> DocumentStats:
        return compute_stats(self.state.edited_content)
