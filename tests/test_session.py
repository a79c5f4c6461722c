"""Tests for the editing session state machine."""

import asyncio

import pytest

from docstudio.core.config import Settings
from docstudio.core.document import ParsedDocument, ParsedPage
from docstudio.core.errors import (
    ConversionStateError,
    DocumentParseError,
    FetchError,
    UnknownConversionError,
)
from docstudio.extraction.base import BaseExtractor
from docstudio.session import ConversionSession, ConversionStatus
from docstudio.synthesis.pdf import PdfSynthesizer


class StubExtractor(BaseExtractor):
    """Serves canned page text per source; a source may wait on an Event first."""

    name = "stub"

    def __init__(self, pages: dict, gates: dict[str, asyncio.Event] | None = None) -> None:
        self.pages = pages
        self.gates = gates or {}

    async def fetch(self, source, progress):
        gate = self.gates.get(source)
        if gate is not None:
            await gate.wait()
        if source not in self.pages:
            raise FetchError(f"Failed to fetch PDF: {source}")
        progress.report(30)
        return source.encode()

    async def parse_bytes(self, data, source="", progress=None):
        text = self.pages[source]
        if isinstance(text, Exception):
            raise text
        return ParsedDocument(
            source=source,
            full_text=text,
            pages=[ParsedPage(page_number=1, text=text)],
        )


class RecordingSynthesizer(PdfSynthesizer):
    def __init__(self) -> None:
        super().__init__()
        self.rendered: list[str] = []

    def synthesize(self, html, source_name=None, formatting=None):
        self.rendered.append(html)
        return super().synthesize(html, source_name, formatting)


class FailingSynthesizer(PdfSynthesizer):
    def synthesize(self, html, source_name=None, formatting=None):
        raise RuntimeError("disk full")


PAGES = {
    "report.pdf": "first body paragraph here.",
    "other.pdf": "another document body.",
    "broken.pdf": DocumentParseError("Failed to parse PDF: bad xref"),
    "crash.pdf": RuntimeError("boom"),
}


def _session(**kwargs) -> tuple[ConversionSession, list]:
    notes: list = []
    kwargs.setdefault("extractor", StubExtractor(PAGES))
    session = ConversionSession(notify=notes.append, settings=Settings(), **kwargs)
    return session, notes


def _consistent(session: ConversionSession) -> bool:
    state = session.state
    return state.is_converted or not state.has_unsaved_changes


def test_new_session_is_empty():
    session, notes = _session()
    assert session.state.status == ConversionStatus.EMPTY
    assert session.state.word_content == ""
    assert notes == []


def test_convert_success():
    session, notes = _session()
    html = asyncio.run(session.convert_pdf_to_word("report.pdf"))

    state = session.state
    assert "first body paragraph here." in html
    assert state.word_content == state.edited_content == html
    assert state.is_converted and not state.is_converting
    assert state.original_pdf_url == "report.pdf"
    assert state.conversion_progress == 100
    assert state.status == ConversionStatus.CONVERTED_CLEAN
    assert [n.title for n in notes] == ["Conversion successful"]
    assert notes[0].variant == "default"


def test_convert_fetch_failure():
    session, notes = _session()
    with pytest.raises(FetchError):
        asyncio.run(session.convert_pdf_to_word("missing.pdf"))

    state = session.state
    assert state.status == ConversionStatus.ERROR
    assert state.error == "Failed to fetch PDF: missing.pdf"
    assert not state.is_converting
    assert state.conversion_progress == 0
    assert notes[-1].title == "Conversion failed"
    assert notes[-1].variant == "destructive"


def test_convert_parse_failure_keeps_message():
    session, _ = _session()
    with pytest.raises(DocumentParseError, match="bad xref"):
        asyncio.run(session.convert_pdf_to_word("broken.pdf"))
    assert session.state.error == "Failed to parse PDF: bad xref"


def test_unexpected_exception_is_wrapped():
    session, _ = _session()
    with pytest.raises(UnknownConversionError, match="boom"):
        asyncio.run(session.convert_pdf_to_word("crash.pdf"))
    assert session.state.error == "boom"


def test_failed_reconversion_keeps_previous_document():
    session, _ = _session()
    html = asyncio.run(session.convert_pdf_to_word("report.pdf"))
    with pytest.raises(FetchError):
        asyncio.run(session.convert_pdf_to_word("missing.pdf"))

    state = session.state
    assert state.is_converted
    assert state.word_content == html
    assert state.error is not None


def test_update_content_tracks_dirtiness():
    session, _ = _session()
    html = asyncio.run(session.convert_pdf_to_word("report.pdf"))

    session.update_content(html + "<p>added</p>")
    assert session.state.has_unsaved_changes
    assert session.state.status == ConversionStatus.CONVERTED_DIRTY

    session.update_content(html)
    assert not session.state.has_unsaved_changes
    assert session.state.status == ConversionStatus.CONVERTED_CLEAN


def test_update_and_save_require_a_document():
    session, _ = _session()
    with pytest.raises(ConversionStateError):
        session.update_content("<p>too early</p>")
    with pytest.raises(ConversionStateError):
        asyncio.run(session.save_changes())
    assert _consistent(session)


def test_save_promotes_edits():
    session, notes = _session()
    asyncio.run(session.convert_pdf_to_word("report.pdf"))
    session.update_content("<h1>Edited</h1><p>new text</p>")

    result = asyncio.run(session.save_changes())
    state = session.state
    assert result.filename == "report_edited.pdf"
    assert result.content.startswith(b"%PDF")
    assert state.word_content == state.edited_content == "<h1>Edited</h1><p>new text</p>"
    assert not state.has_unsaved_changes
    assert not state.is_saving
    assert notes[-1].title == "Changes saved"


def test_save_twice_is_idempotent():
    session, _ = _session()
    asyncio.run(session.convert_pdf_to_word("report.pdf"))
    session.update_content("<p>once</p>")

    first = asyncio.run(session.save_changes())
    snapshot = session.state.model_copy()
    second = asyncio.run(session.save_changes())

    assert session.state == snapshot
    assert first.page_count == second.page_count
    assert first.filename == second.filename


def test_failed_save_keeps_edits():
    session, notes = _session(synthesizer=FailingSynthesizer())
    html = asyncio.run(session.convert_pdf_to_word("report.pdf"))
    session.update_content("<p>unsaved work</p>")

    with pytest.raises(UnknownConversionError, match="disk full"):
        asyncio.run(session.save_changes())

    state = session.state
    assert state.edited_content == "<p>unsaved work</p>"
    assert state.word_content == html
    assert state.has_unsaved_changes
    assert not state.is_saving
    assert state.error == "disk full"
    assert notes[-1].title == "Save failed"


def test_export_to_pdf_uses_live_buffer_without_saving():
    synthesizer = RecordingSynthesizer()
    session, notes = _session(synthesizer=synthesizer)
    html = asyncio.run(session.convert_pdf_to_word("report.pdf"))
    session.update_content("<p>draft</p>")

    result = asyncio.run(session.export_to_pdf("custom.pdf"))

    assert synthesizer.rendered == ["<p>draft</p>"]
    assert result.filename == "custom_edited.pdf"
    assert session.state.word_content == html
    assert session.state.has_unsaved_changes
    assert not session.state.is_exporting
    assert notes[-1].title == "PDF exported"


def test_export_failure_resets_flag():
    session, notes = _session(synthesizer=FailingSynthesizer())
    asyncio.run(session.convert_pdf_to_word("report.pdf"))
    with pytest.raises(UnknownConversionError):
        asyncio.run(session.export_to_pdf())
    assert not session.state.is_exporting
    assert notes[-1].title == "Export failed"


def test_export_to_word():
    session, notes = _session()
    asyncio.run(session.convert_pdf_to_word("report.pdf"))
    session.update_content("<p>word body</p>")

    artifact = asyncio.run(session.export_to_word())
    assert artifact.filename == "report.docx"
    assert artifact.content == b"<p>word body</p>"
    assert notes[-1].title == "Word document downloaded"

    legacy = asyncio.run(session.export_to_word(fmt="doc"))
    assert legacy.media_type == "application/msword"
    assert session.state.has_unsaved_changes


def test_export_to_word_unknown_format():
    session, notes = _session()
    asyncio.run(session.convert_pdf_to_word("report.pdf"))
    with pytest.raises(UnknownConversionError, match="Unknown component 'pdf'"):
        asyncio.run(session.export_to_word(fmt="pdf"))
    assert notes[-1].title == "Download failed"
    assert not session.state.is_exporting


def test_reset_returns_to_empty():
    session, _ = _session()
    asyncio.run(session.convert_pdf_to_word("report.pdf"))
    session.update_content("<p>changed</p>")
    session.reset_conversion()

    assert session.state.status == ConversionStatus.EMPTY
    assert session.state.edited_content == ""
    assert _consistent(session)


def test_latest_conversion_wins():
    async def scenario():
        gate = asyncio.Event()
        session, _ = _session(extractor=StubExtractor(PAGES, gates={"report.pdf": gate}))
        slow = asyncio.create_task(session.convert_pdf_to_word("report.pdf"))
        await asyncio.sleep(0)
        assert session.state.status == ConversionStatus.CONVERTING

        fast_html = await session.convert_pdf_to_word("other.pdf")
        gate.set()
        slow_html = await slow
        return session, fast_html, slow_html

    session, fast_html, slow_html = asyncio.run(scenario())
    assert "first body paragraph here." in slow_html
    assert session.state.word_content == fast_html
    assert session.state.original_pdf_url == "other.pdf"
    assert not session.state.is_converting


def test_reset_during_conversion_discards_result():
    async def scenario():
        gate = asyncio.Event()
        session, notes = _session(extractor=StubExtractor(PAGES, gates={"report.pdf": gate}))
        task = asyncio.create_task(session.convert_pdf_to_word("report.pdf"))
        await asyncio.sleep(0)
        session.reset_conversion()
        gate.set()
        await task
        return session, notes

    session, notes = asyncio.run(scenario())
    assert session.state.status == ConversionStatus.EMPTY
    assert session.state.word_content == ""
    assert notes == []


def test_stats_follow_editor_buffer():
    session, _ = _session()
    asyncio.run(session.convert_pdf_to_word("report.pdf"))
    session.update_content("<p>" + "word " * 600 + "</p>")

    stats = session.stats()
    assert stats.word_count == 600
    assert stats.page_estimate == 2


def test_default_extractor_comes_from_registry():
    session = ConversionSession(settings=Settings(fetch_timeout=7))
    assert session.extractor.name == "pymupdf"
    assert session.extractor.timeout == 7
