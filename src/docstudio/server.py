"""
HTTP API for PDF -> editable HTML -> PDF conversion.

Start:
    docstudio-server                          # defaults (127.0.0.1:5000)
    docstudio-server --port 8000 --log-level debug

Endpoints:
    GET  /api/health            Health check
    POST /api/pdf-to-word       Extract a PDF (upload path or allowed URL) into editor HTML
    POST /api/word-to-pdf       Render editor HTML into a new PDF download
    POST /api/export/{format}   Package editor HTML as a Word-like download
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

import docstudio.export.word  # noqa: F401  registers the Word exporters
import docstudio.extraction.mupdf  # noqa: F401  registers the PyMuPDF extractor
from docstudio.core.config import FormattingConfig, Settings
from docstudio.core.errors import (
    ConversionError,
    ConversionStateError,
    DocumentParseError,
    DocumentSynthesisError,
    FetchError,
    SourceNotAllowedError,
)
from docstudio.core.registry import ExporterRegistry, ExtractorRegistry
from docstudio.reconstruct.html import HtmlReconstructor
from docstudio.synthesis.pdf import PdfSynthesizer
from docstudio.utils.io import restrict_source

logger = logging.getLogger(__name__)

settings = Settings.from_env()
# Redirects could lead a permitted host to an internal one
extractor = ExtractorRegistry.create(
    settings.extractor, timeout=settings.fetch_timeout, follow_redirects=False
)
reconstructor = HtmlReconstructor()
synthesizer = PdfSynthesizer(page_size=settings.page_dimensions)

app = FastAPI(title="docstudio")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request / Response schemas ──────────────────────────────────────────
class PdfToWordRequest(BaseModel):
    pdf_path: str


class PdfToWordResponse(BaseModel):
    word_content: str
    original_pdf: str
    converted_at: str


class WordToPdfRequest(BaseModel):
    word_content: str
    filename: str = "document.pdf"
    formatting: FormattingConfig | None = None


class ExportRequest(BaseModel):
    word_content: str
    filename: str = "document.pdf"


# ── Helpers ─────────────────────────────────────────────────────────────
def _status_code(exc: ConversionError) -> int:
    if isinstance(exc, SourceNotAllowedError):
        return 403
    if isinstance(exc, FetchError):
        return 502
    if isinstance(exc, DocumentParseError):
        return 422
    if isinstance(exc, ConversionStateError):
        return 409
    return 500


def _http_error(exc: ConversionError) -> HTTPException:
    logger.error("Request failed: %s", exc.message)
    return HTTPException(status_code=_status_code(exc), detail=exc.message)


def _attachment(content: bytes, filename: str, media_type: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ── Endpoints ───────────────────────────────────────────────────────────
@app.get("/api/health")
async def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.post("/api/pdf-to-word", response_model=PdfToWordResponse)
async def pdf_to_word(req: PdfToWordRequest):
    try:
        source = restrict_source(req.pdf_path, settings.upload_dir, settings.allowed_hosts)
        document = await extractor.aextract(source)
    except ConversionError as exc:
        raise _http_error(exc) from exc
    return PdfToWordResponse(
        word_content=reconstructor.to_html(document),
        original_pdf=req.pdf_path,
        converted_at=datetime.now(timezone.utc).isoformat(),
    )


@app.post("/api/word-to-pdf")
async def word_to_pdf(req: WordToPdfRequest):
    try:
        result = await synthesizer.asynthesize(req.word_content, req.filename, req.formatting)
    except DocumentSynthesisError as exc:
        raise _http_error(exc) from exc
    return _attachment(result.content, result.filename, result.media_type)


@app.post("/api/export/{fmt}")
async def export_document(fmt: str, req: ExportRequest):
    if fmt not in ExporterRegistry:
        available = ", ".join(ExporterRegistry.list())
        raise HTTPException(status_code=404, detail=f"Unknown export format '{fmt}'. Available: {available}")
    artifact = ExporterRegistry.create(fmt).export(req.word_content, req.filename)
    return _attachment(artifact.content, artifact.filename, artifact.media_type)


# ── CLI ─────────────────────────────────────────────────────────────────
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="docstudio conversion API server")
    p.add_argument("--host", default="127.0.0.1", help="Bind host")
    p.add_argument("--port", type=int, default=5000, help="Bind port")
    p.add_argument("--log-level", default="info", help="Logging level")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
