"""Base class for PDF text extractors."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable

from docstudio.core.document import ParsedDocument

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class ProgressReporter:
    """Forwards progress to a callback, clamped to [0, 100] and never decreasing."""

    def __init__(self, callback: ProgressCallback | None = None) -> None:
        self.callback = callback
        self.value = 0.0

    def report(self, value: float) -> None:
        value = min(max(value, 0.0), 100.0)
        if value < self.value:
            return
        self.value = value
        if self.callback is not None:
            self.callback(value)


class BaseExtractor(ABC):
    """Abstract base for PDF extractors.

    Extractors fetch a PDF (URL or local path) and turn it into a
    ParsedDocument with reading-order text and style hints.
    """

    name: str  # unique identifier for this extractor

    @abstractmethod
    async def fetch(self, source: str, progress: ProgressReporter) -> bytes:
        """Retrieve the raw PDF bytes."""
        ...

    @abstractmethod
    async def parse_bytes(
        self,
        data: bytes,
        source: str = "",
        progress: ProgressReporter | None = None,
    ) -> ParsedDocument:
        """Parse raw PDF bytes into a ParsedDocument."""
        ...

    async def aextract(
        self, source: str, on_progress: ProgressCallback | None = None
    ) -> ParsedDocument:
        """Fetch and parse a PDF, reporting progress in [0, 100]."""
        progress = ProgressReporter(on_progress)
        data = await self.fetch(source, progress)
        document = await self.parse_bytes(data, source=source, progress=progress)
        progress.report(100.0)
        logger.info("Extracted %d pages from %s", document.num_pages, source)
        return document

    def extract(self, source: str, on_progress: ProgressCallback | None = None) -> ParsedDocument:
        """Sync variant of :meth:`aextract`."""
        return asyncio.run(self.aextract(source, on_progress))
