"""Base class for downloadable document exports."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from docstudio.utils.io import base_name


class ExportArtifact(BaseModel):
    """Bytes to hand to the browser as a download."""

    content: bytes
    filename: str
    media_type: str


class BaseExporter(ABC):
    """Abstract base for exporters that package editor HTML as a file."""

    name: str
    media_type: str
    extension: str

    @abstractmethod
    def render(self, html: str, title: str) -> bytes:
        """Serialize the HTML into the exported file body."""
        ...

    def filename_for(self, source_name: str | None) -> str:
        return f"{base_name(source_name)}{self.extension}"

    def export(self, html: str, source_name: str | None = None) -> ExportArtifact:
        title = base_name(source_name)
        return ExportArtifact(
            content=self.render(html, title),
            filename=self.filename_for(source_name),
            media_type=self.media_type,
        )
