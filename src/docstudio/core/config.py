"""Typography and runtime settings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MM_PER_POINT = 25.4 / 72

# Page sizes in mm
PAGE_SIZES: dict[str, tuple[float, float]] = {
    "a4": (210.0, 297.0),
    "letter": (215.9, 279.4),
}


class _CamelModel(BaseModel):
    """Accepts both ``fontSize`` and ``font_size`` style keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Margins(_CamelModel):
    """Page margins in mm."""

    top: float = Field(default=20.0, ge=0)
    bottom: float = Field(default=20.0, ge=0)
    left: float = Field(default=20.0, ge=0)
    right: float = Field(default=20.0, ge=0)


class FormattingConfig(_CamelModel):
    """Typography for regenerated PDFs. Partial input is merged over the defaults."""

    font_size: float = Field(default=12.0, gt=0)
    font_family: str = "Times New Roman"  # advisory, see synthesis.fonts
    line_spacing: float = Field(default=1.6, gt=0)
    margins: Margins = Field(default_factory=Margins)

    @classmethod
    def merge(cls, overrides: FormattingConfig | dict | None = None) -> FormattingConfig:
        if overrides is None:
            return cls()
        if isinstance(overrides, FormattingConfig):
            return overrides
        return cls.model_validate(overrides)

    @property
    def line_height(self) -> float:
        """Vertical advance of one base line, in mm."""
        return self.font_size * self.line_spacing * MM_PER_POINT


class Settings(BaseModel):
    """Process-wide settings, read from ``DOCSTUDIO_*`` environment variables.

    List settings are comma-separated in the environment.
    """

    extractor: str = "pymupdf"
    fetch_timeout: float = 60.0
    page_size: Literal["a4", "letter"] = "a4"
    word_format: Literal["docx", "doc", "html"] = "docx"
    # The server only reads local PDFs below this directory
    upload_dir: Path = Path("uploads")
    # Hosts the server may fetch PDFs from; empty disables remote sources
    allowed_hosts: list[str] = Field(default_factory=list)
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:5173"])

    @field_validator("extractor", "page_size", "word_format", mode="before")
    @classmethod
    def _lowercase(cls, value):
        return value.lower() if isinstance(value, str) else value

    @field_validator("allowed_hosts", "cors_origins", mode="before")
    @classmethod
    def _split_list(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        environ = os.environ if environ is None else environ
        values = {}
        for field in cls.model_fields:
            raw = environ.get(f"DOCSTUDIO_{field.upper()}")
            if raw and raw.strip():
                values[field] = raw.strip()
        return cls.model_validate(values)

    @property
    def page_dimensions(self) -> tuple[float, float]:
        return PAGE_SIZES[self.page_size]
