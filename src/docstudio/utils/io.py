"""Source location and filename helpers."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlparse

from docstudio.core.errors import SourceNotAllowedError

_KNOWN_SUFFIXES = {".pdf", ".html", ".htm", ".docx", ".doc"}


def is_url(source: str) -> bool:
    """Check if a source is an http(s) URL."""
    return urlparse(str(source)).scheme in {"http", "https"}


def resolve_path(source: str | Path) -> Path:
    """Resolve a local path or ``file://`` URL and validate that it exists."""
    source = str(source)
    parsed = urlparse(source)
    if parsed.scheme == "file":
        source = unquote(parsed.path)
    path = Path(source).resolve()
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return path


def is_pdf(source: str | Path) -> bool:
    """Check if a path or URL points at a PDF."""
    return source_suffix(source) == ".pdf"


def source_suffix(source: str | Path) -> str:
    return PurePosixPath(urlparse(str(source)).path).suffix.lower()


def base_name(source: str | Path | None, default: str = "document") -> str:
    """File stem of a path or URL, without a known document suffix."""
    if not source:
        return default
    name = PurePosixPath(unquote(urlparse(str(source)).path)).name
    # Windows-style paths
    name = name.rsplit("\\", 1)[-1]
    stem, dot, suffix = name.rpartition(".")
    if dot and f".{suffix.lower()}" in _KNOWN_SUFFIXES:
        name = stem
    return name or default


def edited_filename(source: str | Path | None) -> str:
    """``report.pdf`` -> ``report_edited.pdf``."""
    return f"{base_name(source)}_edited.pdf"


def restrict_source(source: str, upload_dir: str | Path, allowed_hosts: list[str]) -> str:
    """Check a client-supplied source against the server's read policy.

    URLs must point at one of ``allowed_hosts``. Local paths and ``file://``
    URLs must resolve below ``upload_dir``; relative paths are taken from
    there. Returns the source to read.
    """
    parsed = urlparse(str(source))
    if parsed.scheme in {"http", "https"}:
        host = (parsed.hostname or "").lower()
        if host not in {allowed.lower() for allowed in allowed_hosts}:
            raise SourceNotAllowedError(f"Fetching from host '{host}' is not allowed")
        return source

    if parsed.scheme == "file":
        raw = unquote(parsed.path)
    elif len(parsed.scheme) > 1:
        raise SourceNotAllowedError(f"Unsupported source scheme '{parsed.scheme}'")
    else:
        raw = source

    root = Path(upload_dir).resolve()
    path = Path(raw)
    if not path.is_absolute():
        path = root / path
    path = path.resolve()
    if not path.is_relative_to(root):
        raise SourceNotAllowedError(f"Path is outside the upload directory: {source}")
    return str(path)
