"""Discover exercise sources and turn each one into an enriched record."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Iterator

from .config import Config
from .content import ParsedDocument, parse_document
from .enrich import enrich_document
from .errors import FormatError

SUPPORTED_SUFFIXES = {".md"}


def discover_sources(root: Path, skip_filenames: Iterable[str] = ("index.md",)) -> Iterator[Path]:
    """Yield markdown sources below ``root`` in a deterministic order."""
    if not root.exists():
        return
    skipped = {name.lower() for name in skip_filenames}

    directories = sorted(p for p in root.rglob("*") if p.is_dir())
    directories.insert(0, root)

    for directory in directories:
        for path in sorted(directory.iterdir()):
            if not path.is_file() or path.suffix.lower() not in SUPPORTED_SUFFIXES:
                continue
            if path.name.lower() in skipped:
                continue
            yield path


def source_key(path: Path, root: Path) -> str:
    """Stable ledger key for ``path``: POSIX form relative to the content root."""
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def decode_source(raw: bytes, source_path: str) -> str:
    """Decode source bytes as UTF-8; raises `FormatError` for undecodable content."""
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FormatError(
            f"{source_path} is not valid UTF-8: {exc.reason} at byte {exc.start}",
            source_path=source_path,
        ) from exc


def build_record(
    text: str,
    source_path: str,
    config: Config,
    *,
    now: datetime | None = None,
) -> tuple[ParsedDocument, dict[str, Any]]:
    """Parse and enrich one source; raises `FormatError` for malformed front matter."""
    parsed = parse_document(text, source_path=source_path)
    record = enrich_document(
        parsed,
        config.base_url,
        now=now,
        thumbnail_suffix=config.thumbnails.suffix,
    )
    return parsed, record
