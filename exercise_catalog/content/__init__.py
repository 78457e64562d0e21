"""Utilities for parsing exercise source files."""

from .models import Category, Difficulty, MobileMetadata, ParsedDocument
from .parsers import (
    extract_image_links,
    extract_sections,
    extract_video_links,
    load_document,
    parse_document,
)

__all__ = [
    "Category",
    "Difficulty",
    "MobileMetadata",
    "ParsedDocument",
    "extract_image_links",
    "extract_sections",
    "extract_video_links",
    "load_document",
    "parse_document",
]
