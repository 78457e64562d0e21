"""Parse exercise markdown sources into `ParsedDocument` instances."""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from ..errors import FormatError
from .models import ParsedDocument

IMAGE_PATTERN = re.compile(r"!\[(.*?)\]\((.*?)\)")
LINK_PATTERN = re.compile(r"(?<!!)\[([^\]]*)\]\(([^)]*)\)")
VIDEO_TOKEN = "video"
LIST_TYPES = {"bullet_list", "ordered_list"}


@lru_cache(maxsize=1)
def _markdown() -> MarkdownIt:
    """Configure and cache a CommonMark tokenizer."""
    md = MarkdownIt("commonmark")
    md.enable("table").enable("strikethrough")
    return md


def load_document(path: str | Path) -> ParsedDocument:
    """Read a markdown file with YAML front matter and parse it."""
    source_path = Path(path)
    text = source_path.read_text(encoding="utf-8")
    return parse_document(text, source_path=str(source_path))


def parse_document(text: str, *, source_path: str = "<string>") -> ParsedDocument:
    """Split ``text`` into front matter and body and extract sections and assets."""
    metadata, body = _split_front_matter(text, source_path)
    return ParsedDocument(
        metadata=metadata,
        sections=extract_sections(body),
        images=extract_image_links(body),
        videos=extract_video_links(body),
        source_path=source_path,
    )


def _split_front_matter(text: str, source_path: str) -> tuple[dict[str, Any], str]:
    lines = text.splitlines()
    if not lines or lines[0].strip() != "---":
        raise FormatError(f"No front matter found in {source_path}", source_path=source_path)

    front_lines: list[str] = []
    for idx, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            raw_front_matter = "\n".join(front_lines)
            body = "\n".join(lines[idx + 1 :])
            return _load_front_matter(raw_front_matter, source_path), body
        front_lines.append(line)
    raise FormatError(
        f"Closing front matter delimiter '---' missing in {source_path}",
        source_path=source_path,
    )


def _load_front_matter(raw: str, source_path: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise FormatError(f"Malformed front matter in {source_path}: {exc}", source_path=source_path) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FormatError(
            f"Front matter in {source_path} must be a mapping, got {type(data).__name__}",
            source_path=source_path,
        )
    return data


def extract_sections(body: str) -> dict[str, list[str]]:
    """Map lower-cased heading text to the content captured beneath it.

    Paragraphs append their text. A list replaces whatever was captured for
    the heading so far, so a paragraph followed by a list keeps only the list.
    """
    root = SyntaxTreeNode(_markdown().parse(body))
    sections: dict[str, list[str]] = {}
    current: str | None = None

    for node in root.children:
        if node.type == "heading":
            current = _inline_text(node).strip().lower()
            sections[current] = []
        elif current is None:
            continue
        elif node.type == "paragraph":
            sections[current].append(_inline_text(node))
        elif node.type in LIST_TYPES:
            sections[current] = [_list_item_text(item) for item in node.children]

    return sections


def _inline_text(node: SyntaxTreeNode) -> str:
    return "".join(child.content for child in node.children if child.type == "inline")


def _list_item_text(item: SyntaxTreeNode) -> str:
    # Nested lists are not captured.
    parts = [_inline_text(child) for child in item.children if child.type == "paragraph"]
    return "\n".join(parts)


def extract_image_links(body: str) -> list[str]:
    """Return image targets from markdown image syntax in body order."""
    return [match.group(2).strip() for match in IMAGE_PATTERN.finditer(body)]


def extract_video_links(body: str) -> list[str]:
    """Return link targets whose visible text mentions a video."""
    return [
        match.group(2).strip()
        for match in LINK_PATTERN.finditer(body)
        if VIDEO_TOKEN in match.group(1).lower()
    ]
