from datetime import datetime, timezone
from pathlib import Path

import pytest

from exercise_catalog.config import Config
from exercise_catalog.errors import FormatError
from exercise_catalog.ingest import build_record, decode_source, discover_sources, source_key


def _write(path: Path, body: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")


def test_discover_sources_walks_nested_directories_in_order(tmp_path: Path) -> None:
    content = tmp_path / "content"
    _write(content / "upper-body" / "push-up.md", "---\nid: push-up\n---\n")
    _write(content / "core" / "plank.md", "---\nid: plank\n---\n")
    _write(content / "core" / "bird-dog.md", "---\nid: bird-dog\n---\n")
    _write(content / "top.md", "---\nid: top\n---\n")
    _write(content / "core" / "notes.txt", "Plain text")
    _write(content / "index.md", "# Overview\n")
    _write(content / "core" / "INDEX.md", "# Core\n")

    keys = [source_key(path, content) for path in discover_sources(content)]

    assert keys == ["top.md", "core/bird-dog.md", "core/plank.md", "upper-body/push-up.md"]


def test_discover_sources_honours_custom_skip_list(tmp_path: Path) -> None:
    _write(tmp_path / "index.md", "---\nid: index\n---\n")
    _write(tmp_path / "draft.md", "---\nid: draft\n---\n")

    found = [path.name for path in discover_sources(tmp_path, skip_filenames=["draft.md"])]

    assert found == ["index.md"]


def test_returns_empty_when_directory_missing(tmp_path: Path) -> None:
    assert list(discover_sources(tmp_path / "missing")) == []


def test_source_key_falls_back_to_full_path_outside_root(tmp_path: Path) -> None:
    outside = tmp_path / "elsewhere" / "x.md"

    assert source_key(outside, tmp_path / "content") == outside.as_posix()


def test_build_record_uses_configured_base_url_and_suffix(tmp_path: Path) -> None:
    config = Config(base_url="https://cdn.example.com/")
    config.thumbnails.suffix = "-small"
    text = "---\nid: lunge\nname: Lunge\n---\n## Description\n\nStep.\n\n![Lunge](../img/lunge.jpg)\n"

    parsed, record = build_record(
        text, "lower-body/lunge.md", config, now=datetime(2025, 1, 1, tzinfo=timezone.utc)
    )

    assert parsed.source_path == "lower-body/lunge.md"
    assert record["images"] == ["https://cdn.example.com/img/lunge.jpg"]
    assert record["mobile"]["thumbnails"] == ["https://cdn.example.com/img/lunge-small.jpg"]


def test_build_record_rejects_missing_front_matter() -> None:
    with pytest.raises(FormatError):
        build_record("Just a body.\n", "loose.md", Config())


def test_decode_source_rejects_invalid_utf8() -> None:
    assert decode_source("Übung".encode("utf-8"), "ok.md") == "Übung"
    with pytest.raises(FormatError) as excinfo:
        decode_source(b"---\n\xff\n", "core/broken.md")

    assert excinfo.value.source_path == "core/broken.md"
