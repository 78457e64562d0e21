from pathlib import Path

import pytest

from exercise_catalog.content.parsers import (
    extract_image_links,
    extract_sections,
    extract_video_links,
    load_document,
    parse_document,
)
from exercise_catalog.errors import FormatError

FIXTURE_DIR = Path(__file__).parent / "fixtures" / "exercises"


def test_loads_complete_document() -> None:
    document = load_document(FIXTURE_DIR / "upper-body" / "push-up.md")

    assert document.metadata["id"] == "push-up"
    assert document.metadata["primaryMuscles"] == ["chest", "triceps"]
    assert document.sections["description"] == [
        "A classic bodyweight press that builds chest and arm strength."
    ]
    assert document.sections["instructions"] == [
        "Start in a high plank with hands under shoulders.",
        "Lower your chest until it nearly touches the floor.",
        "Press back up to the starting position.",
    ]
    assert document.sections["tips"] == [
        "Keep your body in a straight line.",
        "Brace your core throughout.",
    ]
    assert document.images == ["../../assets/images/push-up.jpg"]
    assert document.videos == ["https://videos.example.com/push-up.mp4"]
    assert document.source_path.endswith("push-up.md")


def test_rejects_missing_front_matter() -> None:
    with pytest.raises(FormatError):
        parse_document("# Push-Up\n\nNo metadata here.\n")


def test_rejects_missing_front_matter_end(tmp_path: Path) -> None:
    tmp = tmp_path / "broken.md"
    tmp.write_text("---\nid: broken\n", encoding="utf-8")
    with pytest.raises(FormatError) as excinfo:
        load_document(tmp)

    assert "broken.md" in str(excinfo.value)


def test_rejects_front_matter_that_is_not_a_mapping() -> None:
    with pytest.raises(FormatError):
        parse_document("---\n- just\n- a list\n---\nBody\n")


def test_rejects_malformed_yaml() -> None:
    with pytest.raises(FormatError):
        parse_document("---\nid: [unclosed\n---\nBody\n")


def test_empty_front_matter_yields_empty_metadata() -> None:
    document = parse_document("---\n---\n## Description\n\nText\n")

    assert document.metadata == {}
    assert document.sections == {"description": ["Text"]}


def test_list_replaces_paragraph_under_same_heading() -> None:
    body = (
        "## Instructions\n\n"
        "Read this first.\n\n"
        "- Step one\n"
        "- Step two\n"
    )
    assert extract_sections(body) == {"instructions": ["Step one", "Step two"]}


def test_later_list_overwrites_earlier_list() -> None:
    body = "## Tips\n\n- First\n- Second\n\n***\n\n1. Only\n"
    assert extract_sections(body)["tips"] == ["Only"]


def test_paragraphs_accumulate_and_headings_are_lowercased() -> None:
    body = "## DESCRIPTION\n\nFirst part.\n\nSecond part.\n"
    assert extract_sections(body) == {"description": ["First part.", "Second part."]}


def test_content_before_first_heading_is_ignored() -> None:
    body = "Loose intro.\n\n## Tips\n\n- Keep going\n"
    assert extract_sections(body) == {"tips": ["Keep going"]}


def test_image_links_in_body_order() -> None:
    body = "![a](one.jpg)\n\nText ![b](../two.png) more\n"
    assert extract_image_links(body) == ["one.jpg", "../two.png"]


def test_video_links_match_case_insensitively_and_skip_images() -> None:
    body = (
        "[Demo VIDEO](https://example.com/a.mp4)\n"
        "[Reference article](https://example.com/read)\n"
        "![video still](still.jpg)\n"
        "[Slow-motion Video](../videos/b.mp4)\n"
    )
    assert extract_video_links(body) == ["https://example.com/a.mp4", "../videos/b.mp4"]
