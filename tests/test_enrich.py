from datetime import datetime, timezone
from pathlib import Path

import pytest

from exercise_catalog.content import load_document, parse_document
from exercise_catalog.enrich import (
    category_display_name,
    difficulty_order,
    enrich_document,
    estimate_time,
    resolve_asset_path,
    thumbnail_path,
)

FIXTURE_DIR = Path(__file__).parent / "fixtures" / "exercises"
BASE_URL = "https://cdn.example.com/catalog"
NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("../assets/images/a.jpg", f"{BASE_URL}/assets/images/a.jpg"),
        ("../../assets/images/a.jpg", f"{BASE_URL}/assets/images/a.jpg"),
        ("https://other.example.com/a.jpg", "https://other.example.com/a.jpg"),
        ("/assets/a.jpg", "/assets/a.jpg"),
        ("./a.jpg", "./a.jpg"),
        ("a.jpg", "a.jpg"),
    ],
)
def test_resolve_asset_path(path: str, expected: str) -> None:
    assert resolve_asset_path(path, BASE_URL) == expected


def test_resolve_asset_path_tolerates_trailing_slash_on_base() -> None:
    assert resolve_asset_path("../a.jpg", f"{BASE_URL}/") == f"{BASE_URL}/a.jpg"


def test_difficulty_order_sorts_unknown_last() -> None:
    assert [difficulty_order(d) for d in ("beginner", "intermediate", "advanced")] == [1, 2, 3]
    assert difficulty_order("expert") > 3
    assert difficulty_order(None) > 3


def test_category_display_name_lookup_and_passthrough() -> None:
    assert category_display_name("upper-body") == "Upper Body"
    assert category_display_name("flexibility") == "Flexibility"
    assert category_display_name("mobility") == "mobility"


def test_estimate_time_uses_difficulty_multiplier() -> None:
    assert estimate_time("beginner") == 30
    assert estimate_time("intermediate") == 36
    assert estimate_time("advanced") == 45
    assert estimate_time("unknown") == 30


@pytest.mark.parametrize(
    ("uri", "expected"),
    [
        ("https://cdn.example.com/img/push-up.jpg", "https://cdn.example.com/img/push-up-thumb.jpg"),
        ("images/plank.side.png", "images/plank.side-thumb.png"),
        ("https://cdn.example.com/v1.2/image", "https://cdn.example.com/v1.2/image-thumb"),
    ],
)
def test_thumbnail_path_inserts_suffix_before_extension(uri: str, expected: str) -> None:
    assert thumbnail_path(uri) == expected


def test_enrich_document_builds_full_record() -> None:
    parsed = load_document(FIXTURE_DIR / "upper-body" / "push-up.md")
    record = enrich_document(parsed, BASE_URL, now=NOW)

    assert record["id"] == "push-up"
    assert record["description"] == "A classic bodyweight press that builds chest and arm strength."
    assert len(record["instructions"]) == 3
    assert record["variations"] == ["Knee push-up", "Incline push-up"]
    assert record["images"] == [f"{BASE_URL}/assets/images/push-up.jpg"]
    assert record["videos"] == ["https://videos.example.com/push-up.mp4"]
    assert record["mobile"] == {
        "displayOrder": 1,
        "categoryDisplayName": "Upper Body",
        "estimatedTime": 30,
        "hasVideo": True,
        "thumbnails": [f"{BASE_URL}/assets/images/push-up-thumb.jpg"],
    }
    assert record["updatedAt"] == "2025-03-01T12:00:00+00:00"


def test_thumbnails_follow_images_positionally() -> None:
    parsed = load_document(FIXTURE_DIR / "core" / "plank.md")
    record = enrich_document(parsed, BASE_URL, now=NOW)

    images = record["images"]
    thumbnails = record["mobile"]["thumbnails"]
    assert len(images) == 2
    assert len(thumbnails) == len(images)
    for image, thumb in zip(images, thumbnails):
        stem, _, extension = image.rpartition(".")
        assert thumb == f"{stem}-thumb.{extension}"
    assert record["mobile"]["hasVideo"] is False


def test_missing_sections_default_to_empty_values() -> None:
    parsed = parse_document("---\nid: bare\ndifficulty: expert\n---\n")
    record = enrich_document(parsed, BASE_URL, now=NOW)

    assert record["description"] == ""
    assert record["instructions"] == []
    assert record["tips"] == []
    assert record["variations"] == []
    assert record["mobile"]["displayOrder"] == 999
    assert record["mobile"]["estimatedTime"] == 30


def test_yaml_dates_become_strings() -> None:
    parsed = parse_document("---\nid: dated\nadded: 2024-05-01\n---\n")
    record = enrich_document(parsed, BASE_URL, now=NOW)

    assert record["added"] == "2024-05-01"
