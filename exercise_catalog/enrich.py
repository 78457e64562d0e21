"""Derive presentation metadata and normalize asset references for parsed sources."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic_core import to_jsonable_python

from .content.models import Category, Difficulty, MobileMetadata, ParsedDocument
from .state import utc_now

PARENT_PREFIX = "../"
UNKNOWN_DIFFICULTY_ORDER = 999
BASE_SECONDS = 30
DEFAULT_THUMBNAIL_SUFFIX = "-thumb"

DIFFICULTY_ORDER: dict[str, int] = {
    Difficulty.BEGINNER.value: 1,
    Difficulty.INTERMEDIATE.value: 2,
    Difficulty.ADVANCED.value: 3,
}

DIFFICULTY_MULTIPLIER: dict[str, float] = {
    Difficulty.BEGINNER.value: 1.0,
    Difficulty.INTERMEDIATE.value: 1.2,
    Difficulty.ADVANCED.value: 1.5,
}

CATEGORY_DISPLAY_NAMES: dict[str, str] = {
    Category.UPPER_BODY.value: "Upper Body",
    Category.LOWER_BODY.value: "Lower Body",
    Category.CORE.value: "Core",
    Category.CARDIO.value: "Cardio",
    Category.FLEXIBILITY.value: "Flexibility",
}


def resolve_asset_path(path: str, base_url: str) -> str:
    """Rewrite a path that climbs out of the document directory into an absolute URL."""
    if not path.startswith(PARENT_PREFIX):
        return path
    remainder = path
    while remainder.startswith(PARENT_PREFIX):
        remainder = remainder[len(PARENT_PREFIX) :]
    return f"{base_url.rstrip('/')}/{remainder}"


def difficulty_order(difficulty: Any) -> int:
    return DIFFICULTY_ORDER.get(str(difficulty), UNKNOWN_DIFFICULTY_ORDER)


def category_display_name(category: Any) -> Any:
    """Return the display name for ``category``; unknown keys pass through unchanged."""
    if not isinstance(category, str):
        return category
    return CATEGORY_DISPLAY_NAMES.get(category, category)


def estimate_time(difficulty: Any) -> int:
    """Estimated duration in seconds for one exercise at ``difficulty``."""
    multiplier = DIFFICULTY_MULTIPLIER.get(str(difficulty), 1.0)
    return round(BASE_SECONDS * multiplier)


def thumbnail_path(uri: str, suffix: str = DEFAULT_THUMBNAIL_SUFFIX) -> str:
    """Insert ``suffix`` before the extension of the last path segment."""
    head, sep, name = uri.rpartition("/")
    stem, dot, extension = name.rpartition(".")
    if not dot or not stem:
        return f"{uri}{suffix}"
    return f"{head}{sep}{stem}{suffix}.{extension}"


def build_mobile_metadata(
    metadata: dict[str, Any],
    images: list[str],
    videos: list[str],
    *,
    thumbnail_suffix: str = DEFAULT_THUMBNAIL_SUFFIX,
) -> MobileMetadata:
    difficulty = metadata.get("difficulty")
    category = metadata.get("category")
    return MobileMetadata(
        displayOrder=difficulty_order(difficulty),
        categoryDisplayName=str(category_display_name(category) or ""),
        estimatedTime=estimate_time(difficulty),
        hasVideo=bool(videos),
        thumbnails=[thumbnail_path(image, thumbnail_suffix) for image in images],
    )


def enrich_document(
    parsed: ParsedDocument,
    base_url: str,
    *,
    now: datetime | None = None,
    thumbnail_suffix: str = DEFAULT_THUMBNAIL_SUFFIX,
) -> dict[str, Any]:
    """Combine front matter with body sections and derived metadata into a record."""
    images = [resolve_asset_path(path, base_url) for path in parsed.images]
    videos = [resolve_asset_path(path, base_url) for path in parsed.videos]
    mobile = build_mobile_metadata(
        parsed.metadata,
        images,
        videos,
        thumbnail_suffix=thumbnail_suffix,
    )
    timestamp = now or utc_now()
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    # YAML dates and similar scalars become JSON-compatible values.
    record: dict[str, Any] = to_jsonable_python(dict(parsed.metadata))
    record.update(
        {
            "description": "\n".join(parsed.section("description")),
            "instructions": parsed.section("instructions"),
            "tips": parsed.section("tips"),
            "variations": parsed.section("variations"),
            "images": images,
            "videos": videos,
            "mobile": mobile.model_dump(mode="json"),
            "updatedAt": timestamp.isoformat(),
        }
    )
    return record
