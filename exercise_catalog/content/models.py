"""Typed representations of parsed exercise sources and derived metadata."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Difficulty(str, Enum):
    """Ordinal difficulty levels for an exercise."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Category(str, Enum):
    """Closed set of exercise categories."""

    UPPER_BODY = "upper-body"
    LOWER_BODY = "lower-body"
    CORE = "core"
    CARDIO = "cardio"
    FLEXIBILITY = "flexibility"


class ParsedDocument(BaseModel):
    """Raw pieces extracted from one exercise source file."""

    metadata: dict[str, Any] = Field(default_factory=dict, description="Front-matter mapping.")
    sections: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Lower-cased heading text mapped to captured paragraph or list text.",
    )
    images: list[str] = Field(default_factory=list, description="Image targets in body order.")
    videos: list[str] = Field(default_factory=list, description="Video link targets in body order.")
    source_path: str = Field(default="<string>", description="Path to the source file.")

    @property
    def record_id(self) -> str | None:
        value = self.metadata.get("id")
        return str(value) if value is not None else None

    def section(self, name: str) -> list[str]:
        return list(self.sections.get(name, []))


class MobileMetadata(BaseModel):
    """Presentation hints derived for mobile clients."""

    displayOrder: int
    categoryDisplayName: str
    estimatedTime: int = Field(ge=0, description="Estimated duration in seconds.")
    hasVideo: bool
    thumbnails: list[str] = Field(default_factory=list)
