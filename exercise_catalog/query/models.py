"""Pydantic models describing query inputs and paginated responses."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class ExerciseFilters(BaseModel):
    """Conjunctive filters shared by list and search."""

    category: Optional[str] = Field(default=None)
    difficulty: Optional[str] = Field(default=None)
    equipment: Optional[str] = Field(default=None)
    muscle: Optional[str] = Field(default=None, description="Matches primary or secondary muscles.")
    tags: list[str] = Field(default_factory=list, description="Matches when any tag is present.")

    @field_validator("category", "difficulty", "equipment", "muscle", mode="before")
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("tags", mode="before")
    def _split_tags(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return split_csv(value)
        return value

    @property
    def is_empty(self) -> bool:
        return not any((self.category, self.difficulty, self.equipment, self.muscle, self.tags))


class PageMetadata(BaseModel):
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    pages: int = Field(ge=0)


class ExercisePage(BaseModel):
    """One page of filtered exercises plus the totals needed to page through them."""

    metadata: PageMetadata
    exercises: list[dict[str, Any]] = Field(default_factory=list)


def split_csv(value: str | None) -> list[str]:
    """Split a comma-separated parameter, dropping blank entries."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]
