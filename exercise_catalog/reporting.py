"""Pipeline run reporting."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field


class SourceFailure(BaseModel):
    source_path: str
    message: str
    record_id: str | None = None
    errors: list[str] = Field(default_factory=list)


class PipelineReport(BaseModel):
    project: str
    generated_at: datetime
    duration_seconds: float
    source_count: int
    valid: int
    invalid: int
    previous_version: str
    version: str
    changed: bool
    changed_sources: list[str] = Field(default_factory=list)
    failures: list[SourceFailure] = Field(default_factory=list)
    written: list[str] = Field(default_factory=list)
    pruned: list[str] = Field(default_factory=list)


def display_paths(paths: list[Path], root: Path) -> list[str]:
    displayed: list[str] = []
    for path in paths:
        try:
            displayed.append(path.relative_to(root).as_posix())
        except ValueError:
            displayed.append(path.as_posix())
    return displayed
