"""Read-only queries over the persisted exercise dataset.

Every call reads the artifacts from disk, so a reader always answers from the
snapshot that was last written by the pipeline and keeps no state of its own.
"""

from __future__ import annotations

import json
import re
from math import ceil
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from ..errors import BadRequestError, DatasetNotFoundError, DatasetReadError, NotFoundError
from ..indexes import category_counts, equipment_counts, muscle_counts, record_muscles
from ..persist import AGGREGATE_FILENAME, record_path
from ..state import DEFAULT_VERSION, VERSION_FILENAME, VersionInfo
from ..storage import read_json
from .models import ExerciseFilters, ExercisePage, PageMetadata

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
ID_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

Record = Mapping[str, Any]


class CatalogReader:
    """Answer list, lookup, search and facet queries for one data directory."""

    def __init__(self, data_dir: Path, *, initial_version: str = DEFAULT_VERSION) -> None:
        self.data_dir = Path(data_dir)
        self.initial_version = initial_version

    def load_exercises(self) -> list[dict[str, Any]]:
        path = self.data_dir / AGGREGATE_FILENAME
        if not path.exists():
            raise DatasetNotFoundError("No exercise data found. Run the build first.")
        payload = self._read(path)
        exercises = payload.get("exercises") if isinstance(payload, dict) else None
        if not isinstance(exercises, list):
            raise DatasetReadError(f"{path} does not contain an exercises list")
        return exercises

    def version_info(self) -> VersionInfo:
        path = self.data_dir / VERSION_FILENAME
        if not path.exists():
            return VersionInfo(version=self.initial_version)
        try:
            return VersionInfo.model_validate(self._read(path))
        except ValueError as exc:
            raise DatasetReadError(f"Cannot read version record at {path}: {exc}") from exc

    def list_exercises(
        self,
        filters: ExerciseFilters | None = None,
        *,
        fields: Sequence[str] | None = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> ExercisePage:
        filters = filters or ExerciseFilters()
        matched = [record for record in self.load_exercises() if matches_filters(record, filters)]
        return paginate(matched, page=page, limit=limit, fields=fields)

    def get_exercise(self, exercise_id: str, *, fields: Sequence[str] | None = None) -> dict[str, Any]:
        record = self._load_record(exercise_id)
        if record is None:
            raise NotFoundError(f"Exercise not found: {exercise_id}")
        return project(record, fields)

    def batch(self, ids: Sequence[str], *, fields: Sequence[str] | None = None) -> list[dict[str, Any]]:
        """Return the records found for ``ids`` in input order; unknown ids are dropped."""
        if not ids:
            raise BadRequestError("IDs parameter is required")
        found: list[dict[str, Any]] = []
        for exercise_id in ids:
            record = self._load_record(exercise_id)
            if record is not None:
                found.append(project(record, fields))
        return found

    def search(
        self,
        query: str | None = None,
        filters: ExerciseFilters | None = None,
        *,
        fields: Sequence[str] | None = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> ExercisePage:
        filters = filters or ExerciseFilters()
        # Blank text is no criterion; otherwise the text is matched exactly as given.
        text = query if query and query.strip() else None
        if text is None and filters.is_empty:
            raise BadRequestError("At least one search parameter is required")
        matched = [
            record
            for record in self.load_exercises()
            if matches_filters(record, filters) and (text is None or matches_text(record, text))
        ]
        return paginate(matched, page=page, limit=limit, fields=fields)

    def categories(self) -> list[dict[str, Any]]:
        return category_counts(self.load_exercises())

    def muscles(self) -> list[dict[str, Any]]:
        return muscle_counts(self.load_exercises())

    def equipment(self) -> list[dict[str, Any]]:
        return equipment_counts(self.load_exercises())

    def _load_record(self, exercise_id: str) -> dict[str, Any] | None:
        # Ids outside the slug pattern can never name a record file.
        if not ID_PATTERN.match(exercise_id):
            return None
        path = record_path(self.data_dir, exercise_id)
        if not path.exists():
            return None
        payload = self._read(path)
        if not isinstance(payload, dict):
            raise DatasetReadError(f"{path} does not contain an exercise object")
        return payload

    @staticmethod
    def _read(path: Path) -> Any:
        try:
            return read_json(path)
        except (OSError, json.JSONDecodeError) as exc:
            raise DatasetReadError(f"Cannot read {path}: {exc}") from exc


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def matches_filters(record: Record, filters: ExerciseFilters) -> bool:
    """True when ``record`` satisfies every supplied predicate."""
    if filters.category and record.get("category") != filters.category:
        return False
    if filters.difficulty and record.get("difficulty") != filters.difficulty:
        return False
    if filters.equipment and filters.equipment not in _as_list(record.get("equipment")):
        return False
    if filters.muscle and filters.muscle not in record_muscles(record):
        return False
    if filters.tags:
        tags = set(_as_list(record.get("tags")))
        if not tags.intersection(filters.tags):
            return False
    return True


def matches_text(record: Record, query: str) -> bool:
    """Case-insensitive substring match over name, description and tags."""
    needle = query.lower()
    name = str(record.get("name") or "").lower()
    description = str(record.get("description") or "").lower()
    if needle in name or needle in description:
        return True
    return any(needle in str(tag).lower() for tag in _as_list(record.get("tags")))


def project(record: Record, fields: Iterable[str] | None) -> dict[str, Any]:
    """Keep only ``fields``; fields missing on the record are omitted."""
    if not fields:
        return dict(record)
    return {field: record[field] for field in fields if field in record}


def paginate(
    records: Sequence[Record],
    *,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
    fields: Sequence[str] | None = None,
) -> ExercisePage:
    if page < 1:
        raise BadRequestError("page must be a positive integer")
    if limit < 1:
        raise BadRequestError("limit must be a positive integer")
    total = len(records)
    start = (page - 1) * limit
    window = records[start : start + limit]
    return ExercisePage(
        metadata=PageMetadata(total=total, page=page, limit=limit, pages=ceil(total / limit)),
        exercises=[project(record, fields) for record in window],
    )
