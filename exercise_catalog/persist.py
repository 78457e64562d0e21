"""Write the dataset artifacts read by the query engine.

Files are written in a fixed order: per-record files, index files, the
aggregate, the hash ledger, and the version record. Stale per-record files are
pruned last. A reader that sees a version or an aggregate can therefore find
every record it lists.
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

from .indexes import category_counts, equipment_counts, muscle_reference
from .state import PipelineState
from .storage import write_json

logger = logging.getLogger(__name__)

AGGREGATE_FILENAME = "exercises.json"
RECORDS_DIRNAME = "exercises"
CATEGORIES_FILENAME = "categories.json"
MUSCLES_FILENAME = "muscles.json"
EQUIPMENT_FILENAME = "equipment.json"


@dataclass
class PersistResult:
    written: list[Path] = field(default_factory=list)
    pruned: list[Path] = field(default_factory=list)


def record_path(data_dir: Path, record_id: str) -> Path:
    return data_dir / RECORDS_DIRNAME / f"{record_id}.json"


def write_dataset(
    records: Sequence[Mapping[str, Any]],
    state: PipelineState,
    data_dir: Path,
    *,
    prune_stale: bool = True,
) -> PersistResult:
    """Persist ``records`` and ``state`` under ``data_dir``."""
    result = PersistResult()
    data_dir.mkdir(parents=True, exist_ok=True)

    record_paths = write_record_files(records, data_dir)
    result.written.extend(record_paths)

    result.written.extend(write_index_files(records, data_dir))

    aggregate = {
        "version": state.version.version,
        "lastUpdated": state.version.model_dump(mode="json")["lastUpdated"],
        "count": len(records),
        "exercises": list(records),
    }
    result.written.append(write_json(data_dir / AGGREGATE_FILENAME, aggregate))

    result.written.append(state.save_ledger(data_dir))
    result.written.append(state.save_version(data_dir))

    # Stale files go only once nothing written by this run lists them.
    if prune_stale:
        result.pruned = prune_record_files(data_dir, keep=record_paths)
    return result


def write_record_files(records: Sequence[Mapping[str, Any]], data_dir: Path) -> list[Path]:
    written: list[Path] = []
    for record in records:
        path = record_path(data_dir, str(record["id"]))
        written.append(write_json(path, dict(record)))
    return written


def prune_record_files(data_dir: Path, keep: Sequence[Path]) -> list[Path]:
    """Remove per-record files that were not produced by this run."""
    root = data_dir / RECORDS_DIRNAME
    if not root.exists():
        return []
    keep_resolved = {path.resolve() for path in keep}
    removed: list[Path] = []
    for existing in sorted(root.glob("*.json")):
        if existing.resolve() in keep_resolved:
            continue
        with contextlib.suppress(FileNotFoundError):
            existing.unlink()
            removed.append(existing)
            logger.info("Removed stale record file %s", existing)
    return removed


def write_index_files(records: Sequence[Mapping[str, Any]], data_dir: Path) -> list[Path]:
    return [
        write_json(data_dir / CATEGORIES_FILENAME, {"categories": category_counts(records)}),
        write_json(data_dir / MUSCLES_FILENAME, {"muscles": muscle_reference(records)}),
        write_json(data_dir / EQUIPMENT_FILENAME, {"equipment": equipment_counts(records)}),
    ]
