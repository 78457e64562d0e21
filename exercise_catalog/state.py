"""Track source content hashes and the dataset's semantic version between runs.

The pipeline owns one `PipelineState` value per run. It is read once before
sources are processed, advanced in memory, and written back at the end of
the run. Nothing here coordinates concurrent runs; callers must serialize
pipeline invocations against the same data directory.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Mapping

from pydantic import BaseModel, Field, field_validator

from .errors import DatasetReadError
from .storage import write_json

logger = logging.getLogger(__name__)

VERSION_FILENAME = "version.json"
LEDGER_FILENAME = "file-hashes.json"
DEFAULT_VERSION = "1.0.0"


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class VersionInfo(BaseModel):
    """Persisted data version advertised to API clients."""

    version: str = Field(default=DEFAULT_VERSION)
    lastUpdated: datetime | None = Field(default=None)
    exerciseCount: int = Field(default=0, ge=0)

    @field_validator("version")
    def _check_semver(cls, value: str) -> str:
        parse_version(value)
        return value


@dataclass
class PipelineState:
    """Snapshot of the version record and the hash ledger."""

    version: VersionInfo
    ledger: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def empty(cls, initial_version: str = DEFAULT_VERSION) -> "PipelineState":
        return cls(version=VersionInfo(version=initial_version), ledger={})

    @classmethod
    def load(cls, data_dir: Path, initial_version: str = DEFAULT_VERSION) -> "PipelineState":
        state = cls.empty(initial_version)

        ledger_path = data_dir / LEDGER_FILENAME
        if ledger_path.exists():
            try:
                payload = json.loads(ledger_path.read_text(encoding="utf-8"))
            except ValueError:
                # An unreadable ledger only forces a version bump.
                logger.warning("Ignoring unreadable hash ledger at %s", ledger_path)
                payload = {}
            if isinstance(payload, dict):
                state.ledger = {str(key): str(value) for key, value in payload.items()}

        version_path = data_dir / VERSION_FILENAME
        if version_path.exists():
            try:
                state.version = VersionInfo.model_validate_json(version_path.read_text(encoding="utf-8"))
            except ValueError as exc:
                raise DatasetReadError(f"Cannot read version record at {version_path}: {exc}") from exc

        return state

    def save_ledger(self, data_dir: Path) -> Path:
        path = data_dir / LEDGER_FILENAME
        write_json(path, dict(sorted(self.ledger.items())))
        return path

    def save_version(self, data_dir: Path) -> Path:
        path = data_dir / VERSION_FILENAME
        write_json(path, self.version.model_dump(mode="json"))
        return path


@dataclass
class ChangeSummary:
    """Which sources differ from the previous ledger."""

    digests: Dict[str, str]
    changed_paths: list[str]

    @property
    def changed(self) -> bool:
        return bool(self.changed_paths)


class VersionTracker:
    """Compute content digests and advance the semantic version."""

    def __init__(self, state: PipelineState):
        self._previous = state

    def compute(self, sources: Mapping[str, str | bytes]) -> ChangeSummary:
        """Hash each ``(source path, content)`` pair and compare with the ledger."""
        digests = {path: hash_content(text) for path, text in sources.items()}
        previous = self._previous.ledger
        changed = sorted(path for path, digest in digests.items() if previous.get(path) != digest)
        return ChangeSummary(digests=digests, changed_paths=changed)

    def advance(
        self,
        summary: ChangeSummary,
        exercise_count: int,
        *,
        now: datetime | None = None,
    ) -> PipelineState:
        current = self._previous.version.version
        version = bump_patch(current) if summary.changed else current
        if summary.changed:
            logger.info(
                "Detected changes in %d source(s); version %s -> %s",
                len(summary.changed_paths),
                current,
                version,
            )
        return PipelineState(
            version=VersionInfo(
                version=version,
                lastUpdated=now or utc_now(),
                exerciseCount=exercise_count,
            ),
            ledger=dict(summary.digests),
        )


def hash_content(content: str | bytes) -> str:
    """Digest used for change detection between runs; text is hashed as UTF-8."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def parse_version(value: str) -> tuple[int, int, int]:
    parts = value.split(".")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        raise ValueError(f"Version '{value}' is not MAJOR.MINOR.PATCH")
    major, minor, patch = (int(part) for part in parts)
    return major, minor, patch


def bump_patch(value: str) -> str:
    major, minor, patch = parse_version(value)
    return f"{major}.{minor}.{patch + 1}"

