"""Schema validation helpers and lint diagnostics for exercise records."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum, auto
from importlib import resources
from pathlib import Path
from typing import Any, Mapping, cast

from jsonschema import Draft202012Validator

from .config import Config
from .errors import FormatError, RecordValidationError
from .ingest import build_record, decode_source, discover_sources, source_key

SCHEMA_PACKAGE = "exercise_catalog.schemas"
EXERCISE_SCHEMA_NAME = "exercise.schema.json"


class IssueSeverity(Enum):
    """Severity level for lint issues."""

    ERROR = auto()
    WARNING = auto()


@dataclass(slots=True)
class ValidationResult:
    """Outcome of checking one record against a schema."""

    valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(slots=True)
class SourceIssue:
    """Represents a lint finding for a source file."""

    source_path: str
    message: str
    severity: IssueSeverity
    record_id: str | None = None
    pointer: str | None = None


@dataclass(slots=True)
class LintReport:
    """Aggregate lint results for a workspace."""

    issues: list[SourceIssue] = field(default_factory=list)
    source_count: int = 0
    valid_count: int = 0

    def add(self, issue: SourceIssue) -> None:
        self.issues.append(issue)

    @property
    def invalid_count(self) -> int:
        return self.source_count - self.valid_count

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is IssueSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is IssueSeverity.WARNING)


def validate_record(record: Mapping[str, Any], schema: Mapping[str, Any]) -> ValidationResult:
    """Check ``record`` against ``schema`` and return path-qualified error messages."""
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(record), key=lambda err: [str(p) for p in err.path])
    messages = [f"{_pointer(error.path)}: {error.message}" for error in errors]
    return ValidationResult(valid=not messages, errors=messages)


def ensure_valid(
    record: Mapping[str, Any],
    schema: Mapping[str, Any],
    *,
    source_path: str | None = None,
) -> None:
    """Raise `RecordValidationError` when ``record`` does not satisfy ``schema``."""
    result = validate_record(record, schema)
    if result.valid:
        return
    record_id = record.get("id")
    label = source_path or "<record>"
    message = f"{label}: {result.errors[0]}"
    if len(result.errors) > 1:
        message += f" (+{len(result.errors) - 1} more)"
    raise RecordValidationError(
        message,
        source_path=source_path,
        record_id=str(record_id) if record_id is not None else None,
        errors=result.errors,
    )


def load_schema(path: Path | None = None) -> dict[str, Any]:
    """Load a record schema from ``path`` or fall back to the bundled schema."""
    if path is None:
        with resources.files(SCHEMA_PACKAGE).joinpath(EXERCISE_SCHEMA_NAME).open(
            "r", encoding="utf-8"
        ) as handle:
            payload = json.load(handle)
    else:
        with Path(path).open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"Schema '{path or EXERCISE_SCHEMA_NAME}' must be a JSON object.")
    Draft202012Validator.check_schema(payload)
    return cast(dict[str, Any], payload)


def lint_workspace(config: Config, schema: Mapping[str, Any] | None = None) -> LintReport:
    """Parse, enrich and validate every source without writing artifacts."""
    if schema is None:
        schema = load_schema(config.schema_path)
    report = LintReport()
    seen_ids: dict[str, str] = {}

    for path in discover_sources(config.content_dir, config.skip_filenames):
        report.source_count += 1
        label = source_key(path, config.content_dir)
        try:
            text = decode_source(path.read_bytes(), label)
            parsed, record = build_record(text, label, config)
        except FormatError as exc:
            report.add(SourceIssue(source_path=label, message=str(exc), severity=IssueSeverity.ERROR))
            continue

        result = validate_record(record, schema)
        record_id = parsed.record_id
        if not result.valid:
            for message in result.errors:
                pointer, _, detail = message.partition(": ")
                report.add(
                    SourceIssue(
                        source_path=label,
                        message=detail,
                        severity=IssueSeverity.ERROR,
                        record_id=record_id,
                        pointer=pointer,
                    )
                )
            continue

        if record_id in seen_ids:
            report.add(
                SourceIssue(
                    source_path=label,
                    message=f"Duplicate id '{record_id}' already defined in {seen_ids[record_id]}.",
                    severity=IssueSeverity.ERROR,
                    record_id=record_id,
                    pointer="/id",
                )
            )
            continue
        seen_ids[str(record_id)] = label
        report.valid_count += 1

        if not parsed.images:
            report.add(
                SourceIssue(
                    source_path=label,
                    message="No image reference found in body.",
                    severity=IssueSeverity.WARNING,
                    record_id=record_id,
                    pointer="/images",
                )
            )

    return report


def _pointer(path: Any) -> str:
    parts = [str(elem) for elem in path]
    return "/" + "/".join(parts)
