from datetime import datetime, timezone
from pathlib import Path

import pytest

from exercise_catalog.config import Config
from exercise_catalog.content import load_document
from exercise_catalog.enrich import enrich_document
from exercise_catalog.errors import RecordValidationError
from exercise_catalog.validation import (
    IssueSeverity,
    ensure_valid,
    lint_workspace,
    load_schema,
    validate_record,
)

FIXTURE_DIR = Path(__file__).parent / "fixtures" / "exercises"
NOW = datetime(2025, 3, 1, tzinfo=timezone.utc)

TINY_SCHEMA = {
    "type": "object",
    "required": ["id"],
    "properties": {"id": {"type": "string"}, "tags": {"type": "array", "items": {"type": "string"}}},
}


def _write(path: Path, body: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")


@pytest.mark.parametrize(
    "relative",
    ["upper-body/push-up.md", "lower-body/squat.md", "core/plank.md"],
)
def test_fixture_sources_pass_bundled_schema(relative: str) -> None:
    record = enrich_document(load_document(FIXTURE_DIR / relative), "https://cdn.example.com", now=NOW)
    result = validate_record(record, load_schema())

    assert result.valid, result.errors
    assert result.errors == []


def test_validate_record_is_independent_of_bundled_schema() -> None:
    assert validate_record({"id": "x"}, TINY_SCHEMA).valid
    result = validate_record({"tags": ["a", 3]}, TINY_SCHEMA)

    assert not result.valid
    assert any(message.startswith("/tags/1:") for message in result.errors)
    assert any(message.startswith("/:") for message in result.errors)


def test_validate_record_reports_path_qualified_errors() -> None:
    record = enrich_document(
        load_document(FIXTURE_DIR / "upper-body" / "push-up.md"), "https://cdn.example.com", now=NOW
    )
    record["category"] = "arms"
    record["primaryMuscles"] = []

    result = validate_record(record, load_schema())

    assert not result.valid
    assert any(message.startswith("/category:") for message in result.errors)
    assert any(message.startswith("/primaryMuscles:") for message in result.errors)


def test_ensure_valid_raises_with_context() -> None:
    with pytest.raises(RecordValidationError) as excinfo:
        ensure_valid({"id": 7}, TINY_SCHEMA, source_path="arms/curl.md")

    error = excinfo.value
    assert error.source_path == "arms/curl.md"
    assert error.record_id == "7"
    assert "arms/curl.md" in str(error)
    assert error.errors


def test_load_schema_from_path(tmp_path: Path) -> None:
    schema_path = tmp_path / "schema.json"
    schema_path.write_text('{"type": "object", "required": ["name"]}', encoding="utf-8")

    schema = load_schema(schema_path)

    assert schema["required"] == ["name"]


def test_lint_workspace_reports_invalid_and_duplicate_sources(workspace: Config) -> None:
    content = workspace.content_dir
    _write(content / "broken.md", "# No front matter\n")
    _write(
        content / "arms" / "curl.md",
        "---\nid: curl\nname: Curl\ncategory: arms\nprimaryMuscles: [biceps]\n"
        "difficulty: beginner\n---\n## Description\n\nCurl.\n",
    )
    (content / "copy.md").write_text(
        (content / "lower-body" / "squat.md").read_text(encoding="utf-8"), encoding="utf-8"
    )

    report = lint_workspace(workspace)

    assert report.source_count == 6
    assert report.valid_count == 3
    assert report.invalid_count == 3
    errors = [issue for issue in report.issues if issue.severity is IssueSeverity.ERROR]
    paths = {issue.source_path for issue in errors}
    assert {"broken.md", "arms/curl.md"} <= paths
    assert any("Duplicate id 'squat'" in issue.message for issue in errors)
    assert any(issue.pointer == "/category" for issue in errors)


def test_lint_workspace_reports_undecodable_sources(workspace: Config) -> None:
    (workspace.content_dir / "core" / "broken.md").write_bytes(b"---\nid: x\n---\n\xff\xfe bad")

    report = lint_workspace(workspace)

    assert report.valid_count == 3
    assert report.invalid_count == 1
    assert [issue.source_path for issue in report.issues] == ["core/broken.md"]
