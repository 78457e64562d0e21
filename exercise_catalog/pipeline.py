"""Run the content pipeline: discover, parse, enrich, validate, version, persist."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Mapping

from .config import Config
from .errors import FormatError, RecordValidationError
from .ingest import build_record, decode_source, discover_sources, source_key
from .persist import write_dataset
from .reporting import PipelineReport, SourceFailure, display_paths
from .state import PipelineState, VersionTracker, utc_now
from .validation import ensure_valid, load_schema

logger = logging.getLogger(__name__)


def run_pipeline(
    config: Config,
    *,
    now: datetime | None = None,
    schema: Mapping[str, Any] | None = None,
) -> PipelineReport:
    """Rebuild every artifact under ``config.data_dir`` from the content directory.

    Malformed or schema-invalid sources are skipped and reported; any I/O
    error aborts the run before later artifacts are written.
    """
    start = time.perf_counter()
    generated_at = now or utc_now()
    if schema is None:
        schema = load_schema(config.schema_path)

    state = PipelineState.load(config.data_dir, config.initial_version)
    tracker = VersionTracker(state)

    sources: dict[str, bytes] = {}
    records: list[dict[str, Any]] = []
    failures: list[SourceFailure] = []
    seen_ids: dict[str, str] = {}

    for path in discover_sources(config.content_dir, config.skip_filenames):
        key = source_key(path, config.content_dir)
        raw = path.read_bytes()
        sources[key] = raw

        try:
            text = decode_source(raw, key)
            _, record = build_record(text, key, config, now=generated_at)
            ensure_valid(record, schema, source_path=key)
            record_id = str(record["id"])
            if record_id in seen_ids:
                raise RecordValidationError(
                    f"{key}: duplicate id '{record_id}' already defined in {seen_ids[record_id]}",
                    source_path=key,
                    record_id=record_id,
                )
        except FormatError as exc:
            logger.warning("Skipping %s: %s", key, exc)
            failures.append(SourceFailure(source_path=key, message=str(exc)))
            continue
        except RecordValidationError as exc:
            logger.warning("Validation failed for %s: %s", key, exc)
            failures.append(
                SourceFailure(
                    source_path=key,
                    message=str(exc),
                    record_id=exc.record_id,
                    errors=exc.errors,
                )
            )
            continue

        seen_ids[record_id] = key
        records.append(record)

    summary = tracker.compute(sources)
    new_state = tracker.advance(summary, len(records), now=generated_at)
    persisted = write_dataset(
        records,
        new_state,
        config.data_dir,
        prune_stale=config.prune_stale_records,
    )

    logger.info(
        "Processing complete: %d valid, %d invalid; version %s",
        len(records),
        len(failures),
        new_state.version.version,
    )

    return PipelineReport(
        project=config.project_name,
        generated_at=generated_at,
        duration_seconds=time.perf_counter() - start,
        source_count=len(sources),
        valid=len(records),
        invalid=len(failures),
        previous_version=state.version.version,
        version=new_state.version.version,
        changed=summary.changed,
        changed_sources=summary.changed_paths,
        failures=failures,
        written=display_paths(persisted.written, config.data_dir),
        pruned=display_paths(persisted.pruned, config.data_dir),
    )
