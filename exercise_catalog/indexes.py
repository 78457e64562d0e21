"""Aggregate listings (categories, muscles, equipment) over exercise records."""

from __future__ import annotations

from collections import Counter
from typing import Any, Iterable, Mapping, Sequence

from .enrich import category_display_name

Record = Mapping[str, Any]


def _values(record: Record, key: str) -> list[str]:
    value = record.get(key)
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def record_muscles(record: Record) -> list[str]:
    """Primary then secondary muscles with duplicates removed."""
    seen: dict[str, None] = {}
    for muscle in _values(record, "primaryMuscles") + _values(record, "secondaryMuscles"):
        seen.setdefault(muscle, None)
    return list(seen)


def category_counts(records: Iterable[Record]) -> list[dict[str, Any]]:
    counts = Counter(str(record.get("category")) for record in records if record.get("category"))
    return [
        {"id": category, "name": category_display_name(category), "count": counts[category]}
        for category in sorted(counts)
    ]


def equipment_counts(records: Iterable[Record]) -> list[dict[str, Any]]:
    counts: Counter[str] = Counter()
    for record in records:
        counts.update(set(_values(record, "equipment")))
    return [
        {"id": item, "name": item[:1].upper() + item[1:], "count": counts[item]}
        for item in sorted(counts)
    ]


def muscle_counts(records: Iterable[Record]) -> list[dict[str, Any]]:
    counts: Counter[str] = Counter()
    for record in records:
        counts.update(record_muscles(record))
    return [{"name": muscle, "count": counts[muscle]} for muscle in sorted(counts)]


def muscle_reference(records: Sequence[Record]) -> list[dict[str, Any]]:
    """List each muscle with the exercises that train it.

    A muscle listed as both primary and secondary for one exercise is
    reported once, as primary.
    """
    muscles: dict[str, dict[str, Any]] = {}
    for record in records:
        for key, is_primary in (("primaryMuscles", True), ("secondaryMuscles", False)):
            for muscle in _values(record, key):
                entry = muscles.setdefault(muscle, {"name": muscle, "exercises": []})
                if any(item["id"] == record.get("id") for item in entry["exercises"]):
                    continue
                entry["exercises"].append(
                    {"id": record.get("id"), "name": record.get("name"), "isPrimary": is_primary}
                )
    return [muscles[name] for name in sorted(muscles)]
