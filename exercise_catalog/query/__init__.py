"""Read-side query engine for the persisted exercise dataset."""

from .engine import CatalogReader, matches_filters, matches_text, paginate, project
from .models import ExerciseFilters, ExercisePage, PageMetadata, split_csv

__all__ = [
    "CatalogReader",
    "ExerciseFilters",
    "ExercisePage",
    "PageMetadata",
    "matches_filters",
    "matches_text",
    "paginate",
    "project",
    "split_csv",
]
