"""HTTP route definitions for the exercise read API."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Query, Request, Response

from ..config import Config
from ..query import CatalogReader, ExerciseFilters, split_csv

API_PREFIX = "/api/v1"
DATA_VERSION_HEADER = "X-Data-Version"

router = APIRouter(prefix=API_PREFIX)


def _reader(request: Request) -> CatalogReader:
    return request.app.state.reader


def _config(request: Request) -> Config:
    return request.app.state.config


def _set_cache_headers(request: Request, response: Response) -> None:
    """Advertise the data freshness window and the data version clients can compare."""
    config = _config(request)
    response.headers["Cache-Control"] = f"public, max-age={config.api.cache_seconds}"
    response.headers[DATA_VERSION_HEADER] = _reader(request).version_info().version


def _filters(
    category: Optional[str],
    difficulty: Optional[str],
    equipment: Optional[str],
    muscle: Optional[str],
    tags: Optional[str],
) -> ExerciseFilters:
    return ExerciseFilters(
        category=category,
        difficulty=difficulty,
        equipment=equipment,
        muscle=muscle,
        tags=split_csv(tags),
    )


@router.get("/version")
def get_version(request: Request, response: Response) -> dict[str, str]:
    """Return the dataset version and the API version."""
    _set_cache_headers(request, response)
    return {
        "version": _reader(request).version_info().version,
        "apiVersion": _config(request).api.api_version,
    }


@router.get("/exercises")
def list_exercises(
    request: Request,
    response: Response,
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    equipment: Optional[str] = None,
    muscle: Optional[str] = None,
    tags: Optional[str] = Query(default=None, description="Comma-separated; any tag matches."),
    fields: Optional[str] = Query(default=None, description="Comma-separated field projection."),
    page: int = 1,
    limit: int = 20,
) -> dict[str, Any]:
    result = _reader(request).list_exercises(
        _filters(category, difficulty, equipment, muscle, tags),
        fields=split_csv(fields),
        page=page,
        limit=limit,
    )
    _set_cache_headers(request, response)
    return result.model_dump(mode="json")


@router.get("/exercises/batch")
def batch_exercises(
    request: Request,
    response: Response,
    ids: Optional[str] = Query(default=None, description="Comma-separated exercise ids."),
    fields: Optional[str] = None,
) -> dict[str, Any]:
    exercises = _reader(request).batch(split_csv(ids), fields=split_csv(fields))
    _set_cache_headers(request, response)
    return {"exercises": exercises}


@router.get("/exercises/{exercise_id}")
def get_exercise(
    exercise_id: str,
    request: Request,
    response: Response,
    fields: Optional[str] = None,
) -> dict[str, Any]:
    exercise = _reader(request).get_exercise(exercise_id, fields=split_csv(fields))
    _set_cache_headers(request, response)
    return exercise


@router.get("/search")
def search_exercises(
    request: Request,
    response: Response,
    query: Optional[str] = None,
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    equipment: Optional[str] = None,
    muscle: Optional[str] = None,
    tags: Optional[str] = None,
    fields: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> dict[str, Any]:
    result = _reader(request).search(
        query,
        _filters(category, difficulty, equipment, muscle, tags),
        fields=split_csv(fields),
        page=page,
        limit=limit,
    )
    _set_cache_headers(request, response)
    return result.model_dump(mode="json")


@router.get("/categories")
def list_categories(request: Request, response: Response) -> dict[str, Any]:
    categories = _reader(request).categories()
    _set_cache_headers(request, response)
    return {"categories": categories}


@router.get("/muscles")
def list_muscles(request: Request, response: Response) -> dict[str, Any]:
    muscles = _reader(request).muscles()
    _set_cache_headers(request, response)
    return {"muscles": muscles}


@router.get("/equipment")
def list_equipment(request: Request, response: Response) -> dict[str, Any]:
    equipment = _reader(request).equipment()
    _set_cache_headers(request, response)
    return {"equipment": equipment}


ENDPOINTS = [
    ("/version", "Get API and data version information"),
    ("/exercises", "Get all exercises with filtering and pagination"),
    ("/exercises/{id}", "Get a specific exercise by ID"),
    ("/exercises/batch", "Get multiple exercises by IDs"),
    ("/search", "Search exercises with multiple criteria"),
    ("/categories", "Get exercise categories with counts"),
    ("/muscles", "Get all muscles targeted by exercises"),
    ("/equipment", "Get all equipment used by exercises"),
]
