import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

CONFIG_FILENAME = "catalog.yml"
BASE_URL_ENV = "CATALOG_BASE_URL"
DEFAULT_BASE_URL = "https://raw.githubusercontent.com/yourusername/WO-App-Exercises/main"


class ThumbnailConfig(BaseModel):
    """Options for thumbnail derivatives and their manifest."""

    width: int = Field(default=300, ge=1, description="Maximum thumbnail width in pixels.")
    quality: int = Field(default=75, ge=1, le=100)
    suffix: str = Field(
        default="-thumb",
        description="Inserted before the file extension to name a thumbnail.",
    )
    manifest_name: str = Field(default="thumbnails.json")

    @field_validator("suffix")
    def _require_suffix(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("thumbnail suffix cannot be empty")
        return cleaned


class ApiConfig(BaseModel):
    """Settings for the HTTP read API."""

    api_version: str = Field(default="1.0")
    cache_seconds: int = Field(
        default=3600,
        ge=0,
        description="max-age advertised on data responses.",
    )
    asset_cache_seconds: int = Field(
        default=86400,
        ge=0,
        description="max-age advertised on static asset responses.",
    )
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3000, ge=1, le=65535)
    serve_assets: bool = Field(
        default=True,
        description="Mount assets_dir under /assets when it exists.",
    )


class Config(BaseModel):
    project_name: str = Field(default="Exercise Catalog")
    content_dir: Path = Field(default=Path("exercises"))
    data_dir: Path = Field(default=Path("api/data"))
    assets_dir: Path = Field(default=Path("assets"))
    schema_path: Path | None = Field(
        default=None,
        description="JSON schema for exercise records; the bundled schema is used when unset.",
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Absolute location that relative asset paths are rewritten against.",
    )
    initial_version: str = Field(default="1.0.0")
    skip_filenames: list[str] = Field(default_factory=lambda: ["index.md"])
    prune_stale_records: bool = Field(
        default=True,
        description="Remove per-record files whose source no longer produces a valid record.",
    )
    thumbnails: ThumbnailConfig = Field(default_factory=ThumbnailConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @field_validator("content_dir", "data_dir", "assets_dir", mode="before")
    def _ensure_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("schema_path", mode="before")
    def _ensure_optional_path(cls, value: Any) -> Path | None:
        if value is None or value == "":
            return None
        return Path(value)

    @field_validator("base_url")
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("initial_version")
    def _check_semver(cls, value: str) -> str:
        parts = value.split(".")
        if len(parts) != 3 or not all(part.isdigit() for part in parts):
            raise ValueError("initial_version must look like MAJOR.MINOR.PATCH")
        return value


def load_config(path: str | Path) -> Config:
    """Load configuration and resolve relative paths based on the config location.

    The ``path`` argument may point to a file (e.g., ``/catalog/catalog.yml``) or a
    directory containing that file. All relative paths inside the configuration
    are interpreted relative to the directory holding the config file.
    """
    candidate = Path(path)
    data: dict[str, Any] = {}
    base_dir: Path
    if candidate.is_dir():
        # A directory without a config file falls back to defaults.
        config_file = candidate / CONFIG_FILENAME
        if config_file.exists():
            data = _read_yaml(config_file)
        base_dir = candidate.resolve()
    else:
        if not candidate.exists():
            raise FileNotFoundError(candidate)
        data = _read_yaml(candidate)
        base_dir = candidate.parent.resolve()

    env_base_url = os.environ.get(BASE_URL_ENV)
    if env_base_url:
        data["base_url"] = env_base_url

    cfg = Config(**data)

    def _abs_required(value: Path) -> Path:
        return value if value.is_absolute() else (base_dir / value).resolve()

    cfg.content_dir = _abs_required(cfg.content_dir)
    cfg.data_dir = _abs_required(cfg.data_dir)
    cfg.assets_dir = _abs_required(cfg.assets_dir)
    if cfg.schema_path is not None:
        cfg.schema_path = _abs_required(cfg.schema_path)

    return cfg


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must define a mapping.")
    return data
