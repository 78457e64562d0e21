"""Generate image thumbnails and the thumbnail manifest for exercise assets."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from PIL import Image

from .config import ThumbnailConfig
from .enrich import thumbnail_path
from .storage import read_json, write_json

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}


@dataclass
class ThumbnailEntry:
    file: str
    thumbnail: str
    original_size: tuple[int, int]
    thumbnail_size: tuple[int, int]

    def manifest_value(self) -> dict[str, Any]:
        return {
            "thumbnail": self.thumbnail,
            "dimensions": {
                "original": {"width": self.original_size[0], "height": self.original_size[1]},
                "thumbnail": {"width": self.thumbnail_size[0], "height": self.thumbnail_size[1]},
            },
        }


@dataclass
class ThumbnailResult:
    generated: list[ThumbnailEntry] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)
    manifest_path: Path | None = None


def generate_thumbnails(assets_dir: Path, config: ThumbnailConfig | None = None) -> ThumbnailResult:
    """Create a thumbnail beside every source image and write the manifest.

    Thumbnails that are newer than their source are left alone and keep the
    manifest entry written when they were rendered.
    """
    config = config or ThumbnailConfig()
    result = ThumbnailResult()
    manifest_path = assets_dir / config.manifest_name
    previous = _read_manifest(manifest_path)

    for source in _iter_images(assets_dir, config.suffix):
        destination = source.with_name(thumbnail_path(source.name, config.suffix))
        if _is_cached(source, destination):
            result.skipped.append(source.name)
            continue
        try:
            result.generated.append(_render(source, destination, config))
        except (OSError, ValueError) as exc:
            logger.warning("Thumbnail generation failed for %s: %s", source, exc)
            result.errors[source.name] = str(exc)

    manifest = {name: previous[name] for name in result.skipped if name in previous}
    manifest.update((entry.file, entry.manifest_value()) for entry in result.generated)
    result.manifest_path = write_json(manifest_path, dict(sorted(manifest.items())))
    return result


def _read_manifest(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        payload = read_json(path)
    except json.JSONDecodeError:
        logger.warning("Ignoring unreadable thumbnail manifest at %s", path)
        return {}
    return payload if isinstance(payload, dict) else {}


def _iter_images(root: Path, suffix: str) -> Iterator[Path]:
    if not root.exists():
        return
    for path in sorted(root.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in IMAGE_EXTENSIONS:
            continue
        if path.stem.endswith(suffix):
            continue
        yield path


def _is_cached(source: Path, destination: Path) -> bool:
    if not destination.exists():
        return False
    try:
        built = destination.stat()
        return built.st_size > 0 and built.st_mtime_ns >= source.stat().st_mtime_ns
    except FileNotFoundError:
        return False


def _render(source: Path, destination: Path, config: ThumbnailConfig) -> ThumbnailEntry:
    with Image.open(source) as image:
        original_size = image.size
        width = min(config.width, image.width)
        height = max(1, round(width / image.width * image.height))
        if width != image.width:
            thumbnail = image.resize((width, height), Image.Resampling.LANCZOS)
        else:
            thumbnail = image.copy()

        save_format = (image.format or "").upper()
        save_kwargs: dict[str, Any] = {}
        if save_format == "JPEG":
            if thumbnail.mode != "RGB":
                thumbnail = thumbnail.convert("RGB")
            save_kwargs = {"quality": config.quality, "optimize": True}
        elif save_format == "WEBP":
            save_kwargs = {"quality": config.quality}
        elif save_format == "PNG":
            save_kwargs = {"optimize": True, "compress_level": 9}
        else:
            raise ValueError(f"Unsupported format: {image.format}")

        thumbnail.save(destination, format=save_format, **save_kwargs)

    return ThumbnailEntry(
        file=source.name,
        thumbnail=destination.name,
        original_size=original_size,
        thumbnail_size=(width, height),
    )
