from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from exercise_catalog.config import Config

FIXTURE_DIR = Path(__file__).parent / "fixtures" / "exercises"
BASE_URL = "https://cdn.example.com/catalog"


@pytest.fixture
def workspace(tmp_path: Path) -> Config:
    """Config pointing at a private copy of the fixture exercises."""
    content = tmp_path / "exercises"
    shutil.copytree(FIXTURE_DIR, content)
    return Config(
        content_dir=content,
        data_dir=tmp_path / "api" / "data",
        assets_dir=tmp_path / "assets",
        base_url=BASE_URL,
    )
