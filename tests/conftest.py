from __future__ import annotations

from pathlib import Path

import pytest

from readyscan.config import ReadyScanConfig
from readyscan.engine import ReadinessEngine
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def engine(tmp_path: Path) -> ReadinessEngine:
    """Engine with default configuration and no config file on disk."""
    return ReadinessEngine(ReadyScanConfig(root=tmp_path))
