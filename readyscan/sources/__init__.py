"""Content source implementations and the per-run factory."""

from __future__ import annotations

from ..config import ReadyScanConfig
from ..models import ProjectLocator, SourceKind
from .base import ContentSource
from .github import GitHubSource
from .local import LocalSource


def build_source(locator: ProjectLocator, config: ReadyScanConfig) -> ContentSource:
    """Select the concrete source for ``locator`` once, at the start of a run."""
    if locator.kind is SourceKind.LOCAL:
        return LocalSource(locator.root or ".", exclude_dirs=config.scan.exclude_dirs)
    return GitHubSource(locator, config.remote)


__all__ = ["ContentSource", "GitHubSource", "LocalSource", "build_source"]
