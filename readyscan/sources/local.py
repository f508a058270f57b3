"""Filesystem-backed content source."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Optional

from ..errors import LocatorInvalid, SourceUnavailable
from ..logging import get_logger
from ..models import EntryKind, ProjectMetadata, TreeEntry
from .base import ContentSource

_EXCLUDED_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".venv",
        "node_modules",
        "dist",
        "build",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".idea",
    }
)

_EXCLUDED_FILES = frozenset({".DS_Store", "Thumbs.db"})

LOCAL_BRANCH = "local-disk"


class LocalSource(ContentSource):
    """Walks a directory tree. Never throttled, never degraded."""

    kind = "local"

    def __init__(self, root: str | Path, *, exclude_dirs: Iterable[str] = ()) -> None:
        self.root = Path(root).expanduser()
        self._excluded = _EXCLUDED_DIRS.union(exclude_dirs)
        self.logger = get_logger("sources.local")

    def get_project_metadata(self) -> ProjectMetadata:
        if not self.root.exists():
            raise SourceUnavailable(f"Project path not found: {self.root}")
        if not self.root.is_dir():
            raise LocatorInvalid(f"Project path is not a directory: {self.root}")
        return ProjectMetadata(
            display_name=f"[LOCAL] {self.root.resolve().name}",
            default_branch=LOCAL_BRANCH,
        )

    def get_tree(self, branch: str) -> Optional[List[TreeEntry]]:
        root = self.root.resolve()
        entries: List[TreeEntry] = []
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            rel_dir = current.relative_to(root).as_posix() if current != root else ""

            dirnames[:] = sorted(name for name in dirnames if name not in self._excluded)
            for name in dirnames:
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                entries.append(TreeEntry(path=rel_path, kind=EntryKind.DIRECTORY))

            for filename in sorted(filenames):
                if filename in _EXCLUDED_FILES:
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                entries.append(TreeEntry(path=rel_path, kind=EntryKind.FILE))

        self.logger.debug("Local walk of %s found %d entries", root, len(entries))
        return entries

    def read_file(self, path: str, *, branch: str, degraded: bool = False) -> Optional[str]:
        root = self.root.resolve()
        target = (root / path).resolve()
        if root != target and root not in target.parents:
            self.logger.debug("Refusing to read outside project root: %s", path)
            return None
        try:
            return target.read_text(encoding="utf-8", errors="replace")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return None
        except OSError as exc:
            self.logger.debug("Unable to read %s: %s", path, exc)
            return None


__all__ = ["LOCAL_BRANCH", "LocalSource"]
