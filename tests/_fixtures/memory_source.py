"""In-memory content source for engine and planner tests."""

from __future__ import annotations

import textwrap
import threading
from typing import Dict, List, Mapping, Optional, Sequence

from readyscan.models import EntryKind, ProjectMetadata, TreeEntry
from readyscan.sources.base import ContentSource


def tree_from_files(paths: Sequence[str], *, directories: bool = True) -> List[TreeEntry]:
    """Build a sorted listing, with parent directory entries unless disabled."""
    entries: Dict[str, EntryKind] = {}
    for path in paths:
        parts = path.split("/")
        for depth in range(1, len(parts) if directories else 1):
            entries.setdefault("/".join(parts[:depth]), EntryKind.DIRECTORY)
        entries[path] = EntryKind.FILE
    return [TreeEntry(path=path, kind=kind) for path, kind in sorted(entries.items())]


class MemorySource(ContentSource):
    """Serves files from a dict and records every read it receives."""

    kind = "memory"

    def __init__(
        self,
        files: Mapping[str, str],
        *,
        tree: Optional[List[TreeEntry]] = None,
        list_tree: bool = True,
        throttled: bool = False,
        failing: Sequence[str] = (),
        branch: str = "main",
    ) -> None:
        self.files = {path: textwrap.dedent(content).lstrip("\n") for path, content in files.items()}
        self._tree = tree if tree is not None else tree_from_files(list(self.files))
        self._list_tree = list_tree
        self._throttled = throttled
        self._failing = set(failing)
        self._branch = branch
        self._lock = threading.Lock()
        self.reads: List[str] = []

    def get_project_metadata(self) -> ProjectMetadata:
        return ProjectMetadata(
            display_name="memory/project",
            default_branch="master" if self._throttled else self._branch,
            degraded=self._throttled,
        )

    def get_tree(self, branch: str) -> Optional[List[TreeEntry]]:
        if not self._list_tree:
            return None
        return list(self._tree)

    def read_file(self, path: str, *, branch: str, degraded: bool = False) -> Optional[str]:
        with self._lock:
            self.reads.append(path)
        if path in self._failing:
            raise OSError(f"connection reset while reading {path}")
        return self.files.get(path)


__all__ = ["MemorySource", "tree_from_files"]
