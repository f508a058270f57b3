"""Tree discovery and path-prefix normalization."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

from .models import DiscoveryContext, EntryKind, TreeEntry


def detect_prefix(entries: Sequence[TreeEntry]) -> str:
    """Return the single wrapping folder shared by every entry, or ``""``.

    The candidate is the first entry's path up to and including its first
    ``/``. A first entry without a slash, or any entry outside the
    candidate, means there is no wrapper.
    """
    if not entries:
        return ""
    first_path = entries[0].path
    slash = first_path.find("/")
    if slash == -1:
        return ""
    candidate = first_path[: slash + 1]
    if all(entry.path.startswith(candidate) for entry in entries):
        return candidate
    return ""


@dataclass(frozen=True)
class DiscoveredTree:
    """Read-only view of the project listing using un-prefixed logical paths."""

    context: DiscoveryContext
    entries: Tuple[TreeEntry, ...] = ()
    _kinds: Dict[str, EntryKind] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def build(cls, context: DiscoveryContext, entries: Sequence[TreeEntry]) -> "DiscoveredTree":
        logical: List[TreeEntry] = []
        kinds: Dict[str, EntryKind] = {}
        prefix = context.path_prefix
        for entry in entries:
            path = entry.path
            if prefix:
                path = path[len(prefix) :]
            if not path:
                continue
            logical.append(TreeEntry(path=path, kind=entry.kind))
            kinds[path] = entry.kind
        return cls(context=context, entries=tuple(logical), _kinds=kinds)

    @property
    def degraded(self) -> bool:
        return self.context.degraded

    def exists(self, logical_path: str) -> bool:
        return logical_path in self._kinds

    def is_file(self, logical_path: str) -> bool:
        return self._kinds.get(logical_path) is EntryKind.FILE

    def files(self) -> List[str]:
        return [entry.path for entry in self.entries if entry.is_file]

    def physical(self, logical_path: str) -> str:
        return f"{self.context.path_prefix}{logical_path}"

    def should_read(self, logical_path: str) -> bool:
        """Existence gate: trust the listing unless the run is degraded."""
        return self.degraded or self.is_file(logical_path)


def discover(
    raw_tree: Optional[Sequence[TreeEntry]],
    *,
    default_branch: str,
    metadata_degraded: bool = False,
) -> DiscoveredTree:
    """Normalize the raw listing into a :class:`DiscoveredTree`.

    A missing or empty listing degrades the run and skips prefix detection.
    """
    context = DiscoveryContext(default_branch=default_branch)
    if metadata_degraded:
        context = context.degrade("metadata request was throttled")

    if not raw_tree:
        reason = "tree listing unavailable" if raw_tree is None else "tree listing was empty"
        return DiscoveredTree.build(context.degrade(reason), ())

    prefix = detect_prefix(raw_tree)
    if prefix:
        context = replace(context, path_prefix=prefix)
    return DiscoveredTree.build(context, raw_tree)


__all__ = ["DiscoveredTree", "detect_prefix", "discover"]
