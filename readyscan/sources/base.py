"""Content source contract consumed by the analysis engine."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import ProjectMetadata, TreeEntry


class ContentSource(ABC):
    """Capability set every project provider implements.

    Implementations never raise for a missing path: absence is a valid return
    value. Transport or access problems surface through ``degraded`` metadata
    or a ``None`` tree, and only an unreachable project raises.
    """

    kind: str = "unknown"

    @abstractmethod
    def get_project_metadata(self) -> ProjectMetadata:
        """Return the default branch and whether the source is throttled."""

    @abstractmethod
    def get_tree(self, branch: str) -> Optional[List[TreeEntry]]:
        """Return the flattened listing, or None when it could not be obtained."""

    @abstractmethod
    def read_file(self, path: str, *, branch: str, degraded: bool = False) -> Optional[str]:
        """Return the text at ``path`` (physical, prefix included) or None if absent."""
