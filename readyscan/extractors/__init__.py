"""Signal extractor implementations."""

from __future__ import annotations

from typing import List

from .base import Extraction, Extractor
from .code_patterns import CodePatternExtractor
from .hosting import HOSTING_FILES, HostingConfigExtractor
from .manifest import MANIFEST_FILES, ManifestExtractor
from .offline import OfflineCapabilityExtractor
from .structure import STRUCTURAL_MARKERS, StructureExtractor


def default_extractors() -> List[Extractor]:
    """Return the built-in extractors in the order they see each task."""
    return [
        StructureExtractor(),
        ManifestExtractor(),
        HostingConfigExtractor(),
        CodePatternExtractor(),
        OfflineCapabilityExtractor(),
    ]


__all__ = [
    "CodePatternExtractor",
    "Extraction",
    "Extractor",
    "HOSTING_FILES",
    "HostingConfigExtractor",
    "MANIFEST_FILES",
    "ManifestExtractor",
    "OfflineCapabilityExtractor",
    "STRUCTURAL_MARKERS",
    "StructureExtractor",
    "default_extractors",
]
