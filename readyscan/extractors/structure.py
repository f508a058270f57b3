"""Path-only structural markers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

from ..models import FetchTask, RiskLevel, Signal, SignalCategory, TaskKind
from ..rules import STRUCTURE
from .base import Extraction, Extractor


@dataclass(frozen=True)
class StructuralMarker:
    identifier: str
    label: str
    pattern: Pattern[str]

    def matches(self, path: str) -> bool:
        return bool(self.pattern.search(path))


STRUCTURAL_MARKERS: Tuple[StructuralMarker, ...] = (
    StructuralMarker("django", "Django Backend", re.compile(r"(?:^|/)manage\.py$")),
    StructuralMarker("wordpress-core", "WordPress", re.compile(r"(?:^|/)wp-admin(?:/|$)")),
    StructuralMarker("ruby", "Ruby/Rails", re.compile(r"(?:^|/)Gemfile$")),
    StructuralMarker("solidity", "Smart Contracts (Solidity)", re.compile(r"\.sol$")),
    StructuralMarker("rust", "Rust/Cargo", re.compile(r"(?:^|/)Cargo\.toml$")),
)


def marker_for(path: str) -> Optional[StructuralMarker]:
    for marker in STRUCTURAL_MARKERS:
        if marker.matches(path):
            return marker
    return None


class StructureExtractor(Extractor):
    """Turns a structural-only task into a signal; the path alone is the evidence."""

    name = "structure"

    def supports(self, task: FetchTask) -> bool:
        return task.kind is TaskKind.STRUCTURAL_ONLY

    def extract(self, task: FetchTask, content: Optional[str]) -> Extraction:
        result = Extraction()
        marker = marker_for(task.logical_path)
        if marker is None:
            return result
        result.signals.append(
            Signal(
                category=SignalCategory.STRUCTURE,
                file=task.logical_path,
                line=None,
                matched_text=task.logical_path,
                label=marker.label,
                risk_level=RiskLevel.MEDIUM,
                rule_key=STRUCTURE,
            )
        )
        result.dependencies.append(marker.identifier)
        return result
