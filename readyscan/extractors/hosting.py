"""Hosting and platform configuration extractor."""

from __future__ import annotations

from typing import Dict, Optional

from ..models import FetchTask, RiskLevel, Signal, SignalCategory, TaskKind
from ..rules import HOSTING_CONFIG
from .base import Extraction, Extractor
from .utils import basename

# filename -> dependency identifier implied by the file, if any
HOSTING_FILES: Dict[str, Optional[str]] = {
    "firebase.json": "firebase-tools",
    "vercel.json": "vercel.json",
    "netlify.toml": "netlify.toml",
    "fly.toml": None,
    "docker-compose.yml": None,
}


class HostingConfigExtractor(Extractor):
    """Recognizes hosting configuration files by exact filename."""

    name = "hosting"

    def supports(self, task: FetchTask) -> bool:
        return task.kind is TaskKind.CONFIG and basename(task.logical_path) in HOSTING_FILES

    def extract(self, task: FetchTask, content: Optional[str]) -> Extraction:
        result = Extraction()
        if content is None:
            return result
        filename = basename(task.logical_path)
        result.signals.append(
            Signal(
                category=SignalCategory.HOSTING,
                file=task.logical_path,
                line=None,
                matched_text=filename,
                label=f"Config: {filename}",
                risk_level=RiskLevel.MEDIUM,
                rule_key=HOSTING_CONFIG,
            )
        )
        implied = HOSTING_FILES.get(filename)
        if implied:
            result.dependencies.append(implied)
        return result
