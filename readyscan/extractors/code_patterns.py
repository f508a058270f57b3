"""Source-text scanning for network calls and centralized endpoints."""

from __future__ import annotations

import re
from typing import Optional, Pattern, Tuple

from ..models import FetchTask, RiskLevel, Signal, SignalCategory, TaskKind
from ..rules import GENERIC_NETWORK, HARDCODED_API
from .base import Extraction, Extractor
from .utils import iter_matches

GENERIC_NETWORK_PATTERN = re.compile(r"fetch\s*\(|axios(?:\.|@|\s*\()", re.IGNORECASE)

# (label, pattern) for hostnames owned by centralized providers
HOSTNAME_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("Firebase API", re.compile(r"firebaseio\.com", re.IGNORECASE)),
    ("Firebase Hosting", re.compile(r"firebaseapp\.com", re.IGNORECASE)),
    ("Google API", re.compile(r"googleapis\.com", re.IGNORECASE)),
    ("Supabase API", re.compile(r"supabase\.co\b", re.IGNORECASE)),
    ("AWS API", re.compile(r"amazonaws\.com", re.IGNORECASE)),
)


class CodePatternExtractor(Extractor):
    """Reports generic network calls and hardcoded provider hostnames."""

    name = "code_patterns"

    def supports(self, task: FetchTask) -> bool:
        return task.kind is TaskKind.SOURCE_SAMPLE

    def extract(self, task: FetchTask, content: Optional[str]) -> Extraction:
        result = Extraction()
        if not content:
            return result

        for matched, line in iter_matches(GENERIC_NETWORK_PATTERN, content):
            result.signals.append(
                Signal(
                    category=SignalCategory.GENERIC_NETWORK,
                    file=task.logical_path,
                    line=line,
                    matched_text=matched,
                    label="Generic Network Call",
                    risk_level=RiskLevel.MEDIUM,
                    rule_key=GENERIC_NETWORK,
                )
            )

        for label, pattern in HOSTNAME_PATTERNS:
            for matched, line in iter_matches(pattern, content):
                result.signals.append(
                    Signal(
                        category=SignalCategory.HARDCODED_API,
                        file=task.logical_path,
                        line=line,
                        matched_text=matched,
                        label=label,
                        risk_level=RiskLevel.MEDIUM,
                        rule_key=HARDCODED_API,
                    )
                )
        return result
