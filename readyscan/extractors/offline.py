"""Offline-capability vocabulary scanning."""

from __future__ import annotations

import re
from typing import Optional, Pattern, Tuple

from ..models import FetchTask, Signal, SignalCategory, TaskKind
from .base import Extraction, Extractor
from .utils import iter_matches

OFFLINE_PATTERNS: Tuple[Tuple[SignalCategory, Pattern[str]], ...] = (
    (
        SignalCategory.PERSISTENCE,
        re.compile(r"indexedDB|localforage|dexie|rxdb|pouchdb|watermelondb", re.IGNORECASE),
    ),
    (
        SignalCategory.CACHING,
        re.compile(r"navigator\.serviceWorker|caches\.open|workbox|sw-precache", re.IGNORECASE),
    ),
    (
        SignalCategory.INTENT,
        re.compile(
            r"navigator\.onLine|addEventListener\(\s*['\"]offline['\"]|backgroundSync",
            re.IGNORECASE,
        ),
    ),
    (
        SignalCategory.NATIVE,
        re.compile(r"tauri|electron-store|react-native-fs|capacitor", re.IGNORECASE),
    ),
)


class OfflineCapabilityExtractor(Extractor):
    """Records local persistence, caching, intent and native-shell usage.

    These signals feed the offline tally only and never count as risk.
    """

    name = "offline"

    def supports(self, task: FetchTask) -> bool:
        return task.kind is TaskKind.SOURCE_SAMPLE

    def extract(self, task: FetchTask, content: Optional[str]) -> Extraction:
        result = Extraction()
        if not content:
            return result
        for category, pattern in OFFLINE_PATTERNS:
            for matched, line in iter_matches(pattern, content):
                result.signals.append(
                    Signal(
                        category=category,
                        file=task.logical_path,
                        line=line,
                        matched_text=matched,
                        label=f"Detected {matched}",
                    )
                )
        return result
