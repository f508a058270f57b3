"""Tests for offline-capability vocabulary scanning."""

from __future__ import annotations

from readyscan.extractors.offline import OfflineCapabilityExtractor
from readyscan.models import FetchTask, SignalCategory, TaskKind


def _categories(content: str) -> list[SignalCategory]:
    task = FetchTask("src/offline.ts", TaskKind.SOURCE_SAMPLE)
    result = OfflineCapabilityExtractor().extract(task, content)
    return [signal.category for signal in result.signals]


def test_persistence_detection() -> None:
    assert _categories("const req = indexedDB.open('notes', 1);\n") == [SignalCategory.PERSISTENCE]


def test_caching_detection() -> None:
    content = "if ('serviceWorker' in navigator) navigator.serviceWorker.register('/sw.js');\n"

    assert _categories(content) == [SignalCategory.CACHING]


def test_intent_detection() -> None:
    content = "window.addEventListener('offline', showBanner);\nif (!navigator.onLine) queue();\n"

    assert _categories(content) == [SignalCategory.INTENT, SignalCategory.INTENT]


def test_native_shell_detection() -> None:
    assert _categories("import { invoke } from '@tauri-apps/api';\n") == [SignalCategory.NATIVE]


def test_signals_carry_location() -> None:
    task = FetchTask("src/db.js", TaskKind.SOURCE_SAMPLE)

    result = OfflineCapabilityExtractor().extract(task, "// storage\nimport localforage from 'localforage';\n")

    assert [(signal.file, signal.line) for signal in result.signals] == [("src/db.js", 2), ("src/db.js", 2)]
    assert all(signal.risk_level is None for signal in result.signals)


def test_plain_code_has_no_offline_signals() -> None:
    assert _categories("export const sum = (a, b) => a + b;\n") == []
