"""Existence-gated fetch planning and bounded concurrent dispatch."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .config import MAX_NESTED_MANIFESTS, MAX_SOURCE_SAMPLES
from .discovery import DiscoveredTree
from .errors import AccessThrottled, AnalysisCancelled
from .extractors.hosting import HOSTING_FILES
from .extractors.manifest import MANIFEST_FILES
from .extractors.structure import STRUCTURAL_MARKERS
from .extractors.utils import basename
from .logging import get_logger
from .models import FetchTask, TaskKind
from .sources.base import ContentSource

# Fixed candidates, checked at the logical root only.
ROOT_MANIFESTS: Tuple[str, ...] = MANIFEST_FILES
ROOT_CONFIGS: Tuple[str, ...] = tuple(HOSTING_FILES)

SOURCE_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs", ".vue", ".svelte")

_BUILD_OUTPUT_DIRS = frozenset(
    {"node_modules", "bower_components", "vendor", "dist", "build", "out", ".next", ".nuxt", "coverage"}
)
_NESTED_MANIFEST_NOISE = frozenset({"node_modules", "bower_components", "vendor", "__tests__", "fixtures"})


@dataclass
class FetchPlan:
    tasks: List[FetchTask] = field(default_factory=list)
    limitations: List[str] = field(default_factory=list)

    def by_kind(self, kind: TaskKind) -> List[FetchTask]:
        return [task for task in self.tasks if task.kind is kind]


def _segments(path: str) -> List[str]:
    return [segment.lower() for segment in path.split("/")[:-1]]


def _is_nested_manifest_noise(path: str) -> bool:
    for segment in _segments(path):
        if segment in _NESTED_MANIFEST_NOISE:
            return True
        if segment.startswith(("test", "example")):
            return True
    return False


def _is_build_output(path: str) -> bool:
    return any(segment in _BUILD_OUTPUT_DIRS for segment in _segments(path))


class FetchPlanner:
    """Builds the minimal set of reads for one run.

    A read is planned only for paths the listing confirms, except for the
    fixed root candidates in degraded mode, which are tried blindly.
    """

    def __init__(
        self,
        *,
        max_nested_manifests: int = MAX_NESTED_MANIFESTS,
        max_source_samples: int = MAX_SOURCE_SAMPLES,
    ) -> None:
        self.max_nested_manifests = max(0, min(max_nested_manifests, MAX_NESTED_MANIFESTS))
        self.max_source_samples = max(0, min(max_source_samples, MAX_SOURCE_SAMPLES))

    def plan(self, tree: DiscoveredTree) -> FetchPlan:
        plan = FetchPlan()
        plan.tasks.extend(self._structural_tasks(tree))
        plan.tasks.extend(self._fixed_candidates(tree))
        plan.tasks.extend(self._nested_manifests(tree, plan))
        plan.tasks.extend(self._source_samples(tree, plan))
        return plan

    def _structural_tasks(self, tree: DiscoveredTree) -> List[FetchTask]:
        first_hit: Dict[str, str] = {}
        for entry in tree.entries:
            for marker in STRUCTURAL_MARKERS:
                if marker.identifier not in first_hit and marker.matches(entry.path):
                    first_hit[marker.identifier] = entry.path
        return [
            FetchTask(logical_path=first_hit[marker.identifier], kind=TaskKind.STRUCTURAL_ONLY)
            for marker in STRUCTURAL_MARKERS
            if marker.identifier in first_hit
        ]

    def _fixed_candidates(self, tree: DiscoveredTree) -> List[FetchTask]:
        tasks: List[FetchTask] = []
        for name in ROOT_MANIFESTS:
            if tree.should_read(name):
                tasks.append(FetchTask(logical_path=name, kind=TaskKind.MANIFEST))
        for name in ROOT_CONFIGS:
            if tree.should_read(name):
                tasks.append(FetchTask(logical_path=name, kind=TaskKind.CONFIG))
        return tasks

    def _nested_manifests(self, tree: DiscoveredTree, plan: FetchPlan) -> List[FetchTask]:
        candidates = sorted(
            (
                path
                for path in tree.files()
                if "/" in path
                and basename(path) in MANIFEST_FILES
                and not _is_nested_manifest_noise(path)
            ),
            key=lambda path: (path.count("/"), path),
        )
        selected = candidates[: self.max_nested_manifests]
        if len(candidates) > len(selected):
            plan.limitations.append(
                f"Scanned {len(selected)} of {len(candidates)} nested manifests (closest to the project root)."
            )
        return [FetchTask(logical_path=path, kind=TaskKind.MANIFEST) for path in selected]

    def _source_samples(self, tree: DiscoveredTree, plan: FetchPlan) -> List[FetchTask]:
        candidates = sorted(
            (
                path
                for path in tree.files()
                if path.lower().endswith(SOURCE_EXTENSIONS) and not _is_build_output(path)
            ),
            key=lambda path: (len(path), path),
        )
        selected = candidates[: self.max_source_samples]
        if len(candidates) > len(selected):
            plan.limitations.append(
                f"Sampled {len(selected)} of {len(candidates)} source files (shortest paths first)."
            )
        return [FetchTask(logical_path=path, kind=TaskKind.SOURCE_SAMPLE) for path in selected]


@dataclass(frozen=True)
class FetchOutcome:
    task: FetchTask
    content: Optional[str] = None
    error: Optional[str] = None


class FetchDispatcher:
    """Issues planned reads concurrently with settle-all semantics.

    Each read succeeds or fails on its own; outcomes come back in plan order
    regardless of completion order.
    """

    def __init__(self, source: ContentSource, tree: DiscoveredTree, *, max_workers: int = 8) -> None:
        self.source = source
        self.tree = tree
        self.max_workers = max(1, max_workers)
        self.logger = get_logger("planner")

    def _read(self, task: FetchTask) -> Optional[str]:
        return self.source.read_file(
            self.tree.physical(task.logical_path),
            branch=self.tree.context.default_branch,
            degraded=self.tree.degraded,
        )

    def fetch(
        self, tasks: Sequence[FetchTask], *, cancel: threading.Event | None = None
    ) -> List[FetchOutcome]:
        outcomes: List[Optional[FetchOutcome]] = [None] * len(tasks)
        pending: List[Tuple[int, Future[Optional[str]]]] = []

        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="readyscan-fetch")
        try:
            for index, task in enumerate(tasks):
                if not task.requires_read:
                    outcomes[index] = FetchOutcome(task=task)
                    continue
                pending.append((index, executor.submit(self._read, task)))

            for index, future in pending:
                if cancel is not None and cancel.is_set():
                    raise AnalysisCancelled("Analysis cancelled while reading files")
                task = tasks[index]
                try:
                    content = future.result()
                except AccessThrottled as exc:
                    self.logger.warning("Read throttled for %s: %s", task.logical_path, exc)
                    outcomes[index] = FetchOutcome(task=task, error=f"throttled by the provider: {exc}")
                    continue
                except Exception as exc:
                    self.logger.warning("Read failed for %s: %s", task.logical_path, exc)
                    outcomes[index] = FetchOutcome(task=task, error=str(exc))
                    continue
                if content is None:
                    self.logger.debug("No content for %s", task.logical_path)
                outcomes[index] = FetchOutcome(task=task, content=content)
        except AnalysisCancelled:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        else:
            executor.shutdown(wait=True)

        return [outcome for outcome in outcomes if outcome is not None]


__all__ = ["FetchDispatcher", "FetchOutcome", "FetchPlan", "FetchPlanner", "SOURCE_EXTENSIONS"]
