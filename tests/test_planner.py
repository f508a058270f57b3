"""Tests for fetch planning and concurrent dispatch."""

from __future__ import annotations

import threading
from typing import List, Optional

import pytest

from readyscan.discovery import discover
from readyscan.errors import AnalysisCancelled
from readyscan.models import FetchTask, TaskKind
from readyscan.planner import FetchDispatcher, FetchPlanner
from tests._fixtures.memory_source import MemorySource, tree_from_files


def _tree(paths: List[str], *, degraded: bool = False):
    raw = None if degraded else tree_from_files(paths)
    return discover(raw, default_branch="main")


def _paths(tasks: List[FetchTask]) -> List[str]:
    return [task.logical_path for task in tasks]


def test_plan_only_includes_confirmed_candidates() -> None:
    tree = _tree(["package.json", "vercel.json", "README.md", "docs/guide.md"])

    plan = FetchPlanner().plan(tree)

    assert _paths(plan.by_kind(TaskKind.MANIFEST)) == ["package.json"]
    assert _paths(plan.by_kind(TaskKind.CONFIG)) == ["vercel.json"]
    assert plan.by_kind(TaskKind.SOURCE_SAMPLE) == []
    assert plan.limitations == []


def test_degraded_plan_covers_every_fixed_candidate() -> None:
    plan = FetchPlanner().plan(_tree([], degraded=True))

    assert _paths(plan.tasks) == [
        "package.json",
        "requirements.txt",
        "composer.json",
        "firebase.json",
        "vercel.json",
        "netlify.toml",
        "fly.toml",
        "docker-compose.yml",
    ]


def test_structural_markers_need_no_read() -> None:
    tree = _tree(["manage.py", "contracts/Token.sol", "wp-admin/index.php"])

    plan = FetchPlanner().plan(tree)

    structural = plan.by_kind(TaskKind.STRUCTURAL_ONLY)
    assert _paths(structural) == ["manage.py", "wp-admin", "contracts/Token.sol"]
    assert not any(task.requires_read for task in structural)


def test_nested_manifests_skip_noise_and_prefer_shallow_paths() -> None:
    tree = _tree(
        [
            "apps/web/package.json",
            "apps/web/packages/ui/package.json",
            "api/requirements.txt",
            "node_modules/left-pad/package.json",
            "examples/demo/package.json",
            "test-utils/package.json",
            "src/__tests__/package.json",
        ]
    )

    plan = FetchPlanner().plan(tree)

    assert _paths(plan.by_kind(TaskKind.MANIFEST)) == [
        "api/requirements.txt",
        "apps/web/package.json",
        "apps/web/packages/ui/package.json",
    ]


def test_nested_manifest_cap_adds_limitation() -> None:
    paths = ["README.md"] + [f"packages/pkg{index:02d}/package.json" for index in range(20)]

    plan = FetchPlanner(max_nested_manifests=3).plan(_tree(paths))

    manifests = plan.by_kind(TaskKind.MANIFEST)
    assert _paths(manifests) == [
        "packages/pkg00/package.json",
        "packages/pkg01/package.json",
        "packages/pkg02/package.json",
    ]
    assert plan.limitations == ["Scanned 3 of 20 nested manifests (closest to the project root)."]


def test_source_samples_prefer_short_paths_and_skip_build_output() -> None:
    tree = _tree(
        [
            "src/index.tsx",
            "src/a.js",
            "src/components/deeply/nested/Widget.vue",
            "dist/bundle.js",
            "build/static/main.js",
            "styles/site.css",
        ]
    )

    plan = FetchPlanner().plan(tree)

    assert _paths(plan.by_kind(TaskKind.SOURCE_SAMPLE)) == [
        "src/a.js",
        "src/index.tsx",
        "src/components/deeply/nested/Widget.vue",
    ]


def test_source_sample_cap_adds_limitation() -> None:
    paths = ["README.md"] + [f"src/module{index:02d}.ts" for index in range(30)]

    plan = FetchPlanner(max_source_samples=50).plan(_tree(paths))

    assert len(plan.by_kind(TaskKind.SOURCE_SAMPLE)) == 20
    assert plan.limitations == ["Sampled 20 of 30 source files (shortest paths first)."]


def test_dispatcher_reads_physical_paths_in_plan_order() -> None:
    files = {
        "proj/package.json": "{}",
        "proj/src/a.js": "fetch('/a');",
        "proj/src/b.js": "fetch('/b');",
    }
    source = MemorySource(files, tree=tree_from_files(list(files), directories=False))
    tree = discover(source.get_tree("main"), default_branch="main")
    plan = FetchPlanner().plan(tree)

    outcomes = FetchDispatcher(source, tree, max_workers=3).fetch(plan.tasks)

    assert [outcome.task.logical_path for outcome in outcomes] == [
        "package.json",
        "src/a.js",
        "src/b.js",
    ]
    assert sorted(source.reads) == ["proj/package.json", "proj/src/a.js", "proj/src/b.js"]
    assert outcomes[1].content == "fetch('/a');"


def test_dispatcher_settles_every_read() -> None:
    source = MemorySource(
        {"README.md": "# x", "src/a.js": "a", "src/b.js": "b", "src/c.js": "c"},
        failing=["src/b.js"],
    )
    tree = discover(source.get_tree("main"), default_branch="main")
    tasks = [FetchTask(path, TaskKind.SOURCE_SAMPLE) for path in ("src/a.js", "src/b.js", "src/c.js")]

    outcomes = FetchDispatcher(source, tree).fetch(tasks)

    assert [outcome.content for outcome in outcomes] == ["a", None, "c"]
    assert outcomes[1].error is not None
    assert "connection reset" in outcomes[1].error


class _CancellingSource(MemorySource):
    """Signals cancellation from inside the first read."""

    def __init__(self, cancel: threading.Event) -> None:
        super().__init__({"README.md": "# x", "src/a.js": "a", "src/b.js": "b"})
        self.cancel = cancel

    def read_file(self, path: str, *, branch: str, degraded: bool = False) -> Optional[str]:
        self.cancel.set()
        return super().read_file(path, branch=branch, degraded=degraded)


def test_dispatcher_stops_when_cancelled() -> None:
    cancel = threading.Event()
    source = _CancellingSource(cancel)
    tree = discover(source.get_tree("main"), default_branch="main")
    tasks = [FetchTask("src/a.js", TaskKind.SOURCE_SAMPLE), FetchTask("src/b.js", TaskKind.SOURCE_SAMPLE)]

    with pytest.raises(AnalysisCancelled):
        FetchDispatcher(source, tree, max_workers=1).fetch(tasks, cancel=cancel)
