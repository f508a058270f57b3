"""Analysis pipeline: discovery, planning, extraction, aggregation, verdict."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Iterable, List, Optional

from .aggregator import EvidenceAggregator
from .classifier import VerdictClassifier
from .config import ReadyScanConfig, load_config
from .discovery import DiscoveredTree, discover
from .errors import AnalysisCancelled
from .extractors import Extractor, default_extractors
from .locator import resolve_locator
from .logging import get_logger
from .models import DependencySet, Report, Signal
from .planner import FetchDispatcher, FetchOutcome, FetchPlanner
from .rules import RuleTable, load_rule_table
from .sources import ContentSource, build_source

INSUFFICIENT_SIGNAL = (
    "Insufficient signal: no recognized manifests, configuration files, or source patterns were found."
)


class ReadinessEngine:
    """Runs one evidence-traced readiness analysis per call."""

    def __init__(
        self,
        config: ReadyScanConfig | None = None,
        *,
        rules: RuleTable | None = None,
        extractors: Optional[Iterable[Extractor]] = None,
        planner: FetchPlanner | None = None,
        classifier: VerdictClassifier | None = None,
    ) -> None:
        self.config = config or ReadyScanConfig(root=Path.cwd())
        self.rules = rules or load_rule_table(self.config.rules.extra_rules)
        self.extractors = list(extractors) if extractors is not None else default_extractors()
        self.planner = planner or FetchPlanner(
            max_nested_manifests=self.config.scan.max_nested_manifests,
            max_source_samples=self.config.scan.max_source_samples,
        )
        self.aggregator = EvidenceAggregator(self.rules)
        self.classifier = classifier or VerdictClassifier(
            persistence_implies_sync=self.config.policy.persistence_implies_sync
        )
        self.logger = get_logger("engine")

    def analyze_target(self, target: str, *, cancel: threading.Event | None = None) -> Report:
        """Resolve ``target`` and analyze it. Invalid locators fail before any fetch."""
        locator = resolve_locator(target)
        source = build_source(locator, self.config)
        return self.analyze(source, cancel=cancel)

    def analyze(self, source: ContentSource, *, cancel: threading.Event | None = None) -> Report:
        metadata = source.get_project_metadata()
        self.logger.info("Analyzing %s (branch %s)", metadata.display_name, metadata.default_branch)
        _check_cancel(cancel)

        raw_tree = source.get_tree(metadata.default_branch)
        _check_cancel(cancel)
        tree = discover(
            raw_tree,
            default_branch=metadata.default_branch,
            metadata_degraded=metadata.degraded,
        )
        limitations: List[str] = []
        if tree.degraded:
            self.logger.warning(
                "Switching to blind scan of fixed candidates (%s)", tree.context.degraded_reason
            )
            limitations.append(
                f"Degraded scan ({tree.context.degraded_reason}): fixed candidate files were read "
                "blindly and existence could not be verified."
            )
        if tree.context.path_prefix:
            limitations.append(f"Auto-unwrapped folder: {tree.context.path_prefix}")

        plan = self.planner.plan(tree)
        limitations.extend(plan.limitations)
        self.logger.debug("Planned %d tasks", len(plan.tasks))

        dispatcher = FetchDispatcher(source, tree, max_workers=self.config.scan.max_workers)
        outcomes = dispatcher.fetch(plan.tasks, cancel=cancel)
        _check_cancel(cancel)

        signals, dependencies = self._extract(outcomes, limitations)
        aggregate = self.aggregator.aggregate(signals, dependencies)
        classification = self.classifier.classify(
            aggregate.evidence, aggregate.tally, has_dependencies=bool(dependencies)
        )
        read_failed = any(outcome.error is not None for outcome in outcomes)
        if not (classification.evidence or aggregate.offline_signals or dependencies or read_failed):
            limitations.append(INSUFFICIENT_SIGNAL)

        self.logger.info(
            "Verdict %s, offline %s, %d evidence items",
            classification.verdict.value,
            classification.offline_status.value,
            len(classification.evidence),
        )
        return Report(
            verdict=classification.verdict,
            architecture=classification.architecture,
            offline_status=classification.offline_status,
            offline_reason=classification.offline_reason,
            evidence=classification.evidence,
            offline_signals=tuple(aggregate.offline_signals),
            limitations=tuple(limitations),
            project=_project_info(source, metadata.display_name, tree),
        )

    def _extract(
        self, outcomes: Iterable[FetchOutcome], limitations: List[str]
    ) -> tuple[List[Signal], DependencySet]:
        signals: List[Signal] = []
        dependencies = DependencySet()
        for outcome in outcomes:
            task = outcome.task
            if outcome.error is not None:
                limitations.append(
                    f"Read failed for {task.logical_path} ({outcome.error}); it contributed no evidence."
                )
                continue
            if task.requires_read and outcome.content is None:
                continue
            for extractor in self.extractors:
                if not extractor.supports(task):
                    continue
                extraction = extractor.extract(task, outcome.content)
                signals.extend(extraction.signals)
                dependencies.update(extraction.dependencies, task.logical_path)
                limitations.extend(extraction.limitations)
        return signals, dependencies


def _check_cancel(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise AnalysisCancelled("Analysis cancelled by caller")


def _project_info(source: ContentSource, display_name: str, tree: DiscoveredTree) -> dict[str, object]:
    return {
        "name": display_name,
        "source": source.kind,
        "branch": tree.context.default_branch,
        "degraded": tree.degraded,
        "pathPrefix": tree.context.path_prefix,
    }


def analyze_target(
    target: str,
    *,
    config_path: Path | None = None,
    cancel: threading.Event | None = None,
) -> Report:
    """Convenience wrapper: load configuration and analyze ``target``."""
    config = load_config(config_path)
    return ReadinessEngine(config).analyze_target(target, cancel=cancel)


__all__ = ["INSUFFICIENT_SIGNAL", "ReadinessEngine", "analyze_target"]
