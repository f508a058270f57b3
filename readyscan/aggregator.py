"""Evidence aggregation against the rule table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from .models import (
    DependencySet,
    Evidence,
    EvidenceSource,
    OfflineSignalTally,
    Signal,
    SignalCategory,
)
from .rules import DEFAULT_RULE_TABLE, RuleTable

_EVIDENCE_SOURCE = {
    SignalCategory.STRUCTURE: EvidenceSource.STRUCTURAL,
    SignalCategory.HOSTING: EvidenceSource.CONFIG,
    SignalCategory.GENERIC_NETWORK: EvidenceSource.CODE_PATTERN,
    SignalCategory.HARDCODED_API: EvidenceSource.CODE_PATTERN,
}


@dataclass
class Aggregate:
    evidence: List[Evidence] = field(default_factory=list)
    offline_signals: List[Signal] = field(default_factory=list)
    tally: OfflineSignalTally = field(default_factory=OfflineSignalTally)


class EvidenceAggregator:
    """Turns signals and dependency identifiers into evidence items.

    Signals keep the order they were extracted in; dependency evidence
    follows in sorted identifier order, one item per identifier.
    """

    def __init__(self, rules: RuleTable | None = None) -> None:
        self.rules = rules or DEFAULT_RULE_TABLE

    def aggregate(self, signals: Iterable[Signal], dependencies: DependencySet) -> Aggregate:
        result = Aggregate()

        for signal in signals:
            if signal.category.is_offline:
                result.offline_signals.append(signal)
                continue
            result.evidence.append(self._signal_evidence(signal))

        for identifier in dependencies:
            manifest = dependencies.primary_source(identifier)
            rule = self.rules.lookup_dependency(identifier)
            if rule is not None:
                result.evidence.append(
                    Evidence(
                        source=EvidenceSource.DEPENDENCY,
                        signal=f"Dep: {identifier}",
                        risk_level=rule.risk_level,
                        category=rule.category,
                        failure_mode=rule.failure_mode,
                        file=manifest,
                        rationale=rule.rationale,
                        rule_key=identifier,
                    )
                )
            for category in self.rules.offline_categories(identifier):
                result.offline_signals.append(
                    Signal(
                        category=category,
                        file=manifest or identifier,
                        line=None,
                        matched_text=identifier,
                        label=f"Dependency {identifier}",
                    )
                )

        result.tally = tally_offline(result.offline_signals)
        return result

    def _signal_evidence(self, signal: Signal) -> Evidence:
        rule = self.rules.signal_rule(signal.rule_key) if signal.rule_key else None
        risk_level = signal.risk_level or (rule.risk_level if rule else None)
        if risk_level is None:
            raise ValueError(f"Signal {signal.label or signal.category.value} carries no risk level")
        return Evidence(
            source=_EVIDENCE_SOURCE[signal.category],
            signal=signal.label or signal.matched_text,
            risk_level=risk_level,
            category=rule.category if rule else signal.category.value,
            failure_mode=rule.failure_mode if rule else "",
            file=signal.file,
            line=signal.line,
            rationale=rule.rationale if rule else "",
            rule_key=signal.rule_key,
        )


def tally_offline(signals: Iterable[Signal]) -> OfflineSignalTally:
    categories = {signal.category for signal in signals}
    return OfflineSignalTally(
        persistence=SignalCategory.PERSISTENCE in categories,
        caching=SignalCategory.CACHING in categories,
        native=SignalCategory.NATIVE in categories,
        intent=SignalCategory.INTENT in categories,
    )


__all__ = ["Aggregate", "EvidenceAggregator", "tally_offline"]
