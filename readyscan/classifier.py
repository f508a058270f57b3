"""Readiness verdict and offline-capability tier."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .models import (
    Evidence,
    EvidenceSource,
    OfflineSignalTally,
    OfflineStatus,
    RiskLevel,
    Verdict,
)
from .rules import CRITICAL_INFRASTRUCTURE

# Local persistence plus unidentified network calls is read as sync behaviour
# rather than centralization. Materially changes verdicts for hybrid apps.
PERSISTENCE_IMPLIES_SYNC = True

ARCHITECTURE_LABELS = {
    "centralized": "Centralized / Server-Required",
    "hybrid": "Hybrid (Client + Services)",
    "local_first": "Decentralized / Local-First (with Sync)",
    "ambiguous": "Ambiguous (Unidentified Network Calls)",
    "client_side": "Decentralized / Client-Side",
    "unknown": "Unknown / Insufficient Evidence",
}

AMBIGUITY_EVIDENCE_SIGNAL = "Ambiguity"


@dataclass(frozen=True)
class Classification:
    verdict: Verdict
    architecture: str
    offline_status: OfflineStatus
    offline_reason: str
    evidence: Tuple[Evidence, ...]


class VerdictClassifier:
    """Reduces evidence and the offline tally to the two report axes.

    High-risk evidence vetoes both axes. The generic network signal alone
    never produces a Medium or Low verdict.
    """

    def __init__(self, *, persistence_implies_sync: bool = PERSISTENCE_IMPLIES_SYNC) -> None:
        self.persistence_implies_sync = persistence_implies_sync

    def classify(
        self,
        evidence: Sequence[Evidence],
        tally: OfflineSignalTally,
        *,
        has_dependencies: bool,
    ) -> Classification:
        items: List[Evidence] = list(evidence)
        verdict, architecture = self._readiness(items, tally, has_dependencies)
        if verdict is Verdict.HUMAN_REVIEW:
            items.append(_ambiguity_evidence(evidence))
        offline_status, offline_reason = self._offline_tier(evidence, tally)
        return Classification(
            verdict=verdict,
            architecture=architecture,
            offline_status=offline_status,
            offline_reason=offline_reason,
            evidence=tuple(items),
        )

    def _readiness(
        self, evidence: Sequence[Evidence], tally: OfflineSignalTally, has_dependencies: bool
    ) -> Tuple[Verdict, str]:
        if any(item.risk_level is RiskLevel.HIGH for item in evidence):
            return Verdict.LOW, ARCHITECTURE_LABELS["centralized"]
        if any(item.risk_level is RiskLevel.MEDIUM and not item.is_generic_network for item in evidence):
            return Verdict.MEDIUM, ARCHITECTURE_LABELS["hybrid"]
        if any(item.is_generic_network for item in evidence):
            if tally.persistence and self.persistence_implies_sync:
                return Verdict.HIGH, ARCHITECTURE_LABELS["local_first"]
            return Verdict.HUMAN_REVIEW, ARCHITECTURE_LABELS["ambiguous"]
        if has_dependencies or tally.any:
            return Verdict.HIGH, ARCHITECTURE_LABELS["client_side"]
        return Verdict.UNKNOWN, ARCHITECTURE_LABELS["unknown"]

    @staticmethod
    def _offline_tier(
        evidence: Sequence[Evidence], tally: OfflineSignalTally
    ) -> Tuple[OfflineStatus, str]:
        if any(
            item.category == CRITICAL_INFRASTRUCTURE or item.risk_level is RiskLevel.HIGH
            for item in evidence
        ):
            return OfflineStatus.ONLINE_ONLY, "Critical cloud dependencies prevent offline use."
        if tally.persistence:
            return OfflineStatus.OFFLINE_CAPABLE, "Strong local persistence detected (offline first)."
        if tally.caching or tally.native:
            return (
                OfflineStatus.PARTIALLY_OFFLINE,
                "Caching or native shell detected, but no deep data persistence.",
            )
        return OfflineStatus.ONLINE_ONLY, "No persistence or caching strategy found."


def _ambiguity_evidence(evidence: Sequence[Evidence]) -> Evidence:
    files = sorted({item.file for item in evidence if item.is_generic_network and item.file})
    return Evidence(
        source=EvidenceSource.ANALYZER,
        signal=AMBIGUITY_EVIDENCE_SIGNAL,
        risk_level=RiskLevel.MEDIUM,
        category="Ambiguity",
        failure_mode="Generic network usage (fetch/axios) without an identified endpoint.",
        file=files[0] if len(files) == 1 else "Multiple",
        rationale="Network calls found in: " + ", ".join(files) if files else "",
    )


__all__ = [
    "ARCHITECTURE_LABELS",
    "Classification",
    "PERSISTENCE_IMPLIES_SYNC",
    "VerdictClassifier",
]
