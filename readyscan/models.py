"""Core data models shared across readyscan components."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional, Set, Tuple


class SourceKind(str, Enum):
    REMOTE = "remote"
    LOCAL = "local"


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class TaskKind(str, Enum):
    MANIFEST = "manifest"
    CONFIG = "config"
    STRUCTURAL_ONLY = "structural-only"
    SOURCE_SAMPLE = "source-sample"


class SignalCategory(str, Enum):
    """Raw match categories. The last four feed the offline tally only."""

    STRUCTURE = "structure"
    HOSTING = "hosting"
    GENERIC_NETWORK = "generic-network"
    HARDCODED_API = "hardcoded-api"
    PERSISTENCE = "persistence"
    CACHING = "caching"
    INTENT = "intent"
    NATIVE = "native"

    @property
    def is_offline(self) -> bool:
        return self in _OFFLINE_CATEGORIES


_OFFLINE_CATEGORIES = frozenset(
    {
        SignalCategory.PERSISTENCE,
        SignalCategory.CACHING,
        SignalCategory.INTENT,
        SignalCategory.NATIVE,
    }
)


class RiskLevel(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"


class EvidenceSource(str, Enum):
    STRUCTURAL = "Structural"
    CONFIG = "Config"
    DEPENDENCY = "Dependency"
    CODE_PATTERN = "CodePattern"
    ANALYZER = "Analyzer"


class Verdict(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    HUMAN_REVIEW = "HumanReview"
    UNKNOWN = "Unknown"


class OfflineStatus(str, Enum):
    OFFLINE_CAPABLE = "OfflineCapable"
    PARTIALLY_OFFLINE = "PartiallyOffline"
    ONLINE_ONLY = "OnlineOnly"


@dataclass(frozen=True)
class ProjectLocator:
    """Resolved reference to either a hosted repository or a local directory."""

    kind: SourceKind
    owner: Optional[str] = None
    name: Optional[str] = None
    branch: Optional[str] = None
    root: Optional[str] = None


@dataclass(frozen=True)
class ProjectMetadata:
    """Answer of ``ContentSource.get_project_metadata``."""

    display_name: str
    default_branch: str
    degraded: bool = False


@dataclass(frozen=True)
class TreeEntry:
    path: str
    kind: EntryKind = EntryKind.FILE

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE


@dataclass(frozen=True)
class DiscoveryContext:
    """Per-run discovery state.

    ``degraded`` only ever moves from False to True; use :meth:`degrade`
    to obtain the degraded copy.
    """

    path_prefix: str = ""
    degraded: bool = False
    default_branch: str = "main"
    degraded_reason: Optional[str] = None

    def degrade(self, reason: str) -> "DiscoveryContext":
        if self.degraded:
            return self
        return replace(self, degraded=True, degraded_reason=reason)


@dataclass(frozen=True)
class FetchTask:
    logical_path: str
    kind: TaskKind

    @property
    def requires_read(self) -> bool:
        return self.kind is not TaskKind.STRUCTURAL_ONLY


@dataclass(frozen=True)
class Signal:
    """Raw pattern match produced by exactly one extractor."""

    category: SignalCategory
    file: str
    line: Optional[int]
    matched_text: str
    label: str = ""
    risk_level: Optional[RiskLevel] = None
    rule_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "file": self.file,
            "line": self.line,
            "matchedText": self.matched_text,
        }


class DependencySet:
    """Deduplicated dependency identifiers with the manifests that declared them.

    Membership is a true set. Iteration is sorted so downstream output does
    not depend on the order in which concurrent reads completed.
    """

    def __init__(self) -> None:
        self._sources: Dict[str, Set[str]] = {}

    def add(self, identifier: str, source: str) -> None:
        identifier = identifier.strip()
        if not identifier:
            return
        self._sources.setdefault(identifier, set()).add(source)

    def update(self, identifiers: Iterable[str], source: str) -> None:
        for identifier in identifiers:
            self.add(identifier, source)

    def sources_for(self, identifier: str) -> Tuple[str, ...]:
        return tuple(sorted(self._sources.get(identifier, ())))

    def primary_source(self, identifier: str) -> Optional[str]:
        sources = self.sources_for(identifier)
        return sources[0] if sources else None

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._sources

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._sources))

    def __len__(self) -> int:
        return len(self._sources)

    def __bool__(self) -> bool:
        return bool(self._sources)


@dataclass(frozen=True)
class Evidence:
    """One traceable finding tying a risk to a concrete file or dependency."""

    source: EvidenceSource
    signal: str
    risk_level: RiskLevel
    category: str
    failure_mode: str
    file: Optional[str] = None
    line: Optional[int] = None
    rationale: str = ""
    rule_key: Optional[str] = None

    @property
    def is_generic_network(self) -> bool:
        return self.rule_key == "generic-network"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source.value,
            "signal": self.signal,
            "riskLevel": self.risk_level.value,
            "category": self.category,
            "rationale": self.rationale,
            "failureMode": self.failure_mode,
            "file": self.file,
            "line": self.line,
        }


@dataclass(frozen=True)
class OfflineSignalTally:
    persistence: bool = False
    caching: bool = False
    native: bool = False
    intent: bool = False

    @property
    def any(self) -> bool:
        return self.persistence or self.caching or self.native or self.intent


@dataclass(frozen=True)
class Report:
    """Final, immutable outcome of one analysis run."""

    verdict: Verdict
    architecture: str
    offline_status: OfflineStatus
    offline_reason: str
    evidence: Tuple[Evidence, ...] = ()
    offline_signals: Tuple[Signal, ...] = ()
    limitations: Tuple[str, ...] = ()
    project: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project": dict(self.project),
            "verdict": self.verdict.value,
            "architecture": self.architecture,
            "offlineStatus": self.offline_status.value,
            "offlineReason": self.offline_reason,
            "evidence": [item.to_dict() for item in self.evidence],
            "offlineSignals": [signal.to_dict() for signal in self.offline_signals],
            "limitations": list(self.limitations),
        }
