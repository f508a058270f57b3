"""Base classes for signal extractors."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import FetchTask, Signal


@dataclass
class Extraction:
    """Everything one extractor learned from one planned task."""

    signals: List[Signal] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    limitations: List[str] = field(default_factory=list)


class Extractor(ABC):
    """Contract for stateless extractors that turn one file into signals."""

    name: str = "extractor"

    @abstractmethod
    def supports(self, task: FetchTask) -> bool:
        """Return True when this extractor should see the task's content."""

    @abstractmethod
    def extract(self, task: FetchTask, content: Optional[str]) -> Extraction:
        """Produce signals and dependency identifiers for a single file."""
