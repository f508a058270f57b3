"""Deterministic decentralization-readiness audits for software projects."""

__version__ = "0.3.0"

from .engine import ReadinessEngine, analyze_target  # noqa: E402
from .models import Report  # noqa: E402

__all__ = ["ReadinessEngine", "Report", "analyze_target", "__version__"]
