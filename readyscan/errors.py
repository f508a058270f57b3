"""Error taxonomy shared by sources, extractors and the engine.

Only :class:`LocatorInvalid` and :class:`SourceUnavailable` end a run. The
remaining errors are raised close to where they happen and converted into
report limitations by the component that owns the affected read.
"""

from __future__ import annotations


class ReadyScanError(RuntimeError):
    """Base class for readyscan failures."""


class NotFound(ReadyScanError):
    """A specific path does not exist in the project."""


class AccessThrottled(ReadyScanError):
    """The hosting provider refused the request because of rate limiting."""


class ParseFailure(ReadyScanError):
    """A dependency manifest could not be decoded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Could not parse manifest {path}: {reason}")
        self.path = path
        self.reason = reason


class LocatorInvalid(ReadyScanError):
    """The input could not be resolved to a project."""


class SourceUnavailable(ReadyScanError):
    """The project or local root could not be reached at all."""


class AnalysisCancelled(ReadyScanError):
    """The caller abandoned the run; partial results are discarded."""


__all__ = [
    "AccessThrottled",
    "AnalysisCancelled",
    "LocatorInvalid",
    "NotFound",
    "ParseFailure",
    "ReadyScanError",
    "SourceUnavailable",
]
