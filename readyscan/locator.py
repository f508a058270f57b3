"""Resolution of user input into a :class:`ProjectLocator`."""

from __future__ import annotations

import re
from pathlib import Path

from .errors import LocatorInvalid
from .models import ProjectLocator, SourceKind

_GITHUB_URL = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/(?P<owner>[\w.-]+)/(?P<name>[\w.-]+?)"
    r"(?:\.git)?(?:/tree/(?P<branch>[^?#]+?))?/?(?:[?#].*)?$",
    re.IGNORECASE,
)
_SHORTHAND = re.compile(r"^(?P<owner>[\w.-]+)/(?P<name>[\w.-]+?)(?:\.git)?(?:@(?P<branch>[\w./-]+))?$")


def resolve_locator(target: str) -> ProjectLocator:
    """Return a locator for a GitHub URL, ``owner/name[@branch]`` or a local directory.

    An existing path on disk always wins over the shorthand form.
    """
    cleaned = (target or "").strip()
    if not cleaned:
        raise LocatorInvalid("No project given. Provide a GitHub URL, owner/name, or a directory.")

    candidate = Path(cleaned).expanduser()
    if candidate.exists():
        if not candidate.is_dir():
            raise LocatorInvalid(f"Local project path is not a directory: {cleaned}")
        return ProjectLocator(kind=SourceKind.LOCAL, root=str(candidate.resolve()))

    match = _GITHUB_URL.match(cleaned) or _SHORTHAND.match(cleaned)
    if match:
        return ProjectLocator(
            kind=SourceKind.REMOTE,
            owner=match.group("owner"),
            name=match.group("name"),
            branch=match.group("branch") or None,
        )

    raise LocatorInvalid(f"Could not resolve '{cleaned}' to a GitHub repository or local directory")


__all__ = ["resolve_locator"]
