"""GitHub-backed content source (REST API for metadata and tree, raw host for files)."""

from __future__ import annotations

import json
from typing import Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from ..config import RemoteConfig
from ..errors import AccessThrottled, NotFound, ReadyScanError, SourceUnavailable
from ..logging import get_logger
from ..models import EntryKind, ProjectLocator, ProjectMetadata, TreeEntry
from .base import ContentSource

# Branch assumed when metadata is throttled; older repositories default to it.
THROTTLED_DEFAULT_BRANCH = "master"
_FALLBACK_BRANCHES = ("main", "master")
_THROTTLE_STATUSES = {403, 429}


class GitHubSource(ContentSource):
    """Reads a hosted repository without cloning it.

    Throttling never fails the run: metadata falls back to a conservative
    branch with ``degraded=True`` and the tree comes back as ``None``.
    """

    kind = "remote"

    def __init__(self, locator: ProjectLocator, config: RemoteConfig | None = None) -> None:
        if not locator.owner or not locator.name:
            raise ValueError("GitHubSource requires an owner/name locator")
        self.locator = locator
        self.config = config or RemoteConfig()
        self.logger = get_logger("sources.github")

    @property
    def _repo_path(self) -> str:
        return f"{quote(self.locator.owner or '')}/{quote(self.locator.name or '')}"

    def get_project_metadata(self) -> ProjectMetadata:
        url = f"{self.config.api_base}/repos/{self._repo_path}"
        display_name = f"{self.locator.owner}/{self.locator.name}"
        try:
            payload = json.loads(self._fetch(url, accept="application/vnd.github+json"))
        except AccessThrottled:
            self.logger.warning("GitHub API rate limit hit; proceeding with limited analysis")
            return ProjectMetadata(
                display_name=display_name,
                default_branch=self.locator.branch or THROTTLED_DEFAULT_BRANCH,
                degraded=True,
            )
        except NotFound as exc:
            raise SourceUnavailable(f"Repository not found: {display_name}") from exc
        except (ReadyScanError, ValueError) as exc:
            raise SourceUnavailable(f"Unable to reach {display_name}: {exc}") from exc

        branch = self.locator.branch
        if not branch and isinstance(payload, dict):
            default_branch = payload.get("default_branch")
            branch = default_branch if isinstance(default_branch, str) and default_branch else None
        full_name = payload.get("full_name") if isinstance(payload, dict) else None
        return ProjectMetadata(
            display_name=full_name if isinstance(full_name, str) else display_name,
            default_branch=branch or "main",
        )

    def get_tree(self, branch: str) -> Optional[List[TreeEntry]]:
        url = (
            f"{self.config.api_base}/repos/{self._repo_path}/git/trees/"
            f"{quote(branch, safe='')}?recursive=1"
        )
        try:
            payload = json.loads(self._fetch(url, accept="application/vnd.github+json"))
        except AccessThrottled:
            self.logger.warning("GitHub API rate limit hit while listing the tree")
            return None
        except (ReadyScanError, ValueError) as exc:
            self.logger.warning("Tree listing failed for %s: %s", branch, exc)
            return None

        if not isinstance(payload, dict) or not isinstance(payload.get("tree"), list):
            return None
        if payload.get("truncated"):
            self.logger.warning("GitHub truncated the tree listing; deep paths may be missing")

        entries: List[TreeEntry] = []
        for node in payload["tree"]:
            if not isinstance(node, dict) or not isinstance(node.get("path"), str):
                continue
            node_type = node.get("type")
            if node_type == "blob":
                entries.append(TreeEntry(path=node["path"], kind=EntryKind.FILE))
            elif node_type == "tree":
                entries.append(TreeEntry(path=node["path"], kind=EntryKind.DIRECTORY))
        return entries

    def read_file(self, path: str, *, branch: str, degraded: bool = False) -> Optional[str]:
        """Return the file text, or None when every tried branch answers 404.

        Throttling or transport failures are raised after all branches were
        tried so the caller can record them.
        """
        branches: List[str] = [branch]
        if degraded:
            branches.extend(b for b in _FALLBACK_BRANCHES if b not in branches)

        encoded_path = quote(path)
        failure: Optional[ReadyScanError] = None
        for candidate in branches:
            url = f"{self.config.raw_base}/{self._repo_path}/{quote(candidate, safe='')}/{encoded_path}"
            try:
                raw = self._fetch(url)
            except NotFound:
                continue
            except ReadyScanError as exc:
                self.logger.debug("Raw read of %s@%s failed: %s", path, candidate, exc)
                failure = exc
                continue
            return raw.decode("utf-8", errors="replace")
        if failure is not None:
            raise failure
        return None

    def _headers(self, accept: str | None) -> Dict[str, str]:
        headers = {"User-Agent": "readyscan"}
        if accept:
            headers["Accept"] = accept
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        return headers

    def _fetch(self, url: str, *, accept: str | None = None) -> bytes:
        request = Request(url, headers=self._headers(accept), method="GET")
        try:
            with urlopen(request, timeout=self.config.timeout) as response:  # type: ignore[arg-type]
                return response.read()
        except HTTPError as exc:
            if exc.code == 404:
                raise NotFound(url) from exc
            if exc.code in _THROTTLE_STATUSES:
                raise AccessThrottled(f"HTTP {exc.code} from {url}") from exc
            raise ReadyScanError(f"HTTP {exc.code} from {url}: {exc.reason}") from exc
        except URLError as exc:
            raise ReadyScanError(f"Request to {url} failed: {exc.reason}") from exc
        except OSError as exc:
            raise ReadyScanError(f"Request to {url} failed: {exc}") from exc


__all__ = ["GitHubSource", "THROTTLED_DEFAULT_BRANCH"]
