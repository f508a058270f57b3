"""Shared helpers for extractor implementations."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterator, List, Pattern, Tuple

from ..errors import ParseFailure

_REQUIREMENT_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*")


def line_number(text: str, offset: int) -> int:
    """Return the 1-based line containing ``offset``."""
    return text.count("\n", 0, offset) + 1


def iter_matches(pattern: Pattern[str], text: str) -> Iterator[Tuple[str, int]]:
    """Yield ``(matched_text, line)`` for every match of ``pattern``."""
    for match in pattern.finditer(text):
        yield match.group(0), line_number(text, match.start())


def basename(path: str) -> str:
    return path.rsplit("/", 1)[-1]


# Node.js


def _load_json_object(text: str, path: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseFailure(path, exc.msg) from exc
    if not isinstance(data, dict):
        raise ParseFailure(path, "expected a JSON object at the root")
    return data


def _mapping_keys(data: Dict[str, Any], *keys: str) -> List[str]:
    names: List[str] = []
    for key in keys:
        section = data.get(key)
        if isinstance(section, dict):
            names.extend(str(name) for name in section.keys())
    return names


def parse_node_manifest(text: str, path: str) -> Tuple[List[str], str]:
    """Return dependency names and the serialized ``scripts`` block."""
    data = _load_json_object(text, path)
    scripts = data.get("scripts")
    scripts_text = json.dumps(scripts, sort_keys=True) if isinstance(scripts, dict) else ""
    return _mapping_keys(data, "dependencies", "devDependencies"), scripts_text


# PHP


def parse_composer_manifest(text: str, path: str) -> List[str]:
    data = _load_json_object(text, path)
    return [
        name
        for name in _mapping_keys(data, "require", "require-dev")
        if name != "php" and not name.startswith("ext-")
    ]


# Python


def parse_requirements(text: str) -> List[str]:
    """Collect package names from a pip requirements file."""
    packages: List[str] = []
    for raw_line in text.splitlines():
        line = raw_line.split(" #", 1)[0].strip()
        if not line or line.startswith(("#", "-")):
            continue
        if "://" in line and "@" not in line:
            continue
        match = _REQUIREMENT_NAME.match(line)
        if match:
            packages.append(match.group(0).lower())
    return packages
