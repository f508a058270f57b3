"""Dependency manifest extractor."""

from __future__ import annotations

import re
from typing import Optional

from ..errors import ParseFailure
from ..logging import get_logger
from ..models import FetchTask, Signal, SignalCategory, TaskKind
from .base import Extraction, Extractor
from .utils import basename, line_number, parse_composer_manifest, parse_node_manifest, parse_requirements

NODE_MANIFEST = "package.json"
PYTHON_MANIFEST = "requirements.txt"
PHP_MANIFEST = "composer.json"

MANIFEST_FILES = (NODE_MANIFEST, PYTHON_MANIFEST, PHP_MANIFEST)

_NATIVE_SCRIPT = re.compile(r"tauri|electron", re.IGNORECASE)


class ManifestExtractor(Extractor):
    """Reads dependency identifiers from Node, Python and PHP manifests.

    A manifest that cannot be decoded contributes nothing and is reported as
    a limitation.
    """

    name = "manifest"

    def __init__(self) -> None:
        self.logger = get_logger("extractors.manifest")

    def supports(self, task: FetchTask) -> bool:
        return task.kind is TaskKind.MANIFEST and basename(task.logical_path) in MANIFEST_FILES

    def extract(self, task: FetchTask, content: Optional[str]) -> Extraction:
        result = Extraction()
        if content is None:
            return result

        path = task.logical_path
        filename = basename(path)
        try:
            if filename == NODE_MANIFEST:
                dependencies, scripts = parse_node_manifest(content, path)
                result.dependencies.extend(dependencies)
                if scripts:
                    native = _NATIVE_SCRIPT.search(scripts)
                    if native:
                        start = content.find('"scripts"')
                        located = _NATIVE_SCRIPT.search(content, start) if start >= 0 else None
                        result.signals.append(
                            Signal(
                                category=SignalCategory.NATIVE,
                                file=path,
                                line=line_number(content, located.start()) if located else None,
                                matched_text=native.group(0),
                                label=f"Native shell script ({native.group(0)})",
                            )
                        )
            elif filename == PHP_MANIFEST:
                result.dependencies.extend(parse_composer_manifest(content, path))
            elif filename == PYTHON_MANIFEST:
                result.dependencies.extend(parse_requirements(content))
        except ParseFailure as exc:
            self.logger.debug("%s", exc)
            result.limitations.append(f"Could not parse manifest {path}; it contributed no dependencies.")
        return result
