"""Report rendering for the CLI and service."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Dict, List

from jinja2 import Environment, FileSystemLoader

from .models import Report

_TEMPLATES_DIR = Path(__file__).with_name("templates")


def render_json(report: Report) -> str:
    return json.dumps(report.to_dict(), indent=2) + "\n"


def _table_cell(value: object) -> str:
    """Keep a value inside one markdown table cell."""
    return str(value).replace("|", "\\|").replace("\n", " ")


def _create_env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["cell"] = _table_cell
    return env


def render_markdown(report: Report) -> str:
    template = _create_env().get_template("report.md.j2")
    return template.render(report=report.to_dict())


def render_text(report: Report) -> str:
    data = report.to_dict()
    lines: List[str] = [
        f"Project:      {data['project'].get('name', 'unknown')}",
        f"Verdict:      {data['verdict']} ({data['architecture']})",
        f"Offline tier: {data['offlineStatus']} - {data['offlineReason']}",
        "",
        f"Evidence ({len(data['evidence'])}):",
    ]
    for item in data["evidence"]:
        location = item["file"] or "-"
        if item["line"] is not None:
            location = f"{location}:{item['line']}"
        lines.append(f"  [{item['riskLevel']}] {item['signal']} ({item['category']}) at {location}")
        if item["failureMode"]:
            lines.append(f"      {item['failureMode']}")
    if data["limitations"]:
        lines.append("")
        lines.append("Limitations:")
        lines.extend(f"  - {note}" for note in data["limitations"])
    return "\n".join(lines) + "\n"


RENDERERS: Dict[str, Callable[[Report], str]] = {
    "json": render_json,
    "markdown": render_markdown,
    "text": render_text,
}


def render(report: Report, fmt: str = "json") -> str:
    try:
        renderer = RENDERERS[fmt]
    except KeyError as exc:
        raise ValueError(f"Unknown report format '{fmt}'") from exc
    return renderer(report)


__all__ = ["RENDERERS", "render", "render_json", "render_markdown", "render_text"]
