"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from readyscan import cli
from readyscan.cli import _build_parser
from tests._fixtures.repo_builder import RepoBuilder


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "analyze"])
    assert args.verbose is True
    assert args.command == "analyze"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["analyze", "--verbose"])
    assert args.verbose is True
    assert args.command == "analyze"


def test_analyze_defaults() -> None:
    parser = _build_parser()
    args = parser.parse_args(["analyze"])
    assert args.target == "."
    assert args.format == "text"
    assert args.token is None
    assert args.output is None


def test_analyze_rejects_unknown_format() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["analyze", "--format", "yaml"])


def test_serve_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(["serve", "--port", "9000"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 9000


def test_analyze_local_project_prints_json(
    repo_builder: RepoBuilder, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    repo_builder.write({"package.json": '{"dependencies": {"express": "^4.18.0"}}'})
    monkeypatch.chdir(repo_builder.path())

    cli.main(["analyze", str(repo_builder.path()), "--format", "json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["verdict"] == "Low"
    assert payload["project"]["source"] == "local"


def test_analyze_writes_output_file(
    repo_builder: RepoBuilder, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    repo_builder.write({"README.md": "# empty\n"})
    monkeypatch.chdir(repo_builder.path())
    destination = tmp_path / "report.md"

    cli.main(["analyze", ".", "--format", "markdown", "--output", str(destination)])

    assert "Unknown" in destination.read_text(encoding="utf-8")


def test_analyze_invalid_target_exits_with_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["analyze", "definitely not a project"])

    assert excinfo.value.code == 1
    assert "Could not resolve" in capsys.readouterr().err


def test_serve_runs_service(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_run_service(host: str, port: int) -> None:
        captured.update(host=host, port=port)

    monkeypatch.setattr("readyscan.service.run_service", fake_run_service)

    cli.main(["serve", "--host", "0.0.0.0", "--port", "8123"])

    assert captured == {"host": "0.0.0.0", "port": 8123}
