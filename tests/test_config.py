"""Tests for readyscan.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from readyscan.config import (
    MAX_NESTED_MANIFESTS,
    MAX_SOURCE_SAMPLES,
    ConfigError,
    ReadyScanConfig,
    load_config,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={})

    assert isinstance(config, ReadyScanConfig)
    assert config.root == tmp_path.resolve()
    assert config.scan.max_nested_manifests == MAX_NESTED_MANIFESTS
    assert config.scan.max_source_samples == MAX_SOURCE_SAMPLES
    assert config.scan.max_workers == 8
    assert config.scan.exclude_dirs == []
    assert config.remote.api_base == "https://api.github.com"
    assert config.remote.raw_base == "https://raw.githubusercontent.com"
    assert config.remote.token is None
    assert config.policy.persistence_implies_sync is True
    assert config.rules.extra_rules is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".readyscan.yml"
    config_file.write_text(
        """
scan:
  max_nested_manifests: 5
  max_source_samples: 10
  max_workers: 2
  exclude_dirs:
    - "generated"
    - "third_party"
remote:
  api_base: "https://github.example.com/api/v3/"
  raw_base: "https://raw.example.com"
  token: "file-token"
  timeout: 30
policy:
  persistence_implies_sync: false
rules:
  extra_rules: "rules/extra.yml"
""",
        encoding="utf-8",
    )

    config = load_config(config_file, environ={})

    assert config.scan.max_nested_manifests == 5
    assert config.scan.max_source_samples == 10
    assert config.scan.max_workers == 2
    assert config.scan.exclude_dirs == ["generated", "third_party"]
    assert config.remote.api_base == "https://github.example.com/api/v3"
    assert config.remote.raw_base == "https://raw.example.com"
    assert config.remote.token == "file-token"
    assert config.remote.timeout == pytest.approx(30.0)
    assert config.policy.persistence_implies_sync is False
    assert config.rules.extra_rules == tmp_path.resolve() / "rules" / "extra.yml"


def test_limits_cannot_exceed_ceilings(tmp_path: Path) -> None:
    (tmp_path / ".readyscan.yml").write_text(
        "scan:\n  max_nested_manifests: 500\n  max_source_samples: -3\n",
        encoding="utf-8",
    )

    config = load_config(tmp_path, environ={})

    assert config.scan.max_nested_manifests == MAX_NESTED_MANIFESTS
    assert config.scan.max_source_samples == 0


def test_environment_token_overrides_file(tmp_path: Path) -> None:
    (tmp_path / ".readyscan.yml").write_text("remote:\n  token: from-file\n", encoding="utf-8")

    config = load_config(tmp_path, environ={"GITHUB_TOKEN": "from-env"})

    assert config.remote.token == "from-env"


def test_specific_token_variable_wins(tmp_path: Path) -> None:
    config = load_config(
        tmp_path,
        environ={"GITHUB_TOKEN": "generic", "READYSCAN_GITHUB_TOKEN": "specific"},
    )

    assert config.remote.token == "specific"


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".readyscan.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path, environ={})

    assert config.scan.max_source_samples == MAX_SOURCE_SAMPLES


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".readyscan.yml").write_text("scan: [unterminated\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


def test_non_mapping_root_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".readyscan.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_path, environ={})
