"""Configuration loading for readyscan (.readyscan.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".readyscan.yml"

# Hard ceilings on planned reads; configuration may lower them, never raise them.
MAX_NESTED_MANIFESTS = 15
MAX_SOURCE_SAMPLES = 20

ENV_TOKEN_KEYS = ("READYSCAN_GITHUB_TOKEN", "GITHUB_TOKEN")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ScanConfig:
    """Fetch planning limits and local walk exclusions."""

    max_nested_manifests: int = MAX_NESTED_MANIFESTS
    max_source_samples: int = MAX_SOURCE_SAMPLES
    max_workers: int = 8
    exclude_dirs: List[str] = field(default_factory=list)


@dataclass
class RemoteConfig:
    """Hosting provider endpoints and credentials."""

    api_base: str = "https://api.github.com"
    raw_base: str = "https://raw.githubusercontent.com"
    token: Optional[str] = None
    timeout: float = 15.0


@dataclass
class PolicyConfig:
    """Classification policy switches."""

    persistence_implies_sync: bool = True


@dataclass
class RulesConfig:
    extra_rules: Optional[Path] = None


@dataclass
class ReadyScanConfig:
    """Represents the settings defined in .readyscan.yml."""

    root: Path
    scan: ScanConfig = field(default_factory=ScanConfig)
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)


def load_config(
    config_path: Path | None = None, *, environ: Mapping[str, str] | None = None
) -> ReadyScanConfig:
    """Load configuration from disk, applying environment overrides."""
    env = os.environ if environ is None else environ
    config_file = _resolve_config_path(config_path or Path.cwd())
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    scan_data = _as_dict(data.get("scan"))
    scan = ScanConfig(
        max_nested_manifests=_clamp(
            _as_int(scan_data.get("max_nested_manifests")), MAX_NESTED_MANIFESTS
        ),
        max_source_samples=_clamp(
            _as_int(scan_data.get("max_source_samples")), MAX_SOURCE_SAMPLES
        ),
        max_workers=max(1, _as_int(scan_data.get("max_workers")) or ScanConfig.max_workers),
        exclude_dirs=_as_str_list(scan_data.get("exclude_dirs")),
    )

    remote_data = _as_dict(data.get("remote"))
    remote = RemoteConfig()
    remote.api_base = (_as_str(remote_data.get("api_base")) or remote.api_base).rstrip("/")
    remote.raw_base = (_as_str(remote_data.get("raw_base")) or remote.raw_base).rstrip("/")
    remote.token = _as_str(remote_data.get("token"))
    timeout = _as_float(remote_data.get("timeout"))
    if timeout is not None and timeout > 0:
        remote.timeout = timeout
    for key in ENV_TOKEN_KEYS:
        value = env.get(key)
        if value:
            remote.token = value
            break

    policy_data = _as_dict(data.get("policy"))
    policy = PolicyConfig()
    implies_sync = _as_bool(policy_data.get("persistence_implies_sync"))
    if implies_sync is not None:
        policy.persistence_implies_sync = implies_sync

    rules_data = _as_dict(data.get("rules"))
    extra_rules_str = _as_str(rules_data.get("extra_rules"))
    rules = RulesConfig(extra_rules=root / extra_rules_str if extra_rules_str else None)

    return ReadyScanConfig(root=root, scan=scan, remote=remote, policy=policy, rules=rules)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _clamp(value: Optional[int], ceiling: int) -> int:
    if value is None:
        return ceiling
    return max(0, min(value, ceiling))


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []
