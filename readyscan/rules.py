"""Static risk rules and the offline-capability vocabulary.

Every finding the tool reports is backed by an entry here. Identifiers absent
from the table are ignored; the tool never guesses risk for an unknown
dependency.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

import yaml

from .config import ConfigError
from .models import RiskLevel, SignalCategory

GENERIC_NETWORK = "generic-network"
HARDCODED_API = "hardcoded-api"
HOSTING_CONFIG = "hosting-config"
STRUCTURE = "structure"

SYNTHETIC_KEYS = frozenset({GENERIC_NETWORK, HARDCODED_API, HOSTING_CONFIG, STRUCTURE})

CRITICAL_INFRASTRUCTURE = "Critical Infrastructure"


@dataclass(frozen=True)
class RiskRule:
    category: str
    risk_level: RiskLevel
    rationale: str
    failure_mode: str


def _rule(category: str, risk: str, rationale: str, failure_mode: str) -> RiskRule:
    return RiskRule(
        category=category,
        risk_level=RiskLevel(risk),
        rationale=rationale,
        failure_mode=failure_mode,
    )


_BUILTIN_RULES: Dict[str, RiskRule] = {
    # synthetic signal identifiers
    GENERIC_NETWORK: _rule(
        "External Service",
        "Medium",
        "Generic HTTP client detected (fetch/axios).",
        "Project makes network calls. Centralization unknown without runtime verification.",
    ),
    HARDCODED_API: _rule(
        "Hardcoded API",
        "Medium",
        "Source references a hostname owned by a centralized provider.",
        "Features backed by this endpoint stop working if the provider blocks or retires it.",
    ),
    HOSTING_CONFIG: _rule(
        "Hosting Dependency",
        "Medium",
        "Platform specific hosting configuration.",
        "Deployment is tied to a hosting platform; moving requires re-creating its configuration.",
    ),
    STRUCTURE: _rule(
        "Structure",
        "Medium",
        "Project layout implies a specific server or platform stack.",
        "Runtime requirements follow from the detected stack; verify before self-hosting.",
    ),
    # proprietary backends
    "firebase": _rule(
        CRITICAL_INFRASTRUCTURE,
        "High",
        "Relies on Google-hosted proprietary backend services (Auth/DB/Hosting).",
        "If Google limits the project or the service goes down, the application completely stops working.",
    ),
    "@firebase/app": _rule(
        CRITICAL_INFRASTRUCTURE,
        "High",
        "Core Firebase SDK detected.",
        "Centralized backend dependency. Single point of failure.",
    ),
    "firebase-admin": _rule(
        CRITICAL_INFRASTRUCTURE,
        "High",
        "Firebase Admin SDK implies a Firebase-hosted backend.",
        "Server logic is bound to Google-hosted services.",
    ),
    "firebase-tools": _rule(
        CRITICAL_INFRASTRUCTURE,
        "High",
        "Firebase CLI indicates deployment and management via Firebase.",
        "Infrastructure-as-code binding to Firebase.",
    ),
    "aws-sdk": _rule(
        CRITICAL_INFRASTRUCTURE,
        "High",
        "Hard dependency on Amazon Web Services.",
        "Vendor lock-in. Migration requires rewriting core logic.",
    ),
    "boto3": _rule(
        CRITICAL_INFRASTRUCTURE,
        "High",
        "Hard dependency on Amazon Web Services (Python SDK).",
        "Vendor lock-in. Migration requires rewriting core logic.",
    ),
    "contentful": _rule(
        CRITICAL_INFRASTRUCTURE,
        "High",
        "Headless CMS hosted by Contentful.",
        "Content vanishes if the API fails or payment stops.",
    ),
    "sanity": _rule(
        CRITICAL_INFRASTRUCTURE,
        "High",
        "Headless CMS hosted by Sanity.",
        "Content dependency. App is a shell without the remote API.",
    ),
    # traditional always-on servers
    "wordpress-core": _rule(
        "Traditional Server",
        "High",
        "Monolithic PHP server architecture.",
        "Single server (SPoF). If the server crashes, the site is gone.",
    ),
    "laravel/framework": _rule(
        "Traditional Server",
        "High",
        "PHP backend framework.",
        "Requires an always-on trusted server.",
    ),
    "django": _rule(
        "Traditional Server",
        "High",
        "Python backend framework.",
        "Centralized logic and database. Not distributed.",
    ),
    "express": _rule(
        "Traditional Server",
        "High",
        "Node.js backend framework.",
        "Implies a centralized server API.",
    ),
    # hosting platforms
    "vercel.json": _rule(
        "Hosting Dependency",
        "Medium",
        "Optimized for the Vercel cloud platform.",
        "Project likely relies on Vercel-specific serverless functions. (Check if dev-only)",
    ),
    "netlify.toml": _rule(
        "Hosting Dependency",
        "Medium",
        "Optimized for the Netlify cloud platform.",
        "Project likely relies on Netlify-specific redirects or forms. (Check if dev-only)",
    ),
    # identity providers
    "@auth0/auth0-react": _rule(
        "Identity Dependency",
        "High",
        "Identity as a Service (Auth0).",
        "Users cannot log in if Auth0 is down. Identity data is not owned by the user.",
    ),
    "@clerk/clerk-react": _rule(
        "Identity Dependency",
        "High",
        "Proprietary auth provider.",
        "User identity siloed in Clerk servers.",
    ),
    "@supabase/supabase-js": _rule(
        "Data Dependency",
        "Medium",
        "Supabase (managed Postgres/Auth).",
        "Open-source compatible but usually deployed as a hosted monolith; migration is non-trivial.",
    ),
    # operational
    "react-ga": _rule(
        "Operational",
        "Medium",
        "Google Analytics.",
        "Privacy leak. Does not usually break core functionality if blocked.",
    ),
    "mixpanel-browser": _rule(
        "Operational",
        "Medium",
        "Mixpanel tracking.",
        "User surveillance. Non-critical for uptime.",
    ),
}

_BUILTIN_OFFLINE_VOCABULARY: Dict[SignalCategory, Tuple[str, ...]] = {
    SignalCategory.PERSISTENCE: (
        "indexeddb",
        "idb",
        "localforage",
        "dexie",
        "rxdb",
        "pouchdb",
        "watermelondb",
        "@nozbe/watermelondb",
        "sqlite-wasm",
        "@sqlite.org/sqlite-wasm",
        "absurd-sql",
    ),
    SignalCategory.CACHING: (
        "serviceworker",
        "sw-precache",
        "workbox",
        "workbox-window",
        "workbox-precaching",
        "vite-plugin-pwa",
        "next-pwa",
        "caches.open",
    ),
    SignalCategory.INTENT: (
        "navigator.online",
        'window.addeventlistener("offline")',
        "backgroundsync",
        "periodicsync",
    ),
    SignalCategory.NATIVE: (
        "tauri",
        "@tauri-apps/api",
        "electron",
        "electron-store",
        "react-native-fs",
        "capacitor",
        "@capacitor/core",
        "cordova",
    ),
}


class RuleTable:
    """Immutable lookup of risk rules and offline vocabulary."""

    def __init__(
        self,
        rules: Mapping[str, RiskRule],
        offline_vocabulary: Mapping[SignalCategory, Iterable[str]],
    ) -> None:
        self._rules: Mapping[str, RiskRule] = MappingProxyType(dict(rules))
        self._offline: Mapping[SignalCategory, frozenset[str]] = MappingProxyType(
            {category: frozenset(term.lower() for term in terms) for category, terms in offline_vocabulary.items()}
        )

    @property
    def rules(self) -> Mapping[str, RiskRule]:
        return self._rules

    def lookup(self, key: str) -> Optional[RiskRule]:
        return self._rules.get(key)

    def lookup_dependency(self, identifier: str) -> Optional[RiskRule]:
        if identifier in SYNTHETIC_KEYS:
            return None
        return self._rules.get(identifier)

    def signal_rule(self, key: str) -> RiskRule:
        return self._rules[key]

    def offline_categories(self, identifier: str) -> Tuple[SignalCategory, ...]:
        lowered = identifier.lower()
        return tuple(
            category for category, terms in self._offline.items() if lowered in terms
        )


def load_rule_table(extra_rules: Path | None = None) -> RuleTable:
    """Build the rule table once, merging an optional YAML extension file.

    The extension maps identifiers to ``category``, ``risk_level``,
    ``rationale`` and ``failure_mode``. An ``offline`` key may extend the
    vocabulary lists.
    """
    rules = dict(_BUILTIN_RULES)
    vocabulary: Dict[SignalCategory, Tuple[str, ...]] = dict(_BUILTIN_OFFLINE_VOCABULARY)

    if extra_rules is not None:
        try:
            loaded = yaml.safe_load(extra_rules.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Failed to load extra rules from {extra_rules}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigError(f"{extra_rules.name} must contain a mapping at the root")

        offline = loaded.pop("offline", None) or {}
        if not isinstance(offline, dict):
            raise ConfigError("'offline' must map categories to identifier lists")
        for name, terms in offline.items():
            try:
                category = SignalCategory(str(name).lower())
            except ValueError as exc:
                raise ConfigError(f"Unknown offline category '{name}'") from exc
            if not category.is_offline or not isinstance(terms, list):
                raise ConfigError(f"Invalid offline vocabulary entry '{name}'")
            vocabulary[category] = vocabulary.get(category, ()) + tuple(str(term) for term in terms)

        for key, entry in loaded.items():
            rules[str(key)] = _parse_rule(str(key), entry)

    return RuleTable(rules, vocabulary)


def _parse_rule(key: str, entry: object) -> RiskRule:
    if not isinstance(entry, dict):
        raise ConfigError(f"Rule '{key}' must be a mapping")
    try:
        return _rule(
            str(entry["category"]),
            str(entry["risk_level"]),
            str(entry.get("rationale", "")),
            str(entry["failure_mode"]),
        )
    except KeyError as exc:
        raise ConfigError(f"Rule '{key}' is missing field {exc}") from exc
    except ValueError as exc:
        raise ConfigError(f"Rule '{key}' has an invalid risk_level (expected High or Medium)") from exc


DEFAULT_RULE_TABLE = load_rule_table()

__all__ = [
    "CRITICAL_INFRASTRUCTURE",
    "DEFAULT_RULE_TABLE",
    "GENERIC_NETWORK",
    "HARDCODED_API",
    "HOSTING_CONFIG",
    "RiskRule",
    "RuleTable",
    "STRUCTURE",
    "load_rule_table",
]
