"""Core data models shared across depgroups components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .patterns import matches_pattern

ECOSYSTEM_NPM = "npm"
ECOSYSTEM_PIP = "pip"
ECOSYSTEM_CARGO = "cargo"
ECOSYSTEM_BUNDLER = "bundler"

# Output order for update entries.
ECOSYSTEM_ORDER: Tuple[str, ...] = (
    ECOSYSTEM_NPM,
    ECOSYSTEM_PIP,
    ECOSYSTEM_CARGO,
    ECOSYSTEM_BUNDLER,
)

TIER_FREE = "free"
TIER_PRO = "pro"
TIER_ENTERPRISE = "enterprise"
TIERS: Tuple[str, ...] = (TIER_FREE, TIER_PRO, TIER_ENTERPRISE)


def normalize_tier(value: str) -> str:
    """Return the canonical tier name or raise ``ValueError``."""
    tier = value.strip().lower()
    if tier not in TIERS:
        raise ValueError(f"Unknown tier '{value}' (expected one of: {', '.join(TIERS)})")
    return tier


@dataclass(frozen=True)
class Ecosystem:
    """A package-management domain and the manifests it is read from."""

    id: str
    manifests: Tuple[str, ...]
    label: str
    directory: str = "/"


@dataclass(frozen=True)
class RawDependency:
    """A single dependency declaration found in a manifest."""

    name: str
    constraint: Optional[str]
    source: str
    line: Optional[int] = None


@dataclass(frozen=True)
class FrameworkSignature:
    """Named set of package patterns that indicate a framework or tooling family."""

    ecosystem: str
    framework: str
    category: str
    priority: int
    patterns: Tuple[str, ...]
    core: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DetectedFramework:
    """A signature that matched at least one declared dependency."""

    ecosystem: str
    framework: str
    category: str
    priority: int
    packages: Tuple[str, ...]
    version: Optional[str] = None
    primary: bool = False

    @property
    def count(self) -> int:
        return len(self.packages)


@dataclass
class EcosystemReport:
    """Per-ecosystem detection results."""

    ecosystem: str
    manifest: str
    dependencies: Dict[str, Optional[str]]
    frameworks: Dict[str, DetectedFramework] = field(default_factory=dict)
    primary: Optional[str] = None


@dataclass(frozen=True)
class DependencyGroup:
    """Named batch of package patterns updated together."""

    name: str
    ecosystem: str
    patterns: Tuple[str, ...]
    update_types: Tuple[str, ...]
    exclude_patterns: Tuple[str, ...] = ()
    dependency_type: Optional[str] = None
    packages: Tuple[str, ...] = ()

    def matches(self, package: str) -> bool:
        if not any(matches_pattern(package, pattern) for pattern in self.patterns):
            return False
        return not any(matches_pattern(package, pattern) for pattern in self.exclude_patterns)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"patterns": list(self.patterns)}
        if self.exclude_patterns:
            data["exclude-patterns"] = list(self.exclude_patterns)
        data["update-types"] = list(self.update_types)
        if self.dependency_type:
            data["dependency-type"] = self.dependency_type
        return data


@dataclass(frozen=True)
class Schedule:
    """When update checks run."""

    interval: str = "weekly"
    day: str = "monday"
    time: str = "09:00"

    def to_dict(self) -> Dict[str, str]:
        return {"interval": self.interval, "day": self.day, "time": self.time}


@dataclass(frozen=True)
class UpdateEntry:
    """One ``updates`` item of the monitoring configuration."""

    ecosystem: str
    directory: str
    schedule: Schedule
    labels: Tuple[str, ...]
    commit_prefix: str
    open_pull_requests_limit: Optional[int] = None
    commit_include: Optional[str] = None
    groups: Tuple[DependencyGroup, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "package-ecosystem": self.ecosystem,
            "directory": self.directory,
            "schedule": self.schedule.to_dict(),
        }
        if self.open_pull_requests_limit is not None:
            data["open-pull-requests-limit"] = self.open_pull_requests_limit
        data["labels"] = list(self.labels)
        commit_message: Dict[str, str] = {"prefix": self.commit_prefix}
        if self.commit_include:
            commit_message["include"] = self.commit_include
        data["commit-message"] = commit_message
        if self.groups:
            data["groups"] = {group.name: group.to_dict() for group in self.groups}
        return data


@dataclass(frozen=True)
class MonitoringConfiguration:
    """Automated dependency-update policy handed to the serializer."""

    tier: str
    grouped: bool
    updates: Tuple[UpdateEntry, ...] = ()
    version: int = 2

    @property
    def is_empty(self) -> bool:
        return not self.updates

    def entry_for(self, ecosystem: str) -> Optional[UpdateEntry]:
        for entry in self.updates:
            if entry.ecosystem == ecosystem:
                return entry
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "updates": [entry.to_dict() for entry in self.updates],
        }


ECOSYSTEMS: Mapping[str, Ecosystem] = {
    ECOSYSTEM_NPM: Ecosystem(ECOSYSTEM_NPM, ("package.json",), "npm"),
    ECOSYSTEM_PIP: Ecosystem(
        ECOSYSTEM_PIP, ("requirements.txt", "pyproject.toml"), "python"
    ),
    ECOSYSTEM_CARGO: Ecosystem(ECOSYSTEM_CARGO, ("Cargo.toml",), "rust"),
    ECOSYSTEM_BUNDLER: Ecosystem(ECOSYSTEM_BUNDLER, ("Gemfile",), "ruby"),
}


def dependency_mapping(dependencies: List[RawDependency]) -> Dict[str, Optional[str]]:
    """Collapse declarations into ``name -> constraint``; later declarations win."""
    mapping: Dict[str, Optional[str]] = {}
    for dependency in dependencies:
        mapping.pop(dependency.name, None)
        mapping[dependency.name] = dependency.constraint
    return mapping
