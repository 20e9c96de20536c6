"""Tiered assembly of the monitoring configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence

from .models import (
    ECOSYSTEM_NPM,
    ECOSYSTEM_ORDER,
    ECOSYSTEMS,
    TIER_FREE,
    DependencyGroup,
    EcosystemReport,
    MonitoringConfiguration,
    Schedule,
    UpdateEntry,
    normalize_tier,
)

# Promotional period: every tier receives grouped output. Flip to False (or set
# ``promotional_grouping: false`` in .depgroups.yml) once the period ends.
PROMOTIONAL_GROUPING = True

GITHUB_ACTIONS = "github-actions"
GROUPED_PULL_REQUEST_LIMIT = 10
BASIC_PULL_REQUEST_LIMIT = 5


@dataclass(frozen=True)
class AssemblerSettings:
    """Inputs to assembly that do not come from detection."""

    schedule: Schedule = field(default_factory=Schedule)
    open_pull_requests_limit: int = GROUPED_PULL_REQUEST_LIMIT
    basic_limit: int = BASIC_PULL_REQUEST_LIMIT
    promotional_grouping: bool = PROMOTIONAL_GROUPING
    github_actions: bool = True
    has_workflows: bool = False


def is_grouped(tier: str, settings: AssemblerSettings) -> bool:
    """Return True when ``tier`` receives framework-aware groups."""
    return settings.promotional_grouping or normalize_tier(tier) != TIER_FREE


def assemble(
    reports: Mapping[str, EcosystemReport],
    groups: Mapping[str, Sequence[DependencyGroup]],
    tier: str,
    settings: Optional[AssemblerSettings] = None,
) -> MonitoringConfiguration:
    """Combine per-ecosystem reports and groups into one configuration.

    Entries follow the fixed ecosystem order. No reports yield the empty
    configuration.
    """
    settings = settings or AssemblerSettings()
    tier = normalize_tier(tier)
    grouped = is_grouped(tier, settings)

    updates: List[UpdateEntry] = []
    for name in ECOSYSTEM_ORDER:
        if name not in reports:
            continue
        ecosystem = ECOSYSTEMS[name]
        label = ecosystem.label
        updates.append(
            UpdateEntry(
                ecosystem=name,
                directory=ecosystem.directory,
                schedule=settings.schedule,
                labels=("dependencies", label),
                commit_prefix=f"deps({label})",
                open_pull_requests_limit=(
                    settings.open_pull_requests_limit if grouped else settings.basic_limit
                ),
                commit_include="scope" if name == ECOSYSTEM_NPM else None,
                groups=tuple(groups.get(name, ())) if grouped else (),
            )
        )

    if updates and settings.github_actions and settings.has_workflows:
        updates.append(
            UpdateEntry(
                ecosystem=GITHUB_ACTIONS,
                directory="/",
                schedule=settings.schedule,
                labels=("dependencies", GITHUB_ACTIONS),
                commit_prefix="deps(actions)",
            )
        )

    return MonitoringConfiguration(tier=tier, grouped=grouped, updates=tuple(updates))


__all__ = [
    "AssemblerSettings",
    "PROMOTIONAL_GROUPING",
    "assemble",
    "is_grouped",
]
