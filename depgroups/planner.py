"""Pipeline orchestration: locate, extract, match, group, assemble."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .assembler import PROMOTIONAL_GROUPING, AssemblerSettings, assemble
from .config import ConfigError, DepGroupsConfig, load_config
from .extractors import extract_dependencies
from .grouping import generate_groups
from .locator import LocatorResult, ManifestLocation, ManifestLocator
from .logging import get_logger
from .matching import mark_primary, match_signatures, select_primary
from .models import (
    DependencyGroup,
    EcosystemReport,
    MonitoringConfiguration,
    dependency_mapping,
    normalize_tier,
)


@dataclass
class PlanResult:
    """Everything one run produced for a project root."""

    root: Path
    configuration: MonitoringConfiguration
    reports: Dict[str, EcosystemReport] = field(default_factory=dict)
    groups: Dict[str, Tuple[DependencyGroup, ...]] = field(default_factory=dict)
    nested: List[str] = field(default_factory=list)
    config: Optional[DepGroupsConfig] = None


@dataclass
class BatchOutcome:
    """Results of :meth:`Planner.plan_many`; failures never hide other roots."""

    results: Dict[str, PlanResult] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


class Planner:
    """Turns a project directory into a :class:`MonitoringConfiguration`.

    The planner reads manifests only. Identical directory contents always yield
    an identical configuration; writing it out is left to :mod:`depgroups.writer`.
    """

    def __init__(self, *, strict: Optional[bool] = None, max_workers: int = 4) -> None:
        self.strict = strict
        self.max_workers = max_workers
        self.logger = get_logger("planner")

    def plan(
        self,
        path: str | Path,
        tier: Optional[str] = None,
        *,
        max_depth: Optional[int] = None,
    ) -> PlanResult:
        root = Path(path).expanduser().resolve()
        config = self._load_config(root)
        effective_tier = normalize_tier(tier) if tier else config.tier
        depth = max_depth if max_depth is not None else config.max_depth

        locator = ManifestLocator(max_depth=depth, exclude_dirs=config.exclude_dirs)
        located = locator.locate(root)
        reports = self.detect(located)
        self.logger.info("Detected %d ecosystem(s) in %s", len(reports), root)

        strict = self.strict if self.strict is not None else config.strict_groups
        groups = {
            name: generate_groups(report, strict=strict) for name, report in reports.items()
        }
        configuration = assemble(
            reports,
            groups,
            effective_tier,
            self._settings(config, located),
        )
        return PlanResult(
            root=root,
            configuration=configuration,
            reports=reports,
            groups=groups,
            nested=list(located.nested),
            config=config,
        )

    def detect(self, located: LocatorResult) -> Dict[str, EcosystemReport]:
        """Extract and match every located manifest, one report per ecosystem."""
        reports: Dict[str, EcosystemReport] = {}
        for location in located.locations():
            manifest, dependencies = self._first_declaring(location)
            if manifest is None:
                self.logger.debug(
                    "No dependencies declared in %s; skipping %s",
                    ", ".join(path.name for path in location.candidates()),
                    location.ecosystem,
                )
                continue
            frameworks = match_signatures(location.ecosystem, dependencies)
            primary = select_primary(frameworks.values())
            reports[location.ecosystem] = EcosystemReport(
                ecosystem=location.ecosystem,
                manifest=manifest.name,
                dependencies=dependencies,
                frameworks=mark_primary(frameworks, primary),
                primary=primary,
            )
            self.logger.debug(
                "%s: %d dependencies, frameworks=%s, primary=%s",
                location.ecosystem,
                len(dependencies),
                ", ".join(frameworks) or "none",
                primary or "none",
            )
        return reports

    def _first_declaring(
        self, location: ManifestLocation
    ) -> Tuple[Optional[Path], Dict[str, Optional[str]]]:
        # A preferred manifest that declares nothing (e.g. only ``-e .``) defers
        # to the next candidate.
        for path in location.candidates():
            dependencies = dependency_mapping(extract_dependencies(location.ecosystem, path))
            if dependencies:
                if path != location.path:
                    self.logger.info(
                        "%s declares no %s dependencies; using %s",
                        location.path.name,
                        location.ecosystem,
                        path.name,
                    )
                return path, dependencies
        return None, {}

    def plan_many(
        self, paths: Iterable[str | Path], tier: Optional[str] = None
    ) -> BatchOutcome:
        """Plan several roots concurrently, collecting failures per root."""
        outcome = BatchOutcome()
        roots = [str(path) for path in paths]
        if not roots:
            return outcome
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(roots))) as executor:
            futures = {root: executor.submit(self.plan, root, tier) for root in roots}
            for root, future in futures.items():
                try:
                    outcome.results[root] = future.result()
                except (OSError, ValueError, RuntimeError) as exc:
                    self.logger.warning("Planning failed for %s: %s", root, exc)
                    outcome.failures[root] = str(exc)
        return outcome

    def _load_config(self, root: Path) -> DepGroupsConfig:
        if not root.is_dir():
            # The locator reports the bad root.
            return DepGroupsConfig(root=root)
        try:
            return load_config(root)
        except ConfigError as exc:
            self.logger.warning("Ignoring invalid configuration: %s", exc)
            return DepGroupsConfig(root=root)

    @staticmethod
    def _settings(config: DepGroupsConfig, located: LocatorResult) -> AssemblerSettings:
        promotional = (
            config.promotional_grouping
            if config.promotional_grouping is not None
            else PROMOTIONAL_GROUPING
        )
        return AssemblerSettings(
            schedule=config.schedule.to_schedule(),
            open_pull_requests_limit=config.open_pull_requests_limit,
            promotional_grouping=promotional,
            github_actions=config.github_actions,
            has_workflows=located.has_workflows,
        )


__all__ = ["BatchOutcome", "PlanResult", "Planner"]
