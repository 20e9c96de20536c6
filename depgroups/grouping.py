"""Dependency group generation from per-framework templates.

Every detected framework contributes the groups listed for it in
:data:`TEMPLATES`. Within one ecosystem no two groups may claim the same
package: when patterns of different groups overlap, the more specific pattern
keeps the package and the broader wildcard gains it as an exclude pattern.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .logging import get_logger
from .models import (
    ECOSYSTEM_BUNDLER,
    ECOSYSTEM_CARGO,
    ECOSYSTEM_NPM,
    ECOSYSTEM_PIP,
    DependencyGroup,
    EcosystemReport,
)
from .patterns import MatchPattern

logger = get_logger("grouping")

MINOR_AND_PATCH = ("minor", "patch")
PATCH_ONLY = ("patch",)
PRODUCTION = "production"
DEVELOPMENT = "development"


class GroupOverlapError(RuntimeError):
    """Raised when two groups of one ecosystem can claim the same package."""


@dataclass(frozen=True)
class GroupTemplate:
    """Fixed group emitted whenever its framework is detected."""

    name: str
    patterns: Tuple[str, ...]
    update_types: Tuple[str, ...] = MINOR_AND_PATCH
    dependency_type: Optional[str] = None


@dataclass(frozen=True)
class GroupOverlap:
    """Two patterns in different groups that can match the same package."""

    ecosystem: str
    first_group: str
    first_pattern: str
    second_group: str
    second_pattern: str

    def describe(self) -> str:
        return (
            f"{self.ecosystem}: '{self.first_pattern}' in {self.first_group} overlaps "
            f"'{self.second_pattern}' in {self.second_group}"
        )


_T = GroupTemplate

_TEMPLATE_TABLE: Dict[str, Dict[str, Tuple[GroupTemplate, ...]]] = {
    ECOSYSTEM_NPM: {
        "react": (
            _T("react-core", ("react", "react-dom", "react-router*"), MINOR_AND_PATCH, PRODUCTION),
            _T(
                "react-ecosystem",
                ("@tanstack/*", "zustand", "jotai", "swr", "@reduxjs/*"),
                PATCH_ONLY,
                PRODUCTION,
            ),
            _T(
                "react-ui",
                ("@mui/*", "@chakra-ui/*", "@radix-ui/*", "@headlessui/react"),
                PATCH_ONLY,
            ),
            _T("react-forms", ("react-hook-form", "formik")),
        ),
        "vue": (
            _T("vue-core", ("vue", "vue-router", "pinia"), MINOR_AND_PATCH, PRODUCTION),
            _T("vue-ecosystem", ("@vue/*", "@vueuse/*", "vueuse"), PATCH_ONLY),
            _T("vue-ui", ("vuetify", "element-plus"), PATCH_ONLY),
        ),
        "angular": (
            _T(
                "angular-core",
                ("@angular/core", "@angular/common", "@angular/platform-*"),
                MINOR_AND_PATCH,
                PRODUCTION,
            ),
            _T("angular-ecosystem", ("@angular/*", "@ngrx/*", "@ngxs/*"), PATCH_ONLY),
            _T("angular-ui", ("@angular/material", "@ng-bootstrap/*"), PATCH_ONLY),
        ),
        "svelte": (
            _T("svelte-core", ("svelte", "@sveltejs/*"), MINOR_AND_PATCH, PRODUCTION),
        ),
        "testing": (
            _T(
                "testing-frameworks",
                ("jest", "vitest", "@testing-library/*", "playwright", "@playwright/*"),
                MINOR_AND_PATCH,
                DEVELOPMENT,
            ),
        ),
        "build": (
            _T(
                "build-tools",
                ("vite", "webpack", "turbo", "@nx/*", "esbuild", "rollup"),
                PATCH_ONLY,
                DEVELOPMENT,
            ),
        ),
        "storybook": (_T("storybook", ("@storybook/*",), MINOR_AND_PATCH, DEVELOPMENT),),
    },
    ECOSYSTEM_PIP: {
        "django": (
            _T("django-core", ("django", "djangorestframework")),
            _T("django-extensions", ("django-*",), PATCH_ONLY),
        ),
        "flask": (_T("flask-core", ("flask", "flask-*")),),
        "fastapi": (_T("fastapi-core", ("fastapi", "uvicorn", "starlette", "pydantic")),),
        "datascience": (
            _T("data-core", ("numpy", "pandas", "scipy")),
            _T("ml-frameworks", ("scikit-learn", "tensorflow", "torch", "pytorch"), PATCH_ONLY),
            _T("visualization", ("matplotlib", "seaborn", "plotly"), PATCH_ONLY),
        ),
        "testing": (_T("testing-frameworks", ("pytest", "pytest-*", "coverage")),),
        "web": (_T("web-servers", ("gunicorn", "uwsgi", "aiohttp", "tornado"), PATCH_ONLY),),
    },
    ECOSYSTEM_CARGO: {
        "actix": (
            _T("actix-core", ("actix-web", "actix-rt")),
            _T("actix-ecosystem", ("actix-*",), PATCH_ONLY),
        ),
        "rocket": (_T("rocket-core", ("rocket", "rocket_*")),),
        "async": (_T("async-runtime", ("tokio", "async-std", "futures"), PATCH_ONLY),),
        "serde": (_T("serde-ecosystem", ("serde", "serde_json", "serde_*")),),
        "testing": (_T("testing-frameworks", ("criterion", "proptest")),),
    },
    ECOSYSTEM_BUNDLER: {
        "rails": (
            _T("rails-core", ("rails", "activerecord", "actionpack")),
            _T("rails-ecosystem", ("rails-*", "active*"), PATCH_ONLY),
        ),
        "sinatra": (_T("sinatra-core", ("sinatra", "sinatra-*")),),
        "testing": (
            _T("testing-frameworks", ("rspec", "rspec-*", "capybara", "factory_bot")),
        ),
    },
}

TEMPLATES: Mapping[str, Mapping[str, Tuple[GroupTemplate, ...]]] = MappingProxyType(
    {
        ecosystem: MappingProxyType(frameworks)
        for ecosystem, frameworks in _TEMPLATE_TABLE.items()
    }
)


class _Candidate:
    def __init__(self, template: GroupTemplate) -> None:
        self.template = template
        self.patterns: List[str] = list(template.patterns)
        self.excludes: List[str] = []

    @property
    def name(self) -> str:
        return self.template.name

    def exclude(self, pattern: str) -> None:
        if pattern not in self.excludes:
            self.excludes.append(pattern)


def generate_groups(
    report: EcosystemReport,
    *,
    templates: Mapping[str, Sequence[GroupTemplate]] | None = None,
    strict: bool = False,
) -> Tuple[DependencyGroup, ...]:
    """Build the groups for one ecosystem report.

    Groups are returned in framework order, then template order. With
    ``strict`` an overlap left after resolution raises
    :class:`GroupOverlapError`; otherwise it is logged and the pattern is dropped
    from the lexically larger group.
    """
    registry = templates if templates is not None else TEMPLATES.get(report.ecosystem, {})
    candidates: Dict[str, _Candidate] = {}
    for framework in report.frameworks:
        for template in registry.get(framework, ()):
            if template.name in candidates:
                logger.debug(
                    "Group %s already emitted for %s; skipping duplicate from %s",
                    template.name,
                    report.ecosystem,
                    framework,
                )
                continue
            candidates[template.name] = _Candidate(template)

    _resolve_overlaps(report.ecosystem, candidates)
    groups = [_to_group(report, candidate) for candidate in candidates.values()]

    overlaps = find_overlaps(groups)
    if overlaps:
        if strict:
            raise GroupOverlapError("; ".join(item.describe() for item in overlaps))
        groups = _drop_overlaps(groups, overlaps)

    return tuple(group for group in groups if group.patterns)


def _resolve_overlaps(ecosystem: str, candidates: Mapping[str, _Candidate]) -> None:
    names = sorted(candidates)
    for index, first_name in enumerate(names):
        first = candidates[first_name]
        for second_name in names[index + 1 :]:
            second = candidates[second_name]
            for first_text in first.patterns:
                first_pattern = MatchPattern.parse(first_text)
                for second_text in list(second.patterns):
                    second_pattern = MatchPattern.parse(second_text)
                    if not first_pattern.overlaps(second_pattern):
                        continue
                    if first_pattern.specificity == second_pattern.specificity:
                        # Identical patterns: the lexically smaller group keeps it.
                        second.patterns.remove(second_text)
                        logger.debug(
                            "%s: '%s' kept by %s, dropped from %s",
                            ecosystem,
                            second_text,
                            first.name,
                            second.name,
                        )
                    elif first_pattern.specificity > second_pattern.specificity:
                        second.exclude(first_text)
                    else:
                        first.exclude(second_text)


def _to_group(report: EcosystemReport, candidate: _Candidate) -> DependencyGroup:
    group = DependencyGroup(
        name=candidate.name,
        ecosystem=report.ecosystem,
        patterns=tuple(candidate.patterns),
        update_types=candidate.template.update_types,
        exclude_patterns=tuple(candidate.excludes),
        dependency_type=candidate.template.dependency_type,
    )
    return _with_packages(group, report.dependencies)


def _with_packages(group: DependencyGroup, dependencies: Mapping[str, object]) -> DependencyGroup:
    packages = tuple(sorted(name for name in dependencies if group.matches(name)))
    return DependencyGroup(
        name=group.name,
        ecosystem=group.ecosystem,
        patterns=group.patterns,
        update_types=group.update_types,
        exclude_patterns=group.exclude_patterns,
        dependency_type=group.dependency_type,
        packages=packages,
    )


def find_overlaps(groups: Sequence[DependencyGroup]) -> List[GroupOverlap]:
    """Return every pattern pair that lets two groups of one ecosystem share a package."""
    overlaps: List[GroupOverlap] = []
    ordered = sorted(groups, key=lambda group: (group.ecosystem, group.name))
    for index, first in enumerate(ordered):
        for second in ordered[index + 1 :]:
            if first.ecosystem != second.ecosystem:
                continue
            for first_text in first.patterns:
                first_pattern = MatchPattern.parse(first_text)
                for second_text in second.patterns:
                    second_pattern = MatchPattern.parse(second_text)
                    if not first_pattern.overlaps(second_pattern):
                        continue
                    if _excluded(first, second_pattern) or _excluded(second, first_pattern):
                        continue
                    overlaps.append(
                        GroupOverlap(
                            ecosystem=first.ecosystem,
                            first_group=first.name,
                            first_pattern=first_text,
                            second_group=second.name,
                            second_pattern=second_text,
                        )
                    )
    return overlaps


def check_no_overlap(groups: Sequence[DependencyGroup]) -> None:
    """Raise :class:`GroupOverlapError` when any two groups can claim one package."""
    overlaps = find_overlaps(groups)
    if overlaps:
        raise GroupOverlapError("; ".join(item.describe() for item in overlaps))


def _excluded(group: DependencyGroup, pattern: MatchPattern) -> bool:
    return any(MatchPattern.parse(text).covers(pattern) for text in group.exclude_patterns)


def _drop_overlaps(
    groups: Sequence[DependencyGroup], overlaps: Sequence[GroupOverlap]
) -> List[DependencyGroup]:
    dropped: Dict[str, set] = {}
    for overlap in overlaps:
        logger.warning("Resolving group overlap: %s", overlap.describe())
        dropped.setdefault(overlap.second_group, set()).add(overlap.second_pattern)

    result: List[DependencyGroup] = []
    for group in groups:
        removed = dropped.get(group.name)
        if not removed:
            result.append(group)
            continue
        trimmed = DependencyGroup(
            name=group.name,
            ecosystem=group.ecosystem,
            patterns=tuple(text for text in group.patterns if text not in removed),
            update_types=group.update_types,
            exclude_patterns=group.exclude_patterns,
            dependency_type=group.dependency_type,
        )
        result.append(_with_packages(trimmed, {name: None for name in group.packages}))
    return result


__all__ = [
    "GroupOverlap",
    "GroupOverlapError",
    "GroupTemplate",
    "TEMPLATES",
    "check_no_overlap",
    "find_overlaps",
    "generate_groups",
]
