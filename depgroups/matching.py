"""Framework signature matching and primary framework selection."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, Mapping, Optional, Sequence

from .models import DetectedFramework, FrameworkSignature
from .patterns import MatchPattern
from .signatures import PRIMARY_RANK_THRESHOLD, signatures_for


def match_signature(
    signature: FrameworkSignature, dependencies: Mapping[str, Optional[str]]
) -> Optional[DetectedFramework]:
    """Match one signature against declared dependencies.

    Returns ``None`` when nothing matches. Each dependency is recorded at most
    once even when it satisfies several of the signature's patterns.
    """
    patterns = [MatchPattern.parse(pattern) for pattern in signature.patterns]
    matched = sorted(
        name for name in dependencies if any(pattern.matches(name) for pattern in patterns)
    )
    if not matched:
        return None

    version: Optional[str] = None
    for core in signature.core:
        pattern = MatchPattern.parse(core)
        version = next(
            (dependencies[name] for name in matched if pattern.matches(name) and dependencies[name]),
            None,
        )
        if version is not None:
            break

    return DetectedFramework(
        ecosystem=signature.ecosystem,
        framework=signature.framework,
        category=signature.category,
        priority=signature.priority,
        packages=tuple(matched),
        version=version,
    )


def match_signatures(
    ecosystem: str,
    dependencies: Mapping[str, Optional[str]],
    signatures: Sequence[FrameworkSignature] | None = None,
) -> Dict[str, DetectedFramework]:
    """Return detected frameworks keyed by framework id, in registry order."""
    registry = signatures if signatures is not None else signatures_for(ecosystem)
    detected: Dict[str, DetectedFramework] = {}
    for signature in registry:
        result = match_signature(signature, dependencies)
        if result is not None:
            detected[signature.framework] = result
    return detected


def select_primary(
    frameworks: Iterable[DetectedFramework],
    *,
    threshold: int = PRIMARY_RANK_THRESHOLD,
) -> Optional[str]:
    """Pick the dominant framework of one ecosystem.

    Only frameworks ranked at or above ``threshold`` are eligible. Ties break
    on priority rank, then larger match count, then framework id.
    """
    eligible = [framework for framework in frameworks if framework.priority <= threshold]
    if not eligible:
        return None
    winner = min(eligible, key=lambda item: (item.priority, -item.count, item.framework))
    return winner.framework


def mark_primary(
    frameworks: Mapping[str, DetectedFramework], primary: Optional[str]
) -> Dict[str, DetectedFramework]:
    """Return a copy of ``frameworks`` with the primary flag applied."""
    return {
        name: replace(framework, primary=(name == primary))
        for name, framework in frameworks.items()
    }


__all__ = [
    "mark_primary",
    "match_signature",
    "match_signatures",
    "select_primary",
]
