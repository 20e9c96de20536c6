"""Manifest extractor strategies keyed by ecosystem id."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Mapping

from .base import ManifestExtractor
from .bundler import BundlerExtractor
from .cargo import CargoExtractor
from .npm import NpmExtractor
from .pip import PipExtractor
from ..models import (
    ECOSYSTEM_BUNDLER,
    ECOSYSTEM_CARGO,
    ECOSYSTEM_NPM,
    ECOSYSTEM_PIP,
    RawDependency,
)

_BUILTIN_FACTORIES: Mapping[str, Callable[[], ManifestExtractor]] = {
    ECOSYSTEM_NPM: NpmExtractor,
    ECOSYSTEM_PIP: PipExtractor,
    ECOSYSTEM_CARGO: CargoExtractor,
    ECOSYSTEM_BUNDLER: BundlerExtractor,
}


def get_extractor(ecosystem: str) -> ManifestExtractor:
    """Return the extractor strategy registered for ``ecosystem``."""
    try:
        factory = _BUILTIN_FACTORIES[ecosystem]
    except KeyError:
        raise ValueError(f"No extractor registered for ecosystem '{ecosystem}'") from None
    return factory()


def extract_dependencies(ecosystem: str, path: Path) -> List[RawDependency]:
    """Extract raw dependencies from ``path`` using the ecosystem's strategy."""
    return get_extractor(ecosystem).extract(path)


def registered_ecosystems() -> Dict[str, Callable[[], ManifestExtractor]]:
    return dict(_BUILTIN_FACTORIES)


__all__ = [
    "BundlerExtractor",
    "CargoExtractor",
    "ManifestExtractor",
    "NpmExtractor",
    "PipExtractor",
    "extract_dependencies",
    "get_extractor",
    "registered_ecosystems",
]
