"""Manifest discovery for supported package ecosystems."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Sequence, Tuple

from .logging import get_logger
from .models import ECOSYSTEM_ORDER, ECOSYSTEMS, Ecosystem

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".tox",
    "target",
    "dist",
    "build",
    "vendor",
    ".bundle",
}

_DEFAULT_MAX_DEPTH = 3


@dataclass(frozen=True)
class ManifestLocation:
    """A manifest chosen to represent one ecosystem."""

    ecosystem: str
    path: Path
    alternates: Tuple[Path, ...] = ()

    def candidates(self) -> Tuple[Path, ...]:
        """The chosen manifest followed by readable fallbacks, in preference order."""
        return (self.path, *self.alternates)


@dataclass
class LocatorResult:
    """Root manifests per ecosystem plus manifests that will not be monitored."""

    root: Path
    manifests: Dict[str, ManifestLocation] = field(default_factory=dict)
    nested: List[str] = field(default_factory=list)
    has_workflows: bool = False

    def locations(self) -> List[ManifestLocation]:
        return [self.manifests[name] for name in ECOSYSTEM_ORDER if name in self.manifests]


class ManifestLocator:
    """Finds one manifest per ecosystem at the project root.

    The directory walk is bounded by ``max_depth`` and skips dependency caches,
    build output and version-control metadata. Manifests below the root are
    collected in :attr:`LocatorResult.nested` and reported only: monorepo
    packages are not monitored.
    """

    def __init__(
        self,
        ecosystems: Mapping[str, Ecosystem] | None = None,
        *,
        max_depth: int = _DEFAULT_MAX_DEPTH,
        exclude_dirs: Iterable[str] = (),
    ) -> None:
        self.ecosystems = ecosystems if ecosystems is not None else ECOSYSTEMS
        self.max_depth = max_depth
        self.exclude_dirs = _EXCLUDED_DIRS.union(exclude_dirs)
        self.logger = get_logger("locator")

    def locate(self, root: str | Path) -> LocatorResult:
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")

        result = LocatorResult(root=root_path)
        for name in ECOSYSTEM_ORDER:
            ecosystem = self.ecosystems.get(name)
            if ecosystem is None:
                continue
            readable = self._readable(root_path, ecosystem.manifests)
            if not readable:
                continue
            path, *alternates = readable
            result.manifests[name] = ManifestLocation(
                ecosystem=name, path=path, alternates=tuple(alternates)
            )
            self.logger.debug("Located %s manifest %s", name, path.name)

        result.nested = sorted(self._nested_manifests(root_path))
        if result.nested:
            self.logger.warning(
                "Found %d manifest(s) below the project root that will not be monitored: %s",
                len(result.nested),
                ", ".join(result.nested),
            )
        result.has_workflows = (root_path / ".github" / "workflows").is_dir()
        return result

    def _readable(self, root: Path, candidates: Sequence[str]) -> List[Path]:
        found: List[Path] = []
        for filename in candidates:
            path = root / filename
            if not path.is_file():
                continue
            if not os.access(path, os.R_OK):
                self.logger.warning("Skipping unreadable manifest %s", filename)
                continue
            found.append(path)
        return found

    def _nested_manifests(self, root: Path) -> Iterator[str]:
        filenames = {
            filename
            for ecosystem in self.ecosystems.values()
            for filename in ecosystem.manifests
        }
        for current_dir, depth, names in _walk(root, self.max_depth, self.exclude_dirs):
            if depth == 0:
                continue
            for name in names:
                if name in filenames:
                    yield (current_dir / name).relative_to(root).as_posix()


def _walk(
    root: Path, max_depth: int, excluded: set[str]
) -> Iterator[Tuple[Path, int, List[str]]]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        depth = len(current_dir.relative_to(root).parts)
        if depth >= max_depth:
            dirnames[:] = []
        else:
            dirnames[:] = sorted(name for name in dirnames if name not in excluded)
        yield current_dir, depth, filenames


__all__ = ["LocatorResult", "ManifestLocation", "ManifestLocator"]
