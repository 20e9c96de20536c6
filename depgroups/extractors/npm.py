"""Node.js dependency extraction from package.json."""

from __future__ import annotations

import json
import re
from typing import List, Optional

from ..logging import get_logger
from ..models import ECOSYSTEM_NPM, RawDependency
from .base import ManifestExtractor

logger = get_logger("extractors.npm")

DEPENDENCY_KEYS = ("dependencies", "devDependencies")
_JSON_STRING = re.compile(r'"(?:[^"\\]|\\.)*"')


def parse_package_json(text: str, source: str = "package.json") -> List[RawDependency]:
    """Read ``dependencies`` and ``devDependencies`` from package.json content."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Ignoring %s: invalid JSON (%s)", source, exc)
        return []
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: root must be a JSON object", source)
        return []

    lines = text.splitlines()
    dependencies: List[RawDependency] = []
    for key in DEPENDENCY_KEYS:
        section = data.get(key)
        if not isinstance(section, dict):
            continue
        for name, version in section.items():
            if not isinstance(name, str) or not name or not isinstance(version, str):
                logger.debug("Skipping malformed %s entry %r in %s", key, name, source)
                continue
            dependencies.append(
                RawDependency(
                    name=name,
                    constraint=version or None,
                    source=source,
                    line=_line_of(lines, key, name),
                )
            )
    return dependencies


def _line_of(lines: List[str], key: str, name: str) -> Optional[int]:
    """Return the line declaring ``name`` inside the ``key`` object, if it can be found."""
    key_pattern = re.compile(re.escape(json.dumps(key)) + r"\s*:")
    entry_pattern = re.compile(re.escape(json.dumps(name)) + r"\s*:")
    depth = 0
    inside = False
    for number, line in enumerate(lines, start=1):
        if not inside:
            match = key_pattern.search(line)
            if match is None:
                continue
            inside = True
            line = line[match.end():]
        if entry_pattern.search(line):
            return number
        bare = _JSON_STRING.sub('""', line)
        depth += bare.count("{") - bare.count("}")
        if depth <= 0 and "}" in bare:
            return None
    return None


class NpmExtractor(ManifestExtractor):
    """Extracts npm packages from package.json."""

    ecosystem = ECOSYSTEM_NPM

    def parse(self, text: str, source: str) -> List[RawDependency]:
        return parse_package_json(text, source)


__all__ = ["NpmExtractor", "parse_package_json"]
