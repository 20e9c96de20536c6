"""Ruby dependency extraction from Gemfile."""

from __future__ import annotations

import re
from typing import List

from ..logging import get_logger
from ..models import ECOSYSTEM_BUNDLER, RawDependency
from .base import ManifestExtractor
from .utils import PACKAGE_NAME, strip_comment

logger = get_logger("extractors.bundler")

_GEM = re.compile(r"^gem[\s(]+(?P<quote>['\"])(?P<name>" + PACKAGE_NAME + r")(?P=quote)(?P<rest>.*)$")
_STRING_ARG = re.compile(r"^\s*,\s*(['\"])([^'\"]*)\1")


def parse_gemfile(text: str, source: str = "Gemfile") -> List[RawDependency]:
    """Parse ``gem`` calls; positional string arguments are version constraints."""
    dependencies: List[RawDependency] = []
    for number, raw_line in enumerate(text.splitlines(), start=1):
        line = strip_comment(raw_line).strip()
        if not line.startswith("gem"):
            continue
        match = _GEM.match(line)
        if match is None:
            if line.startswith(("gem ", "gem(")):
                logger.debug("Skipping malformed gem line %d in %s", number, source)
            continue

        constraints: List[str] = []
        rest = match.group("rest")
        arg = _STRING_ARG.match(rest)
        while arg is not None:
            constraints.append(arg.group(2).strip())
            rest = rest[arg.end():]
            arg = _STRING_ARG.match(rest)

        dependencies.append(
            RawDependency(
                name=match.group("name"),
                constraint=", ".join(item for item in constraints if item) or None,
                source=source,
                line=number,
            )
        )
    return dependencies


class BundlerExtractor(ManifestExtractor):
    """Extracts gems declared in a Gemfile."""

    ecosystem = ECOSYSTEM_BUNDLER

    def parse(self, text: str, source: str) -> List[RawDependency]:
        return parse_gemfile(text, source)


__all__ = ["BundlerExtractor", "parse_gemfile"]
