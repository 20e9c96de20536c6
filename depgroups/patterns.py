"""Package-name match patterns: exact names and trailing wildcards."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple


@dataclass(frozen=True)
class MatchPattern:
    """An exact package name or a prefix wildcard such as ``pytest-*``."""

    text: str
    prefix: str
    wildcard: bool

    @classmethod
    def parse(cls, text: str) -> "MatchPattern":
        return _parse_pattern(text)

    def matches(self, name: str) -> bool:
        candidate = name.lower()
        if self.wildcard:
            return candidate.startswith(self.prefix)
        return candidate == self.prefix

    @property
    def specificity(self) -> Tuple[int, int]:
        """Literal names beat wildcards; longer wildcard prefixes are narrower."""
        return (0 if self.wildcard else 1, len(self.prefix))

    def overlaps(self, other: "MatchPattern") -> bool:
        """Return True when some package name could satisfy both patterns."""
        if not self.wildcard and not other.wildcard:
            return self.prefix == other.prefix
        if self.wildcard and other.wildcard:
            return self.prefix.startswith(other.prefix) or other.prefix.startswith(self.prefix)
        literal, wildcard = (other, self) if self.wildcard else (self, other)
        return literal.prefix.startswith(wildcard.prefix)

    def covers(self, other: "MatchPattern") -> bool:
        """Return True when every name matching ``other`` also matches this pattern."""
        if not self.wildcard:
            return not other.wildcard and other.prefix == self.prefix
        return other.prefix.startswith(self.prefix)


@lru_cache(maxsize=None)
def _parse_pattern(text: str) -> MatchPattern:
    stripped = text.strip()
    star = stripped.find("*")
    if star == -1:
        if not stripped:
            raise ValueError("Empty pattern")
        return MatchPattern(text=stripped, prefix=stripped.lower(), wildcard=False)
    if star != len(stripped) - 1 or star == 0:
        raise ValueError(f"Unsupported pattern '{text}': only trailing wildcards are allowed")
    return MatchPattern(text=stripped, prefix=stripped[:-1].lower(), wildcard=True)


def matches_pattern(name: str, pattern: str) -> bool:
    """Return True when ``name`` satisfies ``pattern`` (case-insensitive)."""
    return MatchPattern.parse(pattern).matches(name)


__all__ = ["MatchPattern", "matches_pattern"]
