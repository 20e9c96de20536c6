"""Rust dependency extraction from Cargo.toml."""

from __future__ import annotations

import re
from typing import Dict, List, Optional

from ..logging import get_logger
from ..models import ECOSYSTEM_CARGO, RawDependency
from .base import ManifestExtractor
from .utils import inline_table_value, iter_toml_lines, quoted_strings, split_key_value

logger = get_logger("extractors.cargo")

DEPENDENCY_TABLES = ("dependencies", "dev-dependencies", "build-dependencies")
CRATE_NAME = r"[A-Za-z0-9_][A-Za-z0-9_-]*"
_SUBTABLE = re.compile(
    r"^(?:" + "|".join(re.escape(name) for name in DEPENDENCY_TABLES) + r")\.(?P<name>"
    + CRATE_NAME
    + r")$"
)


class _MalformedValue(ValueError):
    pass


class _CargoDependencies:
    """Collects declarations; dotted keys and sub-tables refine one entry."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.items: List[RawDependency] = []
        self._dotted: Dict[str, int] = {}

    def add(self, name: str, constraint: Optional[str], line: int) -> None:
        self._dotted.pop(name, None)
        self.items.append(RawDependency(name=name, constraint=constraint, source=self.source, line=line))

    def refine(self, name: str, key: str, value: str, line: int) -> None:
        index = self._dotted.get(name)
        if index is None:
            index = len(self.items)
            self._dotted[name] = index
            self.items.append(RawDependency(name=name, constraint=None, source=self.source, line=line))
        if key != "version":
            return
        strings = quoted_strings(value)
        if strings and strings[0]:
            first = self.items[index]
            self.items[index] = RawDependency(
                name=name, constraint=strings[0], source=self.source, line=first.line
            )


def parse_cargo_toml(text: str, source: str = "Cargo.toml") -> List[RawDependency]:
    """Parse dependency tables, including ``[dependencies.<name>]`` sub-tables.

    Dotted keys such as ``serde.version = "1"`` are folded into one entry.
    """
    collected = _CargoDependencies(source)

    for line in iter_toml_lines(text, headers=True):
        subtable = _SUBTABLE.match(line.table)
        if not line.text:
            # ``[dependencies.<name>]`` declares the crate even when the table is empty.
            if subtable is not None:
                collected.refine(subtable.group("name"), "", "", line.number)
            continue
        entry = split_key_value(line.text)
        if subtable is not None:
            key, value = entry if entry is not None else ("", "")
            collected.refine(subtable.group("name"), key, value, line.number)
            continue

        if line.table not in DEPENDENCY_TABLES:
            continue
        if entry is None:
            logger.debug("Skipping malformed line %d in %s", line.number, source)
            continue
        name, value = entry
        if "." in name:
            crate, _, key = name.partition(".")
            if re.fullmatch(CRATE_NAME, crate):
                collected.refine(crate, key, value, line.number)
            continue
        if re.fullmatch(CRATE_NAME, name) is None:
            logger.debug("Skipping invalid crate name %r in %s", name, source)
            continue
        try:
            constraint = _constraint(value)
        except _MalformedValue:
            logger.debug("Skipping unsupported value for %s in %s", name, source)
            continue
        collected.add(name, constraint, line.number)
    return collected.items


def _constraint(value: str) -> Optional[str]:
    if value.startswith("{"):
        # path/git/workspace dependencies carry no version.
        return inline_table_value(value, "version")
    if value.startswith(("\"", "'")):
        strings = quoted_strings(value)
        if strings and strings[0]:
            return strings[0]
    raise _MalformedValue(value)


class CargoExtractor(ManifestExtractor):
    """Extracts crates from Cargo.toml dependency tables."""

    ecosystem = ECOSYSTEM_CARGO

    def parse(self, text: str, source: str) -> List[RawDependency]:
        return parse_cargo_toml(text, source)


__all__ = ["CargoExtractor", "parse_cargo_toml"]
