"""Python dependency extraction from requirements.txt and pyproject.toml."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Iterator, List, Optional, Tuple
from urllib.parse import urlparse

from ..logging import get_logger
from ..models import ECOSYSTEM_PIP, RawDependency
from .base import ManifestExtractor
from .utils import PACKAGE_NAME, inline_table_value, iter_toml_lines, quoted_strings, split_key_value

logger = get_logger("extractors.pip")

_REQUIREMENT = re.compile(
    r"^(?P<name>" + PACKAGE_NAME + r")\s*(?:\[(?P<extras>[^\]]*)\])?\s*(?P<rest>.*)$"
)
_CONSTRAINT = re.compile(
    r"^(?:===|==|>=|<=|~=|!=|<|>)\s*[A-Za-z0-9.*+!_-]+"
    r"(?:\s*,\s*(?:===|==|>=|<=|~=|!=|<|>)\s*[A-Za-z0-9.*+!_-]+)*$"
)
_INLINE_COMMENT = re.compile(r"(?:^|\s)#.*$")
_EGG = re.compile(r"[#&]egg=(" + PACKAGE_NAME + r")")
_VCS_PREFIXES = ("git+", "hg+", "svn+", "bzr+")
_EDITABLE_PREFIXES = ("-e ", "--editable ", "--editable=")
# Per-requirement options such as ``--hash=sha256:...`` trail the specifier.
_REQUIREMENT_OPTIONS = re.compile(r"(?:^|\s)--[A-Za-z][\w-]*(?:[=\s].*)?$")

_PEP621_ARRAY_TABLES = {"project"}
_OPTIONAL_TABLE = "project.optional-dependencies"
_KEYED_TABLES = {
    "project.dependencies",
    "tool.poetry.dependencies",
    "tool.poetry.dev-dependencies",
}
_POETRY_GROUP = re.compile(r"^tool\.poetry\.group\.[^.]+\.dependencies$")


def parse_requirement(spec: str) -> Optional[Tuple[str, Optional[str]]]:
    """Parse a PEP 508-style requirement into ``(name, constraint)``.

    Returns ``None`` when the text is not a recognisable requirement.
    """
    text = _REQUIREMENT_OPTIONS.sub("", spec.strip(), count=1).strip()
    if not text:
        return None

    if text.startswith(_VCS_PREFIXES) or "://" in text.split("@", 1)[0]:
        name = _name_from_url(text)
        return (name, None) if name else None

    text = text.split(";", 1)[0].strip()
    match = _REQUIREMENT.match(text)
    if match is None:
        return None

    name = match.group("name")
    rest = match.group("rest").strip()
    if not rest:
        return name, None
    if rest.startswith("@"):
        # Direct reference: ``name @ https://...``.
        return name, None
    if rest.startswith("(") and rest.endswith(")"):
        rest = rest[1:-1].strip()
    if _CONSTRAINT.match(rest) is None:
        return None
    return name, re.sub(r"\s+", "", rest)


def _name_from_url(text: str) -> Optional[str]:
    egg = _EGG.search(text)
    if egg:
        return egg.group(1)
    url = text
    for prefix in _VCS_PREFIXES:
        if url.startswith(prefix):
            url = url[len(prefix):]
            break
    path = urlparse(url.split("#", 1)[0]).path
    stem = PurePosixPath(path.split("@", 1)[0]).name
    if stem.endswith(".git"):
        stem = stem[: -len(".git")]
    if stem and re.fullmatch(PACKAGE_NAME, stem):
        return stem
    return None


def parse_requirements(text: str, source: str = "requirements.txt") -> List[RawDependency]:
    """Parse requirements.txt content, skipping comments, options and bad lines.

    Physical lines ending in a backslash are joined with the following line, and
    the logical line is reported under the number of its first physical line.
    """
    dependencies: List[RawDependency] = []
    for number, logical_line in _logical_lines(text):
        line = logical_line
        for prefix in _EDITABLE_PREFIXES:
            if line.startswith(prefix):
                line = line[len(prefix):].strip()
                break
        else:
            if line.startswith("-"):
                continue

        parsed = parse_requirement(line)
        if parsed is None:
            logger.debug("Skipping unparseable line %d in %s: %s", number, source, logical_line)
            continue
        name, constraint = parsed
        dependencies.append(RawDependency(name=name, constraint=constraint, source=source, line=number))
    return dependencies


def _logical_lines(text: str) -> Iterator[Tuple[int, str]]:
    pending: List[str] = []
    start = 0
    for number, raw_line in enumerate(text.splitlines(), start=1):
        line = _INLINE_COMMENT.sub("", raw_line).strip()
        if not pending:
            start = number
        if line.endswith("\\"):
            pending.append(line[:-1].strip())
            continue
        pending.append(line)
        joined = " ".join(part for part in pending if part)
        pending = []
        if joined:
            yield start, joined
    joined = " ".join(part for part in pending if part)
    if joined:
        yield start, joined


def parse_pyproject(text: str, source: str = "pyproject.toml") -> List[RawDependency]:
    """Parse PEP 621 arrays and legacy table-style dependency declarations."""
    dependencies: List[RawDependency] = []
    for line in iter_toml_lines(text):
        entry = split_key_value(line.text)
        if entry is None:
            continue
        key, value = entry

        if line.table in _PEP621_ARRAY_TABLES and key == "dependencies":
            dependencies.extend(_array_requirements(value, source, line.number))
        elif line.table == _OPTIONAL_TABLE:
            dependencies.extend(_array_requirements(value, source, line.number))
        elif line.table in _KEYED_TABLES or _POETRY_GROUP.match(line.table):
            if key.lower() == "python":
                continue
            dependency = _keyed_dependency(key, value, source, line.number)
            if dependency is not None:
                dependencies.append(dependency)
    return dependencies


def _array_requirements(value: str, source: str, number: int) -> List[RawDependency]:
    if not value.startswith("["):
        return []
    found: List[RawDependency] = []
    for item in quoted_strings(value):
        parsed = parse_requirement(item)
        if parsed is None:
            logger.debug("Skipping unparseable requirement %r in %s", item, source)
            continue
        name, constraint = parsed
        found.append(RawDependency(name=name, constraint=constraint, source=source, line=number))
    return found


def _keyed_dependency(key: str, value: str, source: str, number: int) -> Optional[RawDependency]:
    if re.fullmatch(PACKAGE_NAME, key) is None:
        return None
    if value.startswith("{"):
        constraint = inline_table_value(value, "version")
    else:
        strings = quoted_strings(value)
        if not strings:
            logger.debug("Skipping malformed dependency %r in %s", key, source)
            return None
        constraint = strings[0]
    return RawDependency(name=key, constraint=constraint or None, source=source, line=number)


class PipExtractor(ManifestExtractor):
    """Extracts Python dependencies; dispatches on the manifest file name."""

    ecosystem = ECOSYSTEM_PIP

    def parse(self, text: str, source: str) -> List[RawDependency]:
        if source.endswith(".toml"):
            return parse_pyproject(text, source)
        return parse_requirements(text, source)


__all__ = ["PipExtractor", "parse_pyproject", "parse_requirement", "parse_requirements"]
