"""Shared helpers for the line-oriented manifest scanners.

These scanners are tolerant rather than grammar-complete: a line they cannot
understand is skipped and scanning continues. TOML constructs such as arrays
of tables, multi-line strings and keys split over several lines are not
captured.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

PACKAGE_NAME = r"[A-Za-z0-9_][A-Za-z0-9._-]*"

_TABLE_HEADER = re.compile(r"^\[\s*([^\[\]]+?)\s*\]\s*(?:#.*)?$")
_QUOTED = re.compile(r"\"([^\"\n]*)\"|'([^'\n]*)'")
_KEY_VALUE = re.compile(
    r"^(?:\"(?P<quoted>[^\"]+)\"|'(?P<single>[^']+)'|(?P<bare>" + PACKAGE_NAME + r"))\s*=\s*(?P<value>.*)$"
)


@dataclass(frozen=True)
class TomlLine:
    """A logical TOML line with its table context."""

    table: str
    text: str
    number: int


def strip_comment(line: str) -> str:
    """Remove a trailing ``#`` comment that sits outside quoted strings."""
    quote: Optional[str] = None
    for index, char in enumerate(line):
        if quote:
            if char == quote:
                quote = None
        elif char in {'"', "'"}:
            quote = char
        elif char == "#":
            return line[:index].rstrip()
    return line.rstrip()


def quoted_strings(text: str) -> List[str]:
    """Return every single- or double-quoted string in ``text``."""
    return [double if double or not single else single for double, single in _QUOTED.findall(text)]


def split_key_value(text: str) -> Optional[Tuple[str, str]]:
    """Split ``key = value`` where the key may be bare or quoted."""
    match = _KEY_VALUE.match(text)
    if match is None:
        return None
    key = match.group("quoted") or match.group("single") or match.group("bare")
    return key, match.group("value").strip()


def iter_toml_lines(text: str, *, headers: bool = False) -> Iterator[TomlLine]:
    """Yield comment-free logical lines tagged with their enclosing table.

    Values that open ``[`` or ``{`` and close on a later line are joined into a
    single logical line numbered after the line that opened them. With
    ``headers`` each table header is also yielded, as a line with empty text
    tagged with the table it opens.
    """
    table = ""
    pending: List[str] = []
    pending_line = 0
    depth = 0

    for number, raw_line in enumerate(text.splitlines(), start=1):
        line = strip_comment(raw_line).strip()
        if not line:
            continue

        if pending:
            pending.append(line)
            depth += _bracket_balance(line)
            if depth <= 0:
                yield TomlLine(table=table, text=" ".join(pending), number=pending_line)
                pending = []
                depth = 0
            continue

        header = _TABLE_HEADER.match(line)
        if header and not line.startswith("[["):
            table = header.group(1).replace('"', "").replace("'", "").replace(" ", "")
            if headers:
                yield TomlLine(table=table, text="", number=number)
            continue
        if line.startswith("[["):
            # Arrays of tables are outside what the scanner understands.
            table = ""
            continue

        balance = _bracket_balance(line)
        if balance > 0:
            pending = [line]
            pending_line = number
            depth = balance
            continue
        yield TomlLine(table=table, text=line, number=number)

    if pending:
        yield TomlLine(table=table, text=" ".join(pending), number=pending_line)


def _bracket_balance(line: str) -> int:
    balance = 0
    quote: Optional[str] = None
    for char in line:
        if quote:
            if char == quote:
                quote = None
            continue
        if char in {'"', "'"}:
            quote = char
        elif char in "[{":
            balance += 1
        elif char in "]}":
            balance -= 1
    return balance


def inline_table_value(value: str, key: str) -> Optional[str]:
    """Return the quoted value of ``key`` inside an inline table, if present."""
    match = re.search(
        r"(?:^|[{,\s])" + re.escape(key) + r"\s*=\s*(?:\"([^\"]*)\"|'([^']*)')",
        value,
    )
    if match is None:
        return None
    return match.group(1) if match.group(1) is not None else match.group(2)


__all__ = [
    "PACKAGE_NAME",
    "TomlLine",
    "inline_table_value",
    "iter_toml_lines",
    "quoted_strings",
    "split_key_value",
    "strip_comment",
]
