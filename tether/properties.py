"""Read flat ``key=value`` properties files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional, Tuple, Union

# key, then "=" or ":" (optionally surrounded by whitespace) or bare whitespace
_PAIR = re.compile(r"^(?P<key>[^=:\s]+)\s*(?:[=:]\s*|\s+|$)(?P<value>.*)$")

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _unescape(value: str) -> str:
    def replace(match: "re.Match[str]") -> str:
        char = match.group(1)
        return _ESCAPES.get(char, char)

    return re.sub(r"\\(.)", replace, value)


def _logical_lines(lines: Iterable[str]) -> Iterator[Tuple[int, str]]:
    """Join backslash-continued lines.

    Yields:
        Tuples of (first physical line number, logical line).
    """
    buffer = ""
    start = 0
    for line_num, raw in enumerate(lines, 1):
        line = raw.rstrip("\r\n")
        if buffer:
            line = line.lstrip()
        else:
            start = line_num
            stripped = line.strip()
            if not stripped or stripped[0] in "#!":
                continue

        # an odd number of trailing backslashes continues the line
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            buffer += line[:-1]
            continue

        yield start, buffer + line
        buffer = ""

    if buffer:
        yield start, buffer


def _parse_line(line: str) -> Optional[Tuple[str, str]]:
    """Parse a single logical line.

    Args:
        line: Line to parse.

    Returns:
        Tuple of (key, value) or None if the line carries no pair.
    """
    line = line.strip()
    match = _PAIR.match(line)
    if not match:
        return None
    return _unescape(match.group("key")), _unescape(match.group("value").strip())


def parse_properties(text: str) -> Dict[str, str]:
    """Parse properties text into a flat dictionary.

    Blank lines and lines starting with ``#`` or ``!`` are ignored. A key
    repeated later in the text overrides the earlier value.

    Args:
        text: Properties file content.

    Returns:
        Dictionary of keys to string values, in file order.
    """
    values: Dict[str, str] = {}
    for _, line in _logical_lines(text.splitlines()):
        parsed = _parse_line(line)
        if parsed:
            key, value = parsed
            values[key] = value
    return values


def load_properties(path: Union[str, Path]) -> Dict[str, str]:
    """Load a UTF-8 properties file.

    Args:
        path: File to read.

    Returns:
        Dictionary of keys to string values.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    with open(path, "r", encoding="utf-8") as f:
        return parse_properties(f.read())
