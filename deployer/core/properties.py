"""Reader for ``.properties`` configuration files.

The format is the familiar key/value text layout:

    # comment            ! also a comment
    repo = my-project
    org: my-org
    desc  First line \\
          continued here
    path=C:\\\\builds\\\\out

Keys end at the first unescaped ``=``, ``:`` or whitespace. A line ending in an
odd number of backslashes continues on the next line (leading whitespace of the
continuation is dropped). Escapes ``\\t \\n \\r \\f \\uXXXX`` are decoded and any
other escaped character stands for itself.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result

__all__ = ["PropertiesError", "parse_properties", "read_properties"]

_NEWLINE = re.compile(r"\r\n|\r|\n")
_ESCAPE = re.compile(r"\\(u.{0,4}|.)", re.DOTALL)
_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_SIMPLE_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


@dataclass(frozen=True, slots=True)
class PropertiesError:
    """Error when a properties file cannot be read or decoded."""

    message: str
    path: Path | None = None

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


def _continues(line: str) -> bool:
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _unescape_one(match: re.Match[str]) -> str:
    token = match.group(1)
    if token.startswith("u"):
        digits = token[1:]
        if len(digits) != 4 or not all(c in "0123456789abcdefABCDEF" for c in digits):
            raise ValueError(f"Malformed \\uxxxx encoding: \\{token}")
        return chr(int(digits, 16))
    return _SIMPLE_ESCAPES.get(token, token)


def _unescape(text: str) -> str:
    return _ESCAPE.sub(_unescape_one, text)


def _split_entry(line: str) -> tuple[str, str]:
    i = 0
    while i < len(line):
        c = line[i]
        if c == "\\":
            i += 2
            continue
        if c in _SEPARATORS or c in _WHITESPACE:
            break
        i += 1

    key = line[:i]
    rest = line[i:].lstrip(_WHITESPACE)
    if rest and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip(_WHITESPACE)
    return key, rest


def parse_properties(text: str) -> dict[str, str]:
    """Parse properties text into a dict; later duplicates win.

    Raises:
        ValueError: On a malformed ``\\uXXXX`` escape.
    """
    lines = _NEWLINE.split(text)
    result: dict[str, str] = {}

    i = 0
    while i < len(lines):
        line = lines[i].lstrip(_WHITESPACE)
        i += 1
        if not line or line[0] in "#!":
            continue

        while _continues(line) and i < len(lines):
            line = line[:-1] + lines[i].lstrip(_WHITESPACE)
            i += 1
        if _continues(line):
            line = line[:-1]

        key, value = _split_entry(line)
        result[_unescape(key)] = _unescape(value)

    return result


def read_properties(path: Path) -> Result[dict[str, str], PropertiesError]:
    """Read and parse a UTF-8 properties file."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(PropertiesError("Config file not found", path=path))
    except PermissionError:
        return Err(PropertiesError("Permission denied reading config file", path=path))
    except UnicodeDecodeError as e:
        return Err(PropertiesError(f"Config file is not valid UTF-8: {e}", path=path))
    except OSError as e:
        return Err(PropertiesError(f"Could not open config file: {e}", path=path))

    try:
        return Ok(parse_properties(text))
    except ValueError as e:
        return Err(PropertiesError(str(e), path=path))
