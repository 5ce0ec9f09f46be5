"""Configuration resolution and typed access.

Settings come from three sources, merged with later sources winning on key
collision:

1. a ``.properties`` file (``config.properties`` unless ``configPath`` says
   otherwise); missing or unreadable files contribute nothing
2. command-line tokens of the form ``key[=value]``
3. environment overrides named ``githubdeployer.<key>`` (or
   ``GITHUBDEPLOYER_<KEY>``, which maps to the lower-cased key)

The result is a flat, read-only ``ResolvedConfig``. Values stay strings until a
typed getter parses them; a value that does not parse is reported as absent.
"""

from __future__ import annotations

import math
import re
import struct
from collections.abc import Callable, Iterator, Mapping, Sequence
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, TypeVar

from .errors import MissingConfigError
from .properties import read_properties
from .result import Err

if TYPE_CHECKING:
    from deployer.output.console import ConsoleProtocol

T = TypeVar("T")

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "OVERRIDE_PREFIX",
    "ENV_OVERRIDE_PREFIX",
    "CONFIG_PATH_KEYS",
    "ResolvedConfig",
    "parse_args",
    "join_args",
    "overrides_from_env",
    "load_config",
]

DEFAULT_CONFIG_FILE = "config.properties"
OVERRIDE_PREFIX = "githubdeployer."
ENV_OVERRIDE_PREFIX = "GITHUBDEPLOYER_"
CONFIG_PATH_KEYS = ("configPath", "configpath")

_ARG_PATTERN = re.compile(r'(?P<key>[^=\s]+)(?:=(?P<value>"[^"]*"|\S*)(?=\s|$))?')
_INTEGER = re.compile(r"[+-]?[0-9]+")
_DECIMAL = re.compile(
    r"[+-]?(?:NaN|Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)[fFdD]?"
)

# Widths of the signed integer getters
_BYTE_BITS = 8
_SHORT_BITS = 16
_INT_BITS = 32
_LONG_BITS = 64


def _parse_integer(text: str, bits: int) -> int | None:
    if not _INTEGER.fullmatch(text):
        return None
    value = int(text)
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        return None
    return value


def _parse_decimal(text: str) -> float | None:
    text = text.strip()
    if not _DECIMAL.fullmatch(text):
        return None
    if text[-1] in "fFdD":
        text = text[:-1]
    return float(text.replace("Infinity", "inf"))


def _to_single(value: float) -> float:
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _parse_bool(text: str) -> bool | None:
    match text.lower():
        case "true" | "":
            return True
        case "false":
            return False
        case _:
            return None


def _parse_char(text: str) -> str | None:
    return text if len(text) == 1 else None


def _parse_path(text: str) -> Path | None:
    if "\0" in text:
        return None
    return Path(text)


class ResolvedConfig(Mapping[str, str]):
    """Immutable key -> string mapping with typed getters.

    Getters return None when the key is absent or its value does not parse.
    Use ``require`` for mandatory settings and ``get_or`` for defaults:

        repo = config.require(config.get_string, "repo")
        draft = config.get_or(config.get_bool, "draft", False)
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values: Mapping[str, str] = MappingProxyType(dict(values or {}))

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ResolvedConfig({self.as_dict(redact=('token',))!r})"

    def as_dict(self, *, redact: Sequence[str] = ()) -> dict[str, str]:
        """Copy of the values, with the ``redact`` keys masked."""
        return {k: ("***" if k in redact else v) for k, v in self._values.items()}

    def _parse(self, key: str, parser: Callable[[str], T | None]) -> T | None:
        text = self._values.get(key)
        if text is None:
            return None
        try:
            return parser(text)
        except ValueError:
            return None

    # Typed getters

    def get_bool(self, key: str) -> bool | None:
        return self._parse(key, _parse_bool)

    def get_int(self, key: str) -> int | None:
        return self._parse(key, lambda s: _parse_integer(s, _INT_BITS))

    def get_long(self, key: str) -> int | None:
        return self._parse(key, lambda s: _parse_integer(s, _LONG_BITS))

    def get_byte(self, key: str) -> int | None:
        return self._parse(key, lambda s: _parse_integer(s, _BYTE_BITS))

    def get_short(self, key: str) -> int | None:
        return self._parse(key, lambda s: _parse_integer(s, _SHORT_BITS))

    def get_float(self, key: str) -> float | None:
        """Parse as a decimal rounded to single precision."""
        value = self._parse(key, _parse_decimal)
        return None if value is None else _to_single(value)

    def get_double(self, key: str) -> float | None:
        return self._parse(key, _parse_decimal)

    def get_char(self, key: str) -> str | None:
        return self._parse(key, _parse_char)

    def get_string(self, key: str) -> str | None:
        return self._values.get(key)

    def get_string_list(self, key: str) -> list[str] | None:
        """Split on commas. No escaping; an empty value yields ``[""]``."""
        return self._parse(key, lambda s: s.split(","))

    def get_path(self, key: str) -> Path | None:
        return self._parse(key, _parse_path)

    # Wrappers

    def require(self, getter: Callable[[str], T | None], key: str) -> T:
        """Return ``getter(key)`` or raise MissingConfigError naming the key."""
        value = getter(key)
        if value is None:
            kind = getattr(getter, "__name__", "value").removeprefix("get_")
            raise MissingConfigError(key, kind)
        return value

    def get_or(self, getter: Callable[[str], T | None], key: str, default: T) -> T:
        value = getter(key)
        return default if value is None else value


# -----------------------------------------------------------------------------
# Sources
# -----------------------------------------------------------------------------


def parse_args(text: str) -> dict[str, str]:
    """Parse ``key[=value]`` tokens from a whitespace-joined argument string.

    Double-quoted values may contain whitespace and have their quotes
    stripped. A bare key maps to the empty string.

        >>> parse_args('foo=bar baz qux="hello world" ')
        {'foo': 'bar', 'baz': '', 'qux': 'hello world'}
    """
    result: dict[str, str] = {}
    for match in _ARG_PATTERN.finditer(text):
        value = match.group("value") or ""
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        result[match.group("key")] = value
    return result


def join_args(argv: Sequence[str]) -> str:
    """Join argv tokens into the string ``parse_args`` expects.

    The shell has already removed the quotes around ``desc="two words"``;
    values that contain whitespace are quoted again so they stay whole.
    """
    tokens: list[str] = []
    for token in argv:
        key, sep, value = token.partition("=")
        if sep and any(c.isspace() for c in value) and not value.startswith('"'):
            token = f'{key}="{value}"'
        tokens.append(token)
    return " ".join(tokens)


def overrides_from_env(environ: Mapping[str, str]) -> dict[str, str]:
    """Collect ``githubdeployer.*`` / ``GITHUBDEPLOYER_*`` entries, prefix stripped."""
    underscored: dict[str, str] = {}
    dotted: dict[str, str] = {}
    for name, value in environ.items():
        if name.startswith(OVERRIDE_PREFIX) and len(name) > len(OVERRIDE_PREFIX):
            dotted[name[len(OVERRIDE_PREFIX) :]] = value
        elif name.startswith(ENV_OVERRIDE_PREFIX) and len(name) > len(ENV_OVERRIDE_PREFIX):
            underscored[name[len(ENV_OVERRIDE_PREFIX) :].lower()] = value
    return {**underscored, **dotted}


def _config_path_from(*sources: Mapping[str, str]) -> Path | None:
    for source in reversed(sources):
        for key in CONFIG_PATH_KEYS:
            value = source.get(key)
            if value:
                return _parse_path(value)
    return None


def _file_to_map(path: Path, console: ConsoleProtocol | None) -> dict[str, str]:
    if not path.exists():
        return {}

    result = read_properties(path)
    if isinstance(result, Err):
        if console is not None:
            console.warning(f"Could not open config file: {result.error}")
        return {}
    return result.value


def load_config(
    config_path: Path | None,
    args: Sequence[str] | str,
    environ: Mapping[str, str],
    *,
    console: ConsoleProtocol | None = None,
) -> ResolvedConfig:
    """Resolve configuration from file, arguments and environment overrides.

    Args:
        config_path: Properties file to read; None to use ``configPath`` from
            the arguments/overrides, falling back to ``config.properties``
        args: argv tokens, or an already joined argument string
        environ: Environment mapping to scan for overrides
        console: Receives a warning when the file exists but cannot be read

    Returns:
        The merged configuration (file < arguments < overrides)
    """
    text = args if isinstance(args, str) else join_args(args)
    from_args = parse_args(text)
    from_env = overrides_from_env(environ)

    path = config_path or _config_path_from(from_args, from_env) or Path(DEFAULT_CONFIG_FILE)
    from_file = _file_to_map(path, console)

    return ResolvedConfig({**from_file, **from_args, **from_env})
