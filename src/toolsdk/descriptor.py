# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tool descriptors loaded from ``.properties`` resources.

A descriptor is a flat key/value document named ``<tool>.properties``. Global
keys (``download.url``, ``unpack``, ``command.version``, ``command.verify``,
``version``) apply to every platform while platform-qualified keys such as
``linux-x86_64.executable`` select the artifact for a single platform.
Descriptors bundled with the package live under ``resources/tools``; callers
may put additional directories in front of the bundled ones.
"""

from __future__ import annotations

import re
import string
from collections.abc import Iterable, Iterator, Mapping, Sequence
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from types import MappingProxyType
from typing import Final

from .errors import ToolInitializationError

DESCRIPTOR_SUFFIX: Final[str] = ".properties"
RESOURCE_PREFIX: Final[tuple[str, ...]] = ("resources", "tools")

DOWNLOAD_URL: Final[str] = "download.url"
VERSION: Final[str] = "version"
UNPACK: Final[str] = "unpack"
COMMAND_VERSION: Final[str] = "command.version"
COMMAND_VERIFY: Final[str] = "command.verify"
EXECUTABLE: Final[str] = "executable"
FILENAME: Final[str] = "filename"
EXECUTABLE_PATH: Final[str] = "executable.path"

# Properties files are ISO-8859-1 encoded; non-latin characters use \uXXXX.
_ENCODING: Final[str] = "latin-1"
_WHITESPACE: Final[str] = " \t\f"
_SEPARATORS: Final[str] = "=:"
_ESCAPES: Final[Mapping[str, str]] = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_TOOL_NAME: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9][\w.-]*$")


class ToolDescriptor(Mapping[str, str]):
    """Immutable mapping of descriptor keys to raw (untemplated) values."""

    __slots__ = ("_entries", "name", "source")

    def __init__(self, name: str, entries: Mapping[str, str], *, source: str = "<memory>") -> None:
        """Initialise the descriptor.

        Args:
            name: Tool name the descriptor belongs to.
            entries: Parsed key/value pairs.
            source: Human-readable location the entries were read from.
        """

        self.name = name
        self.source = source
        self._entries: Mapping[str, str] = MappingProxyType(dict(entries))

    @classmethod
    def from_text(cls, name: str, text: str, *, source: str = "<memory>") -> ToolDescriptor:
        """Parse ``text`` in ``.properties`` syntax into a descriptor.

        Raises:
            ValueError: If the text contains a malformed escape sequence.
        """

        return cls(name, parse_properties(text), source=source)

    def __getitem__(self, key: str) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ToolDescriptor(name={self.name!r}, source={self.source!r}, keys={len(self)})"

    def platform_key(self, platform: str, suffix: str) -> str:
        """Return the platform-qualified key for ``suffix``."""

        return f"{platform}.{suffix}"

    def platform_value(self, platform: str, suffix: str) -> str | None:
        """Return the value stored under ``<platform>.<suffix>`` when present."""

        return self.get(self.platform_key(platform, suffix))

    def flag(self, key: str) -> bool:
        """Return ``True`` only when ``key`` holds ``true`` (case-insensitive)."""

        return self.get(key, "").strip().lower() == "true"

    def platforms(self) -> tuple[str, ...]:
        """Return platforms that declare an executable, in sorted order."""

        marker = f".{EXECUTABLE}"
        return tuple(sorted(key[: -len(marker)] for key in self if key.endswith(marker)))

    def for_platform(self, platform: str) -> dict[str, str]:
        """Return global keys plus the keys qualified with ``platform``."""

        prefixes = tuple(f"{name}." for name in self.platforms())
        selected: dict[str, str] = {}
        for key, value in self.items():
            if key.startswith(f"{platform}.") or not key.startswith(prefixes):
                selected[key] = value
        return selected


def parse_properties(text: str) -> dict[str, str]:
    """Parse ``.properties`` content into an ordered dictionary.

    Supports ``#``/``!`` comments, ``=``/``:``/whitespace separators, backslash
    line continuations and the ``\\t \\n \\r \\f \\uXXXX`` escapes. Later
    duplicates override earlier ones.

    Args:
        text: Document contents.

    Returns:
        dict[str, str]: Parsed entries.

    Raises:
        ValueError: If a ``\\u`` escape is malformed.
    """

    entries: dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_entry(line)
        entries[_unescape(key)] = _unescape(value)
    return entries


def _logical_lines(text: str) -> Iterator[str]:
    """Yield logical lines with comments removed and continuations joined.

    Args:
        text: Raw document contents.

    Returns:
        Iterator[str]: Lines still carrying their escape sequences.
    """

    buffer: str | None = None
    for raw in text.splitlines():
        line = raw.lstrip(_WHITESPACE)
        if buffer is None and (not line or line[0] in "#!"):
            continue
        if _continues(line):
            buffer = (buffer or "") + line[:-1]
            continue
        yield (buffer or "") + line
        buffer = None
    if buffer is not None:
        yield buffer


def _continues(line: str) -> bool:
    """Return ``True`` when ``line`` ends in an odd number of backslashes."""

    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _split_entry(line: str) -> tuple[str, str]:
    """Split a logical line at its first unescaped separator.

    Args:
        line: Logical line produced by :func:`_logical_lines`.

    Returns:
        tuple[str, str]: Escaped key and value.
    """

    index = 0
    length = len(line)
    while index < length:
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _SEPARATORS or char in _WHITESPACE:
            break
        index += 1
    key = line[:index]
    rest = line[index:].lstrip(_WHITESPACE)
    if rest[:1] in ("=", ":") and rest:
        rest = rest[1:].lstrip(_WHITESPACE)
    return key, rest


def _unescape(value: str) -> str:
    """Decode backslash escapes in a key or value.

    Args:
        value: Raw text taken from the document.

    Returns:
        str: Text with escapes decoded.

    Raises:
        ValueError: If a ``\\u`` escape is not followed by four hex digits.
    """

    if "\\" not in value:
        return value
    chars: list[str] = []
    index = 0
    length = len(value)
    while index < length:
        char = value[index]
        if char != "\\":
            chars.append(char)
            index += 1
            continue
        index += 1
        if index >= length:
            break
        char = value[index]
        if char == "u":
            digits = value[index + 1 : index + 5]
            if len(digits) != 4 or any(digit not in string.hexdigits for digit in digits):
                raise ValueError(f"Malformed \\uxxxx encoding in {value!r}")
            chars.append(chr(int(digits, 16)))
            index += 5
            continue
        chars.append(_ESCAPES.get(char, char))
        index += 1
    return "".join(chars)


def load_descriptor(name: str, *, search_dirs: Sequence[Path] = ()) -> ToolDescriptor:
    """Load the descriptor for ``name``.

    Directories in ``search_dirs`` are consulted first, in order, before the
    descriptors bundled with the package.

    Args:
        name: Tool name; the resource read is ``<name>.properties``.
        search_dirs: Extra directories that may hold descriptor files.

    Returns:
        ToolDescriptor: Parsed descriptor.

    Raises:
        ToolInitializationError: If the descriptor is missing or unreadable.
    """

    if not _TOOL_NAME.match(name):
        raise ToolInitializationError(name, "invalid tool name")
    filename = f"{name}{DESCRIPTOR_SUFFIX}"
    for directory in search_dirs:
        candidate = directory / filename
        if candidate.is_file():
            return _read_descriptor(name, candidate, source=str(candidate))
    resource = resources.files(__package__).joinpath(*RESOURCE_PREFIX, filename)
    return _read_descriptor(name, resource, source=f"classpath:{'/'.join(RESOURCE_PREFIX)}/{filename}")


def _read_descriptor(name: str, resource: Path | Traversable, *, source: str) -> ToolDescriptor:
    """Read and parse a descriptor file or package resource.

    Args:
        name: Tool name the descriptor belongs to.
        resource: File or package resource holding the document.
        source: Location reported in errors and on the descriptor.

    Returns:
        ToolDescriptor: Parsed descriptor.

    Raises:
        ToolInitializationError: If the resource is missing, unreadable or malformed.
    """

    try:
        payload = resource.read_bytes()
        return ToolDescriptor.from_text(name, payload.decode(_ENCODING), source=source)
    except FileNotFoundError as exc:
        raise ToolInitializationError(name, f"{source} does not exist") from exc
    except (OSError, ValueError) as exc:
        raise ToolInitializationError(name, str(exc)) from exc


def available_descriptors(*, search_dirs: Iterable[Path] = ()) -> tuple[str, ...]:
    """Return the names of every descriptor visible to :func:`load_descriptor`."""

    names: set[str] = set()
    for directory in search_dirs:
        if directory.is_dir():
            names.update(path.stem for path in directory.glob(f"*{DESCRIPTOR_SUFFIX}"))
    bundled = resources.files(__package__).joinpath(*RESOURCE_PREFIX)
    if bundled.is_dir():
        names.update(
            entry.name[: -len(DESCRIPTOR_SUFFIX)] for entry in bundled.iterdir() if entry.name.endswith(DESCRIPTOR_SUFFIX)
        )
    return tuple(sorted(names))


__all__ = [
    "COMMAND_VERIFY",
    "COMMAND_VERSION",
    "DESCRIPTOR_SUFFIX",
    "DOWNLOAD_URL",
    "EXECUTABLE",
    "EXECUTABLE_PATH",
    "FILENAME",
    "UNPACK",
    "VERSION",
    "ToolDescriptor",
    "available_descriptors",
    "load_descriptor",
    "parse_properties",
]
