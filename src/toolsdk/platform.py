# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Platform identifiers used to select descriptor keys."""

from __future__ import annotations

import platform as _platform
from typing import Final

_OS_ALIASES: Final[dict[str, str]] = {
    "linux": "linux",
    "darwin": "osx",
    "macos": "osx",
    "osx": "osx",
    "windows": "windows",
    "win32": "windows",
    "cygwin": "windows",
}
_ARCH_ALIASES: Final[dict[str, str]] = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "x64": "x86_64",
    "aarch64": "aarch_64",
    "arm64": "aarch_64",
    "i386": "x86_32",
    "i486": "x86_32",
    "i586": "x86_32",
    "i686": "x86_32",
    "x86": "x86_32",
    "ppc64le": "ppcle_64",
    "s390x": "s390_64",
}


def normalize_os(system: str) -> str:
    """Return the normalised operating-system identifier for ``system``."""

    normalized = system.strip().lower()
    return _OS_ALIASES.get(normalized, normalized)


def normalize_architecture(machine: str) -> str:
    """Return the normalised architecture identifier for ``machine``."""

    normalized = machine.strip().lower()
    return _ARCH_ALIASES.get(normalized, normalized)


def normalize_platform(system: str, machine: str) -> str:
    """Return the ``<os>-<arch>`` classifier for ``system`` and ``machine``.

    Examples:
        >>> normalize_platform("Darwin", "arm64")
        'osx-aarch_64'
    """

    return f"{normalize_os(system)}-{normalize_architecture(machine)}"


def current_platform() -> str:
    """Return the classifier describing the running interpreter's host."""

    return normalize_platform(_platform.system(), _platform.machine())


__all__ = ["current_platform", "normalize_architecture", "normalize_os", "normalize_platform"]
