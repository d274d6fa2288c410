# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Settings controlling where tools are cached and how they are fetched."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

USER_HOME_ENV: Final[str] = "JRELEASER_USER_HOME"
DOWNLOAD_TIMEOUT_ENV: Final[str] = "TOOLSDK_DOWNLOAD_TIMEOUT"
DESCRIPTOR_PATH_ENV: Final[str] = "TOOLSDK_DESCRIPTOR_PATH"
DEFAULT_HOME_DIRNAME: Final[str] = ".jreleaser"
CACHES_DIRNAME: Final[str] = "caches"


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


class ToolSettings(BaseModel):
    """Resolved configuration shared by every tool resolver.

    Attributes:
        cache_base: Directory holding ``<tool>/<version>`` cache entries.
        download_timeout: Optional HTTP timeout in seconds; ``None`` blocks.
        descriptor_dirs: Extra directories searched for descriptors before
            the bundled resources.
    """

    model_config = ConfigDict(frozen=True)

    cache_base: Path
    download_timeout: float | None = None
    descriptor_dirs: tuple[Path, ...] = Field(default_factory=tuple)

    @field_validator("download_timeout")
    @classmethod
    def _validate_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("download_timeout must be positive")
        return value


def resolve_cache_base(env: Mapping[str, str] | None = None) -> Path:
    """Return the cache base directory honouring ``JRELEASER_USER_HOME``.

    Args:
        env: Optional environment mapping used instead of :mod:`os.environ`.

    Returns:
        Path: ``$JRELEASER_USER_HOME/caches`` or ``~/.jreleaser/caches``.
    """

    environment = os.environ if env is None else env
    home = environment.get(USER_HOME_ENV, "").strip()
    if not home:
        return Path.home() / DEFAULT_HOME_DIRNAME / CACHES_DIRNAME
    return Path(home).expanduser() / CACHES_DIRNAME


def _timeout_from_environment(env: Mapping[str, str]) -> float | None:
    """Return the download timeout override from ``env``.

    Args:
        env: Environment mapping to inspect.

    Returns:
        float | None: Positive timeout in seconds, or ``None`` when unset.

    Raises:
        ConfigError: If the value is not a positive number.
    """

    raw = env.get(DOWNLOAD_TIMEOUT_ENV, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{DOWNLOAD_TIMEOUT_ENV} must be numeric, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{DOWNLOAD_TIMEOUT_ENV} must be positive, got {raw!r}")
    return value


def _descriptor_dirs_from_environment(env: Mapping[str, str]) -> tuple[Path, ...]:
    """Return extra descriptor directories listed in ``env``.

    Args:
        env: Environment mapping to inspect.

    Returns:
        tuple[Path, ...]: Directories split on :data:`os.pathsep`, blanks dropped.
    """

    raw = env.get(DESCRIPTOR_PATH_ENV, "")
    return tuple(Path(entry).expanduser() for entry in raw.split(os.pathsep) if entry.strip())


def load_settings(env: Mapping[str, str] | None = None) -> ToolSettings:
    """Build :class:`ToolSettings` from the process environment.

    Args:
        env: Optional environment mapping used instead of :mod:`os.environ`.

    Returns:
        ToolSettings: Settings resolved once at the caller's boundary.

    Raises:
        ConfigError: If an environment override holds an invalid value.
    """

    environment = os.environ if env is None else env
    return ToolSettings(
        cache_base=resolve_cache_base(environment),
        download_timeout=_timeout_from_environment(environment),
        descriptor_dirs=_descriptor_dirs_from_environment(environment),
    )


__all__ = [
    "CACHES_DIRNAME",
    "DESCRIPTOR_PATH_ENV",
    "DOWNLOAD_TIMEOUT_ENV",
    "USER_HOME_ENV",
    "ConfigError",
    "ToolSettings",
    "load_settings",
    "resolve_cache_base",
]
