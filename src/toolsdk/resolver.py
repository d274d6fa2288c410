# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resolve, download, cache and verify a single descriptor-driven tool.

A :class:`ToolResolver` is bound to one ``(name, version, platform)`` triple.
Its descriptor decides whether the platform is supported, which artifact to
fetch and how to check the resulting executable. Downloaded artifacts are kept
under ``<cache_base>/<name>/<version>`` and reused by later runs.
"""

from __future__ import annotations

import re
import shutil
import stat
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Final

import requests

from .archives import ArchiveError, unpack_archive
from .config import ToolSettings, load_settings
from .descriptor import (
    COMMAND_VERIFY,
    COMMAND_VERSION,
    DOWNLOAD_URL,
    EXECUTABLE,
    EXECUTABLE_PATH,
    FILENAME,
    UNPACK,
    VERSION,
    ToolDescriptor,
    load_descriptor,
)
from .download import ArtifactNotFoundError, fetch_to_file
from .errors import (
    CommandExecutionError,
    DownloadFailureKind,
    ToolDownloadError,
    ToolNotResolvedError,
)
from .logging import ToolLogger
from .process import Command, run_command_capturing
from .templating import TemplateRenderer, render_template

TEMP_PREFIX: Final[str] = "jreleaser"


@dataclass(frozen=True, slots=True)
class Unresolved:
    """No usable executable has been located."""


@dataclass(frozen=True, slots=True)
class Resolved:
    """An executable is available at ``path``."""

    path: Path


ExecutableState = Unresolved | Resolved
UNRESOLVED: Final[Unresolved] = Unresolved()


class VerificationResult(str, Enum):
    """Outcome of running a tool's version command."""

    VERIFIED = "verified"
    UNRESOLVED = "unresolved"
    EXECUTION_FAILED = "execution-failed"
    PATTERN_MISMATCH = "pattern-mismatch"

    @property
    def ok(self) -> bool:
        """Return ``True`` for :attr:`VERIFIED`."""

        return self is VerificationResult.VERIFIED


@dataclass(frozen=True, slots=True)
class DownloadPlan:
    """Rendered download coordinates for the resolver's platform."""

    filename: str
    url: str
    cache_root: Path
    unpack: bool
    executable_path: Path


class ToolResolver:
    """Manage one external tool described by ``<name>.properties``."""

    def __init__(
        self,
        logger: ToolLogger,
        name: str,
        version: str,
        platform: str,
        *,
        settings: ToolSettings | None = None,
        renderer: TemplateRenderer = render_template,
    ) -> None:
        """Load the descriptor for ``name`` and derive the initial state.

        Args:
            logger: Sink for progress and diagnostic messages.
            name: Tool name used to locate the descriptor and cache directory.
            version: Tool version substituted into descriptor templates.
            platform: Platform identifier selecting descriptor keys.
            settings: Cache and download configuration; read from the
                environment when omitted.
            renderer: Template function applied to descriptor values.

        Raises:
            ToolInitializationError: If the descriptor is missing or unreadable.
        """

        self.logger = logger
        self.name = name
        self.version = version
        self.platform = platform
        self.settings = settings or load_settings()
        self._renderer = renderer
        self.descriptor: ToolDescriptor = load_descriptor(name, search_dirs=self.settings.descriptor_dirs)
        self.enabled = self.descriptor.platform_key(platform, EXECUTABLE) in self.descriptor
        self._state: ExecutableState = UNRESOLVED
        if self.enabled:
            self._state = Resolved(Path(self.descriptor[self.descriptor.platform_key(platform, EXECUTABLE)]))

    def __repr__(self) -> str:
        return (
            f"ToolResolver(name={self.name!r}, version={self.version!r}, "
            f"platform={self.platform!r}, state={self._state!r})"
        )

    @property
    def is_enabled(self) -> bool:
        """Return ``True`` when the descriptor defines an executable for the platform."""

        return self.enabled

    @property
    def state(self) -> ExecutableState:
        """Return the current executable state."""

        return self._state

    @property
    def executable(self) -> Path | None:
        """Return the resolved executable path, or ``None`` when unresolved."""

        if isinstance(self._state, Resolved):
            return self._state.path
        return None

    @property
    def cache_root(self) -> Path:
        """Return ``<cache_base>/<name>/<version>``."""

        return self.settings.cache_base / self.name / self.version

    def resolve_to(self, path: Path | str) -> None:
        """Point the resolver at an executable located by the caller."""

        self._state = Resolved(Path(path))

    def plan(self) -> DownloadPlan | None:
        """Return the rendered download coordinates.

        Returns:
            DownloadPlan | None: ``None`` when the platform has no executable or
            no artifact filename.
        """

        executable = self.descriptor.platform_value(self.platform, EXECUTABLE)
        filename = self.descriptor.platform_value(self.platform, FILENAME)
        if not self.enabled or executable is None or filename is None or not filename.strip():
            return None

        variables = self._variables()
        unpack = self.descriptor.flag(UNPACK)
        rendered_filename = self._renderer(filename.strip(), variables)
        executable_dir = self._renderer(self.descriptor.platform_value(self.platform, EXECUTABLE_PATH) or "", variables)
        download_url = self._renderer(self.descriptor.get(DOWNLOAD_URL, ""), variables)

        target = self.cache_root / executable_dir if unpack else self.cache_root
        return DownloadPlan(
            filename=rendered_filename,
            url=download_url + rendered_filename,
            cache_root=self.cache_root,
            unpack=unpack,
            executable_path=(target / executable).absolute(),
        )

    def expected_executable_path(self) -> Path | None:
        """Return where the cached executable lives once downloaded."""

        plan = self.plan()
        return plan.executable_path if plan is not None else None

    def download(self) -> None:
        """Ensure the platform artifact is cached and point at its executable.

        When the descriptor has no filename for the platform the resolver
        becomes unresolved so callers fall back to a system-provided tool.
        A cache hit performs no network access.

        Raises:
            ToolDownloadError: If the artifact is missing remotely or cannot be
                fetched, unpacked or moved into the cache.
        """

        plan = self.plan()
        if plan is None:
            self._state = UNRESOLVED
            return

        if plan.executable_path.exists():
            self._state = Resolved(plan.executable_path)
            self.logger.debug(f"Tool {self.name} cached at {plan.executable_path}")
            return

        try:
            staging = Path(tempfile.mkdtemp(prefix=TEMP_PREFIX))
            artifact = staging / PurePosixPath(plan.filename).name
            self.logger.debug(f"Located {plan.filename}")
            self.logger.debug(f"Downloading {plan.url}")
            fetch_to_file(plan.url, artifact, timeout=self.settings.download_timeout)
            self.logger.debug(f"Downloaded {plan.filename}")

            plan.cache_root.mkdir(parents=True, exist_ok=True)
            if plan.unpack:
                unpack_archive(artifact, plan.cache_root, strip_leading=False)
                self.logger.debug(f"Unpacked {plan.filename}")
            else:
                shutil.move(artifact, plan.executable_path)
            _make_executable(plan.executable_path)
        except ArtifactNotFoundError as exc:
            self.logger.debug(f"Tool artifact {plan.filename} was not found")
            raise ToolDownloadError(plan.filename, DownloadFailureKind.NOT_FOUND) from exc
        except (OSError, requests.RequestException, ArchiveError) as exc:
            self.logger.debug(f"Unexpected error downloading {plan.filename}: {exc}")
            raise ToolDownloadError(plan.filename, DownloadFailureKind.DOWNLOAD_FAILED) from exc

        self._state = Resolved(plan.executable_path)
        self.logger.debug(f"Tool {self.name} cached at {plan.executable_path}")

    def check(self) -> VerificationResult:
        """Run the version command and classify the outcome. Never raises."""

        executable = self.executable
        if executable is None:
            return VerificationResult.UNRESOLVED

        version_argument = self.descriptor.get(COMMAND_VERSION)
        verify_template = self.descriptor.get(COMMAND_VERIFY)
        if version_argument is None or verify_template is None:
            self.logger.debug(f"Descriptor for {self.name} does not define {COMMAND_VERSION} and {COMMAND_VERIFY}")
            return VerificationResult.EXECUTION_FAILED

        command = Command(str(executable)).arg(version_argument)
        try:
            output = run_command_capturing(command, logger=self.logger)
        except (CommandExecutionError, OSError) as exc:
            self.logger.debug(str(exc))
            return VerificationResult.EXECUTION_FAILED

        expression = self._renderer(verify_template.strip(), self._variables())
        try:
            pattern = re.compile(expression)
        except re.error as exc:
            self.logger.debug(f"Invalid verify pattern {expression!r}: {exc}")
            return VerificationResult.PATTERN_MISMATCH
        if pattern.search(output) is None:
            return VerificationResult.PATTERN_MISMATCH
        return VerificationResult.VERIFIED

    def verify(self) -> bool:
        """Return ``True`` when the executable reports the expected version."""

        return self.check().ok

    def as_invocation(self) -> Command:
        """Return a command anchored at the resolved executable.

        Raises:
            ToolNotResolvedError: If no executable has been resolved.
        """

        executable = self.executable
        if executable is None:
            raise ToolNotResolvedError(f"Tool {self.name} has no executable for platform {self.platform}")
        return Command(str(executable))

    def _variables(self) -> dict[str, str]:
        return {VERSION: self.version}


def _make_executable(path: Path) -> None:
    """Set executable permissions on ``path`` for user/group/other."""

    if path.is_file():
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


__all__ = [
    "UNRESOLVED",
    "DownloadPlan",
    "ExecutableState",
    "Resolved",
    "ToolResolver",
    "Unresolved",
    "VerificationResult",
]
