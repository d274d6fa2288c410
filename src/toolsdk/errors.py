# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exceptions raised while resolving, downloading and verifying tools."""

from __future__ import annotations

from enum import Enum


class ToolError(Exception):
    """Base class for tool resolution failures."""


class ToolInitializationError(ToolError):
    """Raised when a tool descriptor cannot be located or parsed."""

    def __init__(self, name: str, reason: str | None = None) -> None:
        """Initialise the error for the descriptor belonging to ``name``.

        Args:
            name: Tool name whose descriptor failed to load.
            reason: Optional detail describing the underlying failure.
        """

        message = f"Unexpected error reading descriptor for tool '{name}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.name = name


class DownloadFailureKind(str, Enum):
    """Enumerate the ways a tool download can fail."""

    NOT_FOUND = "not-found"
    DOWNLOAD_FAILED = "download-failed"


class ToolDownloadError(ToolError):
    """Raised when a tool artifact cannot be fetched, unpacked or cached."""

    def __init__(self, filename: str, kind: DownloadFailureKind) -> None:
        """Initialise the error for ``filename``.

        Args:
            filename: Templated artifact filename that was being fetched.
            kind: Classification of the failure.
        """

        if kind is DownloadFailureKind.NOT_FOUND:
            message = f"Tool artifact {filename} was not found"
        else:
            message = f"Unexpected error downloading tool artifact {filename}"
        super().__init__(message)
        self.filename = filename
        self.kind = kind

    @property
    def not_found(self) -> bool:
        """Return ``True`` when the remote artifact does not exist."""

        return self.kind is DownloadFailureKind.NOT_FOUND


class CommandExecutionError(ToolError):
    """Raised when a captured command exits with a non-zero status."""

    def __init__(self, exit_code: int, output: str = "") -> None:
        """Initialise the error with the command exit status.

        Args:
            exit_code: Exit status reported by the process.
            output: Output captured before the process exited.
        """

        super().__init__(f"Command execution error. exit value = {exit_code}")
        self.exit_code = exit_code
        self.output = output


class ToolNotResolvedError(RuntimeError):
    """Raised when an executable is requested before one has been resolved."""


__all__ = [
    "CommandExecutionError",
    "DownloadFailureKind",
    "ToolDownloadError",
    "ToolError",
    "ToolInitializationError",
    "ToolNotResolvedError",
]
