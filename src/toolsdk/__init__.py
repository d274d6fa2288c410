# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Descriptor-driven download, caching and verification of release tools."""

from __future__ import annotations

from .config import ConfigError, ToolSettings, load_settings
from .descriptor import ToolDescriptor, load_descriptor
from .errors import (
    CommandExecutionError,
    DownloadFailureKind,
    ToolDownloadError,
    ToolError,
    ToolInitializationError,
    ToolNotResolvedError,
)
from .logging import ConsoleToolLogger, ToolLogger
from .platform import current_platform
from .process import Command
from .resolver import Resolved, ToolResolver, Unresolved, VerificationResult

__all__ = [
    "Command",
    "CommandExecutionError",
    "ConfigError",
    "ConsoleToolLogger",
    "DownloadFailureKind",
    "Resolved",
    "ToolDescriptor",
    "ToolDownloadError",
    "ToolError",
    "ToolInitializationError",
    "ToolLogger",
    "ToolNotResolvedError",
    "ToolResolver",
    "ToolSettings",
    "Unresolved",
    "VerificationResult",
    "current_platform",
    "load_descriptor",
    "load_settings",
]
