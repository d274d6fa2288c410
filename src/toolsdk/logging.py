# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Logger sink passed to tool resolvers, with a Rich-backed console implementation."""

from __future__ import annotations

import sys
from abc import abstractmethod
from functools import cache
from typing import Final, Literal, Protocol, runtime_checkable

from rich.console import Console
from rich.text import Text

LevelName = Literal["debug", "info", "warn", "error"]

_LEVEL_STYLES: Final[dict[LevelName, str]] = {
    "debug": "dim",
    "info": "cyan",
    "warn": "yellow",
    "error": "red",
}
_LEVEL_EMOJI: Final[dict[LevelName, str]] = {
    "debug": "🔎 ",
    "info": "ℹ️ ",
    "warn": "⚠️ ",
    "error": "❌ ",
}


@runtime_checkable
class ToolLogger(Protocol):
    """Protocol describing the logging calls made while managing tools."""

    __slots__ = ()

    @abstractmethod
    def debug(self, message: str) -> None:
        """Emit a debug ``message`` when debug logging is enabled."""

    @abstractmethod
    def info(self, message: str) -> None:
        """Emit an informational ``message``."""

    @abstractmethod
    def warn(self, message: str) -> None:
        """Emit a warning ``message``."""

    @abstractmethod
    def error(self, message: str) -> None:
        """Emit an error ``message``."""


def detect_tty() -> bool:
    """Return ``True`` when stdout appears to be backed by a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


@cache
def get_console(*, color: bool, emoji: bool, stderr: bool = False) -> Console:
    """Return a cached Rich console configured for the presentation flags.

    Args:
        color: ``True`` when ANSI colour output should be enabled.
        emoji: ``True`` when Rich should render emoji glyphs.
        stderr: ``True`` to write to standard error instead of stdout.

    Returns:
        Console: Console shared by every caller using the same flags.
    """

    tty = detect_tty()
    return Console(
        color_system="auto" if color and tty else None,
        no_color=not (color and tty),
        emoji=emoji,
        soft_wrap=True,
        stderr=stderr,
    )


class ConsoleToolLogger(ToolLogger):
    """Render log lines through a Rich console, honouring a debug toggle."""

    def __init__(
        self,
        *,
        debug: bool = False,
        use_emoji: bool = True,
        use_color: bool | None = None,
        console: Console | None = None,
    ) -> None:
        """Initialise the logger.

        Args:
            debug: When ``False`` debug lines are dropped.
            use_emoji: Prefix each line with a level emoji.
            use_color: Explicit colour flag; defaults to TTY detection.
            console: Console to write to; defaults to a shared stderr console.
        """

        self.debug_enabled = debug
        self.use_emoji = use_emoji
        self.use_color = detect_tty() if use_color is None else use_color
        self._console = console or get_console(color=self.use_color, emoji=use_emoji, stderr=True)

    @property
    def console(self) -> Console:
        """Return the Rich console bound to the logger."""

        return self._console

    def debug(self, message: str) -> None:
        if self.debug_enabled:
            self._emit("debug", message)

    def info(self, message: str) -> None:
        self._emit("info", message)

    def warn(self, message: str) -> None:
        self._emit("warn", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def _emit(self, level: LevelName, message: str) -> None:
        prefix = _LEVEL_EMOJI[level] if self.use_emoji else ""
        text = Text(f"{prefix}{message}")
        if self.use_color:
            text.stylize(_LEVEL_STYLES[level])
        self._console.print(text)


__all__ = ["ConsoleToolLogger", "LevelName", "ToolLogger", "detect_tty", "get_console"]
