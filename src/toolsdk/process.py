# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command invocations and a capturing, shell-free executor."""

from __future__ import annotations

import io
import shutil

# Bandit: subprocess usage is intentional; commands are argument lists built
# from tool descriptors and never run through a shell.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from .errors import CommandExecutionError
from .logging import ToolLogger

TIMEOUT_EXIT_CODE: Final[int] = 124


@dataclass(slots=True)
class Command:
    """An executable plus the arguments it will be invoked with."""

    executable: str
    arguments: list[str] = field(default_factory=list)

    def arg(self, value: object) -> Command:
        """Append a single argument and return ``self`` for chaining."""

        self.arguments.append(str(value))
        return self

    def args(self, *values: object) -> Command:
        """Append ``values`` in order and return ``self`` for chaining."""

        self.arguments.extend(str(value) for value in values)
        return self

    def as_argv(self) -> list[str]:
        """Return the full argument vector, executable first."""

        return [self.executable, *self.arguments]

    def __str__(self) -> str:
        return " ".join(self.as_argv())


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """Execution options applied to captured commands."""

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    timeout: float | None = None


def _normalize_args(args: Sequence[str]) -> list[str]:
    """Resolve the executable of ``args`` on ``PATH`` unless it is a path.

    Raises:
        ValueError: If no arguments are provided.
        FileNotFoundError: If a bare executable name is not on ``PATH``.
    """

    if not args:
        raise ValueError("subprocess command requires at least one argument")

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute() or len(head_path.parts) > 1:
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        raise FileNotFoundError(f"Executable '{head}' was not found on PATH")
    return [resolved, *rest]


def execute_command_capturing(
    command: Command,
    out: io.StringIO,
    *,
    logger: ToolLogger,
    options: CommandOptions | None = None,
) -> int:
    """Run ``command`` writing its combined output into ``out``.

    Args:
        command: Invocation to execute.
        out: Sink receiving stdout and stderr, interleaved.
        logger: Logger receiving the executed command line at debug level.
        options: Optional working directory, environment and timeout.

    Returns:
        int: Process exit code; ``124`` when the timeout expired.

    Raises:
        FileNotFoundError: If the executable cannot be resolved.
        OSError: If the process cannot be started.
    """

    resolved_options = options or CommandOptions()
    normalized = _normalize_args(command.as_argv())
    logger.debug(f"Executing {' '.join(normalized)}")
    try:
        completed = subprocess.run(  # nosec B603 - argument list, no shell
            normalized,
            cwd=str(resolved_options.cwd) if resolved_options.cwd is not None else None,
            env=dict(resolved_options.env) if resolved_options.env is not None else None,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
            timeout=resolved_options.timeout,
        )
    except subprocess.TimeoutExpired as exc:
        captured = exc.output
        if isinstance(captured, bytes):
            captured = captured.decode(errors="replace")
        out.write(captured or "")
        out.write(f"Command timed out after {resolved_options.timeout:.1f}s")
        return TIMEOUT_EXIT_CODE

    out.write(completed.stdout or "")
    return completed.returncode


def run_command_capturing(
    command: Command,
    *,
    logger: ToolLogger,
    options: CommandOptions | None = None,
) -> str:
    """Run ``command`` and return its output, failing on non-zero exit.

    Args:
        command: Invocation to execute.
        logger: Logger used for the captured output of failed commands.
        options: Optional working directory, environment and timeout.

    Returns:
        str: Combined stdout/stderr text.

    Raises:
        CommandExecutionError: When the process exits with a non-zero status.
        FileNotFoundError: If the executable cannot be resolved.
        OSError: If the process cannot be started.
    """

    out = io.StringIO()
    exit_code = execute_command_capturing(command, out, logger=logger, options=options)
    output = out.getvalue()
    if exit_code != 0:
        logger.error(output.strip())
        raise CommandExecutionError(exit_code, output)
    return output


__all__ = [
    "TIMEOUT_EXIT_CODE",
    "Command",
    "CommandOptions",
    "execute_command_capturing",
    "run_command_capturing",
]
