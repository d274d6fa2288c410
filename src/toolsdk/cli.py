# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command line entry point for fetching and verifying descriptor-driven tools."""

from __future__ import annotations

import typer
from rich import box
from rich.table import Table

from .config import ConfigError, ToolSettings, load_settings
from .descriptor import EXECUTABLE, VERSION, available_descriptors, load_descriptor
from .errors import ToolDownloadError, ToolInitializationError
from .logging import ConsoleToolLogger, detect_tty, get_console
from .platform import current_platform
from .resolver import ToolResolver

app = typer.Typer(
    help="Download, cache and verify release tooling.",
    no_args_is_help=True,
    add_completion=False,
)

UNSUPPORTED_PLATFORM_EXIT = 2


def _load_settings(logger: ConsoleToolLogger) -> ToolSettings:
    try:
        return load_settings()
    except ConfigError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=1) from exc


def _build_resolver(
    logger: ConsoleToolLogger,
    name: str,
    version: str | None,
    platform: str | None,
) -> ToolResolver:
    """Construct a resolver, defaulting version and platform.

    Raises:
        typer.Exit: When the descriptor cannot be loaded or has no default version.
    """

    settings = _load_settings(logger)
    try:
        if version is None:
            version = load_descriptor(name, search_dirs=settings.descriptor_dirs).get(VERSION)
            if not version:
                logger.error(f"Descriptor for {name} has no default version; pass VERSION explicitly")
                raise typer.Exit(code=1)
        return ToolResolver(logger, name, version, platform or current_platform(), settings=settings)
    except ToolInitializationError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=1) from exc


def _require_enabled(logger: ConsoleToolLogger, resolver: ToolResolver) -> None:
    if not resolver.is_enabled:
        logger.error(f"Tool {resolver.name} is not available for platform {resolver.platform}")
        raise typer.Exit(code=UNSUPPORTED_PLATFORM_EXIT)


def _verify_or_exit(logger: ConsoleToolLogger, resolver: ToolResolver) -> None:
    result = resolver.check()
    if not result.ok:
        logger.error(f"Tool {resolver.name} {resolver.version} could not be verified ({result.value})")
        raise typer.Exit(code=1)
    logger.info(f"Verified {resolver.name} {resolver.version}")


@app.command("fetch")
def fetch_command(
    name: str = typer.Argument(..., help="Tool name, e.g. cosign."),
    version: str | None = typer.Argument(None, help="Tool version; defaults to the descriptor's version."),
    platform: str | None = typer.Option(None, "--platform", "-p", help="Platform identifier override."),
    verify: bool = typer.Option(True, "--verify/--no-verify", help="Run the tool's version check after fetching."),
    debug: bool = typer.Option(False, "--debug", help="Show debug progress."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji in log output."),
) -> None:
    """Download a tool into the cache (or reuse it) and print its executable path."""

    logger = ConsoleToolLogger(debug=debug, use_emoji=emoji)
    resolver = _build_resolver(logger, name, version, platform)
    _require_enabled(logger, resolver)

    try:
        resolver.download()
    except ToolDownloadError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=1) from exc

    if resolver.executable is None:
        system_name = resolver.descriptor[resolver.descriptor.platform_key(resolver.platform, EXECUTABLE)]
        logger.warn(f"No artifact published for {resolver.platform}; using system {system_name}")
        resolver.resolve_to(system_name)

    if verify:
        _verify_or_exit(logger, resolver)
    typer.echo(str(resolver.executable))


@app.command("verify")
def verify_command(
    name: str = typer.Argument(..., help="Tool name, e.g. cosign."),
    version: str | None = typer.Argument(None, help="Tool version; defaults to the descriptor's version."),
    platform: str | None = typer.Option(None, "--platform", "-p", help="Platform identifier override."),
    debug: bool = typer.Option(False, "--debug", help="Show debug progress."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji in log output."),
) -> None:
    """Verify the cached tool, or the system tool when nothing is cached."""

    logger = ConsoleToolLogger(debug=debug, use_emoji=emoji)
    resolver = _build_resolver(logger, name, version, platform)
    _require_enabled(logger, resolver)
    cached = resolver.expected_executable_path()
    if cached is not None and cached.exists():
        resolver.resolve_to(cached)
    _verify_or_exit(logger, resolver)


@app.command("describe")
def describe_command(
    name: str = typer.Argument(..., help="Tool name, e.g. cosign."),
    platform: str | None = typer.Option(None, "--platform", "-p", help="Platform identifier override."),
) -> None:
    """Show the descriptor entries that apply to a platform."""

    logger = ConsoleToolLogger(use_emoji=False)
    settings = _load_settings(logger)
    selected_platform = platform or current_platform()
    try:
        descriptor = load_descriptor(name, search_dirs=settings.descriptor_dirs)
    except ToolInitializationError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=1) from exc

    table = Table(title=f"{name} ({selected_platform})", box=box.SIMPLE)
    table.add_column("Key", style="bold")
    table.add_column("Value", overflow="fold")
    for key, value in descriptor.for_platform(selected_platform).items():
        table.add_row(key, value or "-")
    get_console(color=detect_tty(), emoji=False).print(table)
    if selected_platform not in descriptor.platforms():
        supported = ", ".join(descriptor.platforms()) or "none"
        logger.warn(f"{name} is not available for {selected_platform}; supported: {supported}")


@app.command("list")
def list_command() -> None:
    """List the tool descriptors that can be resolved."""

    logger = ConsoleToolLogger(use_emoji=False)
    settings = _load_settings(logger)
    for name in available_descriptors(search_dirs=settings.descriptor_dirs):
        typer.echo(name)


@app.command("platform")
def platform_command() -> None:
    """Print the platform identifier detected for this host."""

    typer.echo(current_platform())


__all__ = ["app"]
