# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI tests for the toolsdk command line."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from toolsdk.cli import app
from toolsdk.download import ArtifactNotFoundError
from toolsdk.platform import current_platform

DESCRIPTOR = "\n".join(
    [
        "version = 1.2.3",
        "download.url = https://example.test/",
        "unpack = false",
        "command.version = --version",
        "command.verify = version v{{version}}",
        "linux.executable = mytool",
        "linux.filename = mytool-{{version}}",
        "osx.executable = mytool",
    ]
)


@pytest.fixture
def cli_env(tmp_path: Path, descriptor_dir: Path, make_descriptor: Callable[[str, str], Path]) -> dict[str, str | None]:
    make_descriptor("mytool", DESCRIPTOR)
    return {
        "JRELEASER_USER_HOME": str(tmp_path / "home"),
        "TOOLSDK_DESCRIPTOR_PATH": str(descriptor_dir),
        "TOOLSDK_DOWNLOAD_TIMEOUT": None,
    }


def _fake_fetch(body: str) -> Callable[..., Path]:
    def _fetch(url: str, destination: Path, *, timeout: float | None = None) -> Path:
        destination.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
        return destination

    return _fetch


@pytest.mark.skipif(sys.platform == "win32", reason="uses /bin/sh scripts")
def test_fetch_downloads_verifies_and_prints_path(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, cli_env: dict[str, str | None]
) -> None:
    monkeypatch.setattr("toolsdk.resolver.fetch_to_file", _fake_fetch('echo "mytool version v1.2.3"'))
    runner = CliRunner()

    result = runner.invoke(app, ["fetch", "mytool", "--platform", "linux", "--no-emoji"], env=cli_env)

    assert result.exit_code == 0, result.output
    expected = (tmp_path / "home" / "caches" / "mytool" / "1.2.3" / "mytool").absolute()
    assert str(expected) in result.stdout
    assert expected.exists()


@pytest.mark.skipif(sys.platform == "win32", reason="uses /bin/sh scripts")
def test_fetch_fails_when_verification_fails(
    monkeypatch: pytest.MonkeyPatch, cli_env: dict[str, str | None]
) -> None:
    monkeypatch.setattr("toolsdk.resolver.fetch_to_file", _fake_fetch('echo "mytool version v9.9.9"'))
    runner = CliRunner()

    result = runner.invoke(app, ["fetch", "mytool", "1.2.3", "--platform", "linux", "--no-emoji"], env=cli_env)

    assert result.exit_code == 1
    assert "could not be verified" in result.output


def test_fetch_without_verification(monkeypatch: pytest.MonkeyPatch, cli_env: dict[str, str | None]) -> None:
    monkeypatch.setattr("toolsdk.resolver.fetch_to_file", _fake_fetch("exit 1"))
    runner = CliRunner()

    result = runner.invoke(app, ["fetch", "mytool", "2.0.0", "-p", "linux", "--no-verify", "--no-emoji"], env=cli_env)

    assert result.exit_code == 0, result.output
    assert str(Path("mytool") / "2.0.0" / "mytool") in result.stdout


def test_fetch_reports_missing_artifact(monkeypatch: pytest.MonkeyPatch, cli_env: dict[str, str | None]) -> None:
    def _missing(url: str, destination: Path, *, timeout: float | None = None) -> Path:
        raise ArtifactNotFoundError(url, 404)

    monkeypatch.setattr("toolsdk.resolver.fetch_to_file", _missing)
    runner = CliRunner()

    result = runner.invoke(app, ["fetch", "mytool", "--platform", "linux", "--no-emoji"], env=cli_env)

    assert result.exit_code == 1
    assert "was not found" in result.output


def test_fetch_rejects_unsupported_platform(cli_env: dict[str, str | None]) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["fetch", "mytool", "--platform", "windows", "--no-emoji"], env=cli_env)

    assert result.exit_code == 2
    assert "not available for platform windows" in result.output


def test_fetch_falls_back_to_system_tool(cli_env: dict[str, str | None]) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["fetch", "mytool", "--platform", "osx", "--no-verify", "--no-emoji"], env=cli_env)

    assert result.exit_code == 0, result.output
    assert result.stdout.strip().splitlines()[-1] == "mytool"


def test_unknown_tool_exits_with_error(cli_env: dict[str, str | None]) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["verify", "no-such-tool", "1.0.0", "--no-emoji"], env=cli_env)

    assert result.exit_code == 1
    assert "no-such-tool" in result.output


@pytest.mark.skipif(sys.platform == "win32", reason="uses /bin/sh scripts")
def test_verify_uses_cached_executable(tmp_path: Path, cli_env: dict[str, str | None]) -> None:
    cached = tmp_path / "home" / "caches" / "mytool" / "1.2.3" / "mytool"
    cached.parent.mkdir(parents=True)
    cached.write_text('#!/bin/sh\necho "version v1.2.3"\n', encoding="utf-8")
    cached.chmod(0o755)
    runner = CliRunner()

    result = runner.invoke(app, ["verify", "mytool", "--platform", "linux", "--no-emoji"], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "Verified mytool 1.2.3" in result.output


def test_describe_lists_platform_entries(cli_env: dict[str, str | None]) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["describe", "mytool", "--platform", "linux"], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "1.2.3" in result.output
    assert "unpack" in result.output
    assert "osx.executable" not in result.output


def test_describe_warns_for_unsupported_platform(cli_env: dict[str, str | None]) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["describe", "mytool", "--platform", "windows"], env=cli_env)

    assert result.exit_code == 0
    assert "not available for windows" in result.output


def test_list_includes_bundled_and_custom_descriptors(cli_env: dict[str, str | None]) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["list"], env=cli_env)

    assert result.exit_code == 0
    names = result.stdout.split()
    assert {"cosign", "syft", "mytool"} <= set(names)


def test_platform_prints_detected_identifier() -> None:
    result = CliRunner().invoke(app, ["platform"])

    assert result.exit_code == 0
    assert result.stdout.strip() == current_platform()
