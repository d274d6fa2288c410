# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for platform identifier detection."""

from __future__ import annotations

import pytest

from toolsdk import platform as platform_module
from toolsdk.platform import current_platform, normalize_platform


@pytest.mark.parametrize(
    ("system", "machine", "expected"),
    [
        ("Linux", "x86_64", "linux-x86_64"),
        ("Linux", "aarch64", "linux-aarch_64"),
        ("Darwin", "arm64", "osx-aarch_64"),
        ("Windows", "AMD64", "windows-x86_64"),
        ("Linux", "i686", "linux-x86_32"),
        ("FreeBSD", "riscv64", "freebsd-riscv64"),
    ],
)
def test_normalize_platform(system: str, machine: str, expected: str) -> None:
    assert normalize_platform(system, machine) == expected


def test_current_platform_uses_host_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(platform_module._platform, "system", lambda: "Darwin")
    monkeypatch.setattr(platform_module._platform, "machine", lambda: "x86_64")

    assert current_platform() == "osx-x86_64"
