# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Extraction of downloaded tool archives into a cache directory."""

from __future__ import annotations

import shutil
import stat
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import Final

TAR_SUFFIXES: Final[dict[str, str]] = {
    ".tar": "r:",
    ".tar.gz": "r:gz",
    ".tgz": "r:gz",
    ".tar.bz2": "r:bz2",
    ".tbz2": "r:bz2",
    ".tar.xz": "r:xz",
    ".txz": "r:xz",
}
ZIP_SUFFIXES: Final[tuple[str, ...]] = (".zip",)


class ArchiveError(RuntimeError):
    """Raised when an archive is unsupported, corrupt or unsafe to extract."""


def archive_format(path: Path) -> str | None:
    """Return ``"zip"`` or a :mod:`tarfile` mode for ``path``, else ``None``."""

    name = path.name.lower()
    if name.endswith(ZIP_SUFFIXES):
        return "zip"
    for suffix in sorted(TAR_SUFFIXES, key=len, reverse=True):
        if name.endswith(suffix):
            return TAR_SUFFIXES[suffix]
    return None


def unpack_archive(archive: Path, destination: Path, *, strip_leading: bool = False) -> None:
    """Extract ``archive`` into ``destination``.

    Args:
        archive: Downloaded ``.zip`` or tar archive.
        destination: Directory receiving the archive contents; created when missing.
        strip_leading: Drop the first path component of every member.

    Raises:
        ArchiveError: If the format is unsupported, the archive is corrupt or a
            member would land outside ``destination``.
    """

    mode = archive_format(archive)
    if mode is None:
        raise ArchiveError(f"Unsupported archive format: {archive.name}")
    destination.mkdir(parents=True, exist_ok=True)
    try:
        if mode == "zip":
            _unpack_zip(archive, destination, strip_leading=strip_leading)
        else:
            _unpack_tar(archive, destination, mode=mode, strip_leading=strip_leading)
    except (tarfile.TarError, zipfile.BadZipFile, EOFError) as exc:
        raise ArchiveError(f"Unable to extract {archive.name}: {exc}") from exc


def _strip_first(name: str) -> str:
    parts = PurePosixPath(name).parts
    return str(PurePosixPath(*parts[1:])) if len(parts) > 1 else ""


def _unpack_tar(archive: Path, destination: Path, *, mode: str, strip_leading: bool) -> None:
    def _strip_filter(member: tarfile.TarInfo, path: str) -> tarfile.TarInfo | None:
        filtered = tarfile.data_filter(member, path)
        if filtered is None:
            return None
        name = _strip_first(filtered.name)
        if not name:
            return None
        if filtered.islnk():
            return filtered.replace(name=name, linkname=_strip_first(filtered.linkname), deep=False)
        return filtered.replace(name=name, deep=False)

    with tarfile.open(archive, mode) as bundle:
        bundle.extractall(destination, filter=_strip_filter if strip_leading else "data")


def _unpack_zip(archive: Path, destination: Path, *, strip_leading: bool) -> None:
    root = destination.resolve()
    with zipfile.ZipFile(archive) as bundle:
        for info in bundle.infolist():
            name = _strip_first(info.filename) if strip_leading else info.filename
            if not name or name in (".", "/"):
                continue
            target = (root / name).resolve()
            if not target.is_relative_to(root):
                raise ArchiveError(f"Archive member {info.filename} escapes {destination}")
            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            with bundle.open(info) as source, target.open("wb") as sink:
                shutil.copyfileobj(source, sink)
            mode = (info.external_attr >> 16) & 0o7777
            if mode and not stat.S_ISLNK(info.external_attr >> 16):
                target.chmod(mode)


__all__ = ["ArchiveError", "archive_format", "unpack_archive"]
