# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""HTTP retrieval of tool artifacts."""

from __future__ import annotations

from pathlib import Path
from typing import Final

import requests

CHUNK_SIZE: Final[int] = 64 * 1024
_NOT_FOUND_STATUSES: Final[frozenset[int]] = frozenset({404, 410})


class ArtifactNotFoundError(FileNotFoundError):
    """Raised when the remote server reports that an artifact does not exist."""

    def __init__(self, url: str, status: int) -> None:
        super().__init__(f"{url} returned HTTP {status}")
        self.url = url
        self.status = status


def fetch_to_file(url: str, destination: Path, *, timeout: float | None = None) -> Path:
    """Stream the resource at ``url`` into ``destination``.

    An existing file at ``destination`` is overwritten.

    Args:
        url: Fully rendered artifact URL.
        destination: File receiving the payload; its parent must exist.
        timeout: Optional connect/read timeout in seconds.

    Returns:
        Path: ``destination``.

    Raises:
        ArtifactNotFoundError: If the server answers 404 or 410.
        requests.RequestException: On connection failures and other HTTP errors.
        OSError: If the payload cannot be written.
    """

    with requests.get(url, stream=True, timeout=timeout) as response:
        if response.status_code in _NOT_FOUND_STATUSES:
            raise ArtifactNotFoundError(url, response.status_code)
        response.raise_for_status()
        with destination.open("wb") as sink:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                sink.write(chunk)
    return destination


__all__ = ["ArtifactNotFoundError", "fetch_to_file"]
