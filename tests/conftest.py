# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import stat
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest

from toolsdk.config import ToolSettings

_PROXY_VARIABLES = ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy")


@dataclass
class RecordingLogger:
    """Logger sink that keeps every message for assertions."""

    records: list[tuple[str, str]] = field(default_factory=list)

    def debug(self, message: str) -> None:
        self.records.append(("debug", message))

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def warn(self, message: str) -> None:
        self.records.append(("warn", message))

    def error(self, message: str) -> None:
        self.records.append(("error", message))

    def messages(self, level: str) -> list[str]:
        return [message for recorded, message in self.records if recorded == level]


class _StubHandler(BaseHTTPRequestHandler):
    server: _StubServer

    def do_GET(self) -> None:  # noqa: N802 - http.server naming
        self.server.requests.append(self.path)
        payload = self.server.routes.get(self.path)
        if payload is None:
            self.send_response(404)
            self.send_header("Content-Length", "0")
            self.end_headers()
            return
        self.send_response(200)
        self.send_header("Content-Type", "application/octet-stream")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002 - signature fixed by base class
        del format, args


class _StubServer(ThreadingHTTPServer):
    def __init__(self) -> None:
        super().__init__(("127.0.0.1", 0), _StubHandler)
        self.routes: dict[str, bytes] = {}
        self.requests: list[str] = []

    @property
    def base_url(self) -> str:
        return f"http://127.0.0.1:{self.server_address[1]}/"


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def descriptor_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "descriptors"
    directory.mkdir()
    return directory


@pytest.fixture
def settings(tmp_path: Path, descriptor_dir: Path) -> ToolSettings:
    return ToolSettings(cache_base=tmp_path / "home" / "caches", descriptor_dirs=(descriptor_dir,))


@pytest.fixture
def make_descriptor(descriptor_dir: Path) -> Callable[[str, str], Path]:
    """Return a factory writing ``<name>.properties`` into the descriptor directory."""

    def _write(name: str, text: str) -> Path:
        path = descriptor_dir / f"{name}.properties"
        path.write_text(text, encoding="latin-1")
        return path

    return _write


@pytest.fixture
def make_script(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a factory writing executable ``/bin/sh`` scripts."""

    def _write(name: str, body: str) -> Path:
        path = tmp_path / "scripts" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _write


@pytest.fixture
def stub_server(monkeypatch: pytest.MonkeyPatch) -> Iterator[_StubServer]:
    """Serve ``routes`` over HTTP on localhost; unknown paths answer 404."""

    for variable in _PROXY_VARIABLES:
        monkeypatch.delenv(variable, raising=False)
    server = _StubServer()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
        thread.join()
