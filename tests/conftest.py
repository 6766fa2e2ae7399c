"""Shared fixtures: a throwaway working directory with a declaration in it."""
from __future__ import annotations

from pathlib import Path

import pytest
import yaml

PING_BODY = b'{"ok":true}'


def write_declaration(path: Path, services: list[dict]) -> Path:
    path.write_text(yaml.safe_dump({"services": services}, sort_keys=False), encoding="utf-8")
    return path


def ping_services(response_file: str = "ping.json", method: str = "GET") -> list[dict]:
    return [
        {
            "name": "api",
            "basePath": "/api",
            "endpoints": [{"path": "/ping", "method": method, "responseFile": response_file}],
        }
    ]


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """tmp_path as the process working directory, holding ping.json."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "ping.json").write_bytes(PING_BODY)
    return tmp_path


@pytest.fixture
def config_file(workdir: Path) -> Path:
    return write_declaration(workdir / "config.yaml", ping_services())
