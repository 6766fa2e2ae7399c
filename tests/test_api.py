"""HTTP behaviour through the FastAPI app, lifespan included."""
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from conftest import PING_BODY, ping_services, write_declaration
from jsonmock.domain.errors import DeclarationFileError
from jsonmock.main import create_app


@pytest.fixture
def client(config_file: Path):
    with TestClient(create_app(config_file, watch=False)) as c:
        yield c


def test_declared_route_serves_file_bytes(client: TestClient):
    r = client.get("/api/ping")
    assert r.status_code == 200
    assert r.content == PING_BODY
    assert r.headers["content-type"] == "application/json"
    assert "X-Request-ID" in r.headers


def test_request_id_is_propagated(client: TestClient):
    r = client.get("/api/ping", headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"


def test_unmatched_path_is_framework_404(client: TestClient):
    r = client.get("/api/missing")
    assert r.status_code == 404
    assert r.json() == {"detail": "Not Found"}


def test_method_mismatch_is_404(client: TestClient):
    assert client.post("/api/ping").status_code == 404


def test_missing_response_file_is_500_json(client: TestClient, workdir: Path):
    (workdir / "ping.json").unlink()
    r = client.get("/api/ping")
    assert r.status_code == 500
    assert "error" in r.json()
    assert "ping.json" in r.json()["error"]


def test_reload_changes_what_is_served(client: TestClient, config_file: Path, workdir: Path):
    (workdir / "pong.json").write_bytes(b'{"pong":1}')
    write_declaration(config_file, ping_services("pong.json"))
    assert client.app.state.reloader.reload() is True

    assert client.get("/api/ping").content == b'{"pong":1}'
    assert client.get("/_mock/health").json() == {"ok": True, "version": 2}


def test_malformed_edit_keeps_serving(client: TestClient, config_file: Path):
    config_file.write_text("services: [", encoding="utf-8")
    assert client.app.state.reloader.reload() is False
    r = client.get("/api/ping")
    assert r.status_code == 200
    assert r.content == PING_BODY


def test_routes_listing(client: TestClient, config_file: Path, workdir: Path):
    body = client.get("/_mock/routes").json()
    assert body["version"] == 1
    assert body["source"] == str(config_file)
    assert body["routes"] == [
        {
            "method": "GET",
            "path": "/api/ping",
            "service": "api",
            "response_file": str(workdir / "ping.json"),
            "exists": True,
        }
    ]
    assert body["warnings"] == []
    assert str(config_file) in body["watched_paths"]


def test_startup_fails_without_declaration(workdir: Path):
    app = create_app(workdir / "absent.yaml", watch=False)
    with pytest.raises(DeclarationFileError):
        with TestClient(app):
            pass


def test_unreadable_path_is_500_json(client: TestClient, monkeypatch: pytest.MonkeyPatch):
    def bad_path(self):
        raise ValueError("embedded null byte")

    monkeypatch.setattr(Path, "read_bytes", bad_path)
    r = client.get("/api/ping")
    assert r.status_code == 500
    assert r.headers["content-type"] == "application/json"
    assert r.json() == {"error": "embedded null byte"}
