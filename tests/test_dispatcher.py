import time
from pathlib import Path

import pytest

from conftest import PING_BODY
from jsonmock.domain.errors import DispatchNotFound, DispatchServerError
from jsonmock.domain.routes import RouteKey
from jsonmock.live import LiveConfig
from jsonmock.service.dispatcher import JSON_MEDIA_TYPE, Dispatcher
from jsonmock.service.reloader import build_table


@pytest.fixture
def dispatcher(config_file: Path) -> Dispatcher:
    return Dispatcher(LiveConfig(build_table(config_file)), timeout=1.0)


@pytest.mark.asyncio
async def test_hit_returns_file_bytes(dispatcher: Dispatcher):
    result = await dispatcher.handle("GET", "/api/ping")
    assert result.body == PING_BODY
    assert result.media_type == JSON_MEDIA_TYPE
    assert result.entry.key == RouteKey("GET", "/api/ping")


@pytest.mark.asyncio
async def test_miss_is_not_found(dispatcher: Dispatcher):
    with pytest.raises(DispatchNotFound):
        await dispatcher.handle("GET", "/api/missing")


@pytest.mark.asyncio
async def test_method_mismatch_is_not_found(dispatcher: Dispatcher):
    with pytest.raises(DispatchNotFound):
        await dispatcher.handle("POST", "/api/ping")


@pytest.mark.asyncio
async def test_edits_to_response_file_are_served_immediately(dispatcher: Dispatcher, workdir: Path):
    (workdir / "ping.json").write_bytes(b'{"ok":false}')
    result = await dispatcher.handle("GET", "/api/ping")
    assert result.body == b'{"ok":false}'


@pytest.mark.asyncio
async def test_deleted_file_is_server_error_and_entry_stays(dispatcher: Dispatcher, workdir: Path):
    (workdir / "ping.json").unlink()
    with pytest.raises(DispatchServerError):
        await dispatcher.handle("GET", "/api/ping")
    assert RouteKey("GET", "/api/ping") in dispatcher.live.read()


@pytest.mark.asyncio
async def test_slow_read_times_out(dispatcher: Dispatcher, monkeypatch: pytest.MonkeyPatch):
    def slow_read(self):
        time.sleep(0.5)
        return b"{}"

    monkeypatch.setattr(Path, "read_bytes", slow_read)
    dispatcher.timeout = 0.05
    with pytest.raises(DispatchServerError, match="timed out"):
        await dispatcher.handle("GET", "/api/ping")


@pytest.mark.asyncio
async def test_unrepresentable_path_is_server_error(
    dispatcher: Dispatcher, monkeypatch: pytest.MonkeyPatch
):
    def bad_path(self):
        raise ValueError("embedded null byte")

    monkeypatch.setattr(Path, "read_bytes", bad_path)
    with pytest.raises(DispatchServerError, match="embedded null byte"):
        await dispatcher.handle("GET", "/api/ping")
