import httpx
import pytest

from runner.smoke import run_smoke
from runner.types import Probe
from runner.utils import percentile, probeable_routes, summarize

LISTING = {
    "version": 3,
    "routes": [
        {"method": "GET", "path": "/api/ping"},
        {"method": "POST", "path": "/api/users"},
        {"method": "GET", "path": "/api/users/:id"},
        {"method": "GET", "path": "/files/*rest"},
        {"method": "GET", "path": "/api/broken"},
    ],
}


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/_mock/health":
        return httpx.Response(200, json={"ok": True, "version": 3})
    if path == "/_mock/routes":
        return httpx.Response(200, json=LISTING)
    if path == "/api/broken":
        return httpx.Response(500, json={"error": "gone"})
    return httpx.Response(200, content=b'{"ok":true}')


def test_probeable_routes_skips_patterns():
    assert probeable_routes(LISTING) == [
        ("GET", "/api/ping"),
        ("POST", "/api/users"),
        ("GET", "/api/broken"),
    ]


def test_percentile():
    assert percentile([], 0.95) == 0.0
    assert percentile([1.0, 2.0, 3.0], 0.5) == 2.0


def test_summarize_counts_failures():
    probes = [
        Probe("GET", "/a", 200, 1.0),
        Probe("GET", "/b", 500, 3.0, error="gone"),
        Probe("GET", "/c", None, 2.0, error="connect failed"),
    ]
    summary, code = summarize(probes, version=4)
    assert code == 1
    assert summary["ok_count"] == 1
    assert summary["error_count"] == 2
    assert summary["version"] == 4
    assert summary["timings"]["max_ms"] == 3.0


def test_summarize_all_ok_exits_zero():
    _, code = summarize([Probe("GET", "/a", 200, 1.0)])
    assert code == 0
    _, code = summarize([])
    assert code == 1


@pytest.mark.asyncio
async def test_run_smoke_reports_broken_route():
    code = await run_smoke(base_url="http://test", transport=httpx.MockTransport(_handler))
    assert code == 1


@pytest.mark.asyncio
async def test_run_smoke_passes_when_every_route_answers():
    listing = {**LISTING, "routes": LISTING["routes"][:2]}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/_mock/routes":
            return httpx.Response(200, json=listing)
        return _handler(request)

    code = await run_smoke(base_url="http://test", transport=httpx.MockTransport(handler))
    assert code == 0
