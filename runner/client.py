from __future__ import annotations

import asyncio
import json
import time

import httpx

from jsonmock.logging_conf import get_logger
from runner.types import Probe, RoutesError, SmokeError

logger = get_logger("runner.client")

HEALTH_PATH = "/_mock/health"
ROUTES_PATH = "/_mock/routes"


async def wait_for_health(client: httpx.AsyncClient, timeout_s: float = 20.0) -> int:
    """Poll the health route until it answers ok; return the table version.

    Raises SmokeError if the server is not healthy within `timeout_s`.
    """
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        try:
            r = await client.get(HEALTH_PATH)
            if r.status_code == 200 and r.json().get("ok") is True:
                version = r.json().get("version")
                logger.info("health.ok", extra={"event": "health_ok", "version": version})
                return version
        except httpx.HTTPError:
            pass
        await asyncio.sleep(0.25)
    raise SmokeError("Health check did not pass within timeout")


async def fetch_routes(client: httpx.AsyncClient, *, retries: int = 3) -> dict:
    """Return the server's current route listing, with basic retry."""
    last_err: Exception | None = None
    for attempt in range(retries):
        try:
            r = await client.get(ROUTES_PATH)
            r.raise_for_status()
            return r.json()
        except httpx.HTTPError as e:  # pragma: no cover - network flakiness
            last_err = e
            logger.warning(
                "routes.retry",
                extra={"event": "routes_retry", "attempt": attempt + 1, "error": str(e)},
            )
    raise RoutesError(str(last_err) if last_err else "fetch_routes failed")


async def probe_one(client: httpx.AsyncClient, method: str, path: str) -> Probe:
    """Request one route and check that it answers 200 with a JSON body."""
    start = time.perf_counter()
    try:
        r = await client.request(method, path)
    except httpx.HTTPError as e:
        elapsed = (time.perf_counter() - start) * 1000.0
        return Probe(method, path, None, round(elapsed, 2), error=str(e))
    elapsed = round((time.perf_counter() - start) * 1000.0, 2)

    if r.status_code != 200:
        try:
            detail = r.json().get("error") or r.text
        except ValueError:
            detail = r.text
        return Probe(method, path, r.status_code, elapsed, error=detail)
    try:
        json.loads(r.content)
    except ValueError as e:
        return Probe(method, path, r.status_code, elapsed, error=f"invalid JSON: {e}")
    return Probe(method, path, r.status_code, elapsed)


async def probe_all(
    client: httpx.AsyncClient, routes: list[tuple[str, str]], *, concurrency: int = 8
) -> list[Probe]:
    """Probe routes concurrently, at most `concurrency` in flight."""
    sem = asyncio.Semaphore(concurrency)

    async def _bounded(method: str, path: str) -> Probe:
        async with sem:
            return await probe_one(client, method, path)

    probes = await asyncio.gather(*(_bounded(m, p) for m, p in routes))
    logger.info(
        "probe.summary",
        extra={
            "event": "probe_summary",
            "requested": len(routes),
            "succeeded": sum(1 for p in probes if p.ok),
        },
    )
    return list(probes)
