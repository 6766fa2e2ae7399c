#!/usr/bin/env python3
"""Smoke runner for a running jsonmock server.

Steps:
- wait for the health route
- fetch the live route table
- request every route without path parameters, concurrently
- emit a compact summary and exit code (0 only if every route answered 200 JSON)
"""
from __future__ import annotations

import asyncio
import sys

import httpx

from jsonmock.logging_conf import get_logger, setup_logging
from runner.cli import parse_args
from runner.client import fetch_routes, probe_all, wait_for_health
from runner.utils import probeable_routes, summarize

setup_logging()
logger = get_logger("runner")


async def run_smoke(
    *,
    base_url: str,
    timeout_s: float = 20.0,
    concurrency: int = 8,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    async with httpx.AsyncClient(base_url=base_url, timeout=10.0, transport=transport) as client:
        await wait_for_health(client, timeout_s)
        listing = await fetch_routes(client)
        routes = probeable_routes(listing)
        probes = await probe_all(client, routes, concurrency=concurrency)
    summary, exit_code = summarize(probes, version=listing.get("version"))
    logger.info("runner.summary", extra=summary)
    return exit_code


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv or sys.argv[1:])
    code = asyncio.run(
        run_smoke(base_url=args.base_url, timeout_s=args.timeout, concurrency=args.concurrency)
    )
    raise SystemExit(code)


if __name__ == "__main__":
    main()
