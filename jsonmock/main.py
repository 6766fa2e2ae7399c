"""FastAPI app factory, request logging and the `jsonmock` entry point."""
from __future__ import annotations

import asyncio
import os
import sys
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from uuid import uuid4

from fastapi import FastAPI, Request, Response

from . import __version__
from .api import admin_router, router as dispatch_router
from .live import LiveConfig
from .logging_conf import get_logger, set_level, setup_logging
from .service import Dispatcher, Reloader, build_table
from .settings import (
    get_config_path_from_env,
    get_debounce_ms_from_env,
    get_request_timeout_from_env,
)

setup_logging()
logger = get_logger("jsonmock")


def _log_watch_exit(task: asyncio.Task) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error(
            "watch.crashed",
            exc_info=task.exception(),
            extra={"event": "watch_crashed"},
        )


async def _stop_watching(app: FastAPI) -> None:
    app.state.stop_watch.set()
    task = app.state.watch_task
    if task is not None:
        try:
            await asyncio.wait_for(task, timeout=5.0)
        except TimeoutError:
            task.cancel()
    logger.info("shutdown", extra={"event": "shutdown"})


def create_app(
    config_path: str | os.PathLike[str] | None = None,
    *,
    watch: bool = True,
    debounce_ms: int | None = None,
    request_timeout: float | None = None,
) -> FastAPI:
    """Build the app; the declaration is loaded when the app starts up.

    Settings left as None are read from the environment at startup, not
    here, so importing the module never fails on a bad MOCK_* variable.
    A declaration that cannot be loaded at startup aborts startup, since
    there is nothing to serve. Later failures only keep the old table live.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        path = Path(config_path) if config_path is not None else get_config_path_from_env()
        debounce = debounce_ms if debounce_ms is not None else get_debounce_ms_from_env()
        timeout = (
            request_timeout if request_timeout is not None else get_request_timeout_from_env()
        )
        table = await asyncio.to_thread(build_table, path)
        live = LiveConfig(table)
        app.state.live = live
        app.state.dispatcher = Dispatcher(live, timeout=timeout)
        app.state.reloader = Reloader(path, live, debounce_ms=debounce)
        app.state.stop_watch = asyncio.Event()
        app.state.watch_task = None
        if watch:
            task = asyncio.create_task(app.state.reloader.watch(app.state.stop_watch))
            task.add_done_callback(_log_watch_exit)
            app.state.watch_task = task
        logger.info(
            "startup",
            extra={
                "event": "startup",
                "config": str(app.state.reloader.declaration_path),
                "routes": len(table),
                "watch": watch,
            },
        )
        try:
            yield
        finally:
            await _stop_watching(app)

    app = FastAPI(title="jsonmock", version=__version__, lifespan=lifespan)

    @app.middleware("http")
    async def request_logger(request: Request, call_next: Callable[[Request], Response]):
        """JSON request logging with a correlation id.

        - Propagates an incoming X-Request-ID or mints one
        - Logs start and end with method/path/status/elapsed_ms
        """
        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        request.state.request_id = request_id

        start = time.perf_counter()
        logger.info(
            "request.start",
            extra={
                "event": "request_start",
                "method": request.method,
                "path": request.url.path,
                "request_id": request_id,
            },
        )
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request.error",
                extra={
                    "event": "request_error",
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": request_id,
                },
            )
            raise
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request.end",
            extra={
                "event": "request_end",
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
                "request_id": request_id,
            },
        )
        return response

    # Admin routes first: the dispatch route catches every path.
    app.include_router(admin_router)
    app.include_router(dispatch_router)

    return app


def main(argv: list[str] | None = None) -> None:
    """Console entry point: `jsonmock --config config.yaml --port 8080`."""
    import uvicorn

    from .cli import parse_args
    from .scaffold import write_sample

    args = parse_args(sys.argv[1:] if argv is None else argv)
    set_level(args.log_level)

    if args.init is not None:
        created = write_sample(Path(args.init))
        logger.info("scaffold.done", extra={"event": "scaffold_done", "files": created})
        return

    app = create_app(
        args.config,
        watch=args.watch,
        debounce_ms=args.debounce_ms,
        request_timeout=args.request_timeout,
    )
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


# ASGI entrypoint for uvicorn: `uvicorn jsonmock.main:app --port 8080`
app = create_app()


if __name__ == "__main__":
    main()
