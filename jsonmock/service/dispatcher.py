from __future__ import annotations

import asyncio
from dataclasses import dataclass

from ..domain.errors import DispatchNotFound, DispatchServerError
from ..domain.routes import RouteEntry
from ..live import LiveConfig
from ..logging_conf import get_logger
from ..settings import DEFAULT_REQUEST_TIMEOUT

__all__ = ["DispatchResult", "Dispatcher", "JSON_MEDIA_TYPE"]

logger = get_logger("service.dispatcher")

JSON_MEDIA_TYPE = "application/json"


@dataclass(frozen=True)
class DispatchResult:
    body: bytes
    entry: RouteEntry
    media_type: str = JSON_MEDIA_TYPE


class Dispatcher:
    """Answer requests from whichever route table is live when they arrive.

    Response files are read from disk on every hit, so edits to them are
    visible immediately and there is no cache to invalidate.
    """

    def __init__(self, live: LiveConfig, *, timeout: float = DEFAULT_REQUEST_TIMEOUT) -> None:
        self.live = live
        self.timeout = timeout

    async def handle(self, method: str, path: str) -> DispatchResult:
        """Resolve `method path` and return the response file's bytes.

        Raises:
            DispatchNotFound: no route in the current table matches.
            DispatchServerError: a route matched but its file could not be
                read within the timeout. The table is left untouched.
        """
        table = self.live.read()  # one snapshot for the whole request
        entry = table.lookup(method.upper(), path)
        if entry is None:
            raise DispatchNotFound(method, path)

        try:
            body = await asyncio.wait_for(
                asyncio.to_thread(entry.response_file.read_bytes), timeout=self.timeout
            )
        except TimeoutError as e:
            logger.error(
                "dispatch.error",
                extra={
                    "event": "dispatch_timeout",
                    "route": str(entry.key),
                    "file": str(entry.response_file),
                    "timeout_s": self.timeout,
                },
            )
            raise DispatchServerError(
                f"timed out after {self.timeout}s reading {entry.response_file}"
            ) from e
        except (OSError, ValueError) as e:  # ValueError: path the OS cannot represent
            logger.error(
                "dispatch.error",
                extra={
                    "event": "dispatch_error",
                    "route": str(entry.key),
                    "file": str(entry.response_file),
                    "error": str(e),
                },
            )
            raise DispatchServerError(str(e)) from e

        return DispatchResult(body=body, entry=entry)
