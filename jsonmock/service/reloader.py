"""Rebuild and republish the route table when files on disk change.

The watcher subscribes to the *directories* holding the declaration file and
every response file, non-recursively, and filters events down to the files the
live table actually references. Watching directories keeps working when an
editor saves by writing a temp file and renaming it over the original, and it
sees response files that are declared before they exist.
"""
from __future__ import annotations

import asyncio
import contextlib
import os
from pathlib import Path

from watchfiles import Change, awatch

from ..domain.declaration import load_declaration
from ..domain.errors import DeclarationError
from ..domain.routes import RouteTable, compile_declaration
from ..live import LiveConfig
from ..logging_conf import get_logger
from ..settings import DEFAULT_DEBOUNCE_MS

__all__ = ["Reloader", "build_table"]

logger = get_logger("service.reloader")

# How long to wait before re-subscribing when no watched directory exists.
_RETRY_S = 1.0


def build_table(declaration_path: str | os.PathLike[str], *, base_dir: Path | None = None) -> RouteTable:
    """Load and compile a declaration; raises DeclarationError on failure."""
    return compile_declaration(load_declaration(declaration_path), base_dir=base_dir)


class Reloader:
    """Owns the watch subscription and is the only caller of `LiveConfig.publish`."""

    def __init__(
        self,
        declaration_path: str | os.PathLike[str],
        live: LiveConfig,
        *,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        base_dir: Path | None = None,
    ) -> None:
        self.declaration_path = Path(os.path.abspath(declaration_path))
        self.live = live
        self.debounce_ms = debounce_ms
        self.base_dir = base_dir

    # ------------------------
    # Rebuild
    # ------------------------

    def reload(self) -> bool:
        """Rebuild the table from disk and publish it.

        A declaration that cannot be read or parsed is logged and the table
        already being served stays in place. Returns True when a new table was
        published.
        """
        try:
            table = build_table(self.declaration_path, base_dir=self.base_dir)
        except DeclarationError as e:
            logger.error(
                "config.reload_failed",
                extra={
                    "event": "config_reload_failed",
                    "error_code": e.code,
                    "error_message": str(e),
                    "version": self.live.version,
                },
            )
            return False

        version = self.live.publish(table)
        logger.info(
            "config.reloaded",
            extra={
                "event": "config_reloaded",
                "version": version,
                "routes": len(table),
                "warnings": len(table.warnings),
                "watched": len(table.watched_paths),
            },
        )
        return True

    # ------------------------
    # Watching
    # ------------------------

    def watched_paths(self) -> frozenset[Path]:
        return self.live.read().watched_paths | {self.declaration_path}

    def watched_dirs(self) -> frozenset[str]:
        """Existing parent directories of every watched path."""
        return frozenset(str(p.parent) for p in self.watched_paths() if p.parent.is_dir())

    def is_watched(self, change: Change, path: str) -> bool:
        """watchfiles filter: keep events for referenced files and their directories.

        A directory event matters when a response file is declared inside a
        directory that does not exist yet: once it appears, the subscription
        has to be rebuilt to cover it.
        """
        p = Path(path)
        paths = self.watched_paths()
        return p in paths or any(p == w.parent for w in paths)

    async def handle_changes(self, changes: set[tuple[Change, str]]) -> bool:
        """React to one debounced batch of file events.

        A declaration change triggers a rebuild in a worker thread. Response
        files are read fresh on every request, so changes to them are only
        logged. Directory events are left to `watch()`, which resubscribes.
        Returns True when a new table was published.
        """
        touched = {Path(p): c for c, p in changes}
        if self.declaration_path in touched:
            logger.info(
                "declaration.changed",
                extra={
                    "event": "declaration_changed",
                    "path": str(self.declaration_path),
                    "change": touched[self.declaration_path].name,
                },
            )
            return await asyncio.to_thread(self.reload)

        watched = self.watched_paths()
        for path in sorted(touched):
            if path not in watched:
                logger.info(
                    "watch.directory_changed",
                    extra={
                        "event": "directory_changed",
                        "path": str(path),
                        "change": touched[path].name,
                    },
                )
                continue
            logger.info(
                "response.changed",
                extra={"event": "response_changed", "path": str(path), "change": touched[path].name},
            )
        return False

    async def watch(self, stop_event: asyncio.Event | None = None) -> None:
        """Run until `stop_event` is set, reloading on declaration changes.

        After each batch the set of watched directories is recomputed from the
        live table; when it differs, the subscription is rebuilt so newly
        referenced response files are covered and stale ones are dropped.
        """
        stop_event = stop_event or asyncio.Event()
        step = min(50, self.debounce_ms)

        while not stop_event.is_set():
            dirs = self.watched_dirs()
            if not dirs:
                logger.warning("watch.no_directories", extra={"event": "watch_no_directories"})
                with contextlib.suppress(TimeoutError):
                    await asyncio.wait_for(stop_event.wait(), timeout=_RETRY_S)
                continue

            logger.info(
                "watch.subscribed",
                extra={"event": "watch_subscribed", "directories": sorted(dirs)},
            )
            stream = awatch(
                *sorted(dirs),
                watch_filter=self.is_watched,
                debounce=self.debounce_ms,
                step=step,
                stop_event=stop_event,
                recursive=False,
            )
            try:
                async with contextlib.aclosing(stream):
                    async for changes in stream:
                        await self.handle_changes(changes)
                        if self.watched_dirs() != dirs:
                            break
            except FileNotFoundError as e:
                # A watched directory vanished between listing and subscribing.
                logger.warning(
                    "watch.subscribe_failed",
                    extra={"event": "watch_subscribe_failed", "error": str(e)},
                )
                with contextlib.suppress(TimeoutError):
                    await asyncio.wait_for(stop_event.wait(), timeout=_RETRY_S)

        logger.info("watch.stopped", extra={"event": "watch_stopped"})
