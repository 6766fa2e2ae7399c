"""Holder of the route table currently being served."""
from __future__ import annotations

import threading

from .domain.routes import RouteTable

__all__ = ["LiveConfig"]


class LiveConfig:
    """Atomically swappable reference to the current RouteTable.

    Readers take no lock: `read()` is a single attribute load, and tables are
    immutable, so a reader holds a complete table for as long as it keeps the
    reference. The lock in `publish()` covers only the reference swap and the
    version counter so concurrent publishers cannot reorder versions.
    """

    __slots__ = ("_current", "_version", "_lock")

    def __init__(self, initial: RouteTable) -> None:
        self._lock = threading.Lock()
        self._current: tuple[int, RouteTable] = (1, initial)
        self._version = 1

    def read(self) -> RouteTable:
        return self._current[1]

    def snapshot(self) -> tuple[int, RouteTable]:
        """Return (version, table) from the same publish."""
        return self._current

    @property
    def version(self) -> int:
        return self._current[0]

    def publish(self, table: RouteTable) -> int:
        """Make `table` current for every later read; returns its version."""
        if not isinstance(table, RouteTable):
            raise TypeError(f"expected RouteTable, got {type(table).__name__}")
        with self._lock:
            self._version += 1
            self._current = (self._version, table)
            return self._version
