from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from ..logging_conf import get_logger
from .declaration import Declaration
from .errors import DuplicateRouteWarning, RouteWarning, UnsupportedMethodWarning
from .patterns import RoutePattern, is_static, parse_pattern

__all__ = [
    "SUPPORTED_METHODS",
    "RouteKey",
    "RouteEntry",
    "RouteTable",
    "compile_declaration",
]

logger = get_logger("domain.routes")

SUPPORTED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


@dataclass(frozen=True, order=True)
class RouteKey:
    method: str
    path: str

    def __str__(self) -> str:
        return f"{self.method} {self.path}"


@dataclass(frozen=True)
class RouteEntry:
    key: RouteKey
    response_file: Path
    service: str
    pattern: RoutePattern = field(compare=False, repr=False)


class RouteTable(Mapping[RouteKey, RouteEntry]):
    """Immutable RouteKey -> RouteEntry mapping plus the files behind it.

    Static keys resolve with a single dict lookup. Patterns with parameters
    are kept per method in specificity order so the winner for a request path
    depends only on the key set, never on declaration order.
    """

    __slots__ = ("_entries", "_dynamic", "watched_paths", "warnings", "source")

    def __init__(
        self,
        entries: Mapping[RouteKey, RouteEntry],
        *,
        source: Path | None = None,
        warnings: tuple[RouteWarning, ...] = (),
    ) -> None:
        self._entries = MappingProxyType(dict(entries))
        dynamic: dict[str, list[RouteEntry]] = {}
        for entry in entries.values():
            if not is_static(entry.pattern):
                dynamic.setdefault(entry.key.method, []).append(entry)
        self._dynamic = MappingProxyType(
            {
                method: tuple(sorted(group, key=lambda e: (e.pattern.specificity, e.key.path)))
                for method, group in dynamic.items()
            }
        )
        watched = {e.response_file for e in entries.values()}
        if source is not None:
            watched.add(source)
        self.watched_paths: frozenset[Path] = frozenset(watched)
        self.warnings = warnings
        self.source = source

    def __getitem__(self, key: RouteKey) -> RouteEntry:
        return self._entries[key]

    def __iter__(self) -> Iterator[RouteKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"RouteTable({len(self)} routes, source={self.source})"

    def lookup(self, method: str, path: str) -> RouteEntry | None:
        """Return the entry serving `method path`, or None."""
        entry = self._entries.get(RouteKey(method, path))
        if entry is not None:
            return entry
        for candidate in self._dynamic.get(method, ()):
            if candidate.pattern.matches(path):
                return candidate
        return None


def _resolve(response_file: str, base_dir: Path) -> Path:
    p = Path(response_file)
    if not p.is_absolute():
        p = base_dir / p
    return Path(os.path.normpath(p))


def compile_declaration(declaration: Declaration, *, base_dir: Path | None = None) -> RouteTable:
    """Build a RouteTable from a declaration.

    Services and endpoints are visited in declared order. Endpoints with an
    unsupported method are skipped; on a repeated (method, path) the endpoint
    declared last wins. Both cases are recorded as warnings on the table and
    logged. Relative response files resolve against `base_dir`, which defaults
    to the current working directory. Response files are not required to exist.
    """
    base = Path(os.path.abspath(base_dir if base_dir is not None else os.getcwd()))
    entries: dict[RouteKey, RouteEntry] = {}
    warnings: list[RouteWarning] = []

    for service in declaration.services:
        for ep in service.endpoints:
            full_path = service.base_path + ep.path
            if ep.method not in SUPPORTED_METHODS:
                w = UnsupportedMethodWarning(service.name, ep.method, full_path)
                warnings.append(w)
                logger.warning(
                    "route.skipped",
                    extra={
                        "event": "route_skipped",
                        "service": service.name,
                        "method": ep.method,
                        "path": full_path,
                    },
                )
                continue

            key = RouteKey(ep.method, full_path)
            entry = RouteEntry(
                key=key,
                response_file=_resolve(ep.response_file, base),
                service=service.name,
                pattern=parse_pattern(full_path),
            )
            previous = entries.get(key)
            if previous is not None:
                warnings.append(
                    DuplicateRouteWarning(
                        key.method, key.path, previous.response_file, entry.response_file
                    )
                )
                logger.warning(
                    "route.duplicate",
                    extra={
                        "event": "route_duplicate",
                        "method": key.method,
                        "path": key.path,
                        "previous": str(previous.response_file),
                        "replacement": str(entry.response_file),
                    },
                )
            entries[key] = entry

    return RouteTable(entries, source=declaration.source, warnings=tuple(warnings))
