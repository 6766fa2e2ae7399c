from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..domain.routes import RouteTable


class HealthResponse(BaseModel):
    """Liveness plus the version of the table being served."""
    ok: bool
    version: int


class RouteInfo(BaseModel):
    """One compiled route."""
    method: str
    path: str
    service: str
    response_file: str
    exists: bool


class RoutesResponse(BaseModel):
    """The live route table as the dispatcher currently sees it."""
    version: int
    source: Optional[str] = None
    routes: list[RouteInfo]
    watched_paths: list[str]
    warnings: list[str]

    @classmethod
    def from_table(cls, version: int, table: RouteTable) -> "RoutesResponse":
        return cls(
            version=version,
            source=str(table.source) if table.source else None,
            routes=[
                RouteInfo(
                    method=e.key.method,
                    path=e.key.path,
                    service=e.service,
                    response_file=str(e.response_file),
                    exists=e.response_file.is_file(),
                )
                for e in sorted(table.values(), key=lambda e: e.key)
            ],
            watched_paths=sorted(str(p) for p in table.watched_paths),
            warnings=[str(w) for w in table.warnings],
        )


class ErrorResponse(BaseModel):
    """Body of a 500 when a matched response file cannot be served."""
    error: str
