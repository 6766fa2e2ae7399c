from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Probe:
    """Outcome of requesting one declared route during the smoke run."""

    method: str
    path: str
    status_code: int | None
    elapsed_ms: float
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status_code == 200 and self.error is None


class SmokeError(RuntimeError):
    """Raised when the smoke flow cannot proceed (e.g., health never ready)."""


class RoutesError(SmokeError):
    """Raised when the route listing cannot be fetched after retries."""
