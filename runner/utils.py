from __future__ import annotations

from runner.types import Probe


def percentile(values: list[float], p: float) -> float:
    """Compute the p-th percentile using linear interpolation."""
    if not values:
        return 0.0
    s = sorted(values)
    k = (len(s) - 1) * p
    f = int(k)
    c = min(f + 1, len(s) - 1)
    if f == c:
        return s[f]
    d0 = s[f] * (c - k)
    d1 = s[c] * (k - f)
    return d0 + d1


def probeable_routes(listing: dict) -> list[tuple[str, str]]:
    """Pick the (method, path) pairs that can be requested as-is.

    Patterns with ":param" or "*rest" segments have no concrete URL, so they
    are left out.
    """
    out: list[tuple[str, str]] = []
    for route in listing.get("routes", []):
        path = route["path"]
        if any(seg[:1] in (":", "*") for seg in path.split("/")):
            continue
        out.append((route["method"], path))
    return out


def summarize(probes: list[Probe], *, version: int | None = None) -> tuple[dict, int]:
    """Compute summary dict and an exit code from the probe results."""
    durations = [p.elapsed_ms for p in probes if p.status_code is not None]
    failures = [
        {
            "method": p.method,
            "path": p.path,
            "status_code": p.status_code,
            "error": p.error,
        }
        for p in probes
        if not p.ok
    ]
    summary = {
        "component": "runner",
        "event": "summary",
        "version": version,
        "probed": len(probes),
        "ok_count": len(probes) - len(failures),
        "error_count": len(failures),
        "timings": {
            "avg_ms": round(sum(durations) / len(durations), 2) if durations else 0.0,
            "p95_ms": round(percentile(durations, 0.95), 2),
            "max_ms": round(max(durations), 2) if durations else 0.0,
        },
        "failures": failures,
    }
    exit_code = 0 if (probes and not failures) else 1
    return summary, exit_code
