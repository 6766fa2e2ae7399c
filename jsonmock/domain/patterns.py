from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = [
    "RoutePattern",
    "parse_pattern",
    "is_static",
]

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_LITERAL_FORBIDDEN = frozenset(":*{}")

# Segment kinds, ordered from most to least specific.
STATIC, PARAM, WILDCARD = 0, 1, 2


@dataclass(frozen=True)
class RoutePattern:
    """A compiled gin-style route pattern.

    `segments` holds (kind, text) pairs; for PARAM/WILDCARD the text is the
    parameter name, for STATIC it is the literal segment.
    """

    raw: str
    segments: tuple[tuple[int, str], ...]

    @property
    def specificity(self) -> tuple[int, ...]:
        return tuple(kind for kind, _ in self.segments)

    def matches(self, path: str) -> bool:
        """Return True if a concrete request path matches this pattern."""
        if not path.startswith("/"):
            return False
        parts = path[1:].split("/")
        for i, (kind, text) in enumerate(self.segments):
            if kind == WILDCARD:
                return True
            if i >= len(parts):
                return False
            if kind == PARAM:
                if not parts[i]:
                    return False
            elif parts[i] != text:
                return False
        return len(parts) == len(self.segments)


def parse_pattern(pattern: str) -> RoutePattern:
    """Validate and compile a route pattern.

    Rules:
    - Must start with "/".
    - Empty segments only at the very end (trailing slash or the root "/").
    - ":name" matches one segment, "*name" matches the remainder and must be last.
    - Parameter names are identifiers, unique within the pattern.
    - Literal segments may not contain ":", "*", "{" or "}".

    Raises:
        ValueError: describing the first rule the pattern breaks.
    """
    if not isinstance(pattern, str) or not pattern.startswith("/"):
        raise ValueError(f"route pattern {pattern!r} must start with '/'")

    parts = pattern[1:].split("/")
    segments: list[tuple[int, str]] = []
    names: set[str] = set()
    last = len(parts) - 1

    for i, part in enumerate(parts):
        if part == "":
            if i != last:
                raise ValueError(f"route pattern {pattern!r} contains an empty segment")
            segments.append((STATIC, ""))
            continue

        head, name = part[0], part[1:]
        if head in ":*":
            if not _NAME_RE.match(name):
                raise ValueError(f"route pattern {pattern!r} has invalid parameter {part!r}")
            if name in names:
                raise ValueError(f"route pattern {pattern!r} repeats parameter {name!r}")
            if head == "*" and i != last:
                raise ValueError(f"route pattern {pattern!r}: wildcard {part!r} must be last")
            names.add(name)
            segments.append((PARAM if head == ":" else WILDCARD, name))
            continue

        if _LITERAL_FORBIDDEN.intersection(part):
            raise ValueError(f"route pattern {pattern!r} has invalid segment {part!r}")
        segments.append((STATIC, part))

    return RoutePattern(raw=pattern, segments=tuple(segments))


def is_static(pattern: RoutePattern) -> bool:
    return all(kind == STATIC for kind, _ in pattern.segments)
