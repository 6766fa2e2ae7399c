from __future__ import annotations

from pathlib import Path

__all__ = [
    "DeclarationError",
    "DeclarationFileError",
    "DeclarationParseError",
    "RouteWarning",
    "UnsupportedMethodWarning",
    "DuplicateRouteWarning",
    "DispatchError",
    "DispatchNotFound",
    "DispatchServerError",
]


# ------------------------
# Declaration loading
# ------------------------
class DeclarationError(Exception):
    """Base class for failures while loading a declaration file.

    The `code` attribute is what ends up in logs so operators can grep for a
    stable value rather than a message.
    """

    code: str = "declaration_error"

    def __init__(self, path: Path | str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = Path(path)
        self.message = message


class DeclarationFileError(DeclarationError):
    code = "file_error"


class DeclarationParseError(DeclarationError):
    code = "parse_error"


# ------------------------
# Compile-time warnings (never fatal)
# ------------------------
class RouteWarning(UserWarning):
    """A declared endpoint that was skipped or overridden while compiling."""


class UnsupportedMethodWarning(RouteWarning):
    def __init__(self, service: str, method: str, path: str) -> None:
        super().__init__(f"service {service!r}: unsupported method {method!r} for {path}, skipped")
        self.service = service
        self.method = method
        self.path = path


class DuplicateRouteWarning(RouteWarning):
    def __init__(self, method: str, path: str, previous: Path, replacement: Path) -> None:
        super().__init__(
            f"{method} {path} declared more than once; {replacement} replaces {previous}"
        )
        self.method = method
        self.path = path
        self.previous = previous
        self.replacement = replacement


# ------------------------
# Dispatch
# ------------------------
class DispatchError(Exception):
    code: str = "dispatch_error"


class DispatchNotFound(DispatchError):
    code = "not_found"

    def __init__(self, method: str, path: str) -> None:
        super().__init__(f"no route for {method} {path}")
        self.method = method
        self.path = path


class DispatchServerError(DispatchError):
    """A route matched but its response file could not be served."""

    code = "server_error"
