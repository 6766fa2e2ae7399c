"""jsonmock: canned JSON responses served from a live-reloaded route declaration."""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("jsonmock")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
