from __future__ import annotations

import os
from pathlib import Path

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_DEBOUNCE_MS",
    "DEFAULT_REQUEST_TIMEOUT",
    "get_config_path_from_env",
    "get_debounce_ms_from_env",
    "get_request_timeout_from_env",
]

DEFAULT_CONFIG = "config.yaml"
DEFAULT_DEBOUNCE_MS = 200
DEFAULT_REQUEST_TIMEOUT = 5.0


def get_config_path_from_env() -> Path:
    """Return MOCK_CONFIG, defaulting to ./config.yaml in the working directory."""
    return Path(os.getenv("MOCK_CONFIG", DEFAULT_CONFIG))


def get_debounce_ms_from_env() -> int:
    """Return MOCK_DEBOUNCE_MS: the window in which file events are coalesced."""
    raw = os.getenv("MOCK_DEBOUNCE_MS", str(DEFAULT_DEBOUNCE_MS))
    try:
        val = int(raw, 10)
    except ValueError as e:
        raise ValueError("MOCK_DEBOUNCE_MS must be an integer") from e
    if val <= 0:
        raise ValueError("MOCK_DEBOUNCE_MS must be positive")
    return val


def get_request_timeout_from_env() -> float:
    """Return MOCK_REQUEST_TIMEOUT in seconds, the cap on one response file read."""
    raw = os.getenv("MOCK_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT))
    try:
        val = float(raw)
    except ValueError as e:
        raise ValueError("MOCK_REQUEST_TIMEOUT must be a float") from e
    if not val > 0:
        raise ValueError("MOCK_REQUEST_TIMEOUT must be positive")
    return val
