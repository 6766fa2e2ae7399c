from __future__ import annotations

import argparse
import os

from .settings import (
    get_config_path_from_env,
    get_debounce_ms_from_env,
    get_request_timeout_from_env,
)


def _positive_int(raw: str) -> int:
    val = int(raw, 10)
    if val <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return val


def _positive_float(raw: str) -> float:
    val = float(raw)
    if not val > 0:
        raise argparse.ArgumentTypeError("must be a positive number")
    return val


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments for the mock server.

    Flags win; the environment is only consulted for flags left unset, so a
    bad MOCK_* variable cannot break a command line that overrides it.
    """
    parser = argparse.ArgumentParser(
        prog="jsonmock", description="Serve canned JSON responses from a YAML route declaration"
    )
    parser.add_argument("--config", default=None)
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8080")))
    parser.add_argument("--debounce-ms", type=_positive_int, default=None)
    parser.add_argument("--request-timeout", type=_positive_float, default=None)
    parser.add_argument(
        "--no-watch", action="store_false", dest="watch", help="serve without reloading on change"
    )
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"))
    parser.add_argument(
        "--init",
        nargs="?",
        const=".",
        default=None,
        metavar="DIR",
        help="write a sample config.yaml and response files into DIR and exit",
    )
    args = parser.parse_args(argv)
    if args.init is not None:
        return args

    if args.config is None:
        args.config = str(get_config_path_from_env())
    if args.debounce_ms is None:
        args.debounce_ms = get_debounce_ms_from_env()
    if args.request_timeout is None:
        args.request_timeout = get_request_timeout_from_env()
    return args
