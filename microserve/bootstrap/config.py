"""Server configuration and CLI argument parsing."""

import argparse
import os
from dataclasses import dataclass

from microserve.domain.http_types import MAX_HEAD_SIZE


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


DEFAULT_DOCUMENT_ROOT = "./static"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080
DEFAULT_MAX_REQUEST_BYTES = _env_int("MICROSERVE_MAX_REQUEST_BYTES", MAX_HEAD_SIZE)
DEFAULT_MAX_BODY_BYTES = _env_int("MICROSERVE_MAX_BODY_BYTES", 1024 * 1024)
DEFAULT_SOCKET_TIMEOUT = _env_int("MICROSERVE_SOCKET_TIMEOUT", 30)
DEFAULT_SHUTDOWN_GRACE_SECONDS = _env_int("MICROSERVE_SHUTDOWN_GRACE_SECONDS", 10)
DEFAULT_STATIC_FALLBACK = _env_bool("MICROSERVE_STATIC_FALLBACK", True)


@dataclass
class ServerConfig:
    """Per-connection limits, timeouts and shutdown settings."""

    socket_timeout: int = DEFAULT_SOCKET_TIMEOUT
    shutdown_grace_seconds: int = DEFAULT_SHUTDOWN_GRACE_SECONDS
    max_request_bytes: int = DEFAULT_MAX_REQUEST_BYTES
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        socket_timeout=args.socket_timeout,
        shutdown_grace_seconds=args.shutdown_grace_seconds,
        max_request_bytes=args.max_request_bytes,
        max_body_bytes=args.max_body_bytes,
    )


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = argparse.ArgumentParser(description="Minimal HTTP/1.x server")
    parser.add_argument(
        "--document-root",
        default=os.getenv("MICROSERVE_DOCUMENT_ROOT", DEFAULT_DOCUMENT_ROOT),
        help="Directory static files are served from",
    )
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    default_log_level = os.getenv("MICROSERVE_LOG_LEVEL", "INFO").upper()
    default_destination = os.getenv("MICROSERVE_LOG_DESTINATION", "stdout")
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=default_destination,
        help="stdout or a file path",
    )
    parser.add_argument(
        "--socket-timeout",
        type=int,
        default=DEFAULT_SOCKET_TIMEOUT,
        help="Per-connection socket timeout in seconds",
    )
    parser.add_argument(
        "--shutdown-grace-seconds",
        type=int,
        default=DEFAULT_SHUTDOWN_GRACE_SECONDS,
        help="Grace period in seconds for graceful shutdown",
    )
    parser.add_argument(
        "--max-request-bytes",
        type=int,
        default=DEFAULT_MAX_REQUEST_BYTES,
        help="Largest accepted request line plus header block",
    )
    parser.add_argument(
        "--max-body-bytes",
        type=int,
        default=DEFAULT_MAX_BODY_BYTES,
        help="Largest accepted request body",
    )
    parser.add_argument(
        "--static-fallback",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_STATIC_FALLBACK,
        help="Look up unrouted GET paths under the document root",
    )
    return parser.parse_args(argv)
