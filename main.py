"""Minimal HTTP/1.x server serving built-in pages and static files."""

import signal
import sys

from microserve.bootstrap.config import config_from_args, parse_cli_args
from microserve.bootstrap.logging_setup import configure_logging
from microserve.bootstrap.routes import build_router
from microserve.lifecycle.state import ServerLifecycle
from microserve.transport.accept_loop import run_server
from microserve.transport.context import WorkerContext


def main(argv: list[str] | None = None) -> None:
    """Configure logging, build the route table and serve until signalled."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    logger = configure_logging(args.log_level, args.log_destination)

    config = config_from_args(args)
    lifecycle = ServerLifecycle()
    router = build_router(args.document_root, args.static_fallback)

    def shutdown_handler(signum: int, _frame) -> None:
        logger.info(
            "Received shutdown signal",
            extra={"event": "shutdown_signal", "signal": signum},
        )
        lifecycle.begin_draining()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    logger.info(
        "Starting HTTP server",
        extra={
            "event": "server_starting",
            "host": args.host,
            "port": args.port,
            "document_root": args.document_root,
            "log_destination": args.log_destination,
            "log_level": args.log_level,
            "socket_timeout": config.socket_timeout,
            "shutdown_grace_seconds": config.shutdown_grace_seconds,
        },
    )
    run_server(
        args.host,
        args.port,
        WorkerContext(router=router, config=config, lifecycle=lifecycle),
    )


if __name__ == "__main__":
    main()
