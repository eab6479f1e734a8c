"""Main connection acceptance loop."""

import logging
import socket
import threading

from microserve.bootstrap.socket_factory import create_server_socket
from microserve.domain.correlation_id import CorrelationLoggerAdapter
from microserve.transport.context import WorkerContext
from microserve.transport.worker import handle_client

ACCEPT_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("microserve.transport.accept"), {}
)


def run_server(host: str, port: int, context: WorkerContext) -> None:
    """Accept connections until draining starts, one thread per connection."""
    if not context.router.is_frozen:
        context.router.freeze()
    lifecycle = context.lifecycle
    server_socket = create_server_socket(host, port)

    ACCEPT_LOGGER.info(
        "Server listening for connections",
        extra={
            "event": "server_listening",
            "host": host,
            "port": port,
            "route_count": len(context.router),
        },
    )

    try:
        while lifecycle is None or not lifecycle.is_draining():
            try:
                client_socket, client_address = server_socket.accept()
            except socket.timeout:
                continue
            except OSError as error:
                if lifecycle is not None and lifecycle.is_draining():
                    break
                ACCEPT_LOGGER.error(
                    "Socket accept failed",
                    extra={"event": "accept_error", "error_type": type(error).__name__},
                )
                continue

            if ACCEPT_LOGGER.logger.isEnabledFor(logging.DEBUG):
                ACCEPT_LOGGER.debug(
                    "Client connection accepted",
                    extra={
                        "event": "client_accepted",
                        "client": f"{client_address[0]}:{client_address[1]}",
                    },
                )
            thread = threading.Thread(
                target=handle_client,
                args=(client_socket, client_address, context),
                daemon=False,
            )
            thread.start()
    finally:
        server_socket.close()
        if lifecycle is not None:
            grace_seconds = context.config.shutdown_grace_seconds
            ACCEPT_LOGGER.info(
                "Waiting for active connections to complete",
                extra={"event": "shutdown_waiting", "grace_seconds": grace_seconds},
            )
            lifecycle.wait_for_workers(grace_seconds)
        ACCEPT_LOGGER.info("Server shutdown complete", extra={"event": "server_stopped"})
