"""Listening socket creation."""

import logging
import socket

from microserve.domain.correlation_id import CorrelationLoggerAdapter

SOCKET_LOGGER = CorrelationLoggerAdapter(logging.getLogger("microserve.socket"), {})

ACCEPT_TIMEOUT_SECONDS = 0.5


def create_server_socket(host: str, port: int) -> socket.socket:
    """Bind a listening TCP socket whose accept() wakes up periodically."""
    server_socket = socket.create_server((host, port), reuse_port=True)
    server_socket.settimeout(ACCEPT_TIMEOUT_SECONDS)
    SOCKET_LOGGER.debug(
        "Listening socket created",
        extra={"event": "socket_created", "host": host, "port": port},
    )
    return server_socket
