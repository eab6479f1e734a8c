"""Worker thread logic for handling individual client connections."""

import logging
import socket
import threading
import time

from microserve.domain.correlation_id import (
    CorrelationLoggerAdapter,
    clear_correlation_id,
    generate_correlation_id,
    set_correlation_id,
)
from microserve.domain.response_builders import (
    bad_request_response,
    draining_response,
    entity_too_large_response,
)
from microserve.pipeline.processing import handle_raw_request
from microserve.pipeline.serializer import SocketSink, write_response
from microserve.transport.context import WorkerContext
from microserve.transport.io import (
    HeadTooLarge,
    IncompleteRequest,
    RequestTooLarge,
    receive_request,
)

WORKER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("microserve.transport.worker"), {}
)


def _serve_one_request(
    client_socket: socket.socket, context: WorkerContext, client_addr_str: str
) -> None:
    sink = SocketSink(client_socket)
    config = context.config
    try:
        raw, body_length = receive_request(
            client_socket, config.max_request_bytes, config.max_body_bytes
        )
    except RequestTooLarge as error:
        WORKER_LOGGER.warning(
            "Request body exceeded size limit",
            extra={
                "event": "request_too_large",
                "client": client_addr_str,
                "error": str(error),
            },
        )
        write_response(entity_too_large_response(), sink)
        return
    except (HeadTooLarge, IncompleteRequest, ValueError) as error:
        WORKER_LOGGER.warning(
            "Malformed request received",
            extra={
                "event": "malformed_request",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
        )
        write_response(bad_request_response(), sink)
        return

    if not raw:
        if WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
            WORKER_LOGGER.debug(
                "Client disconnected without sending a request",
                extra={"event": "client_disconnected", "client": client_addr_str},
            )
        return

    handle_raw_request(raw, context.router, sink, body_length)


def handle_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> None:
    """Serve a single request on client_socket, then close it."""
    client_addr_str = f"{client_address[0]}:{client_address[1]}"
    current_thread = threading.current_thread()
    lifecycle = context.lifecycle
    if lifecycle is not None:
        lifecycle.register_worker(current_thread)
    set_correlation_id(generate_correlation_id())
    started = time.monotonic()

    try:
        client_socket.settimeout(context.config.socket_timeout)
        WORKER_LOGGER.debug(
            "Request processing started",
            extra={"event": "request_started", "client": client_addr_str},
        )
        if lifecycle is not None and lifecycle.is_draining():
            write_response(draining_response(), SocketSink(client_socket))
        else:
            _serve_one_request(client_socket, context, client_addr_str)
        WORKER_LOGGER.debug(
            "Request processing complete",
            extra={
                "event": "request_complete",
                "client": client_addr_str,
                "duration_ms": round((time.monotonic() - started) * 1000, 3),
            },
        )
    except (ConnectionError, TimeoutError, OSError) as error:
        WORKER_LOGGER.error(
            "Error handling client connection",
            extra={
                "event": "connection_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
        )
    finally:
        if lifecycle is not None:
            lifecycle.cleanup_worker(current_thread)
        try:
            client_socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass
        client_socket.close()
        WORKER_LOGGER.debug(
            "Socket closed",
            extra={"event": "socket_closed", "client": client_addr_str},
        )
        clear_correlation_id()
